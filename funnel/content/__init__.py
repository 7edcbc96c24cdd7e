"""Funnel content package - copy for every step"""

from . import step_content

__all__ = [
    'step_content'
]
