"""Funnel - linear step funnel with a timed loading hand-off"""

from funnel.models.flow_models import FunnelStep, StepCategory
from funnel.core.funnel_engine import FunnelEngine, FunnelAction, create_funnel_engine
from funnel.core.orchestrator import FunnelOrchestrator

__version__ = "1.0.0"

__all__ = [
    'FunnelStep',
    'StepCategory',
    'FunnelEngine',
    'FunnelAction',
    'FunnelOrchestrator',
    'create_funnel_engine',
]
