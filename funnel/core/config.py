# funnel/core/config.py
import logging
from pydantic_settings import BaseSettings

from funnel.core.exceptions import config_error

logger = logging.getLogger(__name__)


class Settings(BaseSettings):
    """Basic funnel settings"""

    # Loading sequence pacing (seconds)
    PROGRESS_TICK_SECONDS: float = 0.06       # 100 ticks, roughly 6 seconds total
    MESSAGE_ROTATE_SECONDS: float = 1.5
    TESTIMONIAL_ROTATE_SECONDS: float = 2.0
    HANDOFF_DELAY_SECONDS: float = 0.5        # keeps the full bar on screen before the sales page

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore"
    }


# Module-wide defaults; engines may be given their own instance
settings = Settings()


def validate_timing_settings(current: Settings = None) -> Settings:
    """Checks that every loading timer has a positive period"""
    current = current or settings
    invalid = []

    for name in (
        "PROGRESS_TICK_SECONDS",
        "MESSAGE_ROTATE_SECONDS",
        "TESTIMONIAL_ROTATE_SECONDS",
        "HANDOFF_DELAY_SECONDS",
    ):
        if getattr(current, name) <= 0:
            invalid.append(name)

    if invalid:
        logger.error(f"Non-positive timer settings: {', '.join(invalid)}")
        raise config_error(
            f"Timer settings must be positive: {', '.join(invalid)}",
            component="settings"
        )

    return current
