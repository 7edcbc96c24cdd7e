# funnel/core/loading_sequencer.py
"""
Loading Sequencer - the timed screen between the final ask and the sales page.

Three timers run side by side while the loading step is active:

1. Progress ticker: +1 per tick up to 100, then stops itself and schedules a
   single delayed hand-off to the sales page.
2. Message rotator: cycles through the loading messages.
3. Testimonial rotator: cycles through the testimonials.

All three (plus a pending hand-off) belong to one TimerGroup and are
cancelled together by `stop()`.
"""

from typing import Callable, Optional
import logging

from funnel.core.config import Settings, settings as default_settings, validate_timing_settings
from funnel.core.scheduler import Scheduler, TimerGroup, TimerHandle
from funnel.models.session_state import FunnelState

logger = logging.getLogger(__name__)

PROGRESS_COMPLETE = 100


class LoadingSequencer:
    """Drives loading progress and the two cosmetic rotators for one FunnelState"""

    def __init__(
        self,
        state: FunnelState,
        scheduler: Scheduler,
        on_complete: Callable[[], None],
        message_count: int,
        testimonial_count: int,
        settings: Optional[Settings] = None
    ):
        """
        Initialize the sequencer.

        Args:
            state: Session state whose loading counters are driven
            scheduler: Clock facility for the timers
            on_complete: Called once, a hand-off delay after progress hits 100
            message_count: Length of the loading message list
            testimonial_count: Length of the testimonial list
            settings: Timer periods (module settings if omitted)
        """
        self.state = state
        self.scheduler = scheduler
        self.on_complete = on_complete
        self.message_count = message_count
        self.testimonial_count = testimonial_count
        self.settings = validate_timing_settings(settings or default_settings)

        self._group: Optional[TimerGroup] = None
        self._progress_timer: Optional[TimerHandle] = None
        self._handoff_scheduled = False
        self._active = False

    @property
    def running(self) -> bool:
        return self._active

    def start(self) -> None:
        """Reset the counters and start all three timers together"""
        if self._active:
            logger.warning("Loading sequencer already running, ignoring start")
            return

        # Timers go into a local group first; nothing is marked running unless all three exist
        group = TimerGroup(self.scheduler)
        try:
            progress_timer = group.every(self.settings.PROGRESS_TICK_SECONDS, self.tick_progress)
            group.every(self.settings.MESSAGE_ROTATE_SECONDS, self.rotate_message)
            group.every(self.settings.TESTIMONIAL_ROTATE_SECONDS, self.rotate_testimonial)
        except Exception as e:
            group.cancel_all()
            logger.error(f"Loading sequence failed to start: {e}")
            raise

        self.state.reset_loading()
        self._handoff_scheduled = False
        self._group = group
        self._progress_timer = progress_timer
        self._active = True

        logger.info(f"Loading sequence started for session {self.state.session_id}")

    def stop(self) -> None:
        """Cancel every timer of the current run, including a pending hand-off"""
        was_active = self._active
        self._active = False

        if self._group is not None:
            self._group.cancel_all()
            self._group = None
        self._progress_timer = None

        if was_active:
            logger.info(
                f"Loading sequence stopped at {self.state.loading_progress}% "
                f"for session {self.state.session_id}"
            )

    # ===========================================
    # TIMER CALLBACKS
    # ===========================================

    def tick_progress(self) -> None:
        if not self._active or self.state.loading_progress >= PROGRESS_COMPLETE:
            return

        self.state.loading_progress += 1
        logger.debug(f"Loading progress: {self.state.loading_progress}%")

        if self.state.loading_progress >= PROGRESS_COMPLETE and not self._handoff_scheduled:
            self._handoff_scheduled = True
            if self._progress_timer is not None:
                self._progress_timer.cancel()
                self._progress_timer = None
            self._group.later(self.settings.HANDOFF_DELAY_SECONDS, self._hand_off)
            logger.info("Loading progress complete, hand-off scheduled")

    def rotate_message(self) -> None:
        if not self._active:
            return
        self.state.message_index = (self.state.message_index + 1) % self.message_count

    def rotate_testimonial(self) -> None:
        if not self._active:
            return
        self.state.testimonial_index = (self.state.testimonial_index + 1) % self.testimonial_count

    def _hand_off(self) -> None:
        if not self._active:
            return
        logger.info("Loading hand-off firing")
        self.on_complete()
