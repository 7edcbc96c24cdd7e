# funnel/core/orchestrator.py
"""
Funnel Orchestrator - the interface the presentation layer talks to.

Read accessors and the view model come from here; the only mutating entry
points are `advance`, `choose`, `toggle_option` and `decline`, all delegated
to the FunnelEngine that owns the state.
"""

from typing import Any, Callable, Dict, FrozenSet, Optional
import asyncio
import logging

from funnel.models.flow_models import FunnelStep, OptionView, StepCategory, StepView
from funnel.models.session_state import FunnelState
from funnel.core import step_registry
from funnel.core.config import Settings
from funnel.core.funnel_engine import FunnelEngine
from funnel.core.scheduler import Scheduler

logger = logging.getLogger(__name__)


class FunnelOrchestrator:
    """
    Main interface for one funnel visit.

    This orchestrator:
    1. Owns a FunnelEngine (and through it the session state)
    2. Exposes read accessors for rendering
    3. Builds StepView models for the current step
    4. Forwards user interactions to the engine
    """

    def __init__(
        self,
        engine: Optional[FunnelEngine] = None,
        scheduler: Optional[Scheduler] = None,
        settings: Optional[Settings] = None,
        scroll_to_top: Optional[Callable[[], None]] = None
    ):
        """
        Initialize the orchestrator.

        Args:
            engine: Pre-built engine (created from the other arguments if omitted)
            scheduler: Clock for the loading sequence
            settings: Timer settings
            scroll_to_top: Presentation hook, called before each post-advance render
        """
        if engine:
            self.engine = engine
            if scroll_to_top:
                self.engine.scroll_to_top = scroll_to_top
        else:
            self.engine = FunnelEngine(
                scheduler=scheduler,
                settings=settings,
                scroll_to_top=scroll_to_top
            )

        self._messages = step_registry.loading_messages()
        self._testimonials = step_registry.loading_testimonials()

    @property
    def state(self) -> FunnelState:
        return self.engine.state

    # ===========================================
    # READ ACCESSORS
    # ===========================================

    def current_step(self) -> FunnelStep:
        return self.engine.current_step

    def selection_snapshot(self) -> FrozenSet[str]:
        return self.engine.selection.snapshot()

    def loading_progress(self) -> int:
        return self.state.loading_progress

    def current_message_index(self) -> int:
        return self.state.message_index

    def current_testimonial_index(self) -> int:
        return self.state.testimonial_index

    def render_view(self) -> StepView:
        """Build the view model for the current step"""
        definition = step_registry.get_step_definition(self.current_step())

        view = StepView(
            step=definition.step,
            category=definition.category,
            title=definition.title,
            progress_percent=definition.progress_percent,
        )

        if definition.category == StepCategory.MULTI_SELECT:
            view.options = [
                OptionView(label=label, selected=label in self.engine.selection)
                for label in definition.options
            ]
        elif definition.is_choice:
            view.options = [OptionView(label=label) for label in definition.options]

        if definition.category == StepCategory.TIMED_TRANSITION:
            view.loading_progress = self.state.loading_progress
            view.loading_message = self._messages[self.state.message_index]
            view.testimonial = self._testimonials[self.state.testimonial_index]

        return view

    # ===========================================
    # USER INTERACTIONS
    # ===========================================

    def advance(self, target: FunnelStep) -> FunnelStep:
        return self.engine.advance(target)

    def continue_(self) -> FunnelStep:
        """Follow the current step's single forward edge"""
        return self.engine.advance(step_registry.next_step_for(self.current_step()))

    def choose(self, label: str) -> FunnelStep:
        return self.engine.choose(label)

    def toggle_option(self, label: str) -> bool:
        return self.engine.toggle_option(label)

    def decline(self) -> FunnelStep:
        return self.engine.decline()

    async def wait_for_step(self, step: FunnelStep, timeout: Optional[float] = None) -> FunnelStep:
        """Wait until the funnel reaches `step` (e.g. the sales page after loading)"""
        if self.current_step() == step:
            return step

        reached = asyncio.Event()

        def listener(old_step: FunnelStep, new_step: FunnelStep) -> None:
            if new_step == step:
                reached.set()

        self.engine.add_listener(listener)
        try:
            await asyncio.wait_for(reached.wait(), timeout=timeout)
        finally:
            self.engine.remove_listener(listener)

        return step

    def close(self) -> None:
        self.engine.close()

    # ===========================================
    # DIAGNOSTICS
    # ===========================================

    def get_session_info(self) -> Dict[str, Any]:
        """Get information about the current visit"""
        return {
            "session_id": self.state.session_id,
            "current_step": self.current_step().value,
            "selected_options": self.engine.selection.ordered(
                step_registry.options_for(self.current_step())
            ),
            "loading_progress": self.state.loading_progress,
            "history": [step.value for step in self.state.history],
            "valid_actions": [
                t.action.value for t in self.engine.get_valid_transitions(self.current_step())
            ],
        }

    def get_flow_debug_info(self) -> Dict[str, Any]:
        summary = self.engine.get_flow_summary()
        summary["issues"] = self.engine.validate_fsm()
        return summary
