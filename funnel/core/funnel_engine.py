# funnel/core/funnel_engine.py
"""
Funnel Engine - FSM-based control of the funnel steps.

Every step has exactly one forward edge taken via its own action; the answer
given on a question never changes the destination. The negative action on
the final ask is a valid action that leads nowhere. Advances to anything
other than the configured next step are rejected.
"""

from typing import Callable, Dict, List, Optional, Any
from enum import Enum
from dataclasses import dataclass
import logging

from funnel.models.flow_models import FunnelStep, StepCategory
from funnel.models.session_state import FunnelState
from funnel.core import step_registry
from funnel.core.config import Settings
from funnel.core.exceptions import transition_error, validation_error
from funnel.core.loading_sequencer import LoadingSequencer
from funnel.core.scheduler import AsyncioScheduler, Scheduler
from funnel.core.selection_store import SelectionStore

logger = logging.getLogger(__name__)

StepListener = Callable[[FunnelStep, FunnelStep], None]


class FunnelAction(str, Enum):
    """User or system actions that move the funnel"""

    CONTINUE = "continue"   # informational and multi-select steps
    CHOOSE = "choose"       # any answer on a single-choice question
    CONFIRM = "confirm"     # affirmative answer on the final ask
    DECLINE = "decline"     # negative answer on the final ask (inert)
    COMPLETE = "complete"   # loading sequence finished


@dataclass
class Transition:
    """Represents a state transition"""
    from_state: FunnelStep
    action: FunnelAction
    to_state: Optional[FunnelStep]
    description: str = ""

    @property
    def is_inert(self) -> bool:
        return self.to_state is None


class FunnelEngine:
    """
    Funnel state machine.

    This engine:
    1. Owns the FunnelState and its SelectionStore
    2. Defines every transition explicitly from the step registry
    3. Starts the loading sequence on entry to the loading step and stops it on exit
    4. Notifies the presentation layer (scroll reset, step listeners) after each advance
    """

    def __init__(
        self,
        state: Optional[FunnelState] = None,
        scheduler: Optional[Scheduler] = None,
        settings: Optional[Settings] = None,
        scroll_to_top: Optional[Callable[[], None]] = None
    ):
        """
        Initialize the funnel engine.

        Args:
            state: Session state (fresh visit if omitted)
            scheduler: Clock for the loading sequence (asyncio if omitted)
            settings: Timer settings (module settings if omitted)
            scroll_to_top: Presentation hook called on every successful advance
        """
        self.state = state or FunnelState()
        self.selection = SelectionStore(self.state)
        self.scroll_to_top = scroll_to_top
        self._listeners: List[StepListener] = []

        self.sequencer = LoadingSequencer(
            state=self.state,
            scheduler=scheduler or AsyncioScheduler(),
            on_complete=self._complete_loading,
            message_count=len(step_registry.loading_messages()),
            testimonial_count=len(step_registry.loading_testimonials()),
            settings=settings,
        )

        self.transitions: List[Transition] = []

        # Quick lookup: {(state, action): Transition}
        self._transition_map: Dict[tuple, Transition] = {}

        self._setup_transitions()
        self._build_transition_map()

        logger.info(f"FunnelEngine initialized for session {self.state.session_id}")

    def _setup_transitions(self):
        """Define all transitions from the static step catalog"""
        for step in step_registry.steps_in_order():
            definition = step_registry.get_step_definition(step)
            if definition.next_step is None:
                continue

            if step == FunnelStep.FINAL_ASK:
                action = FunnelAction.CONFIRM
            elif definition.category == StepCategory.SINGLE_CHOICE:
                action = FunnelAction.CHOOSE
            elif definition.category == StepCategory.TIMED_TRANSITION:
                action = FunnelAction.COMPLETE
            else:
                action = FunnelAction.CONTINUE

            self.add_transition(
                from_state=step,
                action=action,
                to_state=definition.next_step,
                description=f"{step.value} -> {definition.next_step.value}"
            )

        self.add_transition(
            from_state=FunnelStep.FINAL_ASK,
            action=FunnelAction.DECLINE,
            to_state=None,
            description="Negative answer on the final ask stays put"
        )

    # ===========================================
    # CORE FSM METHODS
    # ===========================================

    def add_transition(
        self,
        from_state: FunnelStep,
        action: FunnelAction,
        to_state: Optional[FunnelStep],
        description: str = ""
    ):
        """Add a new transition to the FSM"""
        self.transitions.append(Transition(
            from_state=from_state,
            action=action,
            to_state=to_state,
            description=description
        ))

    def _build_transition_map(self):
        """Build fast lookup map for transitions"""
        self._transition_map.clear()

        for transition in self.transitions:
            key = (transition.from_state, transition.action)
            if key in self._transition_map:
                logger.warning(
                    f"Duplicate transition for {transition.from_state.value} + "
                    f"{transition.action.value}, keeping the last one"
                )
            self._transition_map[key] = transition

    def get_valid_transitions(self, current_state: FunnelStep) -> List[Transition]:
        """Get all transitions leaving a state"""
        return [t for t in self.transitions if t.from_state == current_state]

    def can_transition(self, current_state: FunnelStep, target: FunnelStep) -> bool:
        """Check whether `target` is the configured destination from `current_state`"""
        return any(t.to_state == target for t in self.get_valid_transitions(current_state))

    @property
    def current_step(self) -> FunnelStep:
        return self.state.current_step

    @property
    def is_finished(self) -> bool:
        return self.current_step == step_registry.TERMINAL_STEP

    def advance(self, target: FunnelStep) -> FunnelStep:
        """
        Move to `target`, which must be the configured next step.

        Returns:
            The new current step

        Raises:
            FunnelTransitionError: If `target` is not reachable from the current step
        """
        current_state = self.state.current_step
        requested = getattr(target, 'value', target)

        try:
            target = FunnelStep(target)
        except ValueError:
            target = None

        if target is None or not self.can_transition(current_state, target):
            valid = [t.to_state.value for t in self.get_valid_transitions(current_state) if t.to_state]
            logger.warning(
                f"Invalid advance: {current_state.value} -> {requested}. Valid targets: {valid}"
            )
            raise transition_error(
                f"Invalid advance: {current_state.value} -> {requested}. Valid targets: {valid}",
                current_state=current_state.value,
                target_state=str(requested)
            )

        # Leaving the loading step tears its timers down before anything else changes
        if current_state == FunnelStep.LOADING:
            self.sequencer.stop()

        # Timers exist before the step is committed; a failed start leaves the step unchanged
        if target == FunnelStep.LOADING:
            self.sequencer.start()

        self.state.current_step = target
        self.state.history.append(target)

        if step_registry.category_of(target) == StepCategory.MULTI_SELECT and target != current_state:
            self.selection.clear()

        logger.info(f"Transition successful: {current_state.value} -> {target.value}")

        if self.scroll_to_top:
            self.scroll_to_top()
        for listener in list(self._listeners):
            listener(current_state, target)

        return target

    def perform(self, action: FunnelAction) -> FunnelStep:
        """
        Execute an action from the current step.

        Inert actions (decline on the final ask) are accepted and change nothing.

        Raises:
            FunnelTransitionError: If the action is not defined for the current step
        """
        current_state = self.state.current_step
        transition = self._transition_map.get((current_state, action))

        if transition is None:
            valid_actions = [t.action.value for t in self.get_valid_transitions(current_state)]
            logger.warning(
                f"Invalid action: {current_state.value} + {action.value}. Valid actions: {valid_actions}"
            )
            raise transition_error(
                f"Invalid action: {current_state.value} + {action.value}. Valid actions: {valid_actions}",
                current_state=current_state.value
            )

        if transition.is_inert:
            logger.info(f"Inert action {action.value} on {current_state.value}, staying put")
            return current_state

        return self.advance(transition.to_state)

    def decline(self) -> FunnelStep:
        """Negative answer on the final ask: valid, never moves"""
        return self.perform(FunnelAction.DECLINE)

    def choose(self, label: str) -> FunnelStep:
        """Answer the current single-choice question; every answer leads to the same next step"""
        definition = step_registry.get_step_definition(self.current_step)
        if definition.category != StepCategory.SINGLE_CHOICE:
            raise validation_error(
                f"Step {self.current_step.value} is not a single-choice question",
                field="step",
                value=self.current_step.value
            )
        if label not in definition.options:
            raise validation_error(
                f"Option not offered on {self.current_step.value}", field="label", value=label
            )

        if self.current_step == FunnelStep.FINAL_ASK and label == definition.options[-1]:
            return self.decline()

        logger.debug(f"Answer on {self.current_step.value}: {label}")
        return self.advance(definition.next_step)

    def toggle_option(self, label: str) -> bool:
        """
        Toggle an option on the current multi-select step.

        Returns:
            True if the option is selected after the call

        Raises:
            FunnelValidationError: Outside a multi-select step or for a label the step does not offer
        """
        definition = step_registry.get_step_definition(self.current_step)
        if definition.category != StepCategory.MULTI_SELECT:
            logger.warning(f"Toggle rejected on non multi-select step {self.current_step.value}")
            raise validation_error(
                f"Step {self.current_step.value} does not accept multiple selections",
                field="step",
                value=self.current_step.value
            )
        if label not in definition.options:
            logger.warning(f"Toggle rejected for unknown option on {self.current_step.value}: {label!r}")
            raise validation_error(
                f"Option not offered on {self.current_step.value}", field="label", value=label
            )

        return self.selection.toggle(label)

    def _complete_loading(self) -> None:
        if self.current_step != FunnelStep.LOADING:
            logger.warning(f"Loading completion ignored outside loading step ({self.current_step.value})")
            return
        self.perform(FunnelAction.COMPLETE)

    # ===========================================
    # LISTENERS AND LIFECYCLE
    # ===========================================

    def add_listener(self, listener: StepListener) -> None:
        """Register a callback(old_step, new_step) fired after each successful advance"""
        self._listeners.append(listener)

    def remove_listener(self, listener: StepListener) -> None:
        if listener in self._listeners:
            self._listeners.remove(listener)

    def close(self) -> None:
        """Cancel any live timers; the session is over"""
        self.sequencer.stop()
        logger.info(f"FunnelEngine closed for session {self.state.session_id}")

    # ===========================================
    # INTROSPECTION
    # ===========================================

    def get_flow_summary(self) -> Dict[str, Any]:
        """Get summary of the FSM for debugging/monitoring"""
        return {
            "total_states": len(step_registry.steps_in_order()),
            "total_actions": len({t.action for t in self.transitions}),
            "total_transitions": len(self.transitions),
            "states": [s.value for s in step_registry.steps_in_order()],
            "actions": sorted({t.action.value for t in self.transitions}),
            "transitions": [
                {
                    "from": t.from_state.value,
                    "action": t.action.value,
                    "to": t.to_state.value if t.to_state else None,
                    "description": t.description,
                }
                for t in self.transitions
            ]
        }

    def validate_fsm(self) -> List[str]:
        """Validate the FSM: reachability, one forward edge per step, no backward edges"""
        issues = []
        ordered = step_registry.steps_in_order()

        reachable = {step_registry.FIRST_STEP}
        for step in ordered:
            if step in reachable:
                reachable.update(t.to_state for t in self.get_valid_transitions(step) if t.to_state)

        unreachable = [s.value for s in ordered if s not in reachable]
        if unreachable:
            issues.append(f"Unreachable states: {unreachable}")

        for step in ordered:
            forward = [t for t in self.get_valid_transitions(step) if t.to_state]
            if step == step_registry.TERMINAL_STEP:
                if forward:
                    issues.append(f"Terminal state {step.value} has outgoing transitions")
                continue
            if len(forward) != 1:
                issues.append(f"State {step.value} has {len(forward)} forward transitions")

        for t in self.transitions:
            if t.to_state and ordered.index(t.to_state) <= ordered.index(t.from_state):
                issues.append(f"Backward transition: {t.from_state.value} -> {t.to_state.value}")

        return issues


def create_funnel_engine(**kwargs) -> FunnelEngine:
    """Create a properly initialized funnel engine"""
    return FunnelEngine(**kwargs)
