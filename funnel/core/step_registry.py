# funnel/core/step_registry.py
"""
Static catalog of the 16 funnel steps.

Each entry fixes the step's position, its category, the option labels it
offers and the single step that follows it. Routing never depends on which
option was picked, so one `next_step` per step is the whole routing table.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional, Tuple
import logging

from funnel.content import step_content
from funnel.core.exceptions import config_error
from funnel.models.flow_models import FunnelStep, StepCategory, Testimonial

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class StepDefinition:
    """Configuration of a single funnel step"""
    step: FunnelStep
    ordinal: int
    category: StepCategory
    title: str
    next_step: Optional[FunnelStep] = None
    options: Tuple[str, ...] = ()
    progress_percent: Optional[int] = None

    @property
    def is_choice(self) -> bool:
        return self.category in (StepCategory.SINGLE_CHOICE, StepCategory.MULTI_SELECT)


def _define(
    ordinal: int,
    step: FunnelStep,
    category: StepCategory,
    next_step: Optional[FunnelStep],
    options: List[str] = None,
    progress_percent: Optional[int] = None
) -> StepDefinition:
    return StepDefinition(
        step=step,
        ordinal=ordinal,
        category=category,
        title=step_content.TITLES[step.value],
        next_step=next_step,
        options=tuple(options or ()),
        progress_percent=progress_percent,
    )


_STEP_DEFINITIONS: Tuple[StepDefinition, ...] = (
    _define(1, FunnelStep.INTRO, StepCategory.INFORMATIONAL, FunnelStep.BIO),
    _define(2, FunnelStep.BIO, StepCategory.INFORMATIONAL, FunnelStep.Q1),
    _define(3, FunnelStep.Q1, StepCategory.SINGLE_CHOICE, FunnelStep.Q2,
            step_content.Q1_OPTIONS, progress_percent=15),
    _define(4, FunnelStep.Q2, StepCategory.SINGLE_CHOICE, FunnelStep.Q3,
            step_content.Q2_OPTIONS, progress_percent=30),
    _define(5, FunnelStep.Q3, StepCategory.SINGLE_CHOICE, FunnelStep.Q4,
            step_content.Q3_OPTIONS, progress_percent=45),
    _define(6, FunnelStep.Q4, StepCategory.MULTI_SELECT, FunnelStep.TESTIMONIALS_PRE,
            step_content.Q4_OPTIONS, progress_percent=60),
    _define(7, FunnelStep.TESTIMONIALS_PRE, StepCategory.INFORMATIONAL, FunnelStep.AGITATION),
    _define(8, FunnelStep.AGITATION, StepCategory.INFORMATIONAL, FunnelStep.TRANSFORMATION),
    _define(9, FunnelStep.TRANSFORMATION, StepCategory.INFORMATIONAL, FunnelStep.BENEFITS),
    _define(10, FunnelStep.BENEFITS, StepCategory.INFORMATIONAL, FunnelStep.Q5),
    _define(11, FunnelStep.Q5, StepCategory.MULTI_SELECT, FunnelStep.Q6,
            step_content.Q5_OPTIONS, progress_percent=75),
    _define(12, FunnelStep.Q6, StepCategory.SINGLE_CHOICE, FunnelStep.EFFECTS,
            step_content.Q6_OPTIONS, progress_percent=85),
    _define(13, FunnelStep.EFFECTS, StepCategory.INFORMATIONAL, FunnelStep.FINAL_ASK),
    _define(14, FunnelStep.FINAL_ASK, StepCategory.SINGLE_CHOICE, FunnelStep.LOADING,
            [step_content.FINAL_ASK_CONFIRM, step_content.FINAL_ASK_DECLINE]),
    _define(15, FunnelStep.LOADING, StepCategory.TIMED_TRANSITION, FunnelStep.SALES_PAGE),
    _define(16, FunnelStep.SALES_PAGE, StepCategory.TERMINAL_DISPLAY, None),
)

STEP_REGISTRY: Dict[FunnelStep, StepDefinition] = {
    definition.step: definition for definition in _STEP_DEFINITIONS
}

FIRST_STEP = _STEP_DEFINITIONS[0].step
TERMINAL_STEP = _STEP_DEFINITIONS[-1].step


def steps_in_order() -> List[FunnelStep]:
    """The funnel's step sequence, first to last"""
    return [definition.step for definition in _STEP_DEFINITIONS]


def get_step_definition(step: FunnelStep) -> StepDefinition:
    try:
        return STEP_REGISTRY[FunnelStep(step)]
    except (KeyError, ValueError):
        logger.error(f"Unknown funnel step requested: {step!r}")
        raise config_error(f"Unknown funnel step: {step!r}", component="step_registry")


def options_for(step: FunnelStep) -> List[str]:
    """Option labels of a step in display order (empty for non-choice steps)"""
    return list(get_step_definition(step).options)


def next_step_for(step: FunnelStep) -> Optional[FunnelStep]:
    return get_step_definition(step).next_step


def category_of(step: FunnelStep) -> StepCategory:
    return get_step_definition(step).category


def loading_messages() -> List[str]:
    return list(step_content.LOADING_MESSAGES)


def loading_testimonials() -> List[Testimonial]:
    return [Testimonial(**entry) for entry in step_content.LOADING_TESTIMONIALS]
