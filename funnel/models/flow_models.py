# funnel/models/flow_models.py

from enum import Enum
from typing import List, Optional

from pydantic import BaseModel


class FunnelStep(str, Enum):
    INTRO = "intro"
    BIO = "bio"
    Q1 = "q1"
    Q2 = "q2"
    Q3 = "q3"
    Q4 = "q4"
    TESTIMONIALS_PRE = "testimonials_pre"
    AGITATION = "agitation"
    TRANSFORMATION = "transformation"
    BENEFITS = "benefits"
    Q5 = "q5"
    Q6 = "q6"
    EFFECTS = "effects"
    FINAL_ASK = "final_ask"
    LOADING = "loading"
    SALES_PAGE = "sales_page"


class StepCategory(str, Enum):
    SINGLE_CHOICE = "single_choice"
    MULTI_SELECT = "multi_select"
    INFORMATIONAL = "informational"
    TIMED_TRANSITION = "timed_transition"
    TERMINAL_DISPLAY = "terminal_display"


class Testimonial(BaseModel):
    name: str
    text: str


class OptionView(BaseModel):
    label: str
    selected: bool = False


class StepView(BaseModel):
    """Everything the presentation layer needs to draw the current step"""
    step: FunnelStep
    category: StepCategory
    title: str
    progress_percent: Optional[int] = None
    options: List[OptionView] = []
    loading_progress: Optional[int] = None
    loading_message: Optional[str] = None
    testimonial: Optional[Testimonial] = None
