# funnel/models/session_state.py

from typing import List, Set
from uuid import uuid4
from pydantic import BaseModel, Field
from funnel.models.flow_models import FunnelStep


class FunnelState(BaseModel):
    """
    State of one funnel visit: current step, toggled options of the active
    multi-select step and the loading screen counters.

    Owned by a single FunnelEngine; the presentation layer reads it but never
    writes to it. Nothing here is persisted.
    """
    session_id: str = Field(default_factory=lambda: str(uuid4()))
    current_step: FunnelStep = FunnelStep.INTRO
    selected_options: Set[str] = Field(default_factory=set)
    loading_progress: int = Field(default=0, ge=0, le=100)
    message_index: int = 0
    testimonial_index: int = 0
    history: List[FunnelStep] = Field(default_factory=lambda: [FunnelStep.INTRO])

    def reset_loading(self) -> None:
        self.loading_progress = 0
        self.message_index = 0
        self.testimonial_index = 0
