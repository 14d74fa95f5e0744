"""
Adaptive Flow Models

Navigation state of a questionnaire session. Block, Questionnaire and Answer
live in vivario.questionnaire.
"""

from datetime import datetime
from typing import Dict, List, Optional

from pydantic import BaseModel, Field

from vivario.questionnaire.models import Answer, Block

LOW_ENERGY_BLOCK_LIMIT = 8
MEDIUM_ENERGY_BLOCK_LIMIT = 14
HEAVY_TAGS = {"deep", "long"}


class FlowState(BaseModel):
    """
    Navigation state of one questionnaire session.

    shown is the display history, its last entry is the block on screen.
    Immutable: advance() / go_back() return new states.
    """
    answers: Dict[str, Answer] = Field(default_factory=dict)
    shown: List[str] = Field(default_factory=list)
    energy: str = "medium"
    started_at: datetime = Field(default_factory=datetime.utcnow)
    finished: bool = False

    class Config:
        frozen = True

    @property
    def current(self) -> Optional[str]:
        if self.finished or not self.shown:
            return None
        return self.shown[-1]


class FlowStep(BaseModel):
    """What the presentation layer needs after each transition."""
    state: FlowState
    block: Optional[Block] = None
    finished: bool = False
    progress: float = Field(default=0.0, ge=0.0, le=1.0)
    message: Optional[str] = None
