"""
Profile Models

The Profile is the derived, read-only snapshot of a completed questionnaire.
Everything downstream (scenario composer, diagnostic, planner) reads it and
nothing writes to it.
"""

from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field


class EnergyLevel(str, Enum):
    LOW = "low"
    MEDIUM = "medium"
    HIGH = "high"


class RootCategory(str, Enum):
    """Fixed enumeration, listed in priority order."""
    SORTIE = "sortie"
    FATIGUE = "fatigue"
    FLOU = "flou"
    PROTECTION = "protection"
    RESILIENCE = "resilience"
    CLARIFICATION = "clarification"


MULTIPLE_THEME = "multiple"


class Profile(BaseModel):
    """Structured summary of one person's answers."""
    tone: Optional[str] = None
    themes: List[str] = Field(default_factory=list)
    focus: List[str] = Field(default_factory=list, max_length=2)
    posture: List[str] = Field(default_factory=list)
    vecu: List[str] = Field(default_factory=list)
    besoins: List[str] = Field(default_factory=list)
    energy: EnergyLevel = EnergyLevel.MEDIUM
    exit: Optional[str] = None
    root: RootCategory = RootCategory.CLARIFICATION
    scores: Dict[str, int] = Field(default_factory=dict)
    theme_intensity: Dict[str, float] = Field(default_factory=dict)
    high_theme_count: int = 0
    flags: Dict[str, bool] = Field(default_factory=dict)
    variables: Dict[str, Any] = Field(default_factory=dict)
    urgency: List[str] = Field(default_factory=list)
    answer_count: int = 0

    class Config:
        frozen = True

    @property
    def low_energy(self) -> bool:
        return bool(self.flags.get("low_energy"))

    @property
    def many_things(self) -> bool:
        return bool(self.flags.get("many_things"))

    @property
    def urgent(self) -> bool:
        return len(self.urgency) > 0

    def top_domains(self, n: int = 4) -> List[str]:
        """Non-zero domains by score desc, name asc."""
        ranked = sorted(
            ((d, s) for d, s in self.scores.items() if s > 0),
            key=lambda x: (-x[1], x[0]),
        )
        return [d for d, _ in ranked[:n]]

    def snapshot(self) -> Dict[str, Any]:
        """JSON-ready copy used as seed material."""
        return self.model_dump(mode="json")
