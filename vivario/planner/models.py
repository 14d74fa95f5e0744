"""
Diagnostic & Plan Models

Modules are schedulable exercises sourced from modules.json. A weekly plan
is 7 days x 3 slots (Matin, Midi, Soir), one module per slot.

Version: vivario-pro-result-1.0
"""

from dataclasses import dataclass
from datetime import date, datetime
from enum import Enum
from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field, field_validator

RESULT_VERSION = "vivario-pro-result-1.0"
SLOT_LABELS = ("Matin", "Midi", "Soir")
PLAN_DAYS = 7
CORE_DOMAIN = "core"


class Severity(str, Enum):
    """Bucket of a normalized domain score."""
    ELEVATED = "elevated"
    MODERATE = "moderate"
    MILD = "mild"
    LOW = "low"

    @property
    def label(self) -> str:
        return SEVERITY_LABELS[self]


SEVERITY_LABELS = {
    Severity.ELEVATED: "élevé",
    Severity.MODERATE: "modéré",
    Severity.MILD: "léger",
    Severity.LOW: "faible",
}


class Module(BaseModel):
    """One exercise the planner can schedule."""
    id: str
    title: str
    minutes: int = Field(default=5, ge=1)
    instructions: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)
    themes: List[str] = Field(default_factory=list)
    domains: List[str] = Field(default_factory=list)
    weight: float = Field(default=1.0, ge=0.0)
    level: str = "mid"
    goal: Optional[str] = None
    when: Optional[str] = None

    class Config:
        frozen = True

    @field_validator("tags", "themes", "domains")
    @classmethod
    def lowercase(cls, v: List[str]) -> List[str]:
        return [str(x).strip().lower() for x in v if str(x).strip()]

    def has_tag(self, *tags: str) -> bool:
        return any(t in self.tags for t in tags)


class ModuleLibrary(BaseModel):
    version: str = "vivario-modules-1"
    modules: List[Module] = Field(default_factory=list)

    class Config:
        frozen = True

    def by_domain(self, domain: str) -> List[Module]:
        return [m for m in self.modules if domain in m.domains]

    @property
    def core(self) -> List[Module]:
        return self.by_domain(CORE_DOMAIN)


class CheckIn(BaseModel):
    """Per-day check-in; read-only for the planner."""
    date: date
    done: bool = False
    note: str = ""


@dataclass(frozen=True)
class Adherence:
    adherence: float
    streak: int
    last: Optional[date] = None
    recorded: int = 0


class DomainReading(BaseModel):
    domain: str
    title: str
    score: int
    severity: Severity


class Diagnostic(BaseModel):
    title: str
    summary: str
    bullets: List[str] = Field(default_factory=list)
    urgent: bool = False
    flags: List[str] = Field(default_factory=list)
    primary_domain: Optional[str] = None
    primary_score: int = 0
    severity: Optional[Severity] = None
    domains: List[DomainReading] = Field(default_factory=list)


class PlanStep(BaseModel):
    order: int
    id: str
    title: str
    minutes: int
    when: str = "Aujourd’hui"
    steps: List[str] = Field(default_factory=list)
    tags: List[str] = Field(default_factory=list)


class DailyPlan(BaseModel):
    title: str
    intro: str
    steps: List[PlanStep] = Field(default_factory=list)
    outro: str
    intensity: int = Field(ge=1, le=3)
    adherence: float
    streak: int = 0


class PlanSlot(BaseModel):
    label: str
    module_id: str
    title: str
    minutes: int
    goal: Optional[str] = None
    instructions: List[str] = Field(default_factory=list)


class PlanDay(BaseModel):
    day_index: int
    date: date
    slots: List[PlanSlot] = Field(default_factory=list)
    signature: str = ""


class WeeklyPlan(BaseModel):
    start_date: date
    generated_at: datetime = Field(default_factory=datetime.utcnow)
    used_module_ids: List[str] = Field(default_factory=list)
    days: List[PlanDay] = Field(default_factory=list)

    def module_ids(self) -> List[str]:
        return [slot.module_id for day in self.days for slot in day.slots]


class PlanOptions(BaseModel):
    start_date: Optional[date] = None
    user_id: str = "anonymous"
    salt: str = "v1"
    used_module_ids: List[str] = Field(default_factory=list)


class ResultPayload(BaseModel):
    """Everything the results view needs, stored as one session."""
    version: str = RESULT_VERSION
    created_at: datetime = Field(default_factory=datetime.utcnow)
    seed: int
    answers: Dict[str, Any] = Field(default_factory=dict)
    shown_blocks: List[str] = Field(default_factory=list)
    scores: Dict[str, int] = Field(default_factory=dict)
    profile: Dict[str, Any] = Field(default_factory=dict)
    diagnostic: Diagnostic
    daily_plan: DailyPlan
    weekly_plan: WeeklyPlan
    disclaimer: str
    result_hash: Optional[str] = None
