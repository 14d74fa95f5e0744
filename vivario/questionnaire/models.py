"""
Questionnaire Models

Pydantic models for questionnaire blocks, the questionnaire itself and
answers. Leaf package: rules, profile and flow all read these.

Blocks are loaded once from questionnaire.json and never mutated.
"""

from enum import Enum
from typing import Any, Dict, List, Mapping, Optional, Set

from pydantic import BaseModel, Field, PrivateAttr, field_validator


class BlockRole(str, Enum):
    """Semantic category a block feeds into the profile."""
    TONE = "tone"
    THEMES = "themes"
    POSTURE = "posture"
    VECU = "vecu"
    BESOIN = "besoin"
    ENERGY = "energy"
    EXIT = "exit"
    THEME_INTENSITY = "theme_intensity"
    OTHER = "other"


class BlockType(str, Enum):
    SINGLE = "single"
    MULTI = "multi"
    SCALE = "scale"
    TEXT = "text"


MULTI_ROLES = {BlockRole.THEMES, BlockRole.POSTURE, BlockRole.VECU, BlockRole.BESOIN}

ROLE_ALIASES = {
    "theme": BlockRole.THEMES,
    "energie": BlockRole.ENERGY,
    "besoins": BlockRole.BESOIN,
    "sortie": BlockRole.EXIT,
}


def coerce_role(value: Any) -> BlockRole:
    """Role from a string; unknown strings become OTHER."""
    if isinstance(value, BlockRole):
        return value
    v = str(value or "").strip().lower()
    if v in ROLE_ALIASES:
        return ROLE_ALIASES[v]
    try:
        return BlockRole(v)
    except ValueError:
        return BlockRole.OTHER


class Option(BaseModel):
    id: str
    label: str

    class Config:
        frozen = True


class Constraints(BaseModel):
    """Min/max number of selected options (multi blocks)."""
    min: Optional[int] = Field(default=None, ge=0)
    max: Optional[int] = Field(default=None, ge=1)

    class Config:
        frozen = True


class ScaleBounds(BaseModel):
    min: float = 0
    max: float = 10
    step: float = Field(default=1, gt=0)

    class Config:
        frozen = True


class ScaleFactor(BaseModel):
    factor: float = 1.0

    class Config:
        frozen = True


class ScoringRule(BaseModel):
    """
    Contribution of a block to domain totals.

    add:   flat {domain: points} once the block is answered
    map:   {option_id: points} into `domain` (single / multi)
    scale: numeric answer x factor into `domain`
    when:  optional condition gating the whole rule
    """
    domain: Optional[str] = None
    add: Dict[str, float] = Field(default_factory=dict)
    map: Dict[str, float] = Field(default_factory=dict)
    scale: Optional[ScaleFactor] = None
    when: Optional[Dict[str, Any]] = None

    class Config:
        frozen = True

    def domains(self) -> Set[str]:
        out = set(self.add.keys())
        if self.domain:
            out.add(self.domain)
        return out


class SetVarRule(BaseModel):
    """
    One derived-variable assignment, keyed by a dotted path ("flags.stop").

    Exactly one of the three forms is expected.
    """
    from_answer: bool = False
    from_answer_number: bool = False
    when_answer_in: Optional[List[str]] = None

    class Config:
        frozen = True


class Block(BaseModel):
    """A single questionnaire step."""
    id: str
    role: BlockRole = BlockRole.OTHER
    type: BlockType = BlockType.SINGLE
    title: str = ""
    subtitle: Optional[str] = None
    options: List[Option] = Field(default_factory=list)
    constraints: Optional[Constraints] = None
    required: bool = False
    priority: int = 0
    domain: Optional[str] = None
    tags: List[str] = Field(default_factory=list)
    show_if: Optional[Dict[str, Any]] = None
    set_vars: Dict[str, SetVarRule] = Field(default_factory=dict)
    scoring: Optional[ScoringRule] = None
    scale: Optional[ScaleBounds] = None

    class Config:
        frozen = True

    @field_validator("role", mode="before")
    @classmethod
    def unknown_role_is_other(cls, v):
        return coerce_role(v)

    @field_validator("tags")
    @classmethod
    def lowercase_tags(cls, v: List[str]) -> List[str]:
        return [str(t).strip().lower() for t in v if str(t).strip()]

    @property
    def option_ids(self) -> List[str]:
        return [o.id for o in self.options]

    def label_for(self, value: Any) -> str:
        for option in self.options:
            if option.id == value:
                return option.label
        return str(value)

    @property
    def is_multi(self) -> bool:
        return self.type == BlockType.MULTI


class FlowConfig(BaseModel):
    """Navigation settings of a questionnaire."""
    start: Optional[str] = None
    base: List[str] = Field(default_factory=list)
    themes_block_id: str = "themes"
    themes_to_domains: Dict[str, List[str]] = Field(default_factory=dict)
    safety_block_id: Optional[str] = "urgent_support"
    max_blocks: int = Field(default=12, ge=1)

    class Config:
        frozen = True


class Questionnaire(BaseModel):
    """Full questionnaire: blocks, flow config, diagnostic titles."""
    version: str = "vivario-pro-1"
    blocks: List[Block] = Field(default_factory=list)
    flow: FlowConfig = Field(default_factory=FlowConfig)
    diagnostic_titles: Dict[str, str] = Field(default_factory=dict)

    _index: Dict[str, Block] = PrivateAttr(default_factory=dict)

    class Config:
        frozen = True

    def model_post_init(self, __context: Any) -> None:
        self._index = {b.id: b for b in self.blocks}

    def block(self, block_id: str) -> Optional[Block]:
        return self._index.get(block_id)

    @property
    def start_id(self) -> Optional[str]:
        if self.flow.start:
            return self.flow.start
        if self.flow.base:
            return self.flow.base[0]
        return self.blocks[0].id if self.blocks else None

    def declared_domains(self) -> Set[str]:
        """Every domain a block scores into."""
        domains: Set[str] = set()
        for b in self.blocks:
            if b.scoring:
                domains |= b.scoring.domains()
        return domains


class Answer(BaseModel):
    """
    Answer to one block.

    values keeps raw option ids (or the number / text), labels keeps what the
    person actually read.
    """
    block_id: str
    role: BlockRole = BlockRole.OTHER
    values: List[Any] = Field(default_factory=list)
    labels: List[str] = Field(default_factory=list)

    class Config:
        frozen = True

    @field_validator("role", mode="before")
    @classmethod
    def unknown_role_is_other(cls, v):
        return coerce_role(v)

    @property
    def first(self) -> Any:
        return self.values[0] if self.values else None

    @property
    def is_empty(self) -> bool:
        return not any(v is not None and v != "" for v in self.values)

    def raw(self, block: Optional[Block] = None) -> Any:
        """Value shape used by conditions: list for multi, scalar otherwise."""
        multi = block.is_multi if block else (
            self.role in MULTI_ROLES or len(self.values) > 1
        )
        if multi:
            return list(self.values)
        return self.first

    @classmethod
    def from_raw(cls, block_id: str, value: Any, block: Optional[Block] = None) -> "Answer":
        if isinstance(value, Answer):
            return value
        if isinstance(value, (list, tuple, set)):
            values = [v for v in value if v is not None and v != ""]
        elif value is None or value == "":
            values = []
        else:
            values = [value]
        if block is not None:
            return cls(
                block_id=block_id,
                role=block.role,
                values=values,
                labels=[block.label_for(v) for v in values],
            )
        return cls(
            block_id=block_id,
            role=block_id,
            values=values,
            labels=[str(v) for v in values],
        )


AnswerSet = Dict[str, Answer]


def coerce_answers(
    answers: Optional[Mapping[str, Any]],
    questionnaire: Optional[Questionnaire] = None,
) -> AnswerSet:
    """Accept Answer objects or raw values keyed by block id."""
    out: AnswerSet = {}
    for block_id, value in (answers or {}).items():
        block = questionnaire.block(block_id) if questionnaire else None
        out[str(block_id)] = Answer.from_raw(str(block_id), value, block)
    return out


def raw_answers(answers: Mapping[str, Answer], questionnaire: Optional[Questionnaire] = None) -> Dict[str, Any]:
    """block id -> raw value, the shape conditions read."""
    out: Dict[str, Any] = {}
    for block_id, answer in answers.items():
        block = questionnaire.block(block_id) if questionnaire else None
        out[block_id] = answer.raw(block)
    return out

