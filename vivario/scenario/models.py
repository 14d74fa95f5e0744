"""
Scenario Composer Models

Content library (curated sentence pools), typed combo keys and the composed
Scenario.

Combo key string form: "<dimension>:<value>+<dimension>:<value>", facets in
canonical (dimension, value) order, so "theme:travail+posture:effort" and
"posture:effort+theme:travail" name the same entry.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Dict, List, Optional

from pydantic import BaseModel, Field, field_validator


class Dimension(str, Enum):
    TONE = "tone"
    THEME = "theme"
    POSTURE = "posture"
    VECU = "vecu"
    BESOIN = "besoin"
    ENERGY = "energy"


class Variant(str, Enum):
    """Four textually distinct readings of the same profile."""
    MAIN = "main"
    STEP = "step"
    CALM = "calm"
    NORM = "norm"


class LineKind(str, Enum):
    ROOT = "root"
    OPENING = "opening"
    COMBO = "combo"
    COMBO_SECONDARY = "combo_secondary"
    THEME = "theme"
    NORMALIZATION = "normalization"
    POSTURE = "posture"
    VECU = "vecu"
    BESOIN = "besoin"
    ENERGY = "energy"
    VARIANT = "variant"
    CLOSING = "closing"
    PADDING = "padding"


def _norm_value(value: str) -> str:
    return str(value or "").strip().lower()


@dataclass(frozen=True, order=True)
class Facet:
    """One profile dimension value, e.g. theme:travail."""
    dimension: str
    value: str

    @classmethod
    def of(cls, dimension, value: str) -> "Facet":
        dim = dimension.value if isinstance(dimension, Dimension) else _norm_value(dimension)
        return cls(Dimension(dim).value, _norm_value(value))

    @classmethod
    def parse(cls, text: str) -> "Facet":
        dimension, sep, value = str(text).strip().partition(":")
        if not sep or not value:
            raise ValueError(f"Invalid facet: {text!r}")
        return cls.of(dimension, value)

    def __str__(self) -> str:
        return f"{self.dimension}:{self.value}"


@dataclass(frozen=True)
class ComboKey:
    """Unordered pair of facets, stored in canonical order."""
    first: Facet
    second: Facet

    @classmethod
    def of(cls, a: Facet, b: Facet) -> "ComboKey":
        low, high = sorted((a, b))
        return cls(low, high)

    @classmethod
    def parse(cls, text: str) -> "ComboKey":
        left, sep, right = str(text).partition("+")
        if not sep:
            raise ValueError(f"Invalid combo key: {text!r}")
        return cls.of(Facet.parse(left), Facet.parse(right))

    def __str__(self) -> str:
        return f"{self.first}+{self.second}"


class ComboEntry(BaseModel):
    weight: float = Field(default=1.0, ge=0.0)
    lines: List[str] = Field(default_factory=list)

    class Config:
        frozen = True


class ContentLibrary(BaseModel):
    """
    All sentence pools used by the composer.

    Single-dimension pools are keyed by value; openings fall back to the
    "default" tone. Only closings is mandatory.
    """
    version: str = "vivario-content-1"
    roots: Dict[str, List[str]] = Field(default_factory=dict)
    openings: Dict[str, List[str]] = Field(default_factory=dict)
    themes: Dict[str, List[str]] = Field(default_factory=dict)
    postures: Dict[str, List[str]] = Field(default_factory=dict)
    vecu: Dict[str, List[str]] = Field(default_factory=dict)
    besoins: Dict[str, List[str]] = Field(default_factory=dict)
    energy: Dict[str, List[str]] = Field(default_factory=dict)
    combos: Dict[str, ComboEntry] = Field(default_factory=dict)
    variants: Dict[str, List[str]] = Field(default_factory=dict)
    normalization: List[str] = Field(default_factory=list)
    closings: List[str] = Field(default_factory=list)

    class Config:
        frozen = True

    @field_validator("combos")
    @classmethod
    def canonical_combo_keys(cls, v: Dict[str, ComboEntry]) -> Dict[str, ComboEntry]:
        return {str(ComboKey.parse(k)): entry for k, entry in v.items()}

    def opening_pool(self, tone: Optional[str]) -> List[str]:
        return self.openings.get(tone or "") or self.openings.get("default", [])

    def combo(self, key: ComboKey) -> Optional[ComboEntry]:
        return self.combos.get(str(key))


class ScenarioLine(BaseModel):
    text: str
    kind: LineKind

    class Config:
        frozen = True


class Scenario(BaseModel):
    """Composed narrative for one variant."""
    variant: Variant
    lines: List[ScenarioLine] = Field(default_factory=list)

    class Config:
        frozen = True

    @property
    def paragraphs(self) -> List[str]:
        return [line.text for line in self.lines]

    @property
    def text(self) -> str:
        return "\n\n".join(self.paragraphs)

    def __len__(self) -> int:
        return len(self.lines)
