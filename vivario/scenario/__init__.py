"""
Vivario Scenario Composer

Builds the four narrative variants (main, step, calm, norm) of a profile
from curated sentence pools, with combo cross-references and length
clamping.
"""

from .models import (
    ComboEntry,
    ComboKey,
    ContentLibrary,
    Dimension,
    Facet,
    LineKind,
    Scenario,
    ScenarioLine,
    Variant,
)
from .composer import (
    COMBO_KIND_WEIGHTS,
    VARIANT_OFFSETS,
    combo_candidates,
    compose_all,
    compose_scenario,
    first_sentence,
    rank_combos,
    summarize,
)

__all__ = [
    "ComboEntry",
    "ComboKey",
    "ContentLibrary",
    "Dimension",
    "Facet",
    "LineKind",
    "Scenario",
    "ScenarioLine",
    "Variant",
    "COMBO_KIND_WEIGHTS",
    "VARIANT_OFFSETS",
    "combo_candidates",
    "compose_all",
    "compose_scenario",
    "first_sentence",
    "rank_combos",
    "summarize",
]
