"""
Scenario Composer

Assembles a scenario from content pools in a fixed order, sharing one
`used` set per call so no two lines carry the same normalized text:

1. Root lines (2)
2. Opening by dominant tone (1 on low energy, else 2)
3. Combo injection, spliced about one third into the output
4. Per-theme elaboration (2 per focus theme, 1 on low energy or non-main variant)
5. Normalization line when many things are going on
6. Posture / vecu / besoin / energy line, each when a pack exists
7. Variant signature (2 lines at a variant-specific offset)
8. Closing line

Then clamp to [min, max]: overflow drops normalization, theme lines and
secondary combo lines first, then truncates with the closing kept last;
short output is padded from the closings pool.
"""

import logging
from itertools import combinations
from typing import Dict, List, Optional, Set, Tuple

from vivario.config import Settings, get_settings
from vivario.profile.models import MULTIPLE_THEME, Profile
from vivario.selection import normalize_text, pick_unique, pick_unique_many, stable_seed
from vivario.shared.hashing import canonicalize
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

logger = logging.getLogger(__name__)

ROOT_LINES = 2
VARIANT_LINES = 2
SUMMARY_MAX_CHARS = 120

VARIANT_OFFSETS: Dict[Variant, int] = {
    Variant.MAIN: 1,
    Variant.STEP: 2,
    Variant.CALM: 3,
    Variant.NORM: 4,
}

# Relative importance of each combo family
COMBO_KIND_WEIGHTS: Dict[str, float] = {
    "posture_theme": 5.0,
    "multiple": 4.5,
    "vecu_theme": 4.0,
    "besoin_theme": 3.5,
    "tone_theme": 3.0,
    "energy_theme": 2.5,
    "posture_vecu": 2.0,
    "theme_theme": 1.5,
}

OVERFLOW_ORDER = (LineKind.NORMALIZATION, LineKind.THEME, LineKind.COMBO_SECONDARY)


class _Draft:
    """Per-call working buffer: ordered lines plus the shared used set."""

    def __init__(self, seed_material: str, variant: Variant):
        self.lines: List[ScenarioLine] = []
        self.used: Set[str] = set()
        self._material = seed_material
        self._variant = variant.value

    def seed(self, *salt) -> int:
        return stable_seed(self._material, self._variant, *salt)

    def add(self, text: Optional[str], kind: LineKind) -> None:
        if text:
            self.lines.append(ScenarioLine(text=text, kind=kind))

    def add_many(self, texts: List[str], kind: LineKind) -> None:
        for text in texts:
            self.add(text, kind)

    def insert(self, position: int, texts: List[ScenarioLine]) -> None:
        position = max(0, min(position, len(self.lines)))
        self.lines[position:position] = texts


def _facet(dimension: Dimension, value: Optional[str]) -> Optional[Facet]:
    if not value:
        return None
    return Facet.of(dimension, value)


def combo_candidates(profile: Profile) -> List[Tuple[ComboKey, str]]:
    """Every applicable (key, family) pair for a profile, before lookup."""
    out: List[Tuple[ComboKey, str]] = []
    focus = [Facet.of(Dimension.THEME, t) for t in profile.focus]

    themes = [Facet.of(Dimension.THEME, t) for t in profile.themes]
    for a, b in combinations(themes, 2):
        out.append((ComboKey.of(a, b), "theme_theme"))

    singles = (
        (_facet(Dimension.TONE, profile.tone), "tone_theme"),
        (_facet(Dimension.ENERGY, profile.energy.value), "energy_theme"),
    )
    for facet, family in singles:
        if facet is not None:
            out.extend((ComboKey.of(facet, f), family) for f in focus)

    for values, dimension, family in (
        (profile.posture, Dimension.POSTURE, "posture_theme"),
        (profile.vecu, Dimension.VECU, "vecu_theme"),
        (profile.besoins, Dimension.BESOIN, "besoin_theme"),
    ):
        for value in values:
            facet = Facet.of(dimension, value)
            out.extend((ComboKey.of(facet, f), family) for f in focus)

    for p in profile.posture:
        for v in profile.vecu:
            out.append((ComboKey.of(Facet.of(Dimension.POSTURE, p), Facet.of(Dimension.VECU, v)), "posture_vecu"))

    if profile.many_things:
        multiple = Facet.of(Dimension.THEME, MULTIPLE_THEME)
        for t in profile.themes:
            if t != MULTIPLE_THEME:
                out.append((ComboKey.of(multiple, Facet.of(Dimension.THEME, t)), "multiple"))

    return out


def rank_combos(profile: Profile, library: ContentLibrary) -> List[Tuple[ComboKey, ComboEntry]]:
    """
    Look up candidates, dedupe by key, rank by family weight x entry weight.

    Only the strongest posture x focus combo survives.
    """
    best: Dict[str, Tuple[float, ComboKey, ComboEntry, str]] = {}
    for key, family in combo_candidates(profile):
        entry = library.combo(key)
        if entry is None or not entry.lines:
            continue
        score = COMBO_KIND_WEIGHTS.get(family, 1.0) * entry.weight
        previous = best.get(str(key))
        if previous is None or score > previous[0]:
            best[str(key)] = (score, key, entry, family)

    ranked = sorted(best.values(), key=lambda x: (-x[0], str(x[1])))

    out: List[Tuple[ComboKey, ComboEntry]] = []
    posture_taken = False
    for _score, key, entry, family in ranked:
        if family == "posture_theme":
            if posture_taken:
                continue
            posture_taken = True
        out.append((key, entry))
    return out


def _inject_combos(draft: _Draft, profile: Profile, library: ContentLibrary) -> None:
    wanted = 2 if profile.many_things else 1
    picked: List[ScenarioLine] = []
    for i, (key, entry) in enumerate(rank_combos(profile, library)):
        if len(picked) >= wanted:
            break
        text = pick_unique(entry.lines, draft.seed("combo", str(key), i), draft.used)
        if text is None:
            continue
        kind = LineKind.COMBO if not picked else LineKind.COMBO_SECONDARY
        picked.append(ScenarioLine(text=text, kind=kind))
    if picked:
        draft.insert(max(1, len(draft.lines) // 3), picked)


def _first_pack_line(draft: _Draft, pools: Dict[str, List[str]], values: List[str], kind: LineKind) -> None:
    for value in values:
        pool = pools.get(value)
        if pool:
            draft.add(pick_unique(pool, draft.seed(kind.value, value), draft.used), kind)
            return


def _dedupe(lines: List[ScenarioLine]) -> List[ScenarioLine]:
    seen: Set[str] = set()
    out: List[ScenarioLine] = []
    for line in lines:
        signature = normalize_text(line.text)
        if signature and signature not in seen:
            seen.add(signature)
            out.append(line)
    return out


def _remove_one(lines: List[ScenarioLine], kind: LineKind) -> bool:
    """Drop the last line of a kind; False when none left."""
    for i in range(len(lines) - 1, -1, -1):
        if lines[i].kind == kind:
            del lines[i]
            return True
    return False


def clamp_lines(
    draft: _Draft,
    closings: List[str],
    min_lines: int,
    max_lines: int,
) -> List[ScenarioLine]:
    lines = _dedupe(draft.lines)

    for kind in OVERFLOW_ORDER:
        while len(lines) > max_lines and _remove_one(lines, kind):
            pass

    if len(lines) > max_lines:
        closing = lines[-1] if lines and lines[-1].kind == LineKind.CLOSING else None
        if closing is not None:
            lines = lines[:max_lines - 1] + [closing]
        else:
            lines = lines[:max_lines]

    i = 0
    while len(lines) < min_lines:
        text = pick_unique(closings, draft.seed("pad", i), draft.used)
        if text is None:
            break
        position = len(lines) - 1 if lines and lines[-1].kind == LineKind.CLOSING else len(lines)
        lines.insert(position, ScenarioLine(text=text, kind=LineKind.PADDING))
        i += 1

    return lines


def compose_scenario(
    profile: Profile,
    variant=Variant.MAIN,
    library: Optional[ContentLibrary] = None,
    settings: Optional[Settings] = None,
) -> Scenario:
    """
    Compose one scenario variant for a profile.

    Args:
        profile: built profile
        variant: Variant or its string key
        library: content pools; the loaded default when None
        settings: line bounds; process settings when None

    Returns:
        Scenario with min <= len(lines) <= max and unique normalized lines
    """
    variant = Variant(variant)
    if library is None:
        from vivario.content import get_loader
        library = get_loader().library
    settings = settings or get_settings()

    draft = _Draft(canonicalize(profile.snapshot()), variant)

    # 1. root
    draft.add_many(
        pick_unique_many(library.roots.get(profile.root.value, []), draft.seed("root"), draft.used, ROOT_LINES),
        LineKind.ROOT,
    )

    # 2. opening
    opening_count = 1 if profile.low_energy else 2
    draft.add_many(
        pick_unique_many(library.opening_pool(profile.tone), draft.seed("opening"), draft.used, opening_count),
        LineKind.OPENING,
    )

    # 3. combos
    _inject_combos(draft, profile, library)

    # 4. themes
    per_theme = 1 if (profile.low_energy or variant != Variant.MAIN) else 2
    for theme in profile.focus:
        draft.add_many(
            pick_unique_many(library.themes.get(theme, []), draft.seed("theme", theme), draft.used, per_theme),
            LineKind.THEME,
        )

    # 5. normalization
    if profile.many_things and library.normalization:
        draft.add(pick_unique(library.normalization, draft.seed("normalization"), draft.used), LineKind.NORMALIZATION)

    # 6. facets
    _first_pack_line(draft, library.postures, profile.posture, LineKind.POSTURE)
    _first_pack_line(draft, library.vecu, profile.vecu, LineKind.VECU)
    _first_pack_line(draft, library.besoins, profile.besoins, LineKind.BESOIN)
    _first_pack_line(draft, library.energy, [profile.energy.value], LineKind.ENERGY)

    # 7. variant signature
    signature = pick_unique_many(library.variants.get(variant.value, []), draft.seed("variant"), draft.used, VARIANT_LINES)
    draft.insert(VARIANT_OFFSETS[variant], [ScenarioLine(text=t, kind=LineKind.VARIANT) for t in signature])

    # 8. closing
    draft.add(pick_unique(library.closings, draft.seed("closing"), draft.used), LineKind.CLOSING)

    lines = clamp_lines(draft, library.closings, settings.scenario_min_lines, settings.scenario_max_lines)
    logger.debug(f"Scenario {variant.value}: {len(lines)} lines (root={profile.root.value})")
    return Scenario(variant=variant, lines=lines)


def compose_all(
    profile: Profile,
    library: Optional[ContentLibrary] = None,
    settings: Optional[Settings] = None,
) -> Dict[str, Scenario]:
    """The four variants, keyed by variant name."""
    return {v.value: compose_scenario(profile, v, library, settings) for v in Variant}


def first_sentence(text: str, limit: int = SUMMARY_MAX_CHARS) -> str:
    t = str(text or "").strip()
    if not t:
        return ""
    paragraphs = [p.strip() for p in t.split("\n") if p.strip()]
    first = paragraphs[0] if paragraphs else ""
    if len(first) <= limit:
        return first
    return first[:limit - 3].strip() + "…"


def summarize(scenarios: Dict[str, Scenario]) -> Dict[str, str]:
    """Short teaser per variant: the first line, cut at 120 characters."""
    return {key: first_sentence(s.text) for key, s in scenarios.items()}
