"""
Profile Builder

Derives a Profile from raw answers:
1. Role extraction (tone, themes, posture, vecu, besoin, energy, exit)
2. set_vars rules and theme intensity
3. Domain scoring
4. Root category via a fixed priority chain
5. Focus and priority flags

Root priority (LOCKED):
    sortie > fatigue > flou > protection > resilience > clarification
"""

import logging
import re
from typing import Any, Dict, List, Mapping, Optional

from vivario.questionnaire.models import (
    Answer,
    AnswerSet,
    BlockRole,
    BlockType,
    Questionnaire,
    coerce_answers,
    coerce_role,
)
from vivario.rules import to_number
from .models import EnergyLevel, MULTIPLE_THEME, Profile, RootCategory
from .scoring import detect_urgency, score_answers

logger = logging.getLogger(__name__)

STOP_VALUES = {"stop", "pas_aide", "arret", "sortie"}
PROTECTION_POSTURES = {"protection", "retrait"}
HIGH_INTENSITY = 3
HIGH_THEMES_FOR_RESILIENCE = 2
MANY_THINGS_LABEL = "plusieurs choses"
MANY_THINGS_ANSWER_COUNT = 10

ENERGY_ALIASES = {
    "faible": EnergyLevel.LOW,
    "basse": EnergyLevel.LOW,
    "bas": EnergyLevel.LOW,
    "low": EnergyLevel.LOW,
    "moyenne": EnergyLevel.MEDIUM,
    "moyen": EnergyLevel.MEDIUM,
    "medium": EnergyLevel.MEDIUM,
    "haute": EnergyLevel.HIGH,
    "elevee": EnergyLevel.HIGH,
    "élevée": EnergyLevel.HIGH,
    "high": EnergyLevel.HIGH,
}

THEME_INTENSITY_ID = re.compile(r"^p5_([a-z0-9_]+)_intensity$", re.IGNORECASE)


def energy_from_value(value: Any) -> EnergyLevel:
    """Map an energy answer to a level; anything unknown is medium."""
    return ENERGY_ALIASES.get(str(value or "").strip().lower(), EnergyLevel.MEDIUM)


def detect_energy(answers: Mapping[str, Answer], questionnaire: Optional[Questionnaire] = None) -> EnergyLevel:
    for block_id, answer in answers.items():
        if _role_of(block_id, answer, questionnaire) == BlockRole.ENERGY and not answer.is_empty:
            return energy_from_value(answer.first)
    return EnergyLevel.MEDIUM


def _role_of(block_id: str, answer: Answer, questionnaire: Optional[Questionnaire]) -> BlockRole:
    block = questionnaire.block(block_id) if questionnaire else None
    if block is not None:
        return block.role
    if answer.role != BlockRole.OTHER:
        return answer.role
    return coerce_role(block_id)


def _assign(target: Dict[str, Any], path: str, value: Any) -> None:
    parts = [p for p in str(path).split(".") if p]
    if not parts:
        return
    current = target
    for key in parts[:-1]:
        if not isinstance(current.get(key), dict):
            current[key] = {}
        current = current[key]
    current[parts[-1]] = value


def apply_set_vars(answers: Mapping[str, Answer], questionnaire: Optional[Questionnaire]) -> Dict[str, Any]:
    """Derived variables from every answered block's set_vars rules."""
    variables: Dict[str, Any] = {}
    if questionnaire is None:
        return variables

    for block in questionnaire.blocks:
        answer = answers.get(block.id)
        if answer is None or not block.set_vars:
            continue
        first = answer.first
        for path, rule in block.set_vars.items():
            if rule.from_answer:
                _assign(variables, path, list(answer.values))
            elif rule.from_answer_number:
                n = to_number(first)
                if n is not None:
                    _assign(variables, path, n)
            elif rule.when_answer_in is not None:
                _assign(variables, path, first in rule.when_answer_in)
    return variables


def theme_intensities(answers: Mapping[str, Answer], questionnaire: Optional[Questionnaire]) -> Dict[str, float]:
    """Theme -> intensity from blocks named p5_<theme>_intensity."""
    out: Dict[str, float] = {}
    for block_id, answer in answers.items():
        block = questionnaire.block(block_id) if questionnaire else None
        if block is not None and block.role != BlockRole.THEME_INTENSITY:
            continue
        match = THEME_INTENSITY_ID.match(block_id)
        if not match:
            continue
        n = to_number(answer.first)
        if n is not None:
            out[match.group(1).lower()] = n
    return out


def choose_focus(themes: List[str]) -> List[str]:
    ordered = list(themes)
    if MULTIPLE_THEME in ordered:
        ordered = [MULTIPLE_THEME] + [t for t in ordered if t != MULTIPLE_THEME]
    return ordered[:2]


def count_choice_values(answers: Mapping[str, Answer], questionnaire: Optional[Questionnaire]) -> int:
    total = 0
    for block_id, answer in answers.items():
        block = questionnaire.block(block_id) if questionnaire else None
        if block is not None and block.type in (BlockType.SCALE, BlockType.TEXT):
            continue
        total += len(answer.values)
    return total


def _has_many_things(themes: List[str], theme_labels: List[str], answer_count: int) -> bool:
    if MULTIPLE_THEME in themes:
        return True
    if any(MANY_THINGS_LABEL in label.lower() for label in theme_labels):
        return True
    return answer_count >= MANY_THINGS_ANSWER_COUNT


def derive_root(
    exit_value: Optional[str],
    energy: EnergyLevel,
    tone: Optional[str],
    posture: List[str],
    flags: Mapping[str, Any],
    high_theme_count: int,
) -> RootCategory:
    """Fixed priority chain; the first matching signal wins."""
    if (exit_value or "") in STOP_VALUES or flags.get("stop") or flags.get("pas_aide"):
        return RootCategory.SORTIE
    if energy == EnergyLevel.LOW or flags.get("high_distress"):
        return RootCategory.FATIGUE
    if flags.get("flou") or tone == "flou" or "flou" in posture:
        return RootCategory.FLOU
    if flags.get("protection") or PROTECTION_POSTURES.intersection(posture):
        return RootCategory.PROTECTION
    if (
        high_theme_count >= HIGH_THEMES_FOR_RESILIENCE
        or flags.get("resilience")
        or "effort" in posture
    ):
        return RootCategory.RESILIENCE
    return RootCategory.CLARIFICATION


def build_profile(
    answers: Mapping[str, Any],
    questionnaire: Optional[Questionnaire] = None,
) -> Profile:
    """
    Build the Profile for an answer set.

    Args:
        answers: block id -> Answer, raw option id, or list of ids
        questionnaire: scoring / set_vars source; the loaded default when None

    Returns:
        Profile (frozen)
    """
    if questionnaire is None:
        from vivario.content import get_loader
        questionnaire = get_loader().questionnaire

    answer_set: AnswerSet = coerce_answers(answers, questionnaire)

    by_role: Dict[BlockRole, List[Any]] = {}
    theme_labels: List[str] = []
    for block_id, answer in answer_set.items():
        role = _role_of(block_id, answer, questionnaire)
        if answer.is_empty:
            continue
        by_role.setdefault(role, []).extend(answer.values)
        if role == BlockRole.THEMES:
            theme_labels.extend(answer.labels)

    def first(role: BlockRole) -> Optional[str]:
        values = by_role.get(role) or []
        return str(values[0]) if values else None

    def listed(role: BlockRole) -> List[str]:
        seen: List[str] = []
        for v in by_role.get(role) or []:
            if str(v) not in seen:
                seen.append(str(v))
        return seen

    tone = first(BlockRole.TONE)
    themes = listed(BlockRole.THEMES)
    posture = listed(BlockRole.POSTURE)
    exit_value = first(BlockRole.EXIT)
    energy = detect_energy(answer_set, questionnaire)

    variables = apply_set_vars(answer_set, questionnaire)
    raw_flags = variables.get("flags") if isinstance(variables.get("flags"), dict) else {}

    intensity = theme_intensities(answer_set, questionnaire)
    high_count = sum(1 for n in intensity.values() if n >= HIGH_INTENSITY)

    answer_count = count_choice_values(answer_set, questionnaire)
    flags: Dict[str, bool] = {k: bool(v) for k, v in raw_flags.items()}
    flags["low_energy"] = energy == EnergyLevel.LOW
    flags["many_things"] = _has_many_things(themes, theme_labels, answer_count)

    root = derive_root(exit_value, energy, tone, posture, flags, high_count)
    scores = score_answers(answer_set, questionnaire, energy.value)

    profile = Profile(
        tone=tone,
        themes=themes,
        focus=choose_focus(themes),
        posture=posture,
        vecu=listed(BlockRole.VECU),
        besoins=listed(BlockRole.BESOIN),
        energy=energy,
        exit=exit_value,
        root=root,
        scores=scores,
        theme_intensity=intensity,
        high_theme_count=high_count,
        flags=flags,
        variables={k: v for k, v in variables.items() if k != "flags"},
        urgency=detect_urgency(answer_set),
        answer_count=answer_count,
    )
    logger.info(f"Profile built: root={root.value} energy={energy.value} focus={profile.focus}")
    return profile
