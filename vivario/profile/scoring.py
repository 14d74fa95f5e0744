"""
Domain scoring and urgency detection.

Raw totals accumulate per domain, then each total is normalized with
clamp(round_half_up(total * 10), 0, 100).
"""

import logging
import math
from typing import Any, Dict, List, Mapping, Optional

from vivario.questionnaire.models import Answer, BlockType, Questionnaire, raw_answers
from vivario.rules import EvaluationContext, evaluate, to_number

logger = logging.getLogger(__name__)

SCORE_MULTIPLIER = 10
SCORE_MIN = 0
SCORE_MAX = 100

SELF_HARM_MARKERS = ("self_harm", "suicide", "me faire du mal")
DANGER_MARKERS = ("violence", "danger", "urgence")


def round_half_up(value: float) -> int:
    return int(math.floor(value + 0.5))


def normalize_score(total: float) -> int:
    return max(SCORE_MIN, min(SCORE_MAX, round_half_up(total * SCORE_MULTIPLIER)))


def _block_contribution(block, answer: Answer) -> Dict[str, float]:
    rule = block.scoring
    out: Dict[str, float] = {}

    for domain, points in rule.add.items():
        n = to_number(points)
        if n is not None:
            out[domain] = out.get(domain, 0.0) + n

    if rule.domain and rule.map:
        if block.type == BlockType.SINGLE:
            picked = [answer.first]
        elif block.type == BlockType.MULTI:
            picked = list(answer.values)
        else:
            picked = []
        total = sum(to_number(rule.map.get(str(v), 0)) or 0.0 for v in picked)
        out[rule.domain] = out.get(rule.domain, 0.0) + total

    if rule.domain and rule.scale is not None:
        n = to_number(answer.first)
        if n is not None:
            out[rule.domain] = out.get(rule.domain, 0.0) + n * rule.scale.factor

    return out


def raw_domain_totals(
    answers: Mapping[str, Answer],
    questionnaire: Questionnaire,
    energy: Optional[str] = None,
) -> Dict[str, float]:
    """Un-normalized per-domain sums; every declared domain starts at 0."""
    totals: Dict[str, float] = {d: 0.0 for d in questionnaire.declared_domains()}
    ctx = EvaluationContext(answers=raw_answers(answers, questionnaire), energy=energy)

    for block in questionnaire.blocks:
        if block.scoring is None:
            continue
        answer = answers.get(block.id)
        if answer is None or answer.is_empty:
            continue
        if not evaluate(block.scoring.when, ctx):
            continue
        for domain, points in _block_contribution(block, answer).items():
            totals[domain] = totals.get(domain, 0.0) + points

    return totals


def score_answers(
    answers: Mapping[str, Answer],
    questionnaire: Questionnaire,
    energy: Optional[str] = None,
) -> Dict[str, int]:
    """
    Normalized domain scores (0..100).

    Args:
        answers: block id -> Answer
        questionnaire: provides scoring rules and declared domains
        energy: current energy level, visible to `when` conditions

    Returns:
        Dict of domain -> int score
    """
    totals = raw_domain_totals(answers, questionnaire, energy)
    scores = {domain: normalize_score(total) for domain, total in totals.items()}
    logger.debug(f"Scored {len(answers)} answers into {len(scores)} domains")
    return scores


def _flatten(value: Any) -> str:
    if isinstance(value, (list, tuple, set)):
        return ",".join(str(v) for v in value)
    return "" if value is None else str(value)


def detect_urgency(answers: Mapping[str, Any]) -> List[str]:
    """
    Safety markers found in answers, sorted.

    Both keys and values are scanned; values are raw ids, labels are
    scanned too when Answer objects are given.
    """
    flags = set()
    for key, value in (answers or {}).items():
        low_key = str(key).lower()
        if isinstance(value, Answer):
            text = _flatten(value.values) + "," + _flatten(value.labels)
        else:
            text = _flatten(value)
        low_value = text.lower()

        if "self" in low_key and "harm" in low_key:
            flags.add("self_harm")
        if any(marker in low_value for marker in SELF_HARM_MARKERS):
            flags.add("self_harm")
        if any(marker in low_value for marker in DANGER_MARKERS):
            flags.add("danger")

    if flags:
        logger.warning(f"Urgency markers detected: {sorted(flags)}")
    return sorted(flags)
