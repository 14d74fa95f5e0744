"""
Adaptive Flow Controller

Chooses the next questionnaire block.

Transition rule (evaluated on each "next"):
1. Urgency in any answer -> safety block, once
2. Nothing shown yet -> start block
3. Candidates: base order, then theme-derived domain blocks, then the rest
4. Filter: unshown, visible, no deep/long blocks on low energy
5. Sort: required desc, priority desc, id asc
6. First candidate, or finished
"""

import logging
from typing import Any, Iterable, List, Mapping, Optional

from vivario.errors import AnswerValidationError
from vivario.profile.builder import detect_energy
from vivario.profile.scoring import detect_urgency, score_answers
from vivario.questionnaire.models import (
    Answer,
    AnswerSet,
    Block,
    BlockType,
    Questionnaire,
    coerce_answers,
    raw_answers,
)
from vivario.rules import EvaluationContext, evaluate, to_number
from .models import (
    FlowState,
    FlowStep,
    HEAVY_TAGS,
    LOW_ENERGY_BLOCK_LIMIT,
    MEDIUM_ENERGY_BLOCK_LIMIT,
)

logger = logging.getLogger(__name__)

MSG_REQUIRED = "Prends un instant pour répondre avant de continuer."
MSG_EMPTY = "Choisis au moins une réponse pour continuer."
MSG_MIN = "Choisis au moins {min} réponse(s)."
MSG_MAX = "Choisis au maximum {max} réponse(s)."
MSG_SINGLE = "Choisis une seule réponse."
MSG_UNKNOWN_OPTION = "Cette réponse ne fait pas partie des choix proposés."
MSG_SCALE = "Indique une valeur entre {min:g} et {max:g}."
MSG_SCALE_STEP = "Choisis une valeur par pas de {step:g}."
MSG_UNKNOWN_BLOCK = "Cette question n'existe pas ou n'est pas affichée."

DEFAULT_DOMAIN = "core"


def selected_domains(answers: Mapping[str, Any], questionnaire: Questionnaire) -> List[str]:
    """
    Domains activated by the themes answer.

    Uses flow.themes_to_domains when configured, the theme ids otherwise.
    "core" when nothing is selected.
    """
    value = answers.get(questionnaire.flow.themes_block_id)
    if isinstance(value, Answer):
        themes = list(value.values)
    elif isinstance(value, (list, tuple)):
        themes = list(value)
    elif value:
        themes = [value]
    else:
        themes = []

    mapping = questionnaire.flow.themes_to_domains
    domains: List[str] = []
    for theme in themes:
        targets = mapping.get(str(theme), []) if mapping else [str(theme)]
        for d in targets:
            if d and d not in domains:
                domains.append(d)
    return domains or [DEFAULT_DOMAIN]


def _candidates(questionnaire: Questionnaire, domains: List[str]) -> Iterable[Block]:
    seen = set()
    safety_id = questionnaire.flow.safety_block_id

    ordered: List[Block] = []
    for block_id in questionnaire.flow.base:
        block = questionnaire.block(block_id)
        if block is not None:
            ordered.append(block)
    ordered.extend(b for b in questionnaire.blocks if b.domain and b.domain in domains)
    ordered.extend(questionnaire.blocks)

    for block in ordered:
        if block.id in seen or block.id == safety_id:
            continue
        seen.add(block.id)
        yield block


def pending_safety_block(
    questionnaire: Questionnaire,
    answers: Mapping[str, Any],
    shown: Iterable[str],
) -> Optional[Block]:
    """Safety block when urgency markers are present and it has not been shown yet."""
    if not detect_urgency(answers):
        return None
    safety = questionnaire.block(questionnaire.flow.safety_block_id or "")
    if safety is None or safety.id in set(shown):
        return None
    return safety


def next_block(
    questionnaire: Questionnaire,
    answers: Mapping[str, Any],
    shown: Iterable[str],
    energy: Optional[str] = None,
) -> Optional[Block]:
    """
    Next block to display, None when the questionnaire is finished.

    Args:
        questionnaire: loaded questionnaire
        answers: block id -> Answer or raw value
        shown: ids already displayed (history)
        energy: "low" | "medium" | "high"

    Returns:
        Block or None
    """
    shown_set = set(shown)
    answer_set = coerce_answers(answers, questionnaire)

    safety = pending_safety_block(questionnaire, answer_set, shown_set)
    if safety is not None:
        logger.warning(f"Routing to safety block {safety.id}")
        return safety

    if not shown_set:
        start_id = questionnaire.start_id
        start = questionnaire.block(start_id) if start_id else None
        if start is not None:
            return start

    ctx = EvaluationContext(
        answers=raw_answers(answer_set, questionnaire),
        scores=score_answers(answer_set, questionnaire, energy),
        energy=energy,
    )
    domains = selected_domains(answer_set, questionnaire)

    remaining = []
    for block in _candidates(questionnaire, domains):
        if block.id in shown_set:
            continue
        if not evaluate(block.show_if, ctx):
            continue
        if energy == "low" and HEAVY_TAGS.intersection(block.tags):
            continue
        remaining.append(block)

    if not remaining:
        return None

    remaining.sort(key=lambda b: (not b.required, -b.priority, b.id))
    return remaining[0]


def _as_values(values: Any) -> List[Any]:
    if isinstance(values, (list, tuple, set)):
        return [v for v in values if v is not None and v != ""]
    if values is None or values == "":
        return []
    return [values]


def validate_answer(block: Block, values: Any) -> Optional[str]:
    """
    Check an answer against its block.

    Returns:
        None when valid, otherwise the message to show
    """
    picked = _as_values(values)

    if not picked:
        if block.required:
            return MSG_REQUIRED
        return None

    if block.type == BlockType.SINGLE:
        if len(picked) > 1:
            return MSG_SINGLE
        if block.options and picked[0] not in block.option_ids:
            return MSG_UNKNOWN_OPTION

    elif block.type == BlockType.MULTI:
        if block.options and any(v not in block.option_ids for v in picked):
            return MSG_UNKNOWN_OPTION
        constraints = block.constraints
        if constraints is not None:
            if constraints.min is not None and len(picked) < constraints.min:
                return MSG_MIN.format(min=constraints.min)
            if constraints.max is not None and len(picked) > constraints.max:
                return MSG_MAX.format(max=constraints.max)

    elif block.type == BlockType.SCALE:
        n = to_number(picked[0])
        bounds = block.scale
        low = bounds.min if bounds else 0
        high = bounds.max if bounds else 10
        if n is None or n < low or n > high:
            return MSG_SCALE.format(min=low, max=high)
        step = bounds.step if bounds else 1
        offset = (n - low) / step
        if abs(offset - round(offset)) > 1e-9:
            return MSG_SCALE_STEP.format(step=step)

    return None


def should_stop_early(shown_count: int, energy: str) -> bool:
    if energy == "medium" and shown_count > MEDIUM_ENERGY_BLOCK_LIMIT:
        return True
    if energy == "low" and shown_count > LOW_ENERGY_BLOCK_LIMIT:
        return True
    return False


def progress(state: FlowState, questionnaire: Questionnaire) -> float:
    """Fraction of max_blocks displayed, 1.0 once finished."""
    if state.finished:
        return 1.0
    pct = min(100, round(len(state.shown) / questionnaire.flow.max_blocks * 100))
    return pct / 100


def _step(state: FlowState, questionnaire: Questionnaire) -> FlowStep:
    block = questionnaire.block(state.current) if state.current else None
    return FlowStep(
        state=state,
        block=block,
        finished=state.finished,
        progress=progress(state, questionnaire),
    )


def start(questionnaire: Questionnaire, answers: Optional[Mapping[str, Any]] = None) -> FlowStep:
    """Fresh session (optionally resumed with prior answers)."""
    answer_set = coerce_answers(answers, questionnaire)
    energy = detect_energy(answer_set, questionnaire).value
    first = next_block(questionnaire, answer_set, [], energy)
    state = FlowState(
        answers=answer_set,
        shown=[first.id] if first else [],
        energy=energy,
        finished=first is None,
    )
    return _step(state, questionnaire)


def advance(state: FlowState, questionnaire: Questionnaire, block_id: str, values: Any) -> FlowStep:
    """
    Record an answer for the current block and move forward.

    Raises:
        AnswerValidationError: the answer breaks the block's constraints;
            the given state stays untouched
    """
    block = questionnaire.block(block_id)
    if block is None or block_id != state.current:
        raise AnswerValidationError(block_id, MSG_UNKNOWN_BLOCK)

    message = validate_answer(block, values)
    if message:
        raise AnswerValidationError(block_id, message)

    answers: AnswerSet = dict(state.answers)
    answers[block_id] = Answer.from_raw(block_id, _as_values(values), block)
    energy = detect_energy(answers, questionnaire).value

    stop = should_stop_early(len(state.shown), energy)
    if stop and pending_safety_block(questionnaire, answers, state.shown) is None:
        logger.info(f"Early stop after {len(state.shown)} blocks (energy={energy})")
        nxt = None
    else:
        nxt = next_block(questionnaire, answers, state.shown, energy)

    new_state = state.model_copy(update={
        "answers": answers,
        "shown": state.shown + [nxt.id] if nxt else list(state.shown),
        "energy": energy,
        "finished": nxt is None,
    })
    return _step(new_state, questionnaire)


def go_back(state: FlowState, questionnaire: Questionnaire) -> FlowStep:
    """
    Pop the last shown block; answers are kept.

    A finished state goes back to its last block without popping.
    """
    if state.finished and state.shown:
        return _step(state.model_copy(update={"finished": False}), questionnaire)
    if len(state.shown) <= 1:
        return _step(state, questionnaire)
    return _step(state.model_copy(update={"shown": state.shown[:-1]}), questionnaire)
