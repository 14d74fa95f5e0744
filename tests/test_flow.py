"""
Adaptive Flow Controller Tests

Tests validate:
- Start block and transition order
- Safety block routing on urgency markers (once)
- Visibility and low-energy filtering
- Answer validation messages
- advance / go_back state handling
- Early stop and progress
"""

from typing import Any, Dict, List

import pytest

from vivario.errors import AnswerValidationError
from vivario.flow import (
    FlowState,
    HEAVY_TAGS,
    advance,
    go_back,
    next_block,
    progress,
    selected_domains,
    should_stop_early,
    start,
    validate_answer,
)
from vivario.flow.controller import (
    MSG_MAX,
    MSG_REQUIRED,
    MSG_SCALE,
    MSG_SCALE_STEP,
    MSG_SINGLE,
    MSG_UNKNOWN_OPTION,
)
from vivario.questionnaire import Block, BlockType, Questionnaire, coerce_answers, raw_answers
from vivario.rules import EvaluationContext, evaluate


# ============================================================================
# Test Fixtures
# ============================================================================

def default_value(block: Block) -> Any:
    """Helper: a valid answer for any block."""
    if block.type == BlockType.MULTI:
        return [block.options[0].id]
    if block.type == BlockType.SCALE:
        if block.scale is None:
            return 0
        return int((block.scale.min + block.scale.max) // 2)
    if block.type == BlockType.TEXT:
        return "texte"
    return block.options[0].id


def walk(questionnaire: Questionnaire, answers: Dict[str, Any], energy: str, limit: int = 40) -> List[Block]:
    """Drive next_block until finished, answering with fixed values where given."""
    shown: List[str] = []
    seen: List[Block] = []
    answers = dict(answers)
    for _ in range(limit):
        block = next_block(questionnaire, answers, shown, energy)
        if block is None:
            break
        seen.append(block)
        shown.append(block.id)
        answers.setdefault(block.id, default_value(block))
    return seen


# ============================================================================
# Transitions
# ============================================================================

class TestNextBlock:

    def test_start_block_first(self, questionnaire):
        block = next_block(questionnaire, {}, [], "medium")
        assert block.id == "tone"

    def test_required_blocks_come_first(self, questionnaire):
        block = next_block(questionnaire, {"tone": "charge"}, ["tone"], "medium")
        assert block.id == "themes"

    def test_order_by_priority(self, questionnaire):
        answers = {"tone": "charge", "themes": ["travail"], "energie": "moyenne"}
        block = next_block(questionnaire, answers, ["tone", "themes", "energie"], "medium")
        assert block.id == "posture"

    def test_never_returns_shown_block(self, questionnaire):
        seen = walk(questionnaire, {}, "medium")
        ids = [b.id for b in seen]
        assert len(ids) == len(set(ids))

    def test_never_returns_hidden_block(self, questionnaire):
        answers = {"themes": ["sante"]}
        shown: List[str] = []
        for _ in range(40):
            block = next_block(questionnaire, answers, shown, "medium")
            if block is None:
                break
            answer_set = coerce_answers(answers, questionnaire)
            ctx = EvaluationContext(answers=raw_answers(answer_set, questionnaire), energy="medium")
            if block.show_if and "score" not in str(block.show_if):
                assert evaluate(block.show_if, ctx)
            shown.append(block.id)
            answers.setdefault(block.id, default_value(block))
        assert "p5_travail_intensity" not in shown
        assert "p5_sante_intensity" in shown

    def test_finishes(self, questionnaire):
        seen = walk(questionnaire, {}, "medium")
        assert 0 < len(seen) <= len(questionnaire.blocks)
        assert seen[-1].id == "suite"

    def test_low_energy_skips_heavy_blocks(self, questionnaire):
        seen = walk(questionnaire, {"energie": "faible"}, "low")
        assert seen
        for block in seen:
            assert not HEAVY_TAGS.intersection(block.tags)

    def test_medium_energy_keeps_heavy_blocks(self, questionnaire):
        ids = [b.id for b in walk(questionnaire, {}, "medium")]
        assert "detresse" in ids

    def test_safety_block_not_a_regular_candidate(self, questionnaire):
        ids = [b.id for b in walk(questionnaire, {}, "medium")]
        assert questionnaire.flow.safety_block_id not in ids


class TestUrgencyRouting:

    def test_self_harm_routes_to_safety(self, questionnaire):
        answers = {"tone": "charge", "securite": "self_harm"}
        block = next_block(questionnaire, answers, ["tone", "securite"], "medium")
        assert block.id == "urgent_support"

    def test_overrides_start(self, questionnaire):
        block = next_block(questionnaire, {"note": "danger"}, [], "medium")
        assert block.id == "urgent_support"

    def test_safety_shown_once(self, questionnaire):
        answers = {"tone": "charge", "securite": "danger"}
        block = next_block(questionnaire, answers, ["tone", "securite", "urgent_support"], "medium")
        assert block is not None
        assert block.id != "urgent_support"

    def test_no_safety_block_configured(self):
        q = Questionnaire(
            blocks=[Block(id="a", options=[{"id": "x", "label": "X"}])],
            flow={"start": "a", "safety_block_id": None},
        )
        assert next_block(q, {"a": "self_harm"}, [], "medium").id == "a"


class TestSelectedDomains:

    def test_mapped_domains(self, questionnaire):
        assert selected_domains({"themes": ["travail", "sante"]}, questionnaire) == [
            "travail", "stress", "sante", "anxiete",
        ]

    def test_default_core(self, questionnaire):
        assert selected_domains({}, questionnaire) == ["core"]

    def test_theme_ids_without_mapping(self):
        q = Questionnaire(blocks=[Block(id="themes", role="themes", type="multi")])
        assert selected_domains({"themes": ["famille"]}, q) == ["famille"]


# ============================================================================
# Validation
# ============================================================================

class TestValidateAnswer:

    def test_required_empty(self, questionnaire):
        assert validate_answer(questionnaire.block("themes"), []) == MSG_REQUIRED

    def test_optional_empty_is_valid(self, questionnaire):
        assert validate_answer(questionnaire.block("vecu"), []) is None

    def test_too_many(self, questionnaire):
        values = ["travail", "finances", "sante", "sommeil"]
        assert validate_answer(questionnaire.block("themes"), values) == MSG_MAX.format(max=3)

    def test_min_constraint(self):
        block = Block(
            id="b",
            type="multi",
            options=[{"id": "a", "label": "A"}, {"id": "b", "label": "B"}],
            constraints={"min": 2},
        )
        assert validate_answer(block, ["a"]) == "Choisis au moins 2 réponse(s)."

    def test_unknown_option(self, questionnaire):
        assert validate_answer(questionnaire.block("tone"), "inconnu") == MSG_UNKNOWN_OPTION
        assert validate_answer(questionnaire.block("themes"), ["inconnu"]) == MSG_UNKNOWN_OPTION

    def test_single_with_two_values(self, questionnaire):
        assert validate_answer(questionnaire.block("tone"), ["calme", "tendu"]) == MSG_SINGLE

    def test_scale_bounds(self, questionnaire):
        block = questionnaire.block("p5_travail_intensity")
        assert validate_answer(block, 3) is None
        assert validate_answer(block, 7) == MSG_SCALE.format(min=0, max=4)
        assert validate_answer(block, "beaucoup") == MSG_SCALE.format(min=0, max=4)

    def test_scale_step(self, questionnaire):
        assert validate_answer(questionnaire.block("p5_travail_intensity"), 2.5) == MSG_SCALE_STEP.format(step=1)
        block = Block(id="s", type="scale", scale={"min": 0, "max": 10, "step": 2})
        assert validate_answer(block, 4) is None
        assert validate_answer(block, 3) == "Choisis une valeur par pas de 2."

    def test_valid(self, questionnaire):
        assert validate_answer(questionnaire.block("themes"), ["travail", "finances"]) is None


# ============================================================================
# Session state
# ============================================================================

class TestSession:

    def test_start(self, questionnaire):
        step = start(questionnaire)
        assert step.block.id == "tone"
        assert step.state.shown == ["tone"]
        assert step.finished is False

    def test_advance(self, questionnaire):
        step = start(questionnaire)
        nxt = advance(step.state, questionnaire, "tone", "charge")
        assert nxt.block.id == "themes"
        assert nxt.state.shown == ["tone", "themes"]
        assert nxt.state.answers["tone"].labels == ["Chargé·e, avec beaucoup à porter"]
        assert step.state.shown == ["tone"]

    def test_advance_invalid_keeps_state(self, questionnaire):
        step = advance(start(questionnaire).state, questionnaire, "tone", "charge")
        with pytest.raises(AnswerValidationError) as exc:
            advance(step.state, questionnaire, "themes", [])
        assert exc.value.message == MSG_REQUIRED
        assert exc.value.block_id == "themes"
        assert "themes" not in step.state.answers

    def test_advance_wrong_block(self, questionnaire):
        state = start(questionnaire).state
        with pytest.raises(AnswerValidationError):
            advance(state, questionnaire, "themes", ["travail"])

    def test_energy_tracked(self, questionnaire):
        state = start(questionnaire).state
        state = advance(state, questionnaire, "tone", "charge").state
        state = advance(state, questionnaire, "themes", ["travail"]).state
        step = advance(state, questionnaire, "energie", "faible")
        assert step.state.energy == "low"

    def test_go_back_keeps_answers(self, questionnaire):
        state = start(questionnaire).state
        state = advance(state, questionnaire, "tone", "charge").state
        back = go_back(state, questionnaire)
        assert back.block.id == "tone"
        assert back.state.shown == ["tone"]
        assert back.state.answers["tone"].values == ["charge"]

    def test_go_back_at_start_is_noop(self, questionnaire):
        state = start(questionnaire).state
        assert go_back(state, questionnaire).state.shown == ["tone"]

    def test_go_back_from_finished(self, questionnaire):
        state = FlowState(shown=["tone", "suite"], finished=True)
        back = go_back(state, questionnaire)
        assert back.finished is False
        assert back.block.id == "suite"

    def test_full_session_finishes(self, questionnaire):
        step = start(questionnaire)
        for _ in range(40):
            if step.finished:
                break
            step = advance(step.state, questionnaire, step.block.id, default_value(step.block))
        assert step.finished is True
        assert step.progress == 1.0
        assert step.block is None

    def test_self_harm_answer_routes_to_safety(self, questionnaire):
        state = FlowState(shown=["tone", "themes", "energie", "posture", "securite"])
        step = advance(state, questionnaire, "securite", "self_harm")
        assert step.block.id == "urgent_support"


class TestEarlyStopAndProgress:

    @pytest.mark.parametrize("count,energy,expected", [
        (8, "low", False),
        (9, "low", True),
        (14, "medium", False),
        (15, "medium", True),
        (30, "high", False),
    ])
    def test_should_stop_early(self, count, energy, expected):
        assert should_stop_early(count, energy) is expected

    def test_progress_fraction(self, questionnaire):
        state = FlowState(shown=["tone"] * 7)
        assert progress(state, questionnaire) == 0.5

    def test_progress_capped(self, questionnaire):
        state = FlowState(shown=["tone"] * 40)
        assert progress(state, questionnaire) == 1.0

    def test_low_energy_session_stops_early(self, questionnaire):
        step = start(questionnaire)
        for _ in range(40):
            if step.finished:
                break
            block = step.block
            value = "faible" if block.id == "energie" else default_value(block)
            step = advance(step.state, questionnaire, block.id, value)
        assert step.finished is True
        assert len(step.state.shown) <= 9

    def test_urgency_beats_early_stop(self, questionnaire):
        shown = ["tone", "themes", "energie", "posture", "vecu", "besoin",
                 "soutien_social", "p5_travail_intensity", "securite"]
        state = FlowState(
            answers=coerce_answers({"energie": "faible"}, questionnaire),
            shown=shown,
            energy="low",
        )
        step = advance(state, questionnaire, "securite", "self_harm")
        assert step.finished is False
        assert step.block.id == "urgent_support"

        after = advance(step.state, questionnaire, "urgent_support", "appel")
        assert after.finished is True
