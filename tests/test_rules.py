"""
Condition Evaluator Tests

Tests validate:
- Absent / literal conditions
- Composite nodes (all, any, not)
- Every leaf kind in both syntaxes
- Fail-open on unknown nodes, fail-closed on non-numeric comparisons
- Var path resolution
"""

import pytest

from vivario.rules import EvaluationContext, evaluate, is_answered, to_number


# ============================================================================
# Test Fixtures
# ============================================================================

def make_context(**answers) -> EvaluationContext:
    """Helper to create a context with scores, energy and variables."""
    return EvaluationContext(
        answers=answers,
        scores={"stress": 55, "sommeil": 0},
        energy="low",
        variables={"flags": {"stop": True}, "level": 3},
    )


@pytest.fixture
def ctx():
    return make_context(
        tone="charge",
        themes=["travail", "finances"],
        p5_travail_intensity=4,
        note="je dors mal",
        vide="",
    )


# ============================================================================
# Defaults
# ============================================================================

class TestDefaults:
    """Absence of a rule never hides anything."""

    def test_none_is_true(self, ctx):
        assert evaluate(None, ctx) is True

    def test_empty_dict_is_true(self, ctx):
        assert evaluate({}, ctx) is True

    def test_literal_bools(self, ctx):
        assert evaluate(True, ctx) is True
        assert evaluate(False, ctx) is False

    def test_literal_false_inside_composite(self, ctx):
        assert evaluate({"all": [True, False]}, ctx) is False
        assert evaluate({"not": False}, ctx) is True

    def test_unknown_node_is_true(self, ctx):
        assert evaluate({"mystery": {"id": "tone"}}, ctx) is True

    def test_no_context_uses_empty_one(self):
        assert evaluate({"answered": {"id": "tone"}}) is False


# ============================================================================
# Composite nodes
# ============================================================================

class TestComposite:

    def test_all(self, ctx):
        cond = {"all": [
            {"eq": {"id": "tone", "value": "charge"}},
            {"includes": {"id": "themes", "value": "travail"}},
        ]}
        assert evaluate(cond, ctx) is True

    def test_all_one_false(self, ctx):
        cond = {"all": [
            {"eq": {"id": "tone", "value": "charge"}},
            {"includes": {"id": "themes", "value": "sante"}},
        ]}
        assert evaluate(cond, ctx) is False

    def test_empty_all_is_true(self, ctx):
        assert evaluate({"all": []}, ctx) is True

    def test_any(self, ctx):
        cond = {"any": [
            {"eq": {"id": "tone", "value": "calme"}},
            {"energy": {"is": "low"}},
        ]}
        assert evaluate(cond, ctx) is True

    def test_empty_any_is_false(self, ctx):
        assert evaluate({"any": []}, ctx) is False

    def test_not(self, ctx):
        assert evaluate({"not": {"energy": {"is": "low"}}}, ctx) is False
        assert evaluate({"not": {"energy": {"is": "high"}}}, ctx) is True

    def test_nested(self, ctx):
        cond = {"all": [
            {"answered": {"id": "themes"}},
            {"not": {"any": [
                {"eq": {"id": "tone", "value": "calme"}},
                {"eq": {"id": "tone", "value": "vide"}},
            ]}},
        ]}
        assert evaluate(cond, ctx) is True


# ============================================================================
# Leaves
# ============================================================================

class TestLeaves:

    def test_eq_neq(self, ctx):
        assert evaluate({"eq": {"id": "tone", "value": "charge"}}, ctx) is True
        assert evaluate({"neq": {"id": "tone", "value": "charge"}}, ctx) is False

    def test_includes_list(self, ctx):
        assert evaluate({"includes": {"id": "themes", "value": "finances"}}, ctx) is True
        assert evaluate({"includes": {"id": "themes", "value": "sante"}}, ctx) is False

    def test_includes_substring(self, ctx):
        assert evaluate({"includes": {"id": "note", "value": "dors"}}, ctx) is True

    def test_includes_missing_answer(self, ctx):
        assert evaluate({"includes": {"id": "absent", "value": "x"}}, ctx) is False

    def test_in(self, ctx):
        assert evaluate({"in": {"id": "tone", "values": ["charge", "tendu"]}}, ctx) is True
        assert evaluate({"in": {"id": "tone", "values": ["calme"]}}, ctx) is False

    def test_in_with_list_answer(self, ctx):
        assert evaluate({"in": {"id": "themes", "values": ["sante", "finances"]}}, ctx) is True

    def test_answered(self, ctx):
        assert evaluate({"answered": {"id": "tone"}}, ctx) is True
        assert evaluate({"answered": {"id": "vide"}}, ctx) is False
        assert evaluate({"answered": {"id": "absent"}}, ctx) is False

    def test_gte_lte(self, ctx):
        assert evaluate({"gte": {"id": "p5_travail_intensity", "value": 3}}, ctx) is True
        assert evaluate({"lte": {"id": "p5_travail_intensity", "value": 3}}, ctx) is False

    def test_num(self, ctx):
        assert evaluate({"num": {"id": "p5_travail_intensity", "op": ">", "value": 3}}, ctx) is True
        assert evaluate({"num": {"id": "p5_travail_intensity", "op": "==", "value": 4}}, ctx) is True

    def test_num_unknown_operator_is_false(self, ctx):
        assert evaluate({"num": {"id": "p5_travail_intensity", "op": "~", "value": 4}}, ctx) is False

    def test_numeric_fails_closed_on_text(self, ctx):
        assert evaluate({"gte": {"id": "tone", "value": 1}}, ctx) is False
        assert evaluate({"num": {"id": "absent", "op": "<", "value": 100}}, ctx) is False

    def test_score(self, ctx):
        assert evaluate({"score": {"domain": "stress", "op": ">=", "value": 45}}, ctx) is True
        assert evaluate({"score": {"domain": "stress", "op": ">=", "value": 75}}, ctx) is False

    def test_unscored_domain_reads_zero(self, ctx):
        assert evaluate({"score": {"domain": "relation", "op": "==", "value": 0}}, ctx) is True

    def test_energy(self, ctx):
        assert evaluate({"energy": {"is": "low"}}, ctx) is True
        assert evaluate({"energy": {"is": "medium"}}, ctx) is False


# ============================================================================
# Var syntax
# ============================================================================

class TestVarSyntax:

    def test_answers_path(self, ctx):
        assert evaluate({"var": "answers.tone", "eq": "charge"}, ctx) is True

    def test_bare_answer_id(self, ctx):
        assert evaluate({"var": "tone", "neq": "calme"}, ctx) is True

    def test_scores_path(self, ctx):
        assert evaluate({"var": "scores.stress", "gte": 45}, ctx) is True
        assert evaluate({"var": "scores.stress", "lte": 45}, ctx) is False

    def test_vars_path(self, ctx):
        assert evaluate({"var": "vars.flags.stop", "eq": True}, ctx) is True
        assert evaluate({"var": "vars.level", "gte": 3}, ctx) is True

    def test_vars_missing_path(self, ctx):
        assert evaluate({"var": "vars.flags.nope", "answered": True}, ctx) is False

    def test_energy_path(self, ctx):
        assert evaluate({"var": "energy", "in": ["low", "medium"]}, ctx) is True

    def test_includes(self, ctx):
        assert evaluate({"var": "answers.themes", "includes": "travail"}, ctx) is True

    def test_var_without_operator_is_true(self, ctx):
        assert evaluate({"var": "answers.tone"}, ctx) is True

    def test_var_inside_composite(self, ctx):
        cond = {"any": [
            {"var": "scores.sommeil", "gte": 20},
            {"var": "answers.themes", "includes": "finances"},
        ]}
        assert evaluate(cond, ctx) is True


# ============================================================================
# Helpers
# ============================================================================

class TestHelpers:

    @pytest.mark.parametrize("value,expected", [
        (3, 3.0),
        ("2.5", 2.5),
        ("2,5", 2.5),
        (" 7 ", 7.0),
        ("abc", None),
        (None, None),
        (True, None),
        (float("nan"), None),
        ([1], None),
    ])
    def test_to_number(self, value, expected):
        assert to_number(value) == expected

    def test_is_answered(self):
        assert is_answered("x") is True
        assert is_answered(0) is True
        assert is_answered([]) is False
        assert is_answered("") is False
        assert is_answered(None) is False
