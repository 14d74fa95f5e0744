"""
Profile Builder Tests

Tests validate:
- Role extraction and focus order
- Domain scoring (add / map / scale, normalization, clamping)
- Root category priority chain
- set_vars flags and theme intensity
- Many-things and urgency detection
"""

import pytest

from vivario.profile import (
    EnergyLevel,
    RootCategory,
    build_profile,
    choose_focus,
    derive_root,
    detect_urgency,
    energy_from_value,
    normalize_score,
    score_answers,
)
from vivario.questionnaire import Block, Questionnaire, coerce_answers


# ============================================================================
# Test Fixtures
# ============================================================================

def make_questionnaire(*blocks: dict) -> Questionnaire:
    """Helper to build a small in-memory questionnaire."""
    return Questionnaire(blocks=[Block(**b) for b in blocks])


SCORING_BLOCKS = (
    {
        "id": "tone",
        "role": "tone",
        "options": [{"id": "calme", "label": "Calme"}, {"id": "tendu", "label": "Tendu"}],
        "scoring": {"domain": "stress", "map": {"tendu": 4}, "add": {"global": 0.5}},
    },
    {
        "id": "themes",
        "role": "themes",
        "type": "multi",
        "options": [{"id": "travail", "label": "Travail"}, {"id": "sante", "label": "Santé"}],
        "scoring": {"domain": "stress", "map": {"travail": 3, "sante": 2}},
    },
    {
        "id": "charge",
        "type": "scale",
        "scoring": {"domain": "stress", "scale": {"factor": 2}},
    },
    {
        "id": "nuit",
        "options": [{"id": "mal", "label": "Mal"}],
        "scoring": {
            "domain": "sommeil",
            "map": {"mal": 3},
            "when": {"energy": {"is": "low"}},
        },
    },
)


# ============================================================================
# Low-energy work and money example
# ============================================================================

class TestFatigueExample:
    """charge + travail/finances + fatigue posture + faible energy."""

    def test_root_is_fatigue(self, fatigue_answers, questionnaire):
        profile = build_profile(fatigue_answers, questionnaire)
        assert profile.root == RootCategory.FATIGUE

    def test_focus_order_preserved(self, fatigue_answers, questionnaire):
        profile = build_profile(fatigue_answers, questionnaire)
        assert profile.focus == ["travail", "finances"]

    def test_energy_low(self, fatigue_answers, questionnaire):
        profile = build_profile(fatigue_answers, questionnaire)
        assert profile.energy == EnergyLevel.LOW
        assert profile.low_energy is True
        assert profile.many_things is False

    def test_scores(self, fatigue_answers, questionnaire):
        profile = build_profile(fatigue_answers, questionnaire)
        assert profile.scores["stress"] == 50
        assert profile.scores["fatigue"] == 70
        assert profile.scores["humeur"] == 0
        assert profile.top_domains(2) == ["fatigue", "stress"]

    def test_uses_loaded_questionnaire_by_default(self, fatigue_answers):
        assert build_profile(fatigue_answers).root == RootCategory.FATIGUE


# ============================================================================
# Scoring
# ============================================================================

class TestScoring:

    def test_normalize_score(self):
        assert normalize_score(0) == 0
        assert normalize_score(4.45) == 45
        assert normalize_score(4.25) == 43
        assert normalize_score(0.05) == 1
        assert normalize_score(25) == 100
        assert normalize_score(-3) == 0

    def test_every_declared_domain_present(self):
        q = make_questionnaire(*SCORING_BLOCKS)
        scores = score_answers({}, q)
        assert scores == {"stress": 0, "global": 0, "sommeil": 0}

    def test_map_add_and_scale(self):
        q = make_questionnaire(*SCORING_BLOCKS)
        answers = coerce_answers({"tone": "tendu", "themes": ["travail"], "charge": 1}, q)
        scores = score_answers(answers, q)
        assert scores["stress"] == 90
        assert scores["global"] == 5

    def test_clamped_at_100(self):
        q = make_questionnaire(*SCORING_BLOCKS)
        answers = coerce_answers({"tone": "tendu", "themes": ["travail"], "charge": 10}, q)
        assert score_answers(answers, q)["stress"] == 100

    def test_unanswered_block_adds_nothing(self):
        q = make_questionnaire(*SCORING_BLOCKS)
        answers = coerce_answers({"tone": ""}, q)
        assert score_answers(answers, q)["global"] == 0

    def test_when_condition_gates_rule(self):
        q = make_questionnaire(*SCORING_BLOCKS)
        answers = coerce_answers({"nuit": "mal"}, q)
        assert score_answers(answers, q, "medium")["sommeil"] == 0
        assert score_answers(answers, q, "low")["sommeil"] == 30

    def test_scores_in_range_for_real_answers(self, questionnaire):
        answers = {
            "tone": "tendu",
            "themes": ["travail", "finances", "multiple"],
            "energie": "faible",
            "posture": ["fatigue", "tenir"],
            "p5_travail_intensity": 4,
            "p5_finances_intensity": 4,
            "charge_mentale": 10,
            "detresse": "tout_le_temps",
        }
        profile = build_profile(answers, questionnaire)
        assert profile.scores
        for score in profile.scores.values():
            assert 0 <= score <= 100

    def test_empty_answers_all_zero(self, questionnaire):
        profile = build_profile({}, questionnaire)
        assert set(profile.scores) == questionnaire.declared_domains()
        assert all(s == 0 for s in profile.scores.values())


# ============================================================================
# Root category
# ============================================================================

class TestRootCategory:

    def test_sortie_wins_over_everything(self, questionnaire):
        answers = {
            "tone": "flou",
            "energie": "faible",
            "posture": ["retrait", "effort"],
            "detresse": "tout_le_temps",
            "suite": "stop",
        }
        assert build_profile(answers, questionnaire).root == RootCategory.SORTIE

    def test_pas_aide_is_sortie(self, questionnaire):
        answers = {"tone": "calme", "energie": "haute", "suite": "pas_aide"}
        assert build_profile(answers, questionnaire).root == RootCategory.SORTIE

    def test_continuer_is_not_sortie(self, questionnaire):
        answers = {"tone": "calme", "energie": "haute", "suite": "continuer"}
        assert build_profile(answers, questionnaire).root == RootCategory.CLARIFICATION

    def test_high_distress_is_fatigue(self, questionnaire):
        answers = {"tone": "calme", "energie": "haute", "detresse": "souvent"}
        profile = build_profile(answers, questionnaire)
        assert profile.flags["high_distress"] is True
        assert profile.root == RootCategory.FATIGUE

    def test_flou_from_tone(self, questionnaire):
        answers = {"tone": "flou", "energie": "moyenne"}
        assert build_profile(answers, questionnaire).root == RootCategory.FLOU

    def test_flou_from_set_vars(self, questionnaire):
        answers = {"tone": "calme", "energie": "moyenne", "clarte_objectif": "aucun"}
        assert build_profile(answers, questionnaire).root == RootCategory.FLOU

    def test_protection(self, questionnaire):
        answers = {"tone": "tendu", "energie": "moyenne", "posture": ["retrait"]}
        assert build_profile(answers, questionnaire).root == RootCategory.PROTECTION

    def test_resilience_from_effort(self, questionnaire):
        answers = {"tone": "motive", "energie": "haute", "posture": ["effort"]}
        assert build_profile(answers, questionnaire).root == RootCategory.RESILIENCE

    def test_resilience_from_two_high_themes(self, questionnaire):
        answers = {
            "tone": "calme",
            "energie": "moyenne",
            "themes": ["travail", "finances"],
            "posture": ["tenir"],
            "p5_travail_intensity": 4,
            "p5_finances_intensity": 3,
        }
        profile = build_profile(answers, questionnaire)
        assert profile.theme_intensity == {"travail": 4.0, "finances": 3.0}
        assert profile.high_theme_count == 2
        assert profile.root == RootCategory.RESILIENCE

    def test_default_clarification(self, questionnaire):
        answers = {"tone": "calme", "energie": "haute", "themes": ["sante"], "posture": ["tenir"]}
        assert build_profile(answers, questionnaire).root == RootCategory.CLARIFICATION

    @pytest.mark.parametrize("energy", list(EnergyLevel))
    def test_exit_signal_beats_any_energy(self, energy):
        root = derive_root("stop", energy, "flou", ["protection"], {"high_distress": True}, 5)
        assert root == RootCategory.SORTIE


# ============================================================================
# Roles, focus, flags
# ============================================================================

class TestRolesAndFlags:

    def test_multiple_promoted_in_focus(self):
        assert choose_focus(["travail", "sante", "multiple"]) == ["multiple", "travail"]

    def test_focus_at_most_two(self):
        assert choose_focus(["a", "b", "c"]) == ["a", "b"]

    def test_many_things_from_multiple_id(self, questionnaire):
        profile = build_profile({"themes": ["multiple", "travail"]}, questionnaire)
        assert profile.many_things is True
        assert profile.focus == ["multiple", "travail"]

    def test_many_things_from_label(self):
        q = make_questionnaire({
            "id": "themes",
            "role": "themes",
            "type": "multi",
            "options": [{"id": "mix", "label": "Plusieurs choses à la fois"}],
        })
        assert build_profile({"themes": ["mix"]}, q).many_things is True

    def test_many_things_from_answer_count(self, questionnaire):
        answers = {
            "tone": "charge",
            "themes": ["travail", "finances", "sante"],
            "energie": "moyenne",
            "posture": ["effort", "tenir"],
            "vecu": ["pression", "surcharge"],
            "besoin": ["repos"],
        }
        assert build_profile(answers, questionnaire).many_things is True

    def test_roles_without_questionnaire_blocks(self):
        profile = build_profile({"tone": "calme", "energie": "faible", "besoins": ["repos"]}, Questionnaire())
        assert profile.tone == "calme"
        assert profile.energy == EnergyLevel.LOW
        assert profile.besoins == ["repos"]
        assert profile.scores == {}

    def test_multi_roles_keep_lists(self, questionnaire):
        answers = {"posture": ["effort", "tenir"], "vecu": ["perte"], "besoin": ["sens", "elan"]}
        profile = build_profile(answers, questionnaire)
        assert profile.posture == ["effort", "tenir"]
        assert profile.vecu == ["perte"]
        assert profile.besoins == ["sens", "elan"]

    @pytest.mark.parametrize("value,expected", [
        ("faible", EnergyLevel.LOW),
        ("Moyenne", EnergyLevel.MEDIUM),
        ("haute", EnergyLevel.HIGH),
        ("high", EnergyLevel.HIGH),
        ("??", EnergyLevel.MEDIUM),
        (None, EnergyLevel.MEDIUM),
    ])
    def test_energy_from_value(self, value, expected):
        assert energy_from_value(value) == expected

    def test_missing_energy_defaults_medium(self, questionnaire):
        assert build_profile({"tone": "calme"}, questionnaire).energy == EnergyLevel.MEDIUM

    def test_profile_is_frozen(self, fatigue_answers, questionnaire):
        profile = build_profile(fatigue_answers, questionnaire)
        with pytest.raises(Exception):
            profile.tone = "calme"


# ============================================================================
# Urgency
# ============================================================================

class TestUrgency:

    def test_self_harm_option(self, questionnaire):
        profile = build_profile({"securite": "self_harm"}, questionnaire)
        assert profile.urgency == ["self_harm"]
        assert profile.urgent is True

    def test_danger_option(self, questionnaire):
        assert build_profile({"securite": "danger"}, questionnaire).urgency == ["danger"]

    def test_safe_answers_not_urgent(self, fatigue_answers, questionnaire):
        assert build_profile(fatigue_answers, questionnaire).urgent is False

    def test_safe_security_answer(self, questionnaire):
        assert build_profile({"securite": "ok"}, questionnaire).urgency == []

    def test_raw_values_and_keys(self):
        assert detect_urgency({"q": "suicide"}) == ["self_harm"]
        assert detect_urgency({"self_harm_check": "oui"}) == ["self_harm"]
        assert detect_urgency({"q": ["violence", "me faire du mal"]}) == ["danger", "self_harm"]
        assert detect_urgency({"q": "calme"}) == []

    def test_label_is_scanned(self, questionnaire):
        answers = coerce_answers({"securite": "self_harm"}, questionnaire)
        assert "me faire du mal" in answers["securite"].labels[0]
        assert detect_urgency(answers) == ["self_harm"]
