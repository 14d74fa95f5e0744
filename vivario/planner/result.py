"""
Result payload assembly.

One call turns a finished questionnaire into the stored result: scores,
profile, diagnostic, daily plan, weekly plan and disclaimer.
"""

import logging
from datetime import date
from typing import Any, Iterable, Mapping, Optional, Union

from vivario.profile import build_profile
from vivario.questionnaire.models import Questionnaire, coerce_answers, raw_answers
from vivario.selection import stable_seed
from vivario.shared import canonicalize, canonicalize_and_hash, choose_disclaimer
from .adherence import compute_adherence
from .diagnostic import generate_diagnostic
from .models import ModuleLibrary, PlanOptions, ResultPayload
from .plan import build_daily_plan, build_plan

logger = logging.getLogger(__name__)


def result_seed(version: str, answers: Mapping[str, Any]) -> int:
    """Seed from questionnaire version plus answers in key order."""
    parts = [f"{k}:{canonicalize(answers[k])}" for k in sorted(answers)]
    return stable_seed(version, *parts)


def build_result(
    answers: Mapping[str, Any],
    shown: Optional[Iterable[str]] = None,
    questionnaire: Optional[Questionnaire] = None,
    library: Optional[ModuleLibrary] = None,
    checkins: Union[Mapping[Any, Any], Iterable[Any], None] = None,
    today: Optional[date] = None,
    user_id: str = "anonymous",
) -> ResultPayload:
    """
    Build the diagnostic + plan payload for a finished questionnaire.

    Args:
        answers: block id -> Answer or raw value
        shown: display history
        questionnaire: defaults to the loaded questionnaire
        library: defaults to the loaded module library
        checkins: check-in history ({date: {done, note}} or list)
        today: reference day for adherence and plan start
        user_id: salts the weekly plan seed

    Returns:
        ResultPayload with result_hash set
    """
    if questionnaire is None or library is None:
        from vivario.content import get_loader
        loader = get_loader()
        questionnaire = questionnaire or loader.questionnaire
        library = library or loader.modules

    today = today or date.today()
    answer_set = coerce_answers(answers, questionnaire)
    raw = raw_answers(answer_set, questionnaire)

    seed = result_seed(questionnaire.version, raw)
    profile = build_profile(answer_set, questionnaire)
    diagnostic = generate_diagnostic(
        answer_set,
        profile.scores,
        profile.energy,
        questionnaire.diagnostic_titles,
    )
    adherence = compute_adherence(checkins, today)

    payload = ResultPayload(
        seed=seed,
        answers=raw,
        shown_blocks=list(shown or []),
        scores=profile.scores,
        profile=profile.snapshot(),
        diagnostic=diagnostic,
        daily_plan=build_daily_plan(profile, library, adherence, seed),
        weekly_plan=build_plan(
            profile,
            library,
            PlanOptions(start_date=today, user_id=user_id),
        ),
        disclaimer=choose_disclaimer(diagnostic.urgent),
    )
    result_hash = canonicalize_and_hash(payload.model_dump(mode="json"))
    logger.info(f"Result built: seed={seed} urgent={diagnostic.urgent} hash={result_hash[:19]}")
    return payload.model_copy(update={"result_hash": result_hash})
