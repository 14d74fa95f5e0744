"""
Diagnostic generation.

Urgency overrides everything with a fixed safety-first diagnostic. Otherwise
the top (up to 4) non-zero domains are labeled by severity:

    >= 75 elevated | >= 45 moderate | >= 20 mild | else low
"""

import logging
from typing import Any, Dict, List, Mapping, Optional, Tuple

from vivario.profile.models import EnergyLevel
from vivario.profile.scoring import detect_urgency
from .models import Diagnostic, DomainReading, Severity

logger = logging.getLogger(__name__)

TOP_DOMAINS = 4
DEFAULT_PRIMARY = "global"

URGENT_TITLE = "Priorité sécurité"
URGENT_SUMMARY = (
    "Ce que tu as indiqué ressemble à une situation où la sécurité passe avant tout. "
    "Vivario peut t’aider à te stabiliser, mais ce n’est pas un remplacement d’un "
    "soutien humain immédiat."
)
URGENT_BULLETS = [
    "Si tu es en danger maintenant : appelle les urgences (112) ou un service local d’urgence.",
    "Si tu peux : contacte une personne de confiance et reste avec quelqu’un.",
    "Ensuite seulement, on pourra revenir sur le plan (respiration, ancrage, étapes).",
]

DIAGNOSTIC_TITLE = "Diagnostic Vivario PRO"

ENERGY_LINES = {
    EnergyLevel.LOW: "Ton énergie semble basse : le plan sera plus court, plus doux, et très réaliste.",
    EnergyLevel.HIGH: "Ton énergie permet d’aller un peu plus loin : on peut ajouter une étape de progression.",
    EnergyLevel.MEDIUM: "On garde un rythme stable : simple, régulier, sans surcharge.",
}


def severity_for(score: float) -> Severity:
    if score >= 75:
        return Severity.ELEVATED
    if score >= 45:
        return Severity.MODERATE
    if score >= 20:
        return Severity.MILD
    return Severity.LOW


def top_domains(scores: Mapping[str, float], n: int = TOP_DOMAINS) -> List[Tuple[str, float]]:
    """Non-zero domains, score desc then name asc."""
    ranked = sorted(scores.items(), key=lambda kv: (-(kv[1] or 0), kv[0]))
    return [(d, s) for d, s in ranked[:n] if (s or 0) > 0]


def energy_line(energy: Any) -> str:
    try:
        level = EnergyLevel(energy)
    except ValueError:
        level = EnergyLevel.MEDIUM
    return ENERGY_LINES[level]


def urgent_diagnostic(flags: List[str]) -> Diagnostic:
    return Diagnostic(
        title=URGENT_TITLE,
        summary=URGENT_SUMMARY,
        bullets=list(URGENT_BULLETS),
        urgent=True,
        flags=flags,
    )


def generate_diagnostic(
    answers: Mapping[str, Any],
    scores: Mapping[str, float],
    energy: Any = EnergyLevel.MEDIUM,
    titles: Optional[Dict[str, str]] = None,
) -> Diagnostic:
    """
    Labeled diagnostic for a set of answers and scores.

    Args:
        answers: raw answers (or Answer objects), scanned for urgency
        scores: normalized domain scores
        energy: energy level driving the contextual line
        titles: domain -> display title

    Returns:
        Diagnostic
    """
    flags = detect_urgency(answers)
    if flags:
        logger.warning(f"Safety-first diagnostic issued: {flags}")
        return urgent_diagnostic(flags)

    titles = titles or {}
    tops = top_domains(scores)
    primary, primary_score = tops[0] if tops else (DEFAULT_PRIMARY, 0)
    severity = severity_for(primary_score)
    pretty_primary = titles.get(primary, primary)

    summary = (
        f"D’après tes réponses, le domaine principal qui ressort est **{pretty_primary}** "
        f"(niveau {severity.label}). "
        "On va viser du concret : stabiliser d’abord, puis renforcer progressivement."
    )

    readings = [
        DomainReading(
            domain=d,
            title=titles.get(d, d),
            score=int(s),
            severity=severity_for(s),
        )
        for d, s in tops
    ]
    bullets = [energy_line(energy)] + [
        f"• {r.title} : niveau {r.severity.label} (score {r.score}/100)." for r in readings
    ]

    return Diagnostic(
        title=titles.get("_title", DIAGNOSTIC_TITLE),
        summary=summary,
        bullets=bullets,
        primary_domain=primary,
        primary_score=int(primary_score),
        severity=severity,
        domains=readings,
    )
