"""
Vivario wellness disclaimer utilities.

RULES (LOCKED):
1. Every diagnostic payload carries the wellness disclaimer.
2. Safety-first diagnostics carry the emergency disclaimer instead.
"""

WELLNESS_DISCLAIMER = (
    "Vivario est un outil de bien-être. Il ne pose pas de diagnostic médical "
    "et ne remplace pas l’avis d’un professionnel de santé."
)

EMERGENCY_DISCLAIMER = (
    "Si tu es en danger maintenant, appelle les urgences (112) "
    "ou le 3114 (prévention du suicide, 24h/24)."
)


def choose_disclaimer(urgent: bool) -> str:
    """
    Return the disclaimer matching the diagnostic kind.

    Example:
        >>> choose_disclaimer(False) == WELLNESS_DISCLAIMER
        True
    """
    if urgent:
        return EMERGENCY_DISCLAIMER
    return WELLNESS_DISCLAIMER
