"""
Vivario Profile Builder

Turns raw answers into a frozen Profile: roles, scores, root category,
focus and priority flags.
"""

from .models import EnergyLevel, RootCategory, Profile, MULTIPLE_THEME
from .scoring import detect_urgency, normalize_score, score_answers
from .builder import (
    build_profile,
    choose_focus,
    derive_root,
    detect_energy,
    energy_from_value,
)

__all__ = [
    "EnergyLevel",
    "RootCategory",
    "Profile",
    "MULTIPLE_THEME",
    "detect_urgency",
    "normalize_score",
    "score_answers",
    "build_profile",
    "choose_focus",
    "derive_root",
    "detect_energy",
    "energy_from_value",
]
