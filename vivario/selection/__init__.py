"""
Vivario Deterministic Selection Engine

Seeded pseudo-randomness and uniqueness-tracking picks shared by the
scenario composer and the planner. Identical inputs always reproduce
identical output.
"""

from .rng import Mulberry32, fnv1a_32, stable_seed
from .pick import normalize_text, pick_unique, pick_unique_many, pick_weighted

__all__ = [
    "Mulberry32",
    "fnv1a_32",
    "stable_seed",
    "normalize_text",
    "pick_unique",
    "pick_unique_many",
    "pick_weighted",
]
