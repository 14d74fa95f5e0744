"""Vivario Shared Utilities"""

from .hashing import (
    canonicalize,
    canonicalize_and_hash,
)
from .disclaimer import (
    WELLNESS_DISCLAIMER,
    EMERGENCY_DISCLAIMER,
    choose_disclaimer,
)

__all__ = [
    "canonicalize",
    "canonicalize_and_hash",
    "WELLNESS_DISCLAIMER",
    "EMERGENCY_DISCLAIMER",
    "choose_disclaimer",
]
