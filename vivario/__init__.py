"""
Vivario Engine

Adaptive questionnaire, profile derivation, scenario composition and
7-day plan generation for the Vivario wellness check-in.

Principle: the engine selects, orders, combines and prunes curated content.
It never writes free text of its own.
"""

from .errors import VivarioError, ContentConfigurationError, AnswerValidationError

__all__ = [
    "VivarioError",
    "ContentConfigurationError",
    "AnswerValidationError",
]

__version__ = "1.0.0"
