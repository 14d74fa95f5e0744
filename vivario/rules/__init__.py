"""
Vivario Condition Evaluator

Small declarative rule interpreter used for block visibility (show_if),
conditional scoring and set_vars. Pure, no side effects.
"""

from .models import Condition, EvaluationContext
from .evaluate import evaluate, is_answered, to_number

__all__ = [
    "Condition",
    "EvaluationContext",
    "evaluate",
    "is_answered",
    "to_number",
]
