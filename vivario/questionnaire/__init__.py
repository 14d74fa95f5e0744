"""
Vivario Questionnaire Models

Blocks, questionnaire and answers as loaded from content data.
"""

from .models import (
    BlockRole,
    BlockType,
    MULTI_ROLES,
    coerce_role,
    Option,
    Constraints,
    ScaleBounds,
    ScaleFactor,
    ScoringRule,
    SetVarRule,
    Block,
    FlowConfig,
    Questionnaire,
    Answer,
    AnswerSet,
    coerce_answers,
    raw_answers,
)

__all__ = [
    "BlockRole",
    "BlockType",
    "MULTI_ROLES",
    "coerce_role",
    "Option",
    "Constraints",
    "ScaleBounds",
    "ScaleFactor",
    "ScoringRule",
    "SetVarRule",
    "Block",
    "FlowConfig",
    "Questionnaire",
    "Answer",
    "AnswerSet",
    "coerce_answers",
    "raw_answers",
]
