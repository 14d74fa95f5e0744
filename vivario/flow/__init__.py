"""
Vivario Adaptive Flow Controller

Picks the next questionnaire block from visibility rules, urgency overrides,
theme-derived domains and the current energy level.
"""

from vivario.questionnaire.models import Answer, Block, BlockRole, BlockType, Questionnaire
from .models import FlowState, FlowStep, HEAVY_TAGS
from .controller import (
    advance,
    go_back,
    next_block,
    progress,
    selected_domains,
    should_stop_early,
    start,
    validate_answer,
)

__all__ = [
    "Answer",
    "Block",
    "BlockRole",
    "BlockType",
    "Questionnaire",
    "FlowState",
    "FlowStep",
    "HEAVY_TAGS",
    "advance",
    "go_back",
    "next_block",
    "progress",
    "selected_domains",
    "should_stop_early",
    "start",
    "validate_answer",
]
