"""
Vivario exception types.

Configuration errors are fatal to the session that hit them. Validation
errors are recovered locally and never change flow state.
"""

from typing import Optional


class VivarioError(Exception):
    """Base class for all engine errors."""

    code = "VIVARIO_ERROR"

    def __init__(self, message: str, details: Optional[dict] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> dict:
        return {
            "error": self.code,
            "message": self.message,
            "details": self.details,
        }


class ContentConfigurationError(VivarioError):
    """Question set or content pack missing, empty or unreadable."""

    code = "CONTENT_UNAVAILABLE"


class AnswerValidationError(VivarioError):
    """An answer failed its block constraints."""

    code = "ANSWER_INVALID"

    def __init__(self, block_id: str, message: str):
        super().__init__(message, {"block_id": block_id})
        self.block_id = block_id
