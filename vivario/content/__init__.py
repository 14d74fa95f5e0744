"""
Vivario Content

Static curated data (questionnaire, sentence pools, modules) and the
singleton loader that parses it.
"""

from .loader import (
    ContentLoader,
    get_loader,
    load_library,
    load_modules,
    load_questionnaire,
)

__all__ = [
    "ContentLoader",
    "get_loader",
    "load_library",
    "load_modules",
    "load_questionnaire",
]
