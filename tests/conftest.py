"""
Shared fixtures: every test starts with fresh settings, content loader and
session store.
"""

import pytest

from vivario.config import reset_settings
from vivario.content import ContentLoader, get_loader
from vivario.store import reset_store


@pytest.fixture(autouse=True)
def reset_singletons():
    """Reset process-wide singletons before and after each test."""
    reset_settings()
    ContentLoader.reset()
    reset_store()
    yield
    reset_settings()
    ContentLoader.reset()
    reset_store()


@pytest.fixture
def questionnaire():
    return get_loader().questionnaire


@pytest.fixture
def library():
    return get_loader().library


@pytest.fixture
def modules():
    return get_loader().modules


@pytest.fixture
def fatigue_answers():
    """Low-energy person worried about work and money."""
    return {
        "tone": "charge",
        "themes": ["travail", "finances"],
        "posture": ["fatigue"],
        "energie": "faible",
    }
