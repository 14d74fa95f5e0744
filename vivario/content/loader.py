"""
Content Loader

Singleton loader for the questionnaire, sentence pools and module library.
Loads the JSON files once and keeps the parsed models in memory.

Files (in Settings.content_dir):
    questionnaire.json  blocks, flow config, diagnostic titles
    content.json        scenario pools and combo packs
    modules.json        planner modules
"""

import json
import logging
from pathlib import Path
from typing import Any, Dict, Optional

from pydantic import ValidationError

from vivario.config import get_settings
from vivario.errors import ContentConfigurationError
from vivario.planner.models import ModuleLibrary
from vivario.questionnaire.models import Questionnaire
from vivario.scenario.models import ContentLibrary

logger = logging.getLogger(__name__)

QUESTIONNAIRE_FILE = "questionnaire.json"
CONTENT_FILE = "content.json"
MODULES_FILE = "modules.json"


def _read_json(path: Path) -> Dict[str, Any]:
    if not path.exists():
        raise ContentConfigurationError(f"Content file not found: {path.name}", {"path": str(path)})
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
    except (OSError, json.JSONDecodeError) as e:
        raise ContentConfigurationError(f"Cannot read {path.name}: {e}", {"path": str(path)})
    if not isinstance(data, dict):
        raise ContentConfigurationError(f"{path.name} must hold a JSON object", {"path": str(path)})
    return data


def load_questionnaire(path: Path) -> Questionnaire:
    try:
        questionnaire = Questionnaire(**_read_json(path))
    except ValidationError as e:
        raise ContentConfigurationError(f"Invalid questionnaire: {e.error_count()} error(s)", {"errors": e.errors(include_url=False)})
    if not questionnaire.blocks:
        raise ContentConfigurationError("Questionnaire has no blocks", {"path": str(path)})
    return questionnaire


def load_library(path: Path) -> ContentLibrary:
    try:
        library = ContentLibrary(**_read_json(path))
    except ValidationError as e:
        raise ContentConfigurationError(f"Invalid content pack: {e.error_count()} error(s)", {"errors": e.errors(include_url=False)})
    if not library.closings:
        raise ContentConfigurationError("Content pack has no closing lines", {"path": str(path)})
    return library


def load_modules(path: Path) -> ModuleLibrary:
    try:
        modules = ModuleLibrary(**_read_json(path))
    except ValidationError as e:
        raise ContentConfigurationError(f"Invalid module library: {e.error_count()} error(s)", {"errors": e.errors(include_url=False)})
    if not modules.modules:
        logger.warning(f"Module library is empty: {path}")
    return modules


class ContentLoader:
    """
    Singleton loader for all content data.
    Loads once at first use; call reset() in tests.
    """
    _instance = None
    _loaded = False

    def __new__(cls):
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __init__(self):
        if not ContentLoader._loaded:
            self._questionnaire: Optional[Questionnaire] = None
            self._library: Optional[ContentLibrary] = None
            self._modules: Optional[ModuleLibrary] = None
            self._load_data()
            ContentLoader._loaded = True

    @classmethod
    def reset(cls):
        """Reset the singleton for testing purposes."""
        cls._instance = None
        cls._loaded = False

    def _load_data(self):
        data_dir = Path(get_settings().content_dir)

        self._questionnaire = load_questionnaire(data_dir / QUESTIONNAIRE_FILE)
        logger.info(f"Loaded questionnaire {self._questionnaire.version} ({len(self._questionnaire.blocks)} blocks)")

        self._library = load_library(data_dir / CONTENT_FILE)
        logger.info(f"Loaded content pack {self._library.version} ({len(self._library.combos)} combos)")

        self._modules = load_modules(data_dir / MODULES_FILE)
        logger.info(f"Loaded module library {self._modules.version} ({len(self._modules.modules)} modules)")

    @property
    def questionnaire(self) -> Questionnaire:
        return self._questionnaire

    @property
    def library(self) -> ContentLibrary:
        return self._library

    @property
    def modules(self) -> ModuleLibrary:
        return self._modules

    def status(self) -> Dict[str, Any]:
        return {
            "questionnaire_version": self._questionnaire.version,
            "blocks": len(self._questionnaire.blocks),
            "content_version": self._library.version,
            "combos": len(self._library.combos),
            "modules": len(self._modules.modules),
        }


def get_loader() -> ContentLoader:
    """Get the singleton content loader."""
    return ContentLoader()
