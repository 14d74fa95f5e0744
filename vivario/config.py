"""
Vivario runtime settings.

All values come from environment variables so the same build runs locally
and on the hosted API:

    VIVARIO_CONTENT_DIR          directory holding the content JSON files
    VIVARIO_SCENARIO_MIN_LINES   minimum sentences per scenario (default 6)
    VIVARIO_SCENARIO_MAX_LINES   maximum sentences per scenario (default 12)
    VIVARIO_LOG_LEVEL            logging level name (default INFO)
    VIVARIO_ENVIRONMENT          free-form deployment label
"""

import logging
import os
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

DEFAULT_CONTENT_DIR = Path(__file__).parent / "content" / "data"

LOG_FORMAT = "[%(asctime)s] %(levelname)s %(name)s: %(message)s"


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        logging.getLogger(__name__).warning(f"Ignoring non-integer {name}={raw!r}")
        return default


@dataclass(frozen=True)
class Settings:
    content_dir: Path
    scenario_min_lines: int = 6
    scenario_max_lines: int = 12
    log_level: str = "INFO"
    environment: str = "local"

    @classmethod
    def from_env(cls) -> "Settings":
        content_dir = Path(os.getenv("VIVARIO_CONTENT_DIR") or DEFAULT_CONTENT_DIR)
        min_lines = max(1, _env_int("VIVARIO_SCENARIO_MIN_LINES", 6))
        max_lines = max(min_lines, _env_int("VIVARIO_SCENARIO_MAX_LINES", 12))
        return cls(
            content_dir=content_dir,
            scenario_min_lines=min_lines,
            scenario_max_lines=max_lines,
            log_level=os.getenv("VIVARIO_LOG_LEVEL", "INFO").upper(),
            environment=os.getenv("VIVARIO_ENVIRONMENT", "local"),
        )


_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """Settings are read once per process; call reset_settings() in tests."""
    global _settings
    if _settings is None:
        _settings = Settings.from_env()
    return _settings


def reset_settings() -> None:
    global _settings
    _settings = None


def configure_logging(level: Optional[str] = None) -> None:
    """Attach one stdout handler to the vivario logger tree."""
    root = logging.getLogger("vivario")
    root.setLevel(level or get_settings().log_level)
    if not root.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(LOG_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
        root.addHandler(handler)
