"""Application configuration loader.

Reads ``~/.skill_coach/config.yaml`` (or the file named by the
``SKILL_COACH_CONFIG`` environment variable) and fills in defaults for
anything missing.
"""
import logging
import os
from dataclasses import dataclass, field
from pathlib import Path

import structlog
import yaml

from skill_coach.db import DEFAULT_DB_PATH

logger = structlog.get_logger(__name__)

CONFIG_ENV_VAR = "SKILL_COACH_CONFIG"
DEFAULT_CONFIG_PATH = Path.home() / ".skill_coach" / "config.yaml"
CONTENT_DIR = Path(__file__).parent / "content"

DEFAULT_PRIORITIES = ["embedded", "swe", "ml_dl", "genai", "coding"]


@dataclass
class PlanDefaults:
    hours: float = 2.0
    quiz_ratio: float = 0.5
    project_ratio: float = 0.5


@dataclass
class AppConfig:
    db_path: str = DEFAULT_DB_PATH
    questions_path: str = str(CONTENT_DIR / "questions_seed.json")
    taxonomy_path: str = str(CONTENT_DIR / "skills_taxonomy.json")
    priorities: list = field(default_factory=lambda: list(DEFAULT_PRIORITIES))
    recent_window: int = 10
    plan: PlanDefaults = field(default_factory=PlanDefaults)
    log_level: str = "WARNING"


def _parse_config(data: dict) -> AppConfig:
    defaults = AppConfig()
    plan_data = data.get("plan", {}) or {}
    plan = PlanDefaults(
        hours=float(plan_data.get("hours", defaults.plan.hours)),
        quiz_ratio=float(plan_data.get("quiz_ratio", defaults.plan.quiz_ratio)),
        project_ratio=float(plan_data.get("project_ratio", defaults.plan.project_ratio)),
    )
    config = AppConfig(
        db_path=str(Path(data.get("db_path", defaults.db_path)).expanduser()),
        questions_path=str(Path(data.get("questions_path", defaults.questions_path)).expanduser()),
        taxonomy_path=str(Path(data.get("taxonomy_path", defaults.taxonomy_path)).expanduser()),
        priorities=list(data.get("priorities", defaults.priorities)),
        recent_window=int(data.get("recent_window", defaults.recent_window)),
        plan=plan,
        log_level=str(data.get("log_level", defaults.log_level)).upper(),
    )
    if config.recent_window < 1:
        raise ValueError(f"recent_window must be positive, got {config.recent_window}")
    if plan.hours < 0 or plan.quiz_ratio < 0 or plan.project_ratio < 0:
        raise ValueError("plan hours and ratios must not be negative")
    if not isinstance(logging.getLevelName(config.log_level), int):
        raise ValueError(f"Unknown log level: {config.log_level}")
    return config


def load_config(path: str | None = None) -> AppConfig:
    """Load configuration from YAML, falling back to defaults when absent."""
    config_path = Path(path or os.environ.get(CONFIG_ENV_VAR) or DEFAULT_CONFIG_PATH)
    if not config_path.exists():
        logger.debug("using_default_config", path=str(config_path))
        return AppConfig()
    logger.debug("loading_config", path=str(config_path))
    data = yaml.safe_load(config_path.read_text()) or {}
    if not isinstance(data, dict):
        raise ValueError(f"Config file must contain a mapping: {config_path}")
    return _parse_config(data)


def configure_logging(level: str = "WARNING") -> None:
    """Install a structlog logger that drops events below ``level``."""
    structlog.configure(
        wrapper_class=structlog.make_filtering_bound_logger(logging.getLevelName(level.upper())),
    )
