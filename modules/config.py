"""Configuration for the Prakriti engine and its collaborators."""
from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional
import logging
import os


BASE_DIR = Path(__file__).resolve().parent.parent


@dataclass
class AppPaths:
    """File system paths used across the application."""

    base_dir: Path
    data_dir: Path
    questionnaire_path: Path
    knowledge_base_path: Path
    logs_dir: Path


@dataclass
class DbConfig:
    """Persistence configuration (SQLAlchemy URL)."""

    url: str


@dataclass
class EngineConfig:
    """Tunables of the classification and plan engine."""

    secondary_threshold: float = 0.8
    default_duration_weeks: int = 4
    sample_plan_seed: int = 42


@dataclass
class LoggingConfig:
    """Logging configuration."""

    level: int = logging.INFO
    fmt: str = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
    datefmt: str = "%Y-%m-%d %H:%M:%S"
    log_file: Optional[Path] = None


@dataclass
class AppConfig:
    """Consolidated application configuration."""

    paths: AppPaths
    db: DbConfig
    engine: EngineConfig
    logging: LoggingConfig


def _resolve_path(env_var: str, default: Path) -> Path:
    """Resolve a path from environment variable with a fallback default."""

    env_value = os.getenv(env_var)
    return Path(env_value).expanduser() if env_value else default


def data_dir() -> Path:
    return _resolve_path("PRAKRITI_DATA_DIR", BASE_DIR / "data")


def questionnaire_path() -> Path:
    return _resolve_path("PRAKRITI_QUESTIONNAIRE_PATH", data_dir() / "questionnaire.json")


def knowledge_base_path() -> Path:
    return _resolve_path("PRAKRITI_KNOWLEDGE_BASE_PATH", data_dir() / "knowledge_base.json")


def default_database_url() -> str:
    return f"sqlite:///{BASE_DIR / 'local.db'}"


def _build_paths() -> AppPaths:
    return AppPaths(
        base_dir=BASE_DIR,
        data_dir=data_dir(),
        questionnaire_path=questionnaire_path(),
        knowledge_base_path=knowledge_base_path(),
        logs_dir=_resolve_path("PRAKRITI_LOGS_DIR", BASE_DIR / "logs"),
    )


def _build_engine_config() -> EngineConfig:
    threshold = float(os.getenv("PRAKRITI_SECONDARY_THRESHOLD", 0.8))
    if not 0 < threshold <= 1:
        raise ValueError(f"PRAKRITI_SECONDARY_THRESHOLD must be in (0, 1], got {threshold}")
    return EngineConfig(
        secondary_threshold=threshold,
        default_duration_weeks=int(os.getenv("PRAKRITI_DEFAULT_DURATION_WEEKS", 4)),
        sample_plan_seed=int(os.getenv("PRAKRITI_SAMPLE_PLAN_SEED", 42)),
    )


def _build_logging_config(paths: AppPaths) -> LoggingConfig:
    level_name = os.getenv("PRAKRITI_LOG_LEVEL", "INFO").upper()
    level = logging.getLevelName(level_name)
    if not isinstance(level, int):
        level = logging.INFO
    log_file = paths.logs_dir / "prakriti.log" if os.getenv("PRAKRITI_LOG_TO_FILE") else None
    return LoggingConfig(level=level, log_file=log_file)


def configure_logging(logging_config: LoggingConfig) -> None:
    """Configure global logging for the application."""

    handlers: list[logging.Handler] = [logging.StreamHandler()]
    if logging_config.log_file:
        logging_config.log_file.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(logging_config.log_file))

    logging.basicConfig(
        level=logging_config.level,
        format=logging_config.fmt,
        datefmt=logging_config.datefmt,
        handlers=handlers,
    )


def load_config() -> AppConfig:
    """Load application configuration from environment variables and defaults."""

    paths = _build_paths()
    return AppConfig(
        paths=paths,
        db=DbConfig(url=os.getenv("DATABASE_URL", default_database_url())),
        engine=_build_engine_config(),
        logging=_build_logging_config(paths),
    )


__all__ = [
    "AppConfig",
    "AppPaths",
    "DbConfig",
    "EngineConfig",
    "LoggingConfig",
    "configure_logging",
    "default_database_url",
    "knowledge_base_path",
    "load_config",
    "questionnaire_path",
]
