"""
Configuration from environment variables (.env supported).

Settings:
    DATABASE_URL        SQLAlchemy URL (default: SQLite file under logs/)
    TEST_MODE           "true" swaps the database for its test twin
    LOG_LEVEL           Logging level used by scripts (default: INFO)
    HIFZ_*              Scheduler tuning overrides, see load_scheduler_params()
"""

from __future__ import annotations

import logging
import os
from pathlib import Path

from dotenv import load_dotenv

from hifz.srs.constants import SchedulerParams

load_dotenv()

DB_DIR = Path(__file__).resolve().parent.parent / "logs"
PROD_DB_NAME = "revisions"
TEST_DB_NAME = "test_revisions"


def is_test_mode() -> bool:
    """Check if running in test mode."""
    return os.getenv("TEST_MODE", "false").lower() == "true"


def get_database_url() -> str:
    """
    Get the database URL from environment variables.

    Falls back to a SQLite file in the logs directory. In test mode the
    production database name is replaced with the test database name.

    Returns:
        SQLAlchemy database URL
    """
    base_url = os.getenv("DATABASE_URL")
    if not base_url:
        base_url = f"sqlite:///{DB_DIR / (PROD_DB_NAME + '.db')}"

    if is_test_mode():
        return base_url.replace(PROD_DB_NAME, TEST_DB_NAME)

    return base_url


def ensure_sqlite_directory(database_path: str) -> None:
    """Create the parent directory of a SQLite database file."""
    Path(database_path).expanduser().parent.mkdir(parents=True, exist_ok=True)


def load_scheduler_params() -> SchedulerParams:
    """
    Build scheduler tuning parameters, applying HIFZ_* overrides.

    Raises:
        ValueError: an override is not a number or fails validation
    """
    defaults = SchedulerParams()
    return SchedulerParams(
        graduation_step=_env_int("HIFZ_GRADUATION_STEP", defaults.graduation_step),
        initial_ease=_env_float("HIFZ_INITIAL_EASE", defaults.initial_ease),
        min_ease=_env_float("HIFZ_MIN_EASE", defaults.min_ease),
        easy_bonus=_env_float("HIFZ_EASY_BONUS", defaults.easy_bonus),
        medium_penalty=_env_float("HIFZ_MEDIUM_PENALTY", defaults.medium_penalty),
        hard_penalty=_env_float("HIFZ_HARD_PENALTY", defaults.hard_penalty),
        first_review_delay_days=_env_int(
            "HIFZ_FIRST_REVIEW_DELAY_DAYS", defaults.first_review_delay_days
        ),
    )


def configure_logging(level: str | None = None) -> None:
    """Set up root logging for scripts (library code only creates loggers)."""
    level_name = (level or os.getenv("LOG_LEVEL", "INFO")).upper()
    logging.basicConfig(
        level=getattr(logging, level_name, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s"
    )


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer, got {raw!r}") from None


def _env_float(name: str, default: float) -> float:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return float(raw)
    except ValueError:
        raise ValueError(f"{name} must be a number, got {raw!r}") from None
