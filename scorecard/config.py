"""
Runtime configuration read from environment variables.

DATABASE_URL        PostgreSQL connection string; selects the Postgres store when set
SCORECARD_DATA_DIR  Directory for the local SQLite database (default ~/.scorecard)
SCORECARD_TIMEZONE  Timezone used for record timestamps (default UTC)
SECRET_KEY          Flask secret key
"""

import os
from datetime import datetime
from pathlib import Path
from typing import Optional

import pytz


DEFAULT_DATA_DIR = Path.home() / ".scorecard"
DEFAULT_TIMEZONE = "UTC"


def get_database_url() -> Optional[str]:
    return os.getenv("DATABASE_URL") or None


def get_data_dir() -> Path:
    data_dir = os.getenv("SCORECARD_DATA_DIR")
    return Path(data_dir) if data_dir else DEFAULT_DATA_DIR


def get_timezone():
    """Get the configured timezone.

    Raises:
        pytz.UnknownTimeZoneError: If SCORECARD_TIMEZONE is not a known zone
    """
    return pytz.timezone(os.getenv("SCORECARD_TIMEZONE", DEFAULT_TIMEZONE))


def get_secret_key() -> str:
    return os.getenv("SECRET_KEY", "dev-secret-key-change-in-production")


def now() -> datetime:
    """Current time in the configured timezone."""
    return datetime.now(get_timezone())
