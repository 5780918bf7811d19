"""Per-user locations for preferences and logs."""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "notchplay"
PREFERENCES_FILENAME = "state.json"


@lru_cache(maxsize=None)
def get_app_dirs(app_name: str = APP_NAME) -> PlatformDirs:
    """Platform directories for `app_name`; accessed paths are created on demand."""
    return PlatformDirs(app_name, appauthor=False, ensure_exists=True)


def config_dir(app_name: str = APP_NAME) -> Path:
    return get_app_dirs(app_name).user_config_path


def log_dir(app_name: str = APP_NAME) -> Path:
    return get_app_dirs(app_name).user_log_path


def preferences_path(app_name: str = APP_NAME) -> Path:
    """Return the JSON preferences file path (the file itself may not exist)."""
    return config_dir(app_name) / PREFERENCES_FILENAME
