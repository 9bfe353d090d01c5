"""Default locations for cached and staged profiles."""

import os
import tempfile
from pathlib import Path

APP_DIR_NAME = "dsc-runner"


def default_cache_dir() -> Path:
    """Return the per-user cache directory for fetched profiles.

    Uses ``%LOCALAPPDATA%`` on Windows, ``$XDG_CACHE_HOME`` when set and
    ``~/.cache`` otherwise.
    """
    if local_app_data := os.environ.get("LOCALAPPDATA"):
        base = Path(local_app_data)
    elif xdg_cache_home := os.environ.get("XDG_CACHE_HOME"):
        base = Path(xdg_cache_home)
    else:
        base = Path.home() / ".cache"
    return base / APP_DIR_NAME / "cache"


def default_staging_dir() -> Path:
    """Return the temp directory profiles are written to before execution."""
    return Path(tempfile.gettempdir()) / APP_DIR_NAME / "downloads"
