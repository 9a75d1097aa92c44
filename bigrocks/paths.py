from __future__ import annotations

import os
from pathlib import Path

APP_DIR_NAME = "BigRocks"
HOME_ENV_VAR = "BIGROCKS_HOME"


def data_directory() -> Path:
    override = os.environ.get(HOME_ENV_VAR)
    if override:
        return Path(override)
    local_appdata = os.environ.get("LOCALAPPDATA")
    if local_appdata:
        return Path(local_appdata) / APP_DIR_NAME
    return Path.home() / ".local" / "share" / APP_DIR_NAME.lower()


def database_path() -> Path:
    return data_directory() / "bigrocks.sqlite3"


def ensure_directories() -> None:
    data_directory().mkdir(parents=True, exist_ok=True)

