from __future__ import annotations

import os
import sys
from pathlib import Path

APP_DIR = "habitgrid"
DATA_ENV = "HABITGRID_DATA"


def storage_dir() -> Path:
    if sys.platform.startswith("win"):
        appdata = os.environ.get("APPDATA")
        base = Path(appdata) if appdata else Path.home() / "AppData" / "Roaming"
    elif sys.platform == "darwin":
        base = Path.home() / "Library" / "Application Support"
    else:
        xdg = os.environ.get("XDG_CONFIG_HOME")
        base = Path(xdg) if xdg else Path.home() / ".config"
    return base / APP_DIR


def default_data_path(profile: str | None = None) -> Path:
    name = f"{profile}.json" if profile else "habits.json"
    return storage_dir() / name


def resolve_data_path(data_arg: str | None, profile: str | None) -> Path:
    if data_arg:
        return Path(data_arg).expanduser().resolve()
    env = os.environ.get(DATA_ENV)
    if env:
        return Path(env).expanduser().resolve()
    return default_data_path(profile).expanduser().resolve()
