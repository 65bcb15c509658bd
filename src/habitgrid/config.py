"""Runtime settings: environment first, command-line flags on top."""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass
from logging.handlers import RotatingFileHandler
from pathlib import Path

from .paths import resolve_data_path
from .storage import BACKEND_KINDS

LOG_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DEBOUNCE_MS = 250
LOG_LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL")


@dataclass
class Settings:
    data_path: Path
    backend: str = "file"
    log_level: str = "WARNING"
    log_file: Path | None = None
    debounce_ms: int = DEFAULT_DEBOUNCE_MS

    @property
    def debounce_seconds(self) -> float:
        return self.debounce_ms / 1000.0


def _env_int(key: str, default: int) -> int:
    raw = os.environ.get(key)
    if raw is None or not raw.strip():
        return default
    try:
        return max(int(raw), 0)
    except ValueError:
        logging.getLogger(__name__).warning("Ignoring %s=%r (not an integer)", key, raw)
        return default


def load_settings(
    data_arg: str | None = None,
    profile: str | None = None,
    backend: str | None = None,
    verbose: int = 0,
) -> Settings:
    kind = backend or os.environ.get("HABITGRID_BACKEND", "file")
    if kind not in BACKEND_KINDS:
        raise SystemExit(f"Unknown backend {kind!r}; choose from {', '.join(BACKEND_KINDS)}")

    level = os.environ.get("HABITGRID_LOG_LEVEL", "WARNING").upper()
    if verbose >= 2:
        level = "DEBUG"
    elif verbose == 1:
        level = "INFO"
    if level not in LOG_LEVELS:
        raise SystemExit(f"Unknown log level {level!r}")

    log_file = os.environ.get("HABITGRID_LOG_FILE")
    return Settings(
        data_path=resolve_data_path(data_arg, profile),
        backend=kind,
        log_level=level,
        log_file=Path(log_file).expanduser() if log_file else None,
        debounce_ms=_env_int("HABITGRID_DEBOUNCE_MS", DEFAULT_DEBOUNCE_MS),
    )


def setup_logging(level: str = "WARNING", log_file: Path | None = None) -> logging.Logger:
    logger = logging.getLogger("habitgrid")
    logger.setLevel(level)
    formatter = logging.Formatter(LOG_FORMAT)

    if not logger.handlers:
        stream = logging.StreamHandler()
        stream.setFormatter(formatter)
        logger.addHandler(stream)

        if log_file is not None:
            log_file.parent.mkdir(parents=True, exist_ok=True)
            handler = RotatingFileHandler(log_file, maxBytes=1_000_000, backupCount=3, encoding="utf-8")
            handler.setFormatter(formatter)
            logger.addHandler(handler)
    return logger
