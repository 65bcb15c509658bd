from __future__ import annotations

import json
import logging
import os
import time
from pathlib import Path
from typing import Any, Callable, Protocol

logger = logging.getLogger(__name__)

BACKEND_KINDS = ("file", "memory")


def _ensure_parent(path: Path) -> None:
    path.parent.mkdir(parents=True, exist_ok=True)


def _backup_corrupt(path: Path, raw: bytes, reason: object) -> None:
    # keep the bytes so nothing is lost when defaults get written over the file
    backup = path.with_suffix(f".corrupt-{int(time.time())}.json")
    try:
        backup.write_bytes(raw)
        logger.warning("Unusable habit data in %s (%s); backed up to %s", path, reason, backup)
    except OSError:
        logger.warning("Unusable habit data in %s (%s); backup failed", path, reason)


def read_json(path: Path) -> dict[str, Any] | None:
    """
    Safe read:
    - missing, empty or unreadable -> None
    - not UTF-8, not JSON, or not a JSON object -> raw bytes backed up
      next to the file, then None
    Never raises for bad data.
    """
    path = Path(path)
    try:
        raw = path.read_bytes()
    except FileNotFoundError:
        return None
    except OSError as e:
        logger.warning("Could not read %s: %s", path, e)
        return None

    if not raw.strip():
        return None

    try:
        data = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, json.JSONDecodeError) as e:
        _backup_corrupt(path, raw, e)
        return None

    if not isinstance(data, dict):
        _backup_corrupt(path, raw, f"top level is {type(data).__name__}, not an object")
        return None
    return data


def save_json(path: Path, data: Any) -> None:
    """
    Atomic-ish save:
    - write to temp file in same directory
    - flush + fsync
    - os.replace to target
    - chmod 0600 best-effort
    """
    path = Path(path)
    _ensure_parent(path)

    tmp = path.with_name(path.name + ".tmp")
    payload = json.dumps(data, indent=2, ensure_ascii=False) + "\n"

    with open(tmp, "w", encoding="utf-8") as f:
        f.write(payload)
        f.flush()
        os.fsync(f.fileno())

    os.replace(tmp, path)

    try:
        os.chmod(path, 0o600)
    except OSError:
        pass


# -------------------------
# Backends
# -------------------------


class StorageBackend(Protocol):
    """Where a habit document lives. ``None`` from load means nothing usable."""

    def load_document(self) -> dict[str, Any] | None:  # pragma: no cover - interface
        ...

    def save_document(self, doc: dict[str, Any]) -> None:  # pragma: no cover - interface
        ...


class JsonFileBackend:
    def __init__(self, path: Path):
        self.path = Path(path)

    def load_document(self) -> dict[str, Any] | None:
        return read_json(self.path)

    def save_document(self, doc: dict[str, Any]) -> None:
        try:
            save_json(self.path, doc)
        except OSError as e:
            logger.error("Could not save habits to %s: %s", self.path, e)

    def __repr__(self) -> str:
        return f"JsonFileBackend({str(self.path)!r})"


class CallbackBackend:
    """Storage owned by an embedding host, reached through two functions."""

    def __init__(
        self,
        load_fn: Callable[[], dict[str, Any] | None],
        save_fn: Callable[[dict[str, Any]], None],
    ):
        self._load_fn = load_fn
        self._save_fn = save_fn

    def load_document(self) -> dict[str, Any] | None:
        try:
            doc = self._load_fn()
        except Exception:
            logger.exception("Host load function failed")
            return None
        return doc if isinstance(doc, dict) else None

    def save_document(self, doc: dict[str, Any]) -> None:
        try:
            self._save_fn(doc)
        except Exception:
            logger.exception("Host save function failed")


class MemoryBackend:
    def __init__(self, doc: dict[str, Any] | None = None):
        self.doc = doc
        self.saves = 0

    def load_document(self) -> dict[str, Any] | None:
        # hand out a copy so callers can't alias the stored document
        return json.loads(json.dumps(self.doc)) if isinstance(self.doc, dict) else None

    def save_document(self, doc: dict[str, Any]) -> None:
        self.doc = json.loads(json.dumps(doc))
        self.saves += 1


def make_backend(kind: str, path: Path | None = None) -> StorageBackend:
    if kind == "file":
        if path is None:
            raise ValueError("file backend needs a data path")
        return JsonFileBackend(path)
    if kind == "memory":
        return MemoryBackend()
    raise ValueError(f"unknown storage backend {kind!r} (choose from {', '.join(BACKEND_KINDS)})")
