"""Shared low-level helpers used by the core modules and cli.py."""

from __future__ import annotations

import math
from datetime import datetime
from typing import Any


def _now_local() -> datetime:
    return datetime.now().astimezone()


def _is_number(value: Any) -> bool:
    # JSON booleans decode to bool, which is an int subclass
    if isinstance(value, bool):
        return False
    return isinstance(value, (int, float)) and math.isfinite(value)


def _fmt_day(ts: int) -> str:
    # Windows-safe formatting
    dt = datetime.fromtimestamp(ts)
    try:
        return dt.strftime("%a %b %-d")
    except ValueError:
        return dt.strftime("%a %b %d").replace(" 0", " ")


def _utf8_len(text: str) -> int:
    return len(text.encode("utf-8"))


def _clip_utf8(text: str, limit: int) -> str:
    return text.encode("utf-8")[:limit].decode("utf-8", "ignore")
