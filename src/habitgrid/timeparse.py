from __future__ import annotations

import re
from datetime import datetime, timedelta

from ._util import _now_local


def parse_day(value: str | None) -> int:
    """
    Parse a flexible day reference into an epoch-seconds timestamp.
    Accepts:
      - None / "" / "today" / "now" -> now
      - "yesterday", "tomorrow" -> now shifted by one day
      - relative: "3 days ago", "1 day ago", "2 weeks ago"
      - ISO 8601 date or datetime ("2026-02-25", "2026-02-25T07:34:00")
      - "2026/02/25", "Feb 25 2026", "25 Feb 2026"
    Date-only inputs land on local midnight of that day.
    """
    now = _now_local()
    if not value or not value.strip():
        return int(now.timestamp())

    s = value.strip().lower()

    # --- 1) Keywords ---
    if s in ("today", "now"):
        return int(now.timestamp())
    if s == "yesterday":
        return int((now - timedelta(days=1)).timestamp())
    if s == "tomorrow":
        return int((now + timedelta(days=1)).timestamp())

    # --- 2) Relative like "3 days ago", "2 weeks ago" ---
    m = re.fullmatch(r"(\d+)\s*(day|days|week|weeks)\s*ago", s)
    if m:
        n = int(m.group(1))
        if "week" in m.group(2):
            n *= 7
        return int((now - timedelta(days=n)).timestamp())

    # --- 3) ISO 8601 ---
    try:
        # naive values are local time; timestamp() honours DST for that date
        return int(datetime.fromisoformat(value.strip()).timestamp())
    except ValueError:
        pass

    # --- 4) Other date-only formats ---
    for fmt in ("%Y/%m/%d", "%b %d %Y", "%d %b %Y", "%B %d %Y", "%d %B %Y"):
        try:
            dt = datetime.strptime(value.strip(), fmt)
            return int(dt.timestamp())
        except ValueError:
            continue

    raise SystemExit(
        f"Could not parse day {value!r}. Try 'today', 'yesterday', '3 days ago', "
        f"or an ISO date like '2026-02-25'."
    )
