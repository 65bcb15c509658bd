"""
Habit document <-> HabitCollection.

Document shape::

    {
      "active_habit_id": 0,
      "is_calendar_expanded": false,
      "extra_weeks": 0,
      "calendar_offset_weeks": 0,
      "habits": [
        {"id": 0, "name": "Meditation",
         "color": {"r": 70, "g": 130, "b": 180, "a": 255},
         "calendar_days": [{"date": 1767225600, "completed": true}]}
      ]
    }

Loading is field-by-field: a missing or wrong-typed field keeps its default
instead of failing the whole document. Older documents without
``calendar_offset_weeks`` load with 0.
"""

from __future__ import annotations

import logging
from typing import Any

from . import dates
from ._util import _clip_utf8, _is_number
from .habits import get_active_habit, make_default_habit
from .models import (
    MAX_CALENDAR_DAYS,
    MAX_EXTRA_WEEKS,
    MAX_HABIT_NAME_BYTES,
    MAX_HABITS,
    Color,
    Habit,
    HabitCollection,
    HabitDay,
)
from .storage import StorageBackend

logger = logging.getLogger(__name__)

UNNAMED_HABIT = "Unnamed Habit"


# -------------------------
# Serialize
# -------------------------


def habit_to_dict(habit: Habit) -> dict[str, Any]:
    return {
        "id": habit.id,
        "name": habit.name,
        "color": habit.color.to_dict(),
        "calendar_days": [{"date": d.date, "completed": d.completed} for d in habit.days],
    }


def collection_to_dict(collection: HabitCollection) -> dict[str, Any]:
    return {
        "active_habit_id": collection.active_habit_id,
        "is_calendar_expanded": collection.is_calendar_expanded,
        "extra_weeks": collection.extra_weeks,
        "calendar_offset_weeks": collection.calendar_offset_weeks,
        "habits": [habit_to_dict(h) for h in collection.habits],
    }


# -------------------------
# Deserialize
# -------------------------


def _color_from(raw: Any, default: Color) -> Color:
    if not isinstance(raw, dict):
        return default.copy()
    channels = [raw.get(k) for k in ("r", "g", "b", "a")]
    # all four or nothing
    if not all(_is_number(c) for c in channels):
        return default.copy()
    return Color(*(float(c) for c in channels))


def _days_from(raw: Any) -> list[HabitDay]:
    if not isinstance(raw, list):
        return []
    out: list[HabitDay] = []
    seen: set[int] = set()
    for entry in raw:
        if len(out) >= MAX_CALENDAR_DAYS:
            break
        if not isinstance(entry, dict) or "date" not in entry or "completed" not in entry:
            continue
        ts = entry["date"]
        if not dates.is_valid_timestamp(ts):
            continue
        ts = int(ts)
        key = dates.normalize(ts)
        if key in seen:
            logger.warning("Dropping duplicate day record for %s", ts)
            continue
        seen.add(key)
        out.append(HabitDay(date=ts, completed=entry["completed"] is True))
    return out


def habit_from_dict(raw: Any, default_color: Color) -> Habit:
    if not isinstance(raw, dict):
        raw = {}
    habit_id = raw.get("id")
    name = raw.get("name")
    return Habit(
        id=int(habit_id) if _is_number(habit_id) else 0,
        name=_clip_utf8(name, MAX_HABIT_NAME_BYTES) if isinstance(name, str) else UNNAMED_HABIT,
        color=_color_from(raw.get("color"), default_color),
        days=_days_from(raw.get("calendar_days")),
    )


def collection_from_dict(doc: dict[str, Any], default_color: Color) -> HabitCollection:
    """Structural load only; no session restore and no default habit."""
    collection = HabitCollection()

    active = doc.get("active_habit_id")
    if _is_number(active):
        collection.active_habit_id = max(int(active), 0)

    expanded = doc.get("is_calendar_expanded")
    if isinstance(expanded, bool):
        collection.is_calendar_expanded = expanded

    extra = doc.get("extra_weeks")
    if _is_number(extra):
        collection.extra_weeks = max(int(extra), 0)
        if collection.extra_weeks > MAX_EXTRA_WEEKS:
            logger.warning(
                "extra_weeks %d out of range; capped at %d", collection.extra_weeks, MAX_EXTRA_WEEKS
            )
            collection.extra_weeks = MAX_EXTRA_WEEKS

    offset = doc.get("calendar_offset_weeks")
    if _is_number(offset):
        collection.calendar_offset_weeks = int(offset)

    raw_habits = doc.get("habits")
    if isinstance(raw_habits, list):
        for raw in raw_habits[:MAX_HABITS]:
            collection.habits.append(habit_from_dict(raw, default_color))

    # ids are positional; legacy files with gaps or defaulted ids get renumbered
    for index, habit in enumerate(collection.habits):
        if habit.id != index:
            logger.warning("Habit %r had id %d, renumbered to %d", habit.name, habit.id, index)
            habit.id = index

    return collection


def default_collection(default_color: Color) -> HabitCollection:
    return HabitCollection(habits=[make_default_habit(default_color)])


# -------------------------
# Load / save protocol
# -------------------------


def save_collection(backend: StorageBackend, collection: HabitCollection) -> None:
    backend.save_document(collection_to_dict(collection))


def load_collection(
    backend: StorageBackend,
    default_color: Color,
    live: HabitCollection | None = None,
) -> HabitCollection:
    """
    Hydrate a collection from ``backend``.

    Nothing usable in storage -> a one-habit default collection, written back
    right away. When ``live`` is given (a reload under a running session) its
    name-input handle, editing flag, active id and scroll flag win over what
    was stored.
    """
    doc = backend.load_document()
    if doc is None:
        logger.info("No usable habit data in %r; starting with defaults", backend)
        collection = default_collection(default_color)
        save_collection(backend, collection)
    else:
        collection = collection_from_dict(doc, default_color)

    if live is not None:
        collection.habit_name_input = live.habit_name_input
        collection.is_editing_new_habit = live.is_editing_new_habit
        collection.active_habit_id = live.active_habit_id
        collection.has_done_initial_scroll = live.has_done_initial_scroll

    if collection.calendar_offset_weeks < 0:
        collection.calendar_offset_weeks = 0

    if not collection.habits:
        # in memory only; the next mutation writes it
        collection.habits.append(make_default_habit(default_color))
        collection.active_habit_id = 0
        collection.calendar_offset_weeks = 0

    if get_active_habit(collection) is None:
        logger.warning(
            "Active habit id %d does not exist; selecting habit 0", collection.active_habit_id
        )
        collection.active_habit_id = 0

    return collection
