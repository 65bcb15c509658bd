"""
Habit record store: per-day completion records and the habit list.

Habit ids are positional. A habit's id always equals its index in
``collection.habits`` and is reassigned on delete, so callers re-resolve by
id right before use and never hold one across a delete.

Nothing here persists; HabitTracker saves after each mutation.
"""

from __future__ import annotations

import logging

from . import dates
from ._util import _utf8_len
from .models import (
    MAX_CALENDAR_DAYS,
    MAX_HABIT_NAME_BYTES,
    Color,
    Habit,
    HabitCollection,
    HabitDay,
)

logger = logging.getLogger(__name__)

DEFAULT_HABIT_NAME = "Meditation"


def _find_day(habit: Habit, ts: int) -> HabitDay | None:
    target = dates.normalize(ts)
    for day in habit.days:
        if dates.normalize(day.date) == target:
            return day
    return None


def toggle_day(habit: Habit, ts: int) -> bool:
    """
    Flip the record for ``ts``'s day, or create it as completed.

    A found record also takes the exact (non-normalized) ``ts``. Returns
    False only when the day is new and the habit already holds
    MAX_CALENDAR_DAYS records.
    """
    day = _find_day(habit, ts)
    if day is not None:
        day.completed = not day.completed
        day.date = ts
        return True

    if habit.is_full:
        logger.warning(
            "Habit %r is at its %d day-record limit; toggle ignored",
            habit.name,
            MAX_CALENDAR_DAYS,
        )
        return False

    habit.days.append(HabitDay(date=ts, completed=True))
    return True


def is_completed(habit: Habit | None, ts: int) -> bool:
    if habit is None:
        return False
    target = dates.normalize(ts)
    return any(d.completed and dates.normalize(d.date) == target for d in habit.days)


def get_habit_by_id(collection: HabitCollection, habit_id: int) -> Habit | None:
    for habit in collection.habits:
        if habit.id == habit_id:
            return habit
    return None


def get_active_habit(collection: HabitCollection) -> Habit | None:
    return get_habit_by_id(collection, collection.active_habit_id)


def make_default_habit(color: Color) -> Habit:
    return Habit(id=0, name=DEFAULT_HABIT_NAME, color=color.copy())


def add_habit(collection: HabitCollection, color: Color) -> Habit | None:
    if collection.is_full:
        logger.info("Habit limit reached (%d); add ignored", len(collection.habits))
        return None

    count = len(collection.habits)
    habit = Habit(id=count, name=f"Habit {count + 1}", color=color.copy())
    collection.habits.append(habit)
    collection.active_habit_id = habit.id
    return habit


def delete_habit(collection: HabitCollection, habit_id: int) -> bool:
    """
    Remove a habit and left-shift the rest, renumbering ids to indices.

    Active-id repair: deleting the active habit selects the one now at
    ``max(index - 1, 0)``; deleting a habit before the active one moves the
    active id down by one so it keeps pointing at the same habit.
    """
    index = next(
        (i for i, h in enumerate(collection.habits) if h.id == habit_id), None
    )
    if index is None:
        logger.debug("Delete of unknown habit id %s ignored", habit_id)
        return False

    del collection.habits[index]
    for i in range(index, len(collection.habits)):
        collection.habits[i].id = i

    if collection.active_habit_id == habit_id:
        if collection.habits:
            collection.active_habit_id = max(index - 1, 0)
    elif collection.active_habit_id > habit_id:
        collection.active_habit_id -= 1
    return True


def rename_habit(collection: HabitCollection, habit_id: int, name: str | None) -> bool:
    if name is None or not name.strip():
        logger.debug("Empty habit name ignored")
        return False
    if _utf8_len(name) > MAX_HABIT_NAME_BYTES:
        logger.info("Habit name longer than %d bytes rejected", MAX_HABIT_NAME_BYTES)
        return False
    habit = get_habit_by_id(collection, habit_id)
    if habit is None:
        return False
    habit.name = name
    return True


def recolor_habit(collection: HabitCollection, habit_id: int, color: Color) -> bool:
    habit = get_habit_by_id(collection, habit_id)
    if habit is None:
        return False
    habit.color = color.copy()
    return True
