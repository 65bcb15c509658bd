"""
HabitTracker: the one owner of a HabitCollection.

Hosts (a renderer, the ``hg`` command line) read through the query methods
and change state only through the command methods. Every command that changes
a persisted field saves before returning; hosts never call save themselves.

Single-threaded by contract: the host's event loop serializes all calls.
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from . import calendar_window, dates, habits
from .calendar_window import CalendarWindow
from .config import DEFAULT_DEBOUNCE_MS
from .models import Color, Habit, HabitCollection
from .persistence import load_collection, save_collection
from .storage import StorageBackend
from .theme import DEFAULT_THEME, Theme, palette_color

logger = logging.getLogger(__name__)


class ToggleDebouncer:
    """Drops a toggle that lands within ``window`` seconds of the last accepted one."""

    def __init__(self, window: float, monotonic: Callable[[], float]):
        self.window = window
        self._monotonic = monotonic
        self._last: float | None = None

    def accept(self) -> bool:
        now = self._monotonic()
        if self._last is not None and now - self._last < self.window:
            logger.debug("Toggle ignored - too soon (delta: %.3fs)", now - self._last)
            return False
        self._last = now
        return True


class HabitTracker:
    def __init__(
        self,
        backend: StorageBackend,
        *,
        theme: Theme = DEFAULT_THEME,
        debounce_seconds: float = DEFAULT_DEBOUNCE_MS / 1000.0,
        clock: Callable[[], float] = time.time,
        monotonic: Callable[[], float] = time.monotonic,
    ):
        self.backend = backend
        self.theme = theme
        self._clock = clock
        self._debouncer = ToggleDebouncer(debounce_seconds, monotonic)
        self._collection: HabitCollection | None = None

    # -------- Lifecycle --------

    def open(self) -> HabitTracker:
        self._collection = load_collection(self.backend, self.theme.primary)
        logger.debug("Loaded %d habit(s)", len(self._collection.habits))
        return self

    def reload(self) -> None:
        """Re-read storage, keeping this session's editing and selection state."""
        self._collection = load_collection(
            self.backend, self.theme.primary, live=self.collection
        )

    def close(self) -> None:
        # every command already saved; just detach
        self._collection = None

    def __enter__(self) -> HabitTracker:
        return self.open() if self._collection is None else self

    def __exit__(self, *exc) -> None:
        self.close()

    @property
    def collection(self) -> HabitCollection:
        if self._collection is None:
            raise RuntimeError("HabitTracker used before open()")
        return self._collection

    def save(self) -> None:
        save_collection(self.backend, self.collection)

    # -------- Queries --------

    @property
    def active_habit(self) -> Habit | None:
        return habits.get_active_habit(self.collection)

    def habit(self, habit_id: int) -> Habit | None:
        return habits.get_habit_by_id(self.collection, habit_id)

    def is_day_completed(self, ts: float, habit_id: int | None = None) -> bool:
        if not dates.is_valid_timestamp(ts):
            return False
        habit = self.active_habit if habit_id is None else self.habit(habit_id)
        return habits.is_completed(habit, int(ts))

    def calendar(self, now: float | None = None) -> CalendarWindow:
        return calendar_window.compute_window(
            self.collection, self.active_habit, self._clock() if now is None else now
        )

    # -------- Commands --------

    def toggle_day(self, ts: float | None) -> bool:
        if not dates.is_valid_timestamp(ts):
            logger.warning("Toggle with invalid date %r ignored", ts)
            return False
        if not self._debouncer.accept():
            return False
        habit = self.active_habit
        if habit is None:
            return False
        if not habits.toggle_day(habit, int(ts)):
            return False
        self.save()
        return True

    def add_habit(self) -> Habit | None:
        habit = habits.add_habit(self.collection, self.theme.primary)
        if habit is None:
            return None
        # a fresh tab opens with its name field in edit mode
        self.collection.is_editing_new_habit = True
        self.save()
        return habit

    def delete_habit(self, habit_id: int) -> bool:
        if not habits.delete_habit(self.collection, habit_id):
            return False
        self.collection.is_editing_new_habit = False
        self.save()
        return True

    def rename_active_habit(self, name: str | None) -> bool:
        if not habits.rename_habit(self.collection, self.collection.active_habit_id, name):
            return False
        self.collection.is_editing_new_habit = False
        self.save()
        return True

    def recolor_active_habit(self, color: Color | None) -> bool:
        if color is None:
            logger.warning("Recolor with no color ignored")
            return False
        if not habits.recolor_habit(self.collection, self.collection.active_habit_id, color):
            return False
        self.save()
        return True

    def recolor_active_habit_from_palette(self, index: int) -> bool:
        color = palette_color(index)
        if color is None:
            logger.warning("Palette index %r out of range", index)
            return False
        return self.recolor_active_habit(color)

    def set_active_habit(self, habit_id: int) -> bool:
        if self.habit(habit_id) is None:
            logger.debug("Select of unknown habit id %s ignored", habit_id)
            return False
        self.collection.is_editing_new_habit = False
        self.collection.active_habit_id = habit_id
        self.save()
        return True

    def set_editing(self, editing: bool) -> None:
        # session-only; nothing to persist
        self.collection.is_editing_new_habit = editing

    def expand_calendar(self) -> None:
        calendar_window.expand(self.collection)
        self.save()

    def collapse_calendar(self) -> None:
        calendar_window.collapse(self.collection)
        self.save()

    def set_calendar_offset(self, weeks: int) -> None:
        self.collection.calendar_offset_weeks = max(int(weeks), 0)
        self.save()

    def mark_initial_scroll_done(self) -> None:
        self.collection.has_done_initial_scroll = True
