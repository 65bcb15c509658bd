from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

MAX_HABITS = 10
MAX_CALENDAR_DAYS = 1000
# look-back never reaches further than a habit can hold records for
MAX_EXTRA_WEEKS = (MAX_CALENDAR_DAYS - 14) // 7
# 32-byte name buffer in the legacy format, one byte for the terminator
MAX_HABIT_NAME_BYTES = 31


@dataclass
class Color:
    """RGBA with channels on a 0-255 float scale."""

    r: float
    g: float
    b: float
    a: float = 255.0

    def to_dict(self) -> dict[str, float]:
        return {"r": self.r, "g": self.g, "b": self.b, "a": self.a}

    def copy(self) -> Color:
        return Color(self.r, self.g, self.b, self.a)


@dataclass
class HabitDay:
    date: int
    completed: bool


@dataclass
class Habit:
    id: int
    name: str
    color: Color
    days: list[HabitDay] = field(default_factory=list)

    @property
    def is_full(self) -> bool:
        return len(self.days) >= MAX_CALENDAR_DAYS


@dataclass
class HabitCollection:
    habits: list[Habit] = field(default_factory=list)
    active_habit_id: int = 0
    is_editing_new_habit: bool = False
    is_calendar_expanded: bool = False
    extra_weeks: int = 0
    calendar_offset_weeks: int = 0
    has_done_initial_scroll: bool = False
    # opaque handle owned by the host's text-entry widget, never persisted
    habit_name_input: Any = None

    @property
    def is_full(self) -> bool:
        return len(self.habits) >= MAX_HABITS
