from __future__ import annotations

from enum import Enum


class Weekday(str, Enum):
    """Teaching days a timetable slot can recur on."""

    MONDAY = "Monday"
    TUESDAY = "Tuesday"
    WEDNESDAY = "Wednesday"
    THURSDAY = "Thursday"
    FRIDAY = "Friday"
    SATURDAY = "Saturday"

    @classmethod
    def parse(cls, value: str) -> "Weekday":
        key = (value or "").strip().lower()
        for day in cls:
            if day.value.lower() == key:
                return day
        raise ValueError(value)


class SlotKind(str, Enum):
    LECTURE = "Lecture"
    LAB = "Lab"
    LEISURE = "Leisure"


class AttendanceStatus(str, Enum):
    """Per-student status in an attendance submission."""

    PRESENT = "Present"
    ABSENT = "Absent"


class StandingStatus(str, Enum):
    """Attendance standing shown on student dashboards and analytics."""

    SAFE = "Safe"
    CRITICAL = "Critical"
