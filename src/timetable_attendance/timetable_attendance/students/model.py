from __future__ import annotations

from dataclasses import dataclass, field
from typing import Optional

from ..core.constants import EMPTY_PERCENTAGE
from ..timetable.model import Cohort


def subject_key(name: str) -> str:
    """Identity of a subject entry; matches the case-insensitive subject column."""
    return str(name).strip().casefold()


def attendance_percentage(present_classes: int, total_classes: int) -> float:
    if total_classes <= 0:
        return EMPTY_PERCENTAGE
    return present_classes / total_classes * 100


@dataclass(frozen=True)
class SubjectAttendance:
    subject: str
    total_classes: int = 0
    present_classes: int = 0
    percentage: float = EMPTY_PERCENTAGE

    def to_dict(self) -> dict:
        return {
            "subject": self.subject,
            "total_classes": self.total_classes,
            "present_classes": self.present_classes,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class AttendanceSummary:
    """Global counters; always the sum of a student's subject entries."""

    total_classes: int = 0
    present_classes: int = 0
    percentage: float = EMPTY_PERCENTAGE

    def to_dict(self) -> dict:
        return {
            "total_classes": self.total_classes,
            "present_classes": self.present_classes,
            "percentage": self.percentage,
        }


@dataclass(frozen=True)
class StudentAggregate:
    """Derived attendance counters of one student.

    ``version`` is bumped by every store write and lets a writer detect that
    the aggregate changed since it was read.
    """

    student_id: int
    subjects: tuple[SubjectAttendance, ...] = ()
    summary: AttendanceSummary = field(default_factory=AttendanceSummary)
    version: int = 0

    def subject(self, name: str) -> Optional[SubjectAttendance]:
        key = subject_key(name)
        for entry in self.subjects:
            if subject_key(entry.subject) == key:
                return entry
        return None


@dataclass(frozen=True)
class Student:
    student_id: int
    full_name: str
    rollno: str
    cohort: Cohort
    is_graduated: bool = False
