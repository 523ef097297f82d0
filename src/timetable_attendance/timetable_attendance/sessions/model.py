from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

from ..core.enums import AttendanceStatus, SlotKind
from ..timetable.model import Cohort


@dataclass(frozen=True)
class SessionRecord:
    """Domain entity: one dated occurrence of a slot.

    Only absent students are stored; everyone else in the cohort was present.
    ``session_date`` is midnight UTC of the calendar day.
    """

    session_id: Optional[int]
    slot_id: int
    instructor_id: int
    session_date: datetime
    cohort: Cohort
    subject: str
    kind: SlotKind
    absentee_ids: frozenset[int]
    version: int = 0

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "slot_id": self.slot_id,
            "date": self.session_date.date().isoformat(),
            "branch": self.cohort.branch,
            "year": self.cohort.year,
            "section": self.cohort.section,
            "subject": self.subject,
            "absentees": sorted(self.absentee_ids),
        }


@dataclass(frozen=True)
class AttendanceEntry:
    student_id: int
    status: AttendanceStatus


@dataclass(frozen=True)
class MarkResult:
    created: bool
    session: SessionRecord
    affected_count: int


@dataclass(frozen=True)
class AbsenceRecord:
    """Read-model for a student's absence history."""

    session_id: int
    session_date: datetime
    subject: str
    kind: SlotKind
    instructor_id: int
    instructor_name: Optional[str] = None

    def to_dict(self) -> dict:
        return {
            "session_id": self.session_id,
            "date": self.session_date.date().isoformat(),
            "subject": self.subject,
            "type": self.kind.value,
            "instructor_id": self.instructor_id,
            "instructor": self.instructor_name or "Instructor",
        }
