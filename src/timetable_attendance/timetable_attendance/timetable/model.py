from __future__ import annotations

from dataclasses import dataclass
from typing import Optional

from ..core.enums import SlotKind, Weekday


@dataclass(frozen=True)
class Cohort:
    """Group of students sharing a slot: (branch, year, section)."""

    branch: str
    year: int
    section: str


@dataclass(frozen=True)
class SlotSpec:
    """A validated, normalized slot that has not been stored yet."""

    day: Weekday
    start_time: str
    end_time: str
    period_index: int
    cohort: Cohort
    subject: str
    room: str
    kind: SlotKind = SlotKind.LECTURE
    batch: Optional[int] = None


@dataclass(frozen=True)
class TimetableSlot:
    """Domain entity: one recurring weekly time block of an instructor.

    Slots are never edited in place; an edit is a remove followed by an add.
    """

    slot_id: int
    instructor_id: int
    day: Weekday
    start_time: str
    end_time: str
    period_index: int
    cohort: Cohort
    subject: str
    room: str
    kind: SlotKind = SlotKind.LECTURE
    batch: Optional[int] = None

    @classmethod
    def from_spec(cls, *, slot_id: int, instructor_id: int, spec: SlotSpec) -> "TimetableSlot":
        return cls(
            slot_id=int(slot_id),
            instructor_id=int(instructor_id),
            day=spec.day,
            start_time=spec.start_time,
            end_time=spec.end_time,
            period_index=spec.period_index,
            cohort=spec.cohort,
            subject=spec.subject,
            room=spec.room,
            kind=spec.kind,
            batch=spec.batch,
        )

    @property
    def time_range(self) -> str:
        return f"{self.start_time} - {self.end_time}"

    def to_dict(self) -> dict:
        return {
            "slot_id": self.slot_id,
            "instructor_id": self.instructor_id,
            "day": self.day.value,
            "start_time": self.start_time,
            "end_time": self.end_time,
            "time": self.time_range,
            "period_index": self.period_index,
            "branch": self.cohort.branch,
            "year": self.cohort.year,
            "section": self.cohort.section,
            "subject": self.subject,
            "room": self.room,
            "kind": self.kind.value,
            "batch": self.batch,
        }
