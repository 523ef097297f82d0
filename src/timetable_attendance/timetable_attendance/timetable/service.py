from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..common.datetime_utils import time_to_minutes
from ..common.locks import KeyedLock
from ..common.validators import require_int, require_non_empty, require_year
from ..core.constants import LAB_BATCHES, LEISURE_SUBJECT, NO_ROOM
from ..core.enums import SlotKind, Weekday
from ..core.exceptions import ConflictError, NotFoundError, ValidationError
from ..instructors.repository import InstructorRepository
from .conflict import check_overlap
from .model import Cohort, SlotSpec, TimetableSlot
from .repository import SlotRepository

logger = logging.getLogger(__name__)


def sort_by_period(slots: Sequence[TimetableSlot]) -> list[TimetableSlot]:
    # sorted() is stable: slots sharing a period keep their stored order.
    return sorted(slots, key=lambda s: s.period_index)


def group_by_weekday(sorted_slots: Sequence[TimetableSlot]) -> dict[str, list[TimetableSlot]]:
    """Bucket already-sorted slots by weekday without re-sorting any bucket."""

    grouped: dict[str, list[TimetableSlot]] = {day.value: [] for day in Weekday}
    for slot in sorted_slots:
        grouped[slot.day.value].append(slot)
    return grouped


class SlotService:
    def __init__(
        self,
        slots: SlotRepository,
        instructors: InstructorRepository,
        *,
        locks: KeyedLock | None = None,
    ):
        self._slots = slots
        self._instructors = instructors
        self._locks = locks or KeyedLock()

    @staticmethod
    def build_spec(
        *,
        day: str,
        start_time: str,
        end_time: str,
        period_index,
        branch: str,
        year,
        section: str,
        subject: Optional[str] = None,
        room: Optional[str] = None,
        kind: str = SlotKind.LECTURE.value,
        batch=None,
    ) -> SlotSpec:
        """Validate raw slot fields and normalize them into a SlotSpec."""

        try:
            weekday = Weekday.parse(day)
        except ValueError:
            raise ValidationError(f"Invalid day: {day!r}")

        try:
            slot_kind = SlotKind(kind or SlotKind.LECTURE.value)
        except ValueError:
            raise ValidationError(f"Invalid slot type: {kind!r}")

        start_time = require_non_empty(start_time, "start_time")
        end_time = require_non_empty(end_time, "end_time")
        if time_to_minutes(end_time) <= time_to_minutes(start_time):
            raise ValidationError("end_time must be after start_time")

        cohort = Cohort(
            branch=require_non_empty(branch, "branch").upper(),
            year=require_year(year),
            section=require_non_empty(section, "section").upper(),
        )

        if slot_kind == SlotKind.LEISURE:
            subject, room = LEISURE_SUBJECT, NO_ROOM
        else:
            subject = require_non_empty(subject, "subject")
            room = (room or "").strip() or NO_ROOM

        lab_batch = None
        if slot_kind == SlotKind.LAB:
            lab_batch = require_int(batch, "batch")
            if lab_batch not in LAB_BATCHES:
                raise ValidationError("batch must be 1 or 2")

        return SlotSpec(
            day=weekday,
            start_time=start_time,
            end_time=end_time,
            period_index=require_int(period_index, "period_index"),
            cohort=cohort,
            subject=subject,
            room=room,
            kind=slot_kind,
            batch=lab_batch,
        )

    def _require_instructor(self, instructor_id: int) -> None:
        if not self._instructors.get_by_id(int(instructor_id)):
            raise NotFoundError(f"Instructor {instructor_id} not found")

    def add_slot(self, instructor_id: int, spec: SlotSpec) -> TimetableSlot:
        self._require_instructor(instructor_id)

        def guard(existing: Sequence[TimetableSlot]) -> None:
            conflict = check_overlap(existing, day=spec.day, start_time=spec.start_time, end_time=spec.end_time)
            if conflict is not None:
                raise ConflictError(conflict)

        with self._locks.hold(("instructor", int(instructor_id))):
            try:
                slot = self._slots.insert_checked(instructor_id=int(instructor_id), spec=spec, guard=guard)
            except ConflictError as e:
                logger.warning(
                    "slot rejected for instructor %s on %s %s-%s: overlaps slot %s",
                    instructor_id, spec.day.value, spec.start_time, spec.end_time, e.slot.slot_id,
                )
                raise

        logger.info(
            "slot %s added for instructor %s (%s %s, %s)",
            slot.slot_id, instructor_id, slot.day.value, slot.time_range, slot.subject,
        )
        return slot

    def remove_slot(self, instructor_id: int, slot_id: int) -> None:
        with self._locks.hold(("instructor", int(instructor_id))):
            if not self._slots.delete(instructor_id=int(instructor_id), slot_id=int(slot_id)):
                raise NotFoundError(f"Slot {slot_id} not found")
        logger.info("slot %s removed for instructor %s", slot_id, instructor_id)

    def get_slot(self, slot_id: int) -> Optional[TimetableSlot]:
        return self._slots.get_slot(int(slot_id))

    def list_by_instructor(self, instructor_id: int) -> list[TimetableSlot]:
        return sort_by_period(self._slots.list_for_instructor(int(instructor_id)))

    def weekly_timetable(self, instructor_id: int) -> dict[str, list[TimetableSlot]]:
        return group_by_weekday(self.list_by_instructor(instructor_id))

    def list_by_cohort(self, branch: str, year, section: str, day: str) -> list[TimetableSlot]:
        try:
            weekday = Weekday.parse(day)
        except ValueError:
            raise ValidationError(f"Invalid day: {day!r}")
        return sort_by_period(self._slots.list_for_cohort(cohort=self._cohort(branch, year, section), day=weekday))

    def cohort_week(self, branch: str, year, section: str) -> dict[str, list[TimetableSlot]]:
        slots = self._slots.list_for_cohort(cohort=self._cohort(branch, year, section))
        return group_by_weekday(sort_by_period(slots))

    def list_classes(self, instructor_id: int) -> list[dict]:
        """Distinct (subject, year, branch, section) an instructor teaches, first-seen order."""

        seen: set[tuple] = set()
        out: list[dict] = []
        for s in self._slots.list_for_instructor(int(instructor_id)):
            key = (s.subject, s.cohort.year, s.cohort.branch, s.cohort.section)
            if key in seen:
                continue
            seen.add(key)
            out.append(
                {
                    "subject": s.subject,
                    "year": s.cohort.year,
                    "branch": s.cohort.branch,
                    "section": s.cohort.section,
                }
            )
        return out

    @staticmethod
    def _cohort(branch: str, year, section: str) -> Cohort:
        return Cohort(
            branch=require_non_empty(branch, "branch").upper(),
            year=require_year(year),
            section=require_non_empty(section, "section").upper(),
        )
