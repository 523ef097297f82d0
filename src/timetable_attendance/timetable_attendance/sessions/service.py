from __future__ import annotations

import logging
from dataclasses import replace
from datetime import date, datetime
from typing import Iterable, Mapping, Optional, Sequence, Union

from ..common.datetime_utils import normalize_session_date
from ..common.locks import KeyedLock
from ..common.validators import require_int
from ..core.constants import DEFAULT_MARK_RETRIES
from ..core.enums import AttendanceStatus, SlotKind
from ..core.exceptions import (
    DuplicateSessionError,
    SlotNotFoundError,
    StaleWriteError,
    StorageUnavailable,
    ValidationError,
)
from ..students.aggregates import AggregateUpdater
from ..students.model import StudentAggregate
from ..students.repository import StudentRepository
from ..timetable.model import TimetableSlot
from ..timetable.repository import SlotRepository
from .model import AbsenceRecord, AttendanceEntry, MarkResult, SessionRecord
from .repository import SessionRepository

logger = logging.getLogger(__name__)

DateLike = Union[date, datetime, str]


def parse_entries(entries: Iterable[Union[AttendanceEntry, Mapping]]) -> list[AttendanceEntry]:
    """Accept AttendanceEntry objects or ``{"student_id", "status"}`` mappings."""

    out: list[AttendanceEntry] = []
    for raw in entries or []:
        if isinstance(raw, AttendanceEntry):
            out.append(raw)
            continue
        if not isinstance(raw, Mapping):
            raise ValidationError("attendance entries must be objects with student_id and status")

        student_id = require_int(raw.get("student_id"), "student_id")
        status_raw = str(raw.get("status") or "").strip().capitalize()
        try:
            status = AttendanceStatus(status_raw)
        except ValueError:
            raise ValidationError(f"Invalid status {raw.get('status')!r} for student {student_id}")
        out.append(AttendanceEntry(student_id=student_id, status=status))
    return out


def absentees_from_roster(entries: Sequence[AttendanceEntry], cohort_ids: Sequence[int]) -> frozenset[int]:
    """Check the submission lists every cohort member exactly once; return the absent ids."""

    members = set(cohort_ids)
    seen: set[int] = set()
    for entry in entries:
        if entry.student_id in seen:
            raise ValidationError(f"Student {entry.student_id} appears more than once")
        if entry.student_id not in members:
            raise ValidationError(f"Student {entry.student_id} does not belong to this class")
        seen.add(entry.student_id)

    missing = [sid for sid in cohort_ids if sid not in seen]
    if missing:
        raise ValidationError(f"Attendance missing for student {missing[0]}")

    return frozenset(e.student_id for e in entries if e.status == AttendanceStatus.ABSENT)


class SessionLedger:
    """Creates or corrects the attendance record of one slot on one day.

    Each call is one logical transaction per (slot, date): the session row and
    the aggregates of every student in the cohort are written together. Lost
    races with another writer are retried from freshly read state.
    """

    def __init__(
        self,
        sessions: SessionRepository,
        slots: SlotRepository,
        students: StudentRepository,
        *,
        updater: AggregateUpdater | None = None,
        locks: KeyedLock | None = None,
        max_retries: int = DEFAULT_MARK_RETRIES,
    ):
        self._sessions = sessions
        self._slots = slots
        self._students = students
        self._updater = updater or AggregateUpdater()
        self._locks = locks or KeyedLock()
        self._max_retries = max(1, int(max_retries))

    def _require_slot(self, slot_id) -> TimetableSlot:
        slot = self._slots.get_slot(require_int(slot_id, "slot_id"))
        if not slot:
            raise SlotNotFoundError(f"Class {slot_id} not found")
        return slot

    def mark_session(
        self,
        slot_id: int,
        session_date: DateLike,
        entries: Iterable[Union[AttendanceEntry, Mapping]],
    ) -> MarkResult:
        slot = self._require_slot(slot_id)
        if slot.kind == SlotKind.LEISURE:
            raise ValidationError(f"Class {slot.slot_id} is a leisure period; attendance is not taken")
        day = normalize_session_date(session_date)

        cohort_ids = [s.student_id for s in self._students.list_by_cohort(slot.cohort)]
        absentees = absentees_from_roster(parse_entries(entries), cohort_ids)

        with self._locks.hold((slot.slot_id, day)):
            for attempt in range(1, self._max_retries + 1):
                try:
                    return self._apply(slot, day, cohort_ids, absentees)
                except (DuplicateSessionError, StaleWriteError) as e:
                    logger.warning(
                        "attendance for slot %s on %s lost a concurrent write (attempt %d/%d): %s",
                        slot.slot_id, day.date(), attempt, self._max_retries, e,
                    )

        raise StorageUnavailable(
            f"Attendance for class {slot.slot_id} on {day.date()} is being updated concurrently, try again"
        )

    def _apply(
        self,
        slot: TimetableSlot,
        day: datetime,
        cohort_ids: Sequence[int],
        absentees: frozenset[int],
    ) -> MarkResult:
        existing = self._sessions.get(slot.slot_id, day)
        first_mark = existing is None

        if existing is None:
            record = SessionRecord(
                session_id=None,
                slot_id=slot.slot_id,
                instructor_id=slot.instructor_id,
                session_date=day,
                cohort=slot.cohort,
                subject=slot.subject,
                kind=slot.kind,
                absentee_ids=absentees,
            )
            previous: frozenset[int] = frozenset()
        else:
            record = replace(existing, absentee_ids=absentees)
            previous = existing.absentee_ids

        current = self._students.get_aggregates(cohort_ids)
        updated: list[StudentAggregate] = []
        for sid in cohort_ids:
            updated.append(
                self._updater.apply(
                    current.get(sid) or StudentAggregate(student_id=sid),
                    subject=record.subject,
                    was_absent=sid in previous,
                    is_absent=sid in absentees,
                    is_first_mark=first_mark,
                )
            )

        saved = self._sessions.save(record, aggregates=updated)

        if first_mark:
            logger.info(
                "attendance created for slot %s on %s: %d students, %d absent",
                slot.slot_id, day.date(), len(cohort_ids), len(absentees),
            )
        else:
            logger.info(
                "attendance corrected for slot %s on %s: %d now absent (was %d)",
                slot.slot_id, day.date(), len(absentees), len(previous),
            )
        return MarkResult(created=first_mark, session=saved, affected_count=len(updated))

    def get_session(self, slot_id: int, session_date: DateLike) -> Optional[SessionRecord]:
        slot = self._require_slot(slot_id)
        return self._sessions.get(slot.slot_id, normalize_session_date(session_date))

    def absence_history(self, student_id: int) -> list[AbsenceRecord]:
        return list(self._sessions.list_absences(require_int(student_id, "student_id")))
