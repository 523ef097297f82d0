from __future__ import annotations

from datetime import datetime
from typing import Optional, Protocol, Sequence

from ..students.model import StudentAggregate
from .model import AbsenceRecord, SessionRecord


class SessionRepository(Protocol):
    def get(self, slot_id: int, session_date: datetime) -> Optional[SessionRecord]:
        raise NotImplementedError

    def save(self, record: SessionRecord, *, aggregates: Sequence[StudentAggregate]) -> SessionRecord:
        """Persist a session and its students' aggregates as one transaction.

        A record without ``session_id`` is inserted; the (slot, date) unique key
        turns a lost race into DuplicateSessionError. A record with an id replaces
        the stored absentee set if the stored version still equals
        ``record.version``, otherwise StaleWriteError. Aggregates carry their own
        versions and fail the same way. On any error nothing is applied.
        Returns the stored record with its new id/version.
        """

        raise NotImplementedError

    def list_absences(self, student_id: int) -> Sequence[AbsenceRecord]:
        """Sessions where the student was absent, newest first."""

        raise NotImplementedError
