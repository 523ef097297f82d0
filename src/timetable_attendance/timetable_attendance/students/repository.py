from __future__ import annotations

from typing import Optional, Protocol, Sequence

from ..timetable.model import Cohort
from .model import Student, StudentAggregate


class StudentRepository(Protocol):
    """Student-record store as seen by the attendance core.

    Aggregate writes are not exposed here: they happen inside the session
    ledger's transaction (see SessionRepository.save).
    """

    def get_by_id(self, student_id: int) -> Optional[Student]:
        raise NotImplementedError

    def list_by_cohort(self, cohort: Cohort) -> Sequence[Student]:
        """Non-graduated students of a cohort, ordered by roll number."""

        raise NotImplementedError

    def get_aggregates(self, student_ids: Sequence[int]) -> dict[int, StudentAggregate]:
        raise NotImplementedError

    def promote_year(self, *, from_year: int) -> int:
        """Increment ``year`` of every non-graduated student in ``from_year``. Returns affected count."""

        raise NotImplementedError

    def graduate_year(self, *, from_year: int, graduated_year: int) -> int:
        """Flag every non-graduated student in ``from_year`` as graduated. Returns affected count."""

        raise NotImplementedError
