from __future__ import annotations

from typing import Callable, Optional, Protocol, Sequence

from ..core.enums import Weekday
from .model import Cohort, SlotSpec, TimetableSlot

# Receives the instructor's current slots; raises to veto the insert.
SlotGuard = Callable[[Sequence[TimetableSlot]], None]


class SlotRepository(Protocol):
    def get_slot(self, slot_id: int) -> Optional[TimetableSlot]:
        raise NotImplementedError

    def list_for_instructor(self, instructor_id: int) -> Sequence[TimetableSlot]:
        """All slots of an instructor in stored (insertion) order."""

        raise NotImplementedError

    def insert_checked(self, *, instructor_id: int, spec: SlotSpec, guard: SlotGuard) -> TimetableSlot:
        """Run ``guard`` on the current slots and insert ``spec`` if it passes.

        Implementations must hold a per-instructor exclusive section around the
        guard and the insert so two concurrent inserts cannot both pass.
        """

        raise NotImplementedError

    def delete(self, *, instructor_id: int, slot_id: int) -> bool:
        raise NotImplementedError

    def list_for_cohort(self, *, cohort: Cohort, day: Optional[Weekday] = None) -> Sequence[TimetableSlot]:
        """Slots of every instructor serving ``cohort`` (on ``day`` when given)."""

        raise NotImplementedError
