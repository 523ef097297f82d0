from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:
    from ..timetable.model import TimetableSlot


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a slot, instructor or student does not exist."""


class SlotNotFoundError(NotFoundError):
    """Raised when attendance is marked against an unknown slot."""


class ConflictError(DomainError):
    """Raised when a new slot overlaps an existing slot of the same instructor."""

    def __init__(self, slot: "TimetableSlot", message: Optional[str] = None):
        self.slot = slot
        super().__init__(
            message
            or f'Slot overlaps with "{slot.subject}" ({slot.start_time} - {slot.end_time})'
        )


class StorageUnavailable(DomainError):
    """Raised on transient storage faults. The whole operation is safe to retry."""


class DuplicateSessionError(DomainError):
    """A session for the same (slot, date) was created by another writer."""


class StaleWriteError(DomainError):
    """A versioned row changed between read and write; nothing was applied."""
