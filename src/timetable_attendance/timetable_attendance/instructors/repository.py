from __future__ import annotations

from typing import Optional, Protocol

from .model import Instructor


class InstructorRepository(Protocol):
    """Read-only view of the instructor-record store."""

    def get_by_id(self, instructor_id: int) -> Optional[Instructor]:
        raise NotImplementedError
