from __future__ import annotations

from dataclasses import dataclass


@dataclass(frozen=True)
class Instructor:
    """Instructor identity as kept by the user-record store."""

    instructor_id: int
    full_name: str
    department: str = ""
