from __future__ import annotations

from typing import Optional

from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchone
from .model import Instructor
from .repository import InstructorRepository


class MySQLInstructorRepository(InstructorRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, instructor_id: int) -> Optional[Instructor]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "SELECT instructor_id, full_name, department FROM instructors WHERE instructor_id=%s",
                (int(instructor_id),),
            )
            row = fetchone(cur)
            if not row:
                return None
            return Instructor(
                instructor_id=int(row["instructor_id"]),
                full_name=row["full_name"],
                department=row.get("department") or "",
            )
