from __future__ import annotations

from typing import Any, Dict, Optional, Sequence

from ..core.enums import SlotKind, Weekday
from ..core.exceptions import NotFoundError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone
from .model import Cohort, SlotSpec, TimetableSlot
from .repository import SlotGuard, SlotRepository

_COLUMNS = """
    slot_id, instructor_id, day, start_time, end_time, period_index,
    branch, year, section, subject, room, kind, batch
"""


def _row_to_slot(r: Dict[str, Any]) -> TimetableSlot:
    return TimetableSlot(
        slot_id=int(r["slot_id"]),
        instructor_id=int(r["instructor_id"]),
        day=Weekday(r["day"]),
        start_time=r["start_time"],
        end_time=r["end_time"],
        period_index=int(r["period_index"]),
        cohort=Cohort(branch=r["branch"], year=int(r["year"]), section=r["section"]),
        subject=r["subject"],
        room=r["room"],
        kind=SlotKind(r["kind"]),
        batch=int(r["batch"]) if r.get("batch") is not None else None,
    )


class MySQLSlotRepository(SlotRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_slot(self, slot_id: int) -> Optional[TimetableSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(f"SELECT {_COLUMNS} FROM timetable_slots WHERE slot_id=%s", (int(slot_id),))
            r = fetchone(cur)
            return _row_to_slot(r) if r else None

    def list_for_instructor(self, instructor_id: int) -> Sequence[TimetableSlot]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM timetable_slots WHERE instructor_id=%s ORDER BY slot_id ASC",
                (int(instructor_id),),
            )
            return [_row_to_slot(r) for r in fetchall(cur)]

    def insert_checked(self, *, instructor_id: int, spec: SlotSpec, guard: SlotGuard) -> TimetableSlot:
        with db_cursor(self._conn_factory) as (_, cur):
            # Row lock on the owner serializes concurrent inserts for one instructor.
            cur.execute(
                "SELECT instructor_id FROM instructors WHERE instructor_id=%s FOR UPDATE",
                (int(instructor_id),),
            )
            if not fetchone(cur):
                raise NotFoundError(f"Instructor {instructor_id} not found")

            cur.execute(
                f"SELECT {_COLUMNS} FROM timetable_slots WHERE instructor_id=%s ORDER BY slot_id ASC",
                (int(instructor_id),),
            )
            guard([_row_to_slot(r) for r in fetchall(cur)])

            cur.execute(
                """
                INSERT INTO timetable_slots(
                    instructor_id, day, start_time, end_time, period_index,
                    branch, year, section, subject, room, kind, batch
                )
                VALUES(%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s,%s)
                """,
                (
                    int(instructor_id),
                    spec.day.value,
                    spec.start_time,
                    spec.end_time,
                    spec.period_index,
                    spec.cohort.branch,
                    spec.cohort.year,
                    spec.cohort.section,
                    spec.subject,
                    spec.room,
                    spec.kind.value,
                    spec.batch,
                ),
            )
            return TimetableSlot.from_spec(slot_id=int(cur.lastrowid), instructor_id=instructor_id, spec=spec)

    def delete(self, *, instructor_id: int, slot_id: int) -> bool:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "DELETE FROM timetable_slots WHERE slot_id=%s AND instructor_id=%s",
                (int(slot_id), int(instructor_id)),
            )
            return cur.rowcount > 0

    def list_for_cohort(self, *, cohort: Cohort, day: Optional[Weekday] = None) -> Sequence[TimetableSlot]:
        clauses = ["branch=%s", "year=%s", "section=%s"]
        params: list[object] = [cohort.branch, int(cohort.year), cohort.section]
        if day is not None:
            clauses.append("day=%s")
            params.append(day.value)

        where = " AND ".join(clauses)

        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"SELECT {_COLUMNS} FROM timetable_slots WHERE {where} ORDER BY instructor_id ASC, slot_id ASC",
                tuple(params),
            )
            return [_row_to_slot(r) for r in fetchall(cur)]
