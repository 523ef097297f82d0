from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

import mysql.connector

from ..core.enums import SlotKind
from ..core.exceptions import DuplicateSessionError, StaleWriteError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, from_db_datetime, is_duplicate_key, to_db_datetime
from ..students.model import StudentAggregate
from ..students.mysql_student_repository import write_aggregates
from ..timetable.model import Cohort
from .model import AbsenceRecord, SessionRecord
from .repository import SessionRepository


class MySQLSessionRepository(SessionRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get(self, slot_id: int, session_date: datetime) -> Optional[SessionRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT session_id, slot_id, instructor_id, session_date, branch, year, section, subject, kind, version
                FROM attendance_sessions
                WHERE slot_id=%s AND session_date=%s
                """,
                (int(slot_id), to_db_datetime(session_date)),
            )
            r = fetchone(cur)
            if not r:
                return None

            cur.execute("SELECT student_id FROM session_absentees WHERE session_id=%s", (int(r["session_id"]),))
            absentees = frozenset(int(a["student_id"]) for a in fetchall(cur))

            return SessionRecord(
                session_id=int(r["session_id"]),
                slot_id=int(r["slot_id"]),
                instructor_id=int(r["instructor_id"]),
                session_date=from_db_datetime(r["session_date"]),
                cohort=Cohort(branch=r["branch"], year=int(r["year"]), section=r["section"]),
                subject=r["subject"],
                kind=SlotKind(r["kind"]),
                absentee_ids=absentees,
                version=int(r["version"]),
            )

    def save(self, record: SessionRecord, *, aggregates: Sequence[StudentAggregate]) -> SessionRecord:
        with db_cursor(self._conn_factory) as (_, cur):
            if record.session_id is None:
                try:
                    cur.execute(
                        """
                        INSERT INTO attendance_sessions(
                            slot_id, instructor_id, session_date, branch, year, section, subject, kind, version
                        )
                        VALUES(%s,%s,%s,%s,%s,%s,%s,%s,0)
                        """,
                        (
                            int(record.slot_id),
                            int(record.instructor_id),
                            to_db_datetime(record.session_date),
                            record.cohort.branch,
                            int(record.cohort.year),
                            record.cohort.section,
                            record.subject,
                            record.kind.value,
                        ),
                    )
                except mysql.connector.IntegrityError as e:
                    if is_duplicate_key(e):
                        raise DuplicateSessionError(
                            f"session for slot {record.slot_id} on {record.session_date.date()} already exists"
                        ) from e
                    raise
                saved = replace(record, session_id=int(cur.lastrowid), version=0)
            else:
                cur.execute(
                    "UPDATE attendance_sessions SET version=version+1 WHERE session_id=%s AND version=%s",
                    (int(record.session_id), int(record.version)),
                )
                if cur.rowcount != 1:
                    raise StaleWriteError(f"session {record.session_id} changed concurrently")
                cur.execute("DELETE FROM session_absentees WHERE session_id=%s", (int(record.session_id),))
                saved = replace(record, version=record.version + 1)

            if saved.absentee_ids:
                cur.executemany(
                    "INSERT INTO session_absentees(session_id, student_id) VALUES(%s,%s)",
                    [(saved.session_id, int(sid)) for sid in sorted(saved.absentee_ids)],
                )

            write_aggregates(cur, aggregates, subject=saved.subject)
            return saved

    def list_absences(self, student_id: int) -> Sequence[AbsenceRecord]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT s.session_id, s.session_date, s.subject, s.kind, s.instructor_id, i.full_name
                FROM session_absentees a
                JOIN attendance_sessions s ON s.session_id = a.session_id
                LEFT JOIN instructors i ON i.instructor_id = s.instructor_id
                WHERE a.student_id=%s
                ORDER BY s.session_date DESC, s.session_id DESC
                """,
                (int(student_id),),
            )
            return [
                AbsenceRecord(
                    session_id=int(r["session_id"]),
                    session_date=from_db_datetime(r["session_date"]),
                    subject=r["subject"],
                    kind=SlotKind(r["kind"]),
                    instructor_id=int(r["instructor_id"]),
                    instructor_name=r.get("full_name"),
                )
                for r in fetchall(cur)
            ]
