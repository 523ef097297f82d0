from __future__ import annotations

from typing import Optional, Sequence

from ..core.exceptions import StaleWriteError
from ..database.connection import DatabaseConnection
from ..database.mysql_base import db_cursor, fetchall, fetchone, in_placeholders
from ..timetable.model import Cohort
from .model import AttendanceSummary, Student, StudentAggregate, SubjectAttendance, subject_key
from .repository import StudentRepository


def _row_to_student(r: dict) -> Student:
    return Student(
        student_id=int(r["student_id"]),
        full_name=r["full_name"],
        rollno=r["rollno"],
        cohort=Cohort(branch=r["branch"], year=int(r["year"]), section=r["section"]),
        is_graduated=bool(r.get("is_graduated", False)),
    )


def write_aggregates(cur, aggregates: Sequence[StudentAggregate], *, subject: str) -> None:
    """Bulk-write one subject entry and the summary of every aggregate on ``cur``.

    Runs inside the caller's transaction. Raises StaleWriteError when any
    student's aggregate changed since it was read.
    """

    if not aggregates:
        return

    cur.executemany(
        """
        UPDATE students
        SET total_classes=%s, present_classes=%s, percentage=%s, aggregate_version=aggregate_version+1
        WHERE student_id=%s AND aggregate_version=%s
        """,
        [
            (
                a.summary.total_classes,
                a.summary.present_classes,
                a.summary.percentage,
                int(a.student_id),
                int(a.version),
            )
            for a in aggregates
        ],
    )
    if cur.rowcount != len(aggregates):
        raise StaleWriteError("student aggregates changed concurrently")

    key = subject_key(subject)
    rows = []
    for a in aggregates:
        for position, entry in enumerate(a.subjects):
            if subject_key(entry.subject) == key:
                rows.append(
                    (int(a.student_id), entry.subject, position, entry.total_classes, entry.present_classes, entry.percentage)
                )
    cur.executemany(
        """
        INSERT INTO student_subject_attendance(student_id, subject, position, total_classes, present_classes, percentage)
        VALUES(%s,%s,%s,%s,%s,%s)
        ON DUPLICATE KEY UPDATE
            total_classes=VALUES(total_classes),
            present_classes=VALUES(present_classes),
            percentage=VALUES(percentage)
        """,
        rows,
    )


class MySQLStudentRepository(StudentRepository):
    def __init__(self, conn_factory: DatabaseConnection):
        self._conn_factory = conn_factory

    def get_by_id(self, student_id: int) -> Optional[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, full_name, rollno, branch, year, section, is_graduated
                FROM students
                WHERE student_id=%s
                """,
                (int(student_id),),
            )
            r = fetchone(cur)
            return _row_to_student(r) if r else None

    def list_by_cohort(self, cohort: Cohort) -> Sequence[Student]:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                """
                SELECT student_id, full_name, rollno, branch, year, section, is_graduated
                FROM students
                WHERE branch=%s AND year=%s AND section=%s AND is_graduated=0
                ORDER BY rollno ASC
                """,
                (cohort.branch, int(cohort.year), cohort.section),
            )
            return [_row_to_student(r) for r in fetchall(cur)]

    def get_aggregates(self, student_ids: Sequence[int]) -> dict[int, StudentAggregate]:
        ids = [int(i) for i in student_ids]
        if not ids:
            return {}

        marks = in_placeholders(ids)
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                f"""
                SELECT student_id, total_classes, present_classes, percentage, aggregate_version
                FROM students
                WHERE student_id IN ({marks})
                """,
                tuple(ids),
            )
            students = fetchall(cur)

            cur.execute(
                f"""
                SELECT student_id, subject, total_classes, present_classes, percentage
                FROM student_subject_attendance
                WHERE student_id IN ({marks})
                ORDER BY student_id ASC, position ASC
                """,
                tuple(ids),
            )
            subject_rows = fetchall(cur)

        by_student: dict[int, list[SubjectAttendance]] = {}
        for r in subject_rows:
            by_student.setdefault(int(r["student_id"]), []).append(
                SubjectAttendance(
                    subject=r["subject"],
                    total_classes=int(r["total_classes"]),
                    present_classes=int(r["present_classes"]),
                    percentage=float(r["percentage"]),
                )
            )

        out: dict[int, StudentAggregate] = {}
        for r in students:
            sid = int(r["student_id"])
            out[sid] = StudentAggregate(
                student_id=sid,
                subjects=tuple(by_student.get(sid, [])),
                summary=AttendanceSummary(
                    total_classes=int(r["total_classes"]),
                    present_classes=int(r["present_classes"]),
                    percentage=float(r["percentage"]),
                ),
                version=int(r["aggregate_version"]),
            )
        return out

    def promote_year(self, *, from_year: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET year=year+1 WHERE year=%s AND is_graduated=0",
                (int(from_year),),
            )
            return int(cur.rowcount)

    def graduate_year(self, *, from_year: int, graduated_year: int) -> int:
        with db_cursor(self._conn_factory) as (_, cur):
            cur.execute(
                "UPDATE students SET year=%s, is_graduated=1 WHERE year=%s AND is_graduated=0",
                (int(graduated_year), int(from_year)),
            )
            return int(cur.rowcount)
