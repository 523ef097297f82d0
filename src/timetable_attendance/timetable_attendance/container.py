from __future__ import annotations

from dataclasses import dataclass

from .common.locks import KeyedLock
from .core.constants import DEFAULT_ATTENDANCE_THRESHOLD, DEFAULT_MARK_RETRIES
from .database.connection import DatabaseConnection, DBConfig
from .instructors.mysql_instructor_repository import MySQLInstructorRepository
from .instructors.repository import InstructorRepository
from .sessions.mysql_session_repository import MySQLSessionRepository
from .sessions.repository import SessionRepository
from .sessions.service import SessionLedger
from .students.mysql_student_repository import MySQLStudentRepository
from .students.promotion import CohortPromotionJob
from .students.repository import StudentRepository
from .students.service import StudentAttendanceService
from .timetable.mysql_slot_repository import MySQLSlotRepository
from .timetable.repository import SlotRepository
from .timetable.service import SlotService


@dataclass(frozen=True)
class Container:
    instructors_repo: InstructorRepository
    slots_repo: SlotRepository
    students_repo: StudentRepository
    sessions_repo: SessionRepository

    slot_service: SlotService
    session_ledger: SessionLedger
    student_service: StudentAttendanceService
    promotion_job: CohortPromotionJob


def wire_container(
    *,
    instructors_repo: InstructorRepository,
    slots_repo: SlotRepository,
    students_repo: StudentRepository,
    sessions_repo: SessionRepository,
    attendance_threshold: float = DEFAULT_ATTENDANCE_THRESHOLD,
    mark_retries: int = DEFAULT_MARK_RETRIES,
) -> Container:
    """Build services over any repository implementations (MySQL or in-memory)."""

    return Container(
        instructors_repo=instructors_repo,
        slots_repo=slots_repo,
        students_repo=students_repo,
        sessions_repo=sessions_repo,
        slot_service=SlotService(slots_repo, instructors_repo, locks=KeyedLock()),
        session_ledger=SessionLedger(
            sessions_repo,
            slots_repo,
            students_repo,
            locks=KeyedLock(),
            max_retries=mark_retries,
        ),
        student_service=StudentAttendanceService(students_repo, threshold=attendance_threshold),
        promotion_job=CohortPromotionJob(students_repo),
    )


def build_container(
    *,
    db_config: dict,
    attendance_threshold: float = DEFAULT_ATTENDANCE_THRESHOLD,
    mark_retries: int = DEFAULT_MARK_RETRIES,
) -> Container:
    conn = DatabaseConnection.get_instance(DBConfig.from_dict(db_config))

    return wire_container(
        instructors_repo=MySQLInstructorRepository(conn),
        slots_repo=MySQLSlotRepository(conn),
        students_repo=MySQLStudentRepository(conn),
        sessions_repo=MySQLSessionRepository(conn),
        attendance_threshold=attendance_threshold,
        mark_retries=mark_retries,
    )
