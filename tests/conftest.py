from __future__ import annotations

from dataclasses import replace
from datetime import datetime
from typing import Optional, Sequence

import pytest

from src.timetable_attendance.timetable_attendance.container import wire_container
from src.timetable_attendance.timetable_attendance.core.enums import Weekday
from src.timetable_attendance.timetable_attendance.core.exceptions import DuplicateSessionError, StaleWriteError
from src.timetable_attendance.timetable_attendance.instructors.model import Instructor
from src.timetable_attendance.timetable_attendance.sessions.model import AbsenceRecord, SessionRecord
from src.timetable_attendance.timetable_attendance.students.model import Student, StudentAggregate
from src.timetable_attendance.timetable_attendance.timetable.model import Cohort, SlotSpec, TimetableSlot


class InMemoryInstructors:
    def __init__(self):
        self.by_id: dict[int, Instructor] = {}

    def add(self, instructor_id: int, full_name: str = "Instructor") -> Instructor:
        self.by_id[instructor_id] = Instructor(instructor_id=instructor_id, full_name=full_name)
        return self.by_id[instructor_id]

    def get_by_id(self, instructor_id: int) -> Optional[Instructor]:
        return self.by_id.get(instructor_id)


class InMemorySlots:
    def __init__(self):
        self.slots: list[TimetableSlot] = []
        self._id = 0

    def get_slot(self, slot_id: int) -> Optional[TimetableSlot]:
        return next((s for s in self.slots if s.slot_id == slot_id), None)

    def list_for_instructor(self, instructor_id: int) -> Sequence[TimetableSlot]:
        return [s for s in self.slots if s.instructor_id == instructor_id]

    def insert_checked(self, *, instructor_id: int, spec: SlotSpec, guard) -> TimetableSlot:
        guard(self.list_for_instructor(instructor_id))
        self._id += 1
        slot = TimetableSlot.from_spec(slot_id=self._id, instructor_id=instructor_id, spec=spec)
        self.slots.append(slot)
        return slot

    def delete(self, *, instructor_id: int, slot_id: int) -> bool:
        before = len(self.slots)
        self.slots = [s for s in self.slots if not (s.slot_id == slot_id and s.instructor_id == instructor_id)]
        return len(self.slots) < before

    def list_for_cohort(self, *, cohort: Cohort, day: Optional[Weekday] = None) -> Sequence[TimetableSlot]:
        return [s for s in self.slots if s.cohort == cohort and (day is None or s.day == day)]


class InMemoryStudents:
    def __init__(self):
        self.students: dict[int, Student] = {}
        self.aggregates: dict[int, StudentAggregate] = {}

    def add(self, student_id: int, *, branch="CSE", year=2, section="A", rollno=None, graduated=False) -> Student:
        student = Student(
            student_id=student_id,
            full_name=f"Student {student_id}",
            rollno=rollno or f"R{student_id:03d}",
            cohort=Cohort(branch=branch, year=year, section=section),
            is_graduated=graduated,
        )
        self.students[student_id] = student
        self.aggregates[student_id] = StudentAggregate(student_id=student_id)
        return student

    def get_by_id(self, student_id: int) -> Optional[Student]:
        return self.students.get(student_id)

    def list_by_cohort(self, cohort: Cohort) -> Sequence[Student]:
        found = [s for s in self.students.values() if s.cohort == cohort and not s.is_graduated]
        return sorted(found, key=lambda s: s.rollno)

    def get_aggregates(self, student_ids: Sequence[int]) -> dict[int, StudentAggregate]:
        return {sid: self.aggregates[sid] for sid in student_ids if sid in self.aggregates}

    def write(self, aggregates: Sequence[StudentAggregate]) -> None:
        for a in aggregates:
            if self.aggregates.get(a.student_id, StudentAggregate(a.student_id)).version != a.version:
                raise StaleWriteError(f"student {a.student_id} changed")
        for a in aggregates:
            self.aggregates[a.student_id] = replace(a, version=a.version + 1)

    def promote_year(self, *, from_year: int) -> int:
        count = 0
        for sid, s in list(self.students.items()):
            if s.cohort.year == from_year and not s.is_graduated:
                self.students[sid] = replace(s, cohort=replace(s.cohort, year=from_year + 1))
                count += 1
        return count

    def graduate_year(self, *, from_year: int, graduated_year: int) -> int:
        count = 0
        for sid, s in list(self.students.items()):
            if s.cohort.year == from_year and not s.is_graduated:
                self.students[sid] = replace(s, cohort=replace(s.cohort, year=graduated_year), is_graduated=True)
                count += 1
        return count


class InMemorySessions:
    def __init__(self, students: InMemoryStudents, instructors: InMemoryInstructors):
        self.records: dict[tuple[int, datetime], SessionRecord] = {}
        self.saves = 0
        self._students = students
        self._instructors = instructors
        self._id = 0

    def get(self, slot_id: int, session_date: datetime) -> Optional[SessionRecord]:
        return self.records.get((slot_id, session_date))

    def save(self, record: SessionRecord, *, aggregates: Sequence[StudentAggregate]) -> SessionRecord:
        key = (record.slot_id, record.session_date)
        stored = self.records.get(key)
        if record.session_id is None:
            if stored is not None:
                raise DuplicateSessionError("exists")
            self._id += 1
            saved = replace(record, session_id=self._id, version=0)
        else:
            if stored is None or stored.version != record.version:
                raise StaleWriteError("session changed")
            saved = replace(record, version=record.version + 1)

        self._students.write(aggregates)
        self.records[key] = saved
        self.saves += 1
        return saved

    def list_absences(self, student_id: int) -> Sequence[AbsenceRecord]:
        out = [
            AbsenceRecord(
                session_id=r.session_id,
                session_date=r.session_date,
                subject=r.subject,
                kind=r.kind,
                instructor_id=r.instructor_id,
                instructor_name=getattr(self._instructors.get_by_id(r.instructor_id), "full_name", None),
            )
            for r in self.records.values()
            if student_id in r.absentee_ids
        ]
        out.sort(key=lambda a: (a.session_date, a.session_id), reverse=True)
        return out


class Store:
    def __init__(self):
        self.instructors = InMemoryInstructors()
        self.slots = InMemorySlots()
        self.students = InMemoryStudents()
        self.sessions = InMemorySessions(self.students, self.instructors)
        self.container = wire_container(
            instructors_repo=self.instructors,
            slots_repo=self.slots,
            students_repo=self.students,
            sessions_repo=self.sessions,
        )


@pytest.fixture
def store() -> Store:
    return Store()
