from __future__ import annotations

from datetime import date, timedelta

import pytest

from src.timetable_attendance.timetable_attendance.core.exceptions import NotFoundError, ValidationError
from src.timetable_attendance.timetable_attendance.timetable.service import SlotService


def _slot(store, subject, start, end, period):
    spec = SlotService.build_spec(
        day="Monday", start_time=start, end_time=end, period_index=period,
        branch="CSE", year=2, section="A", subject=subject, room="101",
    )
    return store.container.slot_service.add_slot(10, spec)


@pytest.fixture
def marked(store):
    store.instructors.add(10)
    store.students.add(1, rollno="R002")
    store.students.add(2, rollno="R001")
    store.students.add(3, section="B")
    physics = _slot(store, "Physics", "09:00", "10:00", 1)
    maths = _slot(store, "Maths", "10:00", "11:00", 2)

    ledger = store.container.session_ledger
    day = date(2026, 3, 2)
    for week, absent in enumerate([{1}, {1}, set(), {1, 2}]):
        roster = [{"student_id": sid, "status": "Absent" if sid in absent else "Present"} for sid in (1, 2)]
        ledger.mark_session(physics.slot_id, day + timedelta(days=7 * week), roster)
    ledger.mark_session(maths.slot_id, day, [{"student_id": 1, "status": "Present"}, {"student_id": 2, "status": "Present"}])
    return store


def test_dashboard(marked):
    board = marked.container.student_service.dashboard(1)

    assert board["profile"]["rollno"] == "R002"
    assert board["profile"]["section"] == "A"
    assert board["overall"] == {"total_classes": 5, "present_classes": 2, "percentage": 40.0}

    physics, maths = board["subjects"]
    assert physics["subject"] == "Physics"
    assert physics["percentage"] == 25.0
    assert physics["status"] == "Critical"
    assert physics["classes_to_attend"] == 8
    assert maths["status"] == "Safe"
    assert maths["classes_to_attend"] == 0


def test_dashboard_of_student_without_marks(marked):
    board = marked.container.student_service.dashboard(3)
    assert board["overall"] == {"total_classes": 0, "present_classes": 0, "percentage": 100.0}
    assert board["subjects"] == []


def test_unknown_student(store):
    service = store.container.student_service
    with pytest.raises(NotFoundError):
        service.dashboard(404)
    with pytest.raises(NotFoundError):
        service.get_aggregate(404)


def test_section_analytics(marked):
    report = marked.container.student_service.section_analytics("cse", 2, "a", "physics")

    assert [r["rollno"] for r in report["students"]] == ["R001", "R002"]
    assert [r["percentage"] for r in report["students"]] == [75.0, 25.0]
    assert report["stats"] == {"total_students": 2, "class_average": 50.0, "defaulter_count": 1}
    assert [r["student_id"] for r in report["defaulters"]] == [1]


def test_section_analytics_skips_students_without_subject(marked):
    report = marked.container.student_service.section_analytics("CSE", 2, "B", "Physics")
    assert report["stats"] == {"total_students": 0, "class_average": 0.0, "defaulter_count": 0}
    assert report["students"] == []


def test_section_analytics_validates_input(store):
    with pytest.raises(ValidationError):
        store.container.student_service.section_analytics("CSE", 9, "A", "Physics")
    with pytest.raises(ValidationError):
        store.container.student_service.section_analytics("CSE", 2, "A", "")
