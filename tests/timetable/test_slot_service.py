import threading

import pytest

from src.timetable_attendance.timetable_attendance.core.enums import SlotKind, Weekday
from src.timetable_attendance.timetable_attendance.core.exceptions import ConflictError, NotFoundError, ValidationError
from src.timetable_attendance.timetable_attendance.timetable.service import SlotService


def _spec(day="Monday", start="09:00", end="10:00", subject="Physics", period=1, **overrides):
    fields = dict(
        day=day,
        start_time=start,
        end_time=end,
        period_index=period,
        branch="cse",
        year=2,
        section="a",
        subject=subject,
        room="101",
    )
    fields.update(overrides)
    return SlotService.build_spec(**fields)


def test_overlapping_slot_is_rejected_and_back_to_back_is_accepted(store):
    store.instructors.add(1)
    svc = store.container.slot_service

    svc.add_slot(1, _spec(start="09:00", end="10:00", subject="Physics"))

    with pytest.raises(ConflictError) as exc:
        svc.add_slot(1, _spec(start="09:30", end="10:15", subject="Chemistry", period=2))
    assert exc.value.slot.subject == "Physics"
    assert "Physics" in str(exc.value)
    assert "09:00 - 10:00" in str(exc.value)

    slot_c = svc.add_slot(1, _spec(start="10:00", end="11:00", subject="Chemistry", period=2))
    assert slot_c.subject == "Chemistry"
    assert [s.subject for s in svc.list_by_instructor(1)] == ["Physics", "Chemistry"]


def test_other_instructors_and_days_do_not_conflict(store):
    store.instructors.add(1)
    store.instructors.add(2)
    svc = store.container.slot_service

    svc.add_slot(1, _spec())
    svc.add_slot(2, _spec())
    svc.add_slot(1, _spec(day="Tuesday"))

    assert len(store.slots.slots) == 3


def test_unknown_instructor_cannot_add_slots(store):
    with pytest.raises(NotFoundError):
        store.container.slot_service.add_slot(99, _spec())


def test_remove_slot(store):
    store.instructors.add(1)
    svc = store.container.slot_service
    slot = svc.add_slot(1, _spec())

    svc.remove_slot(1, slot.slot_id)
    assert svc.list_by_instructor(1) == []

    with pytest.raises(NotFoundError):
        svc.remove_slot(1, slot.slot_id)


def test_remove_slot_of_another_instructor_is_not_found(store):
    store.instructors.add(1)
    store.instructors.add(2)
    slot = store.container.slot_service.add_slot(1, _spec())

    with pytest.raises(NotFoundError):
        store.container.slot_service.remove_slot(2, slot.slot_id)


def test_weekly_timetable_sorts_once_then_buckets(store):
    store.instructors.add(1)
    svc = store.container.slot_service
    svc.add_slot(1, _spec(day="Monday", start="11:00", end="12:00", subject="Late", period=3))
    svc.add_slot(1, _spec(day="Wednesday", start="09:00", end="10:00", subject="Wed", period=1))
    svc.add_slot(1, _spec(day="Monday", start="09:00", end="10:00", subject="Early", period=1))
    # Same period as "Early" but stored later: must stay after it.
    svc.add_slot(1, _spec(day="Monday", start="10:00", end="11:00", subject="Tie", period=1))

    week = svc.weekly_timetable(1)

    assert list(week) == [d.value for d in Weekday]
    assert [s.subject for s in week["Monday"]] == ["Early", "Tie", "Late"]
    assert [s.subject for s in week["Wednesday"]] == ["Wed"]
    assert week["Saturday"] == []


def test_list_by_cohort_spans_instructors(store):
    store.instructors.add(1)
    store.instructors.add(2)
    svc = store.container.slot_service
    svc.add_slot(1, _spec(subject="Physics", period=2, start="10:00", end="11:00"))
    svc.add_slot(2, _spec(subject="Maths", period=1))
    svc.add_slot(2, _spec(subject="Other cohort", section="B", period=3, start="12:00", end="13:00"))

    slots = svc.list_by_cohort("CSE", 2, "A", "monday")
    assert [s.subject for s in slots] == ["Maths", "Physics"]

    week = svc.cohort_week("cse", 2, "a")
    assert [s.subject for s in week["Monday"]] == ["Maths", "Physics"]


def test_list_classes_is_distinct(store):
    store.instructors.add(1)
    svc = store.container.slot_service
    svc.add_slot(1, _spec(day="Monday"))
    svc.add_slot(1, _spec(day="Tuesday"))
    svc.add_slot(1, _spec(day="Tuesday", subject="Lab work", start="11:00", end="13:00", kind="Lab", batch=2))

    assert svc.list_classes(1) == [
        {"subject": "Physics", "year": 2, "branch": "CSE", "section": "A"},
        {"subject": "Lab work", "year": 2, "branch": "CSE", "section": "A"},
    ]


def test_build_spec_normalizes_fields():
    spec = _spec(kind="Leisure", subject="ignored", room="202", batch=1)
    assert spec.kind == SlotKind.LEISURE
    assert spec.subject == "Leisure"
    assert spec.room == "N/A"
    assert spec.batch is None
    assert spec.cohort.branch == "CSE"
    assert spec.cohort.section == "A"
    assert spec.day == Weekday.MONDAY

    lab = _spec(kind="Lab", batch="2")
    assert lab.batch == 2

    lecture = _spec(batch=1)
    assert lecture.batch is None


@pytest.mark.parametrize(
    "overrides",
    [
        {"day": "Sunday"},
        {"year": 5},
        {"year": "x"},
        {"start": "10:00", "end": "09:00"},
        {"start": "10:00", "end": "10:00"},
        {"kind": "Seminar"},
        {"kind": "Lab", "batch": 3},
        {"subject": "  "},
        {"branch": ""},
    ],
)
def test_build_spec_rejects_invalid_input(overrides):
    with pytest.raises(ValidationError):
        _spec(**overrides)


def test_concurrent_adds_of_overlapping_slots_admit_one(store):
    store.instructors.add(1)
    svc = store.container.slot_service
    barrier = threading.Barrier(8)
    outcomes = []

    def worker(i):
        barrier.wait()
        try:
            svc.add_slot(1, _spec(start="09:00", end="10:00", subject=f"S{i}"))
            outcomes.append("ok")
        except ConflictError:
            outcomes.append("conflict")

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(8)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert outcomes.count("ok") == 1
    assert outcomes.count("conflict") == 7
    assert len(store.slots.slots) == 1
