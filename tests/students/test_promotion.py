from __future__ import annotations

import pytest

from src.timetable_attendance.timetable_attendance.core.exceptions import ValidationError


def _cohort_years(store):
    return {sid: (s.cohort.year, s.is_graduated) for sid, s in store.students.students.items()}


def test_promote_moves_one_year_up_and_is_idempotent(store):
    store.students.add(1, year=2)
    store.students.add(2, year=2, section="B")
    store.students.add(3, year=3)
    job = store.container.promotion_job

    assert job.promote(2) == 2
    assert _cohort_years(store) == {1: (3, False), 2: (3, False), 3: (3, False)}

    assert job.promote(2) == 0


def test_final_year_graduates(store):
    store.students.add(1, year=4)
    store.students.add(2, year=3)

    assert store.container.promotion_job.promote(4) == 1

    assert _cohort_years(store) == {1: (5, True), 2: (3, False)}
    assert store.students.list_by_cohort(store.students.students[1].cohort) == []


def test_graduated_students_are_left_alone(store):
    store.students.add(1, year=4)
    job = store.container.promotion_job

    job.promote(4)
    assert job.promote(4) == 0
    assert _cohort_years(store) == {1: (5, True)}


@pytest.mark.parametrize("target", [0, 5, -1, "x", None])
def test_invalid_target_year(store, target):
    store.students.add(1, year=2)
    with pytest.raises(ValidationError):
        store.container.promotion_job.promote(target)
    assert _cohort_years(store) == {1: (2, False)}
