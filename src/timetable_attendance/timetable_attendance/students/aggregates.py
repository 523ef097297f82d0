"""Per-student attendance counters.

Subject entries are patched per session; the global summary is always
re-summed from the subject entries instead of being patched, so it cannot
drift from its parts.
"""
from __future__ import annotations

import math
from dataclasses import replace
from typing import Iterable

from ..core.constants import DEFAULT_ATTENDANCE_THRESHOLD
from ..core.enums import StandingStatus
from .model import AttendanceSummary, StudentAggregate, SubjectAttendance, attendance_percentage, subject_key


def summarize(subjects: Iterable[SubjectAttendance]) -> AttendanceSummary:
    total = 0
    present = 0
    for entry in subjects:
        total += int(entry.total_classes)
        present += int(entry.present_classes)
    return AttendanceSummary(
        total_classes=total,
        present_classes=present,
        percentage=attendance_percentage(present, total),
    )


def standing(percentage: float, *, threshold: float = DEFAULT_ATTENDANCE_THRESHOLD) -> StandingStatus:
    return StandingStatus.CRITICAL if percentage < threshold else StandingStatus.SAFE


def classes_to_attend(entry: SubjectAttendance, *, threshold: float = DEFAULT_ATTENDANCE_THRESHOLD) -> int:
    """Consecutive classes to attend before the subject reaches ``threshold`` percent."""

    if entry.percentage >= threshold:
        return 0
    ratio = threshold / 100
    return max(0, math.ceil((ratio * entry.total_classes - entry.present_classes) / (1 - ratio)))


class AggregateUpdater:
    def apply(
        self,
        aggregate: StudentAggregate,
        *,
        subject: str,
        was_absent: bool,
        is_absent: bool,
        is_first_mark: bool,
    ) -> StudentAggregate:
        """Return ``aggregate`` with one session's outcome applied to ``subject``.

        A first mark counts the class; a correction only moves the present
        counter when the student's status flipped. A student whose subject
        entry has no classes yet is counted as a first mark either way. Subject
        names match case-insensitively; the first stored spelling is kept.
        """

        entry = aggregate.subject(subject) or SubjectAttendance(subject=subject, total_classes=0, present_classes=0)
        total = int(entry.total_classes)
        present = int(entry.present_classes)

        if is_first_mark or total == 0:
            total += 1
            if not is_absent:
                present += 1
        elif was_absent and not is_absent:
            present += 1
        elif not was_absent and is_absent:
            present -= 1

        present = max(0, min(present, total))
        updated = SubjectAttendance(
            subject=entry.subject,
            total_classes=total,
            present_classes=present,
            percentage=attendance_percentage(present, total),
        )

        key = subject_key(subject)
        subjects = list(aggregate.subjects)
        for i, existing in enumerate(subjects):
            if subject_key(existing.subject) == key:
                subjects[i] = updated
                break
        else:
            subjects.append(updated)

        return replace(aggregate, subjects=tuple(subjects), summary=summarize(subjects))
