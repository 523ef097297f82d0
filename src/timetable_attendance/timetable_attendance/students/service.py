from __future__ import annotations

from ..common.validators import require_non_empty, require_year
from ..core.constants import DEFAULT_ATTENDANCE_THRESHOLD
from ..core.exceptions import NotFoundError
from ..timetable.model import Cohort
from .aggregates import classes_to_attend, standing
from .model import Student, StudentAggregate, subject_key
from .repository import StudentRepository


class StudentAttendanceService:
    """Read side over the student aggregate store."""

    def __init__(self, students: StudentRepository, *, threshold: float = DEFAULT_ATTENDANCE_THRESHOLD):
        self._students = students
        self._threshold = float(threshold)

    def get_student(self, student_id: int) -> Student:
        student = self._students.get_by_id(int(student_id))
        if not student:
            raise NotFoundError(f"Student {student_id} not found")
        return student

    def _aggregate_of(self, student_id: int) -> StudentAggregate:
        return self._students.get_aggregates([student_id]).get(student_id, StudentAggregate(student_id=student_id))

    def get_aggregate(self, student_id: int) -> StudentAggregate:
        return self._aggregate_of(self.get_student(student_id).student_id)

    def dashboard(self, student_id: int) -> dict:
        student = self.get_student(student_id)
        aggregate = self._aggregate_of(student.student_id)
        subjects = []
        for entry in aggregate.subjects:
            row = entry.to_dict()
            row["status"] = standing(entry.percentage, threshold=self._threshold).value
            row["classes_to_attend"] = classes_to_attend(entry, threshold=self._threshold)
            subjects.append(row)

        return {
            "profile": {
                "student_id": student.student_id,
                "name": student.full_name,
                "rollno": student.rollno,
                "branch": student.cohort.branch,
                "year": student.cohort.year,
                "section": student.cohort.section,
            },
            "overall": aggregate.summary.to_dict(),
            "subjects": subjects,
        }

    def section_analytics(self, branch: str, year, section: str, subject: str) -> dict:
        """Per-student standing in one subject for a cohort, with class average and defaulters."""

        cohort = Cohort(
            branch=require_non_empty(branch, "branch").upper(),
            year=require_year(year),
            section=require_non_empty(section, "section").upper(),
        )
        wanted = subject_key(require_non_empty(subject, "subject"))

        students = self._students.list_by_cohort(cohort)
        aggregates = self._students.get_aggregates([s.student_id for s in students])

        rows: list[dict] = []
        for student in students:
            aggregate = aggregates.get(student.student_id)
            if aggregate is None:
                continue
            entry = next((e for e in aggregate.subjects if subject_key(e.subject) == wanted), None)
            if entry is None:
                continue
            rows.append(
                {
                    "student_id": student.student_id,
                    "name": student.full_name,
                    "rollno": student.rollno,
                    "percentage": round(entry.percentage, 1),
                    "classes_attended": entry.present_classes,
                    "total_classes": entry.total_classes,
                    "status": standing(entry.percentage, threshold=self._threshold).value,
                }
            )

        rows.sort(key=lambda r: r["rollno"])
        defaulters = [r for r in rows if r["percentage"] < self._threshold]
        average = round(sum(r["percentage"] for r in rows) / len(rows), 1) if rows else 0.0

        return {
            "stats": {
                "total_students": len(rows),
                "class_average": average,
                "defaulter_count": len(defaulters),
            },
            "students": rows,
            "defaulters": defaulters,
        }
