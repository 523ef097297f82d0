"""Example: use the service layer directly (no Flask).

Prints an instructor's weekly timetable and one student's attendance dashboard.
"""

import importlib

from config import get_settings_module

from src.timetable_attendance.timetable_attendance.container import build_container


def main():
    settings = importlib.import_module(get_settings_module())
    container = build_container(db_config=settings.DB_CONFIG)

    for day, slots in container.slot_service.weekly_timetable(instructor_id=1).items():
        print(day, [f"{s.period_index}: {s.subject} {s.time_range}" for s in slots])

    print(container.student_service.dashboard(student_id=1))


if __name__ == "__main__":
    main()
