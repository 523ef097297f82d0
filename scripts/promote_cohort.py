"""Promote every student of one year to the next, or graduate year 4.

Usage: python scripts/promote_cohort.py 2
"""

from __future__ import annotations

import argparse
import importlib
import logging.config
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.timetable_attendance.timetable_attendance.container import build_container
from src.timetable_attendance.timetable_attendance.core.exceptions import DomainError


def main(argv: list[str] | None = None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("target_year", type=int, choices=[1, 2, 3, 4])
    args = parser.parse_args(argv)

    settings = importlib.import_module(get_settings_module())
    logging.config.dictConfig(settings.LOGGING)
    container = build_container(db_config=settings.DB_CONFIG)

    try:
        count = container.promotion_job.promote(args.target_year)
    except DomainError as e:
        print(f"FAILED: {e}", file=sys.stderr)
        return 1

    verb = "Graduated" if args.target_year == 4 else "Promoted"
    print(f"OK: {verb} {count} students from year {args.target_year}")
    return 0


if __name__ == "__main__":
    raise SystemExit(main())
