from __future__ import annotations

import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.timetable_attendance.timetable_attendance.database.bootstrap import apply_schema
from src.timetable_attendance.timetable_attendance.database.connection import DBConfig


def main() -> None:
    settings = importlib.import_module(get_settings_module())
    config = DBConfig.from_dict(settings.DB_CONFIG)

    apply_schema(config, schema_path=REPO_ROOT / "database" / "schema.sql")
    count = apply_schema(config, schema_path=REPO_ROOT / "database" / "seed.sql")

    print(
        "OK: Seeded database -> "
        f"{config.user}@{config.host}:{config.port}/{config.database} "
        f"(statements={count})"
    )


if __name__ == "__main__":
    main()
