from __future__ import annotations

import importlib
import logging
import logging.config
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema
from .database.connection import DBConfig
from .sessions.controller import register as register_sessions
from .students.controller import register as register_students
from .timetable.controller import register as register_timetable

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[3] / "database" / "schema.sql"


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.config.dictConfig(getattr(settings, "LOGGING"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    if container is None:
        db_config = getattr(settings, "DB_CONFIG")
        logger.info(
            "settings=%s db=%s@%s:%s/%s",
            settings_module,
            db_config.get("user"),
            db_config.get("host"),
            db_config.get("port", 3306),
            db_config.get("database"),
        )

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(DBConfig.from_dict(db_config), schema_path=SCHEMA_PATH)

        container = build_container(
            db_config=db_config,
            attendance_threshold=float(getattr(settings, "ATTENDANCE_THRESHOLD")),
            mark_retries=int(getattr(settings, "MARK_RETRIES")),
        )

    register_error_handlers(app)
    register_timetable(app, container)
    register_sessions(app, container)
    register_students(app, container)

    return app
