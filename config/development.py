import os

from .base import ATTENDANCE_THRESHOLD, MARK_RETRIES, build_logging, db_config_from_env, env_flag

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = db_config_from_env(default_password="root")

DEBUG = True

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = env_flag("AUTO_INIT_DB", "1")

LOGGING = build_logging(os.getenv("LOG_LEVEL", "DEBUG"))
