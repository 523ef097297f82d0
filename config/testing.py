from .base import ATTENDANCE_THRESHOLD, MARK_RETRIES, build_logging, db_config_from_env

SECRET_KEY = "test-secret"

DB_CONFIG = db_config_from_env(default_password="12345")

DEBUG = False
TESTING = True

AUTO_INIT_DB = False

LOGGING = build_logging("WARNING")
