import os

from werkzeug.security import generate_password_hash

SECRET_KEY = "test-secret"

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shiftdesk_test"),
}

DEBUG = False
TESTING = True
LOG_LEVEL = "WARNING"

PUBLIC_ORIGIN = "https://shifts.example.test"

MANAGER_OVERRIDE_CODE_HASH = generate_password_hash("4321")

WEEKLY_TOKEN_GRACE_DAYS = 7
SHIFT_TOKEN_TTL_HOURS = 72
PERMANENT_TOKEN_DAYS = 365
REGISTRATION_TOKEN_HOURS = 24

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
