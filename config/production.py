import os

from werkzeug.security import generate_password_hash

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shiftdesk"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

PUBLIC_ORIGIN = os.getenv("PUBLIC_ORIGIN", "")

# Prefer MANAGER_OVERRIDE_CODE_HASH; a plain MANAGER_OVERRIDE_CODE is hashed at startup.
_manager_code = os.getenv("MANAGER_OVERRIDE_CODE", "")
MANAGER_OVERRIDE_CODE_HASH = os.getenv("MANAGER_OVERRIDE_CODE_HASH") or (
    generate_password_hash(_manager_code) if _manager_code else ""
)

WEEKLY_TOKEN_GRACE_DAYS = int(os.getenv("WEEKLY_TOKEN_GRACE_DAYS", "7"))
SHIFT_TOKEN_TTL_HOURS = int(os.getenv("SHIFT_TOKEN_TTL_HOURS", "72"))
PERMANENT_TOKEN_DAYS = int(os.getenv("PERMANENT_TOKEN_DAYS", "365"))
REGISTRATION_TOKEN_HOURS = int(os.getenv("REGISTRATION_TOKEN_HOURS", "24"))

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
