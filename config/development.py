import os

from werkzeug.security import generate_password_hash

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "shiftdesk"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# Base for links handed to employees; empty means "use the request host".
PUBLIC_ORIGIN = os.getenv("PUBLIC_ORIGIN", "http://localhost:5000")

# Manager code for double-booking overrides. Only the hash is kept in memory.
MANAGER_OVERRIDE_CODE_HASH = os.getenv("MANAGER_OVERRIDE_CODE_HASH") or generate_password_hash(
    os.getenv("MANAGER_OVERRIDE_CODE", "0000")
)

WEEKLY_TOKEN_GRACE_DAYS = int(os.getenv("WEEKLY_TOKEN_GRACE_DAYS", "7"))
SHIFT_TOKEN_TTL_HOURS = int(os.getenv("SHIFT_TOKEN_TTL_HOURS", "72"))
PERMANENT_TOKEN_DAYS = int(os.getenv("PERMANENT_TOKEN_DAYS", "365"))
REGISTRATION_TOKEN_HOURS = int(os.getenv("REGISTRATION_TOKEN_HOURS", "24"))

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
