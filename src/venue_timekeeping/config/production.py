import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timekeeping_db"),
}

DEBUG = False

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

BUSINESS_DAY_START_HOUR = int(os.getenv("BUSINESS_DAY_START_HOUR", "18"))
BUSINESS_DAY_END_HOUR = int(os.getenv("BUSINESS_DAY_END_HOUR", "6"))
BUSINESS_DAY_GRACE_MINUTES = int(os.getenv("BUSINESS_DAY_GRACE_MINUTES", "120"))

PAYROLL_ROUNDING_MINUTES = int(os.getenv("PAYROLL_ROUNDING_MINUTES", "15"))
ACTIVE_STAFF_WINDOW_HOURS = int(os.getenv("ACTIVE_STAFF_WINDOW_HOURS", "48"))
REQUIRE_CLOCK_IN_PHOTO = bool(int(os.getenv("REQUIRE_CLOCK_IN_PHOTO", "1")))
PUNCH_MAX_ATTEMPTS = int(os.getenv("PUNCH_MAX_ATTEMPTS", "3"))
