import os

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "timekeeping_test"),
}

DEBUG = False
TESTING = True

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))

BUSINESS_DAY_START_HOUR = 18
BUSINESS_DAY_END_HOUR = 6
BUSINESS_DAY_GRACE_MINUTES = 120

PAYROLL_ROUNDING_MINUTES = 15
ACTIVE_STAFF_WINDOW_HOURS = 48
REQUIRE_CLOCK_IN_PHOTO = True
PUNCH_MAX_ATTEMPTS = 3
