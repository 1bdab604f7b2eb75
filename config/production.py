import os

SECRET_KEY = os.getenv("SECRET_KEY", "please-set-SECRET_KEY")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "ogs"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "ogs_presence"),
}

DEBUG = False
LOG_LEVEL = os.getenv("LOG_LEVEL", "INFO")

AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "0")))
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

CLEANUP_SCHEDULER_ENABLED = bool(int(os.getenv("CLEANUP_SCHEDULER_ENABLED", "1")))
CLEANUP_HOUR = int(os.getenv("CLEANUP_HOUR", "2"))
CLEANUP_MINUTE = int(os.getenv("CLEANUP_MINUTE", "0"))
