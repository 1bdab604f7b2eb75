import os

SECRET_KEY = os.getenv("SECRET_KEY", "dev-secret-key")

DB_CONFIG = {
    "host": os.getenv("DB_HOST", "localhost"),
    "port": int(os.getenv("DB_PORT", "3306")),
    "user": os.getenv("DB_USER", "root"),
    "password": os.getenv("DB_PASSWORD", ""),
    "database": os.getenv("DB_NAME", "ogs_presence"),
}

DEBUG = True
LOG_LEVEL = os.getenv("LOG_LEVEL", "DEBUG")

# If enabled, app will apply schema.sql on startup (idempotent: CREATE IF NOT EXISTS)
AUTO_INIT_DB = bool(int(os.getenv("AUTO_INIT_DB", "1")))
# Optional: also upsert the demo admin/staff accounts
AUTO_SEED_DB = bool(int(os.getenv("AUTO_SEED_DB", "0")))

# Nightly close of sessions left open past their day
CLEANUP_SCHEDULER_ENABLED = bool(int(os.getenv("CLEANUP_SCHEDULER_ENABLED", "0")))
CLEANUP_HOUR = int(os.getenv("CLEANUP_HOUR", "2"))
CLEANUP_MINUTE = int(os.getenv("CLEANUP_MINUTE", "0"))
