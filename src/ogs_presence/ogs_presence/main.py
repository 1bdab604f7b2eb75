from __future__ import annotations

import importlib
import logging
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .database.bootstrap import apply_schema, ensure_demo_staff, list_tables

from .container import Container, build_container
from .absences.controller import register as register_absences
from .attendance.controller import register as register_attendance
from .cleanup.controller import register as register_cleanup
from .cleanup.scheduler import start_cleanup_scheduler
from .common.http import register_error_handlers
from .core.constants import DEFAULT_CLEANUP_HOUR, DEFAULT_CLEANUP_MINUTE
from .staff.controller import register as register_staff
from .substitutions.controller import register as register_substitutions
from .time_tracking.controller import register as register_time_tracking

logger = logging.getLogger(__name__)

_LOG_FORMAT = "%(asctime)s %(levelname)s [%(name)s] %(message)s"


def configure_logging(level: str = "INFO") -> None:
    root = logging.getLogger()
    if root.handlers:
        root.setLevel(level.upper())
        return
    logging.basicConfig(level=level.upper(), format=_LOG_FORMAT)


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

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
            schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
            apply_schema(db_config, schema_path=schema_path)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_staff(db_config)
            logger.info("demo staff ready")

        container = build_container(db_config=db_config)

        if bool(getattr(settings, "CLEANUP_SCHEDULER_ENABLED", False)):
            app.extensions["cleanup_scheduler"] = start_cleanup_scheduler(
                container.reconciler,
                hour=int(getattr(settings, "CLEANUP_HOUR", DEFAULT_CLEANUP_HOUR)),
                minute=int(getattr(settings, "CLEANUP_MINUTE", DEFAULT_CLEANUP_MINUTE)),
            )

    app.extensions["container"] = container
    register_error_handlers(app)

    register_staff(app, container)
    register_attendance(app, container)
    register_time_tracking(app, container)
    register_absences(app, container)
    register_substitutions(app, container)
    register_cleanup(app, container)

    return app
