from __future__ import annotations

import importlib
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .attendance.controller import register as register_attendance
from .common.web import register_error_handlers
from .container import Container, build_container
from .core.logging import configure_logging, get_logger
from .database.bootstrap import apply_schema, apply_seed_sql, list_tables
from .notifications.controller import register as register_notifications
from .reports.controller import register as register_reports
from .users.controller import register as register_users

logger = get_logger(__name__)

DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(*, settings_module: Optional[str] = None, container: Optional[Container] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
    settings = importlib.import_module(settings_module)
    configure_logging(getattr(settings, "LOG_LEVEL", "INFO"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    store_backend = str(getattr(settings, "STORE_BACKEND", "memory"))
    db_config = dict(getattr(settings, "DB_CONFIG", {}) or {})
    logger.info("settings=%s store=%s", settings_module, store_backend)

    if store_backend == "mysql" and container is None:
        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=DATABASE_DIR / "seed.sql")

    container = container or build_container(
        store_backend=store_backend,
        db_config=db_config,
        resync_interval=float(getattr(settings, "RESYNC_INTERVAL_SECONDS", 60)),
        tick_interval=float(getattr(settings, "TICK_INTERVAL_SECONDS", 1)),
        location_timeout=getattr(settings, "LOCATION_TIMEOUT_SECONDS", None),
    )
    app.extensions["timeclock"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_reports(app, container)
    register_notifications(app, container)

    return app
