from __future__ import annotations

import importlib
import logging
import logging.config
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.web import register_error_handlers
from .container import Container, build_container
from .database.bootstrap import apply_schema, apply_sql_file, ensure_master_admin, list_tables
from .attendance.controller import register as register_attendance
from .leaves.controller import register as register_leaves
from .payroll.controller import register as register_payroll
from .permissions.controller import register as register_permissions
from .users.controller import register as register_users

logger = logging.getLogger(__name__)

_DATABASE_DIR = Path(__file__).resolve().parents[3] / "database"


def create_app(container: Container | None = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    logging.config.dictConfig(getattr(settings, "LOGGING"))

    app.secret_key = getattr(settings, "SECRET_KEY")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

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
        container = build_container(db_config=db_config)

        if getattr(settings, "AUTO_INIT_DB", False):
            apply_schema(container.conn, schema_path=_DATABASE_DIR / "schema.sql")
            logger.info("Schema ready (tables=%d)", len(list_tables(container.conn)))
        if getattr(settings, "AUTO_SEED_DB", False):
            apply_sql_file(container.conn, path=_DATABASE_DIR / "seed.sql")
            ensure_master_admin(
                container.conn,
                email=getattr(settings, "MASTER_ADMIN_EMAIL"),
                password=getattr(settings, "MASTER_ADMIN_PASSWORD"),
            )
            logger.info("Seed data ready")

    register_error_handlers(app)
    register_users(app, container)
    register_attendance(app, container)
    register_leaves(app, container)
    register_payroll(app, container)
    register_permissions(app, container)

    return app
