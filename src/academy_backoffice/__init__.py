"""Academy back-office package.

Organized by feature modules (users, permissions, employees, punches, reports) with a
thin Flask controller layer over service/repository layers.
"""
from __future__ import annotations

import importlib
import logging
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .common.http import register_error_handlers
from .container import Container, build_container
from .core.log import configure_logging
from .database.bootstrap import apply_schema, ensure_demo_users, list_tables

logger = logging.getLogger(__name__)

SCHEMA_PATH = Path(__file__).resolve().parents[2] / "database" / "schema.sql"


def create_app(container: Optional[Container] = None, *, settings_module: Optional[str] = None) -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = settings_module or get_settings_module()
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
            apply_schema(db_config, schema_path=SCHEMA_PATH)
            logger.info("schema ready (tables=%d)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            ensure_demo_users(db_config)

        container = build_container(
            db_config=db_config,
            clamp_negative_hours=bool(getattr(settings, "CLAMP_NEGATIVE_HOURS", True)),
        )

    app.extensions["academy_backoffice"] = container
    register_error_handlers(app)

    from .employees.controller import register as register_employees
    from .permissions.controller import register as register_permissions
    from .punches.controller import register as register_punches
    from .reports.controller import register as register_reports
    from .users.controller import register as register_users

    register_users(app, container)
    register_punches(app, container)
    register_employees(app, container)
    register_permissions(app, container)
    register_reports(app, container)

    return app
