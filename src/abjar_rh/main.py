from __future__ import annotations

import importlib
import os
from datetime import timedelta
from pathlib import Path
from typing import Optional

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .core.constants import DEFAULT_SESSION_DAYS
from .database.bootstrap import apply_schema, apply_seed_sql, ensure_demo_users, list_tables
from .database.connection import DBConfig

from .container import Container, build_container
from .attendance.controller import register as register_attendance
from .dashboard.controller import register as register_dashboard
from .notifications.controller import register as register_notifications
from .schedules.controller import register as register_schedules
from .tasks.controller import register as register_tasks
from .users.controller import register as register_users

REPO_ROOT = Path(__file__).resolve().parents[2]


def create_app(container: Optional[Container] = None) -> Flask:
    """Build the Flask app.

    Pass a prebuilt `container` to skip the database (tests wire one from fakes).
    """
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))
    app.config["REGISTRATION_CODE"] = str(getattr(settings, "REGISTRATION_CODE"))
    app.permanent_session_lifetime = timedelta(days=int(getattr(settings, "SESSION_DAYS", DEFAULT_SESSION_DAYS)))

    if container is None:
        app.logger.info("settings=%s db=%s", settings_module, DBConfig.from_dict(db_config).describe())

        if bool(getattr(settings, "AUTO_INIT_DB", False)):
            apply_schema(db_config, schema_path=REPO_ROOT / "database" / "schema.sql")
            app.logger.info("schema ready (tables=%s)", len(list_tables(db_config)))
        if bool(getattr(settings, "AUTO_SEED_DB", False)):
            apply_seed_sql(db_config, seed_path=REPO_ROOT / "database" / "seed.sql")
            ensure_demo_users(db_config)
            app.logger.info("demo seed ready")

        container = build_container(db_config=db_config, registration_code=app.config["REGISTRATION_CODE"])

    app.extensions["abjar_rh"] = container

    register_users(app, container)
    register_dashboard(app, container)
    register_schedules(app, container)
    register_tasks(app, container)
    register_attendance(app, container)
    register_notifications(app, container)

    return app


def run() -> None:
    app = create_app()
    app.run(
        host=os.getenv("HOST", "127.0.0.1"),
        port=int(os.getenv("PORT", "5000")),
        debug=app.config["DEBUG"],
    )


if __name__ == "__main__":
    run()
