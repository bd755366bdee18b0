from __future__ import annotations

import importlib
from pathlib import Path

from dotenv import load_dotenv
from flask import Flask

from config import get_settings_module

from .adhoc.controller import register as register_adhoc
from .attendance.controller import register as register_attendance
from .common.http import register_error_handlers
from .common.logging import get_logger, setup_logging
from .container import build_container
from .database.bootstrap import apply_schema, ensure_demo_data, list_tables
from .occurrences.controller import register as register_occurrences
from .recurrence.controller import register as register_recurrence
from .reports.controller import register as register_reports
from .seasons.controller import register as register_seasons
from .tags.controller import register as register_tags
from .users.controller import register as register_users

log = get_logger(__name__)


def create_app() -> Flask:
    load_dotenv(override=False)
    app = Flask(__name__)

    settings_module = get_settings_module()
    settings = importlib.import_module(settings_module)
    setup_logging(
        json_output=bool(getattr(settings, "LOG_JSON", False)),
        log_level=getattr(settings, "LOG_LEVEL", "INFO"),
    )

    app.secret_key = getattr(settings, "SECRET_KEY")
    db_config = getattr(settings, "DB_CONFIG")
    app.config["DEBUG"] = bool(getattr(settings, "DEBUG", False))
    app.config["TESTING"] = bool(getattr(settings, "TESTING", False))

    log.info(
        "app_configuring",
        settings=settings_module,
        db=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
    )

    if bool(getattr(settings, "AUTO_INIT_DB", False)):
        schema_path = Path(__file__).resolve().parents[3] / "database" / "schema.sql"
        apply_schema(db_config, schema_path=schema_path)
        log.info("schema_ready", tables=len(list_tables(db_config)))
    if bool(getattr(settings, "AUTO_SEED_DB", False)):
        ensure_demo_data(db_config)

    container = build_container(
        db_config=db_config,
        checkin_window_minutes=int(getattr(settings, "CHECKIN_WINDOW_MINUTES", 30)),
        max_occurrences=int(getattr(settings, "MAX_OCCURRENCES", 365)),
    )
    app.extensions["team_attendance"] = container

    register_error_handlers(app)
    register_users(app, container)
    register_occurrences(app, container)
    register_recurrence(app, container)
    register_seasons(app, container)
    register_attendance(app, container)
    register_tags(app, container)
    register_adhoc(app, container)
    register_reports(app, container)

    return app
