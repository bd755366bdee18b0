from __future__ import annotations

import argparse
import importlib
import sys
from pathlib import Path

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.team_attendance.team_attendance.common.logging import get_logger, setup_logging
from src.team_attendance.team_attendance.database.bootstrap import apply_schema, ensure_demo_data, list_tables

log = get_logger("init_db")


def main() -> None:
    parser = argparse.ArgumentParser(description="Apply database/schema.sql to the configured MySQL database.")
    parser.add_argument("--seed", action="store_true", help="also create the demo organization, team and users")
    args = parser.parse_args()

    settings = importlib.import_module(get_settings_module())
    setup_logging(json_output=bool(getattr(settings, "LOG_JSON", False)), log_level=getattr(settings, "LOG_LEVEL", "INFO"))
    db_config = dict(settings.DB_CONFIG)

    schema_path = REPO_ROOT / "database" / "schema.sql"
    apply_schema(db_config, schema_path=schema_path)
    if args.seed:
        ensure_demo_data(db_config)

    log.info(
        "database_ready",
        target=f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}",
        tables=len(list_tables(db_config)),
    )


if __name__ == "__main__":
    main()
