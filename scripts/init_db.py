"""Create the school attendance database and apply database/schema.sql.

Usage: python scripts/init_db.py [--schema PATH]
"""

from __future__ import annotations

import argparse
import importlib
import logging
import sys
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.school_attendance.school_attendance.database.bootstrap import apply_schema, list_tables

logger = logging.getLogger("school_attendance.init_db")

REQUIRED_TABLES = {"users", "students", "attendance_days", "attendance_students", "attendance_periods"}


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(description=__doc__.splitlines()[0])
    parser.add_argument("--schema", type=Path, default=REPO_ROOT / "database" / "schema.sql")
    args = parser.parse_args(argv)

    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    logging.basicConfig(level=str(getattr(settings, "LOG_LEVEL", "INFO")).upper(), format="%(levelname)s %(message)s")

    db_config = dict(settings.DB_CONFIG)
    logger.info("Applying %s to %s@%s/%s", args.schema, db_config.get("user"), db_config.get("host"), db_config.get("database"))
    apply_schema(db_config, schema_path=args.schema)

    missing = REQUIRED_TABLES - set(list_tables(db_config))
    if missing:
        logger.error("Schema applied but tables are missing: %s", ", ".join(sorted(missing)))
        return 1

    logger.info("Attendance tables ready")
    return 0


if __name__ == "__main__":
    sys.exit(main())
