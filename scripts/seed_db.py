"""Create the first Admin account.

Reads ADMIN_NAME / ADMIN_EMAIL / ADMIN_PASSWORD from the environment (or .env).
"""

from __future__ import annotations

import importlib
import os
import sys
from pathlib import Path

from dotenv import load_dotenv

REPO_ROOT = Path(__file__).resolve().parents[1]
if str(REPO_ROOT) not in sys.path:
    sys.path.insert(0, str(REPO_ROOT))

from config import get_settings_module

from src.school_attendance.school_attendance.database.bootstrap import ensure_admin_user


def main() -> None:
    load_dotenv(override=False)
    settings = importlib.import_module(get_settings_module())
    db_config = dict(settings.DB_CONFIG)

    email = os.getenv("ADMIN_EMAIL", "admin@school.local")
    created = ensure_admin_user(
        db_config,
        name=os.getenv("ADMIN_NAME", "Administrator"),
        email=email,
        password=os.getenv("ADMIN_PASSWORD", "admin123"),
    )

    state = "created" if created else "already present"
    print(
        f"OK: Admin {email} {state} -> "
        f"{db_config.get('user')}@{db_config.get('host')}:{db_config.get('port', 3306)}/{db_config.get('database')}"
    )


if __name__ == "__main__":
    main()
