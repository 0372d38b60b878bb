from __future__ import annotations

import importlib.util
from pathlib import Path

import pytest

SCRIPT = Path(__file__).resolve().parents[1] / "scripts" / "init_db.py"


@pytest.fixture
def init_db(monkeypatch):
    monkeypatch.setenv("APP_ENV", "testing")
    spec = importlib.util.spec_from_file_location("init_db_script", SCRIPT)
    module = importlib.util.module_from_spec(spec)
    spec.loader.exec_module(module)
    return module


def test_applies_schema_and_reports_ready(init_db, monkeypatch):
    applied = []
    monkeypatch.setattr(init_db, "apply_schema", lambda cfg, schema_path: applied.append(schema_path))
    monkeypatch.setattr(init_db, "list_tables", lambda cfg: sorted(init_db.REQUIRED_TABLES))

    assert init_db.main([]) == 0
    assert applied == [init_db.REPO_ROOT / "database" / "schema.sql"]


def test_missing_tables_fail_the_run(init_db, monkeypatch):
    monkeypatch.setattr(init_db, "apply_schema", lambda cfg, schema_path: None)
    monkeypatch.setattr(init_db, "list_tables", lambda cfg: ["users"])

    assert init_db.main(["--schema", "other.sql"]) == 1
