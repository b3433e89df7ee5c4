import os
from decimal import Decimal
from pathlib import Path

import pytest

from core import config

_real_load_env_files = config.load_env_files


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for name in ("DASHBOARD_DATA_DIR", "DATABASE_URL", "COMMISSION_RATE", "BACKUP_KEEP", "SQL_ECHO", "LOG_LEVEL"):
        monkeypatch.delenv(name, raising=False)
    # pas de .env du poste de dev pendant les tests
    monkeypatch.setattr(config, "load_env_files", lambda root=config.PROJECT_ROOT: None)


def test_defaults():
    s = config.load_settings()
    assert s.data_dir == config.DEFAULT_DATA_DIR
    assert s.database_url is None
    assert s.commission_rate == Decimal("0.06")
    assert s.backup_keep == 5
    assert s.sql_echo is False
    assert s.log_level == "INFO"
    assert s.clients_json == config.DEFAULT_DATA_DIR / "clients.json"


def test_env_overrides(monkeypatch, tmp_path):
    monkeypatch.setenv("DASHBOARD_DATA_DIR", str(tmp_path))
    monkeypatch.setenv("DATABASE_URL", "postgres://u:p@db/sales")
    monkeypatch.setenv("COMMISSION_RATE", "0,05")
    monkeypatch.setenv("BACKUP_KEEP", "2")
    monkeypatch.setenv("SQL_ECHO", "yes")
    monkeypatch.setenv("LOG_LEVEL", "debug")
    s = config.load_settings()
    assert s.data_dir == Path(tmp_path)
    assert s.database_url == "postgresql+psycopg://u:p@db/sales"
    assert s.commission_rate == Decimal("0.05")
    assert s.backup_keep == 2
    assert s.sql_echo is True
    assert s.log_level == "DEBUG"


@pytest.mark.parametrize("raw", ["abc", "-0.1", ""])
def test_invalid_commission_falls_back(monkeypatch, raw):
    monkeypatch.setenv("COMMISSION_RATE", raw)
    assert config.load_settings().commission_rate == Decimal("0.06")


def test_normalize_database_url():
    assert config.normalize_database_url("postgresql://h/db") == "postgresql+psycopg://h/db"
    assert config.normalize_database_url("sqlite:///x.db") == "sqlite:///x.db"


def test_load_env_files_does_not_override(tmp_path, monkeypatch):
    (tmp_path / ".env").write_text('# comment\nDASHBOARD_DATA_DIR="/from/env"\nLOG_LEVEL=warning\n', encoding="utf-8")
    (tmp_path / ".env.local").write_text("COMMISSION_RATE=0.07\nnot a pair\n", encoding="utf-8")
    env = {"LOG_LEVEL": "ERROR"}
    monkeypatch.setattr(os, "environ", env)

    _real_load_env_files(tmp_path)
    assert env == {
        "LOG_LEVEL": "ERROR",
        "DASHBOARD_DATA_DIR": "/from/env",
        "COMMISSION_RATE": "0.07",
    }
