"""
core/config.py

Paramètres de l'application, lus depuis l'environnement (et `.env` / `.env.local`
à la racine du projet s'ils existent).
"""

from __future__ import annotations

import os
from dataclasses import dataclass
from decimal import Decimal, InvalidOperation
from functools import lru_cache
from pathlib import Path
from typing import Optional

PROJECT_ROOT = Path(__file__).resolve().parents[1]
DEFAULT_DATA_DIR = PROJECT_ROOT / "data"
DEFAULT_COMMISSION_RATE = Decimal("0.06")


def load_env_files(root: Path = PROJECT_ROOT) -> None:
    """
    Charge les paires KEY=VALUE de `.env` puis `.env.local`.
    Les variables déjà présentes dans l'environnement ne sont pas écrasées.
    """
    for filename in (".env", ".env.local"):
        env_path = root / filename
        if not env_path.exists():
            continue

        for raw_line in env_path.read_text(encoding="utf-8").splitlines():
            line = raw_line.strip()
            if not line or line.startswith("#") or "=" not in line:
                continue

            key, value = line.split("=", 1)
            key = key.strip()
            value = value.strip().strip('"').strip("'")
            if key and key not in os.environ:
                os.environ[key] = value


def normalize_database_url(url: str) -> str:
    if url.startswith("postgres://"):
        return url.replace("postgres://", "postgresql+psycopg://", 1)
    if url.startswith("postgresql://"):
        return url.replace("postgresql://", "postgresql+psycopg://", 1)
    return url


def _get_bool_env(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


def _get_int_env(name: str, default: int) -> int:
    value = os.getenv(name)
    if value is None:
        return default
    try:
        return int(value)
    except ValueError:
        return default


def _get_decimal_env(name: str, default: Decimal) -> Decimal:
    value = os.getenv(name)
    if value is None or not value.strip():
        return default
    try:
        d = Decimal(value.strip().replace(",", "."))
    except InvalidOperation:
        return default
    return d if d >= 0 else default


@dataclass(frozen=True)
class Settings:
    data_dir: Path
    database_url: Optional[str]
    commission_rate: Decimal = DEFAULT_COMMISSION_RATE
    backup_keep: int = 5
    sql_echo: bool = False
    log_level: str = "INFO"

    @property
    def clients_json(self) -> Path:
        return self.data_dir / "clients.json"

    @property
    def sales_json(self) -> Path:
        return self.data_dir / "sales.json"


def load_settings() -> Settings:
    """Construit les Settings à partir de l'environnement courant (sans cache)."""
    load_env_files()

    raw_dir = os.getenv("DASHBOARD_DATA_DIR")
    data_dir = Path(raw_dir).expanduser() if raw_dir else DEFAULT_DATA_DIR

    raw_url = (os.getenv("DATABASE_URL") or "").strip()
    database_url = normalize_database_url(raw_url) if raw_url else None

    return Settings(
        data_dir=data_dir,
        database_url=database_url,
        commission_rate=_get_decimal_env("COMMISSION_RATE", DEFAULT_COMMISSION_RATE),
        backup_keep=max(0, _get_int_env("BACKUP_KEEP", 5)),
        sql_echo=_get_bool_env("SQL_ECHO", default=False),
        log_level=(os.getenv("LOG_LEVEL") or "INFO").strip().upper(),
    )


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    return load_settings()
