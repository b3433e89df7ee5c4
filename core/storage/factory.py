"""
Choix de la stratégie de persistance selon la configuration :
- pas de DATABASE_URL → fichiers JSON locaux seulement
- sinon → base distante, avec les fichiers JSON en secours
"""

from __future__ import annotations

import logging
from typing import Tuple

from core.config import Settings
from core.models.client import Client
from core.models.sale import Sale
from core.storage.base import Repository
from core.storage.errors import BackendUnavailable
from core.storage.fallback import FallbackRepository
from core.storage.json_repo import JsonRepository
from core.storage.sql_repo import (
    SqlClientRepository,
    SqlSaleRepository,
    create_db_engine,
    init_schema,
    make_session_factory,
)

logger = logging.getLogger(__name__)


def build_local_repositories(settings: Settings) -> Tuple[Repository[Client], Repository[Sale]]:
    clients = JsonRepository(
        settings.clients_json, Client, entity_name="client", backup_keep=settings.backup_keep
    )
    sales = JsonRepository(
        settings.sales_json, Sale, entity_name="sale", backup_keep=settings.backup_keep
    )
    return clients, sales


def build_repositories(settings: Settings) -> Tuple[Repository[Client], Repository[Sale]]:
    local_clients, local_sales = build_local_repositories(settings)
    if not settings.database_url:
        logger.info("Aucune DATABASE_URL, stockage local dans %s", settings.data_dir)
        return local_clients, local_sales

    engine = create_db_engine(settings.database_url, echo=settings.sql_echo)
    try:
        init_schema(engine)
    except BackendUnavailable as e:
        # les appels suivants basculeront sur le stockage local
        logger.warning("Schéma distant non initialisé: %s", e)

    session_factory = make_session_factory(engine)
    return (
        FallbackRepository(SqlClientRepository(session_factory), local_clients),
        FallbackRepository(SqlSaleRepository(session_factory), local_sales),
    )
