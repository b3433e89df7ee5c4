from __future__ import annotations
import logging
import re
from typing import List, Optional
from urllib.parse import quote

from core.models.client import Client, IMPORTANCE_RANK, ImportanceLevel
from core.services.weekly_sale_service import Instant, toggle_weekly_sale
from core.storage.base import Repository
from core.storage.errors import RecordNotFound

logger = logging.getLogger(__name__)

CLIENT_SORTS = ("importance", "name", "created_at")


class ClientService:
    def __init__(self, repo: Repository[Client]):
        self.repo = repo

    def list_clients(self) -> List[Client]:
        return self.repo.list_all()

    def get_by_id(self, client_id: str) -> Optional[Client]:
        return self.repo.get_by_id(client_id)

    def add_client(self, client: Client) -> Client:
        return self.repo.add(client)

    def update_client(self, client: Client) -> Client:
        # les ventes gardent leur client_name : pas de renommage en cascade
        return self.repo.update(client)

    def delete_client(self, client_id: str) -> bool:
        return self.repo.delete(client_id)

    def _require(self, client_id: str) -> Client:
        client = self.repo.get_by_id(client_id)
        if client is None:
            raise RecordNotFound("client", client_id)
        return client

    def update_importance(self, client_id: str, level: ImportanceLevel) -> Client:
        client = self._require(client_id)
        updated = Client.model_validate({**client.model_dump(), "importance_level": level})
        return self.repo.update(updated)

    def toggle_weekly_sale(self, client_id: str, reference: Optional[Instant] = None) -> Client:
        updated = toggle_weekly_sale(self._require(client_id), reference)
        self.repo.update(updated)
        logger.info("Vente hebdo basculée pour %s (%d semaine(s))", client_id, len(updated.weekly_sales))
        return updated


# ---------- Vue liste (filtres / tri) ---------- #

def filter_clients(
    clients: List[Client],
    search: str = "",
    business_type: Optional[str] = None,
    importance: Optional[str] = None,
    sort_by: str = "importance",
) -> List[Client]:
    term = (search or "").strip().lower()
    out = [
        c for c in clients
        if (not term or term in c.name.lower() or term in c.city.lower())
        and (not business_type or c.business_type == business_type)
        and (not importance or c.importance_level == importance)
    ]
    if sort_by == "name":
        out.sort(key=lambda c: c.name.casefold())
    elif sort_by == "created_at":
        out.sort(key=lambda c: c.created_at, reverse=True)
    elif sort_by == "importance":
        out.sort(key=lambda c: IMPORTANCE_RANK[c.importance_level], reverse=True)
    else:
        raise ValueError(f"unknown sort: {sort_by!r} (expected one of {CLIENT_SORTS})")
    return out


def whatsapp_url(phone: str) -> str:
    digits = re.sub(r"\D", "", phone or "")
    return f"https://wa.me/55{digits}"


def maps_url(location: str, city: str) -> str:
    query = (location or "").strip() or (city or "").strip()
    return f"https://www.google.com/maps/search/?api=1&query={quote(query, safe='')}"
