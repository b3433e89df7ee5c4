from __future__ import annotations
from datetime import date, datetime
from decimal import Decimal
from typing import List, Optional, Tuple

from core.models.sale import Sale
from core.storage.base import Repository

SALE_SORTS = ("date", "value")


class SaleService:
    """
    CRUD des ventes. Une vente ne référence son client que par le nom
    (client_name) : supprimer ou renommer un client ne touche pas aux ventes.
    """

    def __init__(self, repo: Repository[Sale]):
        self.repo = repo

    def list_sales(self) -> List[Sale]:
        return self.repo.list_all()

    def get_by_id(self, sale_id: str) -> Optional[Sale]:
        return self.repo.get_by_id(sale_id)

    def add_sale(self, sale: Sale) -> Sale:
        return self.repo.add(sale)

    def update_sale(self, sale: Sale) -> Sale:
        return self.repo.update(sale)

    def delete_sale(self, sale_id: str) -> bool:
        return self.repo.delete(sale_id)


# ---------- Vue liste ---------- #

def filter_sales(sales: List[Sale], on_date: Optional[date] = None, client: str = "") -> List[Sale]:
    if isinstance(on_date, datetime):
        on_date = on_date.date()
    term = (client or "").strip().lower()
    return [
        s for s in sales
        if (on_date is None or s.date.date() == on_date)
        and (not term or term in s.client_name.lower())
    ]


def sort_sales(sales: List[Sale], sort_by: str = "date", order: str = "desc") -> List[Sale]:
    if sort_by not in SALE_SORTS:
        raise ValueError(f"unknown sort: {sort_by!r} (expected one of {SALE_SORTS})")
    if order not in ("asc", "desc"):
        raise ValueError(f"unknown order: {order!r}")
    key = (lambda s: s.value) if sort_by == "value" else (lambda s: s.date)
    return sorted(sales, key=key, reverse=(order == "desc"))


def sale_totals(sales: List[Sale]) -> Tuple[Decimal, Decimal]:
    """(total, moyenne) ; moyenne à 0 pour une liste vide."""
    total = sum((s.value for s in sales), Decimal("0"))
    average = (total / len(sales)) if sales else Decimal("0")
    return total, average
