from __future__ import annotations
from dataclasses import dataclass
from decimal import ROUND_HALF_UP, Decimal
from typing import List, Optional

from core.config import DEFAULT_COMMISSION_RATE
from core.models.client import Client
from core.models.sale import Sale
from core.services.sale_service import sale_totals
from core.services.weekly_sale_service import Instant, sold_this_week

CENT = Decimal("0.01")


@dataclass(frozen=True)
class DashboardStats:
    total_clients: int
    total_sales: int
    total_revenue: Decimal
    commission: Decimal
    sold_this_week: int


def compute_commission(revenue: Decimal, rate: Decimal = DEFAULT_COMMISSION_RATE) -> Decimal:
    return (Decimal(revenue) * Decimal(rate)).quantize(CENT, rounding=ROUND_HALF_UP)


def compute_stats(
    clients: List[Client],
    sales: List[Sale],
    commission_rate: Decimal = DEFAULT_COMMISSION_RATE,
    reference: Optional[Instant] = None,
) -> DashboardStats:
    revenue, _ = sale_totals(sales)
    return DashboardStats(
        total_clients=len(clients),
        total_sales=len(sales),
        total_revenue=revenue,
        commission=compute_commission(revenue, commission_rate),
        sold_this_week=sum(1 for c in clients if sold_this_week(c, reference)),
    )
