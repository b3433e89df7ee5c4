"""
Suivi des ventes hebdomadaires.

Une semaine va du lundi 00:00 au dimanche (semaine ISO). Chaque client porte au
plus un WeeklySale par semaine ; le premier clic le crée avec sold=True, les
suivants inversent `sold`. Fonctions pures : rien n'est persisté ici, c'est
ClientService qui enregistre le client retourné.
"""

from __future__ import annotations

from datetime import date, datetime, timedelta
from typing import Optional, Tuple, Union

from core.models.client import Client, WeeklySale
from core.models.common import gen_id, now

Instant = Union[datetime, date]


def _as_datetime(reference: Instant) -> datetime:
    if isinstance(reference, datetime):
        return reference
    return datetime(reference.year, reference.month, reference.day)


def compute_week_bounds(reference: Optional[Instant] = None) -> Tuple[datetime, datetime]:
    """(lundi 00:00, dimanche 00:00) de la semaine contenant `reference`."""
    ref = _as_datetime(reference if reference is not None else now())
    midnight = ref.replace(hour=0, minute=0, second=0, microsecond=0)
    # weekday(): lundi = 0 … dimanche = 6
    week_start = midnight - timedelta(days=midnight.weekday())
    return week_start, week_start + timedelta(days=6)


def find_weekly_sale(client: Client, week_start: Instant) -> Optional[WeeklySale]:
    # comparaison sur la date calendaire, l'heure stockée peut varier
    target = _as_datetime(week_start).date()
    for ws in client.weekly_sales:
        if ws.week_start.date() == target:
            return ws
    return None


def current_week_sale(client: Client, reference: Optional[Instant] = None) -> Optional[WeeklySale]:
    week_start, _ = compute_week_bounds(reference)
    return find_weekly_sale(client, week_start)


def sold_this_week(client: Client, reference: Optional[Instant] = None) -> bool:
    ws = current_week_sale(client, reference)
    return bool(ws and ws.sold)


def toggle_weekly_sale(client: Client, reference: Optional[Instant] = None) -> Client:
    """
    Inverse la vente de la semaine de `reference` (défaut : maintenant) et
    retourne une copie du client. Le client passé n'est pas modifié.
    """
    week_start, week_end = compute_week_bounds(reference)
    existing = find_weekly_sale(client, week_start)

    if existing is not None:
        flipped = existing.model_copy(update={"sold": not existing.sold})
        weekly_sales = [flipped if ws is existing else ws for ws in client.weekly_sales]
    else:
        created = WeeklySale(
            id=gen_id(),
            week_start=week_start,
            week_end=week_end,
            sold=True,
            notes=None,
            created_at=now(),
        )
        weekly_sales = [*client.weekly_sales, created]

    return client.model_copy(update={"weekly_sales": weekly_sales}, deep=True)
