from __future__ import annotations
from datetime import date, datetime
from decimal import ROUND_HALF_UP, Decimal, InvalidOperation
from typing import Any

INVALID_DATE = "Data inválida"


def format_brl(value: Any) -> str:
    """1234.5 -> 'R$ 1.234,50'"""
    try:
        d = Decimal(str(value if value is not None else 0))
    except InvalidOperation:
        d = Decimal("0")
    d = d.quantize(Decimal("0.01"), rounding=ROUND_HALF_UP)
    sign = "-" if d < 0 else ""
    s = f"{abs(d):,.2f}"  # 1,234.50
    s = s.replace(",", "_").replace(".", ",").replace("_", ".")
    return f"{sign}R$ {s}"


def format_date(value: Any) -> str:
    """dd/mm/aaaa ; 'Data inválida' si la valeur n'est pas une date."""
    if isinstance(value, (date, datetime)):
        return value.strftime("%d/%m/%Y")
    if isinstance(value, str):
        try:
            return datetime.fromisoformat(value.strip()).strftime("%d/%m/%Y")
        except ValueError:
            return INVALID_DATE
    return INVALID_DATE
