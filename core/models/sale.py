from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal
from .common import gen_id, now

CENT = Decimal("0.01")


class Sale(BaseModel):
    id: str = Field(default_factory=gen_id)
    value: Decimal = Field(default=Decimal("0"), ge=0)
    # copie du nom, pas une référence vers Client.id
    client_name: str
    city: str = ""
    date: datetime = Field(default_factory=now)
    created_at: datetime = Field(default_factory=now)

    @field_validator("value")
    @classmethod
    def _to_cents(cls, v: Decimal) -> Decimal:
        # même précision que la colonne Numeric(12, 2) distante
        return v.quantize(CENT, rounding=ROUND_HALF_UP)

    class Config:
        extra = "ignore"
