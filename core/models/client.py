from __future__ import annotations
from pydantic import BaseModel, Field, field_validator
from typing import Dict, List, Literal, Optional
from datetime import datetime
from .common import gen_id, now

BusinessType = Literal["agropecuaria", "petshop", "mercado", "fazenda"]
ImportanceLevel = Literal["high", "medium", "low"]

BUSINESS_TYPE_LABELS: Dict[str, str] = {
    "agropecuaria": "Agropecuária",
    "petshop": "Pet Shop",
    "mercado": "Mercado",
    "fazenda": "Fazenda",
}

IMPORTANCE_LABELS: Dict[str, str] = {
    "high": "Alta",
    "medium": "Média",
    "low": "Baixa",
}

IMPORTANCE_RANK: Dict[str, int] = {"high": 3, "medium": 2, "low": 1}


class WeeklySale(BaseModel):
    id: str = Field(default_factory=gen_id)
    week_start: datetime  # lundi 00:00
    week_end: datetime    # dimanche 00:00
    sold: bool = False
    notes: Optional[str] = None
    created_at: datetime = Field(default_factory=now)


class Client(BaseModel):
    id: str = Field(default_factory=gen_id)
    name: str
    phone: str = ""
    business_type: BusinessType = "agropecuaria"
    city: str = ""
    location: str = ""
    importance_level: ImportanceLevel = "medium"
    created_at: datetime = Field(default_factory=now)
    weekly_sales: List[WeeklySale] = Field(default_factory=list)

    @field_validator("name")
    @classmethod
    def _name_required(cls, v: str) -> str:
        v = (v or "").strip()
        if not v:
            raise ValueError("name is required")
        return v

    @field_validator("weekly_sales", mode="before")
    @classmethod
    def _none_as_empty(cls, v):
        return v or []

    class Config:
        extra = "ignore"  # tolère d'anciennes clés dans les JSON
