"""
Interface commune des dépôts (JSON local, base distante, bascule).
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Generic, List, Optional, TypeVar

from pydantic import BaseModel

from core.storage.errors import RecordNotFound

M = TypeVar("M", bound=BaseModel)


class Repository(ABC, Generic[M]):
    entity_name: str = "entity"

    @abstractmethod
    def list_all(self) -> List[M]:
        """Tous les enregistrements valides, les plus récents d'abord."""

    @abstractmethod
    def get_by_id(self, obj_id: str) -> Optional[M]:
        ...

    @abstractmethod
    def add(self, item: M) -> M:
        """Insère `item`. DuplicateRecord si l'id existe déjà."""

    @abstractmethod
    def update(self, item: M) -> M:
        """Remplace l'enregistrement de même id. RecordNotFound sinon."""

    @abstractmethod
    def delete(self, obj_id: str) -> bool:
        """True si quelque chose a été supprimé."""

    def upsert(self, item: M) -> M:
        try:
            return self.update(item)
        except RecordNotFound:
            return self.add(item)
