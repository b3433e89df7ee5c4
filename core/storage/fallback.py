"""
Bascule base distante → stockage local.
Chaque appel part vers `primary` ; si le backend est indisponible on rejoue
l'appel sur `secondary` (une mise à jour y devient un upsert).
RecordNotFound / DuplicateRecord sont des réponses, pas des pannes : elles
remontent telles quelles.
"""

from __future__ import annotations

import logging
from typing import Any, List, Optional

from core.storage.base import M, Repository
from core.storage.errors import BackendUnavailable

logger = logging.getLogger(__name__)



class FallbackRepository(Repository[M]):
    def __init__(self, primary: Repository[M], secondary: Repository[M]) -> None:
        self.primary = primary
        self.secondary = secondary
        self.entity_name = primary.entity_name
        self.last_backend: Repository[M] = primary

    def _call(self, op: str, *args: Any, local_op: Optional[str] = None) -> Any:
        try:
            result = getattr(self.primary, op)(*args)
            self.last_backend = self.primary
            return result
        except BackendUnavailable as e:
            logger.warning(
                "Backend distant indisponible pour %s.%s, stockage local utilisé: %s",
                self.entity_name, op, e,
            )
        result = getattr(self.secondary, local_op or op)(*args)
        self.last_backend = self.secondary
        return result

    def list_all(self) -> List[M]:
        return self._call("list_all")

    def get_by_id(self, obj_id: str) -> Optional[M]:
        return self._call("get_by_id", obj_id)

    def add(self, item: M) -> M:
        return self._call("add", item)

    def update(self, item: M) -> M:
        # l'enregistrement peut n'exister qu'à distance : upsert côté local
        return self._call("update", item, local_op="upsert")

    def delete(self, obj_id: str) -> bool:
        return self._call("delete", obj_id)
