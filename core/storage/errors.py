"""Erreurs de la couche de persistance."""

from __future__ import annotations


class StorageError(RuntimeError):
    """Base de toutes les erreurs de stockage."""


class BackendUnavailable(StorageError):
    """Le backend ne répond pas (réseau, base, fichier) : on peut basculer."""


class RecordNotFound(StorageError, ValueError):
    def __init__(self, entity_name: str, obj_id: object) -> None:
        super().__init__(f"{entity_name} with id={obj_id} not found")
        self.entity_name = entity_name
        self.obj_id = obj_id


class DuplicateRecord(StorageError, ValueError):
    def __init__(self, entity_name: str, obj_id: object) -> None:
        super().__init__(f"{entity_name} with id={obj_id} already exists")
        self.entity_name = entity_name
        self.obj_id = obj_id
