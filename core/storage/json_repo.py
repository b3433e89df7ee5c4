from __future__ import annotations

import glob
import json
import logging
import shutil
import threading
from datetime import date, datetime
from pathlib import Path
from typing import Any, Dict, Iterable, List, Mapping, Optional, Type, Union

from pydantic import ValidationError

from core.storage.base import M, Repository
from core.storage.errors import BackendUnavailable, DuplicateRecord, RecordNotFound

logger = logging.getLogger(__name__)


def _json_default(o: Any) -> Any:
    if isinstance(o, (date, datetime)):
        return o.isoformat()
    # Decimal & co
    return str(o)


def _created_key(m: Any) -> datetime:
    # horodatages naïfs et avec fuseau mélangés : tout ramener en heure locale naïve
    ts = getattr(m, "created_at")
    if ts.tzinfo is not None:
        ts = ts.astimezone().replace(tzinfo=None)
    return ts


class JsonRepository(Repository[M]):
    """
    Repo JSON local (un fichier par collection), utilisé seul ou en secours
    de la base distante.
    - Rotation de backups (backup_enabled, backup_keep)
    - N'écrit pas si le contenu ne change pas (réduction du bruit et des .bak)
    - Les lignes invalides sont ignorées à la lecture (log warning)
    """

    def __init__(
        self,
        filepath: Union[str, Path],
        model: Type[M],
        entity_name: str = "entity",
        *,
        backup_enabled: bool = True,
        backup_keep: int = 5,
    ) -> None:
        self.filepath = Path(filepath)
        self.model = model
        self.entity_name = entity_name
        self._lock = threading.Lock()
        self.backup_enabled = backup_enabled
        self.backup_keep = max(0, int(backup_keep))

        self.filepath.parent.mkdir(parents=True, exist_ok=True)
        if not self.filepath.exists():
            self._write_raw([])

    # ---------------- I/O bas niveau ---------------- #

    def _read_raw(self) -> List[Dict[str, Any]]:
        try:
            with self.filepath.open("r", encoding="utf-8") as f:
                data = json.load(f)
            return data if isinstance(data, list) else []
        except FileNotFoundError:
            return []
        except json.JSONDecodeError:
            # Fichier corrompu → sauvegarde et repart sur liste vide
            backup = self.filepath.with_suffix(".corrupt.json")
            try:
                shutil.copy2(self.filepath, backup)
            except OSError as e:
                logger.warning("Impossible de sauvegarder %s (%s)", self.filepath, e)
            logger.warning("%s illisible, copié vers %s", self.filepath, backup)
            return []

    def _rotate_backups(self) -> None:
        if not self.backup_enabled or self.backup_keep <= 0:
            return
        pattern = str(self.filepath.with_suffix(".*.bak.json"))
        files = sorted(glob.glob(pattern))
        # garde les plus récents
        if len(files) > self.backup_keep:
            for old in files[: len(files) - self.backup_keep]:
                Path(old).unlink(missing_ok=True)

    def _write_raw(self, data: Iterable[Mapping[str, Any]]) -> None:
        with self._lock:
            new_dump = json.dumps(list(data), ensure_ascii=False, indent=2, default=_json_default)

            try:
                # si contenu identique → ne rien faire
                if self.filepath.exists():
                    if self.filepath.read_text(encoding="utf-8") == new_dump:
                        return

                    if self.backup_enabled and self.backup_keep > 0:
                        ts = datetime.now().strftime("%Y%m%d-%H%M%S-%f")
                        shutil.copy2(self.filepath, self.filepath.with_suffix(f".{ts}.bak.json"))
                        self._rotate_backups()

                with self.filepath.open("w", encoding="utf-8") as f:
                    f.write(new_dump)
            except OSError as e:
                raise BackendUnavailable(f"cannot write {self.filepath}: {e}") from e

    # ---------------- Helpers ---------------- #

    def _hydrate(self, row: Mapping[str, Any]) -> Optional[M]:
        try:
            return self.model.model_validate(row)
        except ValidationError as e:
            logger.warning(
                "%s ignoré dans %s (%s erreur(s))",
                self.entity_name, self.filepath.name, e.error_count(),
            )
            return None

    @staticmethod
    def _to_dict(item: M) -> Dict[str, Any]:
        return item.model_dump()

    # ---------------- CRUD ---------------- #

    def list_all(self) -> List[M]:
        out: List[M] = []
        for row in self._read_raw():
            obj = self._hydrate(row)
            if obj is not None:
                out.append(obj)
        out.sort(key=_created_key, reverse=True)
        return out

    def get_by_id(self, obj_id: str) -> Optional[M]:
        for row in self._read_raw():
            if str(row.get("id")) == str(obj_id):
                return self._hydrate(row)
        return None

    def add(self, item: M) -> M:
        record = self._to_dict(item)
        data = self._read_raw()
        if any(str(d.get("id")) == str(record["id"]) for d in data):
            raise DuplicateRecord(self.entity_name, record["id"])
        data.append(record)
        self._write_raw(data)
        return item

    def update(self, item: M) -> M:
        record = self._to_dict(item)
        obj_id = record.get("id")
        data = self._read_raw()
        for idx, existing in enumerate(data):
            if str(existing.get("id")) == str(obj_id):
                data[idx] = record
                self._write_raw(data)
                return item
        raise RecordNotFound(self.entity_name, obj_id)

    def delete(self, obj_id: str) -> bool:
        data = self._read_raw()
        new_data = [d for d in data if str(d.get("id")) != str(obj_id)]
        changed = len(new_data) != len(data)
        if changed:
            self._write_raw(new_data)
        return changed
