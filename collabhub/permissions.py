"""
collabhub/permissions.py

Permission registry: the fixed catalog of named permission levels.

Permission documents are immutable reference data keyed by name. The catalog
is loaded once at startup into an in-memory name -> ObjectId map and only
reloaded when reference data changes explicitly (catalog.load). Call sites
look permissions up by name, never by a hard-coded id.

Pure lookup logic - no FastAPI imports.
"""

from __future__ import annotations

from typing import Dict, Iterable, Optional, Set

from bson import ObjectId
from pymongo.database import Database

try:
    from collabhub.db import PERMISSIONS
except ModuleNotFoundError:
    from db import PERMISSIONS


class PermissionName:
    """Permission level names stored in the permissions collection."""
    OWNER = "owner"
    CAN_EDITED = "can_edited"
    READ_ONLY = "read_only"


class PermissionCatalog:
    """Process-wide, read-only map between permission names and ids."""

    def __init__(self) -> None:
        self._by_name: Dict[str, ObjectId] = {}
        self._by_id: Dict[ObjectId, str] = {}

    @property
    def loaded(self) -> bool:
        return bool(self._by_name)

    def load(self, db: Database) -> None:
        by_name: Dict[str, ObjectId] = {}
        for doc in db[PERMISSIONS].find({}, {"name": 1}):
            by_name[doc["name"]] = doc["_id"]
        self._by_name = by_name
        self._by_id = {pid: name for name, pid in by_name.items()}
        print(f"[PERMISSIONS] Loaded {len(by_name)} permission level(s): {sorted(by_name)}")

    def clear(self) -> None:
        self._by_name = {}
        self._by_id = {}

    def _require_loaded(self) -> None:
        if not self.loaded:
            raise RuntimeError("Permission catalog not loaded")

    def id_for(self, name: str) -> ObjectId:
        """
        Get the id of a permission level by name.

        Raises:
            RuntimeError: If the catalog is not loaded
            KeyError: If no permission has this name
        """
        self._require_loaded()
        return self._by_name[name]

    def name_for(self, permission_id: ObjectId) -> Optional[str]:
        self._require_loaded()
        return self._by_id.get(permission_id)

    def ids_for(self, names: Iterable[str]) -> Set[ObjectId]:
        """Ids of every known permission in names; unknown names are skipped."""
        self._require_loaded()
        return {self._by_name[n] for n in names if n in self._by_name}

    def names(self) -> Set[str]:
        self._require_loaded()
        return set(self._by_name)


catalog = PermissionCatalog()
