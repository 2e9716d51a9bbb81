# core/permission_store.py

"""
Permission Store Adapter.

Read (and administrative write) access to the three override
collections:

    role_permissions    keyed by role         (seeded, required per role)
    agency_permissions  keyed by agency_id    (optional)
    user_permissions    keyed by user_id      (optional)

Each row carries a `permissions` JSON matrix. Rows are parsed into
typed records at this boundary; an unknown module or action key makes
the row unreadable (PermissionStoreError) instead of silently passing
through. Writes are single-row upserts, last write wins.
"""

from datetime import datetime, timezone
from threading import Lock
from typing import Dict, List, Optional, Tuple, Type

from pydantic import ValidationError

from core.cache import SimpleCache
from core.config import settings
from core.errors import PermissionStoreError, UnknownModuleError, extract_supabase_error
from core.logging_config import get_logger
from core.supabase_client import get_supabase_client
from models.enums import Role
from models.permissions import (
    AgencyPermissionSet,
    ModuleActionMatrix,
    PermissionRecord,
    RolePermissionSet,
    UserPermissionSet,
)

logger = get_logger("permission_store")


# layer → (table, key column, record type)
LAYERS: Dict[str, Tuple[str, str, Type[PermissionRecord]]] = {
    "role": ("role_permissions", "role", RolePermissionSet),
    "agency": ("agency_permissions", "agency_id", AgencyPermissionSet),
    "user": ("user_permissions", "user_id", UserPermissionSet),
}


def _parse_record(layer: str, row: dict) -> PermissionRecord:
    _, key_column, record_type = LAYERS[layer]
    try:
        return record_type(
            **{key_column: row[key_column]},
            permissions=ModuleActionMatrix.from_document(row.get("permissions")),
            last_updated_by=row.get("last_updated_by"),
            updated_at=row.get("updated_at"),
        )
    except (UnknownModuleError, ValidationError, KeyError) as e:
        logger.error(f"Unreadable {LAYERS[layer][0]} row {row.get(key_column)!r}: {e}")
        raise PermissionStoreError(
            f"Corrupt {LAYERS[layer][0]} record for {row.get(key_column)!r}: {e}"
        ) from e


# ============================================================
# Base store
# ============================================================
class PermissionStore:
    """
    Public API used by the resolver, the admin router and the seed job.
    Subclasses implement _get / _list / _save / _delete for one layer.
    """

    backend = "abstract"

    # ---------------- reads ----------------
    def get_role_permissions(self, role: Role) -> Optional[RolePermissionSet]:
        return self._get("role", Role(role).value)

    def get_agency_permissions(self, agency_id: str) -> Optional[AgencyPermissionSet]:
        return self._get("agency", str(agency_id))

    def get_user_permissions(self, user_id: str) -> Optional[UserPermissionSet]:
        return self._get("user", str(user_id))

    def list_role_permissions(self) -> List[RolePermissionSet]:
        return self._list("role")

    # ---------------- writes ----------------
    def save_role_permissions(
        self, role: Role, matrix: ModuleActionMatrix, updated_by: Optional[str] = None
    ) -> RolePermissionSet:
        if Role(role) == Role.super_admin:
            raise ValueError("super_admin does not take a permission matrix")
        return self._save("role", Role(role).value, matrix, updated_by)

    def save_agency_permissions(
        self, agency_id: str, matrix: ModuleActionMatrix, updated_by: Optional[str] = None
    ) -> AgencyPermissionSet:
        return self._save("agency", str(agency_id), matrix, updated_by)

    def save_user_permissions(
        self, user_id: str, matrix: ModuleActionMatrix, updated_by: Optional[str] = None
    ) -> UserPermissionSet:
        return self._save("user", str(user_id), matrix, updated_by)

    def delete_agency_permissions(self, agency_id: str) -> bool:
        return self._delete("agency", str(agency_id))

    def delete_user_permissions(self, user_id: str) -> bool:
        return self._delete("user", str(user_id))

    def ping(self) -> dict:
        return {"backend": self.backend, "status": "ok"}

    # ---------------- per-backend ----------------
    def _get(self, layer: str, key: str) -> Optional[PermissionRecord]:
        raise NotImplementedError

    def _list(self, layer: str) -> List[PermissionRecord]:
        raise NotImplementedError

    def _save(self, layer, key, matrix, updated_by) -> PermissionRecord:
        raise NotImplementedError

    def _delete(self, layer: str, key: str) -> bool:
        raise NotImplementedError


# ============================================================
# Supabase-backed store
# ============================================================
class SupabasePermissionStore(PermissionStore):
    backend = "supabase"

    def __init__(self, client=None):
        self._client = client

    def _table(self, layer: str):
        client = self._client or get_supabase_client()
        if not client:
            raise PermissionStoreError("Supabase client not configured")
        return client.table(LAYERS[layer][0])

    def _execute(self, layer: str, operation: str, query):
        try:
            return query.execute()
        except PermissionStoreError:
            raise
        except Exception as e:
            detail = extract_supabase_error(e)
            logger.error(f"{LAYERS[layer][0]} {operation} failed: {detail}")
            raise PermissionStoreError(f"{LAYERS[layer][0]} {operation} failed: {detail}") from e

    def _get(self, layer, key):
        key_column = LAYERS[layer][1]
        result = self._execute(
            layer, "lookup",
            self._table(layer).select("*").eq(key_column, key).limit(1),
        )
        rows = result.data or []
        if not rows:
            return None
        return _parse_record(layer, rows[0])

    def _list(self, layer):
        result = self._execute(layer, "list", self._table(layer).select("*"))
        return [_parse_record(layer, row) for row in (result.data or [])]

    def _save(self, layer, key, matrix, updated_by):
        key_column = LAYERS[layer][1]
        row = {
            key_column: key,
            "permissions": matrix.to_document(),
            "last_updated_by": updated_by,
            "updated_at": datetime.now(timezone.utc).isoformat(),
        }
        result = self._execute(
            layer, "upsert",
            self._table(layer).upsert(row, on_conflict=key_column),
        )
        saved = (result.data or [row])[0]
        logger.info(f"Saved {LAYERS[layer][0]} for {key_column}={key} (by {updated_by or 'system'})")
        return _parse_record(layer, saved)

    def _delete(self, layer, key):
        key_column = LAYERS[layer][1]
        result = self._execute(
            layer, "delete",
            self._table(layer).delete().eq(key_column, key),
        )
        deleted = bool(result.data)
        if deleted:
            logger.info(f"Deleted {LAYERS[layer][0]} for {key_column}={key}")
        return deleted

    def ping(self) -> dict:
        tables = {}
        for layer, (table, _, _) in LAYERS.items():
            try:
                res = self._table(layer).select("*").limit(1).execute()
                tables[table] = {"status": "ok", "rows_found": len(res.data or [])}
            except Exception as err:
                tables[table] = {"status": "error", "detail": extract_supabase_error(err)}
        overall = "ok" if all(t["status"] == "ok" for t in tables.values()) else "error"
        return {"backend": self.backend, "status": overall, "tables": tables}


# ============================================================
# In-memory store (local development + tests)
# ============================================================
class InMemoryPermissionStore(PermissionStore):
    backend = "memory"

    def __init__(self):
        self._records: Dict[str, Dict[str, PermissionRecord]] = {layer: {} for layer in LAYERS}
        self._lock = Lock()

    def _get(self, layer, key):
        with self._lock:
            return self._records[layer].get(key)

    def _list(self, layer):
        with self._lock:
            return list(self._records[layer].values())

    def _save(self, layer, key, matrix, updated_by):
        _, key_column, record_type = LAYERS[layer]
        record = record_type(
            **{key_column: key},
            permissions=matrix,
            last_updated_by=updated_by,
            updated_at=datetime.now(timezone.utc),
        )
        with self._lock:
            self._records[layer][key] = record
        return record

    def _delete(self, layer, key):
        with self._lock:
            return self._records[layer].pop(key, None) is not None


# ============================================================
# Cache wrapper
# ============================================================
_ABSENT = object()


class CachedPermissionStore(PermissionStore):
    """
    TTL cache in front of another store. Every write through this
    wrapper drops the affected key before returning.
    """

    def __init__(self, inner: PermissionStore, ttl_seconds: int):
        self.inner = inner
        self.cache = SimpleCache(ttl_seconds=ttl_seconds)
        self.backend = f"cached:{inner.backend}"

    @staticmethod
    def _key(layer: str, key: str) -> str:
        return f"{layer}:{key}"

    def _get(self, layer, key):
        cached = self.cache.get(self._key(layer, key), _ABSENT)
        if cached is not _ABSENT:
            return cached
        record = self.inner._get(layer, key)
        self.cache.set(self._key(layer, key), record)
        return record

    def _list(self, layer):
        return self.inner._list(layer)

    def _save(self, layer, key, matrix, updated_by):
        try:
            return self.inner._save(layer, key, matrix, updated_by)
        finally:
            self.cache.invalidate(self._key(layer, key))

    def _delete(self, layer, key):
        try:
            return self.inner._delete(layer, key)
        finally:
            self.cache.invalidate(self._key(layer, key))

    def ping(self) -> dict:
        return {**self.inner.ping(), "backend": self.backend, "cached_records": len(self.cache)}


# ============================================================
# Factory / FastAPI dependency
# ============================================================
_store: Optional[PermissionStore] = None
_store_lock = Lock()


def build_permission_store(
    backend: Optional[str] = None, cache_ttl_seconds: Optional[int] = None
) -> PermissionStore:
    backend = backend or settings.PERMISSION_STORE_BACKEND
    ttl = settings.PERMISSION_CACHE_TTL_SECONDS if cache_ttl_seconds is None else cache_ttl_seconds

    if backend == "supabase":
        store: PermissionStore = SupabasePermissionStore()
    elif backend == "memory":
        store = InMemoryPermissionStore()
    else:
        raise ValueError(f"Unknown PERMISSION_STORE_BACKEND: {backend}")

    if ttl and ttl > 0:
        store = CachedPermissionStore(store, ttl_seconds=ttl)
    return store


def get_permission_store() -> PermissionStore:
    """Process-wide store built from settings on first use."""
    global _store
    with _store_lock:
        if _store is None:
            _store = build_permission_store()
            logger.info(f"Permission store backend: {_store.backend}")
        return _store
