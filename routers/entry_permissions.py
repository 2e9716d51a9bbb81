# routers/entry_permissions.py

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, StrictBool

from core.entry_permissions import entry_permissions_of, evaluate_entry
from core.errors import StoreError, extract_supabase_error
from core.logging_config import get_logger
from core.permission_helpers import (
    check_module_action,
    require_document_access,
    require_module_permission,
    requires_role,
)
from core.permission_store import PermissionStore, get_permission_store
from core.supabase_client import get_supabase_client
from core.tenant_isolation import check_tenant_isolation
from dependencies.auth import get_current_actor
from models.actor import Actor
from models.enums import Action, BaseStrEnum, Module, Role
from models.permissions import EntryPermissions

logger = get_logger("entry_permissions_router")

router = APIRouter(
    prefix="/entries",
    tags=["Entry Permissions"],
)


# Collections whose documents carry entry_permissions + an owning agency
class EntryCollection(BaseStrEnum):
    leads = "leads"
    properties = "properties"
    contact_messages = "contact_messages"

    @property
    def module(self) -> Module:
        return Module(self.value)


class EntryPermissionsPayload(BaseModel):
    # role → action → true (allow) / false (deny) / null (inherit)
    entry_permissions: Dict[str, Dict[str, Optional[StrictBool]]]


# ============================================================
# Document loading
# ============================================================
def load_document(collection: EntryCollection, document_id: str) -> dict:
    client = get_supabase_client()
    if not client:
        raise StoreError("Supabase client not configured")

    try:
        result = (
            client.table(collection.value)
            .select("id, agency_id, entry_permissions")
            .eq("id", document_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        detail = extract_supabase_error(e)
        logger.error(f"Loading {collection.value}/{document_id} failed: {detail}")
        raise StoreError(f"Document lookup failed: {detail}") from e

    if not result.data:
        raise HTTPException(status_code=404, detail=f"{collection.value} entry not found")
    return result.data[0]


# ============================================================
# GET entry permissions (full gate: module → tenant → entry)
# ============================================================
@router.get(
    "/{collection}/{document_id}/entry-permissions",
    summary="Entry-level permission block of one document",
)
def get_entry_permissions(
    collection: EntryCollection,
    document_id: str,
    actor: Actor = Depends(get_current_actor),
    store: PermissionStore = Depends(get_permission_store),
):
    require_module_permission(actor, collection.module, Action.view, store)

    document = load_document(collection, document_id)
    require_document_access(document, actor, Action.view)

    return {
        "id": document["id"],
        "collection": collection.value,
        "entry_permissions": entry_permissions_of(document).to_document(),
    }


# ============================================================
# GET access report (diagnostic, never raises on deny)
# ============================================================
@router.get(
    "/{collection}/{document_id}/access",
    summary="Every gate decision for the caller on one document",
)
def get_entry_access(
    collection: EntryCollection,
    document_id: str,
    action: Action = Action.view,
    actor: Actor = Depends(get_current_actor),
    store: PermissionStore = Depends(get_permission_store),
):
    module_decision = check_module_action(actor, collection.module, action, store)
    if not module_decision.allow:
        # Nothing about the document is revealed past a module deny
        return {
            "allow": False,
            "module": module_decision.model_dump(mode="json"),
            "tenant": None,
            "entry": None,
        }

    document = load_document(collection, document_id)
    tenant_decision = check_tenant_isolation(document, actor)
    entry_decision = evaluate_entry(document, actor, action)

    return {
        "allow": tenant_decision.allow and entry_decision.allow,
        "module": module_decision.model_dump(mode="json"),
        "tenant": tenant_decision.model_dump(mode="json"),
        "entry": entry_decision.model_dump(mode="json"),
    }


# ============================================================
# PUT entry permissions (super admin)
# ============================================================
@router.put(
    "/{collection}/{document_id}/entry-permissions",
    summary="Replace the entry-level permission block of one document",
)
def update_entry_permissions(
    collection: EntryCollection,
    document_id: str,
    payload: EntryPermissionsPayload,
    actor: Actor = Depends(requires_role(Role.super_admin)),
):
    entry_permissions = EntryPermissions.from_document(payload.entry_permissions)

    client = get_supabase_client()
    if not client:
        raise StoreError("Supabase client not configured")

    try:
        result = (
            client.table(collection.value)
            .update({"entry_permissions": entry_permissions.to_document()})
            .eq("id", document_id)
            .execute()
        )
    except Exception as e:
        detail = extract_supabase_error(e)
        logger.error(f"Update entry permissions error: {detail}")
        raise StoreError(f"Entry permission update failed: {detail}") from e

    if not result.data:
        raise HTTPException(status_code=404, detail=f"{collection.value} entry not found")

    logger.info(f"Entry permissions for {collection.value}/{document_id} updated by {actor.id}")
    return {
        "id": document_id,
        "collection": collection.value,
        "entry_permissions": entry_permissions.to_document(),
    }
