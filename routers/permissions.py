# routers/permissions.py

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException
from pydantic import BaseModel, StrictBool

from core.errors import ConfigurationError, configuration_http_exception
from core.logging_config import get_logger
from core.permission_helpers import check_module_action, requires_role
from core.permission_resolver import resolve_permissions
from core.permission_store import PermissionStore, get_permission_store
from core.permissions import initialize_role_permissions
from dependencies.auth import get_current_actor
from models.actor import Actor
from models.enums import Action, Module, Role
from models.permissions import ModuleActionMatrix, PermissionRecord

logger = get_logger("permissions_router")

router = APIRouter(
    prefix="/permissions",
    tags=["Permissions"],
)

super_admin_only = requires_role(Role.super_admin)


# ============================================================
# Payloads
# ============================================================
class PermissionMatrixPayload(BaseModel):
    # Raw stored shape; unknown module/action keys are rejected with 422
    permissions: Dict[str, Dict[str, Optional[StrictBool]]]


class PermissionCheckRequest(BaseModel):
    module: Module
    action: Action


def serialize_record(record: PermissionRecord) -> dict:
    data = record.model_dump(mode="json", exclude={"permissions"})
    data["permissions"] = record.permissions.to_document()
    return data


def _not_found(what: str) -> HTTPException:
    return HTTPException(status_code=404, detail=f"No {what} permissions defined")


# ============================================================
# Caller's own view
# ============================================================
@router.get("/me", summary="Effective permission matrix for the caller")
def get_my_permissions(
    actor: Actor = Depends(get_current_actor),
    store: PermissionStore = Depends(get_permission_store),
):
    try:
        matrix = resolve_permissions(actor, store)
    except ConfigurationError as e:
        logger.warning(f"/permissions/me for user {actor.id}: {e}")
        raise configuration_http_exception(e)

    return {
        "user_id": actor.id,
        "role": actor.role.value,
        "agency_id": actor.tenant_id,
        "permissions": matrix.to_document(),
    }


@router.post("/check", summary="Module gate decision for the caller")
def check_permission(
    payload: PermissionCheckRequest,
    actor: Actor = Depends(get_current_actor),
    store: PermissionStore = Depends(get_permission_store),
):
    decision = check_module_action(actor, payload.module, payload.action, store)
    return decision.model_dump(mode="json")


# ============================================================
# Role defaults
# ============================================================
@router.get("", summary="List all role permission sets")
def list_role_permissions(
    actor: Actor = Depends(super_admin_only),
    store: PermissionStore = Depends(get_permission_store),
):
    return [serialize_record(r) for r in store.list_role_permissions()]


@router.get("/roles/{role}", summary="Permission set for one role")
def get_role_permissions(
    role: Role,
    actor: Actor = Depends(get_current_actor),
    store: PermissionStore = Depends(get_permission_store),
):
    if role == Role.super_admin:
        return {"role": role.value, "bypass": True,
                "permissions": ModuleActionMatrix.grant_all().to_document()}

    record = store.get_role_permissions(role)
    if record is None:
        raise _not_found(f"role '{role.value}'")
    return serialize_record(record)


@router.put("/roles/{role}", summary="Replace the permission set for a role")
def update_role_permissions(
    role: Role,
    payload: PermissionMatrixPayload,
    actor: Actor = Depends(super_admin_only),
    store: PermissionStore = Depends(get_permission_store),
):
    if role == Role.super_admin:
        raise HTTPException(status_code=400, detail="super_admin permissions cannot be edited")

    matrix = ModuleActionMatrix.from_document(payload.permissions)
    record = store.save_role_permissions(role, matrix, updated_by=actor.id)
    logger.info(f"Role permissions for {role} updated by {actor.id}")
    return serialize_record(record)


@router.post("/initialize", summary="Seed default permissions for all roles")
def initialize_permissions(
    actor: Actor = Depends(super_admin_only),
    store: PermissionStore = Depends(get_permission_store),
):
    results = initialize_role_permissions(store, updated_by=actor.id)
    return {"message": "Permissions initialized", "results": results}


# ============================================================
# Agency overrides
# ============================================================
@router.get("/agencies/{agency_id}", summary="Agency permission override")
def get_agency_permissions(
    agency_id: str,
    actor: Actor = Depends(super_admin_only),
    store: PermissionStore = Depends(get_permission_store),
):
    record = store.get_agency_permissions(agency_id)
    if record is None:
        raise _not_found(f"agency '{agency_id}'")
    return serialize_record(record)


@router.put("/agencies/{agency_id}", summary="Create or replace an agency override")
def update_agency_permissions(
    agency_id: str,
    payload: PermissionMatrixPayload,
    actor: Actor = Depends(super_admin_only),
    store: PermissionStore = Depends(get_permission_store),
):
    matrix = ModuleActionMatrix.from_document(payload.permissions)
    record = store.save_agency_permissions(agency_id, matrix, updated_by=actor.id)
    logger.info(f"Agency permissions for {agency_id} updated by {actor.id}")
    return serialize_record(record)


@router.delete("/agencies/{agency_id}", summary="Remove an agency override")
def delete_agency_permissions(
    agency_id: str,
    actor: Actor = Depends(super_admin_only),
    store: PermissionStore = Depends(get_permission_store),
):
    if not store.delete_agency_permissions(agency_id):
        raise _not_found(f"agency '{agency_id}'")
    return {"success": True, "agency_id": agency_id}


# ============================================================
# User overrides
# ============================================================
@router.get("/users/{user_id}", summary="User permission override")
def get_user_permissions(
    user_id: str,
    actor: Actor = Depends(super_admin_only),
    store: PermissionStore = Depends(get_permission_store),
):
    record = store.get_user_permissions(user_id)
    if record is None:
        raise _not_found(f"user '{user_id}'")
    return serialize_record(record)


@router.put("/users/{user_id}", summary="Create or replace a user override")
def update_user_permissions(
    user_id: str,
    payload: PermissionMatrixPayload,
    actor: Actor = Depends(super_admin_only),
    store: PermissionStore = Depends(get_permission_store),
):
    matrix = ModuleActionMatrix.from_document(payload.permissions)
    record = store.save_user_permissions(user_id, matrix, updated_by=actor.id)
    logger.info(f"User permissions for {user_id} updated by {actor.id}")
    return serialize_record(record)


@router.delete("/users/{user_id}", summary="Remove a user override")
def delete_user_permissions(
    user_id: str,
    actor: Actor = Depends(super_admin_only),
    store: PermissionStore = Depends(get_permission_store),
):
    if not store.delete_user_permissions(user_id):
        raise _not_found(f"user '{user_id}'")
    return {"success": True, "user_id": user_id}
