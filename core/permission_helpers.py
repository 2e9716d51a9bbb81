from typing import Optional

from fastapi import Depends, HTTPException

from core.entry_permissions import evaluate_entry
from core.errors import ConfigurationError, decision_http_exception
from core.logging_config import get_logger
from core.notifications import notify_access_denied
from core.permission_resolver import resolve_permissions
from core.permission_store import PermissionStore, get_permission_store
from core.tenant_isolation import check_tenant_isolation
from dependencies.auth import get_current_actor, get_optional_actor
from models.actor import Actor, Decision
from models.enums import Action, DecisionReason, Module, Role

logger = get_logger("module_gate")


# -----------------------------------------------------
# Module gate: one (module, action) cell of the effective matrix
# -----------------------------------------------------
def check_module_action(
    actor: Optional[Actor],
    module: Module,
    action: Action,
    store: PermissionStore,
) -> Decision:
    module = Module(module)
    action = Action(action)

    if actor is None or not actor.active:
        return Decision.denied(DecisionReason.unauthenticated, module=module, action=action)

    # Super admin = master key
    if actor.is_super_admin:
        logger.debug(f"Super admin bypass for {module}.{action}")
        return Decision.allowed(DecisionReason.bypass, module=module, action=action)

    try:
        matrix = resolve_permissions(actor, store)
    except ConfigurationError as e:
        logger.warning(f"Permission check failed for user {actor.id}: {e}")
        return Decision.denied(
            DecisionReason.no_role_permissions_defined, module=module, action=action
        )

    found = matrix.lookup(module, action)
    if found is True:
        logger.debug(f"Permission check passed - {actor.role} can {action} {module}")
        return Decision.allowed(
            DecisionReason.permission_granted, module=module, action=action, found=True
        )

    logger.info(
        f"Permission denied - user {actor.id}, role {actor.role}, "
        f"{module}.{action} = {found}"
    )
    return Decision.denied(
        DecisionReason.insufficient_permission, module=module, action=action, found=found
    )


def has_module_permission(
    actor: Optional[Actor], module: Module, action: Action, store: PermissionStore
) -> bool:
    return check_module_action(actor, module, action, store).allow


def require_module_permission(
    actor: Optional[Actor], module: Module, action: Action, store: PermissionStore
) -> Decision:
    """Raising variant for handlers whose module is only known at request time."""
    decision = check_module_action(actor, module, action, store)
    if not decision.allow:
        notify_access_denied(actor, decision)
        raise decision_http_exception(decision)
    return decision


# -----------------------------------------------------
# FastAPI dependency wrappers
# -----------------------------------------------------
def requires_module_permission(module: Module, action: Action):
    """
    Usage:
        @router.delete("/{lead_id}")
        def delete_lead(actor: Actor = Depends(requires_module_permission("leads", "delete"))):
            ...
    """
    module = Module(module)
    action = Action(action)

    def dependency(
        actor: Optional[Actor] = Depends(get_optional_actor),
        store: PermissionStore = Depends(get_permission_store),
    ) -> Actor:
        require_module_permission(actor, module, action, store)
        return actor

    return dependency


def requires_role(*roles: Role):
    allowed = {Role(r) for r in roles}

    def checker(actor: Actor = Depends(get_current_actor)) -> Actor:
        if actor.role not in allowed:
            notify_access_denied(actor, Decision.denied(DecisionReason.insufficient_permission))
            raise HTTPException(
                status_code=403,
                detail={
                    "message": "Access denied. Insufficient permissions.",
                    "reason": DecisionReason.insufficient_permission.value,
                    "required_roles": sorted(r.value for r in allowed),
                },
            )
        return actor

    return checker


# ============================================================
# SINGLE-DOCUMENT CHECKS (call after loading the document)
# ============================================================

def require_tenant_access(document, actor: Actor) -> Decision:
    """Raise 403 unless the document belongs to the actor's agency."""
    decision = check_tenant_isolation(document, actor)
    if not decision.allow:
        notify_access_denied(actor, decision)
        raise decision_http_exception(decision)
    return decision


def require_entry_permission(document, actor: Actor, action: Action) -> Decision:
    """Raise 403 when the document's entry permissions deny this role/action."""
    decision = evaluate_entry(document, actor, action)
    if not decision.allow:
        notify_access_denied(actor, decision)
        raise decision_http_exception(decision)
    return decision


def require_document_access(document, actor: Actor, action: Action) -> None:
    """
    Tenant isolation first, then entry-level overrides.
    Both must pass on top of the module gate that already ran.
    """
    require_tenant_access(document, actor)
    require_entry_permission(document, actor, action)
