# core/entry_permissions.py

"""
Entry-level evaluator.

Runs after the module gate already allowed the module/action. Reads the
document's per-role overrides: deny tightens, allow loosens, anything
unset leaves the module decision standing.
"""

from typing import Any

from core.errors import PermissionStoreError, UnknownModuleError
from core.logging_config import get_logger
from core.utils import document_field
from models.actor import Actor, Decision
from models.enums import Action, DecisionReason, EntryOverride
from models.permissions import EntryPermissions

logger = get_logger("entry_permissions")


def entry_permissions_of(document: Any) -> EntryPermissions:
    """A stored block we cannot read is a store fault, never an inherit."""
    raw = document_field(document, "entry_permissions", "entryPermissions")
    try:
        return EntryPermissions.from_document(raw)
    except UnknownModuleError as e:
        doc_id = document_field(document, "id", "_id")
        logger.error(f"Unreadable entry_permissions on document {doc_id!r}: {e}")
        raise PermissionStoreError(
            f"Corrupt entry_permissions on document {doc_id!r}: {e}"
        ) from e


def evaluate_entry(document: Any, actor: Actor, action: Action) -> Decision:
    action = Action(action)

    if actor.is_super_admin:
        return Decision.allowed(DecisionReason.super_admin_bypass, action=action)

    override = entry_permissions_of(document).override_for(actor.role, action)

    if override == EntryOverride.deny:
        logger.info(f"Entry-level deny for role {actor.role} on {action} (user {actor.id})")
        return Decision.denied(DecisionReason.entry_explicit_deny, action=action, found=False)

    if override == EntryOverride.allow:
        return Decision.allowed(DecisionReason.entry_explicit_allow, action=action, found=True)

    return Decision.allowed(DecisionReason.module_permission_passed, action=action)
