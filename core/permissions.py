# ============================================
# DEFAULT ROLE → MODULE/ACTION MATRIX (seed data)
# ============================================
from typing import Dict, List, Optional

from core.logging_config import get_logger
from core.roles import ENTRY_PERMISSION_ROLES, SEEDED_ROLES
from models.enums import Action, EntryOverride, Role
from models.permissions import EntryPermissions, ModuleActionMatrix

logger = get_logger("permissions")


_FULL = {"view": True, "create": True, "edit": True, "delete": True}

DEFAULT_MODULE_PERMISSIONS = {
    "leads": dict(_FULL),
    "properties": dict(_FULL),
    "inquiries": dict(_FULL),

    # Messages arrive from the public site; staff never create them
    "contact_messages": {"view": True, "create": False, "edit": True, "delete": True},

    "users": dict(_FULL),
    "agencies": dict(_FULL),

    # cms / settings / subscriptions / analytics are NOT seeded:
    # denied until a super admin grants them.
}

DEFAULT_ROLE_PERMISSIONS: Dict[Role, dict] = {

    # =====================================================
    # AGENCY ADMIN
    # =====================================================
    Role.agency_admin: DEFAULT_MODULE_PERMISSIONS,

    # =====================================================
    # AGENT
    # =====================================================
    Role.agent: DEFAULT_MODULE_PERMISSIONS,

    # =====================================================
    # STAFF
    # =====================================================
    Role.staff: DEFAULT_MODULE_PERMISSIONS,

    # =====================================================
    # USER (public account)
    # =====================================================
    Role.user: DEFAULT_MODULE_PERMISSIONS,

    # super_admin: bypass, never stored
}


# ============================================
# DEFAULT PER-DOCUMENT ENTRY PERMISSIONS
# ============================================
DEFAULT_ENTRY_PERMISSIONS = {
    role: {
        Action.view: EntryOverride.allow,
        Action.edit: EntryOverride.allow,
        Action.delete: EntryOverride.deny,
    }
    for role in ENTRY_PERMISSION_ROLES
}


def default_role_matrix(role: Role) -> ModuleActionMatrix:
    return ModuleActionMatrix.from_document(DEFAULT_ROLE_PERMISSIONS[Role(role)])


def default_entry_permissions() -> EntryPermissions:
    """Entry block stamped on new leads, properties and contact messages."""
    return EntryPermissions(
        roles={role: dict(actions) for role, actions in DEFAULT_ENTRY_PERMISSIONS.items()}
    )


# ============================================
# SEEDING
# ============================================
def initialize_role_permissions(
    store,
    updated_by: Optional[str] = None,
    patch_missing: bool = True,
) -> List[dict]:
    """
    Create missing role rows from the defaults.

    With patch_missing=True, existing rows also receive any seeded module
    they lack; modules already present are never overwritten.
    Returns one {"role", "status"} entry per seeded role, status being
    created | exists | patched.
    """
    results = []

    for role in SEEDED_ROLES:
        default = default_role_matrix(role)
        existing = store.get_role_permissions(role)

        if existing is None:
            store.save_role_permissions(role, default, updated_by=updated_by)
            logger.info(f"Created default permissions for role: {role}")
            results.append({"role": role.value, "status": "created"})
            continue

        missing = {
            module: action_set
            for module, action_set in default.modules.items()
            if module not in existing.permissions.modules
        }

        if patch_missing and missing:
            patched = ModuleActionMatrix(modules={**existing.permissions.modules, **missing})
            store.save_role_permissions(role, patched, updated_by=updated_by)
            logger.info(
                f"Patched modules {sorted(m.value for m in missing)} for role: {role}"
            )
            results.append({"role": role.value, "status": "patched"})
        else:
            results.append({"role": role.value, "status": "exists"})

    return results
