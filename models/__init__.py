# -------------------------
# Enums
# -------------------------
from .enums import (
    Role,
    Module,
    Action,
    EntryOverride,
    DecisionReason,
)

# -------------------------
# Actor + Decision
# -------------------------
from .actor import (
    Actor,
    Decision,
    DecisionContext,
)

# -------------------------
# Permission records
# -------------------------
from .permissions import (
    ActionSet,
    ModuleActionMatrix,
    RolePermissionSet,
    AgencyPermissionSet,
    UserPermissionSet,
    EntryPermissions,
)

__all__ = [
    # enums
    "Role",
    "Module",
    "Action",
    "EntryOverride",
    "DecisionReason",

    # actor
    "Actor",
    "Decision",
    "DecisionContext",

    # permissions
    "ActionSet",
    "ModuleActionMatrix",
    "RolePermissionSet",
    "AgencyPermissionSet",
    "UserPermissionSet",
    "EntryPermissions",
]
