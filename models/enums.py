from enum import Enum

from core.errors import UnknownModuleError


class BaseStrEnum(str, Enum):
    """
    Base enum that serializes cleanly to a string
    and provides a .list() method for UI dropdowns.
    """

    def __str__(self):
        return str(self.value)

    @classmethod
    def list(cls):
        return [item.value for item in cls]


# -----------------------------------------------------
# ROLE
# -----------------------------------------------------
class Role(BaseStrEnum):
    """System roles. super_admin never has a stored permission matrix."""

    super_admin = "super_admin"
    agency_admin = "agency_admin"
    agent = "agent"
    staff = "staff"
    user = "user"


# -----------------------------------------------------
# MODULE
# -----------------------------------------------------
class Module(BaseStrEnum):
    """Resource categories subject to module-level access control."""

    leads = "leads"
    properties = "properties"
    inquiries = "inquiries"
    contact_messages = "contact_messages"
    users = "users"
    agencies = "agencies"
    cms = "cms"
    settings = "settings"
    subscriptions = "subscriptions"
    analytics = "analytics"


# -----------------------------------------------------
# ACTION
# -----------------------------------------------------
class Action(BaseStrEnum):
    view = "view"
    create = "create"
    edit = "edit"
    delete = "delete"


# -----------------------------------------------------
# ENTRY OVERRIDE (per-document, per-role)
# -----------------------------------------------------
class EntryOverride(BaseStrEnum):
    """Tri-state override stored on a single document."""

    allow = "allow"
    deny = "deny"
    inherit = "inherit"

    @classmethod
    def from_raw(cls, value) -> "EntryOverride":
        """
        Storage values: True → allow, False → deny, None/missing → inherit.
        Already-tagged strings pass through; anything else (1, "yes")
        raises UnknownModuleError.
        """
        if value is True:
            return cls.allow
        if value is False:
            return cls.deny
        if value is None:
            return cls.inherit
        if isinstance(value, str) and value in cls.list():
            return cls(value)
        raise UnknownModuleError(f"Invalid entry override {value!r}")


# -----------------------------------------------------
# DECISION REASON
# -----------------------------------------------------
class DecisionReason(BaseStrEnum):
    # Module gate
    unauthenticated = "unauthenticated"
    bypass = "bypass"
    no_role_permissions_defined = "no_role_permissions_defined"
    insufficient_permission = "insufficient_permission"
    permission_granted = "permission_granted"

    # Entry-level + tenant isolation
    super_admin_bypass = "super_admin_bypass"
    entry_explicit_deny = "entry_explicit_deny"
    entry_explicit_allow = "entry_explicit_allow"
    module_permission_passed = "module_permission_passed"
    actor_has_no_tenant = "actor_has_no_tenant"
    tenant_match = "tenant_match"
    tenant_mismatch = "tenant_mismatch"
