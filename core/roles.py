# ============================================
# ROLE GROUPS
# ============================================
from models.enums import Role


# Roles that belong to an agency (tenant). Only these consult
# agency_permissions and are subject to tenant isolation.
AGENCY_SCOPED_ROLES = frozenset({
    Role.agency_admin,
    Role.agent,
    Role.staff,
})

# Roles that carry a stored RolePermissionSet.
SEEDED_ROLES = (
    Role.agency_admin,
    Role.agent,
    Role.staff,
    Role.user,
)

# Roles that get default per-document entry permissions.
ENTRY_PERMISSION_ROLES = (
    Role.agency_admin,
    Role.agent,
    Role.staff,
)


def is_agency_scoped(role) -> bool:
    return Role(role) in AGENCY_SCOPED_ROLES
