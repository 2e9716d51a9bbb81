# core/permission_resolver.py

"""
Permission Resolver.

Effective matrix for an actor, first layer that has a record wins:

    1. super_admin          synthetic grant-all matrix, no store read
    2. user_permissions     keyed by actor id
    3. agency_permissions   keyed by actor tenant (agency-scoped roles only)
    4. role_permissions     keyed by role; missing row → ConfigurationError

The selected matrix is returned whole. A user-level matrix that omits
a module denies that module even if the agency or role matrix grants it.
"""

from core.errors import ConfigurationError
from core.logging_config import get_logger
from core.permission_store import PermissionStore
from core.roles import is_agency_scoped
from models.actor import Actor
from models.enums import Role
from models.permissions import ModuleActionMatrix

logger = get_logger("permission_resolver")


def resolve_permissions(actor: Actor, store: PermissionStore) -> ModuleActionMatrix:
    # 1) super admin: master key
    if actor.role == Role.super_admin:
        return ModuleActionMatrix.grant_all()

    # 2) per-user override
    user_record = store.get_user_permissions(actor.id)
    if user_record is not None:
        logger.debug(f"Using per-user permissions for user {actor.id}")
        return user_record.permissions

    # 3) per-agency override
    if is_agency_scoped(actor.role) and actor.tenant_id:
        agency_record = store.get_agency_permissions(actor.tenant_id)
        if agency_record is not None:
            logger.debug(f"Using agency permissions for agency {actor.tenant_id}")
            return agency_record.permissions

    # 4) role default
    role_record = store.get_role_permissions(actor.role)
    if role_record is None:
        raise ConfigurationError(actor.role)

    logger.debug(f"Using role permissions for role {actor.role}")
    return role_record.permissions
