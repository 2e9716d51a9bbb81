# core/errors.py

from fastapi import HTTPException, status


# ============================================================
# Domain exceptions
# ============================================================
class AuthenticationError(Exception):
    """Missing, malformed or expired credential, or a deactivated identity."""


class ConfigurationError(Exception):
    """
    No RolePermissionSet exists for a role that needs one.
    Kept apart from an ordinary denial so operators notice missing seed data.
    """

    def __init__(self, role):
        self.role = str(role)
        super().__init__(f"No module permissions defined for role: {self.role}")


class UnknownModuleError(ValueError):
    """Unknown module / action / role key at the storage boundary."""


class StoreError(Exception):
    """A backing store is unreachable or returned unusable data (503)."""


class PermissionStoreError(StoreError):
    """The permission store failed or returned a record we cannot parse."""


class IdentityStoreError(StoreError):
    """The identity lookup behind the actor resolver failed."""


# ============================================================
# Supabase error text
# ============================================================
def extract_supabase_error(error: Exception) -> str:
    """
    Safely extract readable details from Supabase Python client errors.
    Handles:
      • PostgREST errors
      • GoTrue (Auth) errors
      • Generic Python exceptions
    """

    # Case 1 - errors carrying a .message
    message = getattr(error, "message", None)
    if message:
        return str(message)

    # Case 2 - errors with args (common)
    if getattr(error, "args", None):
        return str(error.args[0])

    # Case 3 - plain string fallback
    return str(error) or "Unknown Supabase error"


# ============================================================
# HTTP mapping (used at the FastAPI seam only)
# ============================================================
def decision_http_exception(decision) -> HTTPException:
    """
    Convert a deny Decision into an HTTPException.
    unauthenticated → 401, everything else → 403 with reason + context echoed.
    """
    from models.enums import DecisionReason

    if decision.reason == DecisionReason.unauthenticated:
        return HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": "Authentication required", "reason": decision.reason.value},
            headers={"WWW-Authenticate": "Bearer"},
        )

    context = decision.context.model_dump(mode="json", exclude_none=True)

    if decision.reason == DecisionReason.no_role_permissions_defined:
        message = "Access denied. No module permissions defined for your role."
    elif decision.reason == DecisionReason.tenant_mismatch:
        message = "Access denied. Resource belongs to another agency."
    elif decision.reason == DecisionReason.actor_has_no_tenant:
        message = "Access denied. Your account is not linked to an agency."
    elif decision.reason == DecisionReason.entry_explicit_deny:
        message = "Access denied for this entry."
    elif "module" in context and "action" in context:
        message = (
            f"Access denied. You do not have permission to "
            f"{context['action']} {context['module']}."
        )
    else:
        message = "Access denied. Insufficient permissions."

    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={"message": message, "reason": decision.reason.value, **context},
    )


def configuration_http_exception(error: ConfigurationError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_403_FORBIDDEN,
        detail={
            "message": f"Access denied. No module permissions defined for role: {error.role}",
            "reason": "no_role_permissions_defined",
        },
    )
