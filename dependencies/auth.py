from typing import Callable, Optional

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPBearer, HTTPAuthorizationCredentials
from jose import ExpiredSignatureError, JWTError, jwt

from core.config import settings
from core.errors import AuthenticationError, IdentityStoreError, extract_supabase_error
from core.logging_config import get_logger
from core.supabase_client import get_supabase_client
from models.actor import Actor
from models.enums import Role

logger = get_logger("auth")

# auto_error=False: a missing header must reach our own 401, not Starlette's 403
bearer_scheme = HTTPBearer(auto_error=False)

IDENTITY_TABLE = "users"


# ============================================================
# CREDENTIAL → USER ID
# ============================================================
def decode_credential(token: Optional[str]) -> str:
    """
    Verify the session JWT and return the user id it names.
    Issuance happens elsewhere; this only verifies.
    """
    if not token:
        raise AuthenticationError("No token, authorization denied")

    if not settings.JWT_SECRET:
        logger.error("JWT_SECRET is not configured; rejecting all credentials")
        raise AuthenticationError("Token is not valid")

    try:
        payload = jwt.decode(token, settings.JWT_SECRET, algorithms=[settings.JWT_ALGORITHM])
    except ExpiredSignatureError:
        raise AuthenticationError("Token has expired")
    except JWTError:
        raise AuthenticationError("Token is not valid")

    user_id = payload.get("sub") or payload.get("user_id")
    if not user_id:
        raise AuthenticationError("Token is not valid")

    return str(user_id)


# ============================================================
# IDENTITY LOOKUP (Supabase users table)
# ============================================================
def load_identity(user_id: str) -> Optional[dict]:
    client = get_supabase_client()
    if not client:
        raise IdentityStoreError("Supabase client not configured")

    try:
        result = (
            client.table(IDENTITY_TABLE)
            .select("id, email, role, agency_id, is_active")
            .eq("id", user_id)
            .limit(1)
            .execute()
        )
    except Exception as e:
        detail = extract_supabase_error(e)
        logger.error(f"Identity lookup failed: {detail}")
        raise IdentityStoreError(f"Identity lookup failed: {detail}") from e

    rows = result.data or []
    return rows[0] if rows else None


# ============================================================
# ACTOR RESOLVER
# ============================================================
def resolve_actor(
    credential: Optional[str],
    identity_loader: Callable[[str], Optional[dict]] = None,
) -> Actor:
    """
    The only place credential validity is judged. Everything downstream
    trusts the Actor it receives.
    """
    user_id = decode_credential(credential)
    identity = (identity_loader or load_identity)(user_id)

    if not identity:
        raise AuthenticationError("Token is not valid")

    if not identity.get("is_active", False):
        raise AuthenticationError("Account is deactivated")

    role = identity.get("role")
    if role not in Role.list():
        logger.warning(f"User {user_id} has unknown role {role!r}; rejecting")
        raise AuthenticationError("Account role is not recognized")

    agency_id = identity.get("agency_id")

    actor = Actor(
        id=str(identity.get("id") or user_id),
        role=Role(role),
        tenant_id=str(agency_id) if agency_id else None,
        active=True,
        email=identity.get("email"),
    )
    logger.debug(f"Resolved actor {actor.id} role={actor.role} agency={actor.tenant_id or 'None'}")
    return actor


# ============================================================
# FastAPI dependencies
# ============================================================
def get_current_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Actor:
    token = credentials.credentials if credentials else None
    try:
        return resolve_actor(token)
    except AuthenticationError as e:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail={"message": str(e), "reason": "unauthenticated"},
            headers={"WWW-Authenticate": "Bearer"},
        )


def get_optional_actor(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(bearer_scheme),
) -> Optional[Actor]:
    """
    Returns the Actor for a valid credential, None otherwise.
    Store outages still propagate.
    """
    if not credentials:
        return None

    try:
        return resolve_actor(credentials.credentials)
    except AuthenticationError:
        return None
