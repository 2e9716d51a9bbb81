# core/config_validator.py

from typing import List
from core.config import settings
from core.logging_config import logger


def validate_required_config() -> List[str]:
    """
    Validate that all required environment variables are set.
    Returns list of missing required variables.
    """
    missing = []

    # No credential can be verified without it
    if not settings.JWT_SECRET:
        missing.append("JWT_SECRET")

    if settings.PERMISSION_STORE_BACKEND == "supabase":
        if not settings.SUPABASE_URL:
            missing.append("SUPABASE_URL")
        if not settings.SUPABASE_SERVICE_ROLE_KEY:
            missing.append("SUPABASE_SERVICE_ROLE_KEY")
    elif settings.PERMISSION_STORE_BACKEND != "memory":
        missing.append("PERMISSION_STORE_BACKEND (must be 'supabase' or 'memory')")

    return missing


def validate_optional_config() -> List[str]:
    """
    Validate optional but recommended configuration.
    Returns list of warnings.
    """
    warnings = []

    if settings.PERMISSION_STORE_BACKEND == "memory" and settings.ENV == "production":
        warnings.append("PERMISSION_STORE_BACKEND=memory in production (records are lost on restart)")

    if not settings.ACCESS_AUDIT_WEBHOOK_URL:
        warnings.append("ACCESS_AUDIT_WEBHOOK_URL (denials are only logged)")

    if settings.PERMISSION_CACHE_TTL_SECONDS > 60:
        warnings.append(
            "PERMISSION_CACHE_TTL_SECONDS > 60 (edits from other processes stay invisible until expiry)"
        )

    return warnings


def validate_config_on_startup():
    """
    Validate configuration on application startup.
    Raises RuntimeError if critical config is missing.
    Logs warnings for optional config.
    """
    missing_required = validate_required_config()
    missing_optional = validate_optional_config()

    if missing_required:
        error_msg = f"Missing required environment variables: {', '.join(missing_required)}"
        logger.error(error_msg)
        raise RuntimeError(error_msg)

    for warning in missing_optional:
        logger.warning(f"Optional configuration: {warning}")
