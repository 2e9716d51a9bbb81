# core/tenant_isolation.py

from typing import Any, Optional

from core.logging_config import get_logger
from core.utils import canonical_id, document_field
from models.actor import Actor, Decision
from models.enums import DecisionReason

logger = get_logger("tenant_isolation")


def document_tenant_id(document: Any) -> Optional[str]:
    """Owning agency of a document; `agency` may be a raw id or a populated agency."""
    return canonical_id(document_field(document, "tenant_id", "agency_id", "agency"))


def check_tenant_isolation(document: Any, actor: Actor) -> Decision:
    """
    Independent of the module/action matrix: a module-level allow on a
    document from another agency is still a deny.
    """
    if actor.is_super_admin:
        return Decision.allowed(DecisionReason.super_admin_bypass)

    actor_tenant = canonical_id(actor.tenant_id)
    if not actor_tenant:
        logger.info(f"User {actor.id} ({actor.role}) has no agency; tenant-scoped access denied")
        return Decision.denied(DecisionReason.actor_has_no_tenant)

    doc_tenant = document_tenant_id(document)
    if doc_tenant != actor_tenant:
        logger.warning(
            f"Agency mismatch - user {actor.id} (agency {actor_tenant}) "
            f"on document of agency {doc_tenant}"
        )
        return Decision.denied(
            DecisionReason.tenant_mismatch,
            tenant_of_document=doc_tenant,
            tenant_of_actor=actor_tenant,
        )

    return Decision.allowed(
        DecisionReason.tenant_match,
        tenant_of_document=doc_tenant,
        tenant_of_actor=actor_tenant,
    )
