# core/notifications.py
import requests
from typing import Optional

from core.config import settings
from core.logging_config import get_logger

logger = get_logger("notifications")


# -----------------------------------------------------
# 📨 Send webhook (Discord, Slack, etc.)
# -----------------------------------------------------
def send_webhook_message(message: str, payload: Optional[dict] = None):
    webhook_url = settings.ACCESS_AUDIT_WEBHOOK_URL
    if not webhook_url:
        logger.debug("Audit webhook URL not configured - skipping.")
        return

    try:
        body = {"content": message}
        if payload:
            body["access"] = payload
        response = requests.post(webhook_url, json=body, timeout=5)
        logger.info(f"Audit webhook sent (status {response.status_code})")
    except requests.RequestException as e:
        logger.warning(f"Audit webhook failed: {e}")


# -----------------------------------------------------
# 🚫 Outbound notice after a deny decision
# -----------------------------------------------------
def notify_access_denied(actor, decision):
    """
    Called by the HTTP seam after the gate denied a request.
    The gate components never read from this channel.
    """
    context = decision.context.model_dump(mode="json", exclude_none=True)
    who = f"user {actor.id} ({actor.role})" if actor is not None else "anonymous caller"

    message = f"Access denied for {who}: {decision.reason}"
    if context:
        message += " " + ", ".join(f"{k}={v}" for k, v in context.items())

    # Anonymous 401s are routine; only authenticated denials go out
    if actor is None:
        logger.info(message)
        return

    logger.warning(message)

    send_webhook_message(
        message,
        payload={
            "user_id": actor.id,
            "role": actor.role.value,
            "reason": decision.reason.value,
            **context,
        },
    )
