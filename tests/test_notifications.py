# tests/test_notifications.py

"""
Tests for the access-denied audit webhook.
"""

from unittest.mock import Mock, patch

import requests

from conftest import make_actor
from core.notifications import notify_access_denied, send_webhook_message
from models.actor import Decision
from models.enums import Action, DecisionReason, Module

WEBHOOK = "https://hooks.example.test/audit"


def test_webhook_skipped_when_not_configured():
    with patch("core.notifications.settings.ACCESS_AUDIT_WEBHOOK_URL", None), \
         patch("core.notifications.requests.post") as mock_post:
        send_webhook_message("hello")

    mock_post.assert_not_called()


def test_denial_posts_reason_and_context():
    actor = make_actor(role="agent", id="a1", tenant_id="T1")
    decision = Decision.denied(
        DecisionReason.insufficient_permission, module=Module.cms, action=Action.edit, found=False
    )

    with patch("core.notifications.settings.ACCESS_AUDIT_WEBHOOK_URL", WEBHOOK), \
         patch("core.notifications.requests.post") as mock_post:
        mock_post.return_value = Mock(status_code=204)
        notify_access_denied(actor, decision)

    mock_post.assert_called_once()
    assert mock_post.call_args.args[0] == WEBHOOK
    body = mock_post.call_args.kwargs["json"]
    assert body["access"] == {
        "user_id": "a1",
        "role": "agent",
        "reason": "insufficient_permission",
        "module": "cms",
        "action": "edit",
        "found": False,
    }
    assert "insufficient_permission" in body["content"]


def test_anonymous_denial_is_only_logged():
    decision = Decision.denied(DecisionReason.unauthenticated)

    with patch("core.notifications.settings.ACCESS_AUDIT_WEBHOOK_URL", WEBHOOK), \
         patch("core.notifications.requests.post") as mock_post:
        notify_access_denied(None, decision)

    mock_post.assert_not_called()


def test_webhook_failure_does_not_raise():
    with patch("core.notifications.settings.ACCESS_AUDIT_WEBHOOK_URL", WEBHOOK), \
         patch("core.notifications.requests.post",
               side_effect=requests.ConnectionError("refused")):
        send_webhook_message("still fine")
