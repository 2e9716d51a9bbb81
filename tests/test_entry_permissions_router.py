# tests/test_entry_permissions_router.py

"""
Tests for the per-document access endpoints (module → agency → entry).
"""

from unittest.mock import Mock, patch

import pytest
from fastapi.testclient import TestClient

from conftest import make_actor, matrix


def document_query(mock_client):
    return mock_client.table.return_value.select.return_value.eq.return_value.limit.return_value


@pytest.fixture
def supabase_returning(mock_supabase_client):
    """Patch the router's Supabase client so lookups return `rows`."""

    def _with(rows):
        document_query(mock_supabase_client).execute.return_value = Mock(data=rows)
        return patch(
            "routers.entry_permissions.get_supabase_client",
            return_value=mock_supabase_client,
        )

    return _with


LEAD_T1 = {
    "id": "L1",
    "agency_id": "T1",
    "entry_permissions": {"agent": {"view": True, "edit": True, "delete": False}},
}


def test_get_entry_permissions_for_own_agency(client: TestClient, login_as, agent, supabase_returning):
    login_as(agent)

    with supabase_returning([LEAD_T1]):
        response = client.get("/entries/leads/L1/entry-permissions")

    assert response.status_code == 200
    assert response.json()["entry_permissions"]["agent"]["delete"] is False


def test_other_agency_contact_message_is_403(client: TestClient, login_as, supabase_returning):
    """Module view is granted, but the message belongs to another agency."""
    login_as(make_actor(role="agency_admin", id="u1", tenant_id="T1"))
    message = {"id": "M7", "agency_id": "T2", "entry_permissions": {}}

    with supabase_returning([message]):
        response = client.get("/entries/contact_messages/M7/entry-permissions")

    assert response.status_code == 403
    detail = response.json()["detail"]
    assert detail["reason"] == "tenant_mismatch"
    assert detail["tenant_of_document"] == "T2"
    assert detail["tenant_of_actor"] == "T1"


def test_entry_deny_on_view_is_403(client: TestClient, login_as, agent, supabase_returning):
    login_as(agent)
    lead = {"id": "L2", "agency_id": "T1", "entry_permissions": {"agent": {"view": False}}}

    with supabase_returning([lead]):
        response = client.get("/entries/leads/L2/entry-permissions")

    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "entry_explicit_deny"


def test_missing_document_is_404(client: TestClient, login_as, agent, supabase_returning):
    login_as(agent)

    with supabase_returning([]):
        response = client.get("/entries/leads/nope/entry-permissions")

    assert response.status_code == 404


def test_module_gate_runs_before_lookup(client: TestClient, login_as, seeded_store, supabase_returning):
    # Empty user override: no module is granted
    seeded_store.save_user_permissions("a1", matrix({}))
    login_as(make_actor(role="agent", id="a1", tenant_id="T1"))

    with supabase_returning([LEAD_T1]) as mock_factory:
        response = client.get("/entries/leads/L1/entry-permissions")

    assert response.status_code == 403
    assert response.json()["detail"]["reason"] == "insufficient_permission"
    mock_factory.assert_not_called()


def test_lookup_failure_is_503(client: TestClient, login_as, agent, mock_supabase_client):
    login_as(agent)
    document_query(mock_supabase_client).execute.side_effect = Exception("connection refused")

    with patch("routers.entry_permissions.get_supabase_client", return_value=mock_supabase_client):
        response = client.get("/entries/leads/L1/entry-permissions")

    assert response.status_code == 503


def test_missing_supabase_client_is_503(client: TestClient, login_as, agent):
    login_as(agent)

    with patch("routers.entry_permissions.get_supabase_client", return_value=None):
        response = client.get("/entries/leads/L1/entry-permissions")

    assert response.status_code == 503


def test_access_report_combines_all_decisions(client: TestClient, login_as, agent, supabase_returning):
    login_as(agent)

    with supabase_returning([LEAD_T1]):
        response = client.get("/entries/leads/L1/access", params={"action": "delete"})

    assert response.status_code == 200
    data = response.json()
    assert data["module"]["allow"] is True
    assert data["tenant"]["reason"] == "tenant_match"
    assert data["entry"]["reason"] == "entry_explicit_deny"
    assert data["allow"] is False


def test_access_report_for_super_admin(client: TestClient, login_as, super_admin, supabase_returning):
    login_as(super_admin)

    with supabase_returning([{**LEAD_T1, "agency_id": "T9"}]):
        data = client.get("/entries/leads/L1/access", params={"action": "delete"}).json()

    assert data["allow"] is True
    assert data["module"]["reason"] == "bypass"
    assert data["tenant"]["reason"] == "super_admin_bypass"
    assert data["entry"]["reason"] == "super_admin_bypass"


def test_access_report_stops_at_module_deny(client: TestClient, login_as, seeded_store, supabase_returning, mock_supabase_client):
    """A caller without the module learns nothing about the document."""
    seeded_store.save_user_permissions("a1", matrix({}))
    login_as(make_actor(role="agent", id="a1", tenant_id="T1"))

    with supabase_returning([{**LEAD_T1, "id": "L9", "agency_id": "T2"}]) as mock_factory:
        response = client.get("/entries/leads/L9/access")

    assert response.status_code == 200
    data = response.json()
    assert data["allow"] is False
    assert data["module"]["reason"] == "insufficient_permission"
    assert data["tenant"] is None
    assert data["entry"] is None
    mock_factory.assert_not_called()
    mock_supabase_client.table.assert_not_called()


def test_corrupt_entry_block_is_503(client: TestClient, login_as, agent, supabase_returning):
    login_as(agent)
    lead = {"id": "L4", "agency_id": "T1", "entry_permissions": {"agent": {"view": "yes"}}}

    with supabase_returning([lead]):
        response = client.get("/entries/leads/L4/entry-permissions")

    assert response.status_code == 503


def test_unknown_collection_is_422(client: TestClient, login_as, agent):
    login_as(agent)

    assert client.get("/entries/invoices/X1/entry-permissions").status_code == 422


def test_update_entry_permissions(client: TestClient, login_as, super_admin, mock_supabase_client):
    login_as(super_admin)
    update = mock_supabase_client.table.return_value.update
    update.return_value.eq.return_value.execute.return_value = Mock(data=[{"id": "L1"}])

    with patch("routers.entry_permissions.get_supabase_client", return_value=mock_supabase_client):
        response = client.put(
            "/entries/leads/L1/entry-permissions",
            json={"entry_permissions": {"staff": {"delete": False, "view": None}}},
        )

    assert response.status_code == 200
    update.assert_called_once_with({"entry_permissions": {"staff": {"delete": False}}})
    mock_supabase_client.table.assert_called_with("leads")


def test_update_entry_permissions_unknown_role_is_422(client: TestClient, login_as, super_admin):
    login_as(super_admin)

    response = client.put(
        "/entries/leads/L1/entry-permissions",
        json={"entry_permissions": {"janitor": {"view": True}}},
    )

    assert response.status_code == 422


def test_update_entry_permissions_requires_super_admin(client: TestClient, login_as, agent):
    login_as(agent)

    response = client.put(
        "/entries/leads/L1/entry-permissions",
        json={"entry_permissions": {"agent": {"delete": True}}},
    )

    assert response.status_code == 403


def test_update_entry_permissions_store_failure_is_503(client: TestClient, login_as, super_admin, mock_supabase_client):
    login_as(super_admin)
    update = mock_supabase_client.table.return_value.update
    update.return_value.eq.return_value.execute.side_effect = Exception("connection reset")

    with patch("routers.entry_permissions.get_supabase_client", return_value=mock_supabase_client):
        response = client.put(
            "/entries/leads/L1/entry-permissions",
            json={"entry_permissions": {"staff": {"delete": False}}},
        )

    assert response.status_code == 503


def test_update_entry_permissions_without_client_is_503(client: TestClient, login_as, super_admin):
    login_as(super_admin)

    with patch("routers.entry_permissions.get_supabase_client", return_value=None):
        response = client.put(
            "/entries/leads/L1/entry-permissions",
            json={"entry_permissions": {"staff": {"delete": False}}},
        )

    assert response.status_code == 503


def test_update_entry_permissions_rejects_string_bools(client: TestClient, login_as, super_admin):
    login_as(super_admin)

    response = client.put(
        "/entries/leads/L1/entry-permissions",
        json={"entry_permissions": {"agent": {"delete": "true"}}},
    )

    assert response.status_code == 422
