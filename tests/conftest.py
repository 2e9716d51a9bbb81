# tests/conftest.py

"""
Pytest configuration and shared fixtures for testing.
"""

import os

# Settings are read at import time; pin them before anything imports core.config
os.environ["JWT_SECRET"] = "test-secret"
os.environ["JWT_ALGORITHM"] = "HS256"
os.environ["PERMISSION_STORE_BACKEND"] = "memory"
os.environ["PERMISSION_CACHE_TTL_SECONDS"] = "0"
os.environ.pop("ACCESS_AUDIT_WEBHOOK_URL", None)

from datetime import datetime, timedelta, timezone
from typing import Generator
from unittest.mock import Mock

import pytest
from fastapi.testclient import TestClient
from jose import jwt

from core.permission_store import InMemoryPermissionStore, get_permission_store
from core.permissions import initialize_role_permissions
from dependencies.auth import get_current_actor, get_optional_actor
from main import create_app
from models.actor import Actor
from models.enums import Role
from models.permissions import ModuleActionMatrix


# ------------------------------------------------------------------
# Builders
# ------------------------------------------------------------------
def make_actor(role="agent", id="u1", tenant_id="T1", active=True) -> Actor:
    return Actor(id=id, role=Role(role), tenant_id=tenant_id, active=active)


def matrix(raw: dict) -> ModuleActionMatrix:
    return ModuleActionMatrix.from_document(raw)


def make_token(sub="u1", expires_in=timedelta(hours=1), secret="test-secret", **claims) -> str:
    payload = {"exp": datetime.now(timezone.utc) + expires_in, **claims}
    if sub is not None:
        payload["sub"] = sub
    return jwt.encode(payload, secret, algorithm="HS256")


# ------------------------------------------------------------------
# Stores
# ------------------------------------------------------------------
@pytest.fixture
def store():
    """Empty in-memory permission store."""
    return InMemoryPermissionStore()


@pytest.fixture
def seeded_store(store):
    """In-memory store with the default role matrices."""
    initialize_role_permissions(store)
    return store


@pytest.fixture
def mock_supabase_client():
    """Create a mock Supabase client."""
    mock_client = Mock()
    mock_table = Mock()
    mock_client.table.return_value = mock_table
    return mock_client


# ------------------------------------------------------------------
# App + client
# ------------------------------------------------------------------
@pytest.fixture(scope="function")
def app(seeded_store):
    """FastAPI app wired to the seeded in-memory store."""
    app = create_app()
    app.dependency_overrides[get_permission_store] = lambda: seeded_store
    yield app
    app.dependency_overrides = {}


@pytest.fixture(scope="function")
def client(app) -> Generator[TestClient, None, None]:
    with TestClient(app) as test_client:
        yield test_client


@pytest.fixture
def login_as(app):
    """Pretend the actor resolver already produced `actor`."""

    def _login(actor):
        app.dependency_overrides[get_current_actor] = lambda: actor
        app.dependency_overrides[get_optional_actor] = lambda: actor
        return actor

    return _login


@pytest.fixture
def super_admin():
    return make_actor(role="super_admin", id="root", tenant_id=None)


@pytest.fixture
def agency_admin():
    return make_actor(role="agency_admin", id="u1", tenant_id="T1")


@pytest.fixture
def agent():
    return make_actor(role="agent", id="a1", tenant_id="T1")
