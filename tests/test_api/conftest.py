import pytest
from fastapi.testclient import TestClient

from api.main import create_app
from realtime.registry import MembershipRegistry
from shared.data_store import DataStore
from shared.session import SessionStore


@pytest.fixture
def app(data_store: DataStore, sessions: SessionStore, registry: MembershipRegistry):
    """Application wired to the per-test store, sessions and registry."""
    return create_app(store=data_store, sessions=sessions, registry=registry)


@pytest.fixture
def api_client(app):
    with TestClient(app) as client:
        yield client


@pytest.fixture
def alice_token(sessions: SessionStore, alice_user_id: str) -> str:
    return sessions.issue(alice_user_id)


@pytest.fixture
def bob_token(sessions: SessionStore, bob_user_id: str) -> str:
    return sessions.issue(bob_user_id)


@pytest.fixture
def carol_token(sessions: SessionStore, carol_user_id: str) -> str:
    return sessions.issue(carol_user_id)


@pytest.fixture
def alice_headers(alice_token: str) -> dict[str, str]:
    return {"Authorization": f"Bearer {alice_token}"}
