"""
Shared pytest fixtures for the shopping list tests.

These fixtures provide consistent test data and fresh state between tests.
"""

import pytest
from pathlib import Path

from realtime.registry import MembershipRegistry
from realtime.relay import EventRelay
from shared.data_store import DataStore
from shared.session import SessionStore


@pytest.fixture
def data_dir() -> Path:
    """Path to the fixture data directory."""
    return Path(__file__).parent.parent / "data"


@pytest.fixture
def data_store(data_dir: Path) -> DataStore:
    """
    Fresh DataStore instance for each test.

    Uses the real JSON fixtures; writes stay in this instance's memory.
    """
    return DataStore(data_dir=data_dir)


@pytest.fixture
def sessions() -> SessionStore:
    return SessionStore()


@pytest.fixture
def registry() -> MembershipRegistry:
    """Independent registry per test; rooms never leak between tests."""
    return MembershipRegistry()


@pytest.fixture
def relay(registry: MembershipRegistry) -> EventRelay:
    return EventRelay(registry)


# =============================================================================
# User Fixtures
# =============================================================================

@pytest.fixture
def alice_user_id() -> str:
    """Alice owns list-001."""
    return "user-001"


@pytest.fixture
def bob_user_id() -> str:
    """Bob is a member of list-001 and owns list-002."""
    return "user-002"


@pytest.fixture
def carol_user_id() -> str:
    """Carol is a member of list-002 only."""
    return "user-003"


# =============================================================================
# List Fixtures
# =============================================================================

@pytest.fixture
def groceries_list_id() -> str:
    """list-001: Milk (unchecked), Bread (checked), Eggs (unchecked)."""
    return "list-001"


@pytest.fixture
def party_list_id() -> str:
    """list-002: Balloons."""
    return "list-002"
