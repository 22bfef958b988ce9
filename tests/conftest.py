"""Shared fixtures: the mock backend reached through FastAPI's TestClient."""

import pytest
from fastapi.testclient import TestClient

from ledger_client.mock.backend import MockLedgerStore, create_mock_backend
from ledger_client.services import ApiClient, LedgerAccountRegistry, LedgerApi


@pytest.fixture
def store() -> MockLedgerStore:
    """Provide a fresh in-memory backend state."""
    return MockLedgerStore()


@pytest.fixture
def http_client(store: MockLedgerStore):
    """Provide an httpx client wired to the mock backend."""
    app = create_mock_backend(store)
    with TestClient(app, base_url="http://testserver/rest") as client:
        yield client


@pytest.fixture
def api(http_client) -> LedgerApi:
    return LedgerApi(ApiClient(http_client=http_client, token=""))


@pytest.fixture
def registry(api: LedgerApi) -> LedgerAccountRegistry:
    registry = LedgerAccountRegistry(api)
    registry.refresh()
    return registry
