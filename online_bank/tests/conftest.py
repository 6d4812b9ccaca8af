import pytest
from fastapi.testclient import TestClient

from ..core.db import create_engine_for_url
from ..main import create_app
from ..services import AccountStore, LedgerService

@pytest.fixture
def store(tmp_path) -> AccountStore:
    engine = create_engine_for_url(f"sqlite:///{tmp_path / 'test.db'}")
    account_store = AccountStore(engine, retries=3, backoff=0.01, default_timeout=5.0)
    account_store.open()
    yield account_store
    account_store.close()

@pytest.fixture
def service(store: AccountStore) -> LedgerService:
    return LedgerService(store)

@pytest.fixture
def client(store: AccountStore) -> TestClient:
    with TestClient(create_app(store)) as test_client:
        yield test_client
