import pytest
from fastapi.testclient import TestClient

from app.core.errors import PersistenceError
from app.core.security import create_access_token
from app.db import dynamo
from app.main import app

ALICE = "user-alice"
BOB = "user-bob"


class InMemoryStore:
    """Stands in for the DynamoDB-backed functions of app.db.dynamo."""

    def __init__(self):
        self.items = {}
        self.fail = False

    def _check(self, operation):
        if self.fail:
            raise PersistenceError(f"Failed to {operation} transaction", code="ProvisionedThroughputExceededException")

    def put_transaction(self, item):
        self._check("create")
        self.items[(item["user_id"], item["transaction_id"])] = dict(item)
        return item

    def get_transactions_for_user(self, user_id):
        self._check("list")
        return [dict(item) for (owner, _), item in self.items.items() if owner == user_id]

    def get_transaction(self, user_id, transaction_id):
        self._check("fetch")
        item = self.items.get((user_id, transaction_id))
        return dict(item) if item else None

    def update_transaction(self, user_id, transaction_id, updates):
        self._check("update")
        item = self.items.get((user_id, transaction_id))
        if item is None:
            return None
        item.update({k: v for k, v in updates.items() if k in dynamo.MUTABLE_FIELDS})
        return dict(item)

    def delete_transaction(self, user_id, transaction_id):
        self._check("delete")
        return self.items.pop((user_id, transaction_id), None) is not None


@pytest.fixture
def store(monkeypatch):
    fake = InMemoryStore()
    for name in (
        "put_transaction",
        "get_transactions_for_user",
        "get_transaction",
        "update_transaction",
        "delete_transaction",
    ):
        monkeypatch.setattr(dynamo, name, getattr(fake, name))
    return fake


@pytest.fixture
def client(store):
    return TestClient(app)


@pytest.fixture
def auth_headers():
    def _headers(user_id=ALICE):
        return {"Authorization": f"Bearer {create_access_token({'sub': user_id})}"}

    return _headers
