"""
Transaction Service
Owner-scoped CRUD over the DynamoDB store. Every call takes the acting
user id resolved by the auth dependency; store keys always include it.
"""
import logging
from typing import List

from app.core.errors import NotFound
from app.db import dynamo
from app.models.transaction import (
    TransactionCreate,
    TransactionInDB,
    TransactionPublic,
    TransactionUpdate,
)

logger = logging.getLogger(__name__)


def _sort_key(item: dict):
    return (str(item.get("date", "")), str(item.get("created_at", "")), item["transaction_id"])


def list_records(user_id: str) -> List[dict]:
    """Raw store items for the owner, newest date first."""
    items = dynamo.get_transactions_for_user(user_id)
    return sorted(items, key=_sort_key, reverse=True)


def list_transactions(user_id: str) -> List[TransactionPublic]:
    return [TransactionPublic.from_item(item) for item in list_records(user_id)]


def get_transaction(user_id: str, transaction_id: str) -> TransactionPublic:
    item = dynamo.get_transaction(user_id, transaction_id)
    if not item:
        raise NotFound()
    return TransactionPublic.from_item(item)


def create_transaction(user_id: str, data: TransactionCreate) -> TransactionPublic:
    record = TransactionInDB(user_id=user_id, **data.model_dump())
    item = dynamo.put_transaction(record.to_item())
    logger.info(f"Created transaction {record.transaction_id} for user {user_id}")
    return TransactionPublic.from_item(item)


def update_transaction(user_id: str, transaction_id: str, data: TransactionUpdate) -> TransactionPublic:
    updated = dynamo.update_transaction(user_id, transaction_id, data.changes())
    if not updated:
        raise NotFound()
    logger.info(f"Updated transaction {transaction_id} for user {user_id}")
    return TransactionPublic.from_item(updated)


def delete_transaction(user_id: str, transaction_id: str) -> None:
    if not dynamo.delete_transaction(user_id, transaction_id):
        raise NotFound()
    logger.info(f"Deleted transaction {transaction_id} for user {user_id}")
