import logging
from decimal import Decimal, DecimalException
from typing import Any, Dict, List, Optional

import boto3
from boto3.dynamodb.conditions import Key
from botocore.exceptions import BotoCoreError, ClientError

from app.core.config import settings
from app.core.errors import PersistenceError

logger = logging.getLogger(__name__)

# Initialize DynamoDB resource
dynamodb = boto3.resource(
    "dynamodb",
    region_name=settings.DYNAMO_REGION,
    endpoint_url=settings.DYNAMO_ENDPOINT_URL,
)

# Partition key: user_id (owner), sort key: transaction_id
transactions_table = dynamodb.Table(settings.DYNAMO_TRANSACTIONS_TABLE)

# Only these attributes may be rewritten by update_transaction
MUTABLE_FIELDS = ("amount", "kind", "category", "description", "date")

# Raised by the boto3 serializer for values DynamoDB cannot hold
SERIALIZATION_ERRORS = (DecimalException, TypeError)


def _error_code(e: Exception) -> Optional[str]:
    if isinstance(e, ClientError):
        return e.response.get("Error", {}).get("Code")
    return None


def _persistence_error(operation: str, e: Exception) -> PersistenceError:
    code = _error_code(e)
    logger.error(f"{operation} failed: {code or type(e).__name__}: {e}")
    return PersistenceError(f"Failed to {operation}", code=code)


def put_transaction(item: dict) -> dict:
    """Insert a new transaction item. Returns the stored item."""
    try:
        transactions_table.put_item(
            Item=_convert_for_dynamo(item),
            ConditionExpression="attribute_not_exists(transaction_id)",
        )
        return item
    except (ClientError, BotoCoreError) + SERIALIZATION_ERRORS as e:
        raise _persistence_error("create transaction", e) from e


def get_transactions_for_user(user_id: str) -> List[dict]:
    """Query every transaction owned by user_id, following pagination."""
    items: List[dict] = []
    query_kwargs: Dict[str, Any] = {
        "KeyConditionExpression": Key("user_id").eq(user_id),
    }
    try:
        while True:
            response = transactions_table.query(**query_kwargs)
            items.extend(_from_dynamo(item) for item in response.get("Items", []))
            last_key = response.get("LastEvaluatedKey")
            if not last_key:
                break
            query_kwargs["ExclusiveStartKey"] = last_key
    except (ClientError, BotoCoreError) as e:
        raise _persistence_error("list transactions", e) from e
    return items


def get_transaction(user_id: str, transaction_id: str) -> Optional[dict]:
    """Fetch a single transaction item, or None if the owner has no such item."""
    try:
        response = transactions_table.get_item(
            Key={"user_id": user_id, "transaction_id": transaction_id}
        )
    except (ClientError, BotoCoreError) as e:
        raise _persistence_error("fetch transaction", e) from e
    item = response.get("Item")
    return _from_dynamo(item) if item else None


def update_transaction(user_id: str, transaction_id: str, updates: dict) -> Optional[dict]:
    """
    Apply partial updates to an owned transaction in one conditional write.
    Returns the updated item, or None when (user_id, transaction_id) does not exist.
    """
    updates = {k: v for k, v in updates.items() if k in MUTABLE_FIELDS}
    if not updates:
        return None

    update_expression_parts = []
    expression_attribute_values = {}
    expression_attribute_names = {}

    for idx, (key, value) in enumerate(updates.items()):
        placeholder = f"#f{idx}"
        value_placeholder = f":v{idx}"
        update_expression_parts.append(f"{placeholder} = {value_placeholder}")
        expression_attribute_names[placeholder] = key
        expression_attribute_values[value_placeholder] = value

    update_expression = "SET " + ", ".join(update_expression_parts)

    try:
        response = transactions_table.update_item(
            Key={"user_id": user_id, "transaction_id": transaction_id},
            UpdateExpression=update_expression,
            # Without the condition DynamoDB would upsert a new item
            ConditionExpression="attribute_exists(transaction_id)",
            ExpressionAttributeNames=expression_attribute_names,
            ExpressionAttributeValues=_convert_for_dynamo(expression_attribute_values),
            ReturnValues="ALL_NEW",
        )
    except ClientError as e:
        if _error_code(e) == "ConditionalCheckFailedException":
            return None
        raise _persistence_error("update transaction", e) from e
    except (BotoCoreError,) + SERIALIZATION_ERRORS as e:
        raise _persistence_error("update transaction", e) from e
    attributes = response.get("Attributes")
    return _from_dynamo(attributes) if attributes else None


def delete_transaction(user_id: str, transaction_id: str) -> bool:
    """Delete an owned transaction. Returns False if nothing was deleted."""
    try:
        response = transactions_table.delete_item(
            Key={"user_id": user_id, "transaction_id": transaction_id},
            ReturnValues="ALL_OLD",
        )
    except (ClientError, BotoCoreError) as e:
        raise _persistence_error("delete transaction", e) from e
    return "Attributes" in response


def check_table() -> Dict[str, Any]:
    """Probe the transactions table for the health endpoint."""
    try:
        transactions_table.scan(Limit=1)
        return {
            "name": settings.DYNAMO_TRANSACTIONS_TABLE,
            "status": "accessible",
            "region": settings.DYNAMO_REGION,
        }
    except (ClientError, BotoCoreError) as e:
        logger.error(f"DynamoDB check failed: {str(e)}")
        return {
            "name": settings.DYNAMO_TRANSACTIONS_TABLE,
            "status": "error",
            "error": _error_code(e) or type(e).__name__,
        }


def _convert_for_dynamo(obj: Any):
    """
    Recursively convert floats to Decimal for DynamoDB compatibility.
    """
    if isinstance(obj, float):
        return Decimal(str(obj))
    if isinstance(obj, dict):
        return {k: _convert_for_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, list):
        return [_convert_for_dynamo(v) for v in obj]
    return obj


def _from_dynamo(obj: Any):
    """
    Recursively convert Decimal instances back to native Python numeric types.
    """
    if isinstance(obj, list):
        return [_from_dynamo(item) for item in obj]
    if isinstance(obj, dict):
        return {k: _from_dynamo(v) for k, v in obj.items()}
    if isinstance(obj, Decimal):
        if obj % 1 == 0:
            return int(obj)
        return float(obj)
    return obj
