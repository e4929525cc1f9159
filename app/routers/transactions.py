import logging
from typing import Dict, List, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, status

from app.core.config import settings
from app.core.errors import TransactionError
from app.models.transaction import (
    TransactionCreate,
    TransactionKind,
    TransactionPublic,
    TransactionUpdate,
)
from app.routers.deps import get_current_user_id
from app.services import transactions as service
from app.utils import analyzer

router = APIRouter()
logger = logging.getLogger(__name__)


def _http_error(e: TransactionError) -> HTTPException:
    return HTTPException(status_code=e.status_code, detail=e.message)


@router.get("", response_model=List[TransactionPublic])
def list_transactions(user_id: str = Depends(get_current_user_id)):
    try:
        return service.list_transactions(user_id)
    except TransactionError as e:
        raise _http_error(e)


@router.post("", response_model=TransactionPublic, status_code=status.HTTP_201_CREATED)
def create_transaction(transaction: TransactionCreate, user_id: str = Depends(get_current_user_id)):
    try:
        return service.create_transaction(user_id, transaction)
    except TransactionError as e:
        raise _http_error(e)


@router.get("/summary")
def get_summary(user_id: str = Depends(get_current_user_id)) -> Dict:
    """Totals over every transaction the caller owns."""
    try:
        records = service.list_records(user_id)
    except TransactionError as e:
        raise _http_error(e)
    return analyzer.summarize(records).to_dict()


@router.get("/categories")
def get_categories(user_id: str = Depends(get_current_user_id)) -> Dict:
    """Distinct categories plus an income/expense/total rollup per category."""
    try:
        records = service.list_records(user_id)
    except TransactionError as e:
        raise _http_error(e)
    return {
        "categories": analyzer.unique_categories(records),
        "rollup": analyzer.category_rollup(records),
    }


@router.get("/recent", response_model=List[TransactionPublic])
def get_recent(
    count: int = Query(default=settings.RECENT_TRANSACTIONS_DEFAULT, ge=0, le=100),
    user_id: str = Depends(get_current_user_id),
):
    try:
        records = service.list_records(user_id)
    except TransactionError as e:
        raise _http_error(e)
    return [TransactionPublic.from_item(item) for item in analyzer.recent_transactions(records, count)]


@router.get("/search", response_model=List[TransactionPublic])
def search_transactions(
    kind: Optional[TransactionKind] = None,
    category: Optional[str] = None,
    search: str = "",
    user_id: str = Depends(get_current_user_id),
):
    """
    Filtered view of the caller's transactions. Any omitted parameter
    (or category="all") matches everything.
    """
    view = analyzer.TransactionFilter(
        kind=kind.value if kind else None,
        category=category,
        search=search,
    )
    try:
        records = service.list_records(user_id)
    except TransactionError as e:
        raise _http_error(e)
    return [TransactionPublic.from_item(item) for item in view.apply(records)]


@router.get("/{transaction_id}", response_model=TransactionPublic)
def get_transaction(transaction_id: str, user_id: str = Depends(get_current_user_id)):
    try:
        return service.get_transaction(user_id, transaction_id)
    except TransactionError as e:
        raise _http_error(e)


@router.put("/{transaction_id}", response_model=TransactionPublic)
def update_transaction(
    transaction_id: str,
    transaction_update: TransactionUpdate,
    user_id: str = Depends(get_current_user_id),
):
    if not transaction_update.changes():
        raise HTTPException(status_code=400, detail="No fields to update")
    try:
        return service.update_transaction(user_id, transaction_id, transaction_update)
    except TransactionError as e:
        raise _http_error(e)


@router.delete("/{transaction_id}")
def delete_transaction(transaction_id: str, user_id: str = Depends(get_current_user_id)) -> Dict:
    try:
        service.delete_transaction(user_id, transaction_id)
    except TransactionError as e:
        raise _http_error(e)
    return {"message": "Transaction deleted"}
