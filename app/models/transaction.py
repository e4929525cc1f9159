from datetime import date as Date, datetime, timezone
from enum import Enum
from typing import Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field


def _utcnow_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


class TransactionKind(str, Enum):
    income = "income"
    expense = "expense"


class TransactionCreate(BaseModel):
    # Unknown keys (owner, id, ...) are dropped, never stored
    model_config = ConfigDict(extra="ignore")

    amount: float = Field(ge=0, allow_inf_nan=False)
    kind: TransactionKind
    category: str = Field(min_length=1, max_length=64)
    description: str = ""
    date: Date


class TransactionUpdate(BaseModel):
    model_config = ConfigDict(extra="ignore")

    amount: Optional[float] = Field(default=None, ge=0, allow_inf_nan=False)
    kind: Optional[TransactionKind] = None
    category: Optional[str] = Field(default=None, min_length=1, max_length=64)
    description: Optional[str] = None
    date: Optional[Date] = None

    def changes(self) -> dict:
        """Fields the client actually sent, with nulls dropped, in storage form."""
        return self.model_dump(exclude_unset=True, exclude_none=True, mode="json")


class TransactionInDB(BaseModel):
    user_id: str
    transaction_id: str = Field(default_factory=lambda: str(uuid4()))
    amount: float
    kind: TransactionKind
    category: str
    description: str = ""
    date: Date
    created_at: str = Field(default_factory=_utcnow_iso)

    def to_item(self) -> dict:
        return self.model_dump(mode="json")


class TransactionPublic(BaseModel):
    id: str
    owner: str
    amount: float
    kind: TransactionKind
    category: str
    description: str = ""
    date: Date
    created_at: str

    @classmethod
    def from_item(cls, item: dict) -> "TransactionPublic":
        return cls(
            id=item["transaction_id"],
            owner=item["user_id"],
            amount=item.get("amount", 0),
            kind=item["kind"],
            category=item["category"],
            description=item.get("description", ""),
            date=item["date"],
            created_at=item.get("created_at", ""),
        )
