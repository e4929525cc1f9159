"""
Aggregation helpers over an in-memory list of transaction records.

Every function here is pure: it reads the records it is given, never
mutates them, and returns new lists/dicts. Records are plain mappings with
at least ``amount``, ``kind``, ``category``, ``description`` and ``date``.
"""
from __future__ import annotations

from dataclasses import asdict, dataclass, replace
from datetime import date, datetime
from typing import Any, Dict, Iterable, List, Mapping, Optional

INCOME = "income"
EXPENSE = "expense"
ALL = "all"


@dataclass(frozen=True)
class CategoryRollup:
    """Income, expense and net total for a single category."""

    income: float = 0.0
    expense: float = 0.0
    total: float = 0.0

    def add(self, kind: str, amount: float) -> "CategoryRollup":
        if kind == INCOME:
            return replace(self, income=self.income + amount, total=self.total + amount)
        if kind == EXPENSE:
            return replace(self, expense=self.expense + amount, total=self.total - amount)
        return self

    def to_dict(self) -> Dict[str, float]:
        return asdict(self)


@dataclass(frozen=True)
class Summary:
    total_income: float
    total_expense: float
    balance: float
    count: int

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)


@dataclass(frozen=True)
class TransactionFilter:
    """
    Filter state for a transaction list view.

    ``None`` or ``"all"`` disables the kind/category predicates and an empty
    ``search`` disables the free-text one. Transitions return new instances.
    """

    kind: Optional[str] = None
    category: Optional[str] = None
    search: str = ""

    def update(self, **changes: Any) -> "TransactionFilter":
        return replace(self, **changes)

    def cleared(self) -> "TransactionFilter":
        return TransactionFilter()

    @property
    def active(self) -> bool:
        return _is_active(self.kind) or _is_active(self.category) or bool(self.search)

    def apply(self, records: Iterable[Mapping[str, Any]]) -> List[Mapping[str, Any]]:
        return filter_transactions(records, kind=self.kind, category=self.category, search=self.search)


def _is_active(value: Optional[str]) -> bool:
    return value is not None and value != ALL


def _amount(record: Mapping[str, Any]) -> float:
    return float(record.get("amount", 0) or 0)


def _kind(record: Mapping[str, Any]) -> str:
    kind = record.get("kind")
    # Enum members carry their wire value in .value
    return getattr(kind, "value", kind)


def _date_key(record: Mapping[str, Any]) -> date:
    value = record.get("date")
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if isinstance(value, str) and value:
        return date.fromisoformat(value[:10])
    return date.min


def filter_transactions(
    records: Iterable[Mapping[str, Any]],
    kind: Optional[str] = None,
    category: Optional[str] = None,
    search: Optional[str] = None,
) -> List[Mapping[str, Any]]:
    """Return the records matching every active predicate, in input order."""
    needle = (search or "").lower()
    result = []
    for record in records:
        if _is_active(kind) and _kind(record) != kind:
            continue
        if _is_active(category) and record.get("category") != category:
            continue
        if needle:
            description = str(record.get("description") or "").lower()
            record_category = str(record.get("category") or "").lower()
            if needle not in description and needle not in record_category:
                continue
        result.append(record)
    return result


def recent_transactions(records: Iterable[Mapping[str, Any]], count: int = 5) -> List[Mapping[str, Any]]:
    """
    Top ``count`` records by date, newest first. Records sharing a date keep
    their input order (``sorted`` is stable).
    """
    if count <= 0:
        return []
    return sorted(records, key=_date_key, reverse=True)[:count]


def category_rollup(records: Iterable[Mapping[str, Any]]) -> Dict[str, Dict[str, float]]:
    rollups: Dict[str, CategoryRollup] = {}
    for record in records:
        category = record.get("category")
        current = rollups.get(category, CategoryRollup())
        rollups[category] = current.add(_kind(record), _amount(record))
    return {category: rollup.to_dict() for category, rollup in rollups.items()}


def summarize(records: Iterable[Mapping[str, Any]]) -> Summary:
    total_income = 0.0
    total_expense = 0.0
    count = 0
    for record in records:
        count += 1
        kind = _kind(record)
        if kind == INCOME:
            total_income += _amount(record)
        elif kind == EXPENSE:
            total_expense += _amount(record)
    return Summary(
        total_income=total_income,
        total_expense=total_expense,
        balance=total_income - total_expense,
        count=count,
    )


def unique_categories(records: Iterable[Mapping[str, Any]]) -> List[str]:
    return sorted({record["category"] for record in records if record.get("category")})
