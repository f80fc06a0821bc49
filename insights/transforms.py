import json
from typing import Any, Dict

from insights.domain import (
    Category,
    Frequency,
    Goal,
    InsightInputs,
    RecurringItem,
    SharedExpenseParticipant,
    Transaction,
    TransactionType,
)


def transaction_from_dict(data: Dict[str, Any]) -> Transaction:
    tags = data.get("tags")
    return Transaction(
        id=data["id"],
        type=TransactionType(data["type"]),
        amount=float(data["amount"]),
        category_id=data.get("category_id"),
        date=data.get("date"),
        tags=frozenset(tags) if tags is not None else None,
    )


def recurring_from_dict(data: Dict[str, Any]) -> RecurringItem:
    return RecurringItem(
        id=data["id"],
        amount=float(data["amount"]),
        frequency=Frequency(data["frequency"]),
        next_date=data.get("next_date"),
        name=data.get("name", ""),
        category_id=data.get("category_id"),
        is_active=data.get("is_active", True),
    )


def inputs_from_dict(data: Dict[str, Any]) -> InsightInputs:
    """Build an engine snapshot from plain dicts, validating enum values."""
    return InsightInputs(
        transactions=tuple(transaction_from_dict(t) for t in data.get("transactions", [])),
        categories=tuple(Category(**c) for c in data.get("categories", [])),
        goals=tuple(Goal(**g) for g in data.get("goals", [])),
        monthly_budget=float(data.get("monthly_budget") or 0),
        recurring_items=tuple(recurring_from_dict(r) for r in data.get("recurring_items", [])),
        shared_participants=tuple(
            SharedExpenseParticipant(**p) for p in data.get("shared_participants", [])
        ),
    )


def load_seed(path: str) -> InsightInputs:
    with open(path, "r", encoding="utf-8") as f:
        data = json.load(f)
    return inputs_from_dict(data)
