"""Numeric aggregates shared by every insight rule.

All month windows are anchored to one reference time so the rules agree on
what "this month" and "last month" mean. Transactions whose date cannot be
parsed are left out of every date-dependent figure instead of failing.
"""

from dataclasses import dataclass
from datetime import date, datetime, time, timezone
from typing import Dict, Iterable, Optional, Sequence, Tuple, Union

import pandas as pd

from insights.config import Settings
from insights.domain import Category, DateLike, Transaction, TransactionType

FRAME_COLUMNS = ["id", "category_id", "amount", "is_expense", "is_income", "date"]

TransactionsLike = Union[Iterable[Transaction], pd.DataFrame]


def parse_moment(value: DateLike) -> Optional[datetime]:
    """Return a naive datetime for value, or None when it does not parse.

    Aware values are converted to UTC first.
    """
    if not isinstance(value, (date, str)):
        return None
    # pandas reads "now" and "today" off the wall clock
    if isinstance(value, str) and not any(ch.isdigit() for ch in value):
        return None
    ts = pd.to_datetime(value, errors="coerce")
    if pd.isna(ts):
        return None
    if ts.tzinfo is not None:
        ts = ts.tz_convert(None)
    return ts.to_pydatetime()


def parse_day(value: DateLike) -> Optional[date]:
    moment = parse_moment(value)
    return moment.date() if moment is not None else None


def start_of_day(value: DateLike) -> Optional[datetime]:
    day = parse_day(value)
    return datetime.combine(day, time.min) if day is not None else None


def as_reference_time(value: Union[date, datetime]) -> datetime:
    """Normalize the caller's "now" to a naive datetime."""
    if isinstance(value, datetime):
        if value.tzinfo is not None:
            return value.astimezone(timezone.utc).replace(tzinfo=None)
        return value
    return datetime.combine(value, time.min)


def transactions_frame(transactions: Iterable[Transaction]) -> pd.DataFrame:
    rows = [
        {
            "id": t.id,
            "category_id": t.category_id,
            "amount": float(t.amount),
            "is_expense": t.type == TransactionType.EXPENSE,
            "is_income": t.type == TransactionType.INCOME,
            "date": parse_day(t.date),
        }
        for t in transactions
    ]
    frame = pd.DataFrame(rows, columns=FRAME_COLUMNS)
    frame["amount"] = frame["amount"].astype(float)
    frame["is_expense"] = frame["is_expense"].astype(bool)
    frame["is_income"] = frame["is_income"].astype(bool)
    frame["date"] = pd.to_datetime(frame["date"], errors="coerce")
    return frame


def as_frame(transactions: TransactionsLike) -> pd.DataFrame:
    if isinstance(transactions, pd.DataFrame):
        return transactions
    return transactions_frame(transactions)


def month_of(anchor: Union[date, datetime, pd.Period]) -> pd.Period:
    if isinstance(anchor, pd.Period):
        return anchor
    return pd.Timestamp(as_reference_time(anchor)).to_period("M")


def _in_month(frame: pd.DataFrame, month: pd.Period) -> pd.Series:
    # NaT never equals a period, so undated rows fall out here
    return frame["date"].dt.to_period("M") == month


def monthly_expense_total(transactions: TransactionsLike, month_anchor) -> float:
    frame = as_frame(transactions)
    mask = frame["is_expense"] & _in_month(frame, month_of(month_anchor))
    return float(frame.loc[mask, "amount"].sum())


def monthly_income_total(transactions: TransactionsLike, month_anchor) -> float:
    frame = as_frame(transactions)
    mask = frame["is_income"] & _in_month(frame, month_of(month_anchor))
    return float(frame.loc[mask, "amount"].sum())


def category_monthly_expense(transactions: TransactionsLike, category_id: str, month_anchor) -> float:
    frame = as_frame(transactions)
    mask = (
        frame["is_expense"]
        & (frame["category_id"] == category_id)
        & _in_month(frame, month_of(month_anchor))
    )
    return float(frame.loc[mask, "amount"].sum())


def category_expense_totals(transactions: TransactionsLike, month_anchor=None) -> Dict[str, float]:
    """Expense sum per category id, over all time unless a month is given."""
    frame = as_frame(transactions)
    mask = frame["is_expense"]
    if month_anchor is not None:
        mask = mask & _in_month(frame, month_of(month_anchor))
    totals = frame[mask].groupby("category_id", sort=False)["amount"].sum()
    return {cid: float(total) for cid, total in totals.items()}


def weekend_vs_weekday_averages(transactions: TransactionsLike) -> Optional[Tuple[float, float]]:
    """Mean expense on weekend days and on weekdays.

    Returns None when either group is empty, so callers skip the comparison.
    """
    frame = as_frame(transactions)
    expenses = frame[frame["is_expense"] & frame["date"].notna()]
    is_weekend = expenses["date"].dt.weekday >= 5
    weekend = expenses.loc[is_weekend, "amount"]
    weekday = expenses.loc[~is_weekend, "amount"]
    if weekend.empty or weekday.empty:
        return None
    return float(weekend.sum() / len(weekend)), float(weekday.sum() / len(weekday))


def small_expenses(transactions: TransactionsLike, threshold: float) -> Tuple[int, float]:
    frame = as_frame(transactions)
    small = frame.loc[frame["is_expense"] & (frame["amount"] < threshold), "amount"]
    return int(len(small)), float(small.sum())


@dataclass(frozen=True)
class Aggregates:
    this_month_expense: float
    last_month_expense: float
    this_month_income: float
    category_month_expense: Dict[str, float]
    category_total_expense: Dict[str, float]
    weekend_weekday: Optional[Tuple[float, float]]
    micro_expense_count: int
    micro_expense_total: float


def build_aggregates(
    transactions: Sequence[Transaction],
    categories: Sequence[Category],
    now: datetime,
    settings: Settings,
) -> Aggregates:
    """Compute every aggregate once from a single frame of the transactions."""
    frame = transactions_frame(transactions)
    this_month = month_of(now)
    known = {c.id for c in categories}

    month_by_category = category_expense_totals(frame, this_month)
    total_by_category = category_expense_totals(frame)
    micro_count, micro_total = small_expenses(frame, settings.MICRO_EXPENSE_AMOUNT)

    return Aggregates(
        this_month_expense=monthly_expense_total(frame, this_month),
        last_month_expense=monthly_expense_total(frame, this_month - 1),
        this_month_income=monthly_income_total(frame, this_month),
        category_month_expense={k: v for k, v in month_by_category.items() if k in known},
        category_total_expense={k: v for k, v in total_by_category.items() if k in known},
        weekend_weekday=weekend_vs_weekday_averages(frame),
        micro_expense_count=micro_count,
        micro_expense_total=micro_total,
    )
