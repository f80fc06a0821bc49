from dataclasses import dataclass
from datetime import date
from typing import Iterable, List, Optional, Sequence, Tuple

import pandas as pd

from insights.aggregates import (
    TransactionsLike,
    as_frame,
    category_expense_totals,
    month_of,
    monthly_expense_total,
    monthly_income_total,
    parse_day,
)
from insights.config import Settings, get_settings
from insights.domain import Category, Frequency, RecurringItem

MONTHS_PER_PERIOD = {
    Frequency.MONTHLY: 1,
    Frequency.QUARTERLY: 3,
    Frequency.YEARLY: 12,
}


@dataclass(frozen=True)
class MonthlyStats:
    month: str                      # "YYYY-MM"
    income: float
    expenses: float
    savings: float
    savings_rate: Optional[float]   # percent, None without income


@dataclass(frozen=True)
class BudgetProgress:
    category_id: str
    category_name: str
    budget: float
    spent: float
    remaining: float
    percentage: float
    status: str  # safe | warning | danger | exceeded


def monthly_equivalent(amount: float, frequency: Frequency) -> float:
    return amount / MONTHS_PER_PERIOD[Frequency(frequency)]


def recurring_monthly_total(items: Iterable[RecurringItem]) -> float:
    return sum(monthly_equivalent(r.amount, r.frequency) for r in items if r.is_active)


def monthly_stats(transactions: TransactionsLike, month_anchor) -> MonthlyStats:
    frame = as_frame(transactions)
    month = month_of(month_anchor)
    income = monthly_income_total(frame, month)
    expenses = monthly_expense_total(frame, month)
    savings = income - expenses
    rate = savings / income * 100 if income > 0 else None
    return MonthlyStats(str(month), income, expenses, savings, rate)


def daily_spending(transactions: TransactionsLike, start, end) -> List[Tuple[date, float]]:
    """Expense total per calendar day in [start, end], oldest first."""
    frame = as_frame(transactions)
    first, last = parse_day(start), parse_day(end)
    if first is None or last is None:
        return []
    # dates are stored at midnight, so comparing timestamps compares days
    mask = (
        frame["is_expense"]
        & (frame["date"] >= pd.Timestamp(first))
        & (frame["date"] <= pd.Timestamp(last))
    )
    per_day = frame[mask].groupby("date")["amount"].sum().sort_index()
    return [(day.date(), float(amount)) for day, amount in per_day.items()]


def budget_status(percentage: float, settings: Settings) -> str:
    if percentage >= settings.BUDGET_EXCEEDED_PCT:
        return "exceeded"
    if percentage >= settings.BUDGET_WARNING_PCT:
        return "danger"
    if percentage >= settings.BUDGET_SAFE_PCT:
        return "warning"
    return "safe"


def budget_progress(
    categories: Sequence[Category],
    transactions: TransactionsLike,
    month_anchor,
    settings: Optional[Settings] = None,
) -> List[BudgetProgress]:
    settings = settings or get_settings()
    spent_by_category = category_expense_totals(as_frame(transactions), month_anchor)
    progress = []
    for category in categories:
        if category.budget is None or category.budget <= 0:
            continue
        spent = spent_by_category.get(category.id, 0.0)
        percentage = spent / category.budget * 100
        progress.append(
            BudgetProgress(
                category_id=category.id,
                category_name=category.name,
                budget=float(category.budget),
                spent=spent,
                remaining=category.budget - spent,
                percentage=percentage,
                status=budget_status(percentage, settings),
            )
        )
    return progress
