from datetime import date, datetime

import pytest

from insights.config import Settings
from insights.domain import Category, Frequency, RecurringItem, Transaction, TransactionType
from insights.stats import (
    budget_progress,
    budget_status,
    daily_spending,
    monthly_equivalent,
    monthly_stats,
    recurring_monthly_total,
)

NOW = datetime(2025, 3, 15, 12, 0)


def make_tx(id, amount, day, cat_id="c1", type=TransactionType.EXPENSE):
    return Transaction(id=id, type=type, amount=amount, category_id=cat_id, date=day)


def test_monthly_stats():
    trans = (
        make_tx("t1", 2000, "2025-03-01", type=TransactionType.INCOME),
        make_tx("t2", 500, "2025-03-02"),
        make_tx("t3", 300, "2025-03-20"),
        make_tx("t4", 999, "2025-02-20"),
    )
    stats = monthly_stats(trans, NOW)
    assert stats.month == "2025-03"
    assert stats.income == 2000
    assert stats.expenses == 800
    assert stats.savings == 1200
    assert stats.savings_rate == pytest.approx(60)


def test_monthly_stats_without_income():
    stats = monthly_stats((make_tx("t1", 50, "2025-03-02"),), NOW)
    assert stats.savings == -50
    assert stats.savings_rate is None


def test_daily_spending():
    trans = (
        make_tx("t1", 10, "2025-03-02"),
        make_tx("t2", 15, "2025-03-02"),
        make_tx("t3", 7, "2025-03-01"),
        make_tx("t4", 99, "2025-03-09"),
        make_tx("t5", 500, "2025-03-02", type=TransactionType.INCOME),
        make_tx("t6", 40, "broken"),
    )
    assert daily_spending(trans, date(2025, 3, 1), "2025-03-05") == [
        (date(2025, 3, 1), 7.0),
        (date(2025, 3, 2), 25.0),
    ]


def test_daily_spending_bad_range():
    assert daily_spending((make_tx("t1", 10, "2025-03-02"),), "bad", "2025-03-05") == []


def test_budget_status_thresholds():
    settings = Settings()
    assert budget_status(69, settings) == "safe"
    assert budget_status(70, settings) == "warning"
    assert budget_status(85, settings) == "danger"
    assert budget_status(100, settings) == "exceeded"


def test_budget_progress():
    cats = (
        Category("c1", "Food", 200),
        Category("c2", "Rent", 1000),
        Category("c3", "Fun"),
    )
    trans = (
        make_tx("t1", 150, "2025-03-03", cat_id="c1"),
        make_tx("t2", 100, "2025-02-03", cat_id="c1"),
        make_tx("t3", 1000, "2025-03-03", cat_id="c2"),
        make_tx("t4", 60, "2025-03-03", cat_id="c3"),
    )
    progress = budget_progress(cats, trans, NOW, Settings())

    assert [p.category_id for p in progress] == ["c1", "c2"]
    food, rent = progress
    assert food.spent == 150
    assert food.remaining == 50
    assert food.percentage == 75
    assert food.status == "warning"
    assert rent.status == "exceeded"
    assert rent.remaining == 0


def test_monthly_equivalent():
    assert monthly_equivalent(30, Frequency.MONTHLY) == 30
    assert monthly_equivalent(90, Frequency.QUARTERLY) == 30
    assert monthly_equivalent(120, "yearly") == 10


def test_recurring_monthly_total_skips_inactive():
    items = (
        RecurringItem("r1", 30, Frequency.MONTHLY, "2025-04-01"),
        RecurringItem("r2", 120, Frequency.YEARLY, "2025-04-01"),
        RecurringItem("r3", 99, Frequency.MONTHLY, "2025-04-01", is_active=False),
    )
    assert recurring_monthly_total(items) == 40
