"""Insight rules.

Each rule is a pure function ``(aggregates, inputs, now, settings)`` that
returns the candidates it wants to emit, possibly none. Rules never look at
each other's output and never read the clock: ``now`` is always passed in.
"""

from datetime import datetime
from typing import Callable, List, Sequence

from insights.aggregates import Aggregates, parse_moment, start_of_day
from insights.config import Settings
from insights.domain import (
    InsightAction,
    InsightCandidate,
    InsightInputs,
    InsightType,
    Priority,
    Screen,
    SharedExpenseParticipant,
)
from insights.stats import monthly_equivalent

Evaluator = Callable[[Aggregates, InsightInputs, datetime, Settings], List[InsightCandidate]]


def _money(value: float) -> str:
    return f"{value:.0f}"


def budget_alerts(aggregates: Aggregates, inputs: InsightInputs, now: datetime, settings: Settings) -> List[InsightCandidate]:
    insights = []
    budget = inputs.monthly_budget or 0
    spent = aggregates.this_month_expense

    if budget > 0:
        percentage = spent / budget * 100
        if percentage >= settings.BUDGET_EXCEEDED_PCT:
            insights.append(InsightCandidate(
                type=InsightType.BUDGET_ALERT,
                message=f"You went over your monthly budget: spent {_money(spent)} of {_money(budget)}.",
                priority=Priority.HIGH,
                action=InsightAction(label="See details", target_screen=Screen.STATS),
            ))
        elif percentage >= settings.BUDGET_DANGER_PCT:
            insights.append(InsightCandidate(
                type=InsightType.BUDGET_ALERT,
                message=f"Careful: {percentage:.0f}% of the monthly budget is gone. {_money(budget - spent)} left.",
                priority=Priority.HIGH,
            ))
        elif percentage >= settings.BUDGET_WARNING_PCT:
            insights.append(InsightCandidate(
                type=InsightType.BUDGET_ALERT,
                message=f"You are at {percentage:.0f}% of your budget. Slow down to finish the month in the green.",
                priority=Priority.MEDIUM,
            ))

    for category in inputs.categories:
        if category.budget is None or category.budget <= 0:
            continue
        category_spent = aggregates.category_month_expense.get(category.id, 0.0)
        percentage = category_spent / category.budget * 100
        if percentage >= settings.BUDGET_EXCEEDED_PCT:
            insights.append(InsightCandidate(
                type=InsightType.BUDGET_ALERT,
                message=f'Budget "{category.name}" exceeded. Consider cutting back in this category.',
                priority=Priority.HIGH,
                category_id=category.id,
            ))
        elif percentage >= settings.CATEGORY_DANGER_PCT:
            insights.append(InsightCandidate(
                type=InsightType.BUDGET_ALERT,
                message=f'Budget "{category.name}" almost exhausted ({percentage:.0f}%).',
                priority=Priority.MEDIUM,
                category_id=category.id,
            ))

    return insights


def pattern_insights(aggregates: Aggregates, inputs: InsightInputs, now: datetime, settings: Settings) -> List[InsightCandidate]:
    insights = []
    this_month = aggregates.this_month_expense
    last_month = aggregates.last_month_expense

    if last_month > 0:
        change = (this_month - last_month) / last_month * 100
        if change > settings.MONTH_CHANGE_PCT:
            insights.append(InsightCandidate(
                type=InsightType.PATTERN_TEMPORAL,
                message=f"This month's spending is {change:.0f}% higher than last month. Check where the extra is going.",
                priority=Priority.MEDIUM,
            ))
        elif change < -settings.MONTH_CHANGE_PCT:
            insights.append(InsightCandidate(
                type=InsightType.PATTERN_TEMPORAL,
                message=f"Well done! You are spending {abs(change):.0f}% less than last month.",
                priority=Priority.LOW,
            ))

    if aggregates.weekend_weekday is not None:
        avg_weekend, avg_weekday = aggregates.weekend_weekday
        if avg_weekend > avg_weekday * settings.WEEKEND_RATIO:
            insights.append(InsightCandidate(
                type=InsightType.PATTERN_TEMPORAL,
                message="On weekends you spend noticeably more per purchase. Plan your outings to save.",
                priority=Priority.LOW,
            ))

    return insights


def goal_insights(aggregates: Aggregates, inputs: InsightInputs, now: datetime, settings: Settings) -> List[InsightCandidate]:
    insights = []

    for goal in inputs.goals:
        if goal.is_completed or goal.target_amount <= 0:
            continue
        remaining = goal.target_amount - goal.current_amount
        percentage = goal.current_amount / goal.target_amount * 100

        # at-risk and almost-done are independent, a goal can get both
        target = start_of_day(goal.target_date)
        if target is not None:
            days_remaining = (target - now).days
            if 0 < days_remaining < settings.GOAL_RISK_DAYS and percentage < settings.GOAL_RISK_PCT:
                insights.append(InsightCandidate(
                    type=InsightType.GOAL_PROGRESS,
                    message=(
                        f'Goal "{goal.name}" may not be reached in time. '
                        f"{_money(remaining)} still missing with {days_remaining} days left."
                    ),
                    priority=Priority.HIGH,
                ))

        if settings.GOAL_ALMOST_PCT <= percentage < 100:
            insights.append(InsightCandidate(
                type=InsightType.GOAL_PROGRESS,
                message=f'Almost there! Only {_money(remaining)} left to complete "{goal.name}".',
                priority=Priority.LOW,
            ))

    return insights


def health_insights(aggregates: Aggregates, inputs: InsightInputs, now: datetime, settings: Settings) -> List[InsightCandidate]:
    income = aggregates.this_month_income
    if income <= 0:
        return []

    savings_rate = (income - aggregates.this_month_expense) / income * 100
    # nothing between LOW_SAVINGS_PCT and IDEAL_SAVINGS_PCT
    if savings_rate < 0:
        return [InsightCandidate(
            type=InsightType.FINANCIAL_HEALTH,
            message="You are spending more than you earn this month. Review non-essential expenses.",
            priority=Priority.HIGH,
        )]
    if savings_rate < settings.LOW_SAVINGS_PCT:
        return [InsightCandidate(
            type=InsightType.FINANCIAL_HEALTH,
            message=f"Your savings rate is only {savings_rate:.0f}%. Try to reach at least {settings.IDEAL_SAVINGS_PCT:.0f}%.",
            priority=Priority.MEDIUM,
        )]
    if savings_rate >= settings.IDEAL_SAVINGS_PCT:
        return [InsightCandidate(
            type=InsightType.FINANCIAL_HEALTH,
            message=f"Great savings rate: {savings_rate:.0f}%! Congratulations, you are managing your money well.",
            priority=Priority.LOW,
        )]
    return []


def waste_insights(aggregates: Aggregates, inputs: InsightInputs, now: datetime, settings: Settings) -> List[InsightCandidate]:
    insights = []

    if aggregates.micro_expense_count > settings.MICRO_EXPENSE_COUNT:
        insights.append(InsightCandidate(
            type=InsightType.WASTE_DETECTION,
            message=(
                f"You made {aggregates.micro_expense_count} micro-expenses under "
                f"{_money(settings.MICRO_EXPENSE_AMOUNT)}, {_money(aggregates.micro_expense_total)} in total. "
                "Small expenses add up!"
            ),
            priority=Priority.MEDIUM,
        ))

    # all-time totals, unlike the month-scoped rules
    if inputs.categories:
        totals = aggregates.category_total_expense
        top = max(inputs.categories, key=lambda c: totals.get(c.id, 0.0))
        top_total = totals.get(top.id, 0.0)
        if top_total > 0:
            insights.append(InsightCandidate(
                type=InsightType.WASTE_DETECTION,
                message=f'"{top.name}" is your top spending category ({_money(top_total)}). See if you can optimize it.',
                priority=Priority.LOW,
                category_id=top.id,
            ))

    return insights


def motivational_insights(aggregates: Aggregates, inputs: InsightInputs, now: datetime, settings: Settings) -> List[InsightCandidate]:
    insights = []
    for goal in inputs.goals:
        if not goal.is_completed:
            continue
        completed_at = parse_moment(goal.completed_at)
        if completed_at is None or (now - completed_at).days > settings.CELEBRATION_DAYS:
            continue
        insights.append(InsightCandidate(
            type=InsightType.MOTIVATIONAL,
            message=f'Congratulations! You reached the goal "{goal.name}"! Keep it up!',
            priority=Priority.LOW,
        ))
    return insights


def _debtor_count(participants: Sequence[SharedExpenseParticipant]) -> int:
    named = {p.name for p in participants if p.name}
    unnamed = sum(1 for p in participants if not p.name)
    return len(named) + unnamed


def credit_insights(aggregates: Aggregates, inputs: InsightInputs, now: datetime, settings: Settings) -> List[InsightCandidate]:
    insights = []
    pending = [p for p in inputs.shared_participants if not p.is_paid]
    if not pending:
        return insights

    total = sum(p.amount_owed for p in pending)
    if total > 0:
        debtors = _debtor_count(pending)
        insights.append(InsightCandidate(
            type=InsightType.CREDIT_REMINDER,
            message=f"You have {_money(total)} in credits to collect from {debtors} {'person' if debtors == 1 else 'people'}.",
            priority=Priority.MEDIUM if total > settings.SIGNIFICANT_AMOUNT else Priority.LOW,
            action=InsightAction(label="See credits", target_screen=Screen.SHARED),
        ))

    stale = []
    for p in pending:
        created_at = parse_moment(p.created_at)
        if created_at is not None and (now - created_at).days > settings.STALE_CREDIT_DAYS:
            stale.append(p)
    if stale:
        stale_total = sum(p.amount_owed for p in stale)
        insights.append(InsightCandidate(
            type=InsightType.CREDIT_REMINDER,
            message=f"Heads up: {_money(stale_total)} in credits has been pending for more than {settings.STALE_CREDIT_DAYS} days.",
            priority=Priority.HIGH,
            action=InsightAction(label="Send a reminder", target_screen=Screen.SHARED),
        ))

    return insights


def recurring_insights(aggregates: Aggregates, inputs: InsightInputs, now: datetime, settings: Settings) -> List[InsightCandidate]:
    insights = []
    active = [r for r in inputs.recurring_items if r.is_active]
    if not active:
        return insights

    monthly_total = sum(monthly_equivalent(r.amount, r.frequency) for r in active)
    if monthly_total > 0:
        insights.append(InsightCandidate(
            type=InsightType.RECURRING_OPTIMIZATION,
            message=(
                f"Your subscriptions cost {_money(monthly_total)}/month "
                f"({_money(monthly_total * 12)}/year). Check that you use them all."
            ),
            priority=Priority.MEDIUM if monthly_total > settings.SIGNIFICANT_AMOUNT else Priority.LOW,
            action=InsightAction(label="Manage subscriptions", target_screen=Screen.RECURRING),
        ))

    overdue = 0
    for r in active:
        next_date = start_of_day(r.next_date)
        if next_date is not None and next_date < now:
            overdue += 1
    if overdue > 0:
        insights.append(InsightCandidate(
            type=InsightType.RECURRING_OPTIMIZATION,
            message=f"You have {overdue} overdue recurring {'expense' if overdue == 1 else 'expenses'} to record.",
            priority=Priority.HIGH,
            action=InsightAction(label="Record now", target_screen=Screen.RECURRING),
        ))

    return insights


DEFAULT_EVALUATORS: Sequence[Evaluator] = (
    budget_alerts,
    pattern_insights,
    goal_insights,
    health_insights,
    waste_insights,
    motivational_insights,
    credit_insights,
    recurring_insights,
)
