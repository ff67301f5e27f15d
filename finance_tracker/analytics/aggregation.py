"""
Aggregation Engine

DESIGN DECISION: Every figure on the dashboard is DERIVED.
Nothing here is cached or stored; each function is a pure scan over
the transaction or goal list and is recomputed on every read.
Data volumes are single-user sized, so correctness wins over speed.
"""

import math
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable, Optional

from finance_tracker.models.finance import (
    FinancialGoal,
    Totals,
    Transaction,
    TransactionType,
    WeeklySeriesPoint,
)


WEEK_LENGTH = 7

# Abbreviated weekday names indexed by date.weekday() (Monday = 0)
WEEKDAY_LABELS: dict[str, tuple[str, ...]] = {
    "pt_BR": ("seg.", "ter.", "qua.", "qui.", "sex.", "sáb.", "dom."),
    "pt": ("seg.", "ter.", "qua.", "qui.", "sex.", "sáb.", "dom."),
    "en": ("Mon", "Tue", "Wed", "Thu", "Fri", "Sat", "Sun"),
}


def _labels_for(locale: str) -> tuple[str, ...]:
    normalized = (locale or "").replace("-", "_")
    if normalized in WEEKDAY_LABELS:
        return WEEKDAY_LABELS[normalized]
    language = normalized.split("_")[0].lower()
    return WEEKDAY_LABELS.get(language, WEEKDAY_LABELS["en"])


def weekday_label(day: date, locale: str = "pt_BR") -> str:
    """Localized abbreviated weekday name."""
    return _labels_for(locale)[day.weekday()]


def _sum_of_type(
    transactions: Iterable[Transaction],
    transaction_type: TransactionType,
) -> Decimal:
    return sum(
        (t.amount for t in transactions if t.type == transaction_type),
        Decimal("0"),
    )


def compute_totals(
    transactions: list[Transaction],
    monthly_income: Decimal = Decimal("0"),
) -> Totals:
    """
    Income, expenses and balance.

    The monthly base income counts as income; balance is always
    income minus expenses.
    """
    income = _sum_of_type(transactions, TransactionType.INCOME) + (monthly_income or Decimal("0"))
    expenses = _sum_of_type(transactions, TransactionType.EXPENSE)
    return Totals(income=income, expenses=expenses, balance=income - expenses)


def compute_weekly_series(
    transactions: list[Transaction],
    reference_date: Optional[date] = None,
    locale: str = "pt_BR",
) -> list[WeeklySeriesPoint]:
    """
    Per-day income and expense sums for the 7 days ending at reference_date.

    Oldest day first. Days without transactions are zero.
    """
    reference_date = reference_date or date.today()
    days = [
        reference_date - timedelta(days=offset)
        for offset in range(WEEK_LENGTH - 1, -1, -1)
    ]

    series = []
    for day in days:
        day_transactions = [t for t in transactions if t.date == day]
        series.append(WeeklySeriesPoint(
            date=day,
            label=weekday_label(day, locale),
            income=_sum_of_type(day_transactions, TransactionType.INCOME),
            expense=_sum_of_type(day_transactions, TransactionType.EXPENSE),
        ))
    return series


def compute_goal_progress(goal: FinancialGoal) -> float:
    """
    Percentage of the target reached, clamped to [0, 100].

    Zero when the target is zero or the ratio is not finite.
    """
    if goal.target_amount <= 0:
        return 0.0

    ratio = float(goal.current_amount / goal.target_amount * 100)
    if not math.isfinite(ratio):
        return 0.0
    return max(0.0, min(100.0, ratio))


def remaining_for_goal(goal: FinancialGoal) -> Decimal:
    """Amount still missing; negative once the goal is exceeded."""
    return goal.target_amount - goal.current_amount


def compute_category_breakdown(
    transactions: list[Transaction],
    transaction_type: TransactionType = TransactionType.EXPENSE,
) -> dict[str, Decimal]:
    """Totals per category, in order of first appearance."""
    breakdown: dict[str, Decimal] = {}
    for t in transactions:
        if t.type != transaction_type:
            continue
        breakdown[t.category] = breakdown.get(t.category, Decimal("0")) + t.amount
    return breakdown


def filter_transactions(
    transactions: list[Transaction],
    query: str,
) -> list[Transaction]:
    """Case-insensitive description search, order preserved."""
    needle = (query or "").strip().lower()
    if not needle:
        return list(transactions)
    return [t for t in transactions if needle in t.description.lower()]
