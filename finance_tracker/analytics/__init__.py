"""Aggregation package."""

from finance_tracker.analytics.aggregation import (
    compute_category_breakdown,
    compute_goal_progress,
    compute_totals,
    compute_weekly_series,
    filter_transactions,
    remaining_for_goal,
    weekday_label,
)

__all__ = [
    "compute_category_breakdown",
    "compute_goal_progress",
    "compute_totals",
    "compute_weekly_series",
    "filter_transactions",
    "remaining_for_goal",
    "weekday_label",
]
