"""
Data Models Package

This package contains all Pydantic models used in FB finance.
All data flowing through the system must conform to these schemas.
"""

from finance_tracker.models.account import (
    CredentialRecord,
    ProfilePatch,
    UserProfile,
    normalize_email,
)
from finance_tracker.models.finance import (
    THEME_COLORS,
    AdviceSnapshot,
    ExpenseCategory,
    FinancialGoal,
    IncomeCategory,
    ThemeConfig,
    Totals,
    Transaction,
    TransactionType,
    UserDataBlob,
    WeeklySeriesPoint,
    categories_for,
)
from finance_tracker.models.validation import ValidationIssue, ValidationResult
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Account models
    "CredentialRecord",
    "ProfilePatch",
    "UserProfile",
    "normalize_email",
    # Finance models
    "THEME_COLORS",
    "AdviceSnapshot",
    "ExpenseCategory",
    "FinancialGoal",
    "IncomeCategory",
    "ThemeConfig",
    "Totals",
    "Transaction",
    "TransactionType",
    "UserDataBlob",
    "WeeklySeriesPoint",
    "categories_for",
    # Validation models
    "ValidationIssue",
    "ValidationResult",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
