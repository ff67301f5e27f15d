"""
Core Data Models for FB finance

These models define the strict schemas for everything stored in a
user's data blob and everything derived from it.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Be JSON-serializable for the key-value store
4. Keep derived values (totals, series) out of storage

DESIGN DECISION: Money is Decimal, never float.
Sums of many small amounts must not drift.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional
from uuid import UUID, uuid4

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    model_validator,
)

from finance_tracker.models.account import UserProfile


HEX_COLOR_PATTERN = r"^#[0-9a-fA-F]{6}$"

MAX_DESCRIPTION_LENGTH = 200
MAX_GOAL_NAME_LENGTH = 100


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class TransactionType(str, Enum):
    """Direction of a transaction."""
    INCOME = "income"
    EXPENSE = "expense"


class IncomeCategory(str, Enum):
    """Categories available for income transactions."""
    SALARY = "salary"
    FREELANCE = "freelance"
    INVESTMENTS = "investments"
    GIFT = "gift"
    OTHER = "other"


class ExpenseCategory(str, Enum):
    """Categories available for expense transactions."""
    FOOD = "food"
    HOUSING = "housing"
    TRANSPORT = "transport"
    HEALTH = "health"
    LEISURE = "leisure"
    EDUCATION = "education"
    SHOPPING = "shopping"
    BILLS = "bills"
    OTHER = "other"


def categories_for(transaction_type: TransactionType) -> list[str]:
    """Valid category values for a transaction type, in display order."""
    if transaction_type == TransactionType.INCOME:
        return [c.value for c in IncomeCategory]
    return [c.value for c in ExpenseCategory]


# Palette offered for goals and the theme
THEME_COLORS: dict[str, str] = {
    "indigo": "#6366f1",
    "emerald": "#10b981",
    "rose": "#f43f5e",
    "amber": "#f59e0b",
    "sky": "#0ea5e9",
    "violet": "#8b5cf6",
}


# =============================================================================
# STORED MODELS
# =============================================================================

class Transaction(BaseModel):
    """
    A single income or expense entry.

    Transactions are immutable once created. The only mutation the
    application offers is deletion.
    """
    model_config = ConfigDict(str_strip_whitespace=True, frozen=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique within the owning user's blob"
    )
    description: str = Field(
        ...,
        min_length=1,
        max_length=MAX_DESCRIPTION_LENGTH,
        description="What the money was for"
    )
    amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount in the display currency"
    )
    category: str = Field(
        ...,
        min_length=1,
        description="Category value valid for the transaction type"
    )
    type: TransactionType
    date: date

    @model_validator(mode='after')
    def validate_category(self) -> 'Transaction':
        """Category must belong to the set for this type."""
        allowed = categories_for(self.type)
        if self.category not in allowed:
            raise ValueError(
                f"Category '{self.category}' is not valid for {self.type.value} "
                f"(allowed: {', '.join(allowed)})"
            )
        return self


class FinancialGoal(BaseModel):
    """
    A savings goal.

    current_amount grows through deposits and may exceed target_amount.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    id: UUID = Field(
        default_factory=uuid4,
        description="Unique within the owning user's blob"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=MAX_GOAL_NAME_LENGTH,
        description="Goal name"
    )
    target_amount: Decimal = Field(
        ...,
        ge=0,
        decimal_places=2,
        description="Amount to reach"
    )
    current_amount: Decimal = Field(
        default=Decimal("0"),
        ge=0,
        decimal_places=2,
        description="Amount saved so far"
    )
    deadline: date
    color: str = Field(
        default=THEME_COLORS["indigo"],
        pattern=HEX_COLOR_PATTERN,
        description="Display color"
    )


class ThemeConfig(BaseModel):
    """Per-user display preference, persisted with the data blob."""

    primary_color: str = Field(
        default=THEME_COLORS["indigo"],
        pattern=HEX_COLOR_PATTERN,
    )
    dark_mode_enabled: bool = False


class UserDataBlob(BaseModel):
    """
    Everything one account owns.

    This is the unit of persistence: it is always written whole.
    Sequences are newest first.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    goals: list[FinancialGoal] = Field(default_factory=list)
    theme: ThemeConfig = Field(default_factory=ThemeConfig)

    @model_validator(mode='after')
    def validate_unique_ids(self) -> 'UserDataBlob':
        """Ids must be unique within the blob."""
        transaction_ids = [t.id for t in self.transactions]
        if len(transaction_ids) != len(set(transaction_ids)):
            raise ValueError("Duplicate transaction id in user data")

        goal_ids = [g.id for g in self.goals]
        if len(goal_ids) != len(set(goal_ids)):
            raise ValueError("Duplicate goal id in user data")

        return self

    def find_goal(self, goal_id: UUID) -> Optional[FinancialGoal]:
        for goal in self.goals:
            if goal.id == goal_id:
                return goal
        return None


# =============================================================================
# DERIVED MODELS (never stored)
# =============================================================================

class Totals(BaseModel):
    """Income, expenses and balance derived from the transaction list."""

    income: Decimal
    expenses: Decimal
    balance: Decimal


class WeeklySeriesPoint(BaseModel):
    """One day of the 7-day dashboard series."""

    date: date
    label: str = Field(
        ...,
        description="Localized abbreviated weekday name"
    )
    income: Decimal = Decimal("0")
    expense: Decimal = Decimal("0")


class AdviceSnapshot(BaseModel):
    """
    Bundle handed to the advice assistant.

    It is a copy of the session state at request time; the assistant
    never sees storage.
    """

    transactions: list[Transaction] = Field(default_factory=list)
    goals: list[FinancialGoal] = Field(default_factory=list)
    profile: UserProfile
    theme: ThemeConfig = Field(default_factory=ThemeConfig)
