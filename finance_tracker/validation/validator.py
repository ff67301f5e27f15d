"""
Input Validation

DESIGN DECISION: Form input is validated BEFORE any state changes.
A failed check means nothing was mutated and nothing was written.

Two severities:
- errors block the action (missing fields, non-positive amounts)
- warnings are surfaced but do not block (a date in the future)

IMPORTANT: Validation NEVER silently fixes input.
It reports issues for the user to correct.
"""

import re
from datetime import date, timedelta
from decimal import Decimal, InvalidOperation
from typing import Any, Optional

from finance_tracker.accounts.credentials import BCRYPT_MAX_PASSWORD_BYTES
from finance_tracker.models.account import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from finance_tracker.models.finance import (
    HEX_COLOR_PATTERN,
    MAX_DESCRIPTION_LENGTH,
    MAX_GOAL_NAME_LENGTH,
    TransactionType,
    categories_for,
)
from finance_tracker.models.validation import ValidationIssue, ValidationResult


FUTURE_DATE_TOLERANCE_DAYS = 1

MAX_DECIMAL_PLACES = 2

REQUIRED_FIELDS_MESSAGE = "Please fill in all fields."


class InputValidationError(Exception):
    """Form input failed validation; nothing was changed."""

    def __init__(self, result: ValidationResult):
        self.result = result
        first = result.first_error
        super().__init__(first.message if first else "Invalid input")


def _to_decimal(value: Any) -> Optional[Decimal]:
    """Convert form input to Decimal, None if it is not a finite number."""
    if value is None or isinstance(value, bool):
        return None
    try:
        number = value if isinstance(value, Decimal) else Decimal(str(value).strip())
    except (InvalidOperation, ValueError):
        return None
    if not number.is_finite():
        return None
    return number


def _is_blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _has_too_many_decimals(number: Decimal) -> bool:
    return number.normalize().as_tuple().exponent < -MAX_DECIMAL_PLACES


def _amount_issue(field: str, value: Any, message: str, allow_zero: bool = False) -> Optional[ValidationIssue]:
    """Shared money check: finite, positive (or non-negative), whole cents."""
    number = _to_decimal(value)
    if number is None or number < 0 or (number == 0 and not allow_zero):
        return ValidationIssue(
            field=field,
            issue_type="invalid_value",
            message=message,
            severity="error",
        )
    if _has_too_many_decimals(number):
        return ValidationIssue(
            field=field,
            issue_type="invalid_format",
            message=f"Amounts can have at most {MAX_DECIMAL_PLACES} decimal places.",
            severity="error",
        )
    return None


def _length_issue(field: str, value: Optional[str], limit: int, label: str) -> Optional[ValidationIssue]:
    if value is not None and len(str(value).strip()) > limit:
        return ValidationIssue(
            field=field,
            issue_type="too_long",
            message=f"{label} must be at most {limit} characters.",
            severity="error",
        )
    return None


class InputValidator:
    """Validates registration, login, transaction, goal and theme input."""

    def validate_registration(
        self,
        name: Optional[str],
        email: Optional[str],
        password: Optional[str],
    ) -> ValidationResult:
        issues = []

        if _is_blank(name) or _is_blank(email) or not password:
            issues.append(ValidationIssue(
                field="form",
                issue_type="missing",
                message=REQUIRED_FIELDS_MESSAGE,
                severity="error",
            ))
            return ValidationResult(issues=issues)

        for issue in (
            _length_issue("name", name, MAX_NAME_LENGTH, "Name"),
            _length_issue("email", email, MAX_EMAIL_LENGTH, "Email"),
        ):
            if issue:
                issues.append(issue)

        if "@" not in email:
            issues.append(ValidationIssue(
                field="email",
                issue_type="invalid_format",
                message="Please enter a valid email address.",
                severity="error",
            ))

        if len(password.encode("utf-8")) > BCRYPT_MAX_PASSWORD_BYTES:
            issues.append(ValidationIssue(
                field="password",
                issue_type="too_long",
                message=f"Password must be at most {BCRYPT_MAX_PASSWORD_BYTES} bytes.",
                severity="error",
            ))

        return ValidationResult(issues=issues)

    def validate_login(
        self,
        email: Optional[str],
        password: Optional[str],
    ) -> ValidationResult:
        issues = []

        if _is_blank(email) or not password:
            issues.append(ValidationIssue(
                field="form",
                issue_type="missing",
                message=REQUIRED_FIELDS_MESSAGE,
                severity="error",
            ))

        return ValidationResult(issues=issues)

    def validate_transaction(
        self,
        description: Optional[str],
        amount: Any,
        transaction_type: Any,
        category: Optional[str],
        transaction_date: Optional[date] = None,
    ) -> ValidationResult:
        issues = []

        if _is_blank(description):
            issues.append(ValidationIssue(
                field="description",
                issue_type="missing",
                message="Description is required.",
                severity="error",
            ))
        else:
            too_long = _length_issue("description", description, MAX_DESCRIPTION_LENGTH, "Description")
            if too_long:
                issues.append(too_long)

        amount_issue = _amount_issue("amount", amount, "Amount must be greater than zero.")
        if amount_issue:
            issues.append(amount_issue)

        try:
            kind = TransactionType(transaction_type)
        except ValueError:
            issues.append(ValidationIssue(
                field="type",
                issue_type="invalid_value",
                message="Type must be income or expense.",
                severity="error",
            ))
        else:
            if category not in categories_for(kind):
                issues.append(ValidationIssue(
                    field="category",
                    issue_type="invalid_value",
                    message=f"Choose a valid {kind.value} category.",
                    severity="error",
                ))

        if transaction_date and transaction_date > date.today() + timedelta(days=FUTURE_DATE_TOLERANCE_DAYS):
            issues.append(ValidationIssue(
                field="date",
                issue_type="future_date",
                message=f"Date ({transaction_date}) is in the future.",
                severity="warning",
            ))

        return ValidationResult(issues=issues)

    def validate_goal(
        self,
        name: Optional[str],
        target_amount: Any,
        current_amount: Any = 0,
        deadline: Optional[date] = None,
    ) -> ValidationResult:
        issues = []

        if _is_blank(name):
            issues.append(ValidationIssue(
                field="name",
                issue_type="missing",
                message="Goal name is required.",
                severity="error",
            ))
        else:
            too_long = _length_issue("name", name, MAX_GOAL_NAME_LENGTH, "Goal name")
            if too_long:
                issues.append(too_long)

        for issue in (
            _amount_issue("target_amount", target_amount, "Target amount must be greater than zero."),
            _amount_issue("current_amount", current_amount, "Saved amount cannot be negative.", allow_zero=True),
        ):
            if issue:
                issues.append(issue)

        if deadline and deadline < date.today():
            issues.append(ValidationIssue(
                field="deadline",
                issue_type="past_date",
                message=f"Deadline ({deadline}) has already passed.",
                severity="warning",
            ))

        return ValidationResult(issues=issues)

    def validate_profile(
        self,
        name: Optional[str] = None,
        monthly_income: Any = None,
    ) -> ValidationResult:
        """None means the field is not being changed."""
        issues = []

        if name is not None:
            if _is_blank(name):
                issues.append(ValidationIssue(
                    field="name",
                    issue_type="missing",
                    message="Name cannot be empty.",
                    severity="error",
                ))
            else:
                too_long = _length_issue("name", name, MAX_NAME_LENGTH, "Name")
                if too_long:
                    issues.append(too_long)

        if monthly_income is not None:
            income_issue = _amount_issue(
                "monthly_income",
                monthly_income,
                "Monthly income cannot be negative.",
                allow_zero=True,
            )
            if income_issue:
                issues.append(income_issue)

        return ValidationResult(issues=issues)

    def validate_deposit(self, amount: Any) -> ValidationResult:
        issues = []

        amount_issue = _amount_issue("amount", amount, "Deposit must be greater than zero.")
        if amount_issue:
            issues.append(amount_issue)

        return ValidationResult(issues=issues)

    def validate_theme(self, primary_color: Optional[str]) -> ValidationResult:
        issues = []

        if primary_color is not None and not re.match(HEX_COLOR_PATTERN, primary_color):
            issues.append(ValidationIssue(
                field="primary_color",
                issue_type="invalid_format",
                message="Color must look like #6366f1.",
                severity="error",
            ))

        return ValidationResult(issues=issues)

    def get_user_friendly_summary(self, result: ValidationResult) -> str:
        """
        Generate a user-friendly summary of validation results.

        This is what the UI shows inline next to the form.
        """
        if result.is_valid and not result.warnings:
            return ""

        lines = []
        for issue in result.issues:
            if issue.severity == "error":
                lines.append(f"❌ {issue.message}")
        for warning in result.warnings:
            lines.append(f"⚠️ {warning}")
        return "\n".join(lines)
