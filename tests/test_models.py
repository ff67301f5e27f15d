"""
Tests for FB finance

Test strategy:
1. Unit tests for individual components (models, validators)
2. Integration tests for the controller (with a fake model)
3. No real API calls in tests
"""

import pytest
from datetime import date
from decimal import Decimal
from uuid import uuid4

from pydantic import ValidationError

from finance_tracker.models.account import (
    CredentialRecord,
    ProfilePatch,
    UserProfile,
    picture_data_uri,
)
from finance_tracker.models.finance import (
    ExpenseCategory,
    FinancialGoal,
    IncomeCategory,
    ThemeConfig,
    Transaction,
    TransactionType,
    UserDataBlob,
    categories_for,
)
from finance_tracker.models.validation import ValidationIssue, ValidationResult
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


def make_transaction(**overrides):
    fields = {
        "description": "Groceries",
        "amount": Decimal("42.50"),
        "category": "food",
        "type": TransactionType.EXPENSE,
        "date": date(2024, 12, 15),
    }
    fields.update(overrides)
    return Transaction(**fields)


class TestAccountModels:
    """Tests for account-related Pydantic models."""

    def test_credential_record_normalizes_email(self):
        """Test that emails are trimmed and lowercased."""
        record = CredentialRecord(name="Ana", email="  Ana@X.COM ", password_hash="h")
        assert record.email == "ana@x.com"
        assert record.monthly_income == Decimal("0")

    def test_credential_record_to_profile(self):
        """Test the profile drops the password hash."""
        record = CredentialRecord(name="Ana", email="ana@x.com", password_hash="h")
        profile = record.to_profile("R$")
        assert profile.email == "ana@x.com"
        assert profile.currency == "R$"
        assert "password_hash" not in profile.model_dump()

    def test_anonymous_profile(self):
        """Test the logged-out profile."""
        profile = UserProfile.anonymous()
        assert profile.is_anonymous is True
        assert profile.monthly_income == Decimal("0")

    def test_profile_patch_ignores_email(self):
        """Test that the email cannot be patched."""
        patch = ProfilePatch(name="Bia", email="other@x.com")
        assert patch.changed_fields() == {"name": "Bia"}

    def test_profile_patch_rejects_negative_income(self):
        """Test that monthly income cannot be negative."""
        with pytest.raises(ValidationError):
            ProfilePatch(monthly_income=Decimal("-1"))

    def test_picture_data_uri(self):
        """Test uploaded photos become inline data URIs."""
        assert picture_data_uri(b"\x89PNG", "image/png") == "data:image/png;base64,iVBORw=="

    def test_picture_data_uri_rejects_other_types(self):
        """Test only png and jpeg uploads are accepted."""
        with pytest.raises(ValueError):
            picture_data_uri(b"GIF89a", "image/gif")


class TestFinanceModels:
    """Tests for transaction, goal and blob models."""

    def test_transaction_creation(self):
        """Test Transaction model creation."""
        transaction = make_transaction()
        assert transaction.description == "Groceries"
        assert transaction.amount == Decimal("42.50")
        assert transaction.id is not None

    def test_transaction_strips_whitespace(self):
        """Test that whitespace is stripped from the description."""
        assert make_transaction(description="  Rent  ").description == "Rent"

    def test_transaction_rejects_negative_amount(self):
        """Test that negative amounts are rejected."""
        with pytest.raises(ValidationError):
            make_transaction(amount=Decimal("-1"))

    def test_transaction_category_must_match_type(self):
        """Test that an income category is rejected for an expense."""
        with pytest.raises(ValidationError, match="not valid for expense"):
            make_transaction(category="salary")

    def test_transaction_is_immutable(self):
        """Test that transactions cannot be edited."""
        transaction = make_transaction()
        with pytest.raises(ValidationError):
            transaction.amount = Decimal("1")

    def test_goal_defaults(self):
        """Test FinancialGoal default values."""
        goal = FinancialGoal(name="Trip", target_amount=Decimal("1000"), deadline=date(2025, 6, 1))
        assert goal.current_amount == Decimal("0")
        assert goal.color == "#6366f1"

    def test_goal_rejects_bad_color(self):
        """Test that goal colors must be hex."""
        with pytest.raises(ValidationError):
            FinancialGoal(
                name="Trip",
                target_amount=Decimal("1000"),
                deadline=date(2025, 6, 1),
                color="blue",
            )

    def test_theme_defaults(self):
        """Test ThemeConfig defaults."""
        theme = ThemeConfig()
        assert theme.primary_color == "#6366f1"
        assert theme.dark_mode_enabled is False

    def test_blob_rejects_duplicate_transaction_ids(self):
        """Test that ids are unique within a blob."""
        shared = uuid4()
        with pytest.raises(ValidationError, match="Duplicate transaction id"):
            UserDataBlob(transactions=[make_transaction(id=shared), make_transaction(id=shared)])

    def test_blob_json_round_trip(self):
        """Test that a blob survives JSON serialization."""
        blob = UserDataBlob(
            transactions=[make_transaction()],
            goals=[FinancialGoal(name="Trip", target_amount=Decimal("1000"), deadline=date(2025, 6, 1))],
        )
        restored = UserDataBlob.model_validate(blob.model_dump(mode="json"))
        assert restored == blob

    def test_find_goal(self):
        """Test goal lookup by id."""
        goal = FinancialGoal(name="Trip", target_amount=Decimal("1000"), deadline=date(2025, 6, 1))
        blob = UserDataBlob(goals=[goal])
        assert blob.find_goal(goal.id) == goal
        assert blob.find_goal(uuid4()) is None


class TestCategories:
    """Tests for category enums."""

    def test_categories_for_type(self):
        """Test that each type has its own set."""
        assert "salary" in categories_for(TransactionType.INCOME)
        assert "salary" not in categories_for(TransactionType.EXPENSE)
        assert "food" in categories_for(TransactionType.EXPENSE)

    def test_both_sets_have_other(self):
        """Test the shared fallback category."""
        assert IncomeCategory.OTHER.value == "other"
        assert ExpenseCategory.OTHER.value == "other"


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Transaction added",
        )
        assert event.event_type == AuditEventType.TRANSACTION_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.GOAL_DEPOSIT,
            description="Deposit applied",
            details={"amount": "100"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "goal_deposit"
        assert log_dict["details"]["amount"] == "100"

    def test_builder_transaction_added(self):
        """Test AuditEventBuilder.transaction_added."""
        transaction_id = uuid4()
        event = AuditEventBuilder.transaction_added(
            email="ana@x.com",
            transaction_id=transaction_id,
            transaction_type="expense",
            amount="42.50",
        )
        assert event.entity_id == transaction_id
        assert event.account_email == "ana@x.com"
        assert event.is_user_action is True

    def test_builder_login_failed_is_warning(self):
        """Test that failed logins are warnings without secrets."""
        event = AuditEventBuilder.login_failed("ana@x.com")
        assert event.severity == AuditSeverity.WARNING
        assert "password" not in str(event.to_log_dict()).lower()


class TestValidationResult:
    """Tests for ValidationResult model."""

    def test_validation_result_has_errors(self):
        """Test has_errors property."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="amount",
                issue_type="invalid_value",
                message="Amount must be greater than zero.",
                severity="error",
            ),
        ])
        assert result.has_errors is True
        assert result.error_count == 1
        assert result.first_error.field == "amount"

    def test_validation_result_warnings_only(self):
        """Test that warnings don't count as errors."""
        result = ValidationResult(issues=[
            ValidationIssue(
                field="date",
                issue_type="future_date",
                message="Date in future",
                severity="warning",
            ),
        ])
        assert result.has_errors is False
        assert result.is_valid is True
        assert result.warnings == ["Date in future"]


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
