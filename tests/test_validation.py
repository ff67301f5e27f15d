"""Tests for form input validation."""

import pytest
from datetime import date, timedelta
from decimal import Decimal

from finance_tracker.models.account import MAX_EMAIL_LENGTH, MAX_NAME_LENGTH
from finance_tracker.models.finance import MAX_DESCRIPTION_LENGTH, MAX_GOAL_NAME_LENGTH
from finance_tracker.validation import InputValidationError, InputValidator
from finance_tracker.validation.validator import REQUIRED_FIELDS_MESSAGE


@pytest.fixture
def validator():
    return InputValidator()


class TestAccountValidation:
    """Tests for registration and login forms."""

    @pytest.mark.parametrize("name,email,password", [
        ("", "ana@x.com", "secret"),
        ("Ana", "   ", "secret"),
        ("Ana", "ana@x.com", ""),
        (None, None, None),
    ])
    def test_registration_requires_all_fields(self, validator, name, email, password):
        """Test any missing field blocks registration."""
        result = validator.validate_registration(name, email, password)
        assert result.has_errors
        assert result.first_error.message == REQUIRED_FIELDS_MESSAGE

    def test_registration_email_needs_at_sign(self, validator):
        """Test a malformed email."""
        result = validator.validate_registration("Ana", "ana.x.com", "secret")
        assert result.first_error.field == "email"

    def test_registration_password_too_long(self, validator):
        """Test passwords past bcrypt's limit."""
        result = validator.validate_registration("Ana", "ana@x.com", "é" * 40)
        assert result.first_error.field == "password"

    @pytest.mark.parametrize("name,email,field", [
        ("n" * (MAX_NAME_LENGTH + 1), "ana@x.com", "name"),
        ("Ana", "a" * MAX_EMAIL_LENGTH + "@x.com", "email"),
    ])
    def test_registration_fields_too_long(self, validator, name, email, field):
        """Test names and emails longer than the stored record allows."""
        result = validator.validate_registration(name, email, "secret")
        assert result.first_error.field == field
        assert result.first_error.issue_type == "too_long"

    def test_registration_at_length_limit(self, validator):
        """Test a name of exactly the maximum length."""
        assert validator.validate_registration("n" * MAX_NAME_LENGTH, "ana@x.com", "secret").is_valid

    def test_valid_registration(self, validator):
        """Test a complete form."""
        assert validator.validate_registration("Ana", "ana@x.com", "secret").is_valid

    def test_login_requires_both_fields(self, validator):
        """Test the login form."""
        assert validator.validate_login("ana@x.com", "").has_errors
        assert validator.validate_login("ana@x.com", "secret").is_valid


class TestTransactionValidation:
    """Tests for the transaction form."""

    def test_valid(self, validator):
        """Test a correct expense."""
        result = validator.validate_transaction("Market", "42.50", "expense", "food", date.today())
        assert result.is_valid
        assert result.warnings == []

    @pytest.mark.parametrize("amount", [0, "-5", "abc", None, "NaN", "Infinity"])
    def test_amount_must_be_positive_number(self, validator, amount):
        """Test rejected amounts."""
        result = validator.validate_transaction("Market", amount, "expense", "food")
        assert result.first_error.field == "amount"

    def test_amount_with_fractions_of_cents(self, validator):
        """Test more than two decimal places."""
        result = validator.validate_transaction("Market", Decimal("1.005"), "expense", "food")
        assert result.first_error.issue_type == "invalid_format"

    def test_whole_amounts_accepted(self, validator):
        """Test amounts without cents."""
        assert validator.validate_transaction("Rent", Decimal("1200"), "expense", "housing").is_valid

    def test_blank_description(self, validator):
        """Test description is required."""
        result = validator.validate_transaction("  ", "10", "expense", "food")
        assert result.first_error.field == "description"

    def test_description_too_long(self, validator):
        """Test descriptions past the stored limit."""
        result = validator.validate_transaction("x" * (MAX_DESCRIPTION_LENGTH + 1), "10", "expense", "food")
        assert result.first_error.field == "description"
        assert result.first_error.issue_type == "too_long"
        assert validator.validate_transaction("x" * MAX_DESCRIPTION_LENGTH, "10", "expense", "food").is_valid

    def test_category_must_match_type(self, validator):
        """Test an expense category on an income."""
        result = validator.validate_transaction("Pay", "10", "income", "food")
        assert result.first_error.field == "category"

    def test_unknown_type(self, validator):
        """Test a type that is neither income nor expense."""
        result = validator.validate_transaction("Pay", "10", "transfer", "other")
        assert result.first_error.field == "type"

    def test_future_date_is_only_a_warning(self, validator):
        """Test future dates warn but do not block."""
        result = validator.validate_transaction(
            "Market", "10", "expense", "food", date.today() + timedelta(days=30),
        )
        assert result.is_valid
        assert len(result.warnings) == 1


class TestGoalValidation:
    """Tests for goal, deposit and theme input."""

    def test_valid_goal(self, validator):
        """Test a correct goal."""
        assert validator.validate_goal("Trip", "1000", "0", date.today() + timedelta(days=10)).is_valid

    def test_target_must_be_positive(self, validator):
        """Test a zero target."""
        result = validator.validate_goal("Trip", "0")
        assert result.first_error.field == "target_amount"

    def test_current_may_be_zero_but_not_negative(self, validator):
        """Test the already-saved amount."""
        assert validator.validate_goal("Trip", "10", "0").is_valid
        assert validator.validate_goal("Trip", "10", "-1").first_error.field == "current_amount"

    def test_goal_name_too_long(self, validator):
        """Test goal names past the stored limit."""
        result = validator.validate_goal("g" * (MAX_GOAL_NAME_LENGTH + 1), "100")
        assert result.first_error.field == "name"
        assert result.first_error.issue_type == "too_long"

    def test_past_deadline_warns(self, validator):
        """Test deadlines in the past."""
        result = validator.validate_goal("Trip", "10", "0", date.today() - timedelta(days=1))
        assert result.is_valid
        assert result.warnings

    def test_deposit(self, validator):
        """Test deposits must be positive."""
        assert validator.validate_deposit(Decimal("100")).is_valid
        assert validator.validate_deposit(0).has_errors

    def test_theme_color(self, validator):
        """Test hex colors."""
        assert validator.validate_theme("#10b981").is_valid
        assert validator.validate_theme(None).is_valid
        assert validator.validate_theme("green").has_errors


class TestProfileValidation:
    """Tests for the profile form."""

    def test_unchanged_fields_pass(self, validator):
        """Test None means the field is left alone."""
        assert validator.validate_profile().is_valid

    def test_name_rules(self, validator):
        """Test blank and over-long names."""
        assert validator.validate_profile(name="   ").first_error.issue_type == "missing"
        assert validator.validate_profile(name="n" * (MAX_NAME_LENGTH + 1)).first_error.issue_type == "too_long"
        assert validator.validate_profile(name="Ana L.").is_valid

    def test_monthly_income(self, validator):
        """Test income may be zero but not negative or fractional cents."""
        assert validator.validate_profile(monthly_income=Decimal("0")).is_valid
        assert validator.validate_profile(monthly_income="-1").first_error.field == "monthly_income"
        assert validator.validate_profile(monthly_income="1.005").first_error.issue_type == "invalid_format"


class TestValidationError:
    """Tests for InputValidationError and summaries."""

    def test_message_is_first_error(self, validator):
        """Test the exception message."""
        error = InputValidationError(validator.validate_login("", ""))
        assert str(error) == REQUIRED_FIELDS_MESSAGE

    def test_summary(self, validator):
        """Test the inline summary text."""
        result = validator.validate_transaction("", "10", "expense", "food", date.today() + timedelta(days=5))
        summary = validator.get_user_friendly_summary(result)
        assert "Description is required." in summary
        assert "future" in summary
