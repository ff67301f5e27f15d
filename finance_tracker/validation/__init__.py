"""Input validation package."""

from finance_tracker.validation.validator import InputValidationError, InputValidator

__all__ = ["InputValidationError", "InputValidator"]
