"""Tests for the advice gateway (fake model, no network)."""

import asyncio
import pytest
from datetime import date
from decimal import Decimal

from finance_tracker.agents import (
    ADVICE_UNAVAILABLE_MESSAGE,
    CREDENTIAL_NOT_FOUND_MESSAGE,
    FinancialAdviceAgent,
    MissingCredentialError,
)
from finance_tracker.config import GeminiSettings
from finance_tracker.models.account import UserProfile
from finance_tracker.models.finance import (
    AdviceSnapshot,
    FinancialGoal,
    Transaction,
    TransactionType,
)


@pytest.fixture
def snapshot():
    return AdviceSnapshot(
        transactions=[
            Transaction(
                description="Salary",
                amount=Decimal("1000"),
                category="salary",
                type=TransactionType.INCOME,
                date=date(2024, 12, 1),
            ),
            Transaction(
                description="Market",
                amount=Decimal("300"),
                category="food",
                type=TransactionType.EXPENSE,
                date=date(2024, 12, 2),
            ),
        ],
        goals=[FinancialGoal(
            name="Trip",
            target_amount=Decimal("1000"),
            current_amount=Decimal("250"),
            deadline=date(2025, 6, 1),
        )],
        profile=UserProfile(name="Ana", email="ana@x.com"),
    )


@pytest.fixture
def no_key_settings(monkeypatch):
    monkeypatch.delenv("GEMINI_API_KEY", raising=False)
    monkeypatch.delenv("API_KEY", raising=False)
    return GeminiSettings(_env_file=None)


class TestPrompt:
    """Tests for build_prompt."""

    def test_prompt_contains_figures(self, advisor, snapshot):
        """Test totals, categories and goals are in the prompt."""
        prompt = advisor.build_prompt(snapshot)
        assert "User: Ana" in prompt
        assert "Total income: R$ 1000.00" in prompt
        assert "Total expenses: R$ 300.00" in prompt
        assert "Current balance: R$ 700.00" in prompt
        assert "- food: R$ 300.00" in prompt
        assert "- Trip: R$ 750.00 remaining" in prompt
        assert "3 short" in prompt

    def test_prompt_is_deterministic(self, advisor, snapshot):
        """Test the same snapshot gives the same prompt."""
        assert advisor.build_prompt(snapshot) == advisor.build_prompt(snapshot)

    def test_empty_snapshot(self, advisor):
        """Test a user with no data."""
        prompt = advisor.build_prompt(AdviceSnapshot(profile=UserProfile(name="Ana", email="a@x.com")))
        assert "no expenses recorded" in prompt
        assert "no goals yet" in prompt


class TestRequestAdvice:
    """Tests for request_advice outcomes."""

    def test_success(self, advisor, fake_model, snapshot):
        """Test model text is returned."""
        response = asyncio.run(advisor.request_advice(snapshot))
        assert response.success is True
        assert response.text == fake_model.text
        assert len(fake_model.prompts) == 1

    def test_missing_credential(self, no_key_settings, model_factory, snapshot):
        """Test a missing key yields the fixed message without raising."""
        agent = FinancialAdviceAgent(settings=no_key_settings, model=model_factory())
        response = asyncio.run(agent.request_advice(snapshot))
        assert response.success is False
        assert response.text == CREDENTIAL_NOT_FOUND_MESSAGE
        assert response.error_code == "missing_credential"

    def test_missing_credential_from_generate(self, no_key_settings, snapshot):
        """Test generate itself raises for a missing key."""
        agent = FinancialAdviceAgent(settings=no_key_settings)
        with pytest.raises(MissingCredentialError):
            asyncio.run(agent.generate(snapshot))

    def test_model_failure(self, model_factory, snapshot):
        """Test a failing call yields the fallback message."""
        model = model_factory(error=ConnectionError("offline"))
        agent = FinancialAdviceAgent(
            settings=GeminiSettings(_env_file=None, api_key="test-key"),
            model=model,
        )
        response = asyncio.run(agent.request_advice(snapshot))
        assert response.success is False
        assert response.text == ADVICE_UNAVAILABLE_MESSAGE
        assert len(model.prompts) == 1  # no retries

    def test_empty_response(self, model_factory, snapshot):
        """Test blank model output counts as failure."""
        agent = FinancialAdviceAgent(
            settings=GeminiSettings(_env_file=None, api_key="test-key"),
            model=model_factory(text="   "),
        )
        response = asyncio.run(agent.request_advice(snapshot))
        assert response.text == ADVICE_UNAVAILABLE_MESSAGE
        assert response.error_code == "request_failed"
