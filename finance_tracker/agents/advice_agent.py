"""
AI Advice Agent for FB finance

DESIGN DECISION: The LLM only ever sees a snapshot summary built here.
1. Totals and breakdowns are computed deterministically BEFORE the call
2. The prompt carries figures, not raw storage
3. The model's job is wording, not arithmetic

CRITICAL BOUNDARIES:
- CAN: Turn the user's figures into short saving tips
- CANNOT: Read or write storage
- CANNOT: Crash the caller. Every failure becomes a fixed fallback message

No retries: one failed attempt is reported immediately.
"""

from decimal import Decimal
from typing import Any, Optional

import google.generativeai as genai
import structlog
from pydantic import BaseModel, Field

from finance_tracker.analytics import (
    compute_category_breakdown,
    compute_totals,
    remaining_for_goal,
)
from finance_tracker.config import GeminiSettings, get_settings
from finance_tracker.models.finance import AdviceSnapshot, TransactionType


logger = structlog.get_logger(__name__)


CREDENTIAL_NOT_FOUND_MESSAGE = "API key not found. Please check your settings."
ADVICE_UNAVAILABLE_MESSAGE = "Could not analyse your data right now. Check your connection."

SYSTEM_INSTRUCTION = (
    "You are the virtual assistant of FB finance. Be direct and motivating. "
    "Analyse the numbers and point out where the user can cut spending "
    "to reach their goals."
)


class GatewayError(Exception):
    """Base exception for advice requests."""

    error_code = "gateway_error"


class MissingCredentialError(GatewayError):
    """No API key is configured."""

    error_code = "missing_credential"


class AdviceRequestError(GatewayError):
    """The model call failed or returned nothing usable."""

    error_code = "request_failed"


class AdviceResponse(BaseModel):
    """
    Outcome of one advice request.

    text is always safe to show: on failure it holds the fallback message.
    """

    text: str = Field(
        description="Advice or a user-visible fallback message"
    )
    success: bool = Field(
        description="Whether the text came from the model"
    )
    error_code: Optional[str] = None


def _money(currency: str, value: Decimal) -> str:
    return f"{currency} {value:.2f}"


class FinancialAdviceAgent:
    """
    Advice gateway backed by Google Gemini.

    RESPONSIBILITIES:
    - Build the prompt from a snapshot
    - Make exactly one model call per request
    - Map every failure to a fixed message
    """

    def __init__(
        self,
        settings: Optional[GeminiSettings] = None,
        model: Optional[Any] = None,
    ):
        self._settings = settings or get_settings().gemini
        self._model = model

    def _get_model(self) -> Any:
        """Configure Google Generative AI on first use."""
        if not self._settings.has_credentials:
            raise MissingCredentialError("GEMINI_API_KEY is not configured")

        if self._model is None:
            genai.configure(api_key=self._settings.api_key)
            self._model = genai.GenerativeModel(
                model_name=self._settings.model_name,
                generation_config={
                    "temperature": self._settings.temperature,
                    "max_output_tokens": self._settings.max_tokens,
                },
                system_instruction=SYSTEM_INSTRUCTION,
            )
        return self._model

    def build_prompt(self, snapshot: AdviceSnapshot) -> str:
        """
        Summarize the snapshot as plain text for the model.

        This is DETERMINISTIC - no LLM involvement.
        """
        profile = snapshot.profile
        currency = profile.currency
        totals = compute_totals(snapshot.transactions, profile.monthly_income)
        breakdown = compute_category_breakdown(
            snapshot.transactions,
            TransactionType.EXPENSE,
        )

        category_lines = [
            f"- {category}: {_money(currency, total)}"
            for category, total in breakdown.items()
        ] or ["- no expenses recorded"]

        goal_lines = [
            f"- {goal.name}: {_money(currency, remaining_for_goal(goal))} remaining"
            for goal in snapshot.goals
        ] or ["- no goals yet"]

        return "\n".join([
            "FINANCIAL DATA (FB finance):",
            f"User: {profile.name}",
            f"Base income: {_money(currency, profile.monthly_income)}",
            f"Total income: {_money(currency, totals.income)}",
            f"Total expenses: {_money(currency, totals.expenses)}",
            f"Current balance: {_money(currency, totals.balance)}",
            "",
            "Spending by category:",
            *category_lines,
            "",
            "Goals:",
            *goal_lines,
            "",
            "Based on this real data, give 3 short, motivating tips "
            "to save more this month.",
        ])

    async def generate(self, snapshot: AdviceSnapshot) -> str:
        """
        Ask the model for advice.

        Raises:
            MissingCredentialError: If no API key is configured
            AdviceRequestError: If the call fails or returns no text
        """
        model = self._get_model()
        prompt = self.build_prompt(snapshot)

        try:
            response = await model.generate_content_async(prompt)
            text = (response.text or "").strip()
        except Exception as e:
            raise AdviceRequestError(str(e)) from e

        if not text:
            raise AdviceRequestError("Model returned an empty response")
        return text

    async def request_advice(self, snapshot: AdviceSnapshot) -> AdviceResponse:
        """
        Get advice for a snapshot, never raising a gateway failure.

        Missing credentials and failed calls come back as fallback text.
        """
        try:
            text = await self.generate(snapshot)
        except MissingCredentialError as e:
            logger.warning("advice_credential_missing")
            return AdviceResponse(
                text=CREDENTIAL_NOT_FOUND_MESSAGE,
                success=False,
                error_code=e.error_code,
            )
        except AdviceRequestError as e:
            logger.warning("advice_request_failed", error=str(e))
            return AdviceResponse(
                text=ADVICE_UNAVAILABLE_MESSAGE,
                success=False,
                error_code=e.error_code,
            )

        return AdviceResponse(text=text, success=True)
