"""AI Agents package."""

from finance_tracker.agents.advice_agent import (
    ADVICE_UNAVAILABLE_MESSAGE,
    CREDENTIAL_NOT_FOUND_MESSAGE,
    AdviceRequestError,
    AdviceResponse,
    FinancialAdviceAgent,
    GatewayError,
    MissingCredentialError,
)

__all__ = [
    "ADVICE_UNAVAILABLE_MESSAGE",
    "CREDENTIAL_NOT_FOUND_MESSAGE",
    "AdviceRequestError",
    "AdviceResponse",
    "FinancialAdviceAgent",
    "GatewayError",
    "MissingCredentialError",
]
