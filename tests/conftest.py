"""
Shared fixtures.

No real API calls in tests: the Gemini model is replaced by a fake and
storage is in memory unless a test asks for tmp_path.
"""

import pytest

from finance_tracker.accounts import (
    AccountDirectory,
    BcryptCredentialVerifier,
    SessionManager,
)
from finance_tracker.agents import FinancialAdviceAgent
from finance_tracker.audit import AuditLogger
from finance_tracker.config import AppSettings, GeminiSettings
from finance_tracker.orchestrator import FinanceTracker
from finance_tracker.services.storage import (
    InMemoryKeyValueStore,
    KeyValueAuditStorage,
    KeyValueUserDataStore,
)


class FakeResponse:
    def __init__(self, text):
        self.text = text


class FakeModel:
    """Stands in for genai.GenerativeModel."""

    def __init__(self, text="1. Cook at home.\n2. Cancel unused plans.\n3. Save first.", error=None):
        self.text = text
        self.error = error
        self.prompts = []

    async def generate_content_async(self, prompt):
        self.prompts.append(prompt)
        if self.error:
            raise self.error
        return FakeResponse(self.text)


@pytest.fixture
def app_settings():
    return AppSettings(_env_file=None)


@pytest.fixture
def verifier():
    # Lowest bcrypt cost keeps the suite fast
    return BcryptCredentialVerifier(rounds=4)


@pytest.fixture
def store():
    return InMemoryKeyValueStore()


@pytest.fixture
def model_factory():
    return FakeModel


@pytest.fixture
def fake_model(model_factory):
    return model_factory()


@pytest.fixture
def advisor(fake_model):
    return FinancialAdviceAgent(
        settings=GeminiSettings(_env_file=None, api_key="test-key"),
        model=fake_model,
    )


@pytest.fixture
def directory(store, verifier, app_settings):
    return AccountDirectory(store, verifier, app_settings)


def _build_tracker(store, verifier, app_settings, advisor):
    return FinanceTracker(
        directory=AccountDirectory(store, verifier, app_settings),
        sessions=SessionManager(store),
        user_data=KeyValueUserDataStore(store),
        advisor=advisor,
        audit_logger=AuditLogger(KeyValueAuditStorage(store, max_events=100)),
        app_settings=app_settings,
    )


@pytest.fixture
def make_tracker(store, verifier, app_settings, advisor):
    """Build controllers over the shared store, as after a restart."""

    def make(target_store=None, with_advisor=None):
        return _build_tracker(
            target_store if target_store is not None else store,
            verifier,
            app_settings,
            with_advisor or advisor,
        )

    return make


@pytest.fixture
def tracker(make_tracker):
    return make_tracker()


@pytest.fixture
def logged_in(tracker):
    tracker.register("Ana", "ana@x.com", "secret")
    tracker.login("ana@x.com", "secret")
    return tracker
