"""Tests for the Streamlit pages (in-memory controller, fake model)."""

import asyncio
import html
import pytest
from datetime import date, timedelta
from pathlib import Path

from streamlit.testing.v1 import AppTest

from finance_tracker.agents import FinancialAdviceAgent
from finance_tracker.config import GeminiSettings


APP_PATH = Path(__file__).resolve().parents[1] / "app" / "main.py"

MARKUP = "<img src=x onerror=alert(1)>"


@pytest.fixture
def open_app():
    """Run the app with an existing controller in the browser session."""

    def run(tracker, page=None):
        app = AppTest.from_file(str(APP_PATH), default_timeout=30)
        app.session_state["tracker"] = tracker
        app.run()
        if page:
            app.sidebar.radio[0].set_value(page).run()
        assert not app.exception
        return app

    return run


def html_blocks(app):
    return [block.value for block in app.markdown if block.allow_html]


class TestUserText:
    """Tests that model replies and user input are shown as text."""

    def test_advice_is_not_rendered_as_html(self, make_tracker, model_factory, open_app):
        """Test markup in the assistant reply is not injected into the page."""
        advisor = FinancialAdviceAgent(
            settings=GeminiSettings(_env_file=None, api_key="test-key"),
            model=model_factory(text=f"{MARKUP} Cook at home."),
        )
        tracker = make_tracker(with_advisor=advisor)
        tracker.register("Ana", "ana@x.com", "secret")
        tracker.login("ana@x.com", "secret")
        asyncio.run(tracker.request_advice())

        app = open_app(tracker)

        assert not any(MARKUP in block for block in html_blocks(app))
        assert any("Cook at home." in block.value for block in app.markdown if not block.allow_html)

    def test_goal_name_is_escaped(self, logged_in, open_app):
        """Test goal names are escaped in the colored heading."""
        logged_in.add_goal(MARKUP, "100", date.today() + timedelta(days=30))

        app = open_app(logged_in, page="🎯 Goals")

        blocks = html_blocks(app)
        assert not any(MARKUP in block for block in blocks)
        assert any(html.escape(MARKUP) in block for block in blocks)
