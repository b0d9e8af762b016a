"""
Pytest configuration & fixtures for the prescription analysis backend.

Key design decisions:
  - Uses sqlite:///:memory: for speed and isolation; a fresh app per test.
  - Forces demo mode through the environment so no test ever reaches
    the network; live-provider tests inject a mocked OpenAI client.
  - Rate limiting is disabled for the test client.
"""

import json
import os
import sys
from types import SimpleNamespace
from unittest import mock

import pytest

# ── 1. Ensure backend package is importable ──
sys.path.insert(0, os.path.join(os.path.dirname(__file__), ".."))

# ── 2. Set test environment BEFORE anything else ──
os.environ["OPENAI_API_KEY"] = ""
os.environ["USE_OPENAI_API"] = "false"
os.environ["DATABASE_URL"] = "sqlite:///:memory:"
os.environ["APP_ENV"] = "testing"

# ── 3. NOW safe to import application modules ──
from rxanalysis.main import create_app
from rxanalysis.database import db as _db
from rxanalysis.services.providers.demo_provider import DemoExtractionProvider
from rxanalysis.services.providers.openai_provider import OpenAIExtractionProvider


TEST_CONFIG = {
    "TESTING": True,
    "SQLALCHEMY_DATABASE_URI": "sqlite:///:memory:",
    "RATELIMIT_ENABLED": False,
}


# ═══════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════

@pytest.fixture
def app():
    """Application in demo mode with an empty database."""
    application = create_app(config_overrides=TEST_CONFIG, provider=DemoExtractionProvider())
    yield application
    with application.app_context():
        _db.session.remove()
        _db.drop_all()


@pytest.fixture
def client(app):
    """Flask test client with database ready."""
    with app.test_client() as c:
        with app.app_context():
            yield c


@pytest.fixture
def app_ctx(app):
    with app.app_context():
        yield app


@pytest.fixture
def demo_provider():
    return DemoExtractionProvider()


@pytest.fixture
def completion():
    """Build the shape of an OpenAI chat completion carrying a payload as content."""
    def _build(payload) -> SimpleNamespace:
        content = payload if isinstance(payload, str) or payload is None else json.dumps(payload)
        return SimpleNamespace(
            choices=[SimpleNamespace(message=SimpleNamespace(content=content))]
        )
    return _build


@pytest.fixture
def fake_openai():
    """A mocked OpenAI client; set .chat.completions.create.return_value/side_effect."""
    return mock.MagicMock()


@pytest.fixture
def live_provider(fake_openai):
    return OpenAIExtractionProvider(api_key="test-key-not-real", client=fake_openai)


@pytest.fixture
def live_client(live_provider):
    """Test client whose app runs the live provider against the mocked client."""
    application = create_app(config_overrides=TEST_CONFIG, provider=live_provider)
    with application.test_client() as c:
        with application.app_context():
            yield c
            _db.session.remove()
            _db.drop_all()
