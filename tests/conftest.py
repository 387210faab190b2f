"""Pytest configuration and shared fixtures."""

import os
import pytest

# Set dummy env vars before importing modules that require them
os.environ.setdefault("OPENAI_API_KEY", "test-key")
os.environ.setdefault("ANTHROPIC_API_KEY", "test-key")
# Keep spans local; nothing is exported during tests
os.environ.setdefault("OPENAI_AGENTS_DISABLE_TRACING", "1")


class FakeSession:
    """Records posted activities and serves canned session history."""

    def __init__(self, history=None):
        self.history = history or []
        self.posted: list[dict] = []

    async def create_agent_activity(self, agent_session_id: str, content: dict) -> bool:
        self.posted.append(content)
        return True

    async def get_session_activities(self, agent_session_id: str):
        return self.history


@pytest.fixture
def fake_session():
    return FakeSession()


@pytest.fixture(autouse=True)
def token_store_path(tmp_path, monkeypatch):
    """Point the OAuth token store at a temporary file."""
    from weatherbot import config, oauth
    path = tmp_path / "data" / "oauth_tokens.json"
    monkeypatch.setattr(config, "TOKEN_STORE_PATH", str(path))
    # Drop any store built by an earlier test so the next lookup uses this path
    monkeypatch.setattr(oauth, "_store", None)
    return path


@pytest.fixture
def make_session():
    """Build a FakeSession with the given (newest-first) history."""
    return FakeSession
