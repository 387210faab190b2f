"""Tests for API routes and webhook handling (without LLM calls)."""

import hashlib
import hmac
import json
import time
import pytest
from unittest.mock import patch, AsyncMock
from urllib.parse import urlparse, parse_qs

from fastapi.testclient import TestClient

from weatherbot import config

WEBHOOK_SECRET = "test-webhook-secret"


def _session_payload(**overrides) -> dict:
    payload = {
        "type": "AgentSessionEvent",
        "action": "created",
        "organizationId": "org-1",
        "webhookTimestamp": int(time.time() * 1000),
        "agentSession": {
            "id": "session-123",
            "issue": {"title": "Weather check"},
            "comment": {"body": "What's the weather in Oslo?"},
        },
    }
    payload.update(overrides)
    return payload


def _post_signed(client: TestClient, payload, secret: str = WEBHOOK_SECRET):
    body = payload if isinstance(payload, bytes) else json.dumps(payload).encode()
    signature = hmac.new(secret.encode(), body, hashlib.sha256).hexdigest()
    return client.post(
        "/webhook",
        content=body,
        headers={"linear-signature": signature, "Content-Type": "application/json"},
    )


@pytest.fixture
def webhook_secret(monkeypatch):
    monkeypatch.setattr(config, "LINEAR_WEBHOOK_SECRET", WEBHOOK_SECRET)


class TestBasicRoutes:
    """Tests for / and /health."""

    def test_health_returns_ok(self):
        from weatherbot.api import app

        with TestClient(app) as client:
            response = client.get("/health")

        assert response.status_code == 200
        assert response.json() == {"status": "ok"}

    def test_root_says_hello(self):
        from weatherbot.api import app

        with TestClient(app) as client:
            response = client.get("/")

        assert response.status_code == 200
        assert "Weather bot says hello" in response.text


class TestWebhookVerification:
    """Tests for rejecting deliveries before any agent work happens."""

    def test_missing_secret_is_server_error(self, monkeypatch):
        from weatherbot.api import app
        monkeypatch.setattr(config, "LINEAR_WEBHOOK_SECRET", None)

        with TestClient(app) as client:
            response = _post_signed(client, _session_payload())

        assert response.status_code == 500

    def test_missing_model_key_is_server_error(self, webhook_secret, monkeypatch):
        from weatherbot.api import app
        monkeypatch.delenv("OPENAI_API_KEY")
        monkeypatch.setattr(config, "AGENT_MODEL", "mini")

        with TestClient(app) as client:
            response = _post_signed(client, _session_payload())

        assert response.status_code == 500

    def test_bad_signature_rejected(self, webhook_secret):
        from weatherbot.api import app

        with patch("weatherbot.api.run_agent_session", new_callable=AsyncMock) as mock_run:
            with TestClient(app) as client:
                response = _post_signed(client, _session_payload(), secret="wrong-secret")

        assert response.status_code == 401
        mock_run.assert_not_called()

    def test_missing_signature_rejected(self, webhook_secret):
        from weatherbot.api import app

        with TestClient(app) as client:
            response = client.post("/webhook", json=_session_payload())

        assert response.status_code == 401

    def test_stale_timestamp_rejected(self, webhook_secret):
        from weatherbot.api import app

        stale = int((time.time() - 3600) * 1000)
        with patch("weatherbot.api.run_agent_session", new_callable=AsyncMock) as mock_run:
            with TestClient(app) as client:
                response = _post_signed(client, _session_payload(webhookTimestamp=stale))

        assert response.status_code == 401
        mock_run.assert_not_called()

    def test_malformed_json_rejected(self, webhook_secret):
        from weatherbot.api import app

        with patch("weatherbot.api.run_agent_session", new_callable=AsyncMock) as mock_run:
            with TestClient(app) as client:
                response = _post_signed(client, b"{not json")

        assert response.status_code == 400
        mock_run.assert_not_called()


class TestAgentSessionWebhook:
    """Tests for queuing the agent loop."""

    def test_session_event_queues_agent(self, webhook_secret):
        from weatherbot.api import app

        with patch("weatherbot.api.get_oauth_token", return_value="org-token"), \
             patch("weatherbot.api.run_agent_session", new_callable=AsyncMock) as mock_run:
            with TestClient(app) as client:
                response = _post_signed(client, _session_payload())

        assert response.status_code == 200
        assert response.json() == {"status": "queued", "agent_session_id": "session-123"}
        mock_run.assert_called_once_with(
            "session-123",
            "Issue: Weather check\n\nTask: What's the weather in Oslo?",
            "org-token",
        )

    def test_missing_token_is_server_error(self, webhook_secret):
        from weatherbot.api import app

        with patch("weatherbot.api.run_agent_session", new_callable=AsyncMock) as mock_run:
            with TestClient(app) as client:
                response = _post_signed(client, _session_payload(organizationId="unknown-org"))

        assert response.status_code == 500
        mock_run.assert_not_called()

    def test_other_event_types_ignored(self, webhook_secret):
        from weatherbot.api import app

        payload = {"type": "Issue", "action": "create", "webhookTimestamp": int(time.time() * 1000), "data": {}}
        with TestClient(app) as client:
            response = _post_signed(client, payload)

        assert response.status_code == 200
        assert response.json()["status"] == "ignored"


class TestUserPrompt:
    """Tests for building the prompt from the webhook payload."""

    def test_issue_and_comment(self):
        from weatherbot.api import generate_user_prompt

        payload = {"agentSession": {"issue": {"title": "Trip"}, "comment": {"body": "Weather in Rome?"}}}
        assert generate_user_prompt(payload) == "Issue: Trip\n\nTask: Weather in Rome?"

    def test_issue_only(self):
        from weatherbot.api import generate_user_prompt

        assert generate_user_prompt({"agentSession": {"issue": {"title": "Weather in Rome"}}}) == "Task: Weather in Rome"

    def test_comment_only(self):
        from weatherbot.api import generate_user_prompt

        payload = {"agentSession": {"issue": None, "comment": {"body": "Time in Tokyo?"}}}
        assert generate_user_prompt(payload) == "Task: Time in Tokyo?"

    def test_nothing(self):
        from weatherbot.api import generate_user_prompt

        assert generate_user_prompt({"agentSession": {}}) == ""


class TestBackgroundRun:
    """Tests for the detached agent task."""

    @pytest.mark.asyncio
    async def test_failures_are_logged_not_raised(self, capsys):
        from weatherbot.api import run_agent_session

        with patch("weatherbot.api.AgentClient") as mock_client_cls:
            mock_client_cls.return_value.handle_user_prompt = AsyncMock(side_effect=RuntimeError("boom"))
            await run_agent_session("session-1", "Task: weather", "token")

        assert "boom" in capsys.readouterr().out


class TestOAuthRoutes:
    """Tests for the OAuth install flow."""

    @pytest.fixture
    def oauth_app(self, monkeypatch):
        monkeypatch.setattr(config, "LINEAR_CLIENT_ID", "client-id")
        monkeypatch.setattr(config, "LINEAR_CLIENT_SECRET", "client-secret")

    def test_authorize_not_configured(self, monkeypatch):
        from weatherbot.api import app
        monkeypatch.setattr(config, "LINEAR_CLIENT_ID", None)

        with TestClient(app) as client:
            response = client.get("/oauth/authorize", follow_redirects=False)

        assert response.status_code == 500

    def test_authorize_redirects_to_linear(self, oauth_app):
        from weatherbot.api import app

        with TestClient(app) as client:
            response = client.get("/oauth/authorize", follow_redirects=False)

        assert response.status_code == 302
        location = urlparse(response.headers["location"])
        params = parse_qs(location.query)
        assert location.netloc == "linear.app"
        assert params["client_id"] == ["client-id"]
        assert params["actor"] == ["app"]
        assert params["response_type"] == ["code"]
        assert params["state"][0]

    def test_callback_exchanges_code(self, oauth_app):
        from weatherbot.api import app
        from weatherbot.oauth import OAuthToken

        with patch("weatherbot.api.exchange_code", new_callable=AsyncMock) as mock_exchange:
            mock_exchange.return_value = OAuthToken(organization_id="org-1", access_token="tok")
            with TestClient(app) as client:
                authorize = client.get("/oauth/authorize", follow_redirects=False)
                state = parse_qs(urlparse(authorize.headers["location"]).query)["state"][0]
                response = client.get(f"/oauth/callback?code=abc&state={state}")

        assert response.status_code == 200
        assert "org-1" in response.text
        mock_exchange.assert_called_once_with("abc")

    def test_callback_rejects_state_mismatch(self, oauth_app):
        from weatherbot.api import app

        with patch("weatherbot.api.exchange_code", new_callable=AsyncMock) as mock_exchange:
            with TestClient(app) as client:
                client.get("/oauth/authorize", follow_redirects=False)
                response = client.get("/oauth/callback?code=abc&state=forged")

        assert response.status_code == 400
        mock_exchange.assert_not_called()

    def test_callback_requires_code(self, oauth_app):
        from weatherbot.api import app

        with TestClient(app) as client:
            response = client.get("/oauth/callback")

        assert response.status_code == 400
