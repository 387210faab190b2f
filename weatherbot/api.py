"""FastAPI server for Linear agent session webhooks and the OAuth install flow."""

import hashlib
import hmac
import json
import time
import traceback
from contextlib import asynccontextmanager

from fastapi import FastAPI, Request, BackgroundTasks, HTTPException
from fastapi.responses import PlainTextResponse, RedirectResponse

from weatherbot import config

# Set up tracing before running any agents
from agents.tracing import add_trace_processor
from weatherbot.tracing import ConsoleTracer
add_trace_processor(ConsoleTracer())

from weatherbot.agents import AgentClient, get_model_config
from weatherbot.linear import LinearClient
from weatherbot.oauth import (
    OAuthError,
    build_authorize_url,
    exchange_code,
    get_oauth_token,
    get_token_store,
    new_state,
)


SIGNATURE_HEADER = "linear-signature"
TIMESTAMP_FIELD = "webhookTimestamp"
STATE_COOKIE = "linear_oauth_state"


@asynccontextmanager
async def lifespan(app: FastAPI):
    """App lifespan handler."""
    print("🚀 Weatherbot API starting...", flush=True)
    print(f"   Webhook secret: {'✓ set' if config.LINEAR_WEBHOOK_SECRET else '✗ missing (LINEAR_WEBHOOK_SECRET)'}", flush=True)
    print(f"   OAuth app: {'✓ set' if config.oauth_configured() else '✗ missing (LINEAR_CLIENT_ID/LINEAR_CLIENT_SECRET)'}", flush=True)
    print(f"   Installed organizations: {len(get_token_store().tokens)}", flush=True)
    print(f"   Default model: {config.AGENT_MODEL}", flush=True)

    yield

    print("👋 Shutting down...", flush=True)


app = FastAPI(
    title="Weatherbot",
    description="Linear agent that answers weather and local time questions",
    lifespan=lifespan,
)


@app.get("/", response_class=PlainTextResponse)
async def root():
    return "Weather bot says hello! 🌤️"


@app.get("/health")
async def health():
    """Health check endpoint."""
    return {"status": "ok"}


@app.get("/oauth/authorize")
async def oauth_authorize():
    """Redirect to Linear to install the app in an organization."""
    if not config.oauth_configured():
        raise HTTPException(status_code=500, detail="OAuth app not configured")

    state = new_state()
    response = RedirectResponse(build_authorize_url(state), status_code=302)
    response.set_cookie(STATE_COOKIE, state, max_age=600, httponly=True, samesite="lax")
    return response


@app.get("/oauth/callback")
async def oauth_callback(request: Request, code: str | None = None, state: str | None = None):
    """Exchange the authorization code and store the organization's token."""
    if not code:
        raise HTTPException(status_code=400, detail="Missing authorization code")

    expected_state = request.cookies.get(STATE_COOKIE)
    if not state or not expected_state or not hmac.compare_digest(state, expected_state):
        print("❌ [OAUTH] State mismatch", flush=True)
        raise HTTPException(status_code=400, detail="Invalid OAuth state")

    try:
        token = await exchange_code(code)
    except OAuthError as e:
        print(f"❌ [OAUTH] {e}", flush=True)
        raise HTTPException(status_code=502, detail="Token exchange failed")

    response = PlainTextResponse(f"Weatherbot installed for organization {token.organization_id}. You can close this tab.")
    response.delete_cookie(STATE_COOKIE)
    return response


def _verify_signature(body: bytes, signature: str | None) -> bool:
    """Verify Linear webhook signature (HMAC-SHA256 of the raw body)."""
    if not signature:
        return False
    expected = hmac.new(
        config.LINEAR_WEBHOOK_SECRET.encode(),
        body,
        hashlib.sha256,
    ).hexdigest()
    return hmac.compare_digest(expected, signature)


def _verify_timestamp(timestamp) -> bool:
    """Reject deliveries whose webhookTimestamp (ms) is outside the tolerance window."""
    if not isinstance(timestamp, (int, float)):
        return False
    return abs(time.time() * 1000 - timestamp) <= config.WEBHOOK_TOLERANCE_SECONDS * 1000


def generate_user_prompt(payload: dict) -> str:
    """Build the agent's prompt from the session's issue title and comment."""
    session = payload.get("agentSession") or {}
    issue_title = (session.get("issue") or {}).get("title")
    comment_body = (session.get("comment") or {}).get("body")
    if issue_title and comment_body:
        return f"Issue: {issue_title}\n\nTask: {comment_body}"
    if issue_title:
        return f"Task: {issue_title}"
    if comment_body:
        return f"Task: {comment_body}"
    return ""


@app.post("/webhook")
async def linear_webhook(request: Request, background_tasks: BackgroundTasks):
    """Handle Linear webhook events."""
    if not config.LINEAR_WEBHOOK_SECRET:
        raise HTTPException(status_code=500, detail="Webhook secret not configured")

    try:
        get_model_config()
    except ValueError as e:
        print(f"❌ [WH] {e}", flush=True)
        raise HTTPException(status_code=500, detail="Model API key not configured")

    body = await request.body()
    if not _verify_signature(body, request.headers.get(SIGNATURE_HEADER)):
        print("❌ [WH] Signature verification failed", flush=True)
        raise HTTPException(status_code=401, detail="Invalid signature")

    try:
        payload = json.loads(body)
    except json.JSONDecodeError:
        print("❌ [WH] Malformed JSON payload", flush=True)
        raise HTTPException(status_code=400, detail="Malformed JSON")

    if not isinstance(payload, dict) or not _verify_timestamp(payload.get(TIMESTAMP_FIELD)):
        print("❌ [WH] Webhook timestamp outside tolerance", flush=True)
        raise HTTPException(status_code=401, detail="Invalid webhook timestamp")

    event_type = payload.get("type")
    action = payload.get("action")
    if event_type != "AgentSessionEvent":
        print(f"· [WH] {event_type}/{action} → ignored", flush=True)
        return {"status": "ignored", "reason": f"Unhandled event: {event_type}/{action}"}

    return _handle_agent_session_event(payload, background_tasks)


def _handle_agent_session_event(payload: dict, background_tasks: BackgroundTasks):
    """Queue the agent loop for a session event."""
    session_id = (payload.get("agentSession") or {}).get("id")
    if not session_id:
        print("· [WH] AgentSessionEvent but missing session ID → error", flush=True)
        raise HTTPException(status_code=400, detail="Missing agent session ID")

    organization_id = payload.get("organizationId")
    token = get_oauth_token(organization_id)
    if not token:
        print(f"❌ [WH] No OAuth token for organization {organization_id}", flush=True)
        raise HTTPException(status_code=500, detail="Linear OAuth token not found")

    user_prompt = generate_user_prompt(payload)

    print(f"", flush=True)
    print(f"▶ [WH] AGENT SESSION {payload.get('action')}: {session_id}", flush=True)
    print(f"       Prompt: {user_prompt[:60]}{'...' if len(user_prompt) > 60 else ''}", flush=True)

    # Runs after the response is sent; never awaited, never cancelled
    background_tasks.add_task(run_agent_session, session_id, user_prompt, token)

    return {"status": "queued", "agent_session_id": session_id}


async def run_agent_session(agent_session_id: str, user_prompt: str, access_token: str):
    """Run the agent loop for a session. Failures are logged only."""
    try:
        agent = AgentClient(LinearClient(access_token))
        state = await agent.handle_user_prompt(agent_session_id, user_prompt)
        print(f"✅ Session {agent_session_id} finished after {state.iterations} iterations", flush=True)
    except Exception as e:
        print(f"❌ Error handling webhook for session {agent_session_id}: {e}", flush=True)
        traceback.print_exc()


def run_server(host: str = "0.0.0.0", port: int = 8000):
    """Run the API server."""
    import uvicorn
    print(f"🚀 Starting server on {host}:{port}")
    uvicorn.run(app, host=host, port=port, log_level="info")


if __name__ == "__main__":
    run_server()
