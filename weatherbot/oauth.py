"""Linear OAuth flow and per-organization token storage."""

import asyncio
import json
import secrets
from dataclasses import dataclass, asdict
from datetime import datetime
from pathlib import Path
from urllib.parse import urlencode

import httpx

from weatherbot import config
from weatherbot.linear import get_viewer_organization


LINEAR_AUTHORIZE_URL = "https://linear.app/oauth/authorize"
LINEAR_TOKEN_URL = "https://api.linear.app/oauth/token"


class OAuthError(Exception):
    pass


@dataclass
class OAuthToken:
    organization_id: str
    access_token: str
    scope: str = ""
    stored_at: str = ""


class TokenStore:
    """JSON-file token store keyed by organization id, with progressive saving."""

    def __init__(self, path: Path):
        self.path = path
        self.lock = asyncio.Lock()
        self.tokens = self._load()

    def _load(self) -> dict:
        if not self.path.exists():
            return {}
        return json.loads(self.path.read_text())

    def _save(self):
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(json.dumps(self.tokens, indent=2, default=str))

    def get(self, organization_id: str) -> OAuthToken | None:
        entry = self.tokens.get(organization_id)
        if not entry:
            return None
        return OAuthToken(**entry)

    async def put(self, token: OAuthToken):
        """Store a token and save to disk."""
        async with self.lock:
            token.stored_at = datetime.now().isoformat()
            self.tokens[token.organization_id] = asdict(token)
            self._save()


_store: TokenStore | None = None


def get_token_store() -> TokenStore:
    """Process-wide token store at TOKEN_STORE_PATH."""
    global _store
    if _store is None:
        _store = TokenStore(Path(config.TOKEN_STORE_PATH))
    return _store


def get_oauth_token(organization_id: str | None) -> str | None:
    """Look up the access token for an organization."""
    if not organization_id:
        return None
    token = get_token_store().get(organization_id)
    return token.access_token if token else None


def new_state() -> str:
    return secrets.token_urlsafe(24)


def build_authorize_url(state: str) -> str:
    """Build the Linear authorize URL for installing the app as an agent."""
    params = {
        "client_id": config.LINEAR_CLIENT_ID,
        "redirect_uri": config.LINEAR_REDIRECT_URI,
        "response_type": "code",
        "scope": config.LINEAR_OAUTH_SCOPES,
        "state": state,
        "actor": "app",
    }
    return f"{LINEAR_AUTHORIZE_URL}?{urlencode(params)}"


async def exchange_code(code: str) -> OAuthToken:
    """Exchange an authorization code for a token and store it.

    Raises:
        OAuthError: The token endpoint rejected the code
    """
    async with httpx.AsyncClient() as client:
        response = await client.post(
            LINEAR_TOKEN_URL,
            data={
                "code": code,
                "redirect_uri": config.LINEAR_REDIRECT_URI,
                "client_id": config.LINEAR_CLIENT_ID,
                "client_secret": config.LINEAR_CLIENT_SECRET,
                "grant_type": "authorization_code",
            },
            headers={"Content-Type": "application/x-www-form-urlencoded"},
            timeout=30,
        )
    if response.status_code != 200:
        raise OAuthError(f"Token exchange failed ({response.status_code}): {response.text}")

    data = response.json()
    access_token = data.get("access_token")
    if not access_token:
        raise OAuthError("Token exchange response has no access_token")

    scope = data.get("scope", "")
    if isinstance(scope, list):
        scope = ",".join(scope)

    organization = await get_viewer_organization(access_token)
    token = OAuthToken(
        organization_id=organization.id,
        access_token=access_token,
        scope=scope,
    )
    await get_token_store().put(token)
    print(f"✅ Stored OAuth token for {organization.name} ({organization.id})", flush=True)
    return token
