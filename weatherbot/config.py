import os

from dotenv import load_dotenv

load_dotenv(override=True)

# Webhook signing secret from the Linear app settings
LINEAR_WEBHOOK_SECRET = os.getenv("LINEAR_WEBHOOK_SECRET")
# Max allowed drift between webhookTimestamp and now
WEBHOOK_TOLERANCE_SECONDS = int(os.getenv("WEBHOOK_TOLERANCE_SECONDS", "60"))

# OAuth app credentials (Linear > Settings > API > OAuth applications)
LINEAR_CLIENT_ID = os.getenv("LINEAR_CLIENT_ID")
LINEAR_CLIENT_SECRET = os.getenv("LINEAR_CLIENT_SECRET")
LINEAR_REDIRECT_URI = os.getenv("LINEAR_REDIRECT_URI", "http://localhost:8000/oauth/callback")
LINEAR_OAUTH_SCOPES = os.getenv("LINEAR_OAUTH_SCOPES", "read,write,app:assignable,app:mentionable")

TOKEN_STORE_PATH = os.getenv("TOKEN_STORE_PATH", "./data/oauth_tokens.json")

# Model shorthand (see weatherbot.agents.model.MODEL_MAP)
AGENT_MODEL = os.getenv("AGENT_MODEL", "mini")


def oauth_configured() -> bool:
    """Check if the OAuth app credentials are set."""
    return bool(LINEAR_CLIENT_ID and LINEAR_CLIENT_SECRET)
