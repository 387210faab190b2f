"""Linear API client for agent sessions and activities."""

import httpx
from dataclasses import dataclass


LINEAR_API_URL = "https://api.linear.app/graphql"


class LinearAPIError(Exception):
    pass


@dataclass
class LinearActivity:
    id: str
    created_at: str
    content: dict  # {"type": "prompt" | "response" | ..., "body": ...}

    @property
    def type(self) -> str | None:
        return self.content.get("type")


@dataclass
class LinearOrganization:
    id: str
    name: str
    url_key: str


async def _graphql_async(access_token: str, query: str, variables: dict | None = None) -> dict:
    """Execute a GraphQL query against Linear API (async)."""
    headers = {
        "Authorization": f"Bearer {access_token}",
        "Content-Type": "application/json",
    }
    async with httpx.AsyncClient() as client:
        response = await client.post(
            LINEAR_API_URL,
            json={"query": query, "variables": variables or {}},
            headers=headers,
            timeout=30,
        )
        response.raise_for_status()
        data = response.json()
        if "errors" in data:
            raise LinearAPIError(f"Linear API error: {data['errors']}")
        return data["data"]


async def get_viewer_organization(access_token: str) -> LinearOrganization:
    """Fetch the organization the token was granted for."""
    query = """
    query Viewer {
        viewer {
            organization {
                id
                name
                urlKey
            }
        }
    }
    """
    data = await _graphql_async(access_token, query)
    org = data["viewer"]["organization"]
    return LinearOrganization(id=org["id"], name=org["name"], url_key=org["urlKey"])


class LinearClient:
    """Agent session operations, authenticated as the app for one organization."""

    def __init__(self, access_token: str):
        self.access_token = access_token

    async def create_agent_activity(self, agent_session_id: str, content: dict) -> bool:
        """Append an activity to an agent session."""
        mutation = """
        mutation AgentActivityCreate($input: AgentActivityCreateInput!) {
            agentActivityCreate(input: $input) {
                success
            }
        }
        """
        data = await _graphql_async(
            self.access_token,
            mutation,
            {"input": {"agentSessionId": agent_session_id, "content": content}},
        )
        return data["agentActivityCreate"]["success"]

    async def get_session_activities(self, agent_session_id: str) -> list[LinearActivity]:
        """Fetch all activities for an agent session, following pagination cursors.

        Activities are returned in the order Linear pages them (newest first).
        """
        query = """
        query AgentSessionActivities($id: String!, $after: String) {
            agentSession(id: $id) {
                activities(after: $after) {
                    nodes {
                        id
                        createdAt
                        content {
                            ... on AgentActivityPromptContent { type body }
                            ... on AgentActivityResponseContent { type body }
                            ... on AgentActivityThoughtContent { type body }
                            ... on AgentActivityElicitationContent { type body }
                            ... on AgentActivityErrorContent { type body }
                            ... on AgentActivityActionContent { type action parameter result }
                        }
                    }
                    pageInfo {
                        hasNextPage
                        endCursor
                    }
                }
            }
        }
        """
        activities: list[LinearActivity] = []
        cursor = None
        while True:
            data = await _graphql_async(self.access_token, query, {"id": agent_session_id, "after": cursor})
            connection = data["agentSession"]["activities"]
            activities.extend(
                LinearActivity(
                    id=node["id"],
                    created_at=node["createdAt"],
                    content=node.get("content") or {},
                )
                for node in connection["nodes"]
            )
            page_info = connection["pageInfo"]
            if not page_info["hasNextPage"] or not page_info.get("endCursor"):
                break
            cursor = page_info["endCursor"]
        return activities
