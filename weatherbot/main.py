import asyncio
import uuid

from dotenv import load_dotenv
from agents.tracing import add_trace_processor

load_dotenv(override=True)

from weatherbot.tracing import ConsoleTracer
from weatherbot.agents import AgentClient
from weatherbot.linear import LinearActivity


ACTIVITY_ICONS = {
    "thought": "💭",
    "action": "🔧",
    "response": "💬",
    "elicitation": "❓",
    "error": "❌",
}


class ConsoleSession:
    """Stand-in for a Linear agent session that prints activities instead of posting them."""

    def __init__(self):
        self.activities: list[dict] = []

    async def create_agent_activity(self, agent_session_id: str, content: dict) -> bool:
        self.activities.append(content)
        icon = ACTIVITY_ICONS.get(content["type"], "·")
        if content["type"] == "action":
            result = content.get("result")
            suffix = f" → {result}" if result is not None else ""
            print(f"{icon} {content['action']}({content.get('parameter') or ''}){suffix}", flush=True)
        else:
            print(f"{icon} {content['body']}", flush=True)
        return True

    async def get_session_activities(self, agent_session_id: str) -> list[LinearActivity]:
        # Local sessions have no history
        return []


async def cmd_chat(args):
    """Run the agent loop locally for a single prompt."""
    # Add console tracer for real-time logging (api.py adds its own for `serve`)
    add_trace_processor(ConsoleTracer())
    print("🔍 Starting local agent session...\n")
    session = ConsoleSession()
    agent = AgentClient(session, iteration_delay=args.delay)
    state = await agent.handle_user_prompt(f"local-{uuid.uuid4()}", args.prompt)
    print("\n" + "=" * 80)
    print(f"Finished after {state.iterations} iterations, {len(session.activities)} activities")


def main():
    import argparse

    parser = argparse.ArgumentParser(description="Linear weather agent")
    subparsers = parser.add_subparsers(dest="command", required=True)

    # Serve command (API mode)
    serve_parser = subparsers.add_parser("serve", help="Run API server for Linear webhooks")
    serve_parser.add_argument("--host", default="0.0.0.0", help="Host to bind to (default: 0.0.0.0)")
    serve_parser.add_argument("--port", "-p", type=int, default=8000, help="Port to listen on (default: 8000)")

    # Chat command (local run, nothing posted to Linear)
    chat_parser = subparsers.add_parser("chat", help="Run the agent locally and print its activities")
    chat_parser.add_argument("--prompt", "-p", required=True, help="Question for the agent (supports [model=X])")
    chat_parser.add_argument("--delay", type=float, default=1.0, help="Seconds between iterations (default: 1)")

    args = parser.parse_args()

    if args.command == "chat":
        asyncio.run(cmd_chat(args))
    elif args.command == "serve":
        from weatherbot.api import run_server
        run_server(host=args.host, port=args.port)


if __name__ == "__main__":
    main()
