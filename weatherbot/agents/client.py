"""Agent loop: drives the model through thoughts and tool calls for one Linear agent session."""

import asyncio
from dataclasses import dataclass
from typing import Protocol

from agents import function_span, generation_span, trace

from weatherbot.activities import (
    Action,
    Activity,
    ActivityType,
    Error,
    is_terminal,
    map_response_to_activity,
)
from weatherbot.agents.model import ModelConfig, complete, get_model_config, parse_model_tag
from weatherbot.agents.prompt import build_system_prompt
from weatherbot.linear import LinearActivity
from weatherbot.tools import execute_action


# Maximum number of iterations for the agent to prevent infinite loops
MAX_ITERATIONS = 10
ITERATION_DELAY_SECONDS = 1.0

MAX_ITERATIONS_MESSAGE = "The agent has reached the maximum number of iterations and will now stop."


class ActivitySink(Protocol):
    """Where activities are read from and written to (Linear, or the console for local runs)."""

    async def create_agent_activity(self, agent_session_id: str, content: dict) -> bool: ...

    async def get_session_activities(self, agent_session_id: str) -> list[LinearActivity]: ...


@dataclass
class LoopState:
    """Progress of one agent loop invocation."""
    iterations: int = 0
    task_complete: bool = False


def messages_from_activities(activities: list[LinearActivity]) -> list[dict]:
    """Turn prior prompt/response activities into chat messages, oldest first.

    Only user prompts and agent responses are carried over; thoughts, actions
    and errors from earlier runs are left out.
    """
    messages = []
    for activity in reversed(activities):
        if activity.type == ActivityType.PROMPT.value:
            role = "user"
        elif activity.type == ActivityType.RESPONSE.value:
            role = "assistant"
        else:
            continue
        messages.append({"role": role, "content": activity.content.get("body", "")})
    return messages


class AgentClient:
    """Runs the agent loop for a session, posting each step as an activity."""

    def __init__(
        self,
        linear: ActivitySink,
        model_config: ModelConfig | None = None,
        iteration_delay: float = ITERATION_DELAY_SECONDS,
    ):
        self.linear = linear
        self.model_config = model_config
        self.iteration_delay = iteration_delay

    async def handle_user_prompt(self, agent_session_id: str, user_prompt: str) -> LoopState:
        """Handle a user prompt by running the agent until it finishes.

        Args:
            agent_session_id: The Linear agent session ID
            user_prompt: Prompt built from the webhook (may be empty)

        Returns:
            The final loop state
        """
        try:
            model_config = self.model_config or get_model_config(parse_model_tag(user_prompt))
        except ValueError as e:
            # A [model=X] tag can pick a model whose API key is not set
            print(f"❌ Agent session {agent_session_id}: {e}", flush=True)
            await self._post(agent_session_id, Error(body=f"Agent error: {e}"))
            return LoopState(task_complete=True)

        print(f"🤖 Agent session {agent_session_id} | Model: {model_config.shorthand}", flush=True)

        with trace("Weatherbot agent", group_id=agent_session_id):
            # Earlier prompts/responses in this session give the model more context
            history = await self.linear.get_session_activities(agent_session_id)

            messages = [{"role": "system", "content": build_system_prompt()}]
            if user_prompt:
                messages.append({"role": "user", "content": user_prompt})
            messages.extend(messages_from_activities(history))

            state = LoopState()
            while not state.task_complete and state.iterations < MAX_ITERATIONS:
                state.iterations += 1
                try:
                    state.task_complete = await self._run_iteration(agent_session_id, messages, model_config)
                except Exception as e:
                    print(f"❌ Agent error on iteration {state.iterations}: {e}", flush=True)
                    await self._post(agent_session_id, Error(body=f"Agent error: {e}"))
                    state.task_complete = True
                    break

                if not state.task_complete:
                    await asyncio.sleep(self.iteration_delay)

            if not state.task_complete:
                print(f"⚠️ Agent stopped after {state.iterations} iterations", flush=True)
                await self._post(agent_session_id, Error(body=MAX_ITERATIONS_MESSAGE))

        return state

    async def _run_iteration(self, agent_session_id: str, messages: list[dict], model_config: ModelConfig) -> bool:
        """Run one model call and act on it. Returns True when the loop should stop."""
        response = await self._call_model(messages, model_config)
        activity = map_response_to_activity(response)

        if isinstance(activity, Action):
            # Announce the tool call, run it, then report the outcome
            await self._post(agent_session_id, activity)
            result = await self._execute_action(activity)

            messages.append({"role": "assistant", "content": response})
            messages.append({"role": "user", "content": f"Tool result: {result}"})

            await self._post(agent_session_id, activity.with_result(result))
            return False

        await self._post(agent_session_id, activity)
        if is_terminal(activity):
            return True

        messages.append({"role": "assistant", "content": response})
        return False

    async def _call_model(self, messages: list[dict], model_config: ModelConfig) -> str:
        with generation_span(input=list(messages), model=model_config.model) as span:
            response = await complete(messages, model_config)
            span.span_data.output = [{"role": "assistant", "content": response}]
        return response

    async def _execute_action(self, action: Action) -> str:
        with function_span(action.action, input=action.parameter) as span:
            result = await execute_action(action.action, action.parameter)
            span.span_data.output = result
        return result

    async def _post(self, agent_session_id: str, activity: Activity):
        await self.linear.create_agent_activity(agent_session_id, activity.to_content())
