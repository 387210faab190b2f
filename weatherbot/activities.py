"""Agent activity types and the parser that maps model output onto them."""

import re
from dataclasses import dataclass
from enum import Enum

from weatherbot.tools import InvalidToolNameError, is_tool_name


class ActivityType(str, Enum):
    THOUGHT = "thought"
    ACTION = "action"
    RESPONSE = "response"
    ELICITATION = "elicitation"
    ERROR = "error"
    PROMPT = "prompt"  # user-authored, only seen in session history


class ActivityParseError(ValueError):
    pass


@dataclass
class Thought:
    body: str
    type = ActivityType.THOUGHT

    def to_content(self) -> dict:
        return {"type": self.type.value, "body": self.body}


@dataclass
class Response:
    body: str
    type = ActivityType.RESPONSE

    def to_content(self) -> dict:
        return {"type": self.type.value, "body": self.body}


@dataclass
class Elicitation:
    body: str
    type = ActivityType.ELICITATION

    def to_content(self) -> dict:
        return {"type": self.type.value, "body": self.body}


@dataclass
class Error:
    body: str
    type = ActivityType.ERROR

    def to_content(self) -> dict:
        return {"type": self.type.value, "body": self.body}


@dataclass
class Action:
    action: str
    parameter: str | None = None
    result: str | None = None
    type = ActivityType.ACTION

    def to_content(self) -> dict:
        content = {"type": self.type.value, "action": self.action, "parameter": self.parameter}
        if self.result is not None:
            content["result"] = self.result
        return content

    def with_result(self, result: str) -> "Action":
        """Outcome record for this action: same tool and parameter, result set."""
        return Action(action=self.action, parameter=self.parameter, result=result)


Activity = Thought | Action | Response | Elicitation | Error

TERMINAL_TYPES = {ActivityType.RESPONSE, ActivityType.ERROR, ActivityType.ELICITATION}

# Checked in this order; first match wins
TYPE_TO_KEYWORD = {
    ActivityType.THOUGHT: "THINKING:",
    ActivityType.ACTION: "ACTION:",
    ActivityType.RESPONSE: "RESPONSE:",
    ActivityType.ELICITATION: "ELICITATION:",
    ActivityType.ERROR: "ERROR:",
}

_BODY_TYPES = {
    ActivityType.THOUGHT: Thought,
    ActivityType.RESPONSE: Response,
    ActivityType.ELICITATION: Elicitation,
    ActivityType.ERROR: Error,
}

ACTION_PATTERN = re.compile(r"ACTION:\s*(\w+)\(([^)]+)\)")


def is_terminal(activity: Activity) -> bool:
    """Whether this activity ends the agent loop."""
    return activity.type in TERMINAL_TYPES


def map_response_to_activity(response: str) -> Activity:
    """Map raw model output to an activity by its keyword prefix.

    Text without a known prefix is treated as a thought. For actions the
    tool name must be registered; the argument text is kept verbatim.

    Raises:
        InvalidToolNameError: ACTION names a tool that is not registered
        ActivityParseError: ACTION prefix without a `name(args)` call
    """
    activity_type = next(
        (t for t, keyword in TYPE_TO_KEYWORD.items() if response.startswith(keyword)),
        ActivityType.THOUGHT,
    )

    if activity_type != ActivityType.ACTION:
        keyword = TYPE_TO_KEYWORD[activity_type]
        body = response[len(keyword):] if response.startswith(keyword) else response
        return _BODY_TYPES[activity_type](body=body.strip())

    match = ACTION_PATTERN.search(response)
    if not match:
        raise ActivityParseError(f"Invalid action format: {response[:80]}")

    tool_name, params = match.groups()
    if not is_tool_name(tool_name):
        raise InvalidToolNameError(f"Invalid tool name: {tool_name}")
    return Action(action=tool_name, parameter=params or None)
