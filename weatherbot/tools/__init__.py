"""Tools the agent can call from an ACTION activity."""

from .tool import Tool, ToolError, MissingParameterError, InvalidParameterError
from .registry import (
    InvalidToolNameError,
    execute_action,
    get_all_tools,
    get_tool,
    is_tool_name,
    list_tools,
)

__all__ = [
    "Tool",
    "ToolError",
    "MissingParameterError",
    "InvalidParameterError",
    "InvalidToolNameError",
    "execute_action",
    "get_all_tools",
    "get_tool",
    "is_tool_name",
    "list_tools",
]
