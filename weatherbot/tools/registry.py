"""Tool registry - lists and dispatches agent tools."""

from weatherbot.tools.tool import Tool
from weatherbot.tools.handlers import CoordinatesTool, WeatherTool, TimeTool


class InvalidToolNameError(ValueError):
    pass


def get_all_tools() -> list[Tool]:
    """Get instances of all registered tools."""
    return [
        CoordinatesTool(),
        WeatherTool(),
        TimeTool(),
    ]


def _get_tool_map() -> dict[str, Tool]:
    """Build a map of tool name -> handler."""
    return {tool.name: tool for tool in get_all_tools()}


def is_tool_name(name: str) -> bool:
    """Check whether the model referenced a registered tool (case-sensitive)."""
    return name in _get_tool_map()


def get_tool(name: str) -> Tool:
    """Look up a tool by name, raising InvalidToolNameError if unknown."""
    tool = _get_tool_map().get(name)
    if not tool:
        raise InvalidToolNameError(f"Invalid tool name: {name}")
    return tool


async def execute_action(action: str, parameter: str | None) -> str:
    """Execute a tool call and return its result.

    Args:
        action: Tool name from the model's ACTION line
        parameter: Raw argument text, or None

    Returns:
        The tool result as text.
    """
    return await get_tool(action).execute(parameter)


def list_tools() -> list[tuple[str, str]]:
    """List all tools as (usage, description) pairs."""
    return [(f"{tool.name}({tool.args_hint})", tool.description) for tool in get_all_tools()]
