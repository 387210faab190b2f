"""Base tool interface."""

import math
from abc import ABC, abstractmethod


class ToolError(ValueError):
    """Raised when a tool cannot run with the parameter it was given."""


class MissingParameterError(ToolError):
    pass


class InvalidParameterError(ToolError):
    pass


def parse_coordinates(parameter: str, tool_name: str) -> tuple[float, float]:
    """Parse a "lat, long" parameter into two finite floats."""
    parts = []
    for raw in parameter.split(","):
        try:
            value = float(raw.strip())
        except ValueError:
            break
        # float() accepts "nan" and "inf"
        if not math.isfinite(value):
            break
        parts.append(value)
    if len(parts) < 2:
        raise InvalidParameterError(f"Invalid parameter for {tool_name} action")
    return parts[0], parts[1]


class Tool(ABC):
    """Base class for agent tools.

    To create a new tool:
    1. Subclass Tool
    2. Set `name` class attribute (e.g., "getWeather") - this is what the model calls
    3. Implement `run()`
    4. Register in registry.py
    """

    # Override in subclass - exact identifier used in "ACTION: name(args)"
    name: str = ""
    description: str = ""
    args_hint: str = ""  # e.g., "lat, long" - shown in the system prompt

    async def execute(self, parameter: str | None) -> str:
        """Validate the parameter and run the tool.

        Returns:
            The tool result as text, ready to hand back to the model
        """
        if not parameter:
            raise MissingParameterError("Parameter is required for action execution")
        return await self.run(parameter)

    @abstractmethod
    async def run(self, parameter: str) -> str:
        """Run the tool.

        Args:
            parameter: Raw text between the parentheses of the model's call
        """
        pass
