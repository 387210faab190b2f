from .coordinates import CoordinatesTool
from .weather import WeatherTool
from .local_time import TimeTool

__all__ = ["CoordinatesTool", "WeatherTool", "TimeTool"]
