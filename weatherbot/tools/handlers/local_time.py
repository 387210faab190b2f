"""Handler for the getTime tool."""

from weatherbot.tools.open_meteo import get_time
from weatherbot.tools.tool import Tool, parse_coordinates


class TimeTool(Tool):
    """Fetch the local time for coordinates."""

    name = "getTime"
    description = "Get the current local time for a latitude/longitude pair"
    args_hint = "lat, long"

    async def run(self, parameter: str) -> str:
        lat, long = parse_coordinates(parameter, self.name)
        print(f"  🔧 getTime: {lat}, {long}", flush=True)
        # Plain text, not JSON
        return await get_time(lat, long)
