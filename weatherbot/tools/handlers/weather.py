"""Handler for the getWeather tool."""

import json
from dataclasses import asdict

from weatherbot.tools.open_meteo import get_weather
from weatherbot.tools.tool import Tool, parse_coordinates


class WeatherTool(Tool):
    """Fetch current weather conditions for coordinates."""

    name = "getWeather"
    description = "Get the current weather for a latitude/longitude pair"
    args_hint = "lat, long"

    async def run(self, parameter: str) -> str:
        lat, long = parse_coordinates(parameter, self.name)
        print(f"  🔧 getWeather: {lat}, {long}", flush=True)
        weather = await get_weather(lat, long)
        return json.dumps(asdict(weather))
