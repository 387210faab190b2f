"""Handler for the getCoordinates tool."""

import json
from dataclasses import asdict

from weatherbot.tools.open_meteo import get_coordinates
from weatherbot.tools.tool import Tool


class CoordinatesTool(Tool):
    """Resolve a place name to latitude/longitude."""

    name = "getCoordinates"
    description = "Look up the latitude and longitude of a city or place"
    args_hint = '"place name"'

    async def run(self, parameter: str) -> str:
        place = parameter.replace('"', "").strip()
        print(f"  🔧 getCoordinates: {place}", flush=True)
        coordinates = await get_coordinates(place)
        return json.dumps(asdict(coordinates))
