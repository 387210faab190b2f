"""Open-Meteo API client for geocoding, weather and local time lookups."""

import httpx
from dataclasses import dataclass


GEOCODING_URL = "https://geocoding-api.open-meteo.com/v1/search"
FORECAST_URL = "https://api.open-meteo.com/v1/forecast"

CURRENT_WEATHER_FIELDS = "temperature_2m,apparent_temperature,relative_humidity_2m,weather_code,wind_speed_10m"

# WMO weather interpretation codes
WEATHER_CODES = {
    0: "Clear sky",
    1: "Mainly clear",
    2: "Partly cloudy",
    3: "Overcast",
    45: "Fog",
    48: "Depositing rime fog",
    51: "Light drizzle",
    53: "Moderate drizzle",
    55: "Dense drizzle",
    61: "Slight rain",
    63: "Moderate rain",
    65: "Heavy rain",
    71: "Slight snow",
    73: "Moderate snow",
    75: "Heavy snow",
    80: "Rain showers",
    81: "Heavy rain showers",
    82: "Violent rain showers",
    95: "Thunderstorm",
    96: "Thunderstorm with hail",
    99: "Thunderstorm with heavy hail",
}


class LocationNotFoundError(LookupError):
    pass


@dataclass
class Coordinates:
    lat: float
    long: float
    name: str = ""
    country: str = ""


@dataclass
class Weather:
    temperature: float
    apparent_temperature: float | None
    humidity: float | None
    wind_speed: float | None
    conditions: str
    units: dict


async def _get_json(url: str, params: dict) -> dict:
    """GET a JSON document from Open-Meteo."""
    async with httpx.AsyncClient() as client:
        response = await client.get(url, params=params, timeout=30)
        response.raise_for_status()
        data = response.json()
        if data.get("error"):
            raise Exception(f"Open-Meteo API error: {data.get('reason', 'unknown')}")
        return data


async def get_coordinates(place: str) -> Coordinates:
    """Resolve a place name to coordinates (best match only)."""
    data = await _get_json(GEOCODING_URL, {"name": place, "count": 1, "format": "json"})
    results = data.get("results") or []
    if not results:
        raise LocationNotFoundError(f"No location found for '{place}'")
    match = results[0]
    return Coordinates(
        lat=match["latitude"],
        long=match["longitude"],
        name=match.get("name", place),
        country=match.get("country", ""),
    )


async def get_weather(lat: float, long: float) -> Weather:
    """Fetch current weather conditions for coordinates."""
    data = await _get_json(
        FORECAST_URL,
        {"latitude": lat, "longitude": long, "current": CURRENT_WEATHER_FIELDS},
    )
    current = data["current"]
    code = current.get("weather_code")
    return Weather(
        temperature=current["temperature_2m"],
        apparent_temperature=current.get("apparent_temperature"),
        humidity=current.get("relative_humidity_2m"),
        wind_speed=current.get("wind_speed_10m"),
        conditions=WEATHER_CODES.get(code, f"Unknown (code {code})"),
        units=data.get("current_units", {}),
    )


async def get_time(lat: float, long: float) -> str:
    """Fetch the local time at coordinates, as a human-readable string."""
    data = await _get_json(
        FORECAST_URL,
        {"latitude": lat, "longitude": long, "current": "temperature_2m", "timezone": "auto"},
    )
    local_time = data["current"]["time"].replace("T", " ")
    timezone = data.get("timezone", "UTC")
    abbreviation = data.get("timezone_abbreviation")
    zone = f"{timezone} ({abbreviation})" if abbreviation and abbreviation != timezone else timezone
    return f"The current local time is {local_time} in {zone}"
