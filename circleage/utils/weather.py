import asyncio
import logging
from typing import Any, Dict, Tuple

import aiohttp

from circleage.config import Settings, settings

logger = logging.getLogger(__name__)

class WeatherServiceError(Exception):
    """Raised when current weather cannot be fetched or decoded"""

def describe_weather(weather_main: str, description: str) -> Tuple[str, str]:
    """
    Map an OpenWeatherMap condition to an exercise hint
    Returns (message, decorated description)
    """
    weather_main = weather_main.lower()

    if "rain" in weather_main or "thunderstorm" in weather_main:
        return (
            "It is rainy outside. Refrain from going out and try some indoor exercises!",
            f"{description} 🌧️🌧️"
        )
    elif "cloud" in weather_main:
        return (
            "It is a bit cloudy. Enjoy this exercise outdoors or from the comfort of your home!",
            f"{description} ☁️☁️"
        )
    elif "clear" in weather_main:
        return (
            "Clear skies! Enjoy this exercise outdoors or from the comfort of your home!",
            f"{description} 🌤️🌤️"
        )
    return "Keep an eye on the weather and stay active safely!", description

class WeatherService:

    def __init__(self, config: Settings = settings):
        self.api_key = config.WEATHER_API_KEY
        self.api_url = config.WEATHER_API_URL
        self.timeout = aiohttp.ClientTimeout(total=config.HTTP_TIMEOUT_SECONDS)

    async def _fetch_json(self, params: Dict[str, Any]) -> Dict[str, Any]:
        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(self.api_url, params=params) as response:
                response.raise_for_status()
                return await response.json()

    async def get_weather(self, latitude: float, longitude: float) -> Dict[str, Any]:
        """Current weather at a point, with a message suited to outdoor exercise"""
        try:
            data = await self._fetch_json({
                "lat": latitude,
                "lon": longitude,
                "units": "metric",
                "appid": self.api_key or ""
            })

            weather_main = data["weather"][0]["main"]
            message, description = describe_weather(weather_main, data["weather"][0]["description"])

            return {
                "weather_main": weather_main.lower(),
                "description": description,
                "temp": data["main"]["temp"],
                "feels_like": data["main"]["feels_like"],
                "location": data.get("name"),
                "message": message
            }

        except (
            aiohttp.ClientError,
            asyncio.TimeoutError,
            AttributeError,
            KeyError,
            IndexError,
            TypeError,
            ValueError
        ) as e:
            logger.error(f"Error in fetching weather API: {e}")
            raise WeatherServiceError(str(e)) from e

# Global instance
weather_service = WeatherService()
