"""
Utility modules for the CircleAge backend

This package contains clients for third-party services:
- notifications: Twilio SMS alerts with a simulated mode
- onemap: OneMap search, routing with fallback estimates, and themed POIs
- weather: OpenWeatherMap current conditions and exercise hints
"""

from .notifications import (
    SMSDeliveryError,
    SMSService,
    TwilioClient,
    format_phone_number,
    is_valid_phone_number
)

from .onemap import (
    OneMapService,
    format_duration,
    parse_route_instructions,
    onemap_service
)

from .weather import (
    WeatherService,
    WeatherServiceError,
    describe_weather,
    weather_service
)

__all__ = [
    # Notification services
    "SMSDeliveryError",
    "SMSService",
    "TwilioClient",
    "format_phone_number",
    "is_valid_phone_number",

    # OneMap
    "OneMapService",
    "format_duration",
    "parse_route_instructions",
    "onemap_service",

    # Weather
    "WeatherService",
    "WeatherServiceError",
    "describe_weather",
    "weather_service"
]
