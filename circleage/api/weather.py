from fastapi import APIRouter, Depends, HTTPException, Query
from typing import Any

from circleage.api.auth import get_current_user_id
from circleage.utils.weather import WeatherService, WeatherServiceError, weather_service

router = APIRouter(dependencies=[Depends(get_current_user_id)])

def get_weather_service() -> WeatherService:
    return weather_service

@router.get("")
async def get_weather(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    weather: WeatherService = Depends(get_weather_service)
) -> dict[str, Any]:
    try:
        return await weather.get_weather(latitude, longitude)
    except WeatherServiceError:
        raise HTTPException(status_code=502, detail="Weather service unavailable")
