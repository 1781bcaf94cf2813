from fastapi import APIRouter, Depends, Query

from circleage.models.navigation import (
    DirectionsRequest,
    DirectionsResult,
    LocationSearchResult,
    POIResult
)
from circleage.api.auth import get_current_user_id
from circleage.utils.onemap import OneMapService, onemap_service

router = APIRouter(dependencies=[Depends(get_current_user_id)])

def get_onemap_service() -> OneMapService:
    return onemap_service

@router.get("/search", response_model=LocationSearchResult, response_model_exclude_none=True)
async def search_location(
    address: str = Query(..., min_length=1),
    onemap: OneMapService = Depends(get_onemap_service)
):
    return await onemap.search_location(address)

@router.post("/directions", response_model=DirectionsResult)
async def get_directions(
    request: DirectionsRequest,
    onemap: OneMapService = Depends(get_onemap_service)
):
    return await onemap.get_directions(request.start, request.end, request.route_type)

@router.post("/directions/walking", response_model=DirectionsResult)
async def get_walking_directions(
    request: DirectionsRequest,
    onemap: OneMapService = Depends(get_onemap_service)
):
    return await onemap.get_walking_directions(request.start, request.end)

@router.post("/directions/transit", response_model=DirectionsResult)
async def get_public_transport_directions(
    request: DirectionsRequest,
    onemap: OneMapService = Depends(get_onemap_service)
):
    return await onemap.get_public_transport_directions(request.start, request.end)

@router.get("/poi", response_model=POIResult, response_model_exclude_none=True)
async def get_nearby_poi(
    latitude: float = Query(..., ge=-90, le=90),
    longitude: float = Query(..., ge=-180, le=180),
    theme: str = "healthcare",
    onemap: OneMapService = Depends(get_onemap_service)
):
    return await onemap.get_nearby_poi(latitude, longitude, theme)
