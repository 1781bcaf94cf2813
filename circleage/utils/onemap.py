import logging
import math
from typing import Any, Dict, List, Optional, Sequence

import aiohttp

from circleage.config import Settings, settings
from circleage.core.geofencing import (
    FALLBACK_ORIGIN,
    calculate_distance,
    is_within_singapore,
    parse_lat_lng
)
from circleage.models.navigation import (
    Coordinate,
    DirectionsResult,
    EstimatedRoute,
    FallbackRoute,
    FoundRoute,
    LocationRecord,
    LocationSearchResult,
    POIResult,
    PointOfInterest,
    RouteSummary
)

logger = logging.getLogger(__name__)

ROUTE_FOUND_STATUS = "Found route between points"
POI_RADIUS_KM = 2.0

ESTIMATED_STEPS = [
    "Head towards your destination",
    "Follow main roads and traffic signals",
    "You have arrived at your destination"
]
FALLBACK_STEPS = ["Route calculation unavailable - showing estimated distance"]

def format_duration(seconds: float) -> str:
    """Format a duration in seconds as "Xh Ym", or "Ym" when under an hour"""
    hours = int(seconds // 3600)
    minutes = int((seconds % 3600) // 60)

    if hours > 0:
        return f"{hours}h {minutes}m"
    return f"{minutes}m"

def _format_meters(value: Any) -> str:
    if isinstance(value, float) and value.is_integer():
        return str(int(value))
    return str(value)

def parse_route_instructions(instructions: Sequence[Sequence[Any]]) -> List[str]:
    """
    Render OneMap route instructions as readable steps

    Each instruction is a positional record whose first item is the text and
    second item the distance in meters.
    """
    steps = []
    for index, instruction in enumerate(instructions):
        text = instruction[0] if len(instruction) > 0 and instruction[0] else f"Step {index + 1}"
        distance = instruction[1] if len(instruction) > 1 else None

        if distance:
            steps.append(f"{text} ({_format_meters(distance)}m)")
        else:
            steps.append(text)
    return steps

def estimate_travel_minutes(distance_km: float) -> int:
    """Rough estimate of 3 minutes per km, never below 5 minutes"""
    # Round half up
    return max(math.floor(distance_km * 3 + 0.5), 5)

class OneMapService:
    """OneMap API client for Singapore location search, routing and themes"""

    def __init__(self, config: Settings = settings):
        self.base_url = config.ONEMAP_BASE_URL
        self.routing_url = config.ONEMAP_ROUTING_URL
        self.token = config.ONEMAP_API_TOKEN
        self.timeout = aiohttp.ClientTimeout(total=config.HTTP_TIMEOUT_SECONDS)

    async def _fetch_json(self, url: str, params: Optional[Dict[str, str]] = None) -> Any:
        """GET a OneMap endpoint and decode the JSON body"""
        headers = {"Accept": "application/json"}
        if self.token:
            headers["Authorization"] = self.token

        async with aiohttp.ClientSession(timeout=self.timeout) as session:
            async with session.get(url, params=params, headers=headers) as response:
                return await response.json(content_type=None)

    async def search_location(self, address: str) -> LocationSearchResult:
        """
        Search for location coordinates

        Args:
            address: Free text address or place name
        """
        try:
            data = await self._fetch_json(
                f"{self.base_url}/common/elastic/search",
                params={
                    "searchVal": address,
                    "returnGeom": "Y",
                    "getAddrDetails": "Y",
                    "pageNum": "1"
                }
            )
            logger.debug(f"OneMap search response for {address!r}: {data}")

            results = data.get("results") or []
            if data.get("found", 0) > 0 and results:
                result = results[0]
                return LocationSearchResult(
                    success=True,
                    location=LocationRecord(
                        latitude=float(result["LATITUDE"]),
                        longitude=float(result["LONGITUDE"]),
                        address=result.get("ADDRESS", ""),
                        postal=result.get("POSTAL") or "",
                        building=result.get("BUILDING") or "",
                        road=result.get("ROAD_NAME") or ""
                    )
                )

            return LocationSearchResult(
                success=False,
                error="Location not found in Singapore",
                details=data
            )

        except Exception as e:
            logger.error(f"OneMap search error: {e}")
            return LocationSearchResult(
                success=False,
                error=str(e) or "Failed to search location"
            )

    async def get_directions(
        self,
        start: Coordinate,
        end: Coordinate,
        route_type: str = "drive"
    ) -> DirectionsResult:
        """
        Get directions between two points

        Tries the requested mode, then walk, then drive, and settles for a
        straight-line estimate when none of them yields a route.

        Args:
            start: Origin coordinates
            end: Destination coordinates
            route_type: drive, walk or pt (public transport)
        """
        if not is_within_singapore(start.latitude, start.longitude):
            logger.warning(f"Start coordinates outside Singapore bounds: {start}")
            start = Coordinate(latitude=FALLBACK_ORIGIN[0], longitude=FALLBACK_ORIGIN[1])

        if not is_within_singapore(end.latitude, end.longitude):
            return DirectionsResult(
                success=False,
                error="Destination coordinates are outside Singapore bounds"
            )

        try:
            start_coords = f"{start.latitude:.6f},{start.longitude:.6f}"
            end_coords = f"{end.latitude:.6f},{end.longitude:.6f}"

            # Not deduplicated: a "walk" request is attempted twice
            for current_route_type in [route_type, "walk", "drive"]:
                data = await self._fetch_json(
                    f"{self.routing_url}/route",
                    params={
                        "start": start_coords,
                        "end": end_coords,
                        "routeType": current_route_type
                    }
                )

                if data.get("status_message") == ROUTE_FOUND_STATUS:
                    return DirectionsResult(
                        success=True,
                        route=self._build_found_route(data, current_route_type)
                    )
                elif current_route_type == route_type:
                    logger.warning(f"{current_route_type} routing failed: {data.get('status_message')}")

            distance = calculate_distance(start.latitude, start.longitude, end.latitude, end.longitude)
            estimated_minutes = estimate_travel_minutes(distance)

            return DirectionsResult(
                success=True,
                route=EstimatedRoute(
                    distance=f"{distance:.2f} km",
                    distance_km=round(distance, 2),
                    duration=f"{estimated_minutes}m",
                    steps=list(ESTIMATED_STEPS),
                    summary=RouteSummary(
                        total_distance=distance * 1000,
                        total_time=estimated_minutes * 60
                    )
                )
            )

        except Exception as e:
            logger.error(f"OneMap routing error: {e}")

            distance = calculate_distance(start.latitude, start.longitude, end.latitude, end.longitude)
            estimated_minutes = estimate_travel_minutes(distance)

            return DirectionsResult(
                success=True,
                route=FallbackRoute(
                    distance=f"{distance:.2f} km",
                    distance_km=round(distance, 2),
                    duration=f"{estimated_minutes}m",
                    steps=list(FALLBACK_STEPS)
                )
            )

    def _build_found_route(self, data: Dict[str, Any], route_type: str) -> FoundRoute:
        summary = data["route_summary"]
        total_distance = summary["total_distance"]
        total_time = summary["total_time"]

        return FoundRoute(
            distance=f"{total_distance / 1000:.2f} km",
            distance_km=round(total_distance / 1000, 2),
            duration=format_duration(total_time),
            steps=parse_route_instructions(data.get("route_instructions") or []),
            route_type=route_type,
            geometry=data.get("route_geometry") or None,
            summary=RouteSummary(total_distance=total_distance, total_time=total_time)
        )

    async def get_walking_directions(self, start: Coordinate, end: Coordinate) -> DirectionsResult:
        return await self.get_directions(start, end, "walk")

    async def get_public_transport_directions(self, start: Coordinate, end: Coordinate) -> DirectionsResult:
        return await self.get_directions(start, end, "pt")

    async def get_nearby_poi(
        self,
        latitude: float,
        longitude: float,
        theme: str = "healthcare"
    ) -> POIResult:
        """
        Get points of interest for a theme within 2km

        Args:
            theme: OneMap theme, e.g. healthcare, hdb, education
        """
        try:
            data = await self._fetch_json(
                f"{self.base_url}/public/themesvc/{theme}",
                params={"returnGeom": "Y"}
            )

            pois: List[PointOfInterest] = []
            for poi in data.get("SrchResults") or []:
                coords = parse_lat_lng(poi.get("LatLng"))
                if coords is None:
                    continue

                if calculate_distance(latitude, longitude, coords[0], coords[1]) <= POI_RADIUS_KM:
                    pois.append(PointOfInterest(
                        name=poi.get("NAME"),
                        description=poi.get("DESCRIPTION"),
                        coordinates=poi["LatLng"],
                        address=f"{poi.get('ADDRESSBLOCKHOUSENUMBER')} {poi.get('ADDRESSSTREETNAME')}"
                    ))

            return POIResult(success=True, pois=pois)

        except Exception as e:
            logger.error(f"OneMap POI error: {e}")
            return POIResult(success=False, error=str(e))

# Global instance
onemap_service = OneMapService()
