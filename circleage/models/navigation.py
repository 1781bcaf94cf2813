from typing import Annotated, Any, Dict, List, Literal, Optional, Union

from pydantic import BaseModel, Field, SerializerFunctionWrapHandler, model_serializer

class Coordinate(BaseModel):
    latitude: float
    longitude: float

class DirectionsRequest(BaseModel):
    start: Coordinate
    end: Coordinate
    route_type: str = "drive"  # drive, walk, pt

class RouteSummary(BaseModel):
    total_distance: float  # meters
    total_time: float  # seconds

class FoundRoute(BaseModel):
    """Route returned by the routing service for one of the candidate modes"""
    kind: Literal["found"] = "found"
    distance: str
    distance_km: float
    duration: str
    steps: List[str]
    route_type: str
    fallback: Literal[False] = False
    geometry: Optional[Any] = None
    summary: RouteSummary

class EstimatedRoute(BaseModel):
    """Straight-line estimate used when every candidate mode was rejected"""
    kind: Literal["estimated"] = "estimated"
    distance: str
    distance_km: float
    duration: str
    steps: List[str]
    route_type: Literal["estimated"] = "estimated"
    fallback: Literal[True] = True
    summary: RouteSummary

class FallbackRoute(BaseModel):
    """Straight-line estimate used when the routing call itself errored"""
    kind: Literal["fallback"] = "fallback"
    distance: str
    distance_km: float
    duration: str
    steps: List[str]
    route_type: Literal["fallback"] = "fallback"
    fallback: Literal[True] = True

Route = Annotated[Union[FoundRoute, EstimatedRoute, FallbackRoute], Field(discriminator="kind")]

class DirectionsResult(BaseModel):
    success: bool
    route: Optional[Route] = None
    error: Optional[str] = None

    @model_serializer(mode="wrap")
    def _omit_unset_outcome(self, handler: SerializerFunctionWrapHandler) -> Dict[str, Any]:
        # Only one of route or error is present; fields inside a route are kept even when null
        data = handler(self)
        return {key: value for key, value in data.items() if value is not None}

class LocationRecord(BaseModel):
    latitude: float
    longitude: float
    address: str
    postal: str = ""
    building: str = ""
    road: str = ""

class LocationSearchResult(BaseModel):
    success: bool
    location: Optional[LocationRecord] = None
    error: Optional[str] = None
    details: Optional[Any] = None

class PointOfInterest(BaseModel):
    name: Optional[str] = None
    description: Optional[str] = None
    coordinates: str
    address: str

class POIResult(BaseModel):
    success: bool
    pois: List[PointOfInterest] = Field(default_factory=list)
    error: Optional[str] = None
