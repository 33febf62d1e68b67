"""
Shared Response Models
Request and response formats for the location API

Every response extends BaseResponse:
- status: "success" or "error" (REQUIRED)
- error: message when status == "error"

Coordinates are validated here, so an out-of-range latitude never reaches the
pipeline (FastAPI answers 422 instead).
"""
from pydantic import BaseModel, Field
from typing import Any, Dict, List, Optional


class BaseResponse(BaseModel):
    """Base response format"""
    status: str  # "success" or "error"
    error: Optional[str] = None


class PositionModel(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)


class PropertyLocation(BaseModel):
    """Location fields as persisted on the property record."""
    model_config = {"populate_by_name": True}

    latitude: Optional[float] = None
    longitude: Optional[float] = None
    location_code: Optional[str] = Field(None, alias="locationCode")

    def is_empty(self) -> bool:
        return self.latitude is None and self.longitude is None and not (self.location_code or "").strip()


class DeviceFix(BaseModel):
    """What the browser or phone reported for navigator.geolocation."""
    lat: Optional[float] = Field(None, ge=-90.0, le=90.0)
    lng: Optional[float] = Field(None, ge=-180.0, le=180.0)
    error: Optional[str] = None  # e.g. "denied", "timeout"


class ResolveRequest(BaseModel):
    property: PropertyLocation = Field(default_factory=PropertyLocation)
    address: str = ""
    city: str = ""
    state: str = ""
    region: Optional[str] = None
    editable: bool = True
    device: Optional[DeviceFix] = None
    provider: Optional[str] = None


class ResolveResponse(BaseResponse):
    position: Optional[PositionModel] = None
    code: Optional[str] = None
    source: Optional[str] = None
    diagnostic: Optional[Dict[str, Any]] = None
    outside_region: bool = False
    region: Optional[str] = None


class EncodeRequest(BaseModel):
    lat: float = Field(..., ge=-90.0, le=90.0)
    lng: float = Field(..., ge=-180.0, le=180.0)
    code_length: int = Field(11, ge=2, le=15)


class EncodeResponse(BaseResponse):
    code: Optional[str] = None
    cell_size_degrees: Optional[List[float]] = None


class DecodeRequest(BaseModel):
    code: str
    reference: Optional[PositionModel] = None


class DecodeResponse(BaseResponse):
    code: Optional[str] = None
    position: Optional[PositionModel] = None
    is_short: bool = False


class DistanceRequest(BaseModel):
    a: PositionModel
    b: PositionModel
    threshold_km: Optional[float] = Field(None, gt=0.0)


class DistanceResponse(BaseResponse):
    distance_km: Optional[float] = None
    bearing_degrees: Optional[float] = None
    threshold_km: Optional[float] = None
    exceeded: Optional[bool] = None


class RegionsResponse(BaseResponse):
    regions: List[Dict[str, Any]] = []
    default_region: Optional[str] = None
    providers: List[Dict[str, str]] = []


class HealthResponse(BaseResponse):
    """Response model for health check endpoints"""
    version: str
    uptime_seconds: float
    memory_usage_mb: float
    region: str
    geocoder: str
