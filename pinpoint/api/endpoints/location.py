"""
Location API Endpoints
Initial pin resolution, location code encode/decode and source comparison
"""
import logging
from typing import Optional

from fastapi import APIRouter, HTTPException

from pinpoint.config import settings
from pinpoint.config.regions import Region, get_region, iter_regions
from pinpoint.pipelines.location import codec
from pinpoint.pipelines.location.resolver import resolve_initial_location
from pinpoint.pipelines.location.types import Position
from pinpoint.pipelines.mapping.calculators.haversine_calculator import HaversineCalculator
from pinpoint.services.geocoding import (
    GeocodingClient,
    GeolocationClient,
    ReportedFixGeolocationClient,
    UnavailableGeolocationClient,
    get_geocoding_client,
    iter_providers,
)
from pinpoint.utils.response_models import (
    DecodeRequest,
    DecodeResponse,
    DeviceFix,
    DistanceRequest,
    DistanceResponse,
    EncodeRequest,
    EncodeResponse,
    PositionModel,
    RegionsResponse,
    ResolveRequest,
    ResolveResponse,
)

logger = logging.getLogger(__name__)
router = APIRouter()


def _region_or_400(code: Optional[str]) -> Region:
    try:
        return get_region(code)
    except KeyError as e:
        raise HTTPException(status_code=400, detail=str(e.args[0]))


def _geocoder_or_400(provider: Optional[str], region: Region) -> GeocodingClient:
    try:
        return get_geocoding_client(provider, region)
    except KeyError as e:
        raise HTTPException(status_code=400, detail=str(e.args[0]))


def _geolocator_for(device: Optional[DeviceFix]) -> GeolocationClient:
    if device is None:
        return UnavailableGeolocationClient()
    position = None
    if device.lat is not None and device.lng is not None:
        position = Position(device.lat, device.lng)
    return ReportedFixGeolocationClient(position=position, error=device.error)


@router.post("/resolve", response_model=ResolveResponse)
async def resolve_location(request: ResolveRequest) -> ResolveResponse:
    """
    Pick the initial pin for a property form.

    The device fix (if any) is reported by the client; the address is geocoded
    server-side with the configured provider.
    """
    region = _region_or_400(request.region)
    geocoder = _geocoder_or_400(request.provider, region)
    geolocator = _geolocator_for(request.device)

    stored = request.property
    prior = None
    if stored.is_empty():
        logger.info("📍 No stored location on the property")
    elif stored.latitude is not None or stored.longitude is not None:
        prior = (stored.latitude, stored.longitude)

    try:
        logger.info(f"📍 Resolving location (region={region.code}, editable={request.editable})")
        outcome = await resolve_initial_location(
            prior,
            stored.location_code,
            request.address,
            request.city,
            request.state,
            request.editable,
            geocoder=geocoder,
            geolocator=geolocator,
            region=region,
        )
        return ResolveResponse(
            status="success",
            position=PositionModel(lat=outcome.position.lat, lng=outcome.position.lng),
            code=outcome.code,
            source=outcome.source.value,
            diagnostic=outcome.diagnostic.to_dict(),
            outside_region=outcome.outside_region,
            region=region.code,
        )
    except Exception as e:
        logger.error(f"❌ Location resolution failed: {e}")
        return ResolveResponse(status="error", error=f"Location resolution failed: {str(e)}")


@router.post("/encode", response_model=EncodeResponse)
async def encode_location(request: EncodeRequest) -> EncodeResponse:
    try:
        code = codec.encode(request.lat, request.lng, request.code_length)
        size = codec.cell_size_degrees(request.code_length)
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    return EncodeResponse(status="success", code=code, cell_size_degrees=list(size))


@router.post("/decode", response_model=DecodeResponse)
async def decode_location(request: DecodeRequest) -> DecodeResponse:
    """Decode a full code, a short code near a reference, or a legacy "lat,lng" value."""
    text = request.code.strip().upper()
    short = codec.is_short(text)
    if short:
        if request.reference is None:
            raise HTTPException(status_code=400, detail="Short codes need a reference position")
        try:
            text = codec.recover_nearest(text, Position(request.reference.lat, request.reference.lng))
        except ValueError:
            return DecodeResponse(status="error", error="invalid code")

    position = codec.decode(text)
    if position is None:
        logger.info(f"🔎 Rejected location code {request.code!r}")
        return DecodeResponse(status="error", error="invalid code")

    canonical = text if codec.is_full(text) else codec.encode_position(position)
    return DecodeResponse(
        status="success",
        code=canonical,
        position=PositionModel(lat=position.lat, lng=position.lng),
        is_short=short,
    )


@router.post("/distance", response_model=DistanceResponse)
async def compare_positions(request: DistanceRequest) -> DistanceResponse:
    """Great-circle distance between two sources and whether they conflict."""
    a = Position(request.a.lat, request.a.lng)
    b = Position(request.b.lat, request.b.lng)
    threshold = request.threshold_km if request.threshold_km is not None else settings.CONFLICT_THRESHOLD_KM

    distance = HaversineCalculator.distance_km(a, b)
    bearing = HaversineCalculator.calculate_bearing(a.lat, a.lng, b.lat, b.lng)
    return DistanceResponse(
        status="success",
        distance_km=distance,
        bearing_degrees=bearing,
        threshold_km=threshold,
        exceeded=distance > threshold,
    )


@router.get("/regions", response_model=RegionsResponse)
async def list_regions() -> RegionsResponse:
    return RegionsResponse(
        status="success",
        regions=[region.to_dict() for region in iter_regions()],
        default_region=settings.DEFAULT_REGION,
        providers=[{"id": pid, "name": name} for pid, name in iter_providers()],
    )
