"""
Location Source Resolver
Picks the initial canonical position of a property from competing sources.

Trust order (first usable source wins):
    1. stored coordinate on the property record
    2. stored location code without a coordinate
    3. live device GPS (editable sessions only), cross-checked against the
       geocoded address
    4. geocoded address alone
    5. the deployment region's centre

Every source is optional and every failure falls through to the next step;
resolve() never raises for an unavailable source.
"""
from __future__ import annotations

import asyncio
import logging
import math
from typing import Awaitable, Optional, Tuple, TypeVar, Union

from pinpoint.config import settings
from pinpoint.config.regions import Region, get_region
from pinpoint.pipelines.mapping.calculators.haversine_calculator import HaversineCalculator
from pinpoint.services.geocoding.base import (
    GeocodingClient,
    GeolocationClient,
    GeolocationUnavailable,
    compose_query,
)
from . import codec
from .types import (
    ConflictReport,
    Diagnostic,
    DiagnosticKind,
    LocationSource,
    Position,
    ResolutionOutcome,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

PriorPosition = Union[Position, Tuple[float, float], None]


class SourceResolver:
    """
    Resolves one ResolutionOutcome per property-location session.

    Holds no state between calls: no cached GPS fix or geocoding result is
    shared across sessions.
    """

    def __init__(
        self,
        geocoder: GeocodingClient,
        geolocator: GeolocationClient,
        *,
        region: Optional[Region] = None,
        conflict_threshold_km: Optional[float] = None,
        geolocation_timeout_s: Optional[float] = None,
        geocoding_timeout_s: Optional[float] = None,
    ) -> None:
        self.geocoder = geocoder
        self.geolocator = geolocator
        self.region = region or get_region()
        self.conflict_threshold_km = (
            conflict_threshold_km if conflict_threshold_km is not None else settings.CONFLICT_THRESHOLD_KM
        )
        self.geolocation_timeout_s = (
            geolocation_timeout_s if geolocation_timeout_s is not None else settings.GEOLOCATION_TIMEOUT_S
        )
        self.geocoding_timeout_s = (
            geocoding_timeout_s if geocoding_timeout_s is not None else settings.GEOCODING_TIMEOUT_S
        )

    async def resolve(
        self,
        prior_position: PriorPosition = None,
        prior_code: Optional[str] = None,
        address: str = "",
        city: str = "",
        state: str = "",
        editable: bool = True,
    ) -> ResolutionOutcome:
        stored, stored_invalid = self._coerce_prior(prior_position)

        # 1. Stored coordinate
        if stored is not None:
            logger.info(f"📍 RESOLVER ► using stored coordinate {stored.as_tuple()}")
            return self._outcome(stored, DiagnosticKind.GPS_CONFIRMED, LocationSource.STORED,
                                 code=self._stored_code(stored, prior_code))

        # 2. Stored code
        if prior_code and prior_code.strip():
            decoded = codec.decode(prior_code)
            if decoded is not None:
                logger.info(f"📍 RESOLVER ► using stored code {prior_code.strip()!r}")
                return self._outcome(decoded, DiagnosticKind.GPS_CONFIRMED, LocationSource.CODE,
                                     code=codec.encode_position(decoded))
            logger.warning(f"⚠️ RESOLVER ► stored code {prior_code!r} does not decode, falling through")

        # 3 + 4. Live signals, issued together and joined before deciding
        gps, geocoded = await self._acquire_live_signals(address, city, state, editable)

        if gps is not None:
            if geocoded is None:
                return self._outcome(gps, DiagnosticKind.GPS_CONFIRMED, LocationSource.GPS)
            report = self.compare(gps, geocoded)
            if report.exceeded:
                logger.warning(
                    f"⚠️ RESOLVER ► GPS is {report.distance_km:.2f} km from the geocoded address "
                    f"(threshold {report.threshold_km} km), keeping GPS"
                )
                return self._outcome(gps, DiagnosticKind.GPS_CONFLICT, LocationSource.GPS, conflict=report)
            logger.info(f"✅ RESOLVER ► GPS agrees with address ({report.distance_km:.3f} km)")
            return self._outcome(gps, DiagnosticKind.GPS_CONFIRMED, LocationSource.GPS)

        if geocoded is not None:
            return self._outcome(geocoded, DiagnosticKind.GEOCODED_APPROXIMATE, LocationSource.GEOCODED)

        # 5. Fallback
        kind = DiagnosticKind.INVALID if stored_invalid else DiagnosticKind.FALLBACK
        center = Position(*self.region.center)
        logger.warning(f"⚠️ RESOLVER ► no source resolved, falling back to {self.region.name} centre")
        return self._outcome(center, kind, LocationSource.FALLBACK)

    def compare(self, gps: Position, geocoded: Position) -> ConflictReport:
        distance = HaversineCalculator.distance_km(gps, geocoded)
        return ConflictReport(
            distance_km=distance,
            threshold_km=self.conflict_threshold_km,
            exceeded=distance > self.conflict_threshold_km,
        )

    async def _acquire_live_signals(
        self, address: str, city: str, state: str, editable: bool
    ) -> Tuple[Optional[Position], Optional[Position]]:
        gps_task: Awaitable[Optional[Position]] = (
            self._bounded(self._locate_device(), self.geolocation_timeout_s, "geolocation")
            if editable
            else _none()
        )
        geocode_task: Awaitable[Optional[Position]] = (
            self._bounded(self.geocoder.geocode(address, city, state), self.geocoding_timeout_s, "geocoding")
            if compose_query(address, city, state)
            else _none()
        )
        gps, geocoded = await asyncio.gather(gps_task, geocode_task)
        return gps, geocoded

    async def _locate_device(self) -> Optional[Position]:
        try:
            return await self.geolocator.get_current_position(int(self.geolocation_timeout_s * 1000))
        except GeolocationUnavailable as e:
            logger.info(f"📡 RESOLVER ► device location unavailable: {e.reason}")
            return None

    @staticmethod
    async def _bounded(awaitable: Awaitable[T], timeout_s: float, label: str) -> Optional[T]:
        """Await one source; a timeout or failure means "unavailable"."""
        try:
            return await asyncio.wait_for(awaitable, timeout=timeout_s)
        except asyncio.TimeoutError:
            logger.warning(f"⏱️ RESOLVER ► {label} timed out after {timeout_s}s")
        except Exception as e:
            logger.warning(f"⚠️ RESOLVER ► {label} failed: {e}")
        return None

    @staticmethod
    def _coerce_prior(prior: PriorPosition) -> Tuple[Optional[Position], bool]:
        """(usable position, whether an unusable one was supplied)."""
        if prior is None:
            return None, False
        if isinstance(prior, Position):
            return prior, False
        try:
            lat, lng = prior
        except (TypeError, ValueError):
            logger.warning(f"⚠️ RESOLVER ► unreadable stored coordinate {prior!r}")
            return None, True
        if lat is None and lng is None:
            return None, False
        try:
            lat, lng = float(lat), float(lng)
        except (TypeError, ValueError):
            logger.warning(f"⚠️ RESOLVER ► unreadable stored coordinate {prior!r}")
            return None, True
        if not (math.isfinite(lat) and math.isfinite(lng)):
            logger.warning(f"⚠️ RESOLVER ► discarding non-finite stored coordinate {prior!r}")
            return None, True
        try:
            return Position(lat, lng), False
        except ValueError as e:
            logger.warning(f"⚠️ RESOLVER ► discarding stored coordinate: {e}")
            return None, True

    def _stored_code(self, stored: Position, prior_code: Optional[str]) -> str:
        """Keep the stored code only if it is canonical and still points at the stored coordinate."""
        if prior_code:
            text = prior_code.strip().upper()
            decoded = codec.decode(text) if codec.is_canonical(text) else None
            if decoded is not None and HaversineCalculator.distance_km(decoded, stored) <= codec.PRECISION_TOLERANCE_KM:
                return text
            logger.info(f"📍 RESOLVER ► re-encoding stored code {prior_code!r} from the stored coordinate")
        return codec.encode_position(stored)

    def _outcome(
        self,
        position: Position,
        kind: DiagnosticKind,
        source: LocationSource,
        *,
        code: Optional[str] = None,
        conflict: Optional[ConflictReport] = None,
    ) -> ResolutionOutcome:
        return ResolutionOutcome(
            position=position,
            code=code if code is not None else codec.encode_position(position),
            diagnostic=Diagnostic.of(kind, conflict),
            source=source,
            outside_region=not self.region.contains(position.lat, position.lng),
        )


async def _none() -> None:
    return None


async def resolve_initial_location(
    prior_position: PriorPosition = None,
    prior_code: Optional[str] = None,
    address: str = "",
    city: str = "",
    state: str = "",
    editable: bool = True,
    *,
    geocoder: GeocodingClient,
    geolocator: GeolocationClient,
    region: Optional[Region] = None,
) -> ResolutionOutcome:
    """Resolve with settings-driven thresholds and timeouts."""
    resolver = SourceResolver(geocoder, geolocator, region=region)
    return await resolver.resolve(prior_position, prior_code, address, city, state, editable)
