from __future__ import annotations

import math
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, Optional


def clip_latitude(lat: float) -> float:
    """Clamp a latitude into [-90, 90]."""
    return min(90.0, max(-90.0, lat))


def normalize_longitude(lng: float) -> float:
    """Wrap a longitude into (-180, 180]."""
    if -180.0 < lng <= 180.0:
        return lng
    wrapped = lng % 360.0
    if wrapped > 180.0:
        wrapped -= 360.0
    return wrapped


@dataclass(frozen=True)
class Position:
    """
    A (latitude, longitude) pair in decimal degrees.

    Immutable; construction validates the range, so any Position in hand is
    usable. Use Position.clamped() to normalise raw pointer input instead.
    """

    lat: float
    lng: float

    def __post_init__(self) -> None:
        if not (math.isfinite(self.lat) and math.isfinite(self.lng)):
            raise ValueError(f"Non-finite coordinate: ({self.lat}, {self.lng})")
        if not -90.0 <= self.lat <= 90.0:
            raise ValueError(f"Invalid latitude: {self.lat} (must be -90 to 90)")
        if not -180.0 <= self.lng <= 180.0:
            raise ValueError(f"Invalid longitude: {self.lng} (must be -180 to 180)")

    @classmethod
    def clamped(cls, lat: float, lng: float) -> "Position":
        """Latitude clamped to [-90, 90], longitude wrapped into (-180, 180]."""
        if not (math.isfinite(lat) and math.isfinite(lng)):
            raise ValueError(f"Non-finite coordinate: ({lat}, {lng})")
        return cls(clip_latitude(float(lat)), normalize_longitude(float(lng)))

    def as_tuple(self) -> tuple[float, float]:
        return (self.lat, self.lng)


@dataclass(frozen=True)
class ConflictReport:
    """Disagreement between two independently derived positions."""

    distance_km: float
    threshold_km: float
    exceeded: bool


class DiagnosticKind(str, Enum):
    GPS_CONFIRMED = "gps_confirmed"
    GPS_CONFLICT = "gps_conflict"
    GEOCODED_APPROXIMATE = "geocoded_approximate"
    FALLBACK = "fallback"
    INVALID = "invalid"


class LocationSource(str, Enum):
    """Which resolution step produced the canonical position."""

    STORED = "stored"
    CODE = "code"
    GPS = "gps"
    GEOCODED = "geocoded"
    FALLBACK = "fallback"


_MESSAGES: Dict[DiagnosticKind, str] = {
    DiagnosticKind.GPS_CONFIRMED: "Location confirmed.",
    DiagnosticKind.GPS_CONFLICT: (
        "Your device is {distance_km:.1f} km away from the address. "
        "Adjust the pin or paste the correct location code."
    ),
    DiagnosticKind.GEOCODED_APPROXIMATE: (
        "Approximate location based on the address. Drag the pin or paste the exact location code."
    ),
    DiagnosticKind.FALLBACK: "Could not resolve the address. Please place the pin manually.",
    DiagnosticKind.INVALID: "The saved location is not valid. Please place the pin manually.",
}


@dataclass(frozen=True)
class Diagnostic:
    """
    Tagged result of a resolution run.

    Only GPS_CONFLICT carries a ConflictReport; the message is the text shown
    to the field user.
    """

    kind: DiagnosticKind
    message: str
    conflict: Optional[ConflictReport] = None

    @classmethod
    def of(cls, kind: DiagnosticKind, conflict: Optional[ConflictReport] = None) -> "Diagnostic":
        if kind is DiagnosticKind.GPS_CONFLICT:
            if conflict is None:
                raise ValueError("GPS_CONFLICT requires a ConflictReport")
            return cls(kind, _MESSAGES[kind].format(distance_km=conflict.distance_km), conflict)
        return cls(kind, _MESSAGES[kind])

    def to_dict(self) -> Dict[str, Any]:
        payload: Dict[str, Any] = {"kind": self.kind.value, "message": self.message}
        if self.conflict is not None:
            payload["distance_km"] = self.conflict.distance_km
            payload["threshold_km"] = self.conflict.threshold_km
            payload["exceeded"] = self.conflict.exceeded
        return payload


@dataclass(frozen=True)
class ResolutionOutcome:
    position: Position
    code: str
    diagnostic: Diagnostic
    source: LocationSource
    outside_region: bool = False


@dataclass(frozen=True)
class EditorState:
    """
    Snapshot of the position editor.

    The pending_* fields hold raw user keystrokes; they only become canonical
    after a successful submit.
    """

    position: Position
    code: str
    pending_manual_lat: str
    pending_manual_lng: str
    pending_manual_code: str
    last_error: Optional[str] = None
    warning: Optional[str] = None
    diagnostic: Optional[Diagnostic] = None
