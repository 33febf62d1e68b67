"""
Location Code Codec
Open Location Code ("plus code") handling for property positions, on top of
the openlocationcode reference library.

Format (version 1): plus codes of DEFAULT_CODE_LENGTH significant digits,
a cell of 0.000025 deg latitude x 0.00003125 deg longitude (~2.8m x 3.5m at
the equator). Stored and edited codes always use this length.

Precision: a decoded default-length code is the centre of its cell, so it lies
within PRECISION_TOLERANCE_KM of the encoded position.

Version 0 values written by earlier builds were plain "lat,lng" decimal
strings. decode() still accepts them; encode() only produces version 1.
"""
from __future__ import annotations

import logging
import math
import re
from typing import Optional, Tuple

from openlocationcode import openlocationcode as olc

from .types import Position, clip_latitude, normalize_longitude

logger = logging.getLogger(__name__)

FORMAT_VERSION = 1

SEPARATOR = olc.SEPARATOR_
PADDING = olc.PADDING_CHARACTER_
MAX_DIGITS = olc.MAX_DIGIT_COUNT_

DEFAULT_CODE_LENGTH = 11

# Half-diagonal of a default-length cell is ~2.3m; 5m leaves room for rounding
PRECISION_TOLERANCE_KM = 0.005

_LEGACY_RE = re.compile(r"^([-+]?[0-9]+(?:\.[0-9]+)?)\s*,\s*([-+]?[0-9]+(?:\.[0-9]+)?)$")


def _check_length(code_length: int) -> None:
    # openlocationcode silently truncates lengths above the maximum
    if isinstance(code_length, bool) or not isinstance(code_length, int) or code_length > MAX_DIGITS:
        raise ValueError(f"Invalid code length: {code_length}")


def cell_size_degrees(code_length: int = DEFAULT_CODE_LENGTH) -> Tuple[float, float]:
    """(latitude, longitude) extent in degrees of a cell of the given length."""
    area = olc.decode(encode(0.0, 0.0, code_length))
    return area.latitudeHi - area.latitudeLo, area.longitudeHi - area.longitudeLo


def digit_count(code: str) -> int:
    return len(code.replace(SEPARATOR, "").replace(PADDING, ""))


def encode(lat: float, lng: float, code_length: int = DEFAULT_CODE_LENGTH) -> str:
    """
    Encode a coordinate as a location code.

    Out-of-range input is normalised first: latitude clamped to [-90, 90],
    longitude wrapped into (-180, 180].

    Raises:
        ValueError: non-finite coordinate or unsupported code length
    """
    if not (math.isfinite(lat) and math.isfinite(lng)):
        raise ValueError(f"Cannot encode non-finite coordinate: ({lat}, {lng})")
    _check_length(code_length)
    return olc.encode(clip_latitude(float(lat)), normalize_longitude(float(lng)), code_length)


def encode_position(position: Position, code_length: int = DEFAULT_CODE_LENGTH) -> str:
    return encode(position.lat, position.lng, code_length)


def is_valid(code: object) -> bool:
    """Syntactic check for full and short codes (case-insensitive)."""
    return isinstance(code, str) and olc.isValid(code)


def is_short(code: object) -> bool:
    return isinstance(code, str) and olc.isShort(code)


def is_full(code: object) -> bool:
    return isinstance(code, str) and olc.isFull(code)


def is_canonical(code: object) -> bool:
    """A full code of exactly DEFAULT_CODE_LENGTH digits, as stored records hold."""
    return is_full(code) and digit_count(code) == DEFAULT_CODE_LENGTH


def _decode_legacy(text: str) -> Optional[Position]:
    """Version 0 codes: "lat,lng" in decimal degrees."""
    match = _LEGACY_RE.match(text)
    if not match:
        return None
    try:
        return Position(float(match.group(1)), float(match.group(2)))
    except ValueError:
        return None


def decode(code: object) -> Optional[Position]:
    """
    Decode a location code to the centre of its cell.

    Never raises: anything that is not a full version-1 code or a legacy
    "lat,lng" value yields None. Short codes need recover_nearest() first.
    """
    if not isinstance(code, str):
        return None
    text = code.strip().upper()
    if not text:
        return None

    if SEPARATOR not in text:
        legacy = _decode_legacy(text)
        if legacy is not None:
            logger.debug(f"📍 CODEC ► decoded legacy coordinate code {text!r}")
        return legacy

    if not olc.isFull(text):
        return None
    area = olc.decode(text)
    return Position(area.latitudeCenter, area.longitudeCenter)


def recover_nearest(code: str, reference: Position) -> str:
    """
    Expand a short code to the full code closest to a reference position.

    Full codes are returned upper-cased and unchanged.

    Raises:
        ValueError: the code is neither a short nor a full code
    """
    text = (code or "").strip().upper()
    if not (olc.isShort(text) or olc.isFull(text)):
        raise ValueError(f"Not a valid short location code: {code!r}")
    return olc.recoverNearest(text, reference.lat, reference.lng)
