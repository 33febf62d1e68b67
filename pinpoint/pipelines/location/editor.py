"""
Position Editor
Interactive state machine behind the property map pin.

Every accepted event re-derives position, location code and the textual
fields together and reports the triple once through on_location_change.
Rejected input only sets last_error. Read-only editors (public property
pages) accept initialization and nothing else.
"""
from __future__ import annotations

import asyncio
import logging
import math
import re
from dataclasses import replace
from typing import Callable, Optional

from pinpoint.config import settings
from pinpoint.config.regions import Region
from pinpoint.services.geocoding.base import GeocodingClient, MapRenderer
from . import codec
from .resolver import PriorPosition, SourceResolver
from .types import EditorState, Position, ResolutionOutcome

logger = logging.getLogger(__name__)

LocationChangeCallback = Callable[[float, float, str], None]

ERROR_INVALID_COORDINATES = "invalid coordinates"
ERROR_EMPTY_CODE = "empty code"
ERROR_INVALID_CODE = "invalid code"
ERROR_EMPTY_QUERY = "empty query"
ERROR_NOT_FOUND = "location not found"

# Unicode minus, hyphen, en dash, small and fullwidth hyphen-minus
_MINUS_SIGNS = str.maketrans({"−": "-", "‐": "-", "–": "-", "﹣": "-", "－": "-"})
_DECIMAL_RE = re.compile(r"^[+-]?(?:[0-9]+(?:\.[0-9]*)?|\.[0-9]+)$")


def parse_coordinate(text: object) -> Optional[float]:
    """Parse one typed coordinate; None for anything that is not a finite decimal."""
    if isinstance(text, bool):
        return None
    if isinstance(text, (int, float)):
        value = float(text)
        return value if math.isfinite(value) else None
    if not isinstance(text, str):
        return None
    cleaned = text.strip().translate(_MINUS_SIGNS)
    if not _DECIMAL_RE.match(cleaned):
        return None
    return float(cleaned)


def format_coordinate(value: float) -> str:
    return f"{value:.6f}"


class PositionEditor:
    """
    Owns the EditorState of one property-location session.

    Event methods return True when the change was accepted (and the callback
    fired), False otherwise.
    """

    def __init__(
        self,
        on_location_change: LocationChangeCallback,
        *,
        editable: bool = True,
        region: Optional[Region] = None,
        renderer: Optional[MapRenderer] = None,
    ) -> None:
        self._on_location_change = on_location_change
        self._editable = editable
        self._region = region
        self._renderer = renderer
        self._state: Optional[EditorState] = None
        self._generation = 0
        self._edit_count = 0
        self._disposed = False

    @property
    def state(self) -> Optional[EditorState]:
        return self._state

    @property
    def editable(self) -> bool:
        return self._editable

    @property
    def disposed(self) -> bool:
        return self._disposed

    # ------------------------------------------------------------------
    # Initialization
    # ------------------------------------------------------------------

    def initialize(self, outcome: ResolutionOutcome) -> None:
        """Adopt a resolver outcome. Not a change: the callback is not fired."""
        if self._disposed:
            logger.debug("🧭 EDITOR ► initialize after dispose ignored")
            return
        position = outcome.position
        self._state = EditorState(
            position=position,
            code=outcome.code,
            pending_manual_lat=format_coordinate(position.lat),
            pending_manual_lng=format_coordinate(position.lng),
            pending_manual_code=outcome.code,
            last_error=None,
            warning=self._region_warning(position),
            diagnostic=outcome.diagnostic,
        )
        logger.info(
            f"🧭 EDITOR ► initialized at {position.as_tuple()} ({outcome.source.value}, "
            f"{outcome.diagnostic.kind.value})"
        )
        self._render()

    async def load(
        self,
        resolver: SourceResolver,
        prior_position: PriorPosition = None,
        prior_code: Optional[str] = None,
        address: str = "",
        city: str = "",
        state: str = "",
    ) -> Optional[ResolutionOutcome]:
        """
        Resolve the initial location and initialize from it.

        A result that arrives after dispose() or after a newer load() is
        dropped and None is returned.
        """
        self._generation += 1
        generation = self._generation
        outcome = await resolver.resolve(
            prior_position=prior_position,
            prior_code=prior_code,
            address=address,
            city=city,
            state=state,
            editable=self._editable,
        )
        if self._disposed or generation != self._generation:
            logger.info("🧭 EDITOR ► discarding stale resolution result")
            return None
        self.initialize(outcome)
        return outcome

    def dispose(self) -> None:
        """Tear down: pending results are discarded and further events ignored."""
        self._disposed = True
        self._generation += 1

    # ------------------------------------------------------------------
    # Edit events
    # ------------------------------------------------------------------

    def pointer_select(self, lat: float, lng: float) -> bool:
        if not self._can_edit("pointer_select"):
            return False
        try:
            position = Position.clamped(lat, lng)
        except (TypeError, ValueError):
            return self._reject(ERROR_INVALID_COORDINATES)
        return self._commit(position)

    def marker_drag_end(self, lat: float, lng: float) -> bool:
        if not self._can_edit("marker_drag_end"):
            return False
        try:
            position = Position.clamped(lat, lng)
        except (TypeError, ValueError):
            return self._reject(ERROR_INVALID_COORDINATES)
        return self._commit(position)

    def update_pending_coordinates(self, lat_text: str, lng_text: str) -> bool:
        """Keystrokes in the manual coordinate fields. Buffered only, no callback."""
        if not self._can_edit("update_pending_coordinates"):
            return False
        self._state = replace(self._state, pending_manual_lat=lat_text, pending_manual_lng=lng_text)
        return True

    def update_pending_code(self, code_text: str) -> bool:
        """Keystrokes in the location code field."""
        if not self._can_edit("update_pending_code"):
            return False
        self._state = replace(self._state, pending_manual_code=code_text)
        return True

    def manual_coordinate_submit(self, lat_text: Optional[str] = None, lng_text: Optional[str] = None) -> bool:
        if not self._can_edit("manual_coordinate_submit"):
            return False
        if lat_text is None:
            lat_text = self._state.pending_manual_lat
        if lng_text is None:
            lng_text = self._state.pending_manual_lng

        lat = parse_coordinate(lat_text)
        lng = parse_coordinate(lng_text)
        if lat is None or lng is None or not -90.0 <= lat <= 90.0 or not -180.0 <= lng <= 180.0:
            logger.info(f"🧭 EDITOR ► rejected manual coordinates ({lat_text!r}, {lng_text!r})")
            return self._reject(ERROR_INVALID_COORDINATES)
        return self._commit(Position.clamped(lat, lng))

    def manual_code_submit(self, code_text: Optional[str] = None) -> bool:
        if not self._can_edit("manual_code_submit"):
            return False
        if code_text is None:
            code_text = self._state.pending_manual_code

        text = (code_text or "").strip().upper()
        if not text:
            return self._reject(ERROR_EMPTY_CODE)

        if codec.is_short(text):
            try:
                text = codec.recover_nearest(text, self._state.position)
            except ValueError:
                return self._reject(ERROR_INVALID_CODE)
            logger.info(f"🧭 EDITOR ► expanded short code to {text}")

        position = codec.decode(text)
        if position is None:
            logger.info(f"🧭 EDITOR ► rejected location code {code_text!r}")
            return self._reject(ERROR_INVALID_CODE)
        return self._commit(position)

    async def search_address(
        self, geocoder: GeocodingClient, query: str, timeout_s: Optional[float] = None
    ) -> bool:
        """
        Free-text search box: move the pin to the first geocoding hit.

        A hit that arrives after a newer accepted edit, load() or dispose() is
        dropped.
        """
        if not self._can_edit("search_address"):
            return False
        query = (query or "").strip()
        if not query:
            return self._reject(ERROR_EMPTY_QUERY)

        generation, edit_count = self._generation, self._edit_count
        timeout = timeout_s if timeout_s is not None else settings.GEOCODING_TIMEOUT_S
        try:
            position = await asyncio.wait_for(geocoder.geocode(query, "", ""), timeout=timeout)
        except asyncio.TimeoutError:
            logger.warning(f"⏱️ EDITOR ► search for {query!r} timed out")
            position = None
        except Exception as e:
            logger.warning(f"⚠️ EDITOR ► search for {query!r} failed: {e}")
            position = None

        if self._disposed or generation != self._generation or edit_count != self._edit_count:
            logger.info("🧭 EDITOR ► discarding stale search result")
            return False
        if position is None:
            return self._reject(ERROR_NOT_FOUND)
        return self._commit(position)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _can_edit(self, event: str) -> bool:
        if self._disposed or not self._editable:
            logger.debug(f"🧭 EDITOR ► {event} ignored (read-only or disposed)")
            return False
        if self._state is None:
            logger.warning(f"⚠️ EDITOR ► {event} before initialization ignored")
            return False
        return True

    def _reject(self, message: str) -> bool:
        self._state = replace(self._state, last_error=message)
        return False

    def _commit(self, position: Position) -> bool:
        code = codec.encode_position(position)
        self._edit_count += 1
        self._state = EditorState(
            position=position,
            code=code,
            pending_manual_lat=format_coordinate(position.lat),
            pending_manual_lng=format_coordinate(position.lng),
            pending_manual_code=code,
            last_error=None,
            warning=self._region_warning(position),
            diagnostic=None,
        )
        self._render()
        self._on_location_change(position.lat, position.lng, code)
        return True

    def _region_warning(self, position: Position) -> Optional[str]:
        if self._region is None or self._region.contains(position.lat, position.lng):
            return None
        return (
            f"This location appears to be outside {self._region.name}. "
            f"Check the selected country or the location code."
        )

    def _render(self) -> None:
        if self._renderer is not None and self._state is not None:
            self._renderer.render(self._state.position)
