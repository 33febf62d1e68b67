from __future__ import annotations

import asyncio
from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

import pytest

from pinpoint.config.regions import get_region
from pinpoint.pipelines.mapping.calculators.haversine_calculator import distance_km

from . import codec
from .editor import (
    ERROR_EMPTY_CODE,
    ERROR_EMPTY_QUERY,
    ERROR_INVALID_CODE,
    ERROR_INVALID_COORDINATES,
    ERROR_NOT_FOUND,
    PositionEditor,
    parse_coordinate,
)
from .types import Diagnostic, DiagnosticKind, LocationSource, Position, ResolutionOutcome

COSTA_RICA = get_region("CR")
START = Position(9.9281, -84.0907)


@dataclass
class Recorder:
    calls: List[Tuple[float, float, str]] = field(default_factory=list)

    def __call__(self, lat: float, lng: float, code: str) -> None:
        self.calls.append((lat, lng, code))


@dataclass
class FakeRenderer:
    rendered: List[Position] = field(default_factory=list)

    def render(self, position: Position) -> None:
        self.rendered.append(position)


@dataclass
class FakeResolver:
    outcome: ResolutionOutcome
    delay_s: float = 0.0
    requests: List[Dict[str, Any]] = field(default_factory=list)

    async def resolve(self, **request: Any) -> ResolutionOutcome:
        self.requests.append(request)
        if self.delay_s:
            await asyncio.sleep(self.delay_s)
        return self.outcome


@dataclass
class FakeGeocoder:
    result: Optional[Position] = None

    async def geocode(self, address: str, city: str, state: str) -> Optional[Position]:
        return self.result


@dataclass
class SlowGeocoder:
    result: Optional[Position] = None
    delay_s: float = 0.0

    async def geocode(self, address: str, city: str, state: str) -> Optional[Position]:
        await asyncio.sleep(self.delay_s)
        return self.result


def _outcome(position: Position = START, kind: DiagnosticKind = DiagnosticKind.GPS_CONFIRMED) -> ResolutionOutcome:
    return ResolutionOutcome(
        position=position,
        code=codec.encode_position(position),
        diagnostic=Diagnostic.of(kind),
        source=LocationSource.STORED,
    )


def _editor(editable: bool = True, **kwargs: Any) -> Tuple[PositionEditor, Recorder]:
    recorder = Recorder()
    editor = PositionEditor(recorder, editable=editable, region=COSTA_RICA, **kwargs)
    editor.initialize(_outcome())
    return editor, recorder


def test_initialize_populates_state_without_callback() -> None:
    editor, recorder = _editor()
    state = editor.state

    assert state.position == START
    assert state.code == codec.encode_position(START)
    assert state.pending_manual_lat == "9.928100"
    assert state.pending_manual_lng == "-84.090700"
    assert state.pending_manual_code == state.code
    assert state.diagnostic.kind is DiagnosticKind.GPS_CONFIRMED
    assert state.last_error is None and state.warning is None
    assert recorder.calls == []


def test_read_only_editor_ignores_every_edit() -> None:
    editor, recorder = _editor(editable=False)
    before = editor.state

    assert not editor.pointer_select(10.0, -84.5)
    assert not editor.marker_drag_end(10.0, -84.5)
    assert not editor.manual_coordinate_submit("10.0", "-84.5")
    assert not editor.manual_code_submit(codec.encode(10.0, -84.5))
    assert not asyncio.run(editor.search_address(FakeGeocoder(result=Position(10.0, -84.5)), "Liberia"))
    assert not editor.update_pending_coordinates("1", "2")
    assert not editor.update_pending_code("XXXX")

    assert editor.state == before
    assert recorder.calls == []


def test_pointer_select_updates_all_fields_together() -> None:
    editor, recorder = _editor()

    assert editor.pointer_select(10.0, -84.5)

    state = editor.state
    assert state.position == Position(10.0, -84.5)
    assert state.code == codec.encode(10.0, -84.5)
    assert state.pending_manual_lat == "10.000000"
    assert state.pending_manual_lng == "-84.500000"
    assert state.pending_manual_code == state.code
    assert recorder.calls == [(10.0, -84.5, state.code)]
    assert codec.is_canonical(state.code)
    assert distance_km(codec.decode(state.code), state.position) <= codec.PRECISION_TOLERANCE_KM


def test_marker_drag_end_clamps_out_of_range_input() -> None:
    editor, recorder = _editor()

    assert editor.marker_drag_end(95.0, 190.0)

    assert editor.state.position == Position(90.0, -170.0)
    assert len(recorder.calls) == 1


def test_pointer_select_rejects_non_finite_input() -> None:
    editor, recorder = _editor()
    assert not editor.pointer_select(float("nan"), -84.0)
    assert editor.state.last_error == ERROR_INVALID_COORDINATES
    assert editor.state.position == START
    assert recorder.calls == []


def test_invalid_manual_entry_then_valid_entry() -> None:
    editor, recorder = _editor()

    assert not editor.manual_coordinate_submit("abc", "12")
    assert editor.state.last_error == ERROR_INVALID_COORDINATES
    assert editor.state.position == START
    assert recorder.calls == []

    assert editor.manual_coordinate_submit("9.9", "−84.0")
    state = editor.state
    assert state.position == Position(9.9, -84.0)
    assert state.last_error is None
    assert state.pending_manual_lat == "9.900000"
    assert state.pending_manual_lng == "-84.000000"
    assert recorder.calls == [(9.9, -84.0, codec.encode(9.9, -84.0))]


@pytest.mark.parametrize(
    "lat_text,lng_text",
    [("91", "0"), ("0", "-180.5"), ("nan", "0"), ("0", "inf"), ("", ""), ("9,9", "-84"), ("1e1", "0")],
)
def test_manual_coordinates_rejected(lat_text: str, lng_text: str) -> None:
    editor, recorder = _editor()
    assert not editor.manual_coordinate_submit(lat_text, lng_text)
    assert editor.state.last_error == ERROR_INVALID_COORDINATES
    assert recorder.calls == []


def test_manual_coordinates_submitted_from_pending_fields() -> None:
    editor, recorder = _editor()
    assert editor.update_pending_coordinates(" 10.25 ", "–85.5")

    assert editor.state.pending_manual_lat == " 10.25 "
    assert editor.manual_coordinate_submit()
    assert editor.state.position == Position(10.25, -85.5)
    assert len(recorder.calls) == 1


def test_manual_code_submit_accepts_full_code() -> None:
    editor, recorder = _editor()
    code = codec.encode(10.6346, -85.4407)

    assert editor.manual_code_submit(f" {code.lower()} ")

    assert editor.state.code == code
    assert distance_km(editor.state.position, Position(10.6346, -85.4407)) <= codec.PRECISION_TOLERANCE_KM
    assert recorder.calls == [(editor.state.position.lat, editor.state.position.lng, code)]


def test_manual_code_submit_recovers_short_code_near_current_pin() -> None:
    editor, _ = _editor()
    code = codec.encode(9.95, -84.1)

    assert editor.manual_code_submit(code[4:])
    assert editor.state.code == code


def test_manual_code_submit_accepts_legacy_coordinates() -> None:
    editor, _ = _editor()
    assert editor.manual_code_submit("9.9,-84.0")
    assert editor.state.position == Position(9.9, -84.0)
    assert editor.state.code == codec.encode(9.9, -84.0)


@pytest.mark.parametrize("text,error", [("   ", ERROR_EMPTY_CODE), ("", ERROR_EMPTY_CODE), ("ZZZZ+ZZ", ERROR_INVALID_CODE)])
def test_manual_code_submit_rejections(text: str, error: str) -> None:
    editor, recorder = _editor()
    assert not editor.manual_code_submit(text)
    assert editor.state.last_error == error
    assert editor.state.position == START
    assert recorder.calls == []


def test_manual_code_submitted_from_pending_field() -> None:
    editor, _ = _editor()
    code = codec.encode(10.0, -84.0)
    editor.update_pending_code(code)
    assert editor.manual_code_submit()
    assert editor.state.code == code


def test_accepted_edit_clears_error_and_diagnostic() -> None:
    editor, _ = _editor()
    editor.manual_code_submit("nonsense")
    assert editor.state.last_error == ERROR_INVALID_CODE
    assert editor.state.diagnostic is not None

    editor.pointer_select(10.0, -84.0)
    assert editor.state.last_error is None
    assert editor.state.diagnostic is None


def test_warning_outside_region() -> None:
    editor, recorder = _editor()

    assert editor.pointer_select(40.4168, -3.7038)
    assert "Costa Rica" in editor.state.warning
    assert len(recorder.calls) == 1

    editor.pointer_select(10.0, -84.0)
    assert editor.state.warning is None


def test_edits_before_initialize_are_ignored() -> None:
    recorder = Recorder()
    editor = PositionEditor(recorder)
    assert not editor.pointer_select(10.0, -84.0)
    assert not editor.manual_code_submit("9.9,-84.0")
    assert editor.state is None
    assert recorder.calls == []


def test_renderer_follows_accepted_changes_only() -> None:
    renderer = FakeRenderer()
    editor, _ = _editor(renderer=renderer)
    editor.pointer_select(10.0, -84.0)
    editor.manual_coordinate_submit("abc", "0")

    assert renderer.rendered == [START, Position(10.0, -84.0)]


def test_callback_error_propagates_after_state_update() -> None:
    def explode(lat: float, lng: float, code: str) -> None:
        raise RuntimeError("save failed")

    editor = PositionEditor(explode)
    editor.initialize(_outcome())
    with pytest.raises(RuntimeError):
        editor.pointer_select(10.0, -84.0)
    assert editor.state.position == Position(10.0, -84.0)


def test_load_initializes_and_passes_editable_flag() -> None:
    resolver = FakeResolver(_outcome(Position(9.748, -83.753), DiagnosticKind.GEOCODED_APPROXIMATE))
    editor = PositionEditor(Recorder(), editable=False)

    outcome = asyncio.run(editor.load(resolver, address="Cartago"))

    assert outcome is resolver.outcome
    assert editor.state.position == Position(9.748, -83.753)
    assert editor.state.diagnostic.kind is DiagnosticKind.GEOCODED_APPROXIMATE
    assert resolver.requests[0]["editable"] is False
    assert resolver.requests[0]["address"] == "Cartago"


def test_results_after_dispose_are_discarded() -> None:
    resolver = FakeResolver(_outcome(), delay_s=0.05)
    recorder = Recorder()
    editor = PositionEditor(recorder)

    async def scenario():
        task = asyncio.create_task(editor.load(resolver))
        await asyncio.sleep(0)
        editor.dispose()
        return await task

    assert asyncio.run(scenario()) is None
    assert editor.state is None
    assert recorder.calls == []
    assert not editor.pointer_select(10.0, -84.0)


def test_newer_load_supersedes_older_one() -> None:
    slow = FakeResolver(_outcome(Position(10.0, -84.0)), delay_s=0.1)
    fast = FakeResolver(_outcome(Position(9.5, -83.5)))
    editor = PositionEditor(Recorder())

    async def scenario():
        first = asyncio.create_task(editor.load(slow))
        await asyncio.sleep(0)
        second = await editor.load(fast)
        return await first, second

    first, second = asyncio.run(scenario())
    assert first is None
    assert second is fast.outcome
    assert editor.state.position == Position(9.5, -83.5)


def test_search_address_moves_pin() -> None:
    editor, recorder = _editor()
    assert asyncio.run(editor.search_address(FakeGeocoder(result=Position(10.6346, -85.4407)), "Liberia"))
    assert editor.state.position == Position(10.6346, -85.4407)
    assert len(recorder.calls) == 1


@pytest.mark.parametrize("query,error", [("Nowhere", ERROR_NOT_FOUND), ("  ", ERROR_EMPTY_QUERY)])
def test_search_address_failures(query: str, error: str) -> None:
    editor, recorder = _editor()
    assert not asyncio.run(editor.search_address(FakeGeocoder(result=None), query))
    assert editor.state.last_error == error
    assert recorder.calls == []


@pytest.mark.parametrize(
    "text,expected",
    [
        ("9.9", 9.9),
        ("−84.0", -84.0),
        ("－84", -84.0),
        (" 12 ", 12.0),
        ("+1.5", 1.5),
        (".5", 0.5),
        (7, 7.0),
        ("abc", None),
        ("", None),
        ("nan", None),
        ("-inf", None),
        ("1_0", None),
        ("1e3", None),
        ("\u0669.\u0668", None),
        (None, None),
        (True, None),
    ],
)
def test_parse_coordinate(text, expected) -> None:
    assert parse_coordinate(text) == expected


def test_search_result_after_newer_edit_is_discarded() -> None:
    editor, recorder = _editor()
    geocoder = SlowGeocoder(result=Position(10.6346, -85.4407), delay_s=0.05)

    async def scenario():
        search = asyncio.create_task(editor.search_address(geocoder, "Liberia"))
        await asyncio.sleep(0)
        editor.marker_drag_end(10.0, -84.0)
        return await search

    assert asyncio.run(scenario()) is False
    assert editor.state.position == Position(10.0, -84.0)
    assert recorder.calls == [(10.0, -84.0, codec.encode(10.0, -84.0))]
