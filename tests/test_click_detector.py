"""Tests for click detection - ClickInfo, ClickDetector, deck.gl event parsing and dispatch.

Tests cover:
1. ClickInfo invariants and dedup keys
2. ClickDetector: picked object -> ClickInfo, deduplication
3. parse_deckgl_event: spread event dict -> object / coordinate
4. dispatch_click: each click type reaches exactly one engine callback
"""

import pytest
from conftest import BASE_LAT, BASE_LON, FakeMapInstance

from manifest_map.model.click_info import ClickInfo, MapClickType
from manifest_map.model.map_point import ManifestMapData
from manifest_map.ui.click_detector import ClickDetector
from manifest_map.ui.click_handlers import dispatch_click
from manifest_map.ui.context import ClickDeduplicationContext
from manifest_map.ui.engine import ManifestMapEngine
from manifest_map.ui.pydeck_click_handler import PydeckClickResult, parse_deckgl_event

COORD = [BASE_LON, BASE_LAT]


@pytest.fixture
def detector() -> ClickDetector:
    return ClickDetector(dedup=ClickDeduplicationContext())


# =============================================================================
# CLICK INFO
# =============================================================================


class TestClickInfo:
    """STRICT invariants of ClickInfo."""

    def test_marker_requires_id(self) -> None:
        with pytest.raises(ValueError, match="marker_id"):
            ClickInfo(click_type=MapClickType.MARKER)

    def test_circle_requires_id(self) -> None:
        with pytest.raises(ValueError, match="marker_id"):
            ClickInfo(click_type=MapClickType.CIRCLE, marker_id="")

    def test_background_rejects_id(self) -> None:
        with pytest.raises(ValueError, match="BACKGROUND"):
            ClickInfo(click_type=MapClickType.BACKGROUND, marker_id="point-0")

    def test_dedup_key_with_coordinates(self) -> None:
        info = ClickInfo(click_type=MapClickType.MARKER, marker_id="point-3", lat=BASE_LAT, lon=BASE_LON)
        assert info.make_dedup_key() == "marker_point-3@-37.810000_144.960000"

    def test_dedup_key_without_coordinates(self) -> None:
        assert ClickInfo(click_type=MapClickType.BACKGROUND).make_dedup_key() == "background"
        info = ClickInfo(click_type=MapClickType.CIRCLE, marker_id="point-4")
        assert info.make_dedup_key() == "radius_circle_point-4"

    def test_display_name(self) -> None:
        assert ClickInfo(click_type=MapClickType.MARKER, marker_id="point-1").display_name == "Marker point-1"
        assert ClickInfo(click_type=MapClickType.BACKGROUND).display_name == "Map"


# =============================================================================
# DETECTOR
# =============================================================================


class TestClickDetector:
    """Picked object -> ClickInfo."""

    def test_nothing(self, detector: ClickDetector) -> None:
        assert detector.detect(clicked_object=None, clicked_coordinate=None) is None

    def test_marker(self, detector: ClickDetector) -> None:
        info = detector.detect(clicked_object={"type": "marker", "id": "point-2"}, clicked_coordinate=COORD)
        assert info is not None
        assert info.click_type == MapClickType.MARKER
        assert info.marker_id == "point-2"
        assert (info.lat, info.lon) == (BASE_LAT, BASE_LON)

    def test_circle(self, detector: ClickDetector) -> None:
        info = detector.detect(clicked_object={"type": "radius_circle", "id": "point-4"}, clicked_coordinate=COORD)
        assert info is not None
        assert info.click_type == MapClickType.CIRCLE
        assert info.marker_id == "point-4"

    def test_background(self, detector: ClickDetector) -> None:
        info = detector.detect(clicked_object=None, clicked_coordinate=COORD)
        assert info is not None
        assert info.click_type == MapClickType.BACKGROUND

    def test_trip_path_is_background(self, detector: ClickDetector) -> None:
        info = detector.detect(clicked_object={"type": "trip_path"}, clicked_coordinate=COORD)
        assert info is not None
        assert info.click_type == MapClickType.BACKGROUND

    @pytest.mark.parametrize(
        "obj",
        [
            {"id": "point-0"},
            {"type": "marker"},
            {"type": "radius_circle"},
            {"type": "something_else", "id": "x"},
        ],
    )
    def test_unusable_objects(self, detector: ClickDetector, obj: dict) -> None:
        assert detector.detect(clicked_object=obj, clicked_coordinate=COORD) is None


class TestDeduplication:
    """The component re-delivers its last event on every rerun."""

    def test_same_event_twice(self, detector: ClickDetector) -> None:
        obj = {"type": "marker", "id": "point-2"}
        assert detector.detect(clicked_object=obj, clicked_coordinate=COORD) is not None
        assert detector.detect(clicked_object=obj, clicked_coordinate=COORD) is None

    def test_same_marker_new_coordinate(self, detector: ClickDetector) -> None:
        obj = {"type": "marker", "id": "point-2"}
        detector.detect(clicked_object=obj, clicked_coordinate=COORD)
        assert detector.detect(clicked_object=obj, clicked_coordinate=[BASE_LON + 1e-5, BASE_LAT]) is not None

    def test_different_marker(self, detector: ClickDetector) -> None:
        detector.detect(clicked_object={"type": "marker", "id": "point-2"}, clicked_coordinate=COORD)
        info = detector.detect(clicked_object={"type": "marker", "id": "point-3"}, clicked_coordinate=COORD)
        assert info is not None

    def test_clear_forgets_last_click(self) -> None:
        dedup = ClickDeduplicationContext()
        assert dedup.is_new_click("a")
        assert not dedup.is_new_click("a")
        dedup.clear()
        assert dedup.is_new_click("a")

    def test_none_key(self) -> None:
        assert not ClickDeduplicationContext().is_new_click(None)


# =============================================================================
# DECK.GL EVENTS
# =============================================================================


class TestParseDeckglEvent:
    """st_deckgl spreads picked-object fields into the event."""

    def test_empty(self) -> None:
        assert parse_deckgl_event(None) == PydeckClickResult.empty()
        assert parse_deckgl_event("not a dict") == PydeckClickResult.empty()

    def test_background(self) -> None:
        result = parse_deckgl_event({"coordinate": COORD, "eventType": "click"})
        assert result.is_background_click
        assert result.clicked_coordinate == COORD

    def test_object(self) -> None:
        result = parse_deckgl_event(
            {"type": "marker", "id": "point-0", "position": COORD, "coordinate": COORD, "eventType": "click"}
        )
        assert result.is_object_click
        assert result.clicked_object == {"type": "marker", "id": "point-0", "position": COORD}

    def test_event_type_field_is_not_object(self) -> None:
        result = parse_deckgl_event({"type": "click", "coordinate": COORD})
        assert not result.is_object_click

    def test_short_coordinate_ignored(self) -> None:
        assert parse_deckgl_event({"coordinate": [1.0]}).clicked_coordinate is None


# =============================================================================
# DISPATCH
# =============================================================================


class TestDispatchClick:
    """One handler per click type."""

    @pytest.fixture
    def bound(
        self, engine: ManifestMapEngine, manifest_data: ManifestMapData, fake_map: FakeMapInstance
    ) -> ManifestMapEngine:
        engine.set_data(manifest_data)
        engine.bind_map(fake_map)
        return engine

    def test_marker(self, bound: ManifestMapEngine) -> None:
        dispatch_click(bound, ClickInfo(click_type=MapClickType.MARKER, marker_id="point-3"))
        assert bound.controller.active_marker_id == "point-3"

    def test_circle(self, bound: ManifestMapEngine) -> None:
        bound.on_marker_click("point-3")
        dispatch_click(bound, ClickInfo(click_type=MapClickType.CIRCLE, marker_id="point-3"))
        assert bound.controller.active_marker_id is None

    def test_background(self, bound: ManifestMapEngine) -> None:
        bound.on_marker_click("point-0")
        dispatch_click(bound, ClickInfo(click_type=MapClickType.BACKGROUND, lat=BASE_LAT, lon=BASE_LON))
        assert bound.controller.active_marker_id is None

    def test_detector_to_dispatch(self, bound: ManifestMapEngine) -> None:
        detector = ClickDetector(dedup=bound.context.click_dedup)
        event = {"type": "marker", "id": "point-2", "coordinate": COORD, "eventType": "click"}
        result = parse_deckgl_event(event)

        info = detector.detect(result.clicked_object, result.clicked_coordinate)
        assert info is not None
        dispatch_click(bound, info)
        assert bound.controller.active_marker_id == "point-2"

        # Rerun re-delivers the same event
        assert detector.detect(result.clicked_object, result.clicked_coordinate) is None
