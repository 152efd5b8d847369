"""Shared pytest fixtures for manifest_map tests.

Provides a recording FakeMapInstance, a recording overlay factory and reusable
point data. Nothing here imports Streamlit.

COORDINATES:
    Tests use points around Melbourne (-37.81, 144.96). "Coincident" points
    share exact coordinates; "separate" points are at least 0.01° apart,
    far outside the overlap bucket (OFFSET_DISTANCE / 2 = 0.00005°).
"""

from datetime import datetime, timedelta, timezone
from typing import Any

import pytest

from manifest_map.core.geo_calculator import LatLngBounds
from manifest_map.model.map_point import ManifestMapData, ManifestMapPoint, MarkerType
from manifest_map.ui.context import ManifestMapContext
from manifest_map.ui.engine import ManifestMapEngine
from manifest_map.ui.overlay_manager import DeckOverlay

T0 = datetime(2024, 3, 4, 8, 0, tzinfo=timezone.utc)

BASE_LAT = -37.81
BASE_LON = 144.96


def at(minutes: int) -> datetime:
    """Timestamp `minutes` after T0."""
    return T0 + timedelta(minutes=minutes)


def make_point(
    marker_type: MarkerType | None,
    lat: float | None = BASE_LAT,
    lon: float | None = BASE_LON,
    **kwargs: Any,
) -> ManifestMapPoint:
    return ManifestMapPoint(marker_type=marker_type, latitude=lat, longitude=lon, **kwargs)


# =============================================================================
# FAKE MAP INSTANCE
# =============================================================================


class FakeMapInstance:
    """Map instance recording every camera call and attached drawable.

    calls entries:
        ("fit_bounds", LatLngBounds, padding)
        ("pan_to", lat, lon)
        ("set_zoom", zoom)
    """

    def __init__(self, instance_id: str = "map-1") -> None:
        self._instance_id = instance_id
        self.calls: list[tuple[Any, ...]] = []
        self.attached: list[Any] = []

    @property
    def instance_id(self) -> str:
        return self._instance_id

    def fit_bounds(self, bounds: LatLngBounds, padding: int) -> None:
        self.calls.append(("fit_bounds", bounds, padding))

    def pan_to(self, lat: float, lon: float) -> None:
        self.calls.append(("pan_to", lat, lon))

    def set_zoom(self, zoom: float) -> None:
        self.calls.append(("set_zoom", zoom))

    def attach(self, drawable: Any) -> None:
        if not any(d is drawable for d in self.attached):
            self.attached.append(drawable)

    def detach(self, drawable: Any) -> None:
        self.attached = [d for d in self.attached if d is not drawable]

    def calls_named(self, name: str) -> list[tuple[Any, ...]]:
        return [c for c in self.calls if c[0] == name]


# =============================================================================
# RECORDING OVERLAY FACTORY
# =============================================================================


class RecordingOverlay(DeckOverlay):
    """DeckOverlay that logs create/props/destroy into a shared event list."""

    def __init__(self, events: list[tuple[str, int]]) -> None:
        super().__init__()
        self.events = events
        self.props_count = 0
        events.append(("create", self.overlay_id))

    def set_props(self, layers: list) -> None:
        super().set_props(layers)
        self.props_count += 1
        self.events.append(("props", self.overlay_id))

    def finalize(self) -> None:
        self.events.append(("destroy", self.overlay_id))
        super().finalize()


class RecordingOverlayFactory:
    """Overlay factory tracking every overlay it built.

    max_alive_at_create records how many overlays were still alive when a new
    one was requested; it must stay 0.
    """

    def __init__(self) -> None:
        self.created: list[RecordingOverlay] = []
        self.events: list[tuple[str, int]] = []
        self.max_alive_at_create = 0

    @property
    def alive(self) -> list[RecordingOverlay]:
        return [o for o in self.created if not o.finalized]

    def __call__(self) -> RecordingOverlay:
        self.max_alive_at_create = max(self.max_alive_at_create, len(self.alive))
        overlay = RecordingOverlay(self.events)
        self.created.append(overlay)
        return overlay


# =============================================================================
# FIXTURES
# =============================================================================


@pytest.fixture
def fake_map() -> FakeMapInstance:
    return FakeMapInstance(instance_id="map-1")


@pytest.fixture
def overlay_factory() -> RecordingOverlayFactory:
    return RecordingOverlayFactory()


@pytest.fixture
def manifest_points() -> list[ManifestMapPoint]:
    """A realistic manifest timeline.

    Index  Type              Location        Time  Radius
    0      START_PLACE       depot           0
    1      CONTENTS_ADDED    depot (same)    15
    2      TRACKER_PATH      +0.05°          60
    3      CONTENTS_REMOVED  +0.10°          120   250 m
    4      LATEST_LOCATION   +0.20°          180   35 m
    5      END_PLACE         +0.20° (same)   -
    6      TARGET_PLACE      +0.20° (same)   240   1500 m
    7      TRACKER_PATH      no geometry     200
    """
    return [
        make_point(MarkerType.START_PLACE, timestamp=at(0), place_id="P-1", place_name="Depot"),
        make_point(MarkerType.CONTENTS_ADDED, timestamp=at(15), contents_added_count=12),
        make_point(MarkerType.TRACKER_PATH, lat=BASE_LAT + 0.05, lon=BASE_LON + 0.05, timestamp=at(60)),
        make_point(
            MarkerType.CONTENTS_REMOVED,
            lat=BASE_LAT + 0.10,
            lon=BASE_LON + 0.10,
            timestamp=at(120),
            radius=250.0,
            contents_removed_count=4,
        ),
        make_point(MarkerType.LATEST_LOCATION, lat=BASE_LAT + 0.20, lon=BASE_LON + 0.20, timestamp=at(180), radius=35.0),
        make_point(MarkerType.END_PLACE, lat=BASE_LAT + 0.20, lon=BASE_LON + 0.20, place_name="Warehouse"),
        make_point(
            MarkerType.TARGET_PLACE,
            lat=BASE_LAT + 0.20,
            lon=BASE_LON + 0.20,
            timestamp=at(240),
            deadline=at(600),
            radius=1500.0,
        ),
        make_point(MarkerType.TRACKER_PATH, lat=None, lon=None, timestamp=at(200)),
    ]


@pytest.fixture
def manifest_data(manifest_points: list[ManifestMapPoint]) -> ManifestMapData:
    return ManifestMapData(points=tuple(manifest_points))


@pytest.fixture
def engine(overlay_factory: RecordingOverlayFactory) -> ManifestMapEngine:
    return ManifestMapEngine(context=ManifestMapContext(), overlay_factory=overlay_factory)
