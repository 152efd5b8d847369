"""Configuration constants for Manifest Map.

All configurable parameters are centralized here for easy tuning.

Classes:
    AppConfig: UI application settings
    MapConfig: Map view, viewport fit and overlap parameters
    OverlapConfig: Overlap resolver behaviour switches
    PathConfig: Trip path presentation
    MarkerConfig: Marker z-order and sizing
    CircleConfig: Radius circle styling
    StyleConfig: Theme palettes and map styles
    ClickConfig: Picked-object fields for click detection
    CoordinateConfig: Coordinate rounding
"""

import os
from pathlib import Path

# Package root directory (where manifest_map/ lives)
PACKAGE_DIR = Path(__file__).parent

# Bundled sample manifest used when no data file is configured
SAMPLE_DATA_PATH = PACKAGE_DIR / "data" / "sample_manifest_map.json"

# Data file override for the Streamlit host
DATA_PATH_ENV_VAR = "MANIFEST_MAP_DATA"


class AppConfig:
    """UI application settings."""

    TITLE = "Manifest Map"
    ICON = "🗺️"
    LAYOUT = "wide"
    MAP_HEIGHT_PX = 640


class MapConfig:
    """Map view, viewport fit and overlap parameters."""

    # ~0.0001 degrees ≈ 10 meters at the equator
    OFFSET_DISTANCE = 0.0001
    # Hexagonal pattern around the first marker of a coincident bucket
    OFFSET_ANGLES = [0, 60, 120, 180, 240, 300]
    OFFSET_DECIMALS = 6

    # Padding in pixels for every fit-bounds operation
    DEFAULT_PADDING = 100
    # Zoom applied when selecting a marker without radius
    DEFAULT_ZOOM = 18
    MIN_ZOOM = 0
    MAX_ZOOM = 22

    # Resize heuristic: aspect ratio change below this is a page zoom, above it a fullscreen toggle
    ZOOM_RATIO_THRESHOLD = 0.05
    ZOOM_DEBOUNCE_DELAY_MS = 100

    # Initial view before any data is loaded (Melbourne, Australia)
    INITIAL_LATITUDE = -37.8136
    INITIAL_LONGITUDE = 144.9631
    INITIAL_ZOOM = 10

    # Nominal viewport used for fit-bounds zoom computation
    VIEWPORT_WIDTH_PX = 1200
    VIEWPORT_HEIGHT_PX = AppConfig.MAP_HEIGHT_PX

    # Web Mercator tile size in pixels
    TILE_SIZE_PX = 512


class OverlapConfig:
    """Overlap resolver behaviour switches.

    With RING_SPREAD disabled the 7th and later coincident markers reuse the
    hex positions of earlier ones. Enabling it moves each completed ring of
    six one offset distance further out.
    """

    RING_SPREAD = False
    RING_SIZE = len(MapConfig.OFFSET_ANGLES)


class PathConfig:
    """Trip path presentation."""

    LAYER_ID = "TripsLayer"
    WIDTH_MIN_PX = 4
    WIDTH_MAX_PX = 20
    WIDTH_SCALE = 1
    WIDTH_UNITS = "pixels"
    MIN_WAYPOINTS = 2


class MarkerConfig:
    """Marker z-order and sizing."""

    Z_INDEXES = {
        "START_PLACE": 6,
        "END_PLACE": 5,
        "TARGET_PLACE": 4,
        "LATEST_LOCATION": 3,
        "CONTENTS_ADDED": 3,
        "CONTENTS_REMOVED": 3,
        "TRACKER_PATH": 1,
    }
    DEFAULT_Z_INDEX = 1

    # Marker radii in pixels
    SIZE_SMALL = 10
    SIZE_PIN = 24
    SIZE_LARGE = 36
    BORDER_WIDTH = 2
    BORDER_COLOR = "#FFFFFF"
    SMALL_MARKER_COLOR = "#6B7280"  # Gray-500

    # Active and hovered markers render larger
    HIGHLIGHT_SCALE = 1.3

    # Popup sizing
    POPUP_MAX_WIDTH_PX = 300


class CircleConfig:
    """Radius circle styling."""

    STROKE_OPACITY = 0.8
    STROKE_WEIGHT = 1
    FILL_OPACITY = 0.1
    LAYER_ID_PREFIX = "radius_circle"


class StyleConfig:
    """Theme palettes and map styles."""

    THEMES = {
        "light": {
            "primary": "#2563EB",  # blue-600
            "secondary": "#7C3AED",  # violet-600
            "success": "#16A34A",  # green-600
            "danger": "#DC2626",  # red-600
        },
        "dark": {
            "primary": "#60A5FA",  # blue-400
            "secondary": "#A78BFA",  # violet-400
            "success": "#4ADE80",  # green-400
            "danger": "#F87171",  # red-400
        },
    }
    DEFAULT_THEME = "light"

    # Carto basemaps, no API key needed
    MAP_STYLES = {
        "light": "light",
        "dark": "dark",
    }
    assert set(MAP_STYLES.keys()) == set(THEMES.keys())

    # Glyphs shown on place pins
    PIN_GLYPHS = {
        "START_PLACE": "▶",
        "END_PLACE": "■",
        "TARGET_PLACE": "⚑",
    }

    @staticmethod
    def hex_to_rgba(hex_color: str, alpha: float = 1.0) -> list[int]:
        """Convert "#RRGGBB" to a Pydeck [R, G, B, A] list (0-255).

        Args:
            hex_color: Color string with or without leading '#'
            alpha: Opacity 0-1

        Returns:
            [R, G, B, A] list of ints
        """
        value = hex_color.lstrip("#")
        if len(value) == 3:
            value = "".join(ch * 2 for ch in value)
        if len(value) != 6:
            raise ValueError(f"Invalid hex color: {hex_color}")
        r, g, b = (int(value[i : i + 2], 16) for i in (0, 2, 4))
        return [r, g, b, int(round(max(0.0, min(1.0, alpha)) * 255))]

    @staticmethod
    def palette(theme: str) -> dict[str, str]:
        """Color palette for a theme name, falling back to the default theme."""
        return StyleConfig.THEMES.get(theme, StyleConfig.THEMES[StyleConfig.DEFAULT_THEME])


class ClickConfig:
    """Picked-object fields for click detection.

    Marker layers embed these fields in every data row so a picked object
    can be traced back to its marker.
    """

    TYPE_MARKER = "marker"
    TYPE_CIRCLE = "radius_circle"
    TYPE_PATH = "trip_path"

    PICKING_RADIUS_PX = 8


class CoordinateConfig:
    """Configuration for coordinate handling and comparison."""

    # Decimal places for dedup key generation (6 decimals ≈ 10cm precision)
    DEDUP_KEY_DECIMALS: int = 6


def get_data_path() -> Path:
    """Resolve manifest data file from the environment, falling back to the bundled sample."""
    override = os.environ.get(DATA_PATH_ENV_VAR)
    if override:
        return Path(override)
    return SAMPLE_DATA_PATH
