"""Marker rendering - per-category marker descriptors and Pydeck layers.

Every marker category maps to exactly one MarkerStyle through an exhaustive
branch over MarkerType. Unknown categories fall back to the small default
marker. New categories are added by extending MarkerType and the branch.

Layers (back to front): marker dots sorted by z-index -> glyph/count labels.
Picked marker rows carry type="marker" and the marker id for click detection.
"""

import html
import logging
from dataclasses import dataclass, field
from datetime import datetime, tzinfo
from enum import Enum

import pydeck as pdk

from manifest_map.constants import ClickConfig, MarkerConfig, StyleConfig
from manifest_map.model.map_point import ManifestMapPoint, MarkerType
from manifest_map.ui.context import SelectionContext

logger = logging.getLogger(__name__)


class MarkerShape(Enum):
    """Visual form of a marker."""

    PIN = "pin"  # Place pins and latest location
    LARGE = "large"  # Content count badges
    SMALL = "small"  # Tracker path dots and unknown categories


@dataclass(frozen=True)
class MarkerStyle:
    """Rendering descriptor for one marker.

    Attributes:
        shape: Visual form
        color_role: Palette key ("secondary", "success", "danger") or None for the neutral dot
        glyph: Text drawn on the marker ("" for none)
        z_index: Stacking order, higher on top
        title: Marker title for tooltip and popup header
    """

    shape: MarkerShape
    color_role: str | None
    glyph: str
    z_index: int
    title: str


@dataclass(frozen=True)
class MarkerPopup:
    """Info popup content: header title plus (label, value) rows."""

    title: str
    rows: list[tuple[str, str]] = field(default_factory=list)
    place_url: str | None = None


def format_datetime(value: datetime, tz: tzinfo | None = None) -> str:
    """Format a timestamp in local time (or tz) as 'YYYY-MM-DD HH:MM'."""
    return value.astimezone(tz).strftime("%Y-%m-%d %H:%M")


def format_length(meters: float) -> str:
    """Human-readable length: meters below 1 km, kilometers above."""
    if meters < 1000:
        return f"{meters:.0f} m"
    return f"{meters / 1000:.1f} km"


def _z_index(marker_type: MarkerType | None) -> int:
    if marker_type is None:
        return MarkerConfig.DEFAULT_Z_INDEX
    return MarkerConfig.Z_INDEXES.get(marker_type.value, MarkerConfig.DEFAULT_Z_INDEX)


def marker_title(point: ManifestMapPoint, tz: tzinfo | None = None) -> str:
    """Title by category; uncategorized points show their timestamp."""
    mt = point.marker_type
    if mt == MarkerType.CONTENTS_ADDED:
        return "Contents Added"
    elif mt == MarkerType.CONTENTS_REMOVED:
        return "Contents Removed"
    elif mt == MarkerType.LATEST_LOCATION:
        return "Latest Location"
    elif mt == MarkerType.START_PLACE:
        return "Start Place"
    elif mt == MarkerType.END_PLACE:
        return "End Place"
    elif mt == MarkerType.TARGET_PLACE:
        return "Target Place"
    return format_datetime(point.timestamp, tz) if point.timestamp else ""


def marker_style(point: ManifestMapPoint, tz: tzinfo | None = None) -> MarkerStyle:
    """Rendering descriptor for a point."""
    mt = point.marker_type
    title = marker_title(point, tz)
    z = _z_index(mt)

    if mt in (MarkerType.START_PLACE, MarkerType.END_PLACE, MarkerType.TARGET_PLACE):
        assert mt is not None
        return MarkerStyle(MarkerShape.PIN, "secondary", StyleConfig.PIN_GLYPHS[mt.value], z, title)
    elif mt == MarkerType.LATEST_LOCATION:
        return MarkerStyle(MarkerShape.PIN, "success", "", z, title)
    elif mt == MarkerType.CONTENTS_ADDED:
        glyph = str(point.contents_added_count) if point.contents_added_count else "+"
        return MarkerStyle(MarkerShape.LARGE, "success", glyph, z, title)
    elif mt == MarkerType.CONTENTS_REMOVED:
        glyph = str(point.contents_removed_count) if point.contents_removed_count else "−"
        return MarkerStyle(MarkerShape.LARGE, "danger", glyph, z, title)
    elif mt == MarkerType.TRACKER_PATH or mt is None:
        return MarkerStyle(MarkerShape.SMALL, None, "", z, title)
    else:
        raise RuntimeError(f"Unhandled marker_type: {mt}")


def circle_color_role(marker_type: MarkerType | None) -> str:
    """Palette key for a marker's radius circle."""
    if marker_type in (MarkerType.LATEST_LOCATION, MarkerType.CONTENTS_ADDED):
        return "success"
    if marker_type == MarkerType.CONTENTS_REMOVED:
        return "danger"
    return "secondary"


def marker_popup(point: ManifestMapPoint, tz: tzinfo | None = None) -> MarkerPopup:
    """Info popup content for a point."""
    rows: list[tuple[str, str]] = []
    place_url = None

    if point.place_name:
        rows.append(("Place", point.place_name))
        if point.place_id:
            place_url = f"/places/{point.place_id}"
    if point.timestamp:
        rows.append(("Date", format_datetime(point.timestamp, tz)))
    if point.marker_type == MarkerType.TARGET_PLACE and point.deadline:
        rows.append(("Deadline", format_datetime(point.deadline, tz)))
    if point.radius:
        label = "Accuracy" if point.marker_type == MarkerType.LATEST_LOCATION else "Radius"
        rows.append((label, format_length(point.radius)))
    if point.marker_type == MarkerType.CONTENTS_ADDED and point.contents_added_count:
        rows.append(("Added Contents", str(point.contents_added_count)))
    if point.marker_type == MarkerType.CONTENTS_REMOVED and point.contents_removed_count:
        rows.append(("Removed Contents", str(point.contents_removed_count)))

    return MarkerPopup(title=marker_title(point, tz), rows=rows, place_url=place_url)


def popup_html(popup: MarkerPopup) -> str:
    """Tooltip HTML for a popup."""
    parts = [f"<b>{html.escape(popup.title)}</b>"]
    parts.extend(f"<br/><b>{html.escape(label)}:</b> {html.escape(value)}" for label, value in popup.rows)
    return "".join(parts)


class MarkerRenderer:
    """Builds Pydeck layers for the visible markers.

    Example:
        renderer = MarkerRenderer(theme="dark")
        layers = renderer.create_layers(markers=[("point-0", point)], selection=ctx.selection)
    """

    def __init__(self, theme: str = StyleConfig.DEFAULT_THEME) -> None:
        self.theme = theme

    @property
    def palette(self) -> dict[str, str]:
        return StyleConfig.palette(self.theme)

    def _fill_color(self, style: MarkerStyle) -> list[int]:
        if style.color_role is None:
            return StyleConfig.hex_to_rgba(MarkerConfig.SMALL_MARKER_COLOR)
        return StyleConfig.hex_to_rgba(self.palette[style.color_role])

    @staticmethod
    def _radius_px(style: MarkerStyle, highlighted: bool) -> float:
        if style.shape == MarkerShape.LARGE:
            size = MarkerConfig.SIZE_LARGE
        elif style.shape == MarkerShape.PIN:
            size = MarkerConfig.SIZE_PIN
        else:
            size = MarkerConfig.SIZE_SMALL
        radius = size / 2
        return radius * MarkerConfig.HIGHLIGHT_SCALE if highlighted else radius

    def create_layers(
        self,
        markers: list[tuple[str, ManifestMapPoint]],
        selection: SelectionContext,
    ) -> list[pdk.Layer]:
        """Create marker and label layers.

        Args:
            markers: (marker_id, point) pairs that should render
            selection: Current selection, used to enlarge active/hovered markers

        Returns:
            [ScatterplotLayer, TextLayer]
        """
        rows = []
        for marker_id, point in markers:
            if not point.has_geometry:
                continue
            style = marker_style(point)
            highlighted = selection.is_active(marker_id) or selection.is_hovered(marker_id)
            lon, lat = point.lon_lat
            rows.append(
                {
                    "type": ClickConfig.TYPE_MARKER,
                    "id": marker_id,
                    "position": [lon, lat],
                    "color": self._fill_color(style),
                    "radius": self._radius_px(style, highlighted),
                    "glyph": style.glyph,
                    "z": style.z_index,
                    "name": style.title,
                    "tooltip": popup_html(marker_popup(point)),
                }
            )

        # Stable sort: equal z keeps input order, higher z drawn last (on top)
        rows.sort(key=lambda r: r["z"])
        label_rows = [r for r in rows if r["glyph"]]

        return [
            pdk.Layer(
                "ScatterplotLayer",
                rows,
                id="markers",
                get_position="position",
                get_fill_color="color",
                get_radius="radius",
                radius_units="pixels",
                stroked=True,
                get_line_color=StyleConfig.hex_to_rgba(MarkerConfig.BORDER_COLOR),
                line_width_min_pixels=MarkerConfig.BORDER_WIDTH,
                pickable=True,
                auto_highlight=True,
            ),
            pdk.Layer(
                "TextLayer",
                label_rows,
                id="marker_labels",
                get_position="position",
                get_text="glyph",
                get_size=14,
                get_color=[255, 255, 255, 255],
                character_set="auto",
                pickable=False,
            ),
        ]

    @staticmethod
    def create_tooltip_config() -> dict[str, str | dict[str, str]]:
        """Pydeck tooltip configuration: hover shows the marker popup."""
        return {
            "html": "{tooltip}",
            "style": {
                "backgroundColor": "rgba(255, 255, 255, 0.95)",
                "color": "#333",
                "padding": "6px 10px",
                "borderRadius": "4px",
                "maxWidth": f"{MarkerConfig.POPUP_MAX_WIDTH_PX}px",
            },
        }
