"""Trip path builder - time-ordered travel path over the manifest timeline.

Algorithm:
    1. Drop TARGET_PLACE points, untimestamped points and points without geometry
    2. Stable sort ascending by timestamp
    3. Fewer than 2 points -> no path (not an error)
    4. Waypoints (display_lon, display_lat) paired with millisecond timestamps
    5. Timestamps relative to min_time; current_time = max_time,
       trail_length = max_time - min_time

The path is always shown fully drawn, never animated.
"""

import logging
from dataclasses import dataclass

import pydeck as pdk

from manifest_map.constants import ClickConfig, PathConfig, StyleConfig
from manifest_map.model.map_point import ManifestMapPoint, MarkerType

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TripPath:
    """Path layer descriptor.

    Attributes:
        coordinates: Waypoints as (lon, lat), sorted by time
        timestamps_ms: Absolute waypoint times in epoch milliseconds
        min_time: Earliest waypoint time
        max_time: Latest waypoint time
        color: [R, G, B, A] path color
    """

    coordinates: tuple[tuple[float, float], ...]
    timestamps_ms: tuple[int, ...]
    min_time: int
    max_time: int
    color: tuple[int, ...]

    @property
    def relative_timestamps(self) -> list[int]:
        return [t - self.min_time for t in self.timestamps_ms]

    @property
    def current_time(self) -> int:
        return self.max_time

    @property
    def trail_length(self) -> int:
        return self.max_time - self.min_time

    def to_layer(self) -> pdk.Layer:
        """Create the Pydeck TripsLayer for this path."""
        data = [
            {
                "type": ClickConfig.TYPE_PATH,
                "path": [list(c) for c in self.coordinates],
                "timestamps": self.relative_timestamps,
                "tooltip": "Manifest path",
            }
        ]
        return pdk.Layer(
            "TripsLayer",
            data,
            id=PathConfig.LAYER_ID,
            get_path="path",
            get_timestamps="timestamps",
            get_color=list(self.color),
            current_time=self.current_time,
            trail_length=self.trail_length,
            cap_rounded=True,
            joint_rounded=True,
            fade_trail=False,
            width_min_pixels=PathConfig.WIDTH_MIN_PX,
            width_max_pixels=PathConfig.WIDTH_MAX_PX,
            width_scale=PathConfig.WIDTH_SCALE,
            width_units=PathConfig.WIDTH_UNITS,
        )


class TripPathBuilder:
    """Builds the trip path from the adjusted point list."""

    @staticmethod
    def path_points(points: list[ManifestMapPoint] | tuple[ManifestMapPoint, ...]) -> list[ManifestMapPoint]:
        """Eligible points sorted ascending by timestamp (stable for ties)."""
        eligible = [
            p
            for p in points
            if p.marker_type != MarkerType.TARGET_PLACE and p.timestamp is not None and p.has_geometry
        ]
        return sorted(eligible, key=lambda p: p.timestamp_ms or 0)

    @staticmethod
    def build(
        points: list[ManifestMapPoint] | tuple[ManifestMapPoint, ...],
        color_hex: str | None = None,
    ) -> TripPath | None:
        """Build the path descriptor, or None if fewer than two waypoints remain.

        Args:
            points: Full adjusted point list
            color_hex: Path color, defaults to the default theme's primary color
        """
        sorted_points = TripPathBuilder.path_points(points)
        if len(sorted_points) < PathConfig.MIN_WAYPOINTS:
            logger.debug(f"No trip path: {len(sorted_points)} eligible point(s)")
            return None

        coordinates = tuple(p.lon_lat for p in sorted_points)
        timestamps = tuple(p.timestamp_ms or 0 for p in sorted_points)
        color = color_hex or StyleConfig.palette(StyleConfig.DEFAULT_THEME)["primary"]

        return TripPath(
            coordinates=coordinates,
            timestamps_ms=timestamps,
            min_time=min(timestamps),
            max_time=max(timestamps),
            color=tuple(StyleConfig.hex_to_rgba(color)),
        )
