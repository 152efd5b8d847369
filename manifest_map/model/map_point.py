"""ManifestMapPoint - one observed event or place reference on a manifest timeline.

Points arrive already deserialized from the REST layer and are never mutated.
Derived display coordinates are produced by the overlap resolver as NEW point
objects (dataclasses.replace), never written back onto the input.

Coordinate conventions:
    latitude/longitude: authoritative source coordinates
    adjusted_latitude/adjusted_longitude: display-only, after overlap resolution
    lon_lat: (lon, lat) order for Pydeck (GeoJSON standard)
"""

import json
import logging
import math
from dataclasses import dataclass, field
from datetime import datetime, timezone
from enum import Enum
from pathlib import Path
from typing import Any, Optional

logger = logging.getLogger(__name__)


class MarkerType(Enum):
    """Semantic role of a map point."""

    START_PLACE = "START_PLACE"
    END_PLACE = "END_PLACE"
    TARGET_PLACE = "TARGET_PLACE"
    LATEST_LOCATION = "LATEST_LOCATION"
    CONTENTS_ADDED = "CONTENTS_ADDED"
    CONTENTS_REMOVED = "CONTENTS_REMOVED"
    TRACKER_PATH = "TRACKER_PATH"

    @staticmethod
    def parse(value: Any) -> Optional["MarkerType"]:
        """Parse a marker type string. Unknown categories return None."""
        if isinstance(value, MarkerType):
            return value
        try:
            return MarkerType(value)
        except ValueError:
            logger.warning(f"Unknown marker type {value!r}, rendering as default marker")
            return None


PLACE_MARKER_TYPES = frozenset({MarkerType.START_PLACE, MarkerType.END_PLACE, MarkerType.TARGET_PLACE})
CONTENT_MARKER_TYPES = frozenset({MarkerType.CONTENTS_ADDED, MarkerType.CONTENTS_REMOVED})


def parse_timestamp(value: Any) -> datetime | None:
    """Parse an ISO-8601 timestamp. Naive values are taken as UTC.

    Returns None for missing or unparseable values.
    """
    if value is None or value == "":
        return None
    if isinstance(value, datetime):
        parsed = value
    else:
        try:
            parsed = datetime.fromisoformat(str(value).replace("Z", "+00:00"))
        except ValueError:
            logger.warning(f"Ignoring unparseable timestamp {value!r}")
            return None
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return parsed


def _parse_float(value: Any, name: str) -> float | None:
    if value is None or value == "":
        return None
    try:
        number = float(value)
    except (TypeError, ValueError):
        logger.warning(f"Ignoring non-numeric {name} {value!r}")
        return None
    if not math.isfinite(number):
        logger.warning(f"Ignoring non-finite {name} {value!r}")
        return None
    return number


def _parse_int(value: Any, name: str) -> int | None:
    number = _parse_float(value, name)
    return int(number) if number is not None else None


@dataclass(frozen=True)
class ManifestMapPoint:
    """A single manifest timeline point.

    Attributes:
        marker_type: Category of the point, None if the category is unknown
        latitude: Source latitude in decimal degrees (None = missing geometry)
        longitude: Source longitude in decimal degrees (None = missing geometry)
        adjusted_latitude: Display latitude after overlap resolution
        adjusted_longitude: Display longitude after overlap resolution
        timestamp: Event time, required for inclusion in the trip path
        radius: Place radius or location accuracy in meters
        place_id: Referenced place ID
        place_name: Referenced place name
        deadline: Arrival deadline (TARGET_PLACE only)
        contents_added_count: Number of added contents (CONTENTS_ADDED only)
        contents_removed_count: Number of removed contents (CONTENTS_REMOVED only)
    """

    marker_type: MarkerType | None
    latitude: float | None
    longitude: float | None
    adjusted_latitude: float | None = None
    adjusted_longitude: float | None = None
    timestamp: datetime | None = None
    radius: float | None = None
    place_id: str | None = None
    place_name: str | None = None
    deadline: datetime | None = None
    contents_added_count: int | None = None
    contents_removed_count: int | None = None

    @property
    def has_geometry(self) -> bool:
        """True if both source coordinates are present."""
        return self.latitude is not None and self.longitude is not None

    @property
    def has_radius(self) -> bool:
        """True if the point carries a positive radius."""
        return self.radius is not None and self.radius > 0

    @property
    def display_latitude(self) -> float | None:
        """Adjusted latitude if resolved, else the source latitude."""
        return self.adjusted_latitude if self.adjusted_latitude is not None else self.latitude

    @property
    def display_longitude(self) -> float | None:
        """Adjusted longitude if resolved, else the source longitude."""
        return self.adjusted_longitude if self.adjusted_longitude is not None else self.longitude

    @property
    def lon_lat(self) -> tuple[float, float]:
        """Return (lon, lat) display tuple - GeoJSON/Pydeck order.

        Raises:
            ValueError: If the point has no geometry. Check has_geometry first.
        """
        lon, lat = self.display_longitude, self.display_latitude
        if lon is None or lat is None:
            raise ValueError("Point has no geometry. Check has_geometry first.")
        return (lon, lat)

    @property
    def timestamp_ms(self) -> int | None:
        """Timestamp as integer milliseconds since the epoch."""
        if self.timestamp is None:
            return None
        return int(round(self.timestamp.timestamp() * 1000))

    @staticmethod
    def from_dict(dto: dict[str, Any]) -> "ManifestMapPoint":
        """Build a point from the REST camelCase shape."""
        place_id = dto.get("placeId")
        return ManifestMapPoint(
            marker_type=MarkerType.parse(dto.get("markerType")),
            latitude=_parse_float(dto.get("latitude"), "latitude"),
            longitude=_parse_float(dto.get("longitude"), "longitude"),
            adjusted_latitude=_parse_float(dto.get("adjustedLatitude"), "adjustedLatitude"),
            adjusted_longitude=_parse_float(dto.get("adjustedLongitude"), "adjustedLongitude"),
            timestamp=parse_timestamp(dto.get("timestamp")),
            radius=_parse_float(dto.get("radius"), "radius"),
            place_id=str(place_id) if place_id is not None else None,
            place_name=dto.get("placeName"),
            deadline=parse_timestamp(dto.get("deadline")),
            contents_added_count=_parse_int(dto.get("contentsAddedCount"), "contentsAddedCount"),
            contents_removed_count=_parse_int(dto.get("contentsRemovedCount"), "contentsRemovedCount"),
        )

    def __repr__(self) -> str:
        kind = self.marker_type.value if self.marker_type else "UNKNOWN"
        if not self.has_geometry:
            return f"ManifestMapPoint({kind}, no geometry)"
        return f"ManifestMapPoint({kind}, lat={self.latitude:.6f}, lon={self.longitude:.6f})"


@dataclass(frozen=True)
class ManifestMapData:
    """Manifest map payload plus loading/error indicator from the data layer."""

    points: tuple[ManifestMapPoint, ...] = field(default_factory=tuple)
    loading: bool = False
    error: str | None = None

    @staticmethod
    def from_dict(payload: dict[str, Any]) -> "ManifestMapData":
        """Build from the REST payload shape ({"points": [...]})."""
        raw_points = payload.get("points") or []
        if not isinstance(raw_points, list):
            logger.error(f"Manifest map points must be a list, got {type(raw_points).__name__}")
            return ManifestMapData(error="Manifest map points must be a list")
        points = tuple(ManifestMapPoint.from_dict(dto) for dto in raw_points if isinstance(dto, dict))
        skipped = len(raw_points) - len(points)
        if skipped:
            logger.warning(f"Skipped {skipped} malformed point entries")
        return ManifestMapData(points=points)

    @staticmethod
    def load_json(path: Path) -> "ManifestMapData":
        """Load payload from a JSON file. Read/parse failures become an error indicator."""
        try:
            with open(path, "r", encoding="utf-8") as fh:
                payload = json.load(fh)
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load manifest map data from {path}: {e}")
            return ManifestMapData(error=f"Could not load manifest map data: {e}")
        if not isinstance(payload, dict):
            return ManifestMapData(error="Manifest map data must be a JSON object")
        return ManifestMapData.from_dict(payload)
