"""Click detection types - unified click information for map interactions.

- MapClickType: what was clicked (MARKER, CIRCLE or BACKGROUND)
- ClickInfo: the only output of ClickDetector

STRICT: All click handling flows through ClickInfo. Any deviation is a bug.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional

from manifest_map.constants import CoordinateConfig


class MapClickType(Enum):
    """Source of click on the map - EXACTLY one per interaction."""

    MARKER = "marker"  # Clicked a marker dot
    CIRCLE = "radius_circle"  # Clicked a marker's radius circle
    BACKGROUND = "background"  # Clicked the map itself (or the trip path)


@dataclass(frozen=True)
class ClickInfo:
    """Unified click information.

    STRICT CONTRACT:
    - MARKER and CIRCLE clicks carry the owning marker_id
    - BACKGROUND clicks carry no marker_id
    - lat/lon are the clicked coordinate when known
    """

    click_type: MapClickType
    marker_id: Optional[str] = None
    lat: Optional[float] = None
    lon: Optional[float] = None

    def __post_init__(self) -> None:
        """Validate invariants - STRICT: fail immediately on invalid state."""
        if self.click_type in (MapClickType.MARKER, MapClickType.CIRCLE):
            if not self.marker_id:
                raise ValueError(f"{self.click_type.name} click must have marker_id set")
        elif self.click_type == MapClickType.BACKGROUND:
            if self.marker_id is not None:
                raise ValueError("BACKGROUND click must NOT have marker_id set")
        else:
            raise RuntimeError(f"Unknown click_type: {self.click_type}")

    @property
    def display_name(self) -> str:
        """Human-readable name for logging."""
        if self.click_type == MapClickType.MARKER:
            return f"Marker {self.marker_id}"
        if self.click_type == MapClickType.CIRCLE:
            return f"Radius circle of {self.marker_id}"
        if self.lat is not None and self.lon is not None:
            return f"Map at ({self.lat:.4f}, {self.lon:.4f})"
        return "Map"

    @staticmethod
    def round_for_key(value: float) -> str:
        """Round coordinate to string for dedup key."""
        return f"{value:.{CoordinateConfig.DEDUP_KEY_DECIMALS}f}"

    def make_dedup_key(self) -> str:
        """Generate deduplication key for click tracking.

        Key format:
            MARKER: "marker_point-3@{lat}_{lon}"
            CIRCLE: "radius_circle_point-3@{lat}_{lon}"
            BACKGROUND: "background@{lat}_{lon}"

        The coordinate part makes a second click on the same marker a new event.
        """
        prefix = self.click_type.value
        if self.marker_id is not None:
            prefix = f"{prefix}_{self.marker_id}"
        if self.lat is None or self.lon is None:
            return prefix
        return f"{prefix}@{self.round_for_key(self.lat)}_{self.round_for_key(self.lon)}"
