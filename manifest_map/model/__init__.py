"""Data model classes for manifest map rendering.

- MarkerType: Category of a map point
- ManifestMapPoint: One timeline event or place reference (immutable)
- ManifestMapData: Point list plus loading/error indicator
- VisibilitySettings: The four category toggles
"""

from manifest_map.model.map_point import (
    CONTENT_MARKER_TYPES,
    PLACE_MARKER_TYPES,
    ManifestMapData,
    ManifestMapPoint,
    MarkerType,
    parse_timestamp,
)
from manifest_map.model.visibility import VisibilitySettings

__all__ = [
    "MarkerType",
    "ManifestMapPoint",
    "ManifestMapData",
    "VisibilitySettings",
    "PLACE_MARKER_TYPES",
    "CONTENT_MARKER_TYPES",
    "parse_timestamp",
]
