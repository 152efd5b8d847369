"""Visibility filter - which categories render under the current toggles.

Category membership is fixed:
    START_PLACE, END_PLACE, TARGET_PLACE -> show_manifest_places
    CONTENTS_ADDED, CONTENTS_REMOVED     -> show_contents_places
    LATEST_LOCATION                      -> show_latest_location
    anything else (TRACKER_PATH, unknown) -> always visible

show_manifest_path only gates the trip-path overlay.
"""

from manifest_map.model.map_point import (
    CONTENT_MARKER_TYPES,
    PLACE_MARKER_TYPES,
    ManifestMapPoint,
    MarkerType,
)
from manifest_map.model.visibility import VisibilitySettings


def is_marker_visible(marker_type: MarkerType | None, settings: VisibilitySettings) -> bool:
    """Return True if markers of this category should render."""
    if marker_type in PLACE_MARKER_TYPES:
        return settings.show_manifest_places
    if marker_type in CONTENT_MARKER_TYPES:
        return settings.show_contents_places
    if marker_type == MarkerType.LATEST_LOCATION:
        return settings.show_latest_location
    return True


def is_path_visible(settings: VisibilitySettings) -> bool:
    return settings.show_manifest_path


def filter_visible(
    points: list[ManifestMapPoint] | tuple[ManifestMapPoint, ...],
    settings: VisibilitySettings,
) -> list[ManifestMapPoint]:
    """Render-eligible subset: visible category AND has geometry."""
    return [p for p in points if p.has_geometry and is_marker_visible(p.marker_type, settings)]
