"""Marker interaction - single selection, hover, and viewport fitting.

Selection rules:
- click(marker) makes it the ONLY active marker
- hover flags are per marker and never change the active marker
- a popup shows for a marker iff it is active OR hovered
- a marker whose category becomes hidden loses its hover flag, and if it
  was active, the selection is cleared

Viewport rules on click:
- radius > 0: fit the circular bounds (center ± radius) with DEFAULT_PADDING
- otherwise: pan to the marker and set DEFAULT_ZOOM

All map operations are skipped while no map instance exists.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from typing import TYPE_CHECKING

from manifest_map.constants import MapConfig
from manifest_map.core.geo_calculator import GeoCalculator, LatLngBounds
from manifest_map.core.visibility_filter import is_marker_visible
from manifest_map.model.map_point import ManifestMapPoint
from manifest_map.model.visibility import VisibilitySettings
from manifest_map.ui.context import SelectionContext

if TYPE_CHECKING:
    from manifest_map.ui.map_instance import MapInstance

logger = logging.getLogger(__name__)


class MarkerInteractionController:
    """Sole mutator of SelectionContext."""

    def __init__(self, selection: SelectionContext | None = None) -> None:
        self.selection = selection or SelectionContext()

    @property
    def active_marker_id(self) -> str | None:
        return self.selection.active_marker_id

    # =========================================================================
    # SELECTION
    # =========================================================================

    def click(self, marker_id: str, point: ManifestMapPoint, map_instance: MapInstance | None) -> None:
        """Activate marker and move the viewport to it."""
        self.selection.active_marker_id = marker_id
        logger.info(f"[MARKER] Selected {marker_id}")

        if map_instance is None or not point.has_geometry:
            return

        lat, lon = point.display_latitude, point.display_longitude
        assert lat is not None and lon is not None
        if point.has_radius:
            assert point.radius is not None
            bounds = GeoCalculator.circle_bounds(lat=lat, lon=lon, radius_m=point.radius)
            map_instance.fit_bounds(bounds, MapConfig.DEFAULT_PADDING)
        else:
            map_instance.pan_to(lat=lat, lon=lon)
            map_instance.set_zoom(MapConfig.DEFAULT_ZOOM)

    def clear_selection(self) -> None:
        """Clear the active marker (map background click, popup close)."""
        if self.selection.active_marker_id is not None:
            logger.info(f"[MARKER] Deselected {self.selection.active_marker_id}")
        self.selection.active_marker_id = None

    def deselect_if_active(self, marker_id: str) -> None:
        """Clear selection only if marker_id is the active marker."""
        if self.selection.is_active(marker_id):
            self.clear_selection()

    # =========================================================================
    # HOVER
    # =========================================================================

    def hover_enter(self, marker_id: str) -> None:
        self.selection.hovered.add(marker_id)

    def hover_leave(self, marker_id: str) -> None:
        self.selection.hovered.discard(marker_id)

    def is_popup_visible(self, marker_id: str) -> bool:
        return self.selection.is_active(marker_id) or self.selection.is_hovered(marker_id)

    # =========================================================================
    # CLEANUP
    # =========================================================================

    def apply_visibility(
        self,
        markers: Mapping[str, ManifestMapPoint],
        settings: VisibilitySettings,
    ) -> list[str]:
        """Drop hover/active state of markers whose category is hidden.

        Returns:
            IDs of hidden markers whose state was touched.
        """
        touched = []
        for marker_id, point in markers.items():
            if is_marker_visible(point.marker_type, settings):
                continue
            was_hovered = self.selection.is_hovered(marker_id)
            was_active = self.selection.is_active(marker_id)
            if not (was_hovered or was_active):
                continue
            self.selection.hovered.discard(marker_id)
            if was_active:
                self.selection.active_marker_id = None
                logger.info(f"[MARKER] Cleared selection of hidden marker {marker_id}")
            touched.append(marker_id)
        return touched

    def prune(self, marker_ids: Iterable[str]) -> None:
        """Forget state of markers that no longer exist."""
        existing = set(marker_ids)
        self.selection.hovered &= existing
        if self.selection.active_marker_id is not None and self.selection.active_marker_id not in existing:
            self.clear_selection()

    # =========================================================================
    # VIEWPORT
    # =========================================================================

    @staticmethod
    def _bounds_of(points: Iterable[ManifestMapPoint]) -> LatLngBounds:
        return LatLngBounds.from_lat_lons(
            (point.latitude, point.longitude)
            for point in points
            if point.latitude is not None and point.longitude is not None
        )

    def zoom_to_fit(self, points: Iterable[ManifestMapPoint], map_instance: MapInstance | None) -> bool:
        """Fit the viewport to the given (visible) points.

        Returns:
            True if the viewport was moved.
        """
        if map_instance is None:
            return False
        bounds = self._bounds_of(points)
        if bounds.is_empty:
            return False
        map_instance.fit_bounds(bounds, MapConfig.DEFAULT_PADDING)
        return True

    def fit_to_data(self, points: Iterable[ManifestMapPoint], map_instance: MapInstance | None) -> bool:
        """Initial fit after a data load: every point with geometry, regardless of toggles."""
        return self.zoom_to_fit(points, map_instance)
