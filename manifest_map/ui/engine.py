"""Manifest map engine - wires the resolver, filter, path builder and UI controllers.

Per render cycle:
    raw points -> OverlapResolver (adjusted coordinates)
               -> visibility filter (markers, zoom-to-fit set)
               -> TripPathBuilder (full adjusted list, gated by show_manifest_path)
               -> overlay sync (identity-keyed + content-keyed)
               -> radius circle syncs (hovered or active markers)

The engine never raises for degenerate data: missing geometry, short paths,
unknown categories and an absent map instance all degrade to drawing less.
"""

from __future__ import annotations

import functools
import logging
from collections.abc import Callable

import pydeck as pdk

from manifest_map.constants import ClickConfig, MapConfig, StyleConfig
from manifest_map.core.overlap_resolver import OverlapResolver
from manifest_map.core.trip_path import TripPath, TripPathBuilder
from manifest_map.core.visibility_filter import is_marker_visible, is_path_visible
from manifest_map.model.map_point import ManifestMapData, ManifestMapPoint
from manifest_map.model.visibility import VisibilitySettings
from manifest_map.ui.context import ManifestMapContext
from manifest_map.ui.map_instance import DeckMapInstance, MapInstance
from manifest_map.ui.marker_controller import MarkerInteractionController
from manifest_map.ui.marker_renderer import MarkerPopup, MarkerRenderer, circle_color_role, marker_popup
from manifest_map.ui.overlay_manager import DeckOverlay, OverlayLifecycleManager
from manifest_map.ui.radius_circle import RadiusCircleRenderer
from manifest_map.ui.resize_watcher import ResizeWatcher

logger = logging.getLogger(__name__)


def marker_id_for(index: int) -> str:
    return f"point-{index}"


class ManifestMapEngine:
    """Rendering engine for one manifest map.

    Example:
        engine = ManifestMapEngine()
        engine.set_data(ManifestMapData.load_json(path))
        engine.bind_map(DeckMapInstance(instance_id=engine.context.view.map_key))
        engine.on_marker_click("point-2")
        deck = engine.render()
    """

    def __init__(
        self,
        context: ManifestMapContext | None = None,
        overlay_factory: Callable[[], DeckOverlay] = DeckOverlay,
    ) -> None:
        self.context = context or ManifestMapContext()
        self.overlays = OverlayLifecycleManager(overlay_factory=overlay_factory)
        self.controller = MarkerInteractionController(selection=self.context.selection)
        self.renderer = MarkerRenderer(theme=self.context.view.theme)
        self.map_instance: MapInstance | None = None
        self.resize_watcher: ResizeWatcher | None = None
        self._circles: dict[str, RadiusCircleRenderer] = {}
        self._data = ManifestMapData()
        self._points: tuple[ManifestMapPoint, ...] = ()
        self._data_version = 0

    # =========================================================================
    # DATA
    # =========================================================================

    @property
    def data(self) -> ManifestMapData:
        return self._data

    @property
    def points(self) -> tuple[ManifestMapPoint, ...]:
        """Adjusted points, in input order."""
        return self._points

    @property
    def markers(self) -> dict[str, ManifestMapPoint]:
        """Marker ID -> adjusted point, for every point with geometry."""
        return {marker_id_for(i): p for i, p in enumerate(self._points) if p.has_geometry}

    @property
    def visibility(self) -> VisibilitySettings:
        return self.context.visibility

    def visible_markers(self) -> list[tuple[str, ManifestMapPoint]]:
        settings = self.context.visibility
        return [(mid, p) for mid, p in self.markers.items() if is_marker_visible(p.marker_type, settings)]

    @property
    def visible_points(self) -> list[ManifestMapPoint]:
        return [p for _, p in self.visible_markers()]

    def set_data(self, data: ManifestMapData) -> bool:
        """Load a new point list. Re-setting equal data is a no-op.

        Returns:
            True if the point list changed.
        """
        self.context.error_panel.observe(data.error)
        points_changed = data.points != self._data.points
        self._data = data
        if not points_changed:
            return False

        self._points = OverlapResolver.resolve(data.points)
        self._data_version += 1
        marker_ids = self.markers.keys()
        self.controller.prune(marker_ids)
        for stale_id in set(self._circles) - set(marker_ids):
            self._circles.pop(stale_id).destroy()

        logger.info(f"[RENDER] Loaded {len(self._points)} points (version {self._data_version})")
        self.controller.fit_to_data(self._points, self.map_instance)
        self.refresh()
        return True

    # =========================================================================
    # VISIBILITY / THEME
    # =========================================================================

    def toggle_visibility(self, setting: str) -> bool:
        """Flip one visibility flag by name and re-render.

        Returns:
            The new value of the flag.
        """
        value = self.context.visibility.toggle(setting)
        logger.info(f"[RENDER] {setting} -> {value}")
        self.refresh()
        return value

    def set_visibility(self, setting: str, value: bool) -> None:
        if getattr(self.context.visibility, setting, None) == value:
            return
        self.context.visibility.set(setting, value)
        self.refresh()

    def set_theme(self, theme: str) -> None:
        """Switch the colour theme. The map key changes, so the host remounts the map."""
        if theme == self.context.view.theme:
            return
        self.context.view.theme = theme
        self.renderer.theme = theme
        self.refresh()

    # =========================================================================
    # MAP INSTANCE
    # =========================================================================

    def bind_map(self, map_instance: MapInstance | None) -> bool:
        """Point the engine at the current map instance.

        A new identity fits the viewport to the data and rebinds every
        drawable; the same identity only re-syncs.

        Returns:
            True if the map instance identity changed.
        """
        changed = map_instance is not self.map_instance
        current_id = self.map_instance.instance_id if self.map_instance is not None else None
        new_id = map_instance.instance_id if map_instance is not None else None
        self.map_instance = map_instance
        if changed:
            logger.info(f"[MAP] Map instance {current_id} -> {new_id}")
            self.controller.fit_to_data(self._points, map_instance)
        self.refresh()
        return changed

    def teardown(self) -> None:
        """Release every drawable bound to the map."""
        for renderer in self._circles.values():
            renderer.destroy()
        self._circles.clear()
        self.overlays.detach()
        self.map_instance = None
        if self.resize_watcher is not None:
            self.resize_watcher.cancel()
        logger.info("[RENDER] Engine torn down")

    # =========================================================================
    # INTERACTION CALLBACKS
    # =========================================================================

    def on_marker_click(self, marker_id: str) -> None:
        point = self.markers.get(marker_id)
        if point is None:
            logger.warning(f"[MARKER] Click on unknown marker {marker_id}")
            return
        if not is_marker_visible(point.marker_type, self.context.visibility):
            logger.debug(f"[MARKER] Ignoring click on hidden marker {marker_id}")
            return
        self.controller.click(marker_id, point, self.map_instance)
        self.refresh()

    def on_marker_hover(self, marker_id: str, hovering: bool) -> None:
        if marker_id not in self.markers:
            return
        if hovering:
            self.controller.hover_enter(marker_id)
        else:
            self.controller.hover_leave(marker_id)
        self.refresh()

    def on_map_click(self) -> None:
        """Background click clears the active marker."""
        self.controller.clear_selection()
        self.refresh()

    def on_circle_click(self, marker_id: str) -> None:
        """Radius circle click deselects its marker if that marker is active."""
        self.controller.deselect_if_active(marker_id)
        self.refresh()

    def close_popup(self, marker_id: str) -> None:
        self.controller.hover_leave(marker_id)
        self.controller.deselect_if_active(marker_id)
        self.refresh()

    def zoom_to_fit(self) -> bool:
        """Fit the viewport to every visible marker."""
        return self.controller.zoom_to_fit(self.visible_points, self.map_instance)

    def popup_for(self, marker_id: str) -> MarkerPopup | None:
        """Popup content if the marker's popup should show, else None."""
        point = self.markers.get(marker_id)
        if point is None or not self.controller.is_popup_visible(marker_id):
            return None
        return marker_popup(point)

    def active_popup(self) -> tuple[str, MarkerPopup] | None:
        marker_id = self.controller.active_marker_id
        if marker_id is None:
            return None
        popup = self.popup_for(marker_id)
        return (marker_id, popup) if popup is not None else None

    # =========================================================================
    # RESIZE
    # =========================================================================

    def handle_resize(self, width: float, height: float) -> bool:
        """Feed a viewport size; the first call only records the baseline."""
        if self.resize_watcher is None:
            self.resize_watcher = ResizeWatcher(width=width, height=height, on_zoom=self.context.view.bump_map_version)
            return False
        return self.resize_watcher.on_resize(width=width, height=height)

    def poll_resize(self) -> bool:
        """Run a pending debounced remount. Returns True if the map key changed."""
        if self.resize_watcher is None:
            return False
        return self.resize_watcher.poll()

    # =========================================================================
    # RENDER
    # =========================================================================

    def trip_path(self) -> TripPath | None:
        """Trip path for the current points and theme (ignores the path toggle)."""
        color = StyleConfig.palette(self.context.view.theme)["primary"]
        return TripPathBuilder.build(self._points, color_hex=color)

    def refresh(self) -> None:
        """Reconcile selection, overlay and circles with the current inputs."""
        settings = self.context.visibility
        self.controller.apply_visibility(self.markers, settings)

        path = self.trip_path() if is_path_visible(settings) else None
        layers = [path.to_layer()] if path is not None else []
        content_key = (self._data_version, path is not None, self.context.view.theme)
        self.overlays.sync(map_instance=self.map_instance, layers=layers, content_key=content_key)

        self._sync_circles()

    def _sync_circles(self) -> None:
        settings = self.context.visibility
        palette = StyleConfig.palette(self.context.view.theme)
        for marker_id, point in self.markers.items():
            if not point.has_radius:
                continue
            renderer = self._circles.get(marker_id)
            if renderer is None:
                renderer = self._circles[marker_id] = RadiusCircleRenderer(owner_id=marker_id)
            lat, lon = point.display_latitude, point.display_longitude
            assert lat is not None and lon is not None and point.radius is not None
            visible = is_marker_visible(point.marker_type, settings) and self.controller.is_popup_visible(marker_id)
            renderer.sync(
                map_instance=self.map_instance,
                center=(lat, lon),
                radius_m=point.radius,
                visible=visible,
                colour=palette[circle_color_role(point.marker_type)],
                on_click=functools.partial(self.on_circle_click, marker_id),
            )

    def circle_renderer(self, marker_id: str) -> RadiusCircleRenderer | None:
        return self._circles.get(marker_id)

    def render(self) -> pdk.Deck:
        """Build the deck: drawables (path, circles) below the markers.

        Z-order (back to front): trip path -> radius circles -> markers -> labels
        """
        if self.map_instance is None:
            view_state = pdk.ViewState(
                latitude=MapConfig.INITIAL_LATITUDE,
                longitude=MapConfig.INITIAL_LONGITUDE,
                zoom=MapConfig.INITIAL_ZOOM,
            )
            drawable_layers: list[pdk.Layer] = []
        elif isinstance(self.map_instance, DeckMapInstance):
            view_state = self.map_instance.get_view_state()
            drawable_layers = self.map_instance.drawable_layers()
        else:
            raise TypeError(f"Cannot render onto {type(self.map_instance).__name__}")

        marker_layers = self.renderer.create_layers(markers=self.visible_markers(), selection=self.context.selection)
        theme = self.context.view.theme
        return pdk.Deck(
            map_style=StyleConfig.MAP_STYLES.get(theme, StyleConfig.MAP_STYLES[StyleConfig.DEFAULT_THEME]),
            initial_view_state=view_state,
            layers=drawable_layers + marker_layers,
            tooltip=self.renderer.create_tooltip_config(),
            parameters={"pickingRadius": ClickConfig.PICKING_RADIUS_PX},
        )

    def __repr__(self) -> str:
        return f"ManifestMapEngine(points={len(self._points)}, map={self.map_instance}, ctx={self.context})"
