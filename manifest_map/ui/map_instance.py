"""Map instance - the map-widget runtime the engine draws on.

A map instance has an identity (instance_id), a camera, and a set of attached
drawables. Drawables (the trip-path overlay, radius circles) attach and detach
themselves through set_map(); the instance only records them and collects
their Pydeck layers at render time.

The instance_id is what the overlay lifecycle keys on: a new id means a new
map, and every drawable bound to the old one must be torn down first.
"""

import logging
from typing import Protocol, runtime_checkable

import pydeck as pdk

from manifest_map.constants import MapConfig
from manifest_map.core.geo_calculator import GeoCalculator, LatLngBounds

logger = logging.getLogger(__name__)


@runtime_checkable
class Drawable(Protocol):
    """Anything that can be attached to a map and contributes layers."""

    def get_layers(self) -> list[pdk.Layer]: ...


@runtime_checkable
class MapInstance(Protocol):
    """Operations the engine needs from the hosting map widget."""

    @property
    def instance_id(self) -> str: ...

    def fit_bounds(self, bounds: LatLngBounds, padding: int) -> None: ...

    def pan_to(self, lat: float, lon: float) -> None: ...

    def set_zoom(self, zoom: float) -> None: ...

    def attach(self, drawable: Drawable) -> None: ...

    def detach(self, drawable: Drawable) -> None: ...


class DeckMapInstance:
    """Map instance backed by a Pydeck ViewState.

    Example:
        map_instance = DeckMapInstance(instance_id="light-0")
        map_instance.pan_to(lat=-37.81, lon=144.96)
        deck = pdk.Deck(initial_view_state=map_instance.get_view_state(), ...)
    """

    def __init__(
        self,
        instance_id: str,
        lat: float = MapConfig.INITIAL_LATITUDE,
        lon: float = MapConfig.INITIAL_LONGITUDE,
        zoom: float = MapConfig.INITIAL_ZOOM,
        width_px: int = MapConfig.VIEWPORT_WIDTH_PX,
        height_px: int = MapConfig.VIEWPORT_HEIGHT_PX,
    ) -> None:
        self._instance_id = instance_id
        self.lat = lat
        self.lon = lon
        self.zoom = zoom
        self.width_px = width_px
        self.height_px = height_px
        self.camera_version = 0
        self._drawables: list[Drawable] = []

    @property
    def instance_id(self) -> str:
        return self._instance_id

    @property
    def attached(self) -> tuple[Drawable, ...]:
        """Currently attached drawables, in attach order."""
        return tuple(self._drawables)

    @property
    def widget_key(self) -> str:
        """Component key: changes whenever the camera moves so the widget picks up the new view."""
        return f"{self.instance_id}-{self.camera_version}"

    def get_view_state(self) -> pdk.ViewState:
        """Create Pydeck ViewState from the current camera."""
        return pdk.ViewState(latitude=self.lat, longitude=self.lon, zoom=self.zoom, pitch=0, bearing=0)

    def fit_bounds(self, bounds: LatLngBounds, padding: int = MapConfig.DEFAULT_PADDING) -> None:
        if bounds.is_empty:
            return
        fit = GeoCalculator.fit_bounds(
            bounds=bounds,
            width_px=self.width_px,
            height_px=self.height_px,
            padding_px=padding,
        )
        self.lat, self.lon, self.zoom = fit.latitude, fit.longitude, fit.zoom
        self.camera_version += 1
        logger.debug(f"[MAP] {self.instance_id} fit bounds -> ({self.lat:.6f}, {self.lon:.6f}) z={self.zoom:.2f}")

    def pan_to(self, lat: float, lon: float) -> None:
        self.lat = lat
        self.lon = lon
        self.camera_version += 1

    def set_zoom(self, zoom: float) -> None:
        self.zoom = max(MapConfig.MIN_ZOOM, min(MapConfig.MAX_ZOOM, zoom))
        self.camera_version += 1

    def attach(self, drawable: Drawable) -> None:
        if any(d is drawable for d in self._drawables):
            return
        self._drawables.append(drawable)

    def detach(self, drawable: Drawable) -> None:
        self._drawables = [d for d in self._drawables if d is not drawable]

    def drawable_layers(self) -> list[pdk.Layer]:
        """Layers from every attached drawable, in attach order."""
        layers: list[pdk.Layer] = []
        for drawable in self._drawables:
            layers.extend(drawable.get_layers())
        return layers

    def __repr__(self) -> str:
        return f"DeckMapInstance(id={self.instance_id}, drawables={len(self._drawables)})"
