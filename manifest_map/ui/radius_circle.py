"""Radius circle - auxiliary overlay showing a marker's radius or accuracy.

Each marker with a radius owns one RadiusCircleRenderer. On every sync the
renderer first destroys the existing circle, then creates a new one only if
the circle should be visible and a map instance exists. A sync with the same
map, center, radius, visibility and colour as the previous one is a no-op.

Clicking the circle runs the owner's handler (deselect the marker if active).
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from typing import TYPE_CHECKING

import pydeck as pdk

from manifest_map.constants import CircleConfig, ClickConfig, StyleConfig
from manifest_map.ui.marker_renderer import format_length

if TYPE_CHECKING:
    from manifest_map.ui.map_instance import MapInstance

logger = logging.getLogger(__name__)


class RadiusCircle:
    """A clickable circle drawn in meters around a center point."""

    def __init__(
        self,
        owner_id: str,
        center: tuple[float, float],
        radius_m: float,
        colour: str,
        on_click: Callable[[], None] | None = None,
    ) -> None:
        """Initialize circle.

        Args:
            owner_id: Marker ID owning this circle
            center: (lat, lon) of the circle center
            radius_m: Radius in meters
            colour: Hex stroke and fill colour
            on_click: Handler run when the circle is clicked
        """
        self.owner_id = owner_id
        self.center = center
        self.radius_m = radius_m
        self.colour = colour
        self.on_click = on_click
        self._map: MapInstance | None = None

    @property
    def map_instance(self) -> MapInstance | None:
        return self._map

    def set_map(self, map_instance: MapInstance | None) -> None:
        if self._map is not None:
            self._map.detach(self)
        self._map = map_instance
        if map_instance is not None:
            map_instance.attach(self)

    def click(self) -> None:
        if self.on_click is not None:
            self.on_click()

    def get_layers(self) -> list[pdk.Layer]:
        lat, lon = self.center
        return [
            pdk.Layer(
                "ScatterplotLayer",
                [
                    {
                        "type": ClickConfig.TYPE_CIRCLE,
                        "id": self.owner_id,
                        "position": [lon, lat],
                        "radius": self.radius_m,
                        "tooltip": f"Radius {format_length(self.radius_m)}",
                    }
                ],
                id=f"{CircleConfig.LAYER_ID_PREFIX}_{self.owner_id}",
                get_position="position",
                get_radius="radius",
                radius_units="meters",
                stroked=True,
                filled=True,
                get_fill_color=StyleConfig.hex_to_rgba(self.colour, alpha=CircleConfig.FILL_OPACITY),
                get_line_color=StyleConfig.hex_to_rgba(self.colour, alpha=CircleConfig.STROKE_OPACITY),
                line_width_min_pixels=CircleConfig.STROKE_WEIGHT,
                pickable=True,
            )
        ]

    def __repr__(self) -> str:
        return f"RadiusCircle(owner={self.owner_id}, radius={self.radius_m:.0f}m)"


class RadiusCircleRenderer:
    """Owns at most one RadiusCircle for a marker."""

    def __init__(self, owner_id: str) -> None:
        self.owner_id = owner_id
        self.circle: RadiusCircle | None = None
        self._last_key: tuple | None = None
        self.created_count = 0
        self.destroyed_count = 0

    def destroy(self) -> None:
        """Detach and release the current circle, if any."""
        if self.circle is not None:
            self.circle.set_map(None)
            self.circle = None
            self.destroyed_count += 1
            logger.debug(f"[CIRCLE] Destroyed circle for {self.owner_id}")
        self._last_key = None

    def sync(
        self,
        map_instance: MapInstance | None,
        center: tuple[float, float],
        radius_m: float,
        visible: bool,
        colour: str,
        on_click: Callable[[], None] | None = None,
    ) -> None:
        """Reconcile the circle with the current inputs.

        Args:
            map_instance: Map to draw on, None while unavailable
            center: (lat, lon) circle center
            radius_m: Radius in meters
            visible: Whether the owning marker is hovered or active
            colour: Hex colour
            on_click: Click handler for the circle
        """
        key = (id(map_instance), center, radius_m, visible, colour)
        if key == self._last_key and (self.circle is None or self.circle.map_instance is map_instance):
            if self.circle is not None:
                self.circle.on_click = on_click
            return

        self.destroy()
        self._last_key = key

        if not visible or map_instance is None:
            return

        circle = RadiusCircle(
            owner_id=self.owner_id,
            center=center,
            radius_m=radius_m,
            colour=colour,
            on_click=on_click,
        )
        circle.set_map(map_instance)
        self.circle = circle
        self.created_count += 1
        logger.debug(f"[CIRCLE] Created circle for {self.owner_id} ({radius_m:.0f}m)")
