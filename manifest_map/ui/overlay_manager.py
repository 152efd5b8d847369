"""Overlay lifecycle - exactly one drawing overlay per map instance.

Uses python-statemachine for the two-state lifecycle:

States:
    UNBOUND: No overlay exists
    BOUND: One overlay exists, attached to slot.map_instance

Transitions:
    UNBOUND -> BOUND: bind (map instance became available)
    BOUND -> BOUND: rebind (map instance identity changed)
    BOUND -> UNBOUND: unbind (teardown)

Two independent triggers drive it:
    Identity-keyed: a different map instance object -> rebind (destroy, then create)
    Content-keyed: a different layer set on the same map -> push props onto the
    existing overlay, never recreate it

Ordering: every transition that creates an overlay first releases the old one
(detach from its map, finalize, drop the reference). Two overlays are never
alive at the same time.
"""

from __future__ import annotations

import itertools
import logging
from collections.abc import Callable, Hashable
from dataclasses import dataclass, field
from typing import TYPE_CHECKING

import pydeck as pdk
from statemachine import State, StateMachine

if TYPE_CHECKING:
    from manifest_map.ui.map_instance import MapInstance

logger = logging.getLogger(__name__)

_overlay_ids = itertools.count(1)


class DeckOverlay:
    """Imperative drawing overlay holding Pydeck layers for one map.

    Lifecycle: set_map(map) attaches, set_props(layers=...) replaces content,
    set_map(None) detaches, finalize() releases. A finalized overlay cannot be
    reused.
    """

    def __init__(self) -> None:
        self.overlay_id = next(_overlay_ids)
        self._map: MapInstance | None = None
        self._layers: list[pdk.Layer] = []
        self.finalized = False

    @property
    def map_instance(self) -> MapInstance | None:
        return self._map

    def set_map(self, map_instance: MapInstance | None) -> None:
        if self.finalized and map_instance is not None:
            raise RuntimeError(f"Overlay {self.overlay_id} is finalized and cannot be attached")
        if self._map is not None:
            self._map.detach(self)
        self._map = map_instance
        if map_instance is not None:
            map_instance.attach(self)

    def set_props(self, layers: list[pdk.Layer]) -> None:
        if self.finalized:
            raise RuntimeError(f"Overlay {self.overlay_id} is finalized")
        self._layers = list(layers)

    def get_layers(self) -> list[pdk.Layer]:
        return list(self._layers)

    def finalize(self) -> None:
        self.set_map(None)
        self._layers = []
        self.finalized = True

    def __repr__(self) -> str:
        return f"DeckOverlay(id={self.overlay_id}, layers={len(self._layers)}, finalized={self.finalized})"


@dataclass
class OverlaySlot:
    """Single-slot owner of the overlay resource.

    Note: The 'state' field is managed by python-statemachine when this
    object is passed as the model.
    """

    overlay_factory: Callable[[], DeckOverlay] = DeckOverlay
    state: str | None = None
    overlay: DeckOverlay | None = None
    map_instance: MapInstance | None = None
    layers: tuple[pdk.Layer, ...] = field(default_factory=tuple)
    created_count: int = 0
    destroyed_count: int = 0

    def create(self, map_instance: MapInstance) -> None:
        """Construct a new overlay, attach it and push the current layers."""
        if self.overlay is not None:
            raise RuntimeError("Overlay slot is occupied; release before create")
        overlay = self.overlay_factory()
        overlay.set_map(map_instance)
        overlay.set_props(layers=list(self.layers))
        self.overlay = overlay
        self.map_instance = map_instance
        self.created_count += 1
        logger.info(f"[OVERLAY] Created overlay {overlay.overlay_id} on map {map_instance.instance_id}")

    def release(self) -> None:
        """Detach the overlay from its map and drop it."""
        if self.overlay is None:
            return
        overlay = self.overlay
        overlay.set_map(None)
        overlay.finalize()
        self.overlay = None
        self.map_instance = None
        self.destroyed_count += 1
        logger.info(f"[OVERLAY] Destroyed overlay {overlay.overlay_id}")


class OverlayLifecycle(StateMachine):
    """Unbound/Bound lifecycle of the drawing overlay."""

    unbound = State("Unbound", initial=True)
    bound = State("Bound")

    bind = unbound.to(bound)
    rebind = bound.to(bound)
    unbind = bound.to(unbound)

    def before_bind(self, map_instance: MapInstance) -> None:
        self.model.create(map_instance)

    def before_rebind(self, map_instance: MapInstance) -> None:
        self.model.release()
        self.model.create(map_instance)

    def before_unbind(self) -> None:
        self.model.release()

    def after_transition(self, event: str, source: State, target: State) -> None:
        logger.debug(f"[OVERLAY] {source.name} --({event})--> {target.name}")


class OverlayLifecycleManager:
    """Owns the single drawing overlay of the manifest map.

    Example:
        manager = OverlayLifecycleManager()
        manager.sync(map_instance=map_instance, layers=[trip.to_layer()], content_key=key)
        ...
        manager.detach()
    """

    def __init__(self, overlay_factory: Callable[[], DeckOverlay] = DeckOverlay) -> None:
        self.slot = OverlaySlot(overlay_factory=overlay_factory)
        self.machine = OverlayLifecycle(model=self.slot)
        self._content_key: Hashable | None = None

    @property
    def is_bound(self) -> bool:
        return self.machine.bound.is_active

    @property
    def overlay(self) -> DeckOverlay | None:
        return self.slot.overlay

    @property
    def created_count(self) -> int:
        return self.slot.created_count

    @property
    def destroyed_count(self) -> int:
        return self.slot.destroyed_count

    def attach(self, map_instance: MapInstance | None) -> bool:
        """Bind to map_instance, replacing an overlay bound to a different map.

        Returns:
            True if a new overlay was created.
        """
        if map_instance is None:
            return False
        if self.is_bound:
            current = self.slot.map_instance
            if current is map_instance:
                return False
            logger.info(f"[OVERLAY] Map instance changed -> {map_instance.instance_id}")
            self.machine.send("rebind", map_instance=map_instance)
        else:
            self.machine.send("bind", map_instance=map_instance)
        return True

    def update(self, layers: list[pdk.Layer]) -> None:
        """Push new layers onto the existing overlay. Unbound: keep for next bind."""
        self.slot.layers = tuple(layers)
        if self.slot.overlay is not None:
            self.slot.overlay.set_props(layers=list(layers))

    def detach(self) -> None:
        if self.is_bound:
            self.machine.send("unbind")
        self._content_key = None

    def sync(
        self,
        map_instance: MapInstance | None,
        layers: list[pdk.Layer],
        content_key: Hashable,
    ) -> None:
        """Per-render reconciliation of identity and content.

        Args:
            map_instance: Current map instance, None while the map is unavailable
            layers: Layers for the current content
            content_key: Hashable summary of the content; layers are only
                pushed when it differs from the last synced key
        """
        content_changed = content_key != self._content_key
        if content_changed:
            self._content_key = content_key
            self.slot.layers = tuple(layers)

        if map_instance is None:
            if self.is_bound:
                self.machine.send("unbind")
            return

        created = self.attach(map_instance)
        if content_changed and not created:
            self.update(layers)
