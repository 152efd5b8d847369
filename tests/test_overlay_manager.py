"""Tests for OverlayLifecycleManager - one drawing overlay per map instance.

Tests cover:
1. Unbound -> Bound on first map instance
2. Identity change: exactly one destroy-then-create, never two alive
3. Content change on the same map: props pushed, overlay kept
4. Bound -> Unbound on teardown
5. DeckOverlay resource rules
"""

import pytest
from conftest import FakeMapInstance, RecordingOverlayFactory

from manifest_map.ui.overlay_manager import DeckOverlay, OverlayLifecycleManager

LAYERS_A = ["layer-a"]
LAYERS_B = ["layer-b"]


@pytest.fixture
def manager(overlay_factory: RecordingOverlayFactory) -> OverlayLifecycleManager:
    return OverlayLifecycleManager(overlay_factory=overlay_factory)


# =============================================================================
# BINDING
# =============================================================================


class TestBind:
    """Unbound -> Bound."""

    def test_starts_unbound(self, manager: OverlayLifecycleManager) -> None:
        assert not manager.is_bound
        assert manager.overlay is None

    def test_attach_creates_and_attaches(
        self, manager: OverlayLifecycleManager, fake_map: FakeMapInstance, overlay_factory: RecordingOverlayFactory
    ) -> None:
        assert manager.attach(fake_map) is True
        assert manager.is_bound
        assert manager.created_count == 1
        assert fake_map.attached == [manager.overlay]
        assert len(overlay_factory.alive) == 1

    def test_same_instance_is_noop(self, manager: OverlayLifecycleManager, fake_map: FakeMapInstance) -> None:
        manager.attach(fake_map)
        assert manager.attach(fake_map) is False
        assert manager.created_count == 1
        assert manager.destroyed_count == 0

    def test_new_object_with_same_id_rebinds(self, manager: OverlayLifecycleManager, fake_map: FakeMapInstance) -> None:
        manager.attach(fake_map)
        fresh_map = FakeMapInstance(instance_id=fake_map.instance_id)

        assert manager.attach(fresh_map) is True

        assert manager.destroyed_count == 1
        assert fake_map.attached == []
        assert fresh_map.attached == [manager.overlay]

    def test_attach_none_is_noop(self, manager: OverlayLifecycleManager) -> None:
        assert manager.attach(None) is False
        assert not manager.is_bound

    def test_layers_stored_while_unbound_are_pushed_on_bind(
        self, manager: OverlayLifecycleManager, fake_map: FakeMapInstance
    ) -> None:
        manager.update(LAYERS_A)
        manager.attach(fake_map)
        assert manager.overlay is not None
        assert manager.overlay.get_layers() == LAYERS_A


# =============================================================================
# REMOUNT
# =============================================================================


class TestRemount:
    """Map identity change with unchanged content."""

    def test_exactly_one_destroy_then_create(
        self, manager: OverlayLifecycleManager, overlay_factory: RecordingOverlayFactory
    ) -> None:
        first_map = FakeMapInstance(instance_id="map-1")
        second_map = FakeMapInstance(instance_id="map-2")
        manager.sync(map_instance=first_map, layers=LAYERS_A, content_key="k")
        overlay_factory.events.clear()

        manager.sync(map_instance=second_map, layers=LAYERS_A, content_key="k")

        kinds = [kind for kind, _ in overlay_factory.events if kind != "props"]
        assert kinds == ["destroy", "create"]
        assert manager.created_count == 2
        assert manager.destroyed_count == 1

    def test_never_two_alive(self, manager: OverlayLifecycleManager, overlay_factory: RecordingOverlayFactory) -> None:
        for i in range(5):
            manager.sync(map_instance=FakeMapInstance(instance_id=f"map-{i}"), layers=LAYERS_A, content_key="k")
            assert len(overlay_factory.alive) == 1
        assert overlay_factory.max_alive_at_create == 0

    def test_old_map_released(self, manager: OverlayLifecycleManager) -> None:
        first_map = FakeMapInstance(instance_id="map-1")
        second_map = FakeMapInstance(instance_id="map-2")
        manager.attach(first_map)
        old_overlay = manager.overlay
        manager.attach(second_map)

        assert first_map.attached == []
        assert second_map.attached == [manager.overlay]
        assert old_overlay is not None and old_overlay.finalized
        assert old_overlay.map_instance is None

    def test_new_overlay_carries_current_layers(self, manager: OverlayLifecycleManager) -> None:
        manager.sync(map_instance=FakeMapInstance(instance_id="map-1"), layers=LAYERS_A, content_key="a")
        manager.sync(map_instance=FakeMapInstance(instance_id="map-2"), layers=LAYERS_A, content_key="a")
        assert manager.overlay is not None
        assert manager.overlay.get_layers() == LAYERS_A


# =============================================================================
# CONTENT UPDATES
# =============================================================================


class TestContentUpdate:
    """Same map, new layers: update in place."""

    def test_content_change_keeps_overlay(
        self, manager: OverlayLifecycleManager, fake_map: FakeMapInstance, overlay_factory: RecordingOverlayFactory
    ) -> None:
        manager.sync(map_instance=fake_map, layers=LAYERS_A, content_key="a")
        overlay = manager.overlay
        manager.sync(map_instance=fake_map, layers=LAYERS_B, content_key="b")

        assert manager.overlay is overlay
        assert manager.created_count == 1
        assert manager.destroyed_count == 0
        assert overlay is not None and overlay.get_layers() == LAYERS_B

    def test_unchanged_content_pushes_nothing(
        self, manager: OverlayLifecycleManager, fake_map: FakeMapInstance, overlay_factory: RecordingOverlayFactory
    ) -> None:
        manager.sync(map_instance=fake_map, layers=LAYERS_A, content_key="a")
        props_before = overlay_factory.created[0].props_count
        manager.sync(map_instance=fake_map, layers=LAYERS_A, content_key="a")
        assert overlay_factory.created[0].props_count == props_before

    def test_content_and_identity_change_together(self, manager: OverlayLifecycleManager) -> None:
        manager.sync(map_instance=FakeMapInstance(instance_id="map-1"), layers=LAYERS_A, content_key="a")
        manager.sync(map_instance=FakeMapInstance(instance_id="map-2"), layers=LAYERS_B, content_key="b")
        assert manager.created_count == 2
        assert manager.overlay is not None and manager.overlay.get_layers() == LAYERS_B


# =============================================================================
# TEARDOWN
# =============================================================================


class TestTeardown:
    """Bound -> Unbound."""

    def test_detach_releases(
        self, manager: OverlayLifecycleManager, fake_map: FakeMapInstance, overlay_factory: RecordingOverlayFactory
    ) -> None:
        manager.attach(fake_map)
        manager.detach()
        assert not manager.is_bound
        assert manager.overlay is None
        assert fake_map.attached == []
        assert overlay_factory.alive == []

    def test_detach_when_unbound_is_noop(self, manager: OverlayLifecycleManager) -> None:
        manager.detach()
        assert manager.destroyed_count == 0

    def test_map_disappearing_unbinds(self, manager: OverlayLifecycleManager, fake_map: FakeMapInstance) -> None:
        manager.sync(map_instance=fake_map, layers=LAYERS_A, content_key="a")
        manager.sync(map_instance=None, layers=LAYERS_A, content_key="a")
        assert not manager.is_bound
        assert manager.destroyed_count == 1

    def test_rebind_after_detach(self, manager: OverlayLifecycleManager, fake_map: FakeMapInstance) -> None:
        manager.attach(fake_map)
        manager.detach()
        assert manager.attach(fake_map) is True
        assert manager.is_bound


# =============================================================================
# DECK OVERLAY
# =============================================================================


class TestDeckOverlay:
    """Resource rules of a single overlay."""

    def test_finalized_overlay_cannot_attach(self, fake_map: FakeMapInstance) -> None:
        overlay = DeckOverlay()
        overlay.finalize()
        with pytest.raises(RuntimeError, match="finalized"):
            overlay.set_map(fake_map)

    def test_finalized_overlay_rejects_props(self) -> None:
        overlay = DeckOverlay()
        overlay.finalize()
        with pytest.raises(RuntimeError):
            overlay.set_props(LAYERS_A)

    def test_set_map_moves_between_maps(self) -> None:
        first_map = FakeMapInstance(instance_id="map-1")
        second_map = FakeMapInstance(instance_id="map-2")
        overlay = DeckOverlay()
        overlay.set_map(first_map)
        overlay.set_map(second_map)
        assert first_map.attached == []
        assert second_map.attached == [overlay]
