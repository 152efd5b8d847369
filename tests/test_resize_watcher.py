"""Tests for ResizeWatcher - debounced browser zoom detection."""

import pytest

from manifest_map.ui.resize_watcher import ResizeWatcher


class FakeClock:
    def __init__(self) -> None:
        self.now = 0.0

    def __call__(self) -> float:
        return self.now

    def advance(self, ms: float) -> None:
        self.now += ms / 1000


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def fired() -> list[int]:
    return []


@pytest.fixture
def watcher(clock: FakeClock, fired: list[int]) -> ResizeWatcher:
    return ResizeWatcher(
        width=1200, height=600, on_zoom=lambda: fired.append(1), delay_ms=100, threshold=0.05, clock=clock
    )


class TestZoomDetection:
    """Same aspect ratio = zoom change; different ratio = ignored."""

    def test_zoom_fires_after_delay(self, watcher: ResizeWatcher, clock: FakeClock, fired: list[int]) -> None:
        assert watcher.on_resize(width=600, height=300) is True
        assert watcher.poll() is False
        clock.advance(100)
        assert watcher.poll() is True
        assert fired == [1]

    def test_fires_once(self, watcher: ResizeWatcher, clock: FakeClock, fired: list[int]) -> None:
        watcher.on_resize(width=600, height=300)
        clock.advance(150)
        watcher.poll()
        watcher.poll()
        assert fired == [1]
        assert not watcher.pending

    def test_fullscreen_ignored(self, watcher: ResizeWatcher, clock: FakeClock, fired: list[int]) -> None:
        assert watcher.on_resize(width=1920, height=1080) is False
        clock.advance(500)
        assert watcher.poll() is False
        assert fired == []

    def test_ratio_change_below_threshold_is_zoom(self, watcher: ResizeWatcher) -> None:
        # 2.0 -> 2.04
        assert watcher.on_resize(width=1224, height=600) is True

    def test_zero_height_ignored(self, watcher: ResizeWatcher) -> None:
        assert watcher.on_resize(width=1200, height=0) is False


class TestDebounce:
    """Rapid events coalesce into one call."""

    def test_new_event_restarts_window(self, watcher: ResizeWatcher, clock: FakeClock, fired: list[int]) -> None:
        watcher.on_resize(width=1000, height=500)
        clock.advance(80)
        watcher.on_resize(width=800, height=400)
        clock.advance(80)
        assert watcher.poll() is False
        clock.advance(30)
        assert watcher.poll() is True
        assert fired == [1]

    def test_cancel(self, watcher: ResizeWatcher, clock: FakeClock, fired: list[int]) -> None:
        watcher.on_resize(width=600, height=300)
        watcher.cancel()
        clock.advance(200)
        assert watcher.poll() is False
        assert fired == []
