"""Resize watcher - debounced window resize handling.

Browser zoom changes the viewport size but keeps its aspect ratio; toggling
fullscreen changes the aspect ratio. Only the former needs a full remount of
the map widget, so:

- |new_ratio - old_ratio| < ZOOM_RATIO_THRESHOLD -> zoom change, (re)start the
  debounce window
- otherwise -> fullscreen-style resize, no remount

When the debounce window elapses without a newer zoom event, on_zoom runs once.
Streamlit has no timers, so the host calls poll() on each rerun.
"""

import logging
import time
from collections.abc import Callable

from manifest_map.constants import MapConfig

logger = logging.getLogger(__name__)


class ResizeWatcher:
    """Coalesces rapid zoom-style resize events into a single on_zoom call.

    Example:
        watcher = ResizeWatcher(width=1200, height=640, on_zoom=ctx.view.bump_map_version)
        watcher.on_resize(width=600, height=320)
        ...
        watcher.poll()  # fires on_zoom once the delay has passed
    """

    def __init__(
        self,
        width: float,
        height: float,
        on_zoom: Callable[[], object],
        delay_ms: int = MapConfig.ZOOM_DEBOUNCE_DELAY_MS,
        threshold: float = MapConfig.ZOOM_RATIO_THRESHOLD,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self.width = width
        self.height = height
        self.on_zoom = on_zoom
        self.delay_s = delay_ms / 1000
        self.threshold = threshold
        self.clock = clock
        self._deadline: float | None = None

    @staticmethod
    def _ratio(width: float, height: float) -> float | None:
        if height <= 0:
            return None
        return width / height

    @property
    def pending(self) -> bool:
        return self._deadline is not None

    def on_resize(self, width: float, height: float) -> bool:
        """Record a resize event.

        Returns:
            True if it was classified as a zoom change and (re)started the window.
        """
        old_ratio = self._ratio(self.width, self.height)
        new_ratio = self._ratio(width, height)
        self.width, self.height = width, height

        if old_ratio is None or new_ratio is None:
            return False
        if abs(new_ratio - old_ratio) >= self.threshold:
            logger.debug(f"[RESIZE] Aspect ratio {old_ratio:.3f} -> {new_ratio:.3f}, ignoring")
            return False

        self._deadline = self.clock() + self.delay_s
        return True

    def poll(self) -> bool:
        """Fire on_zoom if the debounce window has elapsed.

        Returns:
            True if on_zoom ran.
        """
        if self._deadline is None or self.clock() < self._deadline:
            return False
        self._deadline = None
        logger.info(f"[RESIZE] Zoom change at {self.width:.0f}x{self.height:.0f}, remounting map")
        self.on_zoom()
        return True

    def cancel(self) -> None:
        self._deadline = None
