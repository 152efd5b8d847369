"""Click handlers for the manifest map.

ClickDetector turns deck.gl events into ClickInfo; dispatch_click routes each
ClickInfo to exactly one engine callback:

    MARKER     -> select marker and move the viewport to it
    CIRCLE     -> deselect the owning marker if it is active
    BACKGROUND -> clear the active marker

STRICT: Unknown click types raise RuntimeError immediately.
"""

import logging
from collections.abc import Callable

from manifest_map.model.click_info import ClickInfo, MapClickType
from manifest_map.ui.engine import ManifestMapEngine

logger = logging.getLogger(__name__)


def handle_marker_click(engine: ManifestMapEngine, click_info: ClickInfo) -> None:
    assert click_info.marker_id is not None
    engine.on_marker_click(click_info.marker_id)


def handle_circle_click(engine: ManifestMapEngine, click_info: ClickInfo) -> None:
    assert click_info.marker_id is not None
    engine.on_circle_click(click_info.marker_id)


def handle_background_click(engine: ManifestMapEngine, click_info: ClickInfo) -> None:
    engine.on_map_click()


_HANDLERS: dict[MapClickType, Callable[[ManifestMapEngine, ClickInfo], None]] = {
    MapClickType.MARKER: handle_marker_click,
    MapClickType.CIRCLE: handle_circle_click,
    MapClickType.BACKGROUND: handle_background_click,
}


def dispatch_click(engine: ManifestMapEngine, click_info: ClickInfo) -> None:
    """Dispatch click to the handler for its type.

    Raises:
        RuntimeError: If the click type has no registered handler
    """
    handler = _HANDLERS.get(click_info.click_type)
    if handler is None:
        raise RuntimeError(f"No click handler registered for {click_info.click_type}")
    logger.info(f"Click: {click_info.display_name}")
    handler(engine, click_info)
