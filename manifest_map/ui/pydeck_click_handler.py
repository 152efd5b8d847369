"""Pydeck click handler using streamlit-deckgl for background click support.

Uses st_deckgl from streamlit-deckgl to capture ALL click events including
clicks on the empty map, not just object selections. A background click is
what clears the active marker, so st.pydeck_chart (object selections only)
is not enough.
"""

import logging
from dataclasses import dataclass
from typing import Any

import pydeck as pdk
from streamlit_deckgl import st_deckgl  # type: ignore[import-untyped]

from manifest_map.constants import AppConfig

logger = logging.getLogger(__name__)


@dataclass
class PydeckClickResult:
    """Result from Pydeck click detection.

    Attributes:
        clicked_object: The picked deck.gl object data (dict) or None for a background click
        clicked_coordinate: [lon, lat] of click location
    """

    clicked_object: dict[str, Any] | None
    clicked_coordinate: list[float] | None

    @property
    def is_object_click(self) -> bool:
        return self.clicked_object is not None

    @property
    def is_background_click(self) -> bool:
        return self.clicked_object is None and self.clicked_coordinate is not None

    @staticmethod
    def empty() -> "PydeckClickResult":
        """Return empty result (no click detected)."""
        return PydeckClickResult(clicked_object=None, clicked_coordinate=None)


def parse_deckgl_event(event: Any) -> PydeckClickResult:
    """Split a st_deckgl click event into picked object and coordinate.

    st_deckgl SPREADS object properties into the event dict (no "object" key):
    - Background click: {coordinate: [lon, lat], eventType: "click"}
    - Object click: {type: ..., id: ..., position: [...], coordinate: [lon, lat], eventType: "click"}
    """
    if not event or not isinstance(event, dict):
        return PydeckClickResult.empty()

    clicked_object: dict[str, Any] | None = None
    clicked_coordinate: list[float] | None = None

    coord = event.get("coordinate")
    if isinstance(coord, (list, tuple)) and len(coord) >= 2:
        clicked_coordinate = [float(coord[0]), float(coord[1])]

    # Picked objects are recognised by the "type" field our layers set
    if event.get("type") and event["type"] != "click":
        clicked_object = {k: v for k, v in event.items() if k not in ("coordinate", "eventType")}

    return PydeckClickResult(clicked_object=clicked_object, clicked_coordinate=clicked_coordinate)


def render_pydeck_map(
    deck: pdk.Deck,
    key: str,
    height: int = AppConfig.MAP_HEIGHT_PX,
) -> PydeckClickResult:
    """Render Pydeck map with full click support.

    Args:
        deck: Configured pydeck.Deck object
        key: Unique key for this component instance
        height: Height in pixels

    Returns:
        PydeckClickResult with click info (object and/or coordinate)
    """
    # MUST pass events=['click'] to enable click detection
    event = st_deckgl(deck, key=key, height=height, events=["click"])
    result = parse_deckgl_event(event)
    if result.is_object_click:
        assert result.clicked_object is not None
        logger.debug(
            f"Object click detected: type={result.clicked_object.get('type')}, id={result.clicked_object.get('id')}"
        )
    return result
