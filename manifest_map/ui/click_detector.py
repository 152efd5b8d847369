"""Click detector - detects map clicks from Pydeck events.

Pydeck click events return picked object data directly. Layer rows carry
type and id fields for identification:

    type="marker"         -> MARKER click on marker id
    type="radius_circle"  -> CIRCLE click owned by marker id
    type="trip_path"      -> BACKGROUND (the path is not interactive)
    nothing picked        -> BACKGROUND

The dedup context prevents re-processing the same event on reruns.
"""

import logging
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from manifest_map.constants import ClickConfig
from manifest_map.model.click_info import ClickInfo, MapClickType

if TYPE_CHECKING:
    from manifest_map.ui.context import ClickDeduplicationContext

logger = logging.getLogger(__name__)


@dataclass
class ClickDetector:
    """Detects clicks from Pydeck picked objects.

    Attributes:
        dedup: ClickDeduplicationContext for tracking last-seen clicks
    """

    dedup: "ClickDeduplicationContext"

    def detect(
        self,
        clicked_object: dict[str, Any] | None,
        clicked_coordinate: list[float] | None,
    ) -> ClickInfo | None:
        """Detect click from Pydeck event data.

        Args:
            clicked_object: The picked deck.gl object data (dict) or None
            clicked_coordinate: [lon, lat] of click location or None

        Returns:
            ClickInfo for new clicks, None otherwise
        """
        if clicked_object is None and clicked_coordinate is None:
            return None

        lat = lon = None
        if clicked_coordinate is not None:
            lon, lat = clicked_coordinate[0], clicked_coordinate[1]

        click_info = self._parse(obj=clicked_object, lat=lat, lon=lon)
        if click_info is None:
            return None

        if not self.dedup.is_new_click(click_info.make_dedup_key()):
            return None

        logger.debug(f"Click: {click_info.display_name}")
        return click_info

    def _parse(self, obj: dict[str, Any] | None, lat: float | None, lon: float | None) -> ClickInfo | None:
        if obj is None:
            return ClickInfo(click_type=MapClickType.BACKGROUND, lat=lat, lon=lon)

        obj_type = obj.get("type")
        if not obj_type:
            logger.warning(f"Object click without type field: {obj}")
            return None

        if obj_type == ClickConfig.TYPE_MARKER:
            marker_id = obj.get("id")
            if not marker_id:
                logger.warning("Marker click missing id")
                return None
            return ClickInfo(click_type=MapClickType.MARKER, marker_id=marker_id, lat=lat, lon=lon)

        if obj_type == ClickConfig.TYPE_CIRCLE:
            marker_id = obj.get("id")
            if not marker_id:
                logger.warning("Radius circle click missing id")
                return None
            return ClickInfo(click_type=MapClickType.CIRCLE, marker_id=marker_id, lat=lat, lon=lon)

        if obj_type == ClickConfig.TYPE_PATH:
            return ClickInfo(click_type=MapClickType.BACKGROUND, lat=lat, lon=lon)

        logger.warning(f"Unknown object type clicked: {obj_type}")
        return None
