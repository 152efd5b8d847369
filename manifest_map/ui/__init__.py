"""User interface components for the manifest map.

File Structure:
- engine.py: ManifestMapEngine wiring resolver, filter, path builder and controllers
- overlay_manager.py: Single drawing overlay per map instance (Unbound/Bound state machine)
- marker_controller.py: Single selection, hover, viewport fitting
- radius_circle.py: Radius/accuracy circle with destroy-before-create discipline
- marker_renderer.py: Per-category marker descriptors and Pydeck layers
- resize_watcher.py: Debounced resize handling
- map_instance.py: Pydeck-backed map instance
- map_controls.py: Sidebar toggles, Show All, theme, data upload
- click_detector.py / click_handlers.py: deck.gl click -> ClickInfo -> engine callback
"""

from manifest_map.ui.click_detector import ClickDetector
from manifest_map.ui.click_handlers import dispatch_click
from manifest_map.ui.context import ManifestMapContext
from manifest_map.ui.engine import ManifestMapEngine
from manifest_map.ui.infra import trigger_rerun
from manifest_map.ui.map_controls import MapControlPanel
from manifest_map.ui.map_instance import DeckMapInstance, MapInstance
from manifest_map.ui.marker_controller import MarkerInteractionController
from manifest_map.ui.overlay_manager import OverlayLifecycleManager
from manifest_map.ui.pydeck_click_handler import render_pydeck_map
from manifest_map.ui.radius_circle import RadiusCircleRenderer

__all__ = [
    "ManifestMapEngine",
    "ManifestMapContext",
    "OverlayLifecycleManager",
    "MarkerInteractionController",
    "RadiusCircleRenderer",
    "DeckMapInstance",
    "MapInstance",
    "MapControlPanel",
    "ClickDetector",
    "dispatch_click",
    "render_pydeck_map",
    "trigger_rerun",
]
