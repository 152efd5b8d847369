"""Manifest Map - interactive map of a manifest's life-cycle events.

Shows place visits, tracker positions and content add/remove events as
de-overlapped markers with a time-ordered travel path, category toggles and
single-selection marker popups.

Run: streamlit run manifest_map/app.py
Data: MANIFEST_MAP_DATA=/path/to/manifest.json (defaults to the bundled sample)
"""

import logging
import traceback
from pathlib import Path

import streamlit as st

from manifest_map.constants import AppConfig, get_data_path
from manifest_map.model.map_point import ManifestMapData
from manifest_map.ui import (
    ClickDetector,
    DeckMapInstance,
    ManifestMapEngine,
    MapControlPanel,
    dispatch_click,
    render_pydeck_map,
    trigger_rerun,
)

logging.basicConfig(level=logging.INFO)
logger = logging.getLogger(__name__)


# =============================================================================
# SESSION STATE
# =============================================================================


def init_session_state() -> None:
    """Initialize session state with the engine and map instance slots."""
    if "engine" not in st.session_state:
        st.session_state.engine = ManifestMapEngine()

    if "map_instance" not in st.session_state:
        st.session_state.map_instance = None

    if "uploaded_data" not in st.session_state:
        st.session_state.uploaded_data = None


def reset_ui_state() -> None:
    """Reset UI state to initial while preserving the loaded data.

    Called when an error occurs to recover gracefully. Resets:
    - Engine and its context (selection, toggles, theme)
    - Map instance (forces a fresh map component)

    Preserves:
    - Loaded manifest data
    """
    logger.info("Resetting UI state due to error recovery")

    old_engine: ManifestMapEngine = st.session_state.engine
    data = old_engine.data
    old_engine.teardown()

    engine = ManifestMapEngine()
    engine.set_data(data)
    st.session_state.engine = engine
    st.session_state.map_instance = None

    logger.info("UI state reset complete - data preserved")


@st.cache_data(show_spinner=False)
def _load_data_file(path: str) -> ManifestMapData:
    return ManifestMapData.load_json(Path(path))


def load_data() -> ManifestMapData:
    """Current manifest data: the last upload, else the configured data file."""
    uploaded: ManifestMapData | None = st.session_state.uploaded_data
    if uploaded is not None:
        return uploaded
    path = get_data_path()
    with st.spinner("Loading manifest map data..."):
        return _load_data_file(str(path))


# =============================================================================
# PANELS
# =============================================================================


def render_error_panel(engine: ManifestMapEngine) -> None:
    """Dismissible data error panel. A new error text re-opens it."""
    panel = engine.context.error_panel
    if not panel.visible:
        return
    col_msg, col_btn = st.columns([8, 1])
    with col_msg:
        st.error(f"⚠️ {panel.error}")
    with col_btn:
        st.button("✖️", key="dismiss_error", help="Dismiss", on_click=panel.dismiss)


def render_popup_panel(engine: ManifestMapEngine) -> None:
    """Info popup of the active marker."""
    active = engine.active_popup()
    if active is None:
        st.caption("Click a marker to see its details.")
        return

    marker_id, popup = active
    st.subheader(popup.title or "Marker")
    for label, value in popup.rows:
        if label == "Place" and popup.place_url:
            st.markdown(f"**{label}:** [{value}]({popup.place_url})")
        else:
            st.markdown(f"**{label}:** {value}")
    st.button("✖️ Close", key=f"close_popup_{marker_id}", width="stretch", on_click=engine.close_popup, args=(marker_id,))


# =============================================================================
# MAP RENDERING
# =============================================================================


def _current_map_instance(engine: ManifestMapEngine) -> DeckMapInstance:
    """Map instance for the current map key; a new key means a new instance."""
    key = engine.context.view.map_key
    current: DeckMapInstance | None = st.session_state.map_instance
    if current is None or current.instance_id != key:
        current = DeckMapInstance(instance_id=key, height_px=AppConfig.MAP_HEIGHT_PX)
        st.session_state.map_instance = current
        logger.info(f"[MAP] New map instance {key}")
    return current


def _render_map() -> None:
    """Render map and handle clicks."""
    try:
        _render_map_inner()
        logger.debug("[RENDER] _render_map_inner() completed successfully")
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        full_traceback = traceback.format_exc()
        logger.error(f"[RENDER] Map error caught: {error_msg}\n{full_traceback}")

        st.error(f"⚠️ [RENDER] Something went wrong: {error_msg}")

        reset_ui_state()

        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


def _render_map_inner() -> None:
    engine: ManifestMapEngine = st.session_state.engine

    # A debounced zoom-style resize bumps the map key before the instance lookup
    engine.poll_resize()
    map_instance = _current_map_instance(engine)
    engine.bind_map(map_instance)

    logger.info(f"[RENDER] Map {map_instance.widget_key}: {engine.context}")
    deck = engine.render()
    click_result = render_pydeck_map(deck=deck, key=f"manifest_map_{map_instance.widget_key}")

    detector = ClickDetector(dedup=engine.context.click_dedup)
    click_info = detector.detect(
        clicked_object=click_result.clicked_object,
        clicked_coordinate=click_result.clicked_coordinate,
    )
    if click_info:
        dispatch_click(engine=engine, click_info=click_info)
        trigger_rerun()


# =============================================================================
# MAIN
# =============================================================================


def main() -> None:
    """Application entry point."""
    st.set_page_config(page_title=AppConfig.TITLE, page_icon=AppConfig.ICON, layout=AppConfig.LAYOUT)
    init_session_state()

    st.title(AppConfig.TITLE)

    try:
        _run_app_ui()
    except Exception as e:
        error_msg = f"{type(e).__name__}: {e}"
        full_traceback = traceback.format_exc()
        logger.error(f"[UI] UI error caught: {error_msg}\n{full_traceback}")

        st.error(f"⚠️ [UI] Something went wrong: {error_msg}")

        reset_ui_state()

        if st.button("🔄 Reset and Continue", type="primary"):
            st.rerun()


def _run_app_ui() -> None:
    """Run the main application UI. Separated for error handling wrapper."""
    engine: ManifestMapEngine = st.session_state.engine

    actions = MapControlPanel(engine=engine).render()
    if actions["uploaded_data"] is not None:
        st.session_state.uploaded_data = actions["uploaded_data"]

    data = load_data()
    engine.set_data(data)

    render_error_panel(engine)
    if data.loading:
        st.info("⏳ Loading manifest map data...")
        return

    col_map, col_popup = st.columns([3, 1])
    with col_map:
        _render_map()
    with col_popup:
        render_popup_panel(engine)


if __name__ == "__main__":
    main()
