"""Sidebar control panel: category toggles, Show All, theme and data source."""

import json
import logging
from typing import Any

import streamlit as st

from manifest_map.constants import StyleConfig
from manifest_map.model.map_point import ManifestMapData
from manifest_map.ui.engine import ManifestMapEngine

logger = logging.getLogger(__name__)

VISIBILITY_LABELS = {
    "show_manifest_places": "Manifest Places",
    "show_contents_places": "Contents Places",
    "show_latest_location": "Latest Location",
    "show_manifest_path": "Manifest Path",
}


class MapControlPanel:
    """Renders the sidebar for one engine.

    Widget callbacks run before the next script run, so every toggle reaches
    the engine before the map is rendered.
    """

    def __init__(self, engine: ManifestMapEngine) -> None:
        self.engine = engine

    def render(self) -> dict[str, Any]:
        """Render the sidebar.

        Returns:
            Dict with keys: uploaded_data (ManifestMapData | None)
        """
        with st.sidebar:
            st.subheader("Layers")
            self._render_visibility_toggles()
            st.button(
                "🎯 Show All",
                width="stretch",
                help="Zoom to fit all visible markers",
                on_click=self.engine.zoom_to_fit,
            )
            st.divider()
            self._render_theme_selector()
            st.divider()
            uploaded = self._render_data_upload()
            return {"uploaded_data": uploaded}

    def _render_visibility_toggles(self) -> None:
        settings = self.engine.visibility
        for name, label in VISIBILITY_LABELS.items():
            key = f"visibility_{name}"
            value = getattr(settings, name)
            # Widget state survives an engine reset; the engine is authoritative
            if st.session_state.get(key) != value:
                st.session_state[key] = value
            st.checkbox(
                label,
                key=key,
                on_change=self._on_toggle,
                args=(name, key),
            )

    def _on_toggle(self, name: str, key: str) -> None:
        self.engine.set_visibility(name, st.session_state[key])

    def _render_theme_selector(self) -> None:
        themes = list(StyleConfig.THEMES)
        current = self.engine.context.view.theme
        theme = st.selectbox(
            "🎨 Theme",
            options=themes,
            index=themes.index(current) if current in themes else 0,
            format_func=str.capitalize,
        )
        if theme != current:
            self.engine.set_theme(theme)

    def _render_data_upload(self) -> ManifestMapData | None:
        with st.expander("📂 Manifest Data", expanded=False):
            uploaded_file = st.file_uploader(
                "Load manifest map JSON",
                type=["json"],
                help="A manifest map payload with a 'points' array",
                label_visibility="collapsed",
            )
            if uploaded_file is None:
                return None
            try:
                payload = json.load(uploaded_file)
            except json.JSONDecodeError as e:
                logger.error(f"Failed to parse uploaded file {uploaded_file.name}: {e}")
                return ManifestMapData(error=f"Could not read {uploaded_file.name}: {e}")
            if not isinstance(payload, dict):
                return ManifestMapData(error=f"{uploaded_file.name} does not contain a JSON object")
            logger.info(f"Loaded manifest data from upload: {uploaded_file.name}")
            return ManifestMapData.from_dict(payload)
