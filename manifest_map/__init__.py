"""Manifest Map - interactive geospatial view of a manifest's timeline.

Turns manifest life-cycle events (place visits, tracker positions, content
add/remove events) into de-overlapped markers, a time-ordered travel path,
category visibility toggles and single-selection marker interaction.

Modules:
    core: Pure computations (overlap resolver, visibility filter, trip path, geo helpers)
    model: Data structures (ManifestMapPoint, VisibilitySettings, ClickInfo)
    ui: Engine, overlay/circle lifecycles, marker rendering, Streamlit host pieces

Example:
    from manifest_map.model import ManifestMapData
    from manifest_map.ui.engine import ManifestMapEngine

    engine = ManifestMapEngine()
    engine.set_data(ManifestMapData.load_json(path))
"""
