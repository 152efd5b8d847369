"""Infrastructure utilities for Streamlit UI operations.

Abstracts Streamlit-specific infrastructure (st.rerun) so tests can patch
these functions instead of Streamlit itself.
"""

import streamlit as st


def trigger_rerun(scope: str = "app") -> None:
    """Trigger Streamlit rerun.

    In tests, patch 'manifest_map.ui.infra.trigger_rerun' to prevent actual
    reruns (which raise StopExecution).

    Args:
        scope: Rerun scope - "app" for full rerun, "fragment" for partial.
    """
    st.rerun(scope=scope)
