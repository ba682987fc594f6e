"""
SentiMic Streamlit UI, main entry point.

Run with: ``streamlit run src/ui/app.py``
"""

# ---------------------------------------------------------------------------
# Ensure project root is on sys.path so ``from src.xxx`` imports work.
# Streamlit replaces sys.path[0] with the script directory (src/ui/),
# which removes the project root needed for absolute ``src.*`` imports.
# ---------------------------------------------------------------------------
import sys  # noqa: E402
from pathlib import Path  # noqa: E402

_project_root = str(Path(__file__).resolve().parent.parent.parent)
if _project_root not in sys.path:
    sys.path.insert(0, _project_root)

import logging  # noqa: E402

import streamlit as st  # noqa: E402

from src.core.config import get_settings  # noqa: E402
from src.services.audio import request_microphone_permission  # noqa: E402
from src.ui.components.recorder import render_recorder  # noqa: E402

_settings = get_settings()
logging.basicConfig(
    level=_settings.log_level,
    format="%(asctime)s %(levelname)s %(name)s: %(message)s",
)

# ---------------------------------------------------------------------------
# Page config (must be first Streamlit call)
# ---------------------------------------------------------------------------
st.set_page_config(
    page_title="SentiMic",
    page_icon="\U0001f399️",
    layout="centered",
)

# ---------------------------------------------------------------------------
# Microphone permission (requested once per session)
# ---------------------------------------------------------------------------
if "mic_permission" not in st.session_state:
    st.session_state.mic_permission = request_microphone_permission(
        sample_rate=_settings.sample_rate,
        channels=_settings.channels,
    )

if not st.session_state.mic_permission:
    st.error("Please grant permission to record audio")
    st.stop()

st.title("\U0001f399️ SentiMic")
render_recorder()
