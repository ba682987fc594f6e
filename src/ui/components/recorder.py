"""
Recorder component: toggle button, level meter and sentiment label.

States: idle -> recording -> analyzing -> idle
"""

import html
import logging

import streamlit as st

from src.core.models import RecordingState
from src.services.workflow import RecordingWorkflow, create_workflow

logger = logging.getLogger(__name__)

_STATUS_REFRESH_SECONDS = 0.5


def get_workflow() -> RecordingWorkflow:
    """Return this browser session's workflow, creating it on first use.

    The workflow lives in ``st.session_state``; when the session ends the
    state is dropped and the workflow's finalizer releases the recorder.
    """
    workflow = st.session_state.get("workflow")
    if workflow is None or workflow.closed:
        workflow = create_workflow(permission_granted=st.session_state.get("mic_permission", False))
        st.session_state.workflow = workflow
    return workflow


def _on_press() -> None:
    state = get_workflow().press()
    logger.debug("Record button pressed, state now %s", state)
    st.session_state.last_seen_state = state


def render_recorder() -> None:
    """Render the record button and the live status/label region."""
    workflow = get_workflow()
    st.session_state.last_seen_state = workflow.state

    st.button(
        workflow.button_label,
        on_click=_on_press,
        disabled=workflow.button_disabled,
        type="primary",
        use_container_width=True,
    )
    _render_status()


@st.fragment(run_every=_STATUS_REFRESH_SECONDS)
def _render_status() -> None:
    """Poll the workflow; rerun the full page when it leaves ``analyzing``."""
    workflow = get_workflow()
    state = workflow.state

    if st.session_state.get("last_seen_state") != state:
        st.session_state.last_seen_state = state
        st.rerun()

    if state is RecordingState.recording:
        st.progress(workflow.amplitude, text="Listening...")
    elif state is RecordingState.analyzing:
        st.caption("Analyzing sentiment...")

    if workflow.last_error:
        st.warning(workflow.last_error)

    st.markdown(
        "<div style='text-align:center;font-size:18px;font-weight:bold'>"
        f"{html.escape(workflow.label)}</div>",
        unsafe_allow_html=True,
    )
