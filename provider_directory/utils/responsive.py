"""Small responsive helpers for Streamlit layouts.

The split view puts the list and the map side by side. On a phone that is
unreadable, so a sidebar toggle lets the user stack them instead. There is
no JS viewport detection; the layout is whatever the toggle says.
"""
from typing import List

import streamlit as st

STACKED_LAYOUT_KEY = "stacked_layout"


def is_stacked_layout() -> bool:
    """True when columns should render one under the other."""
    return bool(st.session_state.get(STACKED_LAYOUT_KEY, False))


def stacked_layout_toggle() -> None:
    """Render the sidebar toggle for the stacked layout.

    Call once per page run. The value lives in session state, so it survives
    switching between the doctor and clinic pages.
    """
    st.session_state.setdefault(STACKED_LAYOUT_KEY, False)
    st.sidebar.checkbox("Stack list and map (small screens)", key=STACKED_LAYOUT_KEY)


def resp_columns(widths: List[float]):
    """Responsive replacement for st.columns.

    Returns ``st.columns(widths)`` normally, or one ``st.container`` per
    width when the stacked layout is on. Both support ``with col:``.
    """
    if is_stacked_layout():
        return [st.container() for _ in widths]
    return st.columns(widths)
