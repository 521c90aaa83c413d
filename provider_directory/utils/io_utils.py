"""Display formatting and the streamlit error handler."""
import pandas as pd
import streamlit as st


def format_rating(rating) -> str:
    """
    Format a rating with one decimal place.

    Handles both string and number types; missing or unparsable values
    are shown as "0.0".

    Args:
        rating: Rating as float, int, string or None

    Returns:
        Formatted rating string
    """
    if rating is None or isinstance(rating, bool):
        return "0.0"
    try:
        value = float(rating)
    except (ValueError, TypeError):
        return "0.0"
    if pd.isna(value):
        return "0.0"
    return f"{value:.1f}"


def format_distance(distance_km) -> str:
    """Distance label such as "3.2 km"; empty when there is no distance."""
    if distance_km is None:
        return ""
    try:
        value = float(distance_km)
    except (ValueError, TypeError):
        return ""
    if pd.isna(value):
        return ""
    return f"{value:.1f} km"


def handle_streamlit_error(error: Exception, context: str = "operation") -> None:
    err = str(error)
    if "network" in err.lower() or "connection" in err.lower():
        st.error("❌ **Network Error**: Unable to reach the directory service. Please check your internet connection.")
    elif "timeout" in err.lower() or "timed out" in err.lower():
        st.error("❌ **Timeout Error**: The directory service is taking too long to respond. Please try again.")
    elif "404" in err or "not found" in err.lower():
        st.error("❌ **Data Error**: The directory service did not return the requested data. Please contact support.")
    else:
        st.error(f"❌ **Error during {context}**: {err}")

    st.exception(error)
