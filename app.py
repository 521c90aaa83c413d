"""
Streamlit app entrypoint - logging setup and navigation.

Run with ``streamlit run app.py``. The home page links to the two listing
pages (doctors and clinics); both read from the directory REST backend
configured in ``.streamlit/secrets.toml``.
"""

from __future__ import annotations

import logging

import streamlit as st

from provider_directory.utils.config import get_app_config, validate_configuration

logger = logging.getLogger(__name__)

_nav_items = [
    ("pages/0_🏠_home.py", "Home", "🏠"),
    ("pages/1_🩺_Doctors.py", "Doctors", "🩺"),
    ("pages/2_🏥_Clinics.py", "Clinics", "🏥"),
]


def configure_logging() -> None:
    app_config = get_app_config()
    level = "DEBUG" if app_config["debug_mode"] else str(app_config["log_level"]).upper()
    logging.basicConfig(
        level=getattr(logging, level, logging.INFO),
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )


def _build_and_run_app():
    """Configure logging, report configuration issues and run the selected page."""
    configure_logging()

    for component, issue in validate_configuration().items():
        logger.warning(f"Configuration issue ({component}): {issue}")

    nav_pages = [st.Page(path, title=title, icon=icon) for path, title, icon in _nav_items]
    pg = st.navigation(nav_pages)
    pg.run()


if __name__ == "__main__":
    _build_and_run_app()
