"""Shared Streamlit rendering for the doctor and clinic listing pages.

Widget values live in ``st.session_state`` under keys prefixed with the
provider kind, so the two pages keep independent filters. The immutable
``FilterState`` is rebuilt from the widgets on every rerun; only the user
location and the sort key are carried over from the stored state, since
those are changed by callbacks rather than by plain widgets.
"""
import logging
from typing import Dict, List, Optional

import streamlit as st

from provider_directory.app_logic import DirectoryData, load_directory_data, run_search
from provider_directory.data.ingestion import DataSourceError, refresh_data_cache
from provider_directory.utils.cities import get_city_names, suggest_cities
from provider_directory.utils.config import get_app_config
from provider_directory.utils.filters import ProviderKind
from provider_directory.utils.io_utils import handle_streamlit_error
from provider_directory.utils.location import GeocodedLocationProvider, LocationToggle
from provider_directory.utils.maps import PLOTLY_CONFIG, build_map_figure
from provider_directory.utils.responsive import resp_columns, stacked_layout_toggle
from provider_directory.utils.search_state import FilterState, SortKey
from provider_directory.utils.specialties import get_specialty_options, get_sub_specialty_options
from provider_directory.utils.views import ViewMode, ViewProjection, available_view_modes, project_view

logger = logging.getLogger(__name__)

SORT_LABELS = {
    SortKey.NAME.value: "Name (A-Z)",
    SortKey.RATING.value: "Rating (highest first)",
    SortKey.DISTANCE.value: "Distance (nearest first)",
}
VIEW_LABELS = {ViewMode.LIST.value: "📋 List", ViewMode.MAP.value: "🗺️ Map", ViewMode.SPLIT.value: "🪟 Split"}


def _key(kind: ProviderKind, name: str) -> str:
    return f"{kind.name}_{name}"


def _sub_key(kind: ProviderKind, sub_id: int) -> str:
    return _key(kind, f"sub_{sub_id}")


def _init_session(kind: ProviderKind, data: DirectoryData) -> None:
    """Seed widget values from the URL the first time the page is opened."""
    if _key(kind, "state") in st.session_state:
        return
    state = FilterState.from_query_params(st.query_params.to_dict(), data.hierarchy, data.cities)
    default_view = get_app_config()["default_view"]
    if default_view not in [mode.value for mode in available_view_modes(get_app_config()["split_view_enabled"])]:
        default_view = ViewMode.LIST.value
    st.session_state.update(
        {
            _key(kind, "state"): state,
            _key(kind, "location"): LocationToggle(),
            _key(kind, "search"): state.search_text,
            _key(kind, "city"): state.city,
            _key(kind, "city_query"): "",
            _key(kind, "parent"): state.parent_specialty_id,
            _key(kind, "sort"): state.sort_key.value,
            _key(kind, "view"): default_view,
            _key(kind, "place"): "",
        }
    )


def _clear_sub_specialties(kind: ProviderKind) -> None:
    prefix = _key(kind, "sub_")
    for key in [k for k in st.session_state.keys() if str(k).startswith(prefix)]:
        del st.session_state[key]


def _toggle_location(kind: ProviderKind) -> None:
    toggle: LocationToggle = st.session_state[_key(kind, "location")]
    state: FilterState = st.session_state[_key(kind, "state")]
    provider = None if toggle.active else GeocodedLocationProvider(st.session_state.get(_key(kind, "place"), ""))
    new_state = toggle.toggle(state, provider)
    st.session_state[_key(kind, "state")] = new_state
    st.session_state[_key(kind, "sort")] = new_state.sort_key.value


def _render_location_controls(kind: ProviderKind) -> None:
    toggle: LocationToggle = st.session_state[_key(kind, "location")]
    st.sidebar.caption("**📍 Your location**")
    if toggle.active:
        st.sidebar.success("Sorting by distance from your location.")
        st.sidebar.button(
            "Turn off location", key=_key(kind, "location_off"), on_click=_toggle_location, args=(kind,)
        )
    else:
        st.sidebar.text_input(
            "Address or place",
            key=_key(kind, "place"),
            placeholder="e.g. Sarajevo or Titova 5, Mostar",
            help="Used once to find providers near you",
        )
        st.sidebar.button(
            "Use my location", key=_key(kind, "location_on"), on_click=_toggle_location, args=(kind,)
        )
    if toggle.last_error:
        st.sidebar.error(toggle.last_error)


def _render_filters(kind: ProviderKind, data: DirectoryData) -> FilterState:
    stored: FilterState = st.session_state[_key(kind, "state")]

    st.text_input(
        "🔎 Search",
        key=_key(kind, "search"),
        placeholder="Name, specialty or location" if kind.name == "doctors" else "Name, description or address",
    )

    col_city, col_specialty = resp_columns([1, 1])
    with col_city:
        city_names = get_city_names(data.cities)
        city_query = st.text_input("Find a city", key=_key(kind, "city_query"), placeholder="Start typing...")
        options = [""] + suggest_cities(city_names, city_query)
        selected_city = st.session_state.get(_key(kind, "city"), "")
        if selected_city and selected_city not in options:
            options.insert(1, selected_city)
        st.selectbox(
            "City",
            options=options,
            key=_key(kind, "city"),
            format_func=lambda name: name or "All cities",
        )

    specialty_names: Dict[Optional[int], str] = {None: "All specialties"}
    specialty_names.update(dict(get_specialty_options(data.hierarchy)))
    with col_specialty:
        parent_options: List[Optional[int]] = list(specialty_names.keys())
        if st.session_state.get(_key(kind, "parent")) not in parent_options:
            st.session_state[_key(kind, "parent")] = None
        st.selectbox(
            "Specialty",
            options=parent_options,
            key=_key(kind, "parent"),
            format_func=lambda sid: specialty_names.get(sid, str(sid)),
            on_change=_clear_sub_specialties,
            args=(kind,),
        )

    parent_id = st.session_state.get(_key(kind, "parent"))
    sub_ids = []
    sub_options = get_sub_specialty_options(data.hierarchy, parent_id)
    if sub_options:
        with st.expander("Narrow to sub-specialties", expanded=False):
            for sub_id, sub_name in sub_options:
                if st.checkbox(sub_name, key=_sub_key(kind, sub_id)):
                    sub_ids.append(sub_id)

    sort_options = [SortKey.NAME.value, SortKey.RATING.value]
    if stored.location_active:
        sort_options.append(SortKey.DISTANCE.value)
    if st.session_state.get(_key(kind, "sort")) not in sort_options:
        st.session_state[_key(kind, "sort")] = SortKey.NAME.value
    st.sidebar.selectbox(
        "Sort by", options=sort_options, key=_key(kind, "sort"), format_func=lambda k: SORT_LABELS[k]
    )

    state = (
        stored.with_search_text(st.session_state.get(_key(kind, "search"), ""))
        .with_city(st.session_state.get(_key(kind, "city"), ""))
        .with_parent_specialty(parent_id)
        .with_sub_specialties(sub_ids)
        .with_sort_key(st.session_state[_key(kind, "sort")])
    )
    st.session_state[_key(kind, "state")] = state
    return state


def _render_list(projection: ViewProjection, kind: ProviderKind) -> None:
    icon = "🩺" if kind.name == "doctors" else "🏥"
    for item in projection.items:
        with st.container(border=True):
            st.markdown(f"#### {icon} {item['name']}")
            details = [part for part in (item["specialty"], item["city"]) if part]
            if details:
                st.caption(" · ".join(details))
            summary = f"⭐ {item['rating']} ({item['review_count']} reviews)"
            if item["distance"]:
                summary += f" · 📍 {item['distance']}"
            st.write(summary)


def _render_map(projection: ViewProjection, state: FilterState) -> None:
    if projection.markers.empty:
        st.info("ℹ️ None of these providers has map coordinates yet.")
        return
    st.plotly_chart(build_map_figure(projection, state.user_location), config=PLOTLY_CONFIG)


def render_listing_page(kind: ProviderKind, title: str) -> None:
    """Full listing page: filters, location toggle, view switcher and results."""
    stacked_layout_toggle()
    st.sidebar.button(
        "🔄 Refresh data",
        key=_key(kind, "refresh"),
        on_click=refresh_data_cache,
        help="Fetch doctors, clinics, specialties and cities again from the directory service",
    )
    st.title(title)

    try:
        data = load_directory_data(kind)
    except DataSourceError as e:
        logger.error(f"Failed to load {kind.name}: {e}")
        st.error(f"❌ Failed to load {kind.name}. Please try again in a moment or contact support.")
        st.info(f"**Error Type:** {type(e).__name__}")
        with st.expander("🔍 Troubleshooting Information"):
            st.markdown(
                """
            **Common causes:**
            - `directory.base_url` not configured in `.streamlit/secrets.toml`
            - Network connection issues preventing access to the directory service
            - The directory service returned an unexpected response

            **Next steps:**
            1. Check the `[directory]` section of `.streamlit/secrets.toml`
            2. Verify network connectivity
            3. Check Streamlit logs for detailed error messages
            4. Try refreshing the page
            """
            )
            handle_streamlit_error(e, context=f"loading {kind.name}")
        st.stop()

    _init_session(kind, data)
    _render_location_controls(kind)
    state = _render_filters(kind, data)

    app_config = get_app_config()
    view_modes = [mode.value for mode in available_view_modes(app_config["split_view_enabled"])]
    if st.session_state.get(_key(kind, "view")) not in view_modes:
        st.session_state[_key(kind, "view")] = ViewMode.LIST.value
    mode = st.radio(
        "View", options=view_modes, key=_key(kind, "view"), horizontal=True, format_func=lambda m: VIEW_LABELS[m]
    )

    ranked = run_search(data.providers, state, kind, data.hierarchy)
    st.caption(f"{len(ranked)} of {len(data.providers)} {kind.name}")

    if ranked.empty:
        st.warning("⚠️ No providers match your search.")
        st.info("💡 Try a different search term, another city or a broader specialty.")
        return

    projection = project_view(ranked, ViewMode(mode), state.user_location)
    if projection.mode is ViewMode.SPLIT:
        col_list, col_map = resp_columns([1, 1])
        with col_list:
            _render_list(projection, kind)
        with col_map:
            _render_map(projection, state)
    elif projection.mode is ViewMode.MAP:
        _render_map(projection, state)
    else:
        _render_list(projection, kind)
