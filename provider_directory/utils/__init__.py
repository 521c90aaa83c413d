"""Utilities package for the provider directory.

Re-export stable helper functions from the utility submodules.
"""
# This module intentionally re-exports symbols from submodules. Flake8 F401
# warnings are expected for re-exported names and are silenced locally.
# flake8: noqa: F401

from .cities import get_city_names, resolve_city, suggest_cities
from .cleaning import (
    collation_key,
    normalize_city_records,
    normalize_clinic_records,
    normalize_doctor_records,
    slugify,
    validate_and_clean_coordinates,
    validate_provider_data,
)
from .filters import CLINICS, DOCTORS, ProviderKind, filter_providers
from .geo import calculate_distances, haversine_km
from .geocoding import geocode_address_with_cache, handle_geocoding_error
from .io_utils import format_distance, format_rating, handle_streamlit_error
from .location import (
    GeocodedLocationProvider,
    LocationStatus,
    LocationToggle,
    LocationUnavailableError,
    StaticLocationProvider,
)
from .ranking import DISTANCE_COLUMN, attach_distances, sort_providers
from .search_state import FilterState, SortKey, UserLocation
from .specialties import Specialty, build_specialty_hierarchy, matches_specialty
from .views import ViewMode, available_view_modes, project_view

__all__ = [
    "CLINICS",
    "DISTANCE_COLUMN",
    "DOCTORS",
    "FilterState",
    "GeocodedLocationProvider",
    "LocationStatus",
    "LocationToggle",
    "LocationUnavailableError",
    "ProviderKind",
    "SortKey",
    "Specialty",
    "StaticLocationProvider",
    "UserLocation",
    "ViewMode",
    "attach_distances",
    "available_view_modes",
    "build_specialty_hierarchy",
    "calculate_distances",
    "collation_key",
    "filter_providers",
    "format_distance",
    "format_rating",
    "geocode_address_with_cache",
    "get_city_names",
    "handle_geocoding_error",
    "handle_streamlit_error",
    "haversine_km",
    "matches_specialty",
    "normalize_city_records",
    "normalize_clinic_records",
    "normalize_doctor_records",
    "project_view",
    "resolve_city",
    "slugify",
    "sort_providers",
    "suggest_cities",
    "validate_and_clean_coordinates",
    "validate_provider_data",
]
