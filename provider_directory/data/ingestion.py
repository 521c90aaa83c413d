"""
Data Ingestion Module - Centralized loading from the directory REST backend.

This module fetches the doctor, clinic, specialty and city collections over
HTTP, normalises them into the DataFrames and specialty hierarchy the search
engine works on, and caches the results with Streamlit's cache system.

Key Features:
- One ``requests.Session`` per manager, optional bearer token from secrets
- Responses may be a bare JSON array or wrapped as ``{"data": [...]}``
- Source-specific post-processing (record normalisation, hierarchy build)
- Streamlit cache integration (TTL: 1 hour) and manual refresh
"""

import logging
from enum import Enum
from typing import Any, Dict, List, Optional, Union

import pandas as pd
import requests
import streamlit as st

from provider_directory.utils.cleaning import (
    normalize_city_records,
    normalize_clinic_records,
    normalize_doctor_records,
    validate_provider_data,
)
from provider_directory.utils.config import get_api_config
from provider_directory.utils.geocoding import reset_geocoder
from provider_directory.utils.specialties import Specialty, build_specialty_hierarchy

logger = logging.getLogger(__name__)


class DataSource(Enum):
    """Collections served by the directory backend, valued by their endpoint path."""

    DOCTORS = "doctors"
    CLINICS = "clinics"
    SPECIALTIES = "specialties"
    CITIES = "cities"


class DataSourceError(Exception):
    """A collection could not be fetched or decoded."""

    def __init__(self, source: DataSource, message: str):
        super().__init__(f"{source.value}: {message}")
        self.source = source


def extract_records(payload: Any) -> List[Dict[str, Any]]:
    """Return the record list from a bare array or a ``{"data": [...]}`` envelope."""
    if isinstance(payload, dict):
        payload = payload.get("data")
    if not isinstance(payload, list):
        raise ValueError("expected a JSON array or an object with a 'data' array")
    return [record for record in payload if isinstance(record, dict)]


class DataIngestionManager:
    """
    Centralized data ingestion manager for the directory backend.

    Usage:
        manager = DataIngestionManager()
        doctors = manager.load_data(DataSource.DOCTORS)
        hierarchy = manager.load_data(DataSource.SPECIALTIES)
    """

    def __init__(self, base_url: Optional[str] = None, session: Optional[requests.Session] = None):
        config = get_api_config("directory")
        self.base_url = (base_url if base_url is not None else config["base_url"]).rstrip("/")
        self.timeout = config["request_timeout"]
        self._session = session or requests.Session()
        self._session.headers.setdefault("Accept", "application/json")
        if config.get("api_token"):
            self._session.headers["Authorization"] = f"Bearer {config['api_token']}"

    def _fetch_records(self, source: DataSource) -> List[Dict[str, Any]]:
        """
        GET one collection and return its records.

        Raises:
            DataSourceError: on a missing base URL, network/HTTP failure or a
                body that is not the expected JSON shape
        """
        if not self.base_url:
            raise DataSourceError(source, "no directory base URL configured (directory.base_url)")

        url = f"{self.base_url}/{source.value}"
        try:
            response = self._session.get(url, timeout=self.timeout)
            response.raise_for_status()
            records = extract_records(response.json())
        except requests.RequestException as e:
            logger.error(f"Failed to fetch {source.value} from {url}: {e}")
            raise DataSourceError(source, str(e)) from e
        except ValueError as e:
            logger.error(f"Unexpected response body for {source.value}: {e}")
            raise DataSourceError(source, f"invalid response body ({e})") from e

        logger.info(f"Fetched {len(records)} {source.value} records")
        return records

    def _post_process_data(
        self, records: List[Dict[str, Any]], source: DataSource
    ) -> Union[pd.DataFrame, List[Specialty]]:
        if source == DataSource.DOCTORS:
            df = normalize_doctor_records(records)
        elif source == DataSource.CLINICS:
            df = normalize_clinic_records(records)
        elif source == DataSource.CITIES:
            return normalize_city_records(records)
        else:
            return build_specialty_hierarchy(records)

        is_valid, message = validate_provider_data(df)
        if not is_valid:
            logger.warning(f"{source.value}: {message}")
        else:
            logger.debug(f"{source.value}: {message}")
        return df

    def load_data(self, source: DataSource) -> Union[pd.DataFrame, List[Specialty]]:
        """
        Fetch and normalise one collection.

        Doctors and clinics come back as provider DataFrames, cities as a city
        DataFrame and specialties as the top-level specialty list.
        """
        return self._post_process_data(self._fetch_records(source), source)

# ============================================================================
# Global Instance and Cached Loaders
# ============================================================================

# Lazy-initialized global instance for use throughout the application
_data_manager: Optional[DataIngestionManager] = None


def get_data_manager() -> DataIngestionManager:
    """
    Return a singleton DataIngestionManager, creating it on first use.

    This laziness avoids import-time side-effects and lets the configuration
    (secrets) be read only when data is first requested.
    """
    global _data_manager
    if _data_manager is None:
        _data_manager = DataIngestionManager()
    return _data_manager


@st.cache_data(ttl=3600, show_spinner=False)
def load_doctors() -> pd.DataFrame:
    """Doctors as a provider DataFrame, cached in st.cache_data."""
    return get_data_manager().load_data(DataSource.DOCTORS)


@st.cache_data(ttl=3600, show_spinner=False)
def load_clinics() -> pd.DataFrame:
    """Clinics as a provider DataFrame, cached in st.cache_data."""
    return get_data_manager().load_data(DataSource.CLINICS)


@st.cache_data(ttl=3600, show_spinner=False)
def load_specialties() -> List[Specialty]:
    """Top-level specialties with their children, cached in st.cache_data."""
    return get_data_manager().load_data(DataSource.SPECIALTIES)


@st.cache_data(ttl=3600, show_spinner=False)
def load_cities() -> pd.DataFrame:
    """The city registry, cached in st.cache_data."""
    return get_data_manager().load_data(DataSource.CITIES)


def refresh_data_cache():
    """
    Clear Streamlit caches so the next load fetches fresh data from the backend.

    Also drops the shared manager and geocoder so a changed configuration is
    picked up.
    """
    global _data_manager
    st.cache_data.clear()
    st.cache_resource.clear()
    _data_manager = None
    reset_geocoder()
    logger.info("Data cache cleared - next loads will fetch fresh data from the directory backend")
