"""Data loading package for the provider directory."""

from .ingestion import (
    DataIngestionManager,
    DataSource,
    DataSourceError,
    get_data_manager,
    load_cities,
    load_clinics,
    load_doctors,
    load_specialties,
    refresh_data_cache,
)

__all__ = [
    "DataIngestionManager",
    "DataSource",
    "DataSourceError",
    "get_data_manager",
    "load_cities",
    "load_clinics",
    "load_doctors",
    "load_specialties",
    "refresh_data_cache",
]
