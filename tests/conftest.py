"""Pytest configuration helpers.

Ensure the project root is on sys.path so tests can import the
`provider_directory` package when pytest is invoked from the repository root
or an isolated test runner, and expose the JSON payloads in ``fixtures/``
(shaped exactly like the directory backend's responses) as fixtures.
"""

import json
import sys
from pathlib import Path

import pytest

FIXTURES_DIR = Path(__file__).parent / "fixtures"


def pytest_configure():
    # Insert the repository root (parent of the tests directory) at the front
    repo_root = Path(__file__).resolve().parents[1]
    sys.path.insert(0, str(repo_root))


def load_payload(name: str):
    """Raw response body for one endpoint: a bare array or a ``{"data": [...]}`` envelope."""
    with open(FIXTURES_DIR / f"{name}.json", encoding="utf-8") as fh:
        return json.load(fh)


def load_records(name: str):
    payload = load_payload(name)
    return payload["data"] if isinstance(payload, dict) else payload


@pytest.fixture
def sample_fixtures_dir():
    """Return the path to the test fixtures directory."""
    return FIXTURES_DIR


@pytest.fixture
def specialty_records():
    return load_records("specialties")


@pytest.fixture
def doctor_records():
    return load_records("doctors")


@pytest.fixture
def clinic_records():
    return load_records("clinics")


@pytest.fixture
def city_records():
    return load_records("cities")


@pytest.fixture
def hierarchy(specialty_records):
    from provider_directory.utils.specialties import build_specialty_hierarchy

    return build_specialty_hierarchy(specialty_records)


@pytest.fixture
def doctors_df(doctor_records):
    from provider_directory.utils.cleaning import normalize_doctor_records

    return normalize_doctor_records(doctor_records)


@pytest.fixture
def clinics_df(clinic_records):
    from provider_directory.utils.cleaning import normalize_clinic_records

    return normalize_clinic_records(clinic_records)


@pytest.fixture
def cities_df(city_records):
    from provider_directory.utils.cleaning import normalize_city_records

    return normalize_city_records(city_records)


@pytest.fixture
def mock_secrets(monkeypatch):
    """
    Replace st.secrets with a plain dict for the duration of a test.

    Returns the dict so a test can fill in the sections it needs, e.g.
    ``mock_secrets["directory"] = {"base_url": "https://api.example.test"}``.
    """
    import streamlit as st

    secrets = {}
    monkeypatch.setattr(st, "secrets", secrets, raising=False)
    return secrets
