"""Test suite for the provider filter pipeline.

Tests verify that:
- Each filter stage (search text, city, specialty) behaves on its own
- The pipeline result is the intersection of the active filters
- Sub-specialty selection narrows a parent selection and never widens it
- Clinics match a specialty through their doctors
- The source frame is never modified and relative order is kept
"""
import itertools

import pandas as pd
import pytest

from provider_directory.utils.cleaning import normalize_doctor_records
from provider_directory.utils.filters import (
    CLINICS,
    DOCTORS,
    filter_by_city,
    filter_by_search_text,
    filter_by_specialty,
    filter_providers,
)
from provider_directory.utils.search_state import FilterState


def ids(df: pd.DataFrame):
    return df["ID"].tolist()


class TestSearchText:
    def test_matches_specialty_name(self, doctors_df):
        assert ids(filter_by_search_text(doctors_df, "kardio", DOCTORS)) == [1, 2, 4, 5]

    def test_case_insensitive_with_diacritics(self, doctors_df):
        assert ids(filter_by_search_text(doctors_df, "HODŽIĆ", DOCTORS)) == [1]

    def test_matches_location(self, doctors_df):
        assert ids(filter_by_search_text(doctors_df, "koševo", DOCTORS)) == [2]

    def test_empty_text_is_inactive(self, doctors_df):
        assert ids(filter_by_search_text(doctors_df, "", DOCTORS)) == ids(doctors_df)
        assert ids(filter_by_search_text(doctors_df, None, DOCTORS)) == ids(doctors_df)

    def test_whitespace_is_matched_literally(self):
        df = pd.DataFrame(
            {
                "ID": [1, 2],
                "Display Name": ["Amra Hodžić", "Bo"],
                "Specialty": ["", ""],
                "Location": ["", ""],
            }
        )
        assert ids(filter_by_search_text(df, " ", DOCTORS)) == [1]

    def test_regex_characters_are_literal(self, doctors_df):
        assert filter_by_search_text(doctors_df, "(", DOCTORS).empty

    def test_clinic_search_covers_description_and_address(self, clinics_df):
        assert ids(filter_by_search_text(clinics_df, "titova", CLINICS)) == [101]
        assert ids(filter_by_search_text(clinics_df, "kardiološki", CLINICS)) == [101]
        assert ids(filter_by_search_text(clinics_df, "klinika", CLINICS)) == [101, 103]


class TestCity:
    def test_exact_match(self, doctors_df):
        assert ids(filter_by_city(doctors_df, "Sarajevo", DOCTORS)) == [1, 2, 3]

    def test_case_sensitive(self, doctors_df):
        assert filter_by_city(doctors_df, "sarajevo", DOCTORS).empty

    def test_empty_city_is_inactive(self, doctors_df):
        assert ids(filter_by_city(doctors_df, "", DOCTORS)) == ids(doctors_df)

    def test_missing_city_column_matches_nothing(self, doctors_df):
        without_city = doctors_df.drop(columns=["City"])

        assert filter_by_city(without_city, "Sarajevo", DOCTORS).empty
        assert ids(filter_by_city(without_city, "", DOCTORS)) == ids(doctors_df)


class TestSpecialty:
    def test_parent_includes_children(self, doctors_df, hierarchy):
        assert ids(filter_by_specialty(doctors_df, 1, frozenset(), hierarchy, DOCTORS)) == [1, 2, 4, 5]

    def test_sub_selection_excludes_parent(self, doctors_df, hierarchy):
        assert ids(filter_by_specialty(doctors_df, 1, frozenset({10}), hierarchy, DOCTORS)) == [2]

    def test_unknown_specialty_is_excluded(self, doctors_df, hierarchy):
        result = filter_by_specialty(doctors_df, 2, frozenset(), hierarchy, DOCTORS)
        assert ids(result) == [3]
        assert 6 not in ids(filter_by_specialty(doctors_df, 1, frozenset(), hierarchy, DOCTORS))

    def test_clinics_match_through_any_doctor(self, clinics_df, hierarchy):
        assert ids(filter_by_specialty(clinics_df, 1, frozenset(), hierarchy, CLINICS)) == [101]
        assert ids(filter_by_specialty(clinics_df, 1, frozenset({11}), hierarchy, CLINICS)) == []
        assert ids(filter_by_specialty(clinics_df, 2, frozenset(), hierarchy, CLINICS)) == [102]

    def test_no_parent_is_inactive(self, clinics_df, hierarchy):
        assert ids(filter_by_specialty(clinics_df, None, frozenset({10}), hierarchy, CLINICS)) == [101, 102, 103]


class TestFilterProviders:
    def test_city_and_parent_specialty(self, hierarchy):
        providers = normalize_doctor_records(
            [
                {"id": 1, "ime": "A", "grad": "Sarajevo", "specijalnost_id": 1},
                {"id": 2, "ime": "B", "grad": "Sarajevo", "specijalnost_id": 2},
                {"id": 3, "ime": "C", "grad": "Mostar", "specijalnost_id": 1},
            ]
        )
        state = FilterState(city="Sarajevo", parent_specialty_id=1)

        assert ids(filter_providers(providers, state, DOCTORS, hierarchy)) == [1]

    def test_source_frame_is_not_modified(self, doctors_df, hierarchy):
        before = doctors_df.copy()

        filter_providers(doctors_df, FilterState(search_text="a", city="Sarajevo", parent_specialty_id=1), DOCTORS, hierarchy)

        pd.testing.assert_frame_equal(doctors_df, before)

    def test_relaxing_a_filter_restores_providers(self, doctors_df, hierarchy):
        narrow = FilterState(city="Mostar")
        assert ids(filter_providers(doctors_df, narrow, DOCTORS, hierarchy)) == [4]
        assert ids(filter_providers(doctors_df, narrow.with_city(""), DOCTORS, hierarchy)) == ids(doctors_df)

    def test_empty_collection(self, hierarchy):
        empty = normalize_doctor_records([])
        assert filter_providers(empty, FilterState(city="Sarajevo"), DOCTORS, hierarchy).empty

    @pytest.mark.parametrize(
        "search_text, city, parent_id, sub_ids",
        list(itertools.product(["", "ić"], ["", "Sarajevo"], [None, 1], [frozenset(), frozenset({10})])),
    )
    def test_result_is_intersection_of_active_filters(self, doctors_df, hierarchy, search_text, city, parent_id, sub_ids):
        state = FilterState(search_text=search_text, city=city, parent_specialty_id=parent_id, sub_specialty_ids=sub_ids)

        combined = set(ids(filter_providers(doctors_df, state, DOCTORS, hierarchy)))

        expected = set(ids(doctors_df))
        expected &= set(ids(filter_by_search_text(doctors_df, search_text, DOCTORS)))
        expected &= set(ids(filter_by_city(doctors_df, city, DOCTORS)))
        expected &= set(ids(filter_by_specialty(doctors_df, parent_id, sub_ids, hierarchy, DOCTORS)))
        assert combined == expected

        # Dropping any single active filter can only add providers
        for relaxed in (
            state.with_search_text(""),
            state.with_city(""),
            state.with_parent_specialty(None),
        ):
            assert combined <= set(ids(filter_providers(doctors_df, relaxed, DOCTORS, hierarchy)))

    def test_sub_selection_narrows_parent_selection(self, doctors_df, hierarchy):
        parent_only = FilterState(parent_specialty_id=1)
        for sub_ids in ({10}, {11}, {10, 11}):
            with_subs = parent_only.with_sub_specialties(sub_ids)
            narrowed = set(ids(filter_providers(doctors_df, with_subs, DOCTORS, hierarchy)))
            assert narrowed <= set(ids(filter_providers(doctors_df, parent_only, DOCTORS, hierarchy)))
