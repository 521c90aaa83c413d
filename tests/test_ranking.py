"""Tests for distance attachment and provider sorting."""
import numpy as np
import pandas as pd
import pytest

from provider_directory.utils.ranking import DISTANCE_COLUMN, attach_distances, sort_providers
from provider_directory.utils.search_state import SortKey, UserLocation

SARAJEVO = UserLocation(lat=43.8563, lng=18.4131)


def ids(df: pd.DataFrame):
    return df["ID"].tolist()


def names(df: pd.DataFrame):
    return df["Display Name"].tolist()


@pytest.fixture
def rated_df():
    return pd.DataFrame(
        {
            "ID": [1, 2, 3, 4],
            "Display Name": ["A", "B", "C", "D"],
            "Rating": [4.0, 5.0, 4.0, 5.0],
        }
    )


class TestNameSort:
    def test_accented_names_sort_next_to_base_letter(self):
        df = pd.DataFrame({"Display Name": ["Zora", "Čedo", "Ana", "Cvijeta", "Đorđe", "Dario"], "Rating": 0.0})

        result = sort_providers(df, SortKey.NAME, location_active=False)

        assert names(result) == ["Ana", "Čedo", "Cvijeta", "Dario", "Đorđe", "Zora"]

    def test_case_insensitive(self):
        df = pd.DataFrame({"Display Name": ["beta", "Alfa", "Gama"], "Rating": 0.0})

        assert names(sort_providers(df, SortKey.NAME, False)) == ["Alfa", "beta", "Gama"]

    def test_name_order_independent_of_previous_sort(self, doctors_df):
        by_name = sort_providers(doctors_df, SortKey.NAME, False)
        by_rating_then_name = sort_providers(sort_providers(doctors_df, SortKey.RATING, False), SortKey.NAME, False)

        assert ids(by_name) == ids(by_rating_then_name) == [6, 1, 4, 2, 3, 5]

    def test_accepts_string_key(self, doctors_df):
        assert ids(sort_providers(doctors_df, "name", False)) == [6, 1, 4, 2, 3, 5]


class TestRatingSort:
    def test_descending_with_missing_rating_as_zero(self, doctors_df):
        assert ids(sort_providers(doctors_df, SortKey.RATING, False)) == [1, 5, 2, 6, 4, 3]

    def test_ties_keep_input_order(self, rated_df):
        assert names(sort_providers(rated_df, SortKey.RATING, False)) == ["B", "D", "A", "C"]

    def test_nan_rating_sorts_like_zero(self):
        df = pd.DataFrame({"Display Name": ["A", "B", "C"], "Rating": [np.nan, 0.0, 1.0]})

        assert names(sort_providers(df, SortKey.RATING, False)) == ["C", "A", "B"]

    def test_does_not_modify_input(self, rated_df):
        before = rated_df.copy()
        sort_providers(rated_df, SortKey.RATING, False)
        pd.testing.assert_frame_equal(rated_df, before)


class TestDistance:
    def test_attach_distances_adds_column_on_a_copy(self, doctors_df):
        ranked = attach_distances(doctors_df, SARAJEVO)

        assert DISTANCE_COLUMN in ranked.columns
        assert DISTANCE_COLUMN not in doctors_df.columns
        assert ranked.loc[ranked["ID"] == 1, DISTANCE_COLUMN].iloc[0] == pytest.approx(0.69, abs=0.1)
        assert ranked.loc[ranked["ID"].isin([3, 6]), DISTANCE_COLUMN].isna().all()

    def test_attach_distances_without_location_drops_column(self, doctors_df):
        ranked = attach_distances(doctors_df, SARAJEVO)

        cleared = attach_distances(ranked, None)

        assert DISTANCE_COLUMN not in cleared.columns
        assert DISTANCE_COLUMN in ranked.columns

    def test_nearest_first_and_missing_last(self, doctors_df):
        ranked = sort_providers(attach_distances(doctors_df, SARAJEVO), SortKey.DISTANCE, location_active=True)

        assert ids(ranked) == [1, 2, 4, 5, 3, 6]

    def test_distances_are_monotonic(self, doctors_df):
        ranked = sort_providers(attach_distances(doctors_df, SARAJEVO), SortKey.DISTANCE, True)

        known = ranked[DISTANCE_COLUMN].dropna().tolist()
        assert known == sorted(known)

    def test_closer_provider_first(self):
        df = pd.DataFrame(
            {
                "ID": [1, 2],
                "Display Name": ["Y", "X"],
                "Rating": [5.0, 1.0],
                "Latitude": [44.7725, 43.8600],
                "Longitude": [17.1910, 18.4200],
            }
        )

        ranked = sort_providers(attach_distances(df, SARAJEVO), SortKey.DISTANCE, True)

        assert names(ranked) == ["X", "Y"]

    def test_equal_distances_keep_input_order(self):
        df = pd.DataFrame(
            {
                "Display Name": ["B", "A", "C"],
                "Rating": 0.0,
                "Latitude": [43.9, 43.9, 43.9],
                "Longitude": [18.4, 18.4, 18.4],
            }
        )

        ranked = sort_providers(attach_distances(df, SARAJEVO), SortKey.DISTANCE, True)

        assert names(ranked) == ["B", "A", "C"]

    def test_distance_sort_is_noop_without_location(self, doctors_df):
        assert ids(sort_providers(doctors_df, SortKey.DISTANCE, location_active=False)) == ids(doctors_df)

    def test_empty_frame(self):
        assert sort_providers(pd.DataFrame(), SortKey.NAME, False).empty
