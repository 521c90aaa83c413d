"""Tests for the specialty taxonomy and the parent / sub-specialty match rule."""
import pytest

from provider_directory.utils.specialties import (
    Specialty,
    build_specialty_hierarchy,
    find_specialty_by_slug,
    get_specialty_options,
    get_sub_specialty_options,
    matches_any_specialty,
    matches_specialty,
    resolve_parent,
)


class TestBuildHierarchy:
    def test_top_level_specialties_with_embedded_children(self, hierarchy):
        assert [s.id for s in hierarchy] == [1, 2, 3]
        assert hierarchy[0].child_ids == (10, 11)
        assert all(child.parent_id == 1 for child in hierarchy[0].children)

    def test_null_or_missing_children_mean_none(self, hierarchy):
        assert hierarchy[1].children == ()
        assert hierarchy[2].children == ()

    def test_child_without_parent_id_inherits_it(self):
        records = [{"id": 5, "naziv": "Hirurgija", "children": [{"id": 50, "naziv": "Neurohirurgija"}]}]

        hierarchy = build_specialty_hierarchy(records)

        assert hierarchy[0].children[0].parent_id == 5

    def test_records_without_id_are_skipped(self):
        hierarchy = build_specialty_hierarchy([{"naziv": "Bez id"}, {"id": 4, "naziv": "Pedijatrija"}, "junk"])

        assert [s.id for s in hierarchy] == [4]

    def test_resolve_parent(self, hierarchy):
        assert resolve_parent(hierarchy, 2).name == "Neurologija"
        assert resolve_parent(hierarchy, 10) is None
        assert resolve_parent(hierarchy, None) is None


class TestMatchesSpecialty:
    @pytest.mark.parametrize("specialty_id, expected", [(1, True), (10, True), (11, True), (99, False)])
    def test_parent_only_matches_parent_and_children(self, hierarchy, specialty_id, expected):
        assert matches_specialty(specialty_id, 1, frozenset(), hierarchy) is expected

    @pytest.mark.parametrize("specialty_id, expected", [(1, False), (10, True), (11, False), (99, False)])
    def test_sub_selection_matches_only_selected_ids(self, hierarchy, specialty_id, expected):
        assert matches_specialty(specialty_id, 1, frozenset({10}), hierarchy) is expected

    def test_no_parent_matches_everything(self, hierarchy):
        assert matches_specialty(99, None, frozenset(), hierarchy)
        assert matches_specialty(None, None, frozenset(), hierarchy)

    def test_missing_specialty_never_matches_active_filter(self, hierarchy):
        assert not matches_specialty(None, 1, frozenset(), hierarchy)

    def test_parent_missing_from_hierarchy_matches_only_itself(self, hierarchy):
        assert matches_specialty(42, 42, frozenset(), hierarchy)
        assert not matches_specialty(10, 42, frozenset(), hierarchy)

    def test_any_specialty_is_an_or(self, hierarchy):
        assert matches_any_specialty([99, 11], 1, frozenset(), hierarchy)
        assert not matches_any_specialty([99, 2], 1, frozenset(), hierarchy)

    def test_any_specialty_with_no_ids(self, hierarchy):
        assert not matches_any_specialty([], 1, frozenset(), hierarchy)
        assert matches_any_specialty([], None, frozenset(), hierarchy)


class TestLookups:
    def test_find_by_slug(self, hierarchy):
        assert find_specialty_by_slug(hierarchy, "kardiologija").id == 1
        assert find_specialty_by_slug(hierarchy, "Neurologija").id == 2
        assert find_specialty_by_slug(hierarchy, "nepostojeca") is None
        assert find_specialty_by_slug(hierarchy, "") is None

    def test_find_by_slugified_name_when_slug_missing(self):
        hierarchy = [Specialty(id=7, name="Opća medicina")]

        assert find_specialty_by_slug(hierarchy, "opca-medicina").id == 7

    def test_options(self, hierarchy):
        assert get_specialty_options(hierarchy) == [(1, "Kardiologija"), (2, "Neurologija"), (3, "Dermatologija")]
        assert get_sub_specialty_options(hierarchy, 1) == [
            (10, "Interventna kardiologija"),
            (11, "Pedijatrijska kardiologija"),
        ]
        assert get_sub_specialty_options(hierarchy, 2) == []
        assert get_sub_specialty_options(hierarchy, None) == []
