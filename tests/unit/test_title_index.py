"""
Tests unitarios para la construccion y fusion de indices title -> ids.
"""
import copy
from itertools import permutations

from instance_backfill.application.services.safety_classifier import classify_titles
from instance_backfill.application.services.title_index import (
    build_title_index,
    collect_observations,
    merge_title_indexes,
)
from instance_backfill.domain.entities.reconciliation import Observation


class TestCollectObservations:
    """Tests para collect_observations."""

    def test_discards_rows_without_title_or_id(self):
        """Filas sin titulo o sin id no aportan observaciones."""
        rows = [
            {"title": "Cat", "bookInstanceId": "abc"},
            {"title": "", "bookInstanceId": "x1"},
            {"title": None, "bookInstanceId": "x2"},
            {"bookInstanceId": "x3"},
            {"title": "Dog", "bookInstanceId": None},
            {"title": "Dog", "bookInstanceId": ""},
            {"title": "Dog"},
        ]

        observations = collect_observations(rows, title_field="title", id_field="bookInstanceId")

        assert observations == [Observation(title="Cat", instance_id="abc")]

    def test_uses_source_specific_field_names(self):
        rows = [{"title": "Cat", "book_instance_id": "abc", "bookInstanceId": "ignored"}]

        observations = collect_observations(rows, title_field="title", id_field="book_instance_id")

        assert observations == [Observation(title="Cat", instance_id="abc")]


class TestBuildTitleIndex:
    """Tests para build_title_index."""

    def test_repeated_pairs_collapse(self):
        index = build_title_index([
            Observation("Cat", "abc"),
            Observation("Cat", "abc"),
            Observation("Dog", "X"),
        ])

        assert index == {"Cat": {"abc"}, "Dog": {"X"}}

    def test_distinct_ids_accumulate(self):
        index = build_title_index([Observation("Dog", "X"), Observation("Dog", "Y")])

        assert index == {"Dog": {"X", "Y"}}

    def test_empty_input(self):
        assert build_title_index([]) == {}


class TestMergeTitleIndexes:
    """Tests para merge_title_indexes."""

    def test_does_not_mutate_inputs(self):
        a = {"Cat": {"abc"}, "Dog": {"X"}}
        b = {"Dog": {"Y"}, "Owl": {"o1"}}
        a_before, b_before = copy.deepcopy(a), copy.deepcopy(b)

        merged = merge_title_indexes(a, b)
        merged["Cat"].add("mutated")

        assert a == a_before
        assert b == b_before

    def test_differing_single_ids_become_union(self):
        """Dos fuentes con un id distinto cada una revelan la ambiguedad."""
        merged = merge_title_indexes({"Dog": {"X"}}, {"Dog": {"Y"}})

        assert merged == {"Dog": {"X", "Y"}}

    def test_titles_only_in_one_side_are_copied(self):
        merged = merge_title_indexes({"Cat": {"abc"}}, {"Owl": {"o1"}})

        assert merged == {"Cat": {"abc"}, "Owl": {"o1"}}

    def test_merge_order_does_not_change_result(self):
        """La fusion es conmutativa y asociativa sobre los conjuntos de ids."""
        a = {"Cat": {"abc"}, "Dog": {"X"}}
        b = {"Dog": {"Y"}, "Owl": {"o1"}}
        c = {"Cat": {"abc"}, "Owl": {"o2"}, "Emu": {"e1"}}

        expected = merge_title_indexes(a, b, c)
        for first, second, third in permutations([a, b, c]):
            assert merge_title_indexes(first, second, third) == expected
            assert merge_title_indexes(merge_title_indexes(first, second), third) == expected
            assert merge_title_indexes(first, merge_title_indexes(second, third)) == expected

        assert classify_titles(merge_title_indexes(a, b)) == classify_titles(merge_title_indexes(b, a))
