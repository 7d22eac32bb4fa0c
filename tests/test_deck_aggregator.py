"""Tests for merging main deck and sideboard rows."""

import logging

import pytest

from swuviewer.models.card import CardIdentifier
from swuviewer.models.deck import Deck
from swuviewer.services.deck_aggregator import aggregate, aggregate_deck


def _counts(result) -> list[tuple[str, int, int]]:
    return [(entry.identifier.canonical, entry.main, entry.sideboard) for entry in result]


class TestAggregate:
    def test_merges_main_and_sideboard(self) -> None:
        result = aggregate([{"id": "SOR_001", "count": 2}], [{"id": "SOR_001", "count": 1}])

        assert _counts(result) == [("SOR_001", 2, 1)]
        assert result[0].total == 3

    def test_first_appearance_order(self) -> None:
        result = aggregate(
            [{"id": "SHD_005", "count": 1}, {"id": "SOR_046", "count": 3}],
            [{"id": "TWI_017", "count": 2}, {"id": "SHD_005", "count": 1}],
        )

        assert _counts(result) == [
            ("SHD_005", 1, 1),
            ("SOR_046", 3, 0),
            ("TWI_017", 0, 2),
        ]

    def test_sideboard_only(self) -> None:
        assert _counts(aggregate([], [{"id": "SOR_100", "count": 2}])) == [("SOR_100", 0, 2)]

    def test_repeated_rows_add_up(self) -> None:
        result = aggregate([{"id": "SOR_046", "count": 2}, {"id": "SOR_46", "count": 1}])

        assert _counts(result) == [("SOR_046", 3, 0)]

    @pytest.mark.parametrize("count", [None, 0, ""])
    def test_missing_count_means_one(self, count) -> None:
        row = {"id": "SOR_001"} if count is None else {"id": "SOR_001", "count": count}

        assert _counts(aggregate([row])) == [("SOR_001", 1, 0)]

    def test_string_count(self) -> None:
        assert _counts(aggregate([{"id": "SOR_001", "count": "3"}])) == [("SOR_001", 3, 0)]

    def test_fractional_count_skipped(self) -> None:
        result = aggregate([{"id": "SOR_001", "count": 2.5}, {"id": "SOR_002", "count": 2.0}])

        assert _counts(result) == [("SOR_002", 2, 0)]

    def test_empty_lists(self) -> None:
        assert aggregate([], []) == []
        assert aggregate(None, None) == []

    def test_skips_malformed_rows(self, caplog: pytest.LogCaptureFixture) -> None:
        rows = [
            {"id": "BAD", "count": 1},
            "SOR_001",
            {"count": 2},
            {"id": "SOR_002", "count": -1},
            {"id": "SOR_003", "count": "many"},
            {"id": "SOR_004", "count": 2},
        ]

        with caplog.at_level(logging.WARNING):
            result = aggregate(rows)

        assert _counts(result) == [("SOR_004", 2, 0)]
        assert "Skipping deck row" in caplog.text

    def test_aggregate_deck(self) -> None:
        deck = Deck(
            deck_id="abc",
            name="Test",
            main=[{"id": "SOR_010", "count": 3}],
            sideboard=[{"id": "SOR_010", "count": 1}, {"id": "SOR_020", "count": 1}],
        )

        result = aggregate_deck(deck)

        assert [entry.identifier for entry in result] == [CardIdentifier("SOR", 10), CardIdentifier("SOR", 20)]
        assert result[0].sideboard == 1
