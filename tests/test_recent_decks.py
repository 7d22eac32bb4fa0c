"""Tests for the recently viewed deck list."""

from datetime import date

from swuviewer.models.card import CardMetadata
from swuviewer.services.recent_decks import (
    DEFAULT_BASE_ASPECT,
    RecentDecks,
    base_aspect_of,
    leader_art_url,
)


class TestRecentDecks:
    def test_most_recent_first(self) -> None:
        recent = RecentDecks(max_entries=5)
        recent.add("https://swudb.com/deck/a", "A")
        recent.add("https://swudb.com/deck/b", "B")

        assert [entry.name for entry in recent.entries()] == ["B", "A"]

    def test_revisit_moves_to_front_without_duplicate(self) -> None:
        recent = RecentDecks(max_entries=5)
        recent.add("https://swudb.com/deck/a", "A")
        recent.add("https://swudb.com/deck/b", "B")
        recent.add("https://swudb.com/deck/a", "A renamed")

        assert [entry.name for entry in recent.entries()] == ["A renamed", "B"]
        assert len(recent) == 2

    def test_bounded(self) -> None:
        recent = RecentDecks(max_entries=2)
        for name in ("a", "b", "c"):
            recent.add(f"https://swudb.com/deck/{name}", name)

        assert [entry.name for entry in recent.entries()] == ["c", "b"]

    def test_entry_fields(self) -> None:
        recent = RecentDecks()
        entry = recent.add(
            "https://swudb.com/deck/a",
            "A",
            leader_art="https://cdn.test/SOR/010.png",
            base_aspect="Vigilance",
            viewed_on=date(2025, 3, 14),
        )

        assert entry.viewed_on == date(2025, 3, 14)
        assert entry.base_aspect == "Vigilance"
        assert recent.entries() == [entry]

    def test_defaults(self) -> None:
        entry = RecentDecks().add("https://swudb.com/deck/a", "A")

        assert entry.base_aspect == DEFAULT_BASE_ASPECT
        assert entry.leader_art is None
        assert entry.viewed_on == date.today()

    def test_clear(self) -> None:
        recent = RecentDecks()
        recent.add("https://swudb.com/deck/a", "A")
        recent.clear()

        assert recent.entries() == []

    def test_entries_is_a_copy(self) -> None:
        recent = RecentDecks()
        recent.add("https://swudb.com/deck/a", "A")
        recent.entries().clear()

        assert len(recent) == 1


class TestHelpers:
    def test_leader_art_url(self) -> None:
        assert leader_art_url("SOR_010", "https://cdn.test/cards/") == "https://cdn.test/cards/SOR/010.png"

    def test_base_aspect_of(self) -> None:
        base = CardMetadata(set_code="SOR", number=26, name="Base", type="Base", aspects=("Command",))

        assert base_aspect_of(base) == "Command"
        assert base_aspect_of(CardMetadata.placeholder("SOR", 26, "SOR_026")) == DEFAULT_BASE_ASPECT
        assert base_aspect_of(None) == DEFAULT_BASE_ASPECT
