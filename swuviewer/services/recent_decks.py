"""
Recently viewed decks.

A bounded, most-recent-first list keyed by deck URL. Viewing a deck again
moves it to the front instead of adding a duplicate.
"""

from datetime import date

from swuviewer.config import settings
from swuviewer.models.card import CardMetadata
from swuviewer.models.deck import RecentDeck

DEFAULT_BASE_ASPECT = "Command"


def leader_art_url(leader_id: str, image_base_url: str | None = None) -> str:
    """CDN image for a leader id: "SOR_010" -> ".../SOR/010.png"."""
    base = (image_base_url or settings.card_image_url).rstrip("/")
    return f"{base}/{leader_id.replace('_', '/', 1)}.png"


def base_aspect_of(base: CardMetadata | None) -> str:
    """First aspect of the deck's base card, defaulting to Command."""
    if base is not None and base.aspects:
        return base.aspects[0]
    return DEFAULT_BASE_ASPECT


class RecentDecks:
    """In-memory recency list of viewed decks."""

    def __init__(self, max_entries: int | None = None) -> None:
        self._max_entries = max(1, settings.max_recent_decks if max_entries is None else max_entries)
        self._entries: list[RecentDeck] = []

    @property
    def max_entries(self) -> int:
        return self._max_entries

    def add(
        self,
        url: str,
        name: str,
        leader_art: str | None = None,
        base_aspect: str = DEFAULT_BASE_ASPECT,
        viewed_on: date | None = None,
    ) -> RecentDeck:
        """Record a viewed deck at the front of the list, evicting the oldest."""
        entry = RecentDeck(
            url=url,
            name=name,
            leader_art=leader_art,
            base_aspect=base_aspect,
            viewed_on=viewed_on or date.today(),
        )
        self._entries = [entry] + [existing for existing in self._entries if existing.url != url]
        del self._entries[self._max_entries :]
        return entry

    def entries(self) -> list[RecentDeck]:
        return list(self._entries)

    def clear(self) -> None:
        self._entries.clear()

    def __len__(self) -> int:
        return len(self._entries)
