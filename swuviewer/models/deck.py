from dataclasses import dataclass, field
from datetime import date
from enum import Enum
from typing import Any

from swuviewer.models.card import CardIdentifier, CardMetadata


@dataclass(frozen=True, slots=True)
class DeckCardCount:
    """
    Copies of one card in a deck.

    Attributes:
        identifier: The card
        main: Copies in the main deck
        sideboard: Copies in the sideboard
    """

    identifier: CardIdentifier
    main: int = 0
    sideboard: int = 0

    @property
    def total(self) -> int:
        return self.main + self.sideboard


@dataclass(frozen=True, slots=True)
class ResolvedCard:
    """A deck card with its catalog metadata attached."""

    identifier: CardIdentifier
    metadata: CardMetadata
    main: int = 0
    sideboard: int = 0


@dataclass
class Deck:
    """
    A deck loaded from the deck API.

    Attributes:
        deck_id: Deck id the payload was fetched for
        name: Deck name from payload metadata
        main: Raw main deck rows [{"id": ..., "count": ...}]
        sideboard: Raw sideboard rows
        leader: Leader card id
        second_leader: Second leader card id (two-leader formats)
        base: Base card id
    """

    deck_id: str
    name: str
    main: list[dict[str, Any]] = field(default_factory=list)
    sideboard: list[dict[str, Any]] = field(default_factory=list)
    leader: str | None = None
    second_leader: str | None = None
    base: str | None = None

    def command_zone(self) -> list[str]:
        """Leader, second leader, and base ids that are present, in that order."""
        return [card_id for card_id in (self.leader, self.second_leader, self.base) if card_id]


class ComparisonClass(str, Enum):
    """Where a card stands when two decks are compared."""

    ONLY_IN_A = "only_in_a"
    ONLY_IN_B = "only_in_b"
    DIFFERENT_COUNTS = "different_counts"
    SAME = "same"


@dataclass(frozen=True, slots=True)
class ComparedCard:
    """A card's counts in both compared decks."""

    identifier: CardIdentifier
    classification: ComparisonClass
    a_main: int = 0
    a_sideboard: int = 0
    b_main: int = 0
    b_sideboard: int = 0


@dataclass
class DeckComparison:
    """Cards of two decks split into four disjoint buckets."""

    only_a: list[ComparedCard] = field(default_factory=list)
    only_b: list[ComparedCard] = field(default_factory=list)
    different: list[ComparedCard] = field(default_factory=list)
    same: list[ComparedCard] = field(default_factory=list)

    def buckets(self) -> dict[ComparisonClass, list[ComparedCard]]:
        return {
            ComparisonClass.ONLY_IN_A: self.only_a,
            ComparisonClass.ONLY_IN_B: self.only_b,
            ComparisonClass.DIFFERENT_COUNTS: self.different,
            ComparisonClass.SAME: self.same,
        }

    def summary(self) -> dict[str, int]:
        """Number of distinct cards per bucket."""
        return {kind.value: len(cards) for kind, cards in self.buckets().items()}


@dataclass(frozen=True, slots=True)
class RecentDeck:
    """An entry in the recently viewed decks list."""

    url: str
    name: str
    leader_art: str | None
    base_aspect: str
    viewed_on: date
