from swuviewer.models.card import (
    UNKNOWN_TYPE,
    CardIdentifier,
    CardMetadata,
    IdentifierOrder,
    MalformedIdentifierError,
    normalize_string_list,
    sort_identifiers,
)
from swuviewer.models.deck import (
    ComparedCard,
    ComparisonClass,
    Deck,
    DeckCardCount,
    DeckComparison,
    RecentDeck,
    ResolvedCard,
)

__all__ = [
    "CardIdentifier",
    "CardMetadata",
    "ComparedCard",
    "ComparisonClass",
    "Deck",
    "DeckCardCount",
    "DeckComparison",
    "IdentifierOrder",
    "MalformedIdentifierError",
    "RecentDeck",
    "ResolvedCard",
    "UNKNOWN_TYPE",
    "normalize_string_list",
    "sort_identifiers",
]
