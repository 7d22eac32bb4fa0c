"""
Deck comparison.

Cross-references two aggregated decks and classifies every distinct card
into exactly one bucket:

    only in A        total in A > 0, total in B == 0
    only in B        total in A == 0, total in B > 0
    different counts present in both, main or sideboard counts differ
    same             present in both with identical counts

Each bucket is ordered by canonical identifier order.
"""

from collections.abc import Iterable, Sequence

from swuviewer.config import settings
from swuviewer.models.card import CardIdentifier, IdentifierOrder
from swuviewer.models.deck import ComparedCard, ComparisonClass, DeckCardCount, DeckComparison


def _index_counts(aggregate: Iterable[DeckCardCount]) -> dict[CardIdentifier, tuple[int, int]]:
    """Map identifier to (main, sideboard), summing repeated entries."""
    counts: dict[CardIdentifier, tuple[int, int]] = {}
    for entry in aggregate:
        main, sideboard = counts.get(entry.identifier, (0, 0))
        counts[entry.identifier] = (main + entry.main, sideboard + entry.sideboard)
    return counts


def classify(a_main: int, a_sideboard: int, b_main: int, b_sideboard: int) -> ComparisonClass:
    """
    Classify a card by its counts in both decks.

    Raises:
        ValueError: If the card is in neither deck
    """
    total_a = a_main + a_sideboard
    total_b = b_main + b_sideboard

    if total_a > 0 and total_b == 0:
        return ComparisonClass.ONLY_IN_A
    if total_a == 0 and total_b > 0:
        return ComparisonClass.ONLY_IN_B
    if total_a > 0 and total_b > 0:
        if a_main != b_main or a_sideboard != b_sideboard:
            return ComparisonClass.DIFFERENT_COUNTS
        return ComparisonClass.SAME
    raise ValueError("Card is in neither deck")


def compare(
    aggregate_a: Iterable[DeckCardCount],
    aggregate_b: Iterable[DeckCardCount],
    set_order: Sequence[str] | None = None,
) -> DeckComparison:
    """
    Compare two aggregated decks card by card.

    Args:
        aggregate_a: Card counts of deck A
        aggregate_b: Card counts of deck B
        set_order: Canonical set order for bucket ordering

    Returns:
        DeckComparison whose buckets partition the union of both decks
    """
    counts_a = _index_counts(aggregate_a)
    counts_b = _index_counts(aggregate_b)

    # Union in first-seen order (A then B); cards with no copies are not "in" a deck
    union: dict[CardIdentifier, None] = {}
    for counts in (counts_a, counts_b):
        for identifier, (main, sideboard) in counts.items():
            if main + sideboard > 0:
                union.setdefault(identifier, None)

    order = IdentifierOrder(settings.set_order if set_order is None else set_order)
    order.observe(union)

    comparison = DeckComparison()
    buckets = comparison.buckets()

    for identifier in sorted(union, key=order.key):
        a_main, a_sideboard = counts_a.get(identifier, (0, 0))
        b_main, b_sideboard = counts_b.get(identifier, (0, 0))
        kind = classify(a_main, a_sideboard, b_main, b_sideboard)
        buckets[kind].append(
            ComparedCard(
                identifier=identifier,
                classification=kind,
                a_main=a_main,
                a_sideboard=a_sideboard,
                b_main=b_main,
                b_sideboard=b_sideboard,
            )
        )

    return comparison
