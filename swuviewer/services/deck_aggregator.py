"""
Deck card aggregation.

Merges a deck's main list and sideboard list into one count record per
card. Rows are {"id": "SOR_010", "count": 3}; a missing or zero count
means one copy.

A single bad row never aborts the deck: rows without a usable id or
count are logged and skipped.
"""

import logging
from collections.abc import Iterable
from typing import Any

from swuviewer.models.card import CardIdentifier, MalformedIdentifierError
from swuviewer.models.deck import Deck, DeckCardCount

logger = logging.getLogger(__name__)


def _row_count(raw_count: Any) -> int | None:
    """Copies a row represents, or None if the count is unusable."""
    if not raw_count:
        return 1
    if isinstance(raw_count, float) and not raw_count.is_integer():
        return None
    try:
        count = int(raw_count)
    except (TypeError, ValueError):
        return None
    return count if count > 0 else None


def _parse_row(row: Any) -> tuple[CardIdentifier, int] | None:
    if not isinstance(row, dict):
        logger.warning("Skipping deck row that is not an object: %r", row)
        return None

    raw_id = row.get("id")
    if not raw_id:
        logger.warning("Skipping deck row without an id: %r", row)
        return None

    try:
        identifier = CardIdentifier.parse(raw_id)
    except MalformedIdentifierError as e:
        logger.warning("Skipping deck row: %s", e)
        return None

    count = _row_count(row.get("count"))
    if count is None:
        logger.warning("Skipping deck row %s with invalid count %r", raw_id, row.get("count"))
        return None

    return identifier, count


def aggregate(
    main_list: Iterable[Any] | None,
    sideboard_list: Iterable[Any] | None = None,
) -> list[DeckCardCount]:
    """
    Merge main deck and sideboard rows by card.

    Args:
        main_list: Main deck rows
        sideboard_list: Sideboard rows

    Returns:
        One DeckCardCount per distinct card, in order of first appearance
        (main list first, then sideboard). Repeated rows within a list add up.
    """
    main: dict[CardIdentifier, int] = {}
    sideboard: dict[CardIdentifier, int] = {}
    order: dict[CardIdentifier, None] = {}

    for rows, counts in ((main_list, main), (sideboard_list, sideboard)):
        for row in rows or ():
            parsed = _parse_row(row)
            if parsed is None:
                continue
            identifier, count = parsed
            counts[identifier] = counts.get(identifier, 0) + count
            order.setdefault(identifier, None)

    return [
        DeckCardCount(
            identifier=identifier,
            main=main.get(identifier, 0),
            sideboard=sideboard.get(identifier, 0),
        )
        for identifier in order
    ]


def aggregate_deck(deck: Deck) -> list[DeckCardCount]:
    """Aggregate a loaded deck's main deck and sideboard."""
    return aggregate(deck.main, deck.sideboard)
