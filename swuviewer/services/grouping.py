"""
Card grouping engine.

Partitions a deck's resolved cards into display groups and orders both
the groups and the cards inside them. Each sort option is a strategy
with three operations:

    group_key(card)      -> the group a card belongs to
    order_groups(keys)   -> display order of the groups
    order_within(cards)  -> display order inside one group (stable)

The strategy set is closed (SortStrategy); unknown names fall back to
grouping by set.
"""

import logging
import re
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from enum import Enum

from swuviewer.config import settings
from swuviewer.models.card import UNKNOWN_TYPE, CardIdentifier, CardMetadata, IdentifierOrder
from swuviewer.models.deck import ResolvedCard
from swuviewer.services.card_renderer import render_card as default_render_card

logger = logging.getLogger(__name__)

RenderCard = Callable[[CardIdentifier, CardMetadata, int, int], str]

COST_PREFIX = "Cost: "
UNKNOWN_COST = "Unknown"
VARIABLE_COST = "X"
UNKNOWN_ASPECT = "Unknown"
NO_TRAITS = "No Traits"
GROUND_UNIT = "Ground Unit"
SPACE_UNIT = "Space Unit"

# Type groups shown first, in this order; other types follow alphabetically
PREFERRED_TYPE_ORDER = (GROUND_UNIT, SPACE_UNIT, "Event", "Upgrade")

_NUMERIC_COST = re.compile(r"^-?[0-9]+(\.[0-9]+)?$")


def _alphabetical(key: str) -> tuple[str, str]:
    return (key.casefold(), key)


class SortStrategy(str, Enum):
    """Ways a deck can be grouped for display."""

    SET = "set"
    COST = "cost"
    ASPECT = "aspect"
    TYPE = "type"
    TRAIT = "trait"

    @classmethod
    def from_name(cls, name: "str | SortStrategy | None") -> "SortStrategy":
        """Strategy for a name; unknown or missing names fall back to SET."""
        if isinstance(name, cls):
            return name
        try:
            return cls(str(name).strip().lower())
        except ValueError:
            logger.warning("Sort strategy %r not found; using %r", name, cls.SET.value)
            return cls.SET


class GroupingStrategy:
    """
    Base strategy: alphabetical groups, canonical identifier order inside.

    The IdentifierOrder passed to each call is shared across one grouping
    pass so unknown sets keep the order they were first seen in.
    """

    def group_key(self, card: ResolvedCard) -> str:
        raise NotImplementedError

    def order_groups(self, keys: Iterable[str], order: IdentifierOrder) -> list[str]:
        return sorted(keys, key=_alphabetical)

    def order_within(self, cards: Sequence[ResolvedCard], order: IdentifierOrder) -> list[ResolvedCard]:
        return sorted(cards, key=lambda card: order.key(card.identifier))


class SetGrouping(GroupingStrategy):
    def group_key(self, card: ResolvedCard) -> str:
        return card.identifier.set_code

    def order_groups(self, keys: Iterable[str], order: IdentifierOrder) -> list[str]:
        return sorted(keys, key=order.set_rank)

    def order_within(self, cards: Sequence[ResolvedCard], order: IdentifierOrder) -> list[ResolvedCard]:
        return sorted(cards, key=lambda card: card.identifier.number)


class CostGrouping(GroupingStrategy):
    """
    Groups by printed cost.

    Order: numeric costs ascending, then "X", then any other non-numeric
    cost alphabetically, then "Unknown" (no cost printed).
    """

    def group_key(self, card: ResolvedCard) -> str:
        cost = card.metadata.cost
        if cost is None or not str(cost).strip():
            return f"{COST_PREFIX}{UNKNOWN_COST}"
        return f"{COST_PREFIX}{str(cost).strip()}"

    def order_groups(self, keys: Iterable[str], order: IdentifierOrder) -> list[str]:
        return sorted(keys, key=self._cost_rank)

    @staticmethod
    def _cost_rank(key: str) -> tuple[int, float, str, str]:
        value = key[len(COST_PREFIX) :] if key.startswith(COST_PREFIX) else key
        if _NUMERIC_COST.match(value):
            return (0, float(value), "", "")
        if value.upper() == VARIABLE_COST:
            return (1, 0.0, "", "")
        if value == UNKNOWN_COST:
            return (3, 0.0, "", "")
        return (2, 0.0, *_alphabetical(value))


class AspectGrouping(GroupingStrategy):
    def group_key(self, card: ResolvedCard) -> str:
        aspects = card.metadata.aspects
        return aspects[0] if aspects else UNKNOWN_ASPECT

    def order_groups(self, keys: Iterable[str], order: IdentifierOrder) -> list[str]:
        return sorted(keys, key=lambda key: (key == UNKNOWN_ASPECT, *_alphabetical(key)))


class TypeGrouping(GroupingStrategy):
    """Groups by card type, splitting units by arena."""

    def group_key(self, card: ResolvedCard) -> str:
        card_type = card.metadata.type or UNKNOWN_TYPE
        if card_type == "Unit":
            return SPACE_UNIT if "Space" in card.metadata.arenas else GROUND_UNIT
        return card_type

    def order_groups(self, keys: Iterable[str], order: IdentifierOrder) -> list[str]:
        return sorted(keys, key=self._type_rank)

    @staticmethod
    def _type_rank(key: str) -> tuple[int, int, str, str]:
        if key == UNKNOWN_TYPE:
            return (2, 0, "", "")
        if key in PREFERRED_TYPE_ORDER:
            return (0, PREFERRED_TYPE_ORDER.index(key), "", "")
        return (1, 0, *_alphabetical(key))


class TraitGrouping(GroupingStrategy):
    def group_key(self, card: ResolvedCard) -> str:
        traits = card.metadata.traits
        return traits[0] if traits else NO_TRAITS

    def order_groups(self, keys: Iterable[str], order: IdentifierOrder) -> list[str]:
        return sorted(keys, key=lambda key: (key == NO_TRAITS, *_alphabetical(key)))


STRATEGIES: dict[SortStrategy, GroupingStrategy] = {
    SortStrategy.SET: SetGrouping(),
    SortStrategy.COST: CostGrouping(),
    SortStrategy.ASPECT: AspectGrouping(),
    SortStrategy.TYPE: TypeGrouping(),
    SortStrategy.TRAIT: TraitGrouping(),
}


@dataclass(frozen=True, slots=True)
class RenderedCard:
    """A card together with its rendered tile markup."""

    card: ResolvedCard
    markup: str


@dataclass
class CardGroup:
    """One display group: its key and its cards in display order."""

    key: str
    cards: list[RenderedCard] = field(default_factory=list)

    @property
    def title(self) -> str:
        return self.key

    @property
    def total_main(self) -> int:
        return sum(rendered.card.main for rendered in self.cards)

    @property
    def total_sideboard(self) -> int:
        return sum(rendered.card.sideboard for rendered in self.cards)


class GroupingEngine:
    """
    Groups and renders resolved cards with a chosen strategy.

    Args:
        set_order: Canonical set order for set grouping and identifier order
        render_card: Tile renderer called once per card
    """

    def __init__(
        self,
        set_order: Sequence[str] | None = None,
        render_card: RenderCard | None = None,
    ) -> None:
        self._set_order = list(settings.set_order if set_order is None else set_order)
        self._render_card = render_card or default_render_card

    def group(
        self,
        sort_type: "str | SortStrategy | None",
        cards: Sequence[ResolvedCard],
    ) -> list[tuple[str, list[ResolvedCard]]]:
        """
        Partition and order cards.

        Args:
            sort_type: Strategy name; unknown names fall back to "set"
            cards: Resolved cards in input order

        Returns:
            (group key, cards) pairs in display order
        """
        strategy = STRATEGIES[SortStrategy.from_name(sort_type)]

        order = IdentifierOrder(self._set_order)
        order.observe(card.identifier for card in cards)

        groups: dict[str, list[ResolvedCard]] = {}
        for card in cards:
            groups.setdefault(strategy.group_key(card), []).append(card)

        return [
            (key, strategy.order_within(groups[key], order))
            for key in strategy.order_groups(groups, order)
        ]

    def render(
        self,
        sort_type: "str | SortStrategy | None",
        cards: Sequence[ResolvedCard],
    ) -> list[CardGroup]:
        """Group cards, then render every card's tile in display order."""
        return [
            CardGroup(
                key=key,
                cards=[
                    RenderedCard(
                        card=card,
                        markup=self._render_card(card.identifier, card.metadata, card.main, card.sideboard),
                    )
                    for card in group_cards
                ],
            )
            for key, group_cards in self.group(sort_type, cards)
        ]
