"""
Deck viewing and comparison flows.

Loads decks, resolves every card against the catalog, then groups or
compares them for display. All metadata is resolved before any group is
assembled, so display order depends only on the chosen strategy.
"""

import asyncio
import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

from swuviewer.models.card import CardIdentifier, CardMetadata, MalformedIdentifierError
from swuviewer.models.deck import (
    ComparedCard,
    ComparisonClass,
    Deck,
    DeckCardCount,
    DeckComparison,
    ResolvedCard,
)
from swuviewer.services.card_catalog import CardCatalog
from swuviewer.services.card_renderer import render_card, render_comparison_card
from swuviewer.services.deck_aggregator import aggregate_deck
from swuviewer.services.deck_comparator import compare
from swuviewer.services.deck_source import DeckSource
from swuviewer.services.grouping import CardGroup, GroupingEngine, RenderedCard, SortStrategy
from swuviewer.services.recent_decks import RecentDecks, base_aspect_of, leader_art_url

logger = logging.getLogger(__name__)

# Tile CSS class per comparison bucket
_SECTION_CSS = {
    ComparisonClass.ONLY_IN_A: "deck1-only",
    ComparisonClass.ONLY_IN_B: "deck2-only",
    ComparisonClass.DIFFERENT_COUNTS: "different-count",
    ComparisonClass.SAME: "same-card",
}


@dataclass
class DeckView:
    """A deck ready for display."""

    deck: Deck
    sort: SortStrategy
    cards: list[ResolvedCard]
    groups: list[CardGroup]
    command_zone: list[RenderedCard] = field(default_factory=list)


@dataclass(frozen=True, slots=True)
class RenderedComparison:
    """A compared card with its metadata and rendered tile."""

    card: ComparedCard
    metadata: CardMetadata
    markup: str


@dataclass
class ComparisonSection:
    """One rendered comparison bucket."""

    kind: ComparisonClass
    title: str
    cards: list[RenderedComparison]


@dataclass
class ComparisonView:
    """Two decks compared, with rendered non-empty sections."""

    deck_a: Deck
    deck_b: Deck
    comparison: DeckComparison
    sections: list[ComparisonSection]


class DeckViewer:
    """
    Orchestrates deck loading, card resolution, grouping, and comparison.

    Args:
        catalog: Card catalog used for every metadata lookup
        deck_source: Deck loader
        recent: Recently viewed list, updated on each deck view
        engine: Grouping engine
        set_order: Canonical set order for comparison ordering
    """

    def __init__(
        self,
        catalog: CardCatalog,
        deck_source: DeckSource,
        recent: RecentDecks | None = None,
        engine: GroupingEngine | None = None,
        set_order: Sequence[str] | None = None,
    ) -> None:
        self.catalog = catalog
        self.deck_source = deck_source
        self.recent = recent if recent is not None else RecentDecks()
        self._set_order = list(catalog.set_codes if set_order is None else set_order)
        self.engine = engine or GroupingEngine(set_order=self._set_order)

    async def resolve_cards(self, counts: Sequence[DeckCardCount]) -> list[ResolvedCard]:
        """Resolve metadata for every counted card concurrently, keeping input order."""
        metadata = await self.catalog.resolve_many([count.identifier for count in counts])
        return [
            ResolvedCard(
                identifier=count.identifier,
                metadata=card,
                main=count.main,
                sideboard=count.sideboard,
            )
            for count, card in zip(counts, metadata, strict=True)
        ]

    async def _render_command_zone(self, deck: Deck) -> list[RenderedCard]:
        identifiers: list[CardIdentifier] = []
        for card_id in deck.command_zone():
            try:
                identifiers.append(CardIdentifier.parse(card_id))
            except MalformedIdentifierError as e:
                logger.warning("Skipping leader/base card: %s", e)

        metadata = await self.catalog.resolve_many(identifiers)
        rendered: list[RenderedCard] = []
        for identifier, card in zip(identifiers, metadata, strict=True):
            resolved = ResolvedCard(identifier=identifier, metadata=card, main=1)
            rendered.append(RenderedCard(card=resolved, markup=render_card(identifier, card)))
        return rendered

    def _remember(self, deck: Deck, command_zone: list[RenderedCard]) -> None:
        by_id = {
            rendered.card.identifier.canonical: rendered.card.metadata for rendered in command_zone
        }

        leader_art: str | None = None
        if deck.leader:
            leader = self._lookup(by_id, deck.leader)
            leader_art = (leader.front_art if leader else None) or leader_art_url(deck.leader)

        base = self._lookup(by_id, deck.base) if deck.base else None
        self.recent.add(
            url=self.deck_source.site_url(deck.deck_id),
            name=deck.name,
            leader_art=leader_art,
            base_aspect=base_aspect_of(base),
        )

    @staticmethod
    def _lookup(by_id: dict[str, CardMetadata], card_id: str) -> CardMetadata | None:
        try:
            return by_id.get(CardIdentifier.parse(card_id).canonical)
        except MalformedIdentifierError:
            return None

    async def view_deck(
        self,
        deck_id: str,
        sort_type: str | SortStrategy | None = SortStrategy.SET,
        bypass_cache: bool = False,
    ) -> DeckView:
        """
        Load a deck and group it for display.

        Raises:
            DeckLoadError: If the deck cannot be loaded
        """
        deck = await self.deck_source.load(deck_id, bypass_cache=bypass_cache)
        sort = SortStrategy.from_name(sort_type)

        cards, command_zone = await asyncio.gather(
            self.resolve_cards(aggregate_deck(deck)),
            self._render_command_zone(deck),
        )
        self._remember(deck, command_zone)

        return DeckView(
            deck=deck,
            sort=sort,
            cards=cards,
            groups=self.engine.render(sort, cards),
            command_zone=command_zone,
        )

    def regroup(self, view: DeckView, sort_type: str | SortStrategy | None) -> DeckView:
        """Re-render an already resolved deck with another strategy, without fetching."""
        sort = SortStrategy.from_name(sort_type)
        return DeckView(
            deck=view.deck,
            sort=sort,
            cards=view.cards,
            groups=self.engine.render(sort, view.cards),
            command_zone=view.command_zone,
        )

    async def compare_decks(
        self,
        deck_a_id: str,
        deck_b_id: str,
        bypass_cache: bool = True,
    ) -> ComparisonView:
        """
        Load two decks and compare them card by card.

        Raises:
            DeckLoadError: If either deck cannot be loaded
        """
        deck_a, deck_b = await asyncio.gather(
            self.deck_source.load(deck_a_id, bypass_cache=bypass_cache),
            self.deck_source.load(deck_b_id, bypass_cache=bypass_cache),
        )

        comparison = compare(aggregate_deck(deck_a), aggregate_deck(deck_b), self._set_order)
        titles = {
            ComparisonClass.ONLY_IN_A: f"Only in {deck_a.name}",
            ComparisonClass.ONLY_IN_B: f"Only in {deck_b.name}",
            ComparisonClass.DIFFERENT_COUNTS: "Different Counts",
            ComparisonClass.SAME: "Same Cards",
        }

        buckets = comparison.buckets()
        identifiers = [card.identifier for bucket in buckets.values() for card in bucket]
        resolved = dict(zip(identifiers, await self.catalog.resolve_many(identifiers), strict=True))

        sections: list[ComparisonSection] = []
        for kind, bucket in buckets.items():
            if not bucket:
                continue
            rendered: list[RenderedComparison] = []
            for card in bucket:
                meta = resolved[card.identifier]
                markup = render_comparison_card(
                    card.identifier,
                    meta,
                    a_main=card.a_main,
                    b_main=card.b_main,
                    comparison_type=_SECTION_CSS[kind],
                    deck_a_name=deck_a.name,
                    deck_b_name=deck_b.name,
                    a_sideboard=card.a_sideboard,
                    b_sideboard=card.b_sideboard,
                )
                rendered.append(RenderedComparison(card=card, metadata=meta, markup=markup))
            sections.append(
                ComparisonSection(
                    kind=kind,
                    title=f"{titles[kind]} ({len(bucket)} cards)",
                    cards=rendered,
                )
            )

        return ComparisonView(deck_a=deck_a, deck_b=deck_b, comparison=comparison, sections=sections)
