"""
SWU Deck Viewer services.

Card catalog, deck loading, grouping, comparison, and rendering.
"""

from swuviewer.services.card_catalog import CardCatalog, CatalogEntry, SetLoadError
from swuviewer.services.card_renderer import (
    render_card,
    render_comparison_card,
    render_deck_info,
)
from swuviewer.services.deck_aggregator import aggregate, aggregate_deck
from swuviewer.services.deck_comparator import classify, compare
from swuviewer.services.deck_source import DeckLoadError, DeckSource, extract_deck_id
from swuviewer.services.deck_viewer import (
    ComparisonSection,
    ComparisonView,
    DeckView,
    DeckViewer,
    RenderedComparison,
)
from swuviewer.services.fetcher import FetchError, JsonFetcher, load_json_file
from swuviewer.services.grouping import (
    CardGroup,
    GroupingEngine,
    RenderedCard,
    SortStrategy,
)
from swuviewer.services.recent_decks import RecentDecks

__all__ = [
    "CardCatalog",
    "CardGroup",
    "CatalogEntry",
    "ComparisonSection",
    "ComparisonView",
    "DeckLoadError",
    "DeckSource",
    "DeckView",
    "DeckViewer",
    "FetchError",
    "GroupingEngine",
    "JsonFetcher",
    "RecentDecks",
    "RenderedCard",
    "RenderedComparison",
    "SetLoadError",
    "SortStrategy",
    "aggregate",
    "aggregate_deck",
    "classify",
    "compare",
    "extract_deck_id",
    "load_json_file",
    "render_card",
    "render_comparison_card",
    "render_deck_info",
]
