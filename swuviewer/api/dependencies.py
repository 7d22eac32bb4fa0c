"""
Shared service construction and FastAPI dependencies.

One card catalog and one deck viewer live for the whole application; the
lifespan handler builds them and stores the viewer on app.state.
"""

import httpx
from fastapi import Request

from swuviewer.config import settings
from swuviewer.services.card_catalog import CardCatalog
from swuviewer.services.deck_source import DeckSource
from swuviewer.services.deck_viewer import DeckViewer
from swuviewer.services.fetcher import JsonFetcher
from swuviewer.services.recent_decks import RecentDecks


def create_http_client() -> httpx.AsyncClient:
    """HTTP client shared by every outbound request."""
    return httpx.AsyncClient(timeout=settings.request_timeout, follow_redirects=True)


def build_viewer(client: httpx.AsyncClient) -> DeckViewer:
    """Wire the catalog, deck source, and recent list around one HTTP client."""
    fetcher = JsonFetcher(client)
    catalog = CardCatalog(
        fetcher.fetch_json,
        set_codes=settings.set_order,
        data_url=settings.card_data_url,
    )
    deck_source = DeckSource(fetcher.fetch_json)
    return DeckViewer(
        catalog,
        deck_source,
        recent=RecentDecks(settings.max_recent_decks),
        set_order=settings.set_order,
    )


def get_viewer(request: Request) -> DeckViewer:
    """
    Dependency that provides the application's deck viewer.

    Usage in FastAPI:
        @router.get("/decks/{deck_id}")
        async def view(viewer: DeckViewer = Depends(get_viewer)):
            ...
    """
    viewer: DeckViewer = request.app.state.viewer
    return viewer
