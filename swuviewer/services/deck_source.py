"""
Deck loading from the SWUDB deck API.

Deck payload format:
    {
        "metadata": {"name": "..."},
        "leader": {"id": "SOR_010"},
        "secondleader": {"id": "..."},      (optional)
        "base": {"id": "SOR_026"},
        "deck": [{"id": "SOR_046", "count": 3}, ...],
        "sideboard": [{"id": "...", "count": 1}, ...]
    }

On failure the API answers {"error": "..."}.
"""

import logging
import re
from collections.abc import Awaitable, Callable
from typing import Any
from urllib.parse import urlsplit

from swuviewer.config import settings
from swuviewer.models.deck import Deck

logger = logging.getLogger(__name__)

DEFAULT_DECK_NAME = "Unnamed Deck"

# Inputs that are already a bare deck id
_DECK_ID_PATTERN = re.compile(r"^[A-Za-z0-9_-]+$")

FetchDeckJson = Callable[..., Awaitable[Any]]


class DeckLoadError(Exception):
    """Raised when a deck cannot be loaded; the message is user-presentable."""

    def __init__(self, deck_id: str | None, message: str) -> None:
        self.deck_id = deck_id
        self.message = message
        super().__init__(message)


def extract_deck_id(text: str | None) -> str | None:
    """
    Extract a deck id from user input.

    Accepts:
        - a bare id: "abc123"
        - a deck URL: "https://swudb.com/deck/abc123"
        - URL-like text: "swudb.com/deck/abc123/"

    Returns:
        Last non-empty path segment, or None if nothing usable was given
    """
    if not text or not text.strip():
        return None

    text = text.strip()
    if _DECK_ID_PATTERN.match(text):
        return text

    parts = urlsplit(text)
    path = parts.path if parts.scheme and parts.netloc else text.split("?", 1)[0].split("#", 1)[0]
    segments = [segment for segment in path.split("/") if segment]
    return segments[-1] if segments else None


def _card_id(value: Any) -> str | None:
    if isinstance(value, dict):
        card_id = value.get("id")
        return str(card_id) if card_id else None
    return None


def _rows(value: Any) -> list[dict[str, Any]]:
    if not isinstance(value, list):
        return []
    return [row for row in value if isinstance(row, dict)]


def parse_deck_payload(deck_id: str, payload: Any) -> Deck:
    """
    Validate a deck API payload and build a Deck.

    Raises:
        DeckLoadError: If the payload is empty, reports an error, or has no deck list
            (an empty deck list is valid)
    """
    if not payload:
        raise DeckLoadError(deck_id, "Failed to load deck data - Server returned empty response")

    if not isinstance(payload, dict):
        raise DeckLoadError(deck_id, "Invalid deck data format received from server")

    if payload.get("error"):
        raise DeckLoadError(deck_id, f"API Error: {payload['error']}")

    if not isinstance(payload.get("deck"), list):
        raise DeckLoadError(deck_id, "Invalid deck data format received from server")

    metadata = payload.get("metadata")
    name = metadata.get("name") if isinstance(metadata, dict) else None

    return Deck(
        deck_id=deck_id,
        name=str(name) if name else DEFAULT_DECK_NAME,
        main=_rows(payload.get("deck")),
        sideboard=_rows(payload.get("sideboard")),
        leader=_card_id(payload.get("leader")),
        second_leader=_card_id(payload.get("secondleader")),
        base=_card_id(payload.get("base")),
    )


class DeckSource:
    """
    Loads decks by id through a JSON fetch capability.

    Args:
        fetch_json: Coroutine function (url, bypass_cache=...) -> JSON
        deck_api_url: Base URL of the deck JSON endpoint
        deck_site_url: Base URL of human-facing deck pages
    """

    def __init__(
        self,
        fetch_json: FetchDeckJson,
        deck_api_url: str | None = None,
        deck_site_url: str | None = None,
    ) -> None:
        self._fetch_json = fetch_json
        self._deck_api_url = (deck_api_url or settings.deck_api_url).rstrip("/")
        self._deck_site_url = (deck_site_url or settings.deck_site_url).rstrip("/")

    def api_url(self, deck_id: str) -> str:
        return f"{self._deck_api_url}/{deck_id}"

    def site_url(self, deck_id: str) -> str:
        return f"{self._deck_site_url}/{deck_id}"

    async def load(self, deck_id: str | None, bypass_cache: bool = False) -> Deck:
        """
        Fetch and validate a deck.

        Args:
            deck_id: Deck id or deck URL
            bypass_cache: Ask intermediaries for a fresh copy

        Returns:
            Validated Deck

        Raises:
            DeckLoadError: If the id is missing, the fetch fails, or the
                payload is not a usable deck
        """
        resolved_id = extract_deck_id(deck_id)
        if not resolved_id:
            raise DeckLoadError(deck_id, "No deck URL or ID provided")

        logger.info("Loading deck %s%s", resolved_id, " (bypass cache)" if bypass_cache else "")

        try:
            payload = await self._fetch_json(self.api_url(resolved_id), bypass_cache=bypass_cache)
        except Exception as e:
            logger.error("Error loading deck %s: %s", resolved_id, e)
            raise DeckLoadError(resolved_id, f"Failed to load deck {resolved_id}: {e}") from e

        return parse_deck_payload(resolved_id, payload)
