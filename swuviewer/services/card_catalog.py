"""
Card catalog service.

Loads per-set card data lazily, indexes it by card number, and caches it
for the life of the catalog instance.

INVARIANTS:
1. At most one outstanding fetch per set at any time
2. Failed loads are never cached; the next request retries from scratch
3. resolve() never raises for data problems; it falls back to a placeholder
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Iterable, Sequence
from typing import Any

from swuviewer.config import settings
from swuviewer.models.card import CardIdentifier, CardMetadata, MalformedIdentifierError

logger = logging.getLogger(__name__)

CatalogEntry = dict[int, CardMetadata]
FetchJson = Callable[[str], Awaitable[Any]]


class SetLoadError(Exception):
    """Raised when a set's card file cannot be fetched or has the wrong shape."""

    def __init__(self, set_code: str, message: str) -> None:
        self.set_code = set_code
        super().__init__(f"Failed to load set {set_code}: {message}")


def build_catalog_entry(set_code: str, payload: Any) -> CatalogEntry:
    """
    Index a set file payload by card number.

    Args:
        set_code: Set the payload belongs to
        payload: Decoded set file, {"data": [raw card, ...]}

    Returns:
        Dict mapping card number to metadata

    Raises:
        SetLoadError: If the payload has no "data" list
    """
    cards = payload.get("data") if isinstance(payload, dict) else None
    if not isinstance(cards, list):
        raise SetLoadError(set_code, "expected a list in the 'data' property")

    entry: CatalogEntry = {}
    for raw in cards:
        if not isinstance(raw, dict) or raw.get("Number") in (None, ""):
            continue
        try:
            card = CardMetadata.from_raw(set_code, raw)
        except (KeyError, ValueError) as e:
            logger.debug("Skipping %s row with bad number %r: %s", set_code, raw.get("Number"), e)
            continue
        entry[card.number] = card

    return entry


class CardCatalog:
    """
    In-memory catalog of card metadata, loaded one set at a time.

    Lifecycle: construct with a fetch capability, optionally preload_all(),
    resolve() as needed, clear() to drop everything.

    Args:
        fetch_json: Coroutine function returning decoded JSON for a location
        set_codes: Sets preload_all() loads by default
        data_url: Base URL or directory holding "<set>.json" files
    """

    def __init__(
        self,
        fetch_json: FetchJson,
        set_codes: Sequence[str] | None = None,
        data_url: str | None = None,
    ) -> None:
        self._fetch_json = fetch_json
        self._set_codes = list(settings.set_order if set_codes is None else set_codes)
        self._data_url = (settings.card_data_url if data_url is None else data_url).rstrip("/")
        self._sets: dict[str, CatalogEntry] = {}
        self._pending: dict[str, asyncio.Task[CatalogEntry]] = {}

    @property
    def set_codes(self) -> list[str]:
        return list(self._set_codes)

    @property
    def loaded_sets(self) -> list[str]:
        return list(self._sets)

    def is_loaded(self, set_code: str) -> bool:
        return set_code in self._sets

    def set_url(self, set_code: str) -> str:
        """Location of a set's card file; files are keyed by lower-cased set code."""
        return f"{self._data_url}/{set_code.lower()}.json"

    async def ensure_set_loaded(self, set_code: str) -> CatalogEntry:
        """
        Return a set's catalog entry, loading it if needed.

        Concurrent callers for a set that is already loading share the
        in-flight load instead of issuing another fetch.

        Raises:
            SetLoadError: If the load fails (for every caller awaiting it)
        """
        cached = self._sets.get(set_code)
        if cached is not None:
            return cached

        task = self._pending.get(set_code)
        if task is None:
            task = asyncio.ensure_future(self._load(set_code))
            self._pending[set_code] = task
            task.add_done_callback(lambda done, code=set_code: self._settle(code, done))

        # A cancelled waiter must not cancel the load other callers share
        return await asyncio.shield(task)

    def _settle(self, set_code: str, task: asyncio.Task[CatalogEntry]) -> None:
        if self._pending.get(set_code) is task:
            del self._pending[set_code]
        if not task.cancelled():
            # Failures are reported to awaiting callers; mark retrieved for unawaited loads
            task.exception()

    async def _load(self, set_code: str) -> CatalogEntry:
        url = self.set_url(set_code)
        logger.info("Loading set %s from %s", set_code, url)

        try:
            payload = await self._fetch_json(url)
        except SetLoadError:
            raise
        except Exception as e:
            logger.error("Error loading set %s: %s", set_code, e)
            raise SetLoadError(set_code, str(e)) from e

        entry = build_catalog_entry(set_code, payload)
        logger.info("Loaded set %s with %d cards", set_code, len(entry))

        # A load that outlived clear() must not repopulate the cache
        if self._pending.get(set_code) is asyncio.current_task():
            self._sets[set_code] = entry
        return entry

    async def preload_all(self, set_codes: Iterable[str] | None = None) -> dict[str, SetLoadError]:
        """
        Load every set concurrently.

        Failures are logged and returned, never raised: a catalog missing
        some sets is still useful for the rest.

        Returns:
            Dict mapping set code to its load error, empty if all loaded
        """
        codes = list(self._set_codes if set_codes is None else set_codes)
        results = await asyncio.gather(
            *(self.ensure_set_loaded(code) for code in codes),
            return_exceptions=True,
        )

        failures: dict[str, SetLoadError] = {}
        for code, result in zip(codes, results, strict=True):
            if isinstance(result, SetLoadError):
                failures[code] = result
            elif isinstance(result, BaseException):
                raise result

        if failures:
            logger.warning(
                "Preloaded %d/%d sets; failed: %s",
                len(codes) - len(failures),
                len(codes),
                sorted(failures),
            )
        else:
            logger.info("All %d sets preloaded", len(codes))
        return failures

    async def resolve(self, identifier: CardIdentifier | str) -> CardMetadata:
        """
        Look up a card's metadata.

        Args:
            identifier: Parsed identifier or raw "SET_NUMBER" string

        Returns:
            Catalog metadata, or a placeholder (type "Unknown") when the id
            is malformed, its set fails to load, or the number is absent.
        """
        if isinstance(identifier, str):
            try:
                identifier = CardIdentifier.parse(identifier)
            except MalformedIdentifierError as e:
                logger.warning("%s", e)
                set_code, _, _ = e.raw.partition("_")
                return CardMetadata.placeholder(set_code, 0, e.raw)

        try:
            entry = await self.ensure_set_loaded(identifier.set_code)
        except SetLoadError as e:
            logger.warning("Using placeholder for %s: %s", identifier, e)
            return CardMetadata.placeholder(identifier.set_code, identifier.number, identifier.canonical)

        card = entry.get(identifier.number)
        if card is None:
            logger.warning("Card %s not found in set %s", identifier, identifier.set_code)
            return CardMetadata.placeholder(identifier.set_code, identifier.number, identifier.canonical)
        return card

    async def resolve_many(self, identifiers: Sequence[CardIdentifier | str]) -> list[CardMetadata]:
        """Resolve identifiers concurrently; results follow input order."""
        return list(await asyncio.gather(*(self.resolve(identifier) for identifier in identifiers)))

    def clear(self) -> None:
        """Drop cached sets and in-flight bookkeeping; later lookups refetch."""
        self._sets.clear()
        self._pending.clear()
        logger.info("Card catalog cleared")
