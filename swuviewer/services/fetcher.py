"""
JSON fetching with retries and CORS proxy fallback.

The deck API does not send CORS headers, so browser deployments reach it
through public proxies. The same chain works server-side: try a direct
fetch first, then each proxy in order, retrying each route with linear
backoff before moving to the next.

Locations without an http(s) scheme are read from the local filesystem,
which is how downloaded set files are served.
"""

import asyncio
import json
import logging
import time
from collections.abc import Sequence
from pathlib import Path
from typing import Any
from urllib.parse import quote, urlsplit

import httpx

from swuviewer.config import settings

logger = logging.getLogger(__name__)

USER_AGENT = "SWUDeckViewer/1.0"

# AllOrigins /get wraps the target body as {"contents": "<text>", "status": {...}}
_WRAPPED_PROXY_MARKER = "/get?url="


class FetchError(Exception):
    """Raised when a JSON document cannot be fetched from any route."""

    pass


def is_remote(location: str) -> bool:
    """True if location is an http(s) URL rather than a filesystem path."""
    return urlsplit(location).scheme in ("http", "https")


def build_proxy_url(proxy: str | None, target: str) -> str:
    """
    Build the URL to request for a target through a proxy.

    Args:
        proxy: Proxy prefix, or None for a direct fetch
        target: URL being fetched

    Returns:
        AllOrigins proxies get the target URL-encoded; path-style proxies
        ("/fetch/" or trailing slash) get it appended verbatim.
    """
    if not proxy:
        return target
    if "allorigins" in proxy:
        return f"{proxy}{quote(target, safe='')}"
    if proxy.endswith("/"):
        return f"{proxy}{target}"
    return f"{proxy}{quote(target, safe='')}"


def with_cache_buster(url: str) -> str:
    """Append a timestamp parameter so intermediaries cannot serve a stale copy."""
    separator = "&" if "?" in url else "?"
    return f"{url}{separator}_t={int(time.time() * 1000)}"


def _read_json(path: Path) -> Any:
    with open(path, encoding="utf-8") as f:
        return json.load(f)


async def load_json_file(path: Path | str) -> Any:
    """
    Read a JSON document from disk without blocking the event loop.

    Raises:
        FetchError: If the file is missing, unreadable, or not JSON
    """
    path = Path(path)
    try:
        return await asyncio.to_thread(_read_json, path)
    except FileNotFoundError as e:
        raise FetchError(f"File not found: {path}") from e
    except (OSError, ValueError) as e:
        raise FetchError(f"Failed to read {path}: {e}") from e


class JsonFetcher:
    """
    Fetches JSON documents over HTTP with a direct-then-proxy fallback chain.

    Args:
        client: Shared async HTTP client
        proxies: Proxy prefixes tried in order after the direct route
        retries: Attempts per route
        backoff: Base delay in seconds; attempt n waits backoff * n
        prefer_direct: Try a direct fetch before any proxy
    """

    def __init__(
        self,
        client: httpx.AsyncClient,
        proxies: Sequence[str] | None = None,
        retries: int | None = None,
        backoff: float | None = None,
        prefer_direct: bool | None = None,
    ) -> None:
        self._client = client
        self._proxies = list(settings.cors_proxies if proxies is None else proxies)
        self._retries = max(1, settings.fetch_retries if retries is None else retries)
        self._backoff = settings.fetch_backoff_seconds if backoff is None else backoff
        self._prefer_direct = settings.prefer_direct_fetch if prefer_direct is None else prefer_direct

    def routes(self) -> list[str | None]:
        """Routes in the order they are tried; None is the direct route."""
        routes: list[str | None] = [None] if self._prefer_direct else []
        routes.extend(self._proxies)
        return routes or [None]

    async def fetch_json(self, url: str, bypass_cache: bool = False) -> Any:
        """
        Fetch and decode a JSON document.

        Args:
            url: http(s) URL, or a filesystem path for local data
            bypass_cache: Add a cache-busting parameter to the request

        Returns:
            Decoded JSON value

        Raises:
            FetchError: If every route and attempt failed
        """
        if not is_remote(url):
            return await load_json_file(url)

        target = with_cache_buster(url) if bypass_cache else url
        last_error: Exception | None = None

        for proxy in self.routes():
            route_name = proxy or "direct"
            for attempt in range(self._retries):
                try:
                    return await self._fetch_once(proxy, target, bypass_cache)
                except (httpx.HTTPError, ValueError, FetchError) as e:
                    last_error = e
                    logger.warning(
                        "Fetch attempt %d/%d via %s failed for %s: %s",
                        attempt + 1,
                        self._retries,
                        route_name,
                        url,
                        e,
                    )
                    if attempt < self._retries - 1 and self._backoff > 0:
                        await asyncio.sleep(self._backoff * (attempt + 1))

        raise FetchError(f"All attempts failed for {url}: {last_error}")

    async def _fetch_once(self, proxy: str | None, target: str, bypass_cache: bool) -> Any:
        headers = {"Accept": "application/json", "User-Agent": USER_AGENT}
        if bypass_cache:
            headers["Cache-Control"] = "no-cache"

        response = await self._client.get(build_proxy_url(proxy, target), headers=headers)
        response.raise_for_status()

        if proxy and _WRAPPED_PROXY_MARKER in proxy:
            wrapper = response.json()
            contents = wrapper.get("contents") if isinstance(wrapper, dict) else None
            if not isinstance(contents, str) or not contents:
                raise FetchError("Proxy returned an unexpected wrapper")
            return json.loads(contents)

        # Raises json.JSONDecodeError (a ValueError) for non-JSON bodies
        return response.json()
