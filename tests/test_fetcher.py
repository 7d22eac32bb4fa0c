"""Tests for JSON fetching with proxy fallback."""

import json
from pathlib import Path

import httpx
import pytest
import respx

from swuviewer.services.fetcher import (
    FetchError,
    JsonFetcher,
    build_proxy_url,
    is_remote,
    load_json_file,
    with_cache_buster,
)

DECK_URL = "https://api.test/deck/abc"
RAW_PROXY = "https://proxy.test/raw?url="
WRAPPING_PROXY = "https://proxy.test/get?url="


class TestProxyUrls:
    def test_direct(self) -> None:
        assert build_proxy_url(None, DECK_URL) == DECK_URL

    def test_allorigins_encodes_target(self) -> None:
        url = build_proxy_url("https://api.allorigins.win/raw?url=", DECK_URL)

        assert url == "https://api.allorigins.win/raw?url=https%3A%2F%2Fapi.test%2Fdeck%2Fabc"

    def test_path_style_appends_target(self) -> None:
        assert build_proxy_url("https://thingproxy.freeboard.io/fetch/", DECK_URL) == (
            "https://thingproxy.freeboard.io/fetch/https://api.test/deck/abc"
        )

    def test_cache_buster(self) -> None:
        assert "?_t=" in with_cache_buster(DECK_URL)
        assert "&_t=" in with_cache_buster(f"{DECK_URL}?pretty=true")

    def test_is_remote(self) -> None:
        assert is_remote(DECK_URL)
        assert not is_remote("data/sor.json")
        assert not is_remote("/var/lib/swu/sor.json")


class TestRoutes:
    async def test_direct_first(self) -> None:
        async with httpx.AsyncClient() as client:
            fetcher = JsonFetcher(client, proxies=[RAW_PROXY], prefer_direct=True)

            assert fetcher.routes() == [None, RAW_PROXY]

    async def test_proxies_only(self) -> None:
        async with httpx.AsyncClient() as client:
            fetcher = JsonFetcher(client, proxies=[RAW_PROXY], prefer_direct=False)

            assert fetcher.routes() == [RAW_PROXY]

    async def test_no_routes_falls_back_to_direct(self) -> None:
        async with httpx.AsyncClient() as client:
            fetcher = JsonFetcher(client, proxies=[], prefer_direct=False)

            assert fetcher.routes() == [None]


class TestFetchJson:
    @pytest.mark.asyncio
    @respx.mock
    async def test_direct_fetch(self) -> None:
        respx.get(host="api.test", path="/deck/abc").mock(
            return_value=httpx.Response(200, json={"deck": []})
        )

        async with httpx.AsyncClient() as client:
            result = await JsonFetcher(client, proxies=[], retries=1, backoff=0).fetch_json(DECK_URL)

        assert result == {"deck": []}

    @pytest.mark.asyncio
    @respx.mock
    async def test_bypass_cache(self) -> None:
        route = respx.get(host="api.test", path="/deck/abc").mock(
            return_value=httpx.Response(200, json={"deck": []})
        )

        async with httpx.AsyncClient() as client:
            fetcher = JsonFetcher(client, proxies=[], retries=1, backoff=0)
            await fetcher.fetch_json(DECK_URL, bypass_cache=True)

        request = route.calls.last.request
        assert "_t" in request.url.params
        assert request.headers["Cache-Control"] == "no-cache"

    @pytest.mark.asyncio
    @respx.mock
    async def test_retries_then_falls_back_to_proxy(self) -> None:
        direct = respx.get(host="api.test", path="/deck/abc").mock(return_value=httpx.Response(500))
        proxy = respx.get(host="proxy.test", path="/raw").mock(
            return_value=httpx.Response(200, json={"deck": [1]})
        )

        async with httpx.AsyncClient() as client:
            fetcher = JsonFetcher(client, proxies=[RAW_PROXY], retries=2, backoff=0)
            result = await fetcher.fetch_json(DECK_URL)

        assert result == {"deck": [1]}
        assert direct.call_count == 2
        assert proxy.call_count == 1
        assert proxy.calls.last.request.url.params["url"] == DECK_URL

    @pytest.mark.asyncio
    @respx.mock
    async def test_unwraps_wrapping_proxy(self) -> None:
        respx.get(host="api.test", path="/deck/abc").mock(side_effect=httpx.ConnectError("refused"))
        respx.get(host="proxy.test", path="/get").mock(
            return_value=httpx.Response(200, json={"contents": json.dumps({"deck": [2]}), "status": {}})
        )

        async with httpx.AsyncClient() as client:
            fetcher = JsonFetcher(client, proxies=[WRAPPING_PROXY], retries=1, backoff=0)
            result = await fetcher.fetch_json(DECK_URL)

        assert result == {"deck": [2]}

    @pytest.mark.asyncio
    @respx.mock
    async def test_empty_wrapper_is_a_failure(self) -> None:
        respx.get(host="proxy.test", path="/get").mock(
            return_value=httpx.Response(200, json={"contents": None})
        )

        async with httpx.AsyncClient() as client:
            fetcher = JsonFetcher(client, proxies=[WRAPPING_PROXY], retries=1, backoff=0, prefer_direct=False)

            with pytest.raises(FetchError, match="All attempts failed"):
                await fetcher.fetch_json(DECK_URL)

    @pytest.mark.asyncio
    @respx.mock
    async def test_invalid_json_is_retried(self) -> None:
        route = respx.get(host="api.test", path="/deck/abc")
        route.side_effect = [
            httpx.Response(200, text="<html>busy</html>"),
            httpx.Response(200, json={"deck": [3]}),
        ]

        async with httpx.AsyncClient() as client:
            fetcher = JsonFetcher(client, proxies=[], retries=2, backoff=0)
            result = await fetcher.fetch_json(DECK_URL)

        assert result == {"deck": [3]}
        assert route.call_count == 2

    @pytest.mark.asyncio
    @respx.mock
    async def test_all_routes_fail(self) -> None:
        respx.get(host="api.test", path="/deck/abc").mock(return_value=httpx.Response(404))
        respx.get(host="proxy.test", path="/raw").mock(return_value=httpx.Response(502))

        async with httpx.AsyncClient() as client:
            fetcher = JsonFetcher(client, proxies=[RAW_PROXY], retries=2, backoff=0)

            with pytest.raises(FetchError, match=f"All attempts failed for {DECK_URL}"):
                await fetcher.fetch_json(DECK_URL)


class TestLocalFiles:
    async def test_reads_local_path(self, tmp_path: Path) -> None:
        path = tmp_path / "sor.json"
        path.write_text(json.dumps({"data": [{"Number": "001"}]}), encoding="utf-8")

        async with httpx.AsyncClient() as client:
            result = await JsonFetcher(client).fetch_json(str(path))

        assert result == {"data": [{"Number": "001"}]}

    async def test_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FetchError, match="File not found"):
            await load_json_file(tmp_path / "missing.json")

    async def test_invalid_json_file(self, tmp_path: Path) -> None:
        path = tmp_path / "broken.json"
        path.write_text("{not json", encoding="utf-8")

        with pytest.raises(FetchError, match="Failed to read"):
            await load_json_file(path)
