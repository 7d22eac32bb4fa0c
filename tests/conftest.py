import asyncio
from typing import Any

import pytest

from swuviewer.services.card_catalog import CardCatalog
from swuviewer.services.deck_source import DeckSource
from swuviewer.services.deck_viewer import DeckViewer
from swuviewer.services.fetcher import FetchError
from swuviewer.services.recent_decks import RecentDecks

DATA_URL = "data"
DECK_API_URL = "https://swudb.test/api/getDeckJson"
DECK_SITE_URL = "https://swudb.test/deck"
TEST_SET_ORDER = ["SOR", "SHD", "TWI"]


class FakeFetch:
    """Async stand-in for JsonFetcher.fetch_json serving canned documents.

    Documents that are exceptions are raised instead of returned. When a
    gate is given every call waits on it, which keeps loads in flight.
    """

    def __init__(self, documents: dict[str, Any] | None = None, gate: asyncio.Event | None = None):
        self.documents = dict(documents or {})
        self.gate = gate
        self.calls: list[str] = []
        self.bypass: list[bool] = []

    async def __call__(self, url: str, bypass_cache: bool = False) -> Any:
        self.calls.append(url)
        self.bypass.append(bypass_cache)
        if self.gate is not None:
            await self.gate.wait()
        if url not in self.documents:
            raise FetchError(f"No document at {url}")
        document = self.documents[url]
        if isinstance(document, Exception):
            raise document
        return document

    def count(self, url: str) -> int:
        return self.calls.count(url)


@pytest.fixture
def sor_payload() -> dict:
    """Spark of Rebellion set file, trimmed to a handful of cards."""
    return {
        "total_cards": 9,
        "data": [
            {
                "Set": "SOR",
                "Number": "010",
                "Name": "Darth Vader",
                "Subtitle": "Dark Lord of the Sith",
                "Type": "Leader",
                "Aspects": ["Aggression", "Villainy"],
                "Traits": ["Force", "Imperial", "Sith"],
                "Cost": "7",
                "Power": "5",
                "HP": "8",
                "FrontArt": "https://cdn.swu-db.com/images/cards/SOR/010.png",
                "BackArt": "https://cdn.swu-db.com/images/cards/SOR/010-b.png",
                "DoubleSided": True,
                "Unique": True,
                "Rarity": "Common",
            },
            {
                "Set": "SOR",
                "Number": "026",
                "Name": "Catacombs of Cadera",
                "Type": "Base",
                "Aspects": ["Command"],
                "HP": "30",
                "DoubleSided": False,
            },
            {
                "Set": "SOR",
                "Number": "046",
                "Name": "Alliance X-Wing",
                "Type": "Unit",
                "Aspects": ["Heroism"],
                "Traits": ["Rebel", "Vehicle", "Fighter"],
                "Arenas": ["Space"],
                "Cost": "2",
                "Power": "2",
                "HP": "3",
            },
            {
                "Set": "SOR",
                "Number": "100",
                "Name": "Vanquish",
                "Type": "Event",
                "Aspects": ["Villainy"],
                "Cost": "5",
            },
            {
                "Set": "SOR",
                "Number": "150",
                "Name": "Death Trooper",
                "Type": "Unit",
                "Aspects": ["Aggression", "Villainy"],
                "Traits": ["Imperial", "Trooper"],
                "Arenas": ["Ground"],
                "Cost": "3",
                "Power": "3",
                "HP": "3",
            },
            {
                "Set": "SOR",
                "Number": "200",
                "Name": "Galactic Ambition",
                "Type": "Event",
                "Cost": "X",
            },
            {"Set": "SOR", "Number": "300", "Name": "Mystery Card", "Type": ""},
            {"Set": "SOR", "Number": "", "Name": "No Number"},
            {"Set": "SOR", "Number": "T01", "Name": "Token"},
        ],
    }


@pytest.fixture
def shd_payload() -> dict:
    """Shadows of the Galaxy set file, trimmed."""
    return {
        "total_cards": 2,
        "data": [
            {
                "Set": "SHD",
                "Number": "005",
                "Name": "Bounty Hunter Crew",
                "Type": "Unit",
                "Aspects": ["Cunning"],
                "Traits": ["Underworld", "Bounty Hunter"],
                "Arenas": ["Ground"],
                "Cost": "1",
            },
            {
                "Set": "SHD",
                "Number": "050",
                "Name": "Slave I",
                "Type": "Unit",
                "Aspects": ["Cunning", "Villainy"],
                "Traits": ["Underworld", "Vehicle"],
                "Arenas": ["Space"],
                "Cost": "5",
            },
        ],
    }


@pytest.fixture
def deck_payload() -> dict:
    """Deck API response for a Vader deck."""
    return {
        "metadata": {"name": "Vader Aggro"},
        "leader": {"id": "SOR_010"},
        "base": {"id": "SOR_026"},
        "deck": [
            {"id": "SOR_046", "count": 3},
            {"id": "SOR_150", "count": 3},
            {"id": "SHD_005", "count": 2},
            {"id": "SOR_100", "count": 1},
        ],
        "sideboard": [
            {"id": "SOR_046", "count": 1},
            {"id": "SOR_200", "count": 2},
        ],
    }


@pytest.fixture
def other_deck_payload() -> dict:
    """Deck API response for a second deck sharing some cards."""
    return {
        "metadata": {"name": "Bounty Control"},
        "leader": {"id": "SHD_050"},
        "base": {"id": "SOR_026"},
        "deck": [
            {"id": "SOR_046", "count": 3},
            {"id": "SOR_150", "count": 2},
            {"id": "SHD_050", "count": 3},
        ],
        "sideboard": [{"id": "SOR_046", "count": 1}],
    }


@pytest.fixture
def fake_fetch(sor_payload: dict, shd_payload: dict, deck_payload: dict, other_deck_payload: dict) -> FakeFetch:
    return FakeFetch(
        {
            f"{DATA_URL}/sor.json": sor_payload,
            f"{DATA_URL}/shd.json": shd_payload,
            f"{DECK_API_URL}/vader": deck_payload,
            f"{DECK_API_URL}/bounty": other_deck_payload,
        }
    )


@pytest.fixture
def catalog(fake_fetch: FakeFetch) -> CardCatalog:
    return CardCatalog(fake_fetch, set_codes=TEST_SET_ORDER, data_url=DATA_URL)


@pytest.fixture
def deck_source(fake_fetch: FakeFetch) -> DeckSource:
    return DeckSource(fake_fetch, deck_api_url=DECK_API_URL, deck_site_url=DECK_SITE_URL)


@pytest.fixture
def viewer(catalog: CardCatalog, deck_source: DeckSource) -> DeckViewer:
    return DeckViewer(catalog, deck_source, recent=RecentDecks(max_entries=3), set_order=TEST_SET_ORDER)
