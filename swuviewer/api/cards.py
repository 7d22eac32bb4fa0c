"""
Card catalog API endpoints.

Card lookup, catalog status, and cache clearing.
"""

from typing import Annotated

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from swuviewer.api.dependencies import get_viewer
from swuviewer.models.card import CardMetadata
from swuviewer.services.deck_viewer import DeckViewer

router = APIRouter(tags=["cards"])


class CardResponse(BaseModel):
    """Card metadata as served to clients."""

    id: str
    set_code: str
    number: int
    name: str
    type: str
    aspects: list[str] = Field(default_factory=list)
    traits: list[str] = Field(default_factory=list)
    arenas: list[str] = Field(default_factory=list)
    cost: str | None = None
    power: str | None = None
    hp: str | None = None
    front_art: str | None = None
    back_art: str | None = None
    double_sided: bool = False
    subtitle: str | None = None
    rarity: str | None = None
    unique: bool = False
    placeholder: bool = False

    @classmethod
    def from_metadata(cls, card: CardMetadata) -> "CardResponse":
        return cls(
            id=card.identifier.canonical,
            set_code=card.set_code,
            number=card.number,
            name=card.name,
            type=card.type,
            aspects=list(card.aspects),
            traits=list(card.traits),
            arenas=list(card.arenas),
            cost=card.cost,
            power=card.power,
            hp=card.hp,
            front_art=card.front_art,
            back_art=card.back_art,
            double_sided=card.double_sided,
            subtitle=card.subtitle,
            rarity=card.rarity,
            unique=card.unique,
            placeholder=card.is_placeholder,
        )


class SetsResponse(BaseModel):
    """Configured sets in canonical order and which are cached."""

    sets: list[str]
    loaded: list[str]


class ClearCacheResponse(BaseModel):
    """Response for cache clearing."""

    cleared: bool
    recent_decks_cleared: int


@router.get("/sets", response_model=SetsResponse)
async def list_sets(
    viewer: Annotated[DeckViewer, Depends(get_viewer)],
) -> SetsResponse:
    """List configured sets in canonical order."""
    catalog = viewer.catalog
    return SetsResponse(
        sets=catalog.set_codes,
        loaded=[code for code in catalog.set_codes if catalog.is_loaded(code)],
    )


@router.get("/cards/{card_id}", response_model=CardResponse)
async def get_card(
    card_id: str,
    viewer: Annotated[DeckViewer, Depends(get_viewer)],
) -> CardResponse:
    """
    Look up a card by identifier (e.g. SOR_010).

    Never 404s: unknown cards come back as a placeholder with type "Unknown".
    """
    card = await viewer.catalog.resolve(card_id)
    return CardResponse.from_metadata(card)


@router.delete("/cache", response_model=ClearCacheResponse)
async def clear_cache(
    viewer: Annotated[DeckViewer, Depends(get_viewer)],
) -> ClearCacheResponse:
    """Drop cached card data and the recent deck list."""
    recent_count = len(viewer.recent)
    viewer.catalog.clear()
    viewer.recent.clear()
    return ClearCacheResponse(cleared=True, recent_decks_cleared=recent_count)
