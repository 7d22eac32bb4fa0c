"""
Deck API endpoints.

Provides grouped deck views, two-deck comparison, and the recent deck list.
"""

from datetime import date
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field

from swuviewer.api.dependencies import get_viewer
from swuviewer.services.card_renderer import render_deck_info
from swuviewer.services.deck_source import DeckLoadError
from swuviewer.services.deck_viewer import DeckViewer, RenderedComparison
from swuviewer.services.grouping import RenderedCard, SortStrategy

router = APIRouter(tags=["decks"])


class CardView(BaseModel):
    """A card in a rendered group."""

    id: str
    name: str
    type: str
    main: int
    sideboard: int
    placeholder: bool = False
    html: str

    @classmethod
    def from_rendered(cls, rendered: RenderedCard) -> "CardView":
        card = rendered.card
        return cls(
            id=card.identifier.canonical,
            name=card.metadata.name,
            type=card.metadata.type,
            main=card.main,
            sideboard=card.sideboard,
            placeholder=card.metadata.is_placeholder,
            html=rendered.markup,
        )


class GroupView(BaseModel):
    """A display group with its cards in order."""

    title: str
    main: int
    sideboard: int
    cards: list[CardView] = Field(default_factory=list)


class DeckViewResponse(BaseModel):
    """Response model for a grouped deck."""

    deck_id: str
    name: str
    sort: SortStrategy
    info_html: str
    command_zone: list[CardView] = Field(default_factory=list)
    groups: list[GroupView] = Field(default_factory=list)


class ComparedCardView(BaseModel):
    """A card's counts in both compared decks."""

    id: str
    name: str
    deck1_main: int
    deck1_sideboard: int
    deck2_main: int
    deck2_sideboard: int
    html: str

    @classmethod
    def from_rendered(cls, rendered: RenderedComparison) -> "ComparedCardView":
        card = rendered.card
        return cls(
            id=card.identifier.canonical,
            name=rendered.metadata.name,
            deck1_main=card.a_main,
            deck1_sideboard=card.a_sideboard,
            deck2_main=card.b_main,
            deck2_sideboard=card.b_sideboard,
            html=rendered.markup,
        )


class ComparisonSectionView(BaseModel):
    """One comparison bucket."""

    kind: str
    title: str
    cards: list[ComparedCardView] = Field(default_factory=list)


class ComparisonResponse(BaseModel):
    """Response model for a deck comparison."""

    deck1: str
    deck2: str
    summary: dict[str, int]
    sections: list[ComparisonSectionView] = Field(default_factory=list)


class RecentDeckView(BaseModel):
    """A recently viewed deck."""

    url: str
    name: str
    leader_art: str | None = None
    base_aspect: str
    viewed_on: date


def _deck_load_failed(error: DeckLoadError) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_502_BAD_GATEWAY,
        detail=f"Error: {error.message}. Please verify the deck URL is correct and try again.",
    )


@router.get("/decks/recent", response_model=list[RecentDeckView])
async def recent_decks(
    viewer: Annotated[DeckViewer, Depends(get_viewer)],
) -> list[RecentDeckView]:
    """Recently viewed decks, most recent first."""
    return [
        RecentDeckView(
            url=entry.url,
            name=entry.name,
            leader_art=entry.leader_art,
            base_aspect=entry.base_aspect,
            viewed_on=entry.viewed_on,
        )
        for entry in viewer.recent.entries()
    ]


@router.get("/decks/{deck_id}", response_model=DeckViewResponse)
async def view_deck(
    deck_id: str,
    viewer: Annotated[DeckViewer, Depends(get_viewer)],
    sort: Annotated[str, Query(description="set, cost, aspect, type, or trait")] = "set",
    refresh: bool = False,
) -> DeckViewResponse:
    """
    Load a deck and group its cards.

    Unknown sort names fall back to grouping by set.
    Returns 502 if the deck cannot be loaded.
    """
    try:
        view = await viewer.view_deck(deck_id, sort_type=sort, bypass_cache=refresh)
    except DeckLoadError as e:
        raise _deck_load_failed(e) from e

    return DeckViewResponse(
        deck_id=view.deck.deck_id,
        name=view.deck.name,
        sort=view.sort,
        info_html=render_deck_info(view.deck),
        command_zone=[CardView.from_rendered(rendered) for rendered in view.command_zone],
        groups=[
            GroupView(
                title=group.title,
                main=group.total_main,
                sideboard=group.total_sideboard,
                cards=[CardView.from_rendered(rendered) for rendered in group.cards],
            )
            for group in view.groups
        ],
    )


@router.get("/compare", response_model=ComparisonResponse)
async def compare_decks(
    deck1: str,
    deck2: str,
    viewer: Annotated[DeckViewer, Depends(get_viewer)],
) -> ComparisonResponse:
    """
    Compare two decks card by card.

    Returns 502 if either deck cannot be loaded.
    """
    try:
        view = await viewer.compare_decks(deck1, deck2)
    except DeckLoadError as e:
        raise _deck_load_failed(e) from e

    return ComparisonResponse(
        deck1=view.deck_a.name,
        deck2=view.deck_b.name,
        summary=view.comparison.summary(),
        sections=[
            ComparisonSectionView(
                kind=section.kind.value,
                title=section.title,
                cards=[ComparedCardView.from_rendered(rendered) for rendered in section.cards],
            )
            for section in view.sections
        ],
    )
