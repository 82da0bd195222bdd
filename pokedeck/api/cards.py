"""
Card catalog API endpoints.

Read access to the locally stored catalog, plus triggers for syncing it
from the Pokémon TCG API.
"""

from typing import Annotated, Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from pokedeck.db import card_to_model, count_cards, get_card, list_cards, search_cards
from pokedeck.db.database import get_session
from pokedeck.jobs.sync_cards import (
    DEFAULT_FORMAT_PAGES,
    SyncResult,
    sync_cards,
    sync_format_legal,
    sync_set,
)
from pokedeck.models.card import Card
from pokedeck.models.failure import UpstreamError

router = APIRouter(prefix="/cards", tags=["cards"])


class CardResponse(BaseModel):
    """Response model for a catalog card."""

    id: str
    name: str
    category: str
    subtypes: list[str] = Field(default_factory=list)
    hp: str | None = None
    types: list[str] = Field(default_factory=list)
    abilities: list[dict[str, Any]] | None = None
    attacks: list[dict[str, Any]] | None = None
    weaknesses: list[dict[str, Any]] | None = None
    resistances: list[dict[str, Any]] | None = None
    retreat_cost: list[str] = Field(default_factory=list)
    rules: list[str] = Field(default_factory=list)
    image_small: str | None = None
    image_large: str | None = None
    set_id: str | None = None
    set_name: str | None = None


class CardListResponse(BaseModel):
    """Response model for a list of cards."""

    cards: list[CardResponse]
    count: int


class CardCountResponse(BaseModel):
    count: int


class SyncResponse(BaseModel):
    """Response model for a sync run."""

    synced: int
    pages_fetched: int
    pages_failed: int
    failed_pages: list[int] = Field(default_factory=list)
    cards_skipped: int = 0


def card_response(card: Card) -> CardResponse:
    """Build the API view of a card."""

    def dump(items: Any) -> list[dict[str, Any]] | None:
        return None if items is None else [item.to_dict() for item in items]

    return CardResponse(
        id=card.id,
        name=card.name,
        category=card.category,
        subtypes=list(card.subtypes),
        hp=card.hp,
        types=list(card.types),
        abilities=dump(card.abilities),
        attacks=dump(card.attacks),
        weaknesses=dump(card.weaknesses),
        resistances=dump(card.resistances),
        retreat_cost=list(card.retreat_cost),
        rules=list(card.rules),
        image_small=card.image_small,
        image_large=card.image_large,
        set_id=card.set_id,
        set_name=card.set_name,
    )


def _sync_response(result: SyncResult) -> SyncResponse:
    return SyncResponse(
        synced=result.synced,
        pages_fetched=result.pages_fetched,
        pages_failed=result.pages_failed,
        failed_pages=result.failed_pages,
        cards_skipped=result.cards_skipped,
    )


def _upstream_failure(error: UpstreamError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))


@router.get("", response_model=CardListResponse)
async def get_cards(
    session: Annotated[AsyncSession, Depends(get_session)],
    limit: Annotated[int, Query(ge=1, le=500)] = 100,
) -> CardListResponse:
    """List catalog cards ordered by name."""
    cards = [card_response(card_to_model(row)) for row in await list_cards(session, limit=limit)]
    return CardListResponse(cards=cards, count=len(cards))


@router.get("/search", response_model=CardListResponse)
async def search(
    session: Annotated[AsyncSession, Depends(get_session)],
    q: Annotated[str, Query(description="Substring of the card or set name")] = "",
    limit: Annotated[int, Query(ge=1, le=500)] = 50,
) -> CardListResponse:
    """Search cards by name or set name, case-insensitively."""
    rows = await search_cards(session, q, limit=limit)
    cards = [card_response(card_to_model(row)) for row in rows]
    return CardListResponse(cards=cards, count=len(cards))


@router.get("/count", response_model=CardCountResponse)
async def get_card_count(
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardCountResponse:
    return CardCountResponse(count=await count_cards(session))


@router.post("/sync", response_model=SyncResponse)
async def sync_all(
    pages: Annotated[int, Query(ge=1, le=100)] = 1,
) -> SyncResponse:
    """
    Sync a number of pages of the unfiltered catalog.

    Pages that fail are skipped and reported. Returns 502 only when no
    page could be fetched.
    """
    try:
        result = await sync_cards(pages=pages)
    except UpstreamError as e:
        raise _upstream_failure(e) from e
    return _sync_response(result)


@router.post("/sync/set", response_model=SyncResponse)
async def sync_one_set(
    name: Annotated[str, Query(min_length=1, description="Set name, e.g. 'Base'")],
) -> SyncResponse:
    """Sync every card in a set."""
    try:
        result = await sync_set(name)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except UpstreamError as e:
        raise _upstream_failure(e) from e
    return _sync_response(result)


@router.post("/sync/{format_name}", response_model=SyncResponse)
async def sync_format(
    format_name: str,
    pages: Annotated[int, Query(ge=1, le=100)] = DEFAULT_FORMAT_PAGES,
) -> SyncResponse:
    """Sync cards legal in a format (standard, expanded or unlimited)."""
    try:
        result = await sync_format_legal(format_name, pages=pages)
    except ValueError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e)) from e
    except UpstreamError as e:
        raise _upstream_failure(e) from e
    return _sync_response(result)


@router.get("/{card_id}", response_model=CardResponse)
async def get_card_by_id(
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CardResponse:
    """Get a card by its catalog id. Returns 404 if not found."""
    row = await get_card(session, card_id)
    if row is None:
        raise HTTPException(
            status_code=status.HTTP_404_NOT_FOUND,
            detail=f"Card '{card_id}' not found",
        )
    return card_response(card_to_model(row))
