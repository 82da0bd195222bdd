"""
Collection API endpoints.

Provides CRUD operations for user card collections.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from pokedeck.api.cards import CardResponse, card_response
from pokedeck.db.database import get_session
from pokedeck.models.collection import Collection, CollectionEntry
from pokedeck.services.collection_service import (
    add_to_collection,
    get_collection,
    get_collection_stats,
    remove_from_collection,
    update_collection_quantity,
)

router = APIRouter(prefix="/collection", tags=["collection"])


class CollectionEntryResponse(BaseModel):
    card: CardResponse
    quantity: int


class CollectionResponse(BaseModel):
    """Response model for collection data."""

    user_id: str
    entries: list[CollectionEntryResponse] = Field(default_factory=list)
    total_cards: int = 0
    unique_cards: int = 0


class CollectionStatsResponse(BaseModel):
    total_cards: int
    unique_cards: int
    by_type: dict[str, int] = Field(default_factory=dict)


class AddToCollectionRequest(BaseModel):
    """Request model for adding cards to a collection."""

    card_id: str = Field(..., min_length=1, examples=["base1-4"])
    quantity: int = Field(default=1, ge=1)


class UpdateQuantityRequest(BaseModel):
    """Request model for replacing an owned quantity. Zero removes the card."""

    quantity: int = Field(..., ge=0)


def _entry_response(entry: CollectionEntry) -> CollectionEntryResponse:
    return CollectionEntryResponse(card=card_response(entry.card), quantity=entry.quantity)


def _collection_response(collection: Collection) -> CollectionResponse:
    return CollectionResponse(
        user_id=collection.user_id,
        entries=[_entry_response(entry) for entry in collection.entries],
        total_cards=collection.total_cards(),
        unique_cards=collection.unique_cards(),
    )


@router.get("/{user_id}", response_model=CollectionResponse)
async def get_user_collection(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionResponse:
    """
    Get a user's collection, ordered by card name.

    Returns an empty collection if the user owns nothing.
    """
    return _collection_response(await get_collection(session, user_id))


@router.get("/{user_id}/stats", response_model=CollectionStatsResponse)
async def get_user_collection_stats(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionStatsResponse:
    stats = await get_collection_stats(session, user_id)
    return CollectionStatsResponse(
        total_cards=stats.total_cards,
        unique_cards=stats.unique_cards,
        by_type=stats.by_type,
    )


@router.post(
    "/{user_id}",
    response_model=CollectionEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_cards(
    user_id: str,
    request: AddToCollectionRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionEntryResponse:
    """Add copies of a card. Increments the quantity if already owned."""
    entry = await add_to_collection(session, user_id, request.card_id, request.quantity)
    return _entry_response(entry)


@router.patch(
    "/{user_id}/{card_id}",
    response_model=CollectionEntryResponse,
    responses={204: {"description": "Card removed"}},
)
async def update_quantity(
    user_id: str,
    card_id: str,
    request: UpdateQuantityRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> CollectionEntryResponse | Response:
    """Set how many copies of a card the user owns."""
    entry = await update_collection_quantity(session, user_id, card_id, request.quantity)
    if entry is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return _entry_response(entry)


@router.delete("/{user_id}/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_card(
    user_id: str,
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> None:
    """Remove a card from the collection. Returns 404 if not owned."""
    await remove_from_collection(session, user_id, card_id)
