"""
Deck API endpoints.

Deck management and deck contents for a user. Every rule check happens
in the deck service; rule violations come back as 400 and missing or
foreign decks as 404 through the application's KnownError handler.
"""

from datetime import datetime
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from pokedeck.api.cards import CardResponse, card_response
from pokedeck.config import MAX_DECK_SIZE
from pokedeck.db.database import get_session
from pokedeck.models.deck import Deck, DeckEntry
from pokedeck.services import deck_service

router = APIRouter(prefix="/decks", tags=["decks"])


class DeckEntryResponse(BaseModel):
    card: CardResponse
    quantity: int


class DeckResponse(BaseModel):
    """Response model for a single deck."""

    id: str
    user_id: str
    name: str
    entries: list[DeckEntryResponse] = Field(default_factory=list)
    total_cards: int = 0
    created_at: datetime | None = None


class DeckListResponse(BaseModel):
    """Response model for a list of decks."""

    user_id: str
    decks: list[DeckResponse]
    count: int


class DeckValidationResponse(BaseModel):
    valid: bool
    total_cards: int
    errors: list[str] = Field(default_factory=list)


class DeckNameRequest(BaseModel):
    """Request model for creating or renaming a deck."""

    name: str = Field(..., min_length=1, max_length=100, examples=["Fire Starter"])


class AddCardRequest(BaseModel):
    """Request model for adding copies of a card to a deck."""

    card_id: str = Field(..., min_length=1, examples=["base1-4"])
    quantity: int = Field(default=1, ge=1, le=MAX_DECK_SIZE)


class SetQuantityRequest(BaseModel):
    """Request model for replacing a card's quantity. Zero removes it."""

    quantity: int = Field(..., ge=0, le=MAX_DECK_SIZE)


def _entry_response(entry: DeckEntry) -> DeckEntryResponse:
    return DeckEntryResponse(card=card_response(entry.card), quantity=entry.quantity)


def _deck_response(deck: Deck) -> DeckResponse:
    return DeckResponse(
        id=deck.id,
        user_id=deck.user_id,
        name=deck.name,
        entries=[_entry_response(entry) for entry in deck.entries],
        total_cards=deck.total_cards(),
        created_at=deck.created_at,
    )


@router.post("/{user_id}", response_model=DeckResponse, status_code=status.HTTP_201_CREATED)
async def create_deck(
    user_id: str,
    request: DeckNameRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    """Create an empty deck."""
    return _deck_response(await deck_service.create_user_deck(session, user_id, request.name))


@router.get("/{user_id}", response_model=DeckListResponse)
async def list_decks(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckListResponse:
    """List a user's decks, newest first."""
    decks = [_deck_response(deck) for deck in await deck_service.list_user_decks(session, user_id)]
    return DeckListResponse(user_id=user_id, decks=decks, count=len(decks))


@router.get("/{user_id}/{deck_id}", response_model=DeckResponse)
async def get_deck(
    user_id: str,
    deck_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    return _deck_response(await deck_service.get_user_deck(session, user_id, deck_id))


@router.get("/{user_id}/{deck_id}/validate", response_model=DeckValidationResponse)
async def validate_deck(
    user_id: str,
    deck_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckValidationResponse:
    """
    Check whether a deck is legal to play.

    Always returns 200 for an existing deck; `valid` and `errors` carry
    the outcome.
    """
    result = await deck_service.validate_deck(session, user_id, deck_id)
    return DeckValidationResponse(
        valid=result.valid,
        total_cards=result.total_cards,
        errors=result.errors,
    )


@router.patch("/{user_id}/{deck_id}", response_model=DeckResponse)
async def rename_deck(
    user_id: str,
    deck_id: str,
    request: DeckNameRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckResponse:
    return _deck_response(
        await deck_service.rename_deck(session, user_id, deck_id, request.name)
    )


@router.delete("/{user_id}/{deck_id}", status_code=status.HTTP_204_NO_CONTENT)
async def delete_deck(
    user_id: str,
    deck_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> None:
    await deck_service.delete_deck(session, user_id, deck_id)


@router.post(
    "/{user_id}/{deck_id}/cards",
    response_model=DeckEntryResponse,
    status_code=status.HTTP_201_CREATED,
)
async def add_card(
    user_id: str,
    deck_id: str,
    request: AddCardRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckEntryResponse:
    """Add copies of a card to a deck."""
    entry = await deck_service.add_card(session, user_id, deck_id, request.card_id, request.quantity)
    return _entry_response(entry)


@router.patch(
    "/{user_id}/{deck_id}/cards/{card_id}",
    response_model=DeckEntryResponse,
    responses={204: {"description": "Card removed from deck"}},
)
async def set_card_quantity(
    user_id: str,
    deck_id: str,
    card_id: str,
    request: SetQuantityRequest,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> DeckEntryResponse | Response:
    """Replace the number of copies of a card already in a deck."""
    entry = await deck_service.set_card_quantity(
        session, user_id, deck_id, card_id, request.quantity
    )
    if entry is None:
        return Response(status_code=status.HTTP_204_NO_CONTENT)
    return _entry_response(entry)


@router.delete("/{user_id}/{deck_id}/cards/{card_id}", status_code=status.HTTP_204_NO_CONTENT)
async def remove_card(
    user_id: str,
    deck_id: str,
    card_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> None:
    await deck_service.remove_card(session, user_id, deck_id, card_id)
