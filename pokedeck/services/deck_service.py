"""
Deck service.

Every change to a deck's contents goes through this module. Each
mutation runs under a per-deck lock and a row lock on the deck, reads
the deck's current entries fresh from the database, checks the rules in
deck_rules, and commits before the lock is released. Two concurrent
requests against the same deck therefore cannot both pass a check that
only one of them should.

Decks are looked up by id and then matched against the requesting
user. A deck owned by someone else is reported exactly like a missing
deck.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from pokedeck.db.operations import (
    card_to_model,
    create_deck,
    deck_to_model,
    get_card,
    get_deck,
    list_decks,
)
from pokedeck.models.db import DeckDB, DeckEntryDB
from pokedeck.models.deck import Deck, DeckEntry, DeckValidation
from pokedeck.models.failure import InvariantViolationError, NotFoundError
from pokedeck.services.deck_rules import check_add, check_set_quantity, validate_entries
from pokedeck.services.key_locks import KeyedLocks

logger = logging.getLogger(__name__)

_deck_locks = KeyedLocks()


@asynccontextmanager
async def _deck_mutation(session: AsyncSession, deck_id: str) -> AsyncIterator[None]:
    """Serialize a change to one deck and commit it before releasing the lock."""
    async with _deck_locks.hold(deck_id):
        try:
            yield
            await session.commit()
        except BaseException:
            await session.rollback()
            raise


async def _owned_deck(
    session: AsyncSession,
    user_id: str,
    deck_id: str,
    for_update: bool = False,
) -> DeckDB:
    deck = await get_deck(session, deck_id, for_update=for_update)
    if deck is None or deck.user_id != user_id:
        raise NotFoundError("Deck not found")
    return deck


def _find_entry(deck: DeckDB, card_id: str) -> DeckEntryDB | None:
    return next((entry for entry in deck.entries if entry.card_id == card_id), None)


def _deck_size(deck: DeckDB) -> int:
    return sum(entry.quantity for entry in deck.entries)


def _clean_name(name: str) -> str:
    cleaned = name.strip()
    if not cleaned:
        raise InvariantViolationError("Deck name cannot be empty")
    return cleaned


# --- Deck Lifecycle ---


async def create_user_deck(session: AsyncSession, user_id: str, name: str) -> Deck:
    """Create an empty deck for a user."""
    deck = await create_deck(session, user_id, _clean_name(name))
    await session.commit()
    logger.info("Created deck %s for user %s", deck.id, user_id)
    return deck_to_model(deck)


async def list_user_decks(session: AsyncSession, user_id: str) -> list[Deck]:
    """All of a user's decks, newest first."""
    return [deck_to_model(deck) for deck in await list_decks(session, user_id)]


async def get_user_deck(session: AsyncSession, user_id: str, deck_id: str) -> Deck:
    """
    Get one of a user's decks.

    Raises:
        NotFoundError: If the deck does not exist or is not the user's
    """
    return deck_to_model(await _owned_deck(session, user_id, deck_id))


async def rename_deck(session: AsyncSession, user_id: str, deck_id: str, name: str) -> Deck:
    """Rename a deck."""
    new_name = _clean_name(name)
    async with _deck_mutation(session, deck_id):
        deck = await _owned_deck(session, user_id, deck_id, for_update=True)
        deck.name = new_name
        await session.flush()
    return deck_to_model(deck)


async def delete_deck(session: AsyncSession, user_id: str, deck_id: str) -> None:
    """Delete a deck and all of its entries."""
    async with _deck_mutation(session, deck_id):
        deck = await _owned_deck(session, user_id, deck_id, for_update=True)
        await session.delete(deck)
    logger.info("Deleted deck %s for user %s", deck_id, user_id)


# --- Deck Contents ---


async def add_card(
    session: AsyncSession,
    user_id: str,
    deck_id: str,
    card_id: str,
    quantity: int,
) -> DeckEntry:
    """
    Add copies of a card to a deck.

    Increments the card's entry if it is already in the deck.

    Raises:
        NotFoundError: If the deck or card does not exist
        InvariantViolationError: If the deck would exceed its size or the
            card its copy limit, or quantity is not positive
    """
    async with _deck_mutation(session, deck_id):
        deck = await _owned_deck(session, user_id, deck_id, for_update=True)

        card_row = await get_card(session, card_id)
        if card_row is None:
            raise NotFoundError(f"Card {card_id} not found")
        card = card_to_model(card_row)

        entry = _find_entry(deck, card_id)
        check_add(card, _deck_size(deck), entry.quantity if entry else 0, quantity)

        if entry is None:
            entry = DeckEntryDB(card=card_row, quantity=quantity)
            deck.entries.append(entry)
        else:
            entry.quantity += quantity
        await session.flush()

    return DeckEntry(card=card, quantity=entry.quantity)


async def set_card_quantity(
    session: AsyncSession,
    user_id: str,
    deck_id: str,
    card_id: str,
    quantity: int,
) -> DeckEntry | None:
    """
    Replace the number of copies of a card already in a deck.

    A quantity of zero removes the card.

    Returns:
        The updated entry, or None if the card was removed

    Raises:
        NotFoundError: If the deck does not exist or the card is not in it
        InvariantViolationError: If the new quantity breaks a rule
    """
    async with _deck_mutation(session, deck_id):
        deck = await _owned_deck(session, user_id, deck_id, for_update=True)

        entry = _find_entry(deck, card_id)
        if entry is None:
            raise NotFoundError("Card not in deck")
        card = card_to_model(entry.card)

        check_set_quantity(card, _deck_size(deck), entry.quantity, quantity)

        if quantity == 0:
            deck.entries.remove(entry)
        else:
            entry.quantity = quantity
        await session.flush()

    if quantity == 0:
        return None
    return DeckEntry(card=card, quantity=quantity)


async def remove_card(session: AsyncSession, user_id: str, deck_id: str, card_id: str) -> None:
    """
    Remove a card from a deck entirely.

    Raises:
        NotFoundError: If the deck does not exist or the card is not in it
    """
    async with _deck_mutation(session, deck_id):
        deck = await _owned_deck(session, user_id, deck_id, for_update=True)

        entry = _find_entry(deck, card_id)
        if entry is None:
            raise NotFoundError("Card not in deck")

        deck.entries.remove(entry)
        await session.flush()


async def validate_deck(session: AsyncSession, user_id: str, deck_id: str) -> DeckValidation:
    """
    Check whether a deck is legal to play.

    Read-only. Reports every violated rule, not just the first.
    """
    deck = await _owned_deck(session, user_id, deck_id)
    return validate_entries((card_to_model(entry.card), entry.quantity) for entry in deck.entries)
