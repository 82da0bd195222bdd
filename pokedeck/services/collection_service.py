"""
Collection service.

Tracks how many copies of each catalog card a user owns. Changes to one
(user, card) entry are serialized the same way deck changes are: a
per-entry lock, a fresh locked read of the row, then commit.
"""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from pokedeck.db.operations import (
    card_to_model,
    collection_to_model,
    get_card,
    get_collection_entries,
    get_collection_entry,
)
from pokedeck.models.collection import Collection, CollectionEntry, CollectionStats
from pokedeck.models.db import CollectionEntryDB
from pokedeck.models.failure import InvariantViolationError, NotFoundError
from pokedeck.services.key_locks import KeyedLocks

logger = logging.getLogger(__name__)

_entry_locks = KeyedLocks()


@asynccontextmanager
async def _entry_mutation(
    session: AsyncSession, user_id: str, card_id: str
) -> AsyncIterator[None]:
    async with _entry_locks.hold((user_id, card_id)):
        try:
            yield
            await session.commit()
        except BaseException:
            await session.rollback()
            raise


async def get_collection(session: AsyncSession, user_id: str) -> Collection:
    """A user's collection, ordered by card name. Empty if they own nothing."""
    return collection_to_model(user_id, await get_collection_entries(session, user_id))


async def add_to_collection(
    session: AsyncSession,
    user_id: str,
    card_id: str,
    quantity: int,
) -> CollectionEntry:
    """
    Add copies of a card to a user's collection.

    Creates the entry on first add and increments it afterwards.

    Raises:
        NotFoundError: If the card is not in the catalog
        InvariantViolationError: If quantity is not positive
    """
    if quantity <= 0:
        raise InvariantViolationError(f"Quantity must be a positive number (got {quantity})")

    async with _entry_mutation(session, user_id, card_id):
        card_row = await get_card(session, card_id)
        if card_row is None:
            raise NotFoundError(f"Card {card_id} not found")

        entry = await get_collection_entry(session, user_id, card_id, for_update=True)
        if entry is None:
            entry = CollectionEntryDB(user_id=user_id, card=card_row, quantity=quantity)
            session.add(entry)
        else:
            entry.quantity += quantity
        await session.flush()
        total = entry.quantity

    return CollectionEntry(card=card_to_model(card_row), quantity=total)


async def update_collection_quantity(
    session: AsyncSession,
    user_id: str,
    card_id: str,
    quantity: int,
) -> CollectionEntry | None:
    """
    Replace the number of copies owned of a card.

    A quantity of zero deletes the entry.

    Returns:
        The updated entry, or None if it was deleted

    Raises:
        NotFoundError: If the card is not in the user's collection
        InvariantViolationError: If quantity is negative
    """
    if quantity < 0:
        raise InvariantViolationError(f"Quantity cannot be negative (got {quantity})")

    async with _entry_mutation(session, user_id, card_id):
        entry = await get_collection_entry(session, user_id, card_id, for_update=True)
        if entry is None:
            raise NotFoundError("Card not in collection")

        card = card_to_model(entry.card)
        if quantity == 0:
            await session.delete(entry)
        else:
            entry.quantity = quantity
        await session.flush()

    if quantity == 0:
        return None
    return CollectionEntry(card=card, quantity=quantity)


async def remove_from_collection(session: AsyncSession, user_id: str, card_id: str) -> None:
    """
    Remove a card from a user's collection.

    Raises:
        NotFoundError: If the card is not in the user's collection
    """
    async with _entry_mutation(session, user_id, card_id):
        entry = await get_collection_entry(session, user_id, card_id, for_update=True)
        if entry is None:
            raise NotFoundError("Card not in collection")
        await session.delete(entry)


def compute_stats(collection: Collection) -> CollectionStats:
    """
    Aggregate totals for a collection.

    A card with several types adds its full quantity to each type.
    """
    by_type: dict[str, int] = {}
    for entry in collection.entries:
        for card_type in entry.card.types:
            by_type[card_type] = by_type.get(card_type, 0) + entry.quantity

    return CollectionStats(
        total_cards=collection.total_cards(),
        unique_cards=collection.unique_cards(),
        by_type=by_type,
    )


async def get_collection_stats(session: AsyncSession, user_id: str) -> CollectionStats:
    """Totals for a user's collection."""
    return compute_stats(await get_collection(session, user_id))
