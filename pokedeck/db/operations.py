"""
Database CRUD operations.

Provides async functions for reading and writing catalog cards,
collection entries and decks, plus conversions to domain models.

Functions here do not enforce deck or collection rules; the services
layer does that before calling them.
"""

from collections.abc import Sequence
from datetime import UTC, datetime
from typing import Any

from sqlalchemy import func, or_, select, update
from sqlalchemy.dialects.postgresql import insert as postgresql_insert
from sqlalchemy.dialects.sqlite import insert as sqlite_insert
from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy.orm import selectinload

from pokedeck.models.card import Ability, Attack, Card, TypeModifier
from pokedeck.models.collection import Collection, CollectionEntry
from pokedeck.models.db import CardDB, CollectionEntryDB, DeckDB, DeckEntryDB
from pokedeck.models.deck import Deck, DeckEntry

# --- Card Operations ---


def _dump_section(items: Sequence[Ability | Attack | TypeModifier] | None) -> Any:
    if items is None:
        return None
    return [item.to_dict() for item in items]


def card_values(card: Card) -> dict[str, Any]:
    """Column values for every mutable card field."""
    return {
        "name": card.name,
        "category": card.category,
        "subtypes": list(card.subtypes),
        "hp": card.hp,
        "types": list(card.types),
        "abilities": _dump_section(card.abilities),
        "attacks": _dump_section(card.attacks),
        "weaknesses": _dump_section(card.weaknesses),
        "resistances": _dump_section(card.resistances),
        "retreat_cost": list(card.retreat_cost),
        "rules": list(card.rules),
        "image_small": card.image_small,
        "image_large": card.image_large,
        "set_id": card.set_id,
        "set_name": card.set_name,
    }


async def upsert_card(session: AsyncSession, card: Card) -> None:
    """
    Insert a card or fully replace the stored one with the same id.

    Inserts leave updated_at NULL; updates refresh it. On PostgreSQL and
    SQLite this is a single INSERT ... ON CONFLICT statement, so two syncs
    writing the same card concurrently both succeed.
    """
    values = card_values(card)
    dialect = session.get_bind().dialect.name

    if dialect in ("postgresql", "sqlite"):
        insert = postgresql_insert if dialect == "postgresql" else sqlite_insert
        stmt = insert(CardDB).values(id=card.id, **values)
        stmt = stmt.on_conflict_do_update(
            index_elements=[CardDB.id],
            set_={**values, "updated_at": func.now()},
        )
        await session.execute(stmt)
        return

    existing = await session.get(CardDB, card.id)
    if existing:
        for key, value in values.items():
            setattr(existing, key, value)
        existing.updated_at = datetime.now(UTC)
    else:
        session.add(CardDB(id=card.id, **values))
    await session.flush()


async def get_card(session: AsyncSession, card_id: str) -> CardDB | None:
    """Get a card by its external id."""
    return await session.get(CardDB, card_id)


async def list_cards(session: AsyncSession, limit: int = 100) -> list[CardDB]:
    """List cards ordered by name."""
    result = await session.execute(select(CardDB).order_by(CardDB.name, CardDB.id).limit(limit))
    return list(result.scalars().all())


async def search_cards(session: AsyncSession, query: str, limit: int = 50) -> list[CardDB]:
    """
    Find cards whose name or set name contains the query.

    Matching is case-insensitive. An empty query matches every card.
    """
    result = await session.execute(
        select(CardDB)
        .where(
            or_(
                CardDB.name.icontains(query, autoescape=True),
                CardDB.set_name.icontains(query, autoescape=True),
            )
        )
        .order_by(CardDB.name, CardDB.id)
        .limit(limit)
    )
    return list(result.scalars().all())


async def count_cards(session: AsyncSession) -> int:
    """Number of cards in the catalog."""
    result = await session.execute(select(func.count()).select_from(CardDB))
    return int(result.scalar_one())


async def list_card_ids(session: AsyncSession, only_unembedded: bool = False) -> list[str]:
    """All card ids, optionally only those without a stored embedding."""
    stmt = select(CardDB.id).order_by(CardDB.id)
    if only_unembedded:
        stmt = stmt.where(CardDB.embedding.is_(None))
    result = await session.execute(stmt)
    return list(result.scalars().all())


async def set_card_embedding(session: AsyncSession, card_id: str, vector: list[float]) -> bool:
    """
    Store a card's embedding vector.

    Returns False if the card does not exist.
    """
    result = await session.execute(
        update(CardDB).where(CardDB.id == card_id).values(embedding=vector)
    )
    # rowcount is available on UPDATE results; type stubs incomplete for async
    return int(result.rowcount) > 0  # type: ignore[attr-defined]


async def get_owned_embedded_cards(session: AsyncSession, user_id: str) -> list[CardDB]:
    """
    Cards in a user's collection that have an embedding.

    This is the candidate set for similarity search: cards the user does
    not own, or that were never embedded, are not returned.
    """
    result = await session.execute(
        select(CardDB)
        .join(CollectionEntryDB, CollectionEntryDB.card_id == CardDB.id)
        .where(
            CollectionEntryDB.user_id == user_id,
            CardDB.embedding.is_not(None),
        )
        .order_by(CardDB.name, CardDB.id)
    )
    return list(result.scalars().all())


def _load_section(data: list[dict[str, Any]] | None, cls: Any) -> Any:
    if data is None:
        return None
    return tuple(cls.from_dict(item) for item in data)


def card_to_model(db_card: CardDB) -> Card:
    """Convert a database card to a domain model."""
    return Card(
        id=db_card.id,
        name=db_card.name,
        category=db_card.category,
        subtypes=tuple(db_card.subtypes or ()),
        hp=db_card.hp,
        types=tuple(db_card.types or ()),
        abilities=_load_section(db_card.abilities, Ability),
        attacks=_load_section(db_card.attacks, Attack),
        weaknesses=_load_section(db_card.weaknesses, TypeModifier),
        resistances=_load_section(db_card.resistances, TypeModifier),
        retreat_cost=tuple(db_card.retreat_cost or ()),
        rules=tuple(db_card.rules or ()),
        image_small=db_card.image_small,
        image_large=db_card.image_large,
        set_id=db_card.set_id,
        set_name=db_card.set_name,
    )


# --- Collection Operations ---


async def get_collection_entries(session: AsyncSession, user_id: str) -> list[CollectionEntryDB]:
    """Get a user's collection entries with their cards, ordered by card name."""
    result = await session.execute(
        select(CollectionEntryDB)
        .join(CardDB, CollectionEntryDB.card_id == CardDB.id)
        .where(CollectionEntryDB.user_id == user_id)
        .options(selectinload(CollectionEntryDB.card))
        .order_by(CardDB.name, CardDB.id)
    )
    return list(result.scalars().all())


async def get_collection_entry(
    session: AsyncSession,
    user_id: str,
    card_id: str,
    for_update: bool = False,
) -> CollectionEntryDB | None:
    """
    Get one collection entry.

    With for_update, the row is locked until the transaction ends on
    backends that support row locks, and any copy already in the session
    is refreshed from the database.
    """
    stmt = (
        select(CollectionEntryDB)
        .where(
            CollectionEntryDB.user_id == user_id,
            CollectionEntryDB.card_id == card_id,
        )
        .options(selectinload(CollectionEntryDB.card))
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


def collection_to_model(user_id: str, entries: list[CollectionEntryDB]) -> Collection:
    """Convert database collection entries to a domain model."""
    return Collection(
        user_id=user_id,
        entries=[
            CollectionEntry(card=card_to_model(entry.card), quantity=entry.quantity)
            for entry in entries
        ],
    )


# --- Deck Operations ---


async def create_deck(session: AsyncSession, user_id: str, name: str) -> DeckDB:
    """Create an empty deck."""
    deck = DeckDB(user_id=user_id, name=name, entries=[])
    session.add(deck)
    await session.flush()
    # Load server-side timestamps now; lazy loads are not allowed in async sessions
    await session.refresh(deck, attribute_names=["created_at", "updated_at"])
    return deck


async def get_deck(
    session: AsyncSession,
    deck_id: str,
    for_update: bool = False,
) -> DeckDB | None:
    """
    Get a deck with its entries and their cards.

    Always re-reads the entries from the database rather than trusting
    a copy already held by the session. With for_update, the deck row is
    locked until the transaction ends on backends that support it.
    """
    stmt = (
        select(DeckDB)
        .where(DeckDB.id == deck_id)
        .options(selectinload(DeckDB.entries).selectinload(DeckEntryDB.card))
        .execution_options(populate_existing=True)
    )
    if for_update:
        stmt = stmt.with_for_update()
    result = await session.execute(stmt)
    return result.scalar_one_or_none()


async def list_decks(session: AsyncSession, user_id: str) -> list[DeckDB]:
    """Get all decks for a user, newest first."""
    result = await session.execute(
        select(DeckDB)
        .where(DeckDB.user_id == user_id)
        .options(selectinload(DeckDB.entries).selectinload(DeckEntryDB.card))
        .order_by(DeckDB.created_at.desc(), DeckDB.id)
    )
    return list(result.scalars().all())


def deck_to_model(db_deck: DeckDB) -> Deck:
    """Convert a database deck to a domain model."""
    entries = sorted(db_deck.entries, key=lambda e: (e.card.name, e.card_id))
    return Deck(
        id=db_deck.id,
        user_id=db_deck.user_id,
        name=db_deck.name,
        entries=[DeckEntry(card=card_to_model(e.card), quantity=e.quantity) for e in entries],
        created_at=db_deck.created_at,
    )
