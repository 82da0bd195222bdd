"""Tests for the collection service."""

import asyncio

import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pokedeck.models.card import Card
from pokedeck.models.collection import Collection, CollectionEntry
from pokedeck.models.failure import InvariantViolationError, NotFoundError
from pokedeck.services.collection_service import (
    add_to_collection,
    compute_stats,
    get_collection,
    get_collection_stats,
    remove_from_collection,
    update_collection_quantity,
)


class TestAddToCollection:
    async def test_first_add_creates_entry(self, session: AsyncSession, catalog) -> None:
        entry = await add_to_collection(session, "ash", "base1-4", 2)

        assert entry.card.name == "Charizard"
        assert entry.quantity == 2

    async def test_repeat_add_increments(self, session: AsyncSession, catalog) -> None:
        await add_to_collection(session, "ash", "base1-4", 2)
        entry = await add_to_collection(session, "ash", "base1-4", 3)

        assert entry.quantity == 5
        collection = await get_collection(session, "ash")
        assert collection.unique_cards() == 1

    async def test_unknown_card(self, session: AsyncSession, catalog) -> None:
        with pytest.raises(NotFoundError):
            await add_to_collection(session, "ash", "nope", 1)

    @pytest.mark.parametrize("quantity", [0, -2])
    async def test_quantity_must_be_positive(
        self, session: AsyncSession, catalog, quantity: int
    ) -> None:
        with pytest.raises(InvariantViolationError):
            await add_to_collection(session, "ash", "base1-4", quantity)

    async def test_concurrent_adds_all_counted(
        self, session_factory: async_sessionmaker[AsyncSession], catalog
    ) -> None:
        async def add_one() -> None:
            async with session_factory() as session:
                await add_to_collection(session, "ash", "base1-98", 1)

        await asyncio.gather(*(add_one() for _ in range(5)))

        async with session_factory() as session:
            collection = await get_collection(session, "ash")
        assert [(e.card.id, e.quantity) for e in collection.entries] == [("base1-98", 5)]


class TestUpdateQuantity:
    async def test_replaces_quantity(self, session: AsyncSession, catalog) -> None:
        await add_to_collection(session, "ash", "base1-4", 2)

        entry = await update_collection_quantity(session, "ash", "base1-4", 7)

        assert entry is not None
        assert entry.quantity == 7

    async def test_zero_deletes(self, session: AsyncSession, catalog) -> None:
        await add_to_collection(session, "ash", "base1-4", 2)

        assert await update_collection_quantity(session, "ash", "base1-4", 0) is None
        collection = await get_collection(session, "ash")
        assert collection.entries == []

    async def test_not_owned(self, session: AsyncSession, catalog) -> None:
        with pytest.raises(NotFoundError, match="Card not in collection"):
            await update_collection_quantity(session, "ash", "base1-4", 3)

    async def test_negative(self, session: AsyncSession, catalog) -> None:
        with pytest.raises(InvariantViolationError):
            await update_collection_quantity(session, "ash", "base1-4", -1)


class TestRemoveFromCollection:
    async def test_remove(self, session: AsyncSession, catalog) -> None:
        await add_to_collection(session, "ash", "base1-4", 2)
        await remove_from_collection(session, "ash", "base1-4")

        assert (await get_collection(session, "ash")).entries == []

    async def test_remove_not_owned(self, session: AsyncSession, catalog) -> None:
        with pytest.raises(NotFoundError):
            await remove_from_collection(session, "ash", "base1-4")


class TestCollectionView:
    async def test_ordered_by_name(self, session: AsyncSession, catalog) -> None:
        await add_to_collection(session, "ash", "base1-58", 1)
        await add_to_collection(session, "ash", "base1-4", 1)
        await add_to_collection(session, "ash", "base1-93", 1)

        collection = await get_collection(session, "ash")

        assert [e.card.name for e in collection.entries] == [
            "Charizard",
            "Gust of Wind",
            "Pikachu",
        ]

    async def test_users_isolated(self, session: AsyncSession, catalog) -> None:
        await add_to_collection(session, "ash", "base1-4", 1)
        assert (await get_collection(session, "misty")).entries == []


class TestStats:
    def test_multi_type_card_counts_toward_each_type(self, charizard: Card) -> None:
        dual = Card(id="x-1", name="Dual", category="Pokémon", types=("Fire", "Water"))
        collection = Collection(
            user_id="ash",
            entries=[
                CollectionEntry(card=dual, quantity=3),
                CollectionEntry(card=charizard, quantity=2),
            ],
        )

        stats = compute_stats(collection)

        assert stats.total_cards == 5
        assert stats.unique_cards == 2
        assert stats.by_type == {"Fire": 5, "Water": 3}

    def test_typeless_cards_not_in_by_type(self, gust_of_wind: Card) -> None:
        stats = compute_stats(
            Collection(user_id="ash", entries=[CollectionEntry(card=gust_of_wind, quantity=2)])
        )
        assert stats.total_cards == 2
        assert stats.by_type == {}

    async def test_stats_from_store(self, session: AsyncSession, catalog) -> None:
        await add_to_collection(session, "ash", "base1-4", 2)
        await add_to_collection(session, "ash", "base1-98", 10)

        stats = await get_collection_stats(session, "ash")

        assert stats.total_cards == 12
        assert stats.unique_cards == 2
        assert stats.by_type == {"Fire": 12}
