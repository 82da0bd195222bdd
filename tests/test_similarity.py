"""Tests for the similarity index."""

import numpy as np
import pytest
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pokedeck.db.operations import get_card, set_card_embedding
from pokedeck.models.card import ENERGY, POKEMON, Ability, Attack, Card
from pokedeck.models.db import CollectionEntryDB
from pokedeck.models.failure import EmbeddingError, NotFoundError
from pokedeck.services.similarity import (
    card_to_text,
    embed_all_cards,
    index_card,
    search_similar,
    similarity_score,
)


class FakeEmbedder:
    """Returns a fixed vector per text, or fails for listed texts."""

    def __init__(self, vectors: dict[str, list[float]] | None = None, fail_on: set[str] | None = None):
        self.vectors = vectors or {}
        self.fail_on = fail_on or set()
        self.calls: list[str] = []

    async def embed(self, text: str) -> list[float]:
        self.calls.append(text)
        if any(marker in text for marker in self.fail_on):
            raise EmbeddingError("embedding service rejected the text")
        for marker, vector in self.vectors.items():
            if marker in text:
                return vector
        return [1.0, 0.0, 0.0]


class TestCardToText:
    def test_full_card(self) -> None:
        card = Card(
            id="base1-2",
            name="Blastoise",
            category=POKEMON,
            subtypes=("Stage 2",),
            hp="100",
            types=("Water",),
            abilities=(Ability(name="Rain Dance", text="Attach Water Energy.", kind="Pokémon Power"),),
            attacks=(Attack(name="Hydro Pump", damage="40+", text="Does more damage."),),
        )

        assert card_to_text(card) == (
            "Blastoise is a Pokémon. (Stage 2). of type Water. with 100 HP. "
            'Ability "Rain Dance": Attach Water Energy. '
            'Attack "Hydro Pump" does 40+ damage. Does more damage'
        )

    def test_missing_sections_omitted(self) -> None:
        card = Card(id="base1-98", name="Fire Energy", category=ENERGY)
        assert card_to_text(card) == "Fire Energy is a Energy"

    def test_multiple_types_and_rules(self, gust_of_wind: Card) -> None:
        text = card_to_text(gust_of_wind)
        assert text.startswith("Gust of Wind is a Trainer. (Item)")
        assert "Rules: Choose 1 of your opponent's Benched Pokémon" in text
        assert "HP" not in text

    def test_attack_without_damage(self) -> None:
        card = Card(id="x", name="Squirtle", category=POKEMON, attacks=(Attack(name="Withdraw"),))
        assert card_to_text(card).endswith('Attack "Withdraw"')

    def test_dual_type(self) -> None:
        card = Card(id="x", name="Dual", category=POKEMON, types=("Fire", "Water"))
        assert "of type Fire/Water" in card_to_text(card)


class TestSimilarityScore:
    def test_identical_vectors(self) -> None:
        a = np.array([1.0, 2.0, 3.0])
        assert similarity_score(a, a) == pytest.approx(1.0)

    def test_orthogonal(self) -> None:
        assert similarity_score(np.array([1.0, 0.0]), np.array([0.0, 1.0])) == pytest.approx(0.0)

    def test_opposite_clamped_to_zero(self) -> None:
        assert similarity_score(np.array([1.0, 0.0]), np.array([-1.0, 0.0])) == 0.0

    def test_zero_vector(self) -> None:
        assert similarity_score(np.zeros(2), np.array([1.0, 0.0])) == 0.0


async def _own(session: AsyncSession, user_id: str, *card_ids: str) -> None:
    for card_id in card_ids:
        session.add(CollectionEntryDB(user_id=user_id, card_id=card_id, quantity=1))
    await session.commit()


class TestSearchSimilar:
    async def test_ranks_owned_cards(self, session: AsyncSession, catalog) -> None:
        await _own(session, "ash", "base1-4", "base1-58", "base1-98")
        await set_card_embedding(session, "base1-4", [1.0, 0.0])
        await set_card_embedding(session, "base1-58", [0.0, 1.0])
        await set_card_embedding(session, "base1-98", [0.8, 0.6])
        await session.commit()

        results = await search_similar(session, FakeEmbedder({"fire": [1.0, 0.0]}), "fire", "ash")

        assert [r.card.id for r in results] == ["base1-4", "base1-98", "base1-58"]
        assert results[0].score == pytest.approx(1.0)
        assert results[1].score == pytest.approx(0.8)
        assert all(0.0 <= r.score <= 1.0 for r in results)

    async def test_excludes_unowned_and_unembedded(self, session: AsyncSession, catalog) -> None:
        await _own(session, "ash", "base1-4", "base1-58")
        await _own(session, "misty", "base1-98")
        await set_card_embedding(session, "base1-4", [1.0, 0.0])
        await set_card_embedding(session, "base1-98", [1.0, 0.0])
        await session.commit()

        results = await search_similar(session, FakeEmbedder({"q": [1.0, 0.0]}), "q", "ash")

        assert [r.card.id for r in results] == ["base1-4"]

    async def test_limit(self, session: AsyncSession, catalog) -> None:
        await _own(session, "ash", "base1-4", "base1-58", "base1-98")
        for card_id in ("base1-4", "base1-58", "base1-98"):
            await set_card_embedding(session, card_id, [1.0, 0.0])
        await session.commit()

        results = await search_similar(
            session, FakeEmbedder({"q": [1.0, 0.0]}), "q", "ash", limit=2
        )

        assert len(results) == 2
        # Equal scores fall back to name order
        assert [r.card.name for r in results] == ["Charizard", "Fire Energy"]

    async def test_empty_collection_skips_embedding(self, session: AsyncSession, catalog) -> None:
        embedder = FakeEmbedder()
        assert await search_similar(session, embedder, "anything", "nobody") == []
        assert embedder.calls == []

    async def test_dimension_mismatch_skipped(self, session: AsyncSession, catalog) -> None:
        await _own(session, "ash", "base1-4", "base1-58")
        await set_card_embedding(session, "base1-4", [1.0, 0.0])
        await set_card_embedding(session, "base1-58", [1.0, 0.0, 0.0])
        await session.commit()

        results = await search_similar(session, FakeEmbedder({"q": [1.0, 0.0]}), "q", "ash")

        assert [r.card.id for r in results] == ["base1-4"]

    async def test_query_embedding_failure_propagates(
        self, session: AsyncSession, catalog
    ) -> None:
        await _own(session, "ash", "base1-4")
        await set_card_embedding(session, "base1-4", [1.0, 0.0])
        await session.commit()

        with pytest.raises(EmbeddingError):
            await search_similar(session, FakeEmbedder(fail_on={"q"}), "q", "ash")


class TestEmbedAllCards:
    async def test_embeds_every_card(
        self, session_factory: async_sessionmaker[AsyncSession], catalog
    ) -> None:
        result = await embed_all_cards(FakeEmbedder(), session_factory)

        assert result.embedded == len(catalog)
        assert result.failed == 0
        async with session_factory() as session:
            row = await get_card(session, "base1-4")
            assert row is not None
            assert row.embedding == [1.0, 0.0, 0.0]

    async def test_failures_skipped(
        self, session_factory: async_sessionmaker[AsyncSession], catalog
    ) -> None:
        result = await embed_all_cards(FakeEmbedder(fail_on={"Pikachu"}), session_factory)

        assert result.embedded == len(catalog) - 1
        assert result.failed == 1
        assert result.failed_cards == ["base1-58"]
        async with session_factory() as session:
            row = await get_card(session, "base1-58")
            assert row is not None
            assert row.embedding is None

    async def test_all_failed_raises(
        self, session_factory: async_sessionmaker[AsyncSession], catalog
    ) -> None:
        with pytest.raises(EmbeddingError, match="All 5"):
            await embed_all_cards(FakeEmbedder(fail_on={" is a "}), session_factory)

    async def test_only_missing(
        self, session_factory: async_sessionmaker[AsyncSession], catalog
    ) -> None:
        async with session_factory() as session:
            await set_card_embedding(session, "base1-4", [0.0, 1.0])
            await session.commit()

        embedder = FakeEmbedder()
        result = await embed_all_cards(embedder, session_factory, only_missing=True)

        assert result.embedded == len(catalog) - 1
        assert not any(text.startswith("Charizard") for text in embedder.calls)

    async def test_empty_catalog(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        result = await embed_all_cards(FakeEmbedder(), session_factory)
        assert (result.embedded, result.failed) == (0, 0)


class TestIndexCard:
    async def test_unknown_card(self, session: AsyncSession) -> None:
        with pytest.raises(NotFoundError):
            await index_card(session, "nope", [1.0])
