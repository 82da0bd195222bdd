"""Tests for deck advice."""

from unittest.mock import AsyncMock

import pytest
from sqlalchemy.ext.asyncio import AsyncSession

from pokedeck.db.operations import set_card_embedding
from pokedeck.models.db import CollectionEntryDB
from pokedeck.models.failure import EmbeddingError
from pokedeck.services.advisor import (
    NO_ADVICE_ANSWER,
    NO_RELEVANT_CARDS_ANSWER,
    SYSTEM_PROMPT,
    build_prompt,
    get_advice,
)


@pytest.fixture
def embedder() -> AsyncMock:
    mock = AsyncMock()
    mock.embed.return_value = [1.0, 0.0]
    return mock


@pytest.fixture
def completer() -> AsyncMock:
    mock = AsyncMock()
    mock.complete.return_value = "Pair Charizard with plenty of Fire Energy."
    return mock


@pytest.fixture
async def owned_fire_cards(session: AsyncSession, catalog) -> None:
    session.add(CollectionEntryDB(user_id="ash", card_id="base1-4", quantity=2))
    session.add(CollectionEntryDB(user_id="ash", card_id="base1-98", quantity=20))
    await set_card_embedding(session, "base1-4", [1.0, 0.0])
    await set_card_embedding(session, "base1-98", [0.6, 0.8])
    await session.commit()


class TestGetAdvice:
    async def test_answers_with_owned_cards(
        self, session: AsyncSession, owned_fire_cards, embedder, completer
    ) -> None:
        advice = await get_advice(session, embedder, completer, "ash", "How do I build fire?")

        assert advice.answer == "Pair Charizard with plenty of Fire Energy."
        assert advice.relevant_cards == ["Charizard", "Fire Energy"]

        completer.complete.assert_awaited_once()
        system, prompt, max_tokens = completer.complete.await_args.args
        assert system == SYSTEM_PROMPT
        assert "Charizard is a Pokémon" in prompt
        assert "User question: How do I build fire?" in prompt
        assert max_tokens == 500

    async def test_no_relevant_cards_skips_completion(
        self, session: AsyncSession, catalog, embedder, completer
    ) -> None:
        advice = await get_advice(session, embedder, completer, "nobody", "Anything?")

        assert advice.answer == NO_RELEVANT_CARDS_ANSWER
        assert advice.relevant_cards == []
        completer.complete.assert_not_awaited()

    async def test_blank_completion(
        self, session: AsyncSession, owned_fire_cards, embedder, completer
    ) -> None:
        completer.complete.return_value = "  "

        advice = await get_advice(session, embedder, completer, "ash", "Help")

        assert advice.answer == NO_ADVICE_ANSWER
        assert advice.relevant_cards

    async def test_embedding_failure_propagates(
        self, session: AsyncSession, owned_fire_cards, embedder, completer
    ) -> None:
        embedder.embed.side_effect = EmbeddingError("down")

        with pytest.raises(EmbeddingError):
            await get_advice(session, embedder, completer, "ash", "Help")
        completer.complete.assert_not_awaited()


class TestBuildPrompt:
    def test_includes_cards_and_question(self) -> None:
        prompt = build_prompt("Which attacker?", ["Card A text", "Card B text"])

        assert "Card A text\n\nCard B text" in prompt
        assert prompt.index("Card B text") < prompt.index("User question: Which attacker?")
