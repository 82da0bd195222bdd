"""Tests for advisor API endpoints."""

from unittest.mock import AsyncMock, MagicMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from pokedeck.api.advisor import get_completer, get_embedder
from pokedeck.db.database import get_session
from pokedeck.db.operations import set_card_embedding
from pokedeck.main import app
from pokedeck.models.db import CollectionEntryDB
from pokedeck.models.failure import EmbeddingError
from pokedeck.services.similarity import EmbedResult


@pytest.fixture
def embedder() -> AsyncMock:
    mock = AsyncMock()
    mock.embed.return_value = [1.0, 0.0]
    return mock


@pytest.fixture
def completer() -> AsyncMock:
    mock = AsyncMock()
    mock.complete.return_value = "Build around Charizard."
    return mock


@pytest.fixture
async def client(session_factory, catalog, embedder, completer):
    """Test client with database and model collaborators overridden."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session
    app.dependency_overrides[get_embedder] = lambda: embedder
    app.dependency_overrides[get_completer] = lambda: completer

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
async def owned_cards(session_factory, catalog) -> None:
    async with session_factory() as session:
        session.add(CollectionEntryDB(user_id="ash", card_id="base1-4", quantity=1))
        session.add(CollectionEntryDB(user_id="ash", card_id="base1-58", quantity=1))
        await set_card_embedding(session, "base1-4", [1.0, 0.0])
        await set_card_embedding(session, "base1-58", [0.0, 1.0])
        await session.commit()


class TestSearch:
    async def test_ranked_results(self, client: AsyncClient, owned_cards) -> None:
        response = await client.get("/advisor/ash/search", params={"q": "fire attacker"})

        assert response.status_code == 200
        results = response.json()["results"]
        assert [r["card"]["id"] for r in results] == ["base1-4", "base1-58"]
        assert results[0]["score"] == pytest.approx(1.0)
        assert results[1]["score"] == pytest.approx(0.0)

    async def test_other_user_sees_nothing(self, client: AsyncClient, owned_cards) -> None:
        response = await client.get("/advisor/misty/search", params={"q": "fire"})
        assert response.json()["results"] == []

    async def test_query_required(self, client: AsyncClient) -> None:
        response = await client.get("/advisor/ash/search")
        assert response.status_code == 422

    async def test_embedding_failure_is_502(
        self, client: AsyncClient, owned_cards, embedder
    ) -> None:
        embedder.embed.side_effect = EmbeddingError("down")

        response = await client.get("/advisor/ash/search", params={"q": "fire"})

        assert response.status_code == 502


class TestAdvice:
    async def test_advice(self, client: AsyncClient, owned_cards) -> None:
        response = await client.get("/advisor/ash/advice", params={"question": "What should I build?"})

        assert response.status_code == 200
        assert response.json() == {
            "answer": "Build around Charizard.",
            "relevant_cards": ["Charizard", "Pikachu"],
        }

    async def test_no_cards(self, client: AsyncClient, completer) -> None:
        response = await client.get("/advisor/nobody/advice", params={"question": "Help?"})

        assert response.status_code == 200
        assert response.json()["relevant_cards"] == []
        completer.complete.assert_not_awaited()


class TestEmbed:
    async def test_embed(self, client: AsyncClient, embedder) -> None:
        with patch(
            "pokedeck.api.advisor.embed_all_cards",
            new_callable=AsyncMock,
            return_value=EmbedResult(embedded=4, failed=1, failed_cards=["x"]),
        ) as embed_all:
            response = await client.post("/advisor/embed")

        assert response.status_code == 200
        assert response.json() == {"embedded": 4, "failed": 1}
        embed_all.assert_awaited_once_with(embedder, only_missing=False)

    async def test_all_failed_is_502(self, client: AsyncClient) -> None:
        with patch(
            "pokedeck.api.advisor.embed_all_cards",
            new_callable=AsyncMock,
            side_effect=EmbeddingError("All 5 card embeddings failed"),
        ):
            response = await client.post("/advisor/embed")

        assert response.status_code == 502


class TestNotConfigured:
    async def test_missing_embedding_key_is_503(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setattr(
            "pokedeck.api.advisor.get_embedding_client", lambda: MagicMock(configured=False)
        )

        transport = ASGITransport(app=app)
        async with AsyncClient(transport=transport, base_url="http://test") as client:
            response = await client.post("/advisor/embed")

        assert response.status_code == 503
        assert response.json()["failure"]["kind"] == "service_unavailable"
