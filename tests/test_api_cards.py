"""Tests for card catalog API endpoints."""

from unittest.mock import AsyncMock, patch

import pytest
from httpx import ASGITransport, AsyncClient

from pokedeck.db.database import get_session
from pokedeck.jobs.sync_cards import SyncResult
from pokedeck.main import app
from pokedeck.models.failure import UpstreamError


@pytest.fixture
async def client(session_factory, catalog):
    """Provide an async test client with overridden database session."""

    async def override_get_session():
        async with session_factory() as session:
            try:
                yield session
                await session.commit()
            except Exception:
                await session.rollback()
                raise

    app.dependency_overrides[get_session] = override_get_session

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


class TestCardQueries:
    async def test_list(self, client: AsyncClient) -> None:
        response = await client.get("/cards")

        assert response.status_code == 200
        data = response.json()
        assert data["count"] == 5
        names = [card["name"] for card in data["cards"]]
        assert names == sorted(names)

    async def test_get_card(self, client: AsyncClient) -> None:
        response = await client.get("/cards/base1-4")

        assert response.status_code == 200
        data = response.json()
        assert data["name"] == "Charizard"
        assert data["attacks"][0]["name"] == "Fire Spin"
        assert data["abilities"] is None
        assert data["set_name"] == "Base"

    async def test_get_missing_card(self, client: AsyncClient) -> None:
        response = await client.get("/cards/nope")
        assert response.status_code == 404

    async def test_search(self, client: AsyncClient) -> None:
        response = await client.get("/cards/search", params={"q": "energy"})

        assert response.status_code == 200
        ids = {card["id"] for card in response.json()["cards"]}
        assert ids == {"base1-98", "base1-96"}

    async def test_count(self, client: AsyncClient) -> None:
        response = await client.get("/cards/count")
        assert response.json() == {"count": 5}


class TestSync:
    async def test_sync_reports_counts(self, client: AsyncClient) -> None:
        result = SyncResult(synced=40, pages_fetched=4, pages_failed=1, failed_pages=[2])
        with patch("pokedeck.api.cards.sync_cards", new_callable=AsyncMock, return_value=result) as sync:
            response = await client.post("/cards/sync", params={"pages": 5})

        assert response.status_code == 200
        assert response.json()["synced"] == 40
        assert response.json()["failed_pages"] == [2]
        sync.assert_awaited_once_with(pages=5)

    async def test_sync_all_failed_is_502(self, client: AsyncClient) -> None:
        with patch(
            "pokedeck.api.cards.sync_cards",
            new_callable=AsyncMock,
            side_effect=UpstreamError("All 1 page fetches failed"),
        ):
            response = await client.post("/cards/sync")

        assert response.status_code == 502

    async def test_sync_format(self, client: AsyncClient) -> None:
        with patch(
            "pokedeck.api.cards.sync_format_legal",
            new_callable=AsyncMock,
            return_value=SyncResult(synced=10, pages_fetched=2),
        ) as sync:
            response = await client.post("/cards/sync/standard", params={"pages": 2})

        assert response.status_code == 200
        sync.assert_awaited_once_with("standard", pages=2)

    async def test_sync_invalid_format(self, client: AsyncClient) -> None:
        response = await client.post("/cards/sync/modern")

        assert response.status_code == 400
        assert "Invalid format" in response.json()["detail"]

    async def test_sync_set(self, client: AsyncClient) -> None:
        with patch(
            "pokedeck.api.cards.sync_set",
            new_callable=AsyncMock,
            return_value=SyncResult(synced=102, pages_fetched=1),
        ) as sync:
            response = await client.post("/cards/sync/set", params={"name": "Base"})

        assert response.status_code == 200
        assert response.json()["synced"] == 102
        sync.assert_awaited_once_with("Base")

    async def test_sync_set_requires_name(self, client: AsyncClient) -> None:
        response = await client.post("/cards/sync/set")
        assert response.status_code == 422
