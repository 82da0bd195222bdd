"""
Embedding client.

Turns card and question text into fixed-length vectors by calling an
OpenAI-compatible /embeddings endpoint. Anything satisfying the
EmbeddingGenerator protocol can be used in its place.
"""

from typing import Protocol

import httpx

from pokedeck.config import settings
from pokedeck.models.failure import EmbeddingError


class EmbeddingGenerator(Protocol):
    """Text in, vector out."""

    async def embed(self, text: str) -> list[float]: ...


class HttpEmbeddingClient:
    """
    Client for an OpenAI-compatible embeddings API.

    Sends one text per request and returns its vector.
    """

    def __init__(
        self,
        base_url: str | None = None,
        api_key: str | None = None,
        model: str | None = None,
        timeout: float = 30.0,
    ) -> None:
        """
        Initialize the embedding client.

        Args:
            base_url: API base URL. Defaults to settings.embedding_api_url.
            api_key: Bearer token. Defaults to settings.embedding_api_key.
            model: Embedding model name. Defaults to settings.embedding_model.
            timeout: Request timeout in seconds.
        """
        self.base_url = (base_url or settings.embedding_api_url).rstrip("/")
        self.api_key = settings.embedding_api_key if api_key is None else api_key
        self.model = model or settings.embedding_model
        self.timeout = timeout

    @property
    def configured(self) -> bool:
        return bool(self.api_key)

    async def embed(self, text: str) -> list[float]:
        """
        Get the embedding vector for a text.

        Raises:
            EmbeddingError: If the request fails or the response has no vector
        """
        headers = {"Authorization": f"Bearer {self.api_key}"} if self.api_key else {}

        try:
            async with httpx.AsyncClient(timeout=self.timeout) as client:
                response = await client.post(
                    f"{self.base_url}/embeddings",
                    json={"model": self.model, "input": text},
                    headers=headers,
                )
                response.raise_for_status()
                data = response.json()
        except httpx.HTTPStatusError as e:
            raise EmbeddingError(f"Embedding request failed: HTTP {e.response.status_code}") from e
        except httpx.HTTPError as e:
            raise EmbeddingError(f"Embedding request failed: {e}") from e
        except ValueError as e:
            raise EmbeddingError("Embedding response was not valid JSON") from e

        try:
            vector = data["data"][0]["embedding"]
        except (KeyError, IndexError, TypeError) as e:
            raise EmbeddingError("Embedding response has no vector") from e

        if not isinstance(vector, list) or not vector:
            raise EmbeddingError("Embedding response has an empty vector")

        try:
            return [float(x) for x in vector]
        except (TypeError, ValueError) as e:
            raise EmbeddingError("Embedding response has a non-numeric vector") from e


# Default client instance
_client: HttpEmbeddingClient | None = None


def get_embedding_client() -> HttpEmbeddingClient:
    """
    Get the default embedding client instance.

    Returns:
        Singleton HttpEmbeddingClient instance
    """
    global _client
    if _client is None:
        _client = HttpEmbeddingClient()
    return _client


def reset_embedding_client() -> None:
    """Drop the default instance so the next call re-reads settings."""
    global _client
    _client = None
