"""
Advisor API endpoints.

Similarity search over a user's own cards and free-text deck advice.
Both need the embedding API; advice also needs the completion API.
Either one missing its key gives 503.
"""

from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, Query, status
from pydantic import BaseModel, Field
from sqlalchemy.ext.asyncio import AsyncSession

from pokedeck.api.cards import CardResponse, card_response
from pokedeck.db.database import get_session
from pokedeck.ml.completion import AnthropicCompletionClient, CompletionGenerator
from pokedeck.ml.embeddings import EmbeddingGenerator, get_embedding_client
from pokedeck.models.failure import EmbeddingError, ServiceUnavailableError
from pokedeck.services.advisor import get_advice
from pokedeck.services.similarity import embed_all_cards, search_similar

router = APIRouter(prefix="/advisor", tags=["advisor"])


def get_embedder() -> EmbeddingGenerator:
    """Dependency providing the configured embedding client."""
    client = get_embedding_client()
    if not client.configured:
        raise ServiceUnavailableError("Embedding service not configured. Set EMBEDDING_API_KEY.")
    return client


def get_completer() -> CompletionGenerator:
    """Dependency providing the configured completion client."""
    client = AnthropicCompletionClient()
    if not client.configured:
        raise ServiceUnavailableError("Advice service not configured. Set ANTHROPIC_API_KEY.")
    return client


class EmbedResponse(BaseModel):
    embedded: int
    failed: int


class ScoredCardResponse(BaseModel):
    card: CardResponse
    score: float = Field(..., ge=0.0, le=1.0)


class SearchResponse(BaseModel):
    """Response model for similarity search."""

    query: str
    results: list[ScoredCardResponse]


class AdviceResponse(BaseModel):
    """Response model for deck advice."""

    answer: str
    relevant_cards: list[str] = Field(default_factory=list)


def _embedding_failure(error: EmbeddingError) -> HTTPException:
    return HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(error))


@router.post("/embed", response_model=EmbedResponse)
async def embed_cards(
    embedder: Annotated[EmbeddingGenerator, Depends(get_embedder)],
    missing_only: bool = False,
) -> EmbedResponse:
    """
    Embed catalog cards for similarity search.

    Cards that fail are skipped and counted. Returns 502 only when every
    card failed.
    """
    try:
        result = await embed_all_cards(embedder, only_missing=missing_only)
    except EmbeddingError as e:
        raise _embedding_failure(e) from e
    return EmbedResponse(embedded=result.embedded, failed=result.failed)


@router.get("/{user_id}/search", response_model=SearchResponse)
async def search(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    embedder: Annotated[EmbeddingGenerator, Depends(get_embedder)],
    q: Annotated[str, Query(min_length=1)],
    limit: Annotated[int, Query(ge=1, le=50)] = 5,
) -> SearchResponse:
    """Find the user's owned cards most similar to the query text."""
    try:
        matches = await search_similar(session, embedder, q, user_id, limit=limit)
    except EmbeddingError as e:
        raise _embedding_failure(e) from e
    return SearchResponse(
        query=q,
        results=[ScoredCardResponse(card=card_response(m.card), score=m.score) for m in matches],
    )


@router.get("/{user_id}/advice", response_model=AdviceResponse)
async def advice(
    user_id: str,
    session: Annotated[AsyncSession, Depends(get_session)],
    embedder: Annotated[EmbeddingGenerator, Depends(get_embedder)],
    completer: Annotated[CompletionGenerator, Depends(get_completer)],
    question: Annotated[str, Query(min_length=1)],
) -> AdviceResponse:
    """Answer a deck building question using the user's own cards."""
    try:
        result = await get_advice(session, embedder, completer, user_id, question)
    except EmbeddingError as e:
        raise _embedding_failure(e) from e
    return AdviceResponse(answer=result.answer, relevant_cards=result.relevant_cards)
