"""
Similarity index over card text.

Each card is described in plain text, embedded, and the vector stored on
the card row. Queries embed the question text and rank candidate cards
by cosine similarity.

Candidates are always limited to cards the asking user owns and that
have a stored vector. A card without a vector is left out rather than
scored as zero.
"""

import logging
from collections.abc import Sequence
from dataclasses import dataclass, field

import numpy as np
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pokedeck.db.database import session_scope
from pokedeck.db.operations import (
    card_to_model,
    get_card,
    get_owned_embedded_cards,
    list_card_ids,
    set_card_embedding,
)
from pokedeck.ml.embeddings import EmbeddingGenerator
from pokedeck.models.card import Card
from pokedeck.models.db import CardDB
from pokedeck.models.failure import EmbeddingError, NotFoundError

logger = logging.getLogger(__name__)

DEFAULT_SEARCH_LIMIT = 5


@dataclass
class ScoredCard:
    """A card with its similarity to a query, in [0, 1]."""

    card: Card
    score: float


@dataclass
class EmbedResult:
    """Outcome of a bulk embedding run."""

    embedded: int = 0
    failed: int = 0
    failed_cards: list[str] = field(default_factory=list)


def card_to_text(card: Card) -> str:
    """
    Describe a card in plain text for embedding.

    Sections the card does not have are left out entirely.
    """
    parts = [f"{card.name} is a {card.category}"]
    if card.subtypes:
        parts.append(f"({', '.join(card.subtypes)})")
    if card.types:
        parts.append(f"of type {'/'.join(card.types)}")
    if card.hp:
        parts.append(f"with {card.hp} HP")

    for ability in card.abilities or ():
        parts.append(f'Ability "{ability.name}": {ability.text}'.strip())

    for attack in card.attacks or ():
        line = f'Attack "{attack.name}"'
        if attack.damage:
            line += f" does {attack.damage} damage"
        if attack.text:
            line += f". {attack.text}"
        parts.append(line)

    if card.rules:
        parts.append("Rules: " + " ".join(card.rules))

    return ". ".join(part.rstrip(".") for part in parts)


def similarity_score(a: np.ndarray, b: np.ndarray) -> float:
    """Cosine similarity clamped into [0, 1]."""
    norm = float(np.linalg.norm(a) * np.linalg.norm(b))
    if norm == 0.0:
        return 0.0
    cosine = float(np.dot(a, b)) / norm
    return min(1.0, max(0.0, cosine))


def rank_cards(
    query_vector: Sequence[float],
    candidates: Sequence[CardDB],
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[ScoredCard]:
    """
    Rank candidate cards by similarity to a query vector.

    Candidates whose vector has a different length than the query (for
    example, embedded with another model) are skipped.
    """
    query = np.asarray(query_vector, dtype=float)
    scored: list[ScoredCard] = []

    for row in candidates:
        if row.embedding is None:
            continue
        vector = np.asarray(row.embedding, dtype=float)
        if vector.shape != query.shape:
            logger.warning(
                "Skipping %s: vector has %d dimensions, query has %d",
                row.id,
                vector.size,
                query.size,
            )
            continue
        scored.append(ScoredCard(card=card_to_model(row), score=similarity_score(query, vector)))

    scored.sort(key=lambda s: (-s.score, s.card.name, s.card.id))
    return scored[:limit]


async def embed_card(card: Card, embedder: EmbeddingGenerator) -> list[float]:
    """Compute a card's vector."""
    return await embedder.embed(card_to_text(card))


async def index_card(session: AsyncSession, card_id: str, vector: list[float]) -> None:
    """
    Store a card's vector.

    Raises:
        NotFoundError: If the card is not in the catalog
    """
    if not await set_card_embedding(session, card_id, vector):
        raise NotFoundError(f"Card {card_id} not found")


async def embed_all_cards(
    embedder: EmbeddingGenerator,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    only_missing: bool = False,
) -> EmbedResult:
    """
    Embed every catalog card and store the vectors.

    A card whose embedding fails is logged and skipped; the run continues.
    Each vector is committed as soon as it is computed.

    Args:
        embedder: Embedding generator
        session_factory: Session factory. Defaults to the application's.
        only_missing: Only embed cards that have no vector yet

    Raises:
        EmbeddingError: If every card failed
    """
    async with session_scope(session_factory) as session:
        card_ids = await list_card_ids(session, only_unembedded=only_missing)

    logger.info("Embedding %d cards", len(card_ids))
    result = EmbedResult()

    for card_id in card_ids:
        async with session_scope(session_factory) as session:
            row = await get_card(session, card_id)
            if row is None:
                continue
            card = card_to_model(row)
            logger.debug("Embedding: %s", card.name)

            try:
                vector = await embed_card(card, embedder)
            except EmbeddingError as e:
                logger.warning("Failed to embed %s (%s): %s", card.name, card.id, e)
                result.failed += 1
                result.failed_cards.append(card.id)
                continue

            await index_card(session, card.id, vector)
        result.embedded += 1

    if result.failed and not result.embedded:
        raise EmbeddingError(f"All {result.failed} card embeddings failed")

    logger.info("Embedded %d cards (%d failed)", result.embedded, result.failed)
    return result


async def search_similar(
    session: AsyncSession,
    embedder: EmbeddingGenerator,
    text: str,
    user_id: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> list[ScoredCard]:
    """
    Find the user's owned cards most similar to a piece of text.

    Raises:
        EmbeddingError: If the query text cannot be embedded
    """
    if limit < 1:
        return []

    candidates = await get_owned_embedded_cards(session, user_id)
    if not candidates:
        return []

    query_vector = await embedder.embed(text)
    return rank_cards(query_vector, candidates, limit)
