"""
Deck advice.

Answers a free-text deck building question using only cards the user
owns: the question is run through the similarity index and the matching
cards are handed to the completion model as context.
"""

import logging
from dataclasses import dataclass, field

from sqlalchemy.ext.asyncio import AsyncSession

from pokedeck.config import settings
from pokedeck.ml.completion import CompletionGenerator
from pokedeck.ml.embeddings import EmbeddingGenerator
from pokedeck.services.similarity import DEFAULT_SEARCH_LIMIT, card_to_text, search_similar

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = (
    "You are an expert Pokémon TCG deck builder who helps players optimize "
    "their decks based on the cards they own."
)

NO_RELEVANT_CARDS_ANSWER = (
    "I could not find any relevant cards in your collection. "
    "Try adding more cards or asking a different question."
)

NO_ADVICE_ANSWER = "No advice generated."


@dataclass
class Advice:
    """An answer and the names of the owned cards it was based on."""

    answer: str
    relevant_cards: list[str] = field(default_factory=list)


def build_prompt(question: str, card_texts: list[str]) -> str:
    """User prompt listing the relevant owned cards, then the question."""
    context = "\n\n".join(card_texts)
    return (
        "The user has the following relevant cards in their collection:\n\n"
        f"{context}\n\n"
        f"User question: {question}\n\n"
        "Based on these cards, provide helpful deck building advice. Be specific "
        "about which cards to use and why. Keep your response concise but informative."
    )


async def get_advice(
    session: AsyncSession,
    embedder: EmbeddingGenerator,
    completer: CompletionGenerator,
    user_id: str,
    question: str,
    limit: int = DEFAULT_SEARCH_LIMIT,
) -> Advice:
    """
    Answer a deck building question for a user.

    When none of the user's cards match, a fixed answer is returned and
    the completion model is not called.
    """
    matches = await search_similar(session, embedder, question, user_id, limit=limit)
    if not matches:
        logger.info("No relevant cards for user %s", user_id)
        return Advice(answer=NO_RELEVANT_CARDS_ANSWER)

    prompt = build_prompt(question, [card_to_text(match.card) for match in matches])
    answer = await completer.complete(SYSTEM_PROMPT, prompt, settings.advice_max_tokens)

    return Advice(
        answer=answer.strip() or NO_ADVICE_ANSWER,
        relevant_cards=[match.card.name for match in matches],
    )
