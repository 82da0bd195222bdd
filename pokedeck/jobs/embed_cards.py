"""
Embed catalog cards.

Computes a vector for every catalog card (or only those without one)
and stores it for similarity search.
"""

import argparse
import asyncio
import logging

from pokedeck.ml.embeddings import get_embedding_client
from pokedeck.models.failure import ServiceUnavailableError
from pokedeck.services.similarity import EmbedResult, embed_all_cards

logger = logging.getLogger(__name__)


async def run_embedding(only_missing: bool = False) -> EmbedResult:
    """Embed cards with the configured embedding client."""
    client = get_embedding_client()
    if not client.configured:
        raise ServiceUnavailableError("Embedding API key is not configured")
    return await embed_all_cards(client, only_missing=only_missing)


def main(argv: list[str] | None = None) -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Embed catalog cards for similarity search")
    parser.add_argument(
        "--missing-only",
        action="store_true",
        help="Only embed cards that have no vector yet",
    )
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    result = asyncio.run(run_embedding(only_missing=args.missing_only))
    logger.info("Embedded %d cards, %d failed", result.embedded, result.failed)


if __name__ == "__main__":
    main()
