"""
Seed the catalog with the bundled sample cards.

Safe to run repeatedly: cards are upserted by id.
"""

import asyncio
import logging

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pokedeck.db.database import init_db, session_scope
from pokedeck.db.operations import upsert_card
from pokedeck.services.sample_cards import get_sample_cards

logger = logging.getLogger(__name__)


async def seed_cards(session_factory: async_sessionmaker[AsyncSession] | None = None) -> int:
    """
    Upsert the sample cards.

    Returns:
        Number of cards written
    """
    cards = get_sample_cards()
    async with session_scope(session_factory) as session:
        for card in cards:
            await upsert_card(session, card)
            logger.debug("Seeded %s (%s)", card.name, card.id)
    logger.info("Seeded %d sample cards", len(cards))
    return len(cards)


async def run_seed() -> int:
    await init_db()
    return await seed_cards()


def main() -> None:
    """CLI entry point."""
    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )
    asyncio.run(run_seed())


if __name__ == "__main__":
    main()
