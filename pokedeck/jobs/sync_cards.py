"""
Catalog sync job.

Pulls pages of cards from the Pokémon TCG API and upserts them into the
card catalog. Used by the /cards/sync endpoints, the daily scheduler and
the command line.

A page that cannot be fetched or stored is logged and skipped; the run
carries on with the next page. Each page is stored in its own
transaction, so a failure later in the run never undoes pages already
stored.
"""

import argparse
import asyncio
import logging
from collections.abc import Awaitable, Callable
from dataclasses import dataclass, field
from enum import Enum
from typing import Any

import httpx
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from pokedeck.config import settings
from pokedeck.db.database import session_scope
from pokedeck.db.operations import upsert_card
from pokedeck.models.failure import UpstreamError
from pokedeck.parsers.pokemon_tcg import CardPayloadError, parse_card
from pokedeck.sources.pokemon_tcg import (
    MAX_PAGE_SIZE,
    PageFilter,
    create_client,
    fetch_card_page,
)

logger = logging.getLogger(__name__)

DEFAULT_FORMAT_PAGES = 5

# Until-short-page runs give up after this many failed pages in a row
DEFAULT_MAX_CONSECUTIVE_FAILURES = 3


class SyncMode(str, Enum):
    """How a sync run decides it has fetched enough pages."""

    # Fetch pages 1..max_pages, whatever they contain
    FIXED_PAGES = "fixed_pages"

    # Keep going until a page comes back with fewer cards than requested
    UNTIL_SHORT_PAGE = "until_short_page"


@dataclass
class SyncResult:
    """
    Outcome of a sync run.

    Attributes:
        synced: Cards upserted (inserts and updates count the same)
        pages_fetched: Pages fetched and stored
        pages_failed: Pages that could not be fetched or stored
        failed_pages: Page numbers that failed
        cards_skipped: Cards dropped because their payload was unusable
    """

    synced: int = 0
    pages_fetched: int = 0
    pages_failed: int = 0
    failed_pages: list[int] = field(default_factory=list)
    cards_skipped: int = 0


async def store_page(
    raw_cards: list[dict[str, Any]],
    session_factory: async_sessionmaker[AsyncSession] | None = None,
) -> tuple[int, int]:
    """
    Normalize and upsert one page of cards in a single transaction.

    Returns:
        Tuple of (cards upserted, cards skipped)
    """
    synced = 0
    skipped = 0

    async with session_scope(session_factory) as session:
        for raw in raw_cards:
            try:
                card = parse_card(raw)
            except CardPayloadError as e:
                logger.warning("Skipping card: %s", e)
                skipped += 1
                continue
            await upsert_card(session, card)
            synced += 1

    return synced, skipped


async def run_sync(
    page_filter: PageFilter | None = None,
    max_pages: int | None = 1,
    *,
    mode: SyncMode = SyncMode.FIXED_PAGES,
    page_size: int | None = None,
    page_delay: float | None = None,
    max_consecutive_failures: int = DEFAULT_MAX_CONSECUTIVE_FAILURES,
    client: httpx.AsyncClient | None = None,
    session_factory: async_sessionmaker[AsyncSession] | None = None,
    sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
) -> SyncResult:
    """
    Sync cards from the catalog into the local store.

    Args:
        page_filter: Which cards to pull. Defaults to all cards.
        max_pages: Number of pages for FIXED_PAGES (required, >= 1).
            Optional safety bound for UNTIL_SHORT_PAGE.
        mode: Page termination strategy
        page_size: Cards per page. Defaults to settings.sync_page_size.
        page_delay: Seconds to wait between page requests. Defaults to
            settings.sync_page_delay for filtered runs and 0 otherwise.
        max_consecutive_failures: UNTIL_SHORT_PAGE stops after this many
            failed pages in a row
        client: HTTP client to reuse. One is created if omitted.
        session_factory: Session factory for storage. Defaults to the
            application's factory.
        sleep: Awaitable used for the pacing delay

    Returns:
        SyncResult with counts for the run

    Raises:
        UpstreamError: If every attempted page failed
        ValueError: If the page bounds are invalid
    """
    page_filter = page_filter or PageFilter.all()
    size = page_size or settings.sync_page_size
    size = min(size, MAX_PAGE_SIZE)

    if mode is SyncMode.FIXED_PAGES and (max_pages is None or max_pages < 1):
        raise ValueError("max_pages must be at least 1 for a fixed-page sync")
    if max_pages is not None and max_pages < 1:
        raise ValueError("max_pages must be at least 1")

    if page_delay is None:
        page_delay = settings.sync_page_delay if page_filter.is_filtered else 0.0

    logger.info(
        "Starting sync of %s (mode=%s, max_pages=%s, page_size=%d)",
        page_filter.describe(),
        mode.value,
        max_pages,
        size,
    )

    owns_client = client is None
    http = client or create_client()
    result = SyncResult()
    consecutive_failures = 0
    page = 1

    try:
        while max_pages is None or page <= max_pages:
            if page > 1 and page_delay > 0:
                await sleep(page_delay)

            logger.info("Fetching page %d...", page)
            try:
                card_page = await fetch_card_page(http, page, size, page_filter)
                synced, skipped = await store_page(card_page.data, session_factory)
            except (UpstreamError, SQLAlchemyError) as e:
                logger.warning("Skipping page %d: %s", page, e)
                result.pages_failed += 1
                result.failed_pages.append(page)
                consecutive_failures += 1
                if (
                    mode is SyncMode.UNTIL_SHORT_PAGE
                    and consecutive_failures >= max_consecutive_failures
                ):
                    logger.error(
                        "Stopping sync after %d consecutive failed pages", consecutive_failures
                    )
                    break
                page += 1
                continue

            consecutive_failures = 0
            result.pages_fetched += 1
            result.synced += synced
            result.cards_skipped += skipped
            logger.info(
                "Page %d complete (%d cards). Total synced: %d",
                page,
                len(card_page.data),
                result.synced,
            )

            if mode is SyncMode.UNTIL_SHORT_PAGE and len(card_page.data) < size:
                break
            page += 1
    finally:
        if owns_client:
            await http.aclose()

    if result.pages_fetched == 0 and result.pages_failed > 0:
        raise UpstreamError(
            f"All {result.pages_failed} page fetches failed for {page_filter.describe()}"
        )

    logger.info(
        "Sync complete. Synced %d cards from %d pages (%d pages failed)",
        result.synced,
        result.pages_fetched,
        result.pages_failed,
    )
    return result


async def sync_cards(pages: int = 1, **kwargs: Any) -> SyncResult:
    """Unfiltered sync of a fixed number of pages, without pacing."""
    return await run_sync(
        PageFilter.all(),
        pages,
        mode=SyncMode.FIXED_PAGES,
        page_delay=kwargs.pop("page_delay", 0.0),
        **kwargs,
    )


async def sync_format_legal(
    format_name: str, pages: int = DEFAULT_FORMAT_PAGES, **kwargs: Any
) -> SyncResult:
    """Paced sync of a fixed number of pages of cards legal in a format."""
    return await run_sync(
        PageFilter.legal_in(format_name),
        pages,
        mode=SyncMode.FIXED_PAGES,
        **kwargs,
    )


async def sync_set(set_name: str, max_pages: int | None = None, **kwargs: Any) -> SyncResult:
    """Paced sync of one set, page by page until the set is exhausted."""
    return await run_sync(
        PageFilter.in_set(set_name),
        max_pages,
        mode=SyncMode.UNTIL_SHORT_PAGE,
        **kwargs,
    )


def main(argv: list[str] | None = None) -> None:
    """CLI entry point for running a catalog sync."""
    parser = argparse.ArgumentParser(description="Sync cards from the Pokémon TCG API")
    group = parser.add_mutually_exclusive_group()
    group.add_argument("--format", dest="format_name", help="Only cards legal in this format")
    group.add_argument("--set", dest="set_name", help="Only cards from this set (all pages)")
    parser.add_argument("--pages", type=int, default=None, help="Number of pages to fetch")
    args = parser.parse_args(argv)

    logging.basicConfig(
        level=logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    if args.set_name:
        job = sync_set(args.set_name, max_pages=args.pages)
    elif args.format_name:
        job = sync_format_legal(args.format_name, pages=args.pages or DEFAULT_FORMAT_PAGES)
    else:
        job = sync_cards(pages=args.pages or 1)

    result = asyncio.run(job)
    logger.info("Synced %d cards", result.synced)


if __name__ == "__main__":
    main()
