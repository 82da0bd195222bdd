"""
Pokémon TCG API page fetcher.

Fetches one page of cards at a time from the catalog's /cards endpoint,
optionally narrowed by a query expression. Every failure to obtain a
usable page (timeout, transport error, HTTP error status, malformed
body) is reported as UpstreamError so callers can skip the page.
"""

from dataclasses import dataclass, field
from typing import Any

import httpx

from pokedeck.config import settings
from pokedeck.models.failure import UpstreamError

USER_AGENT = "PokeDeck/1.0"

# The catalog refuses page sizes above this
MAX_PAGE_SIZE = 250

# Formats understood by the catalog's legalities field
VALID_FORMATS = frozenset({"standard", "expanded", "unlimited"})

# Filtered queries return newest sets first
FILTERED_ORDER_BY = "-set.releaseDate"


@dataclass(frozen=True)
class PageFilter:
    """
    Selects which cards a sync pulls from the catalog.

    Use the constructors rather than building one directly:
    PageFilter.all(), PageFilter.legal_in("standard"),
    PageFilter.in_set("Base").
    """

    kind: str = "all"
    value: str | None = None

    @classmethod
    def all(cls) -> "PageFilter":
        return cls()

    @classmethod
    def legal_in(cls, format_name: str) -> "PageFilter":
        fmt = format_name.strip().lower()
        if fmt not in VALID_FORMATS:
            raise ValueError(f"Invalid format: {format_name}. Must be one of {sorted(VALID_FORMATS)}")
        return cls(kind="format", value=fmt)

    @classmethod
    def in_set(cls, set_name: str) -> "PageFilter":
        name = set_name.strip()
        if not name:
            raise ValueError("Set name cannot be empty")
        return cls(kind="set", value=name)

    @property
    def is_filtered(self) -> bool:
        return self.kind != "all"

    @property
    def query(self) -> str | None:
        """Catalog query expression, or None for an unfiltered listing."""
        if self.kind == "format":
            return f"legalities.{self.value}:legal"
        if self.kind == "set":
            escaped = (self.value or "").replace('"', '\\"')
            return f'set.name:"{escaped}"'
        return None

    def describe(self) -> str:
        if self.kind == "format":
            return f"{self.value}-legal cards"
        if self.kind == "set":
            return f"set '{self.value}'"
        return "all cards"


@dataclass
class CardPage:
    """One page of raw card objects as returned by the catalog."""

    data: list[dict[str, Any]] = field(default_factory=list)
    page: int = 1
    page_size: int = MAX_PAGE_SIZE
    count: int = 0
    total_count: int = 0


def create_client(
    api_key: str | None = None,
    timeout: float | None = None,
) -> httpx.AsyncClient:
    """
    Build an HTTP client for the catalog.

    The API key header is sent only when a key is configured. The timeout
    bounds each page request.
    """
    key = settings.pokemon_tcg_api_key if api_key is None else api_key
    headers = {"User-Agent": USER_AGENT}
    if key:
        headers["X-Api-Key"] = key

    return httpx.AsyncClient(
        headers=headers,
        follow_redirects=True,
        timeout=settings.sync_page_timeout if timeout is None else timeout,
    )


def build_params(page: int, page_size: int, page_filter: PageFilter) -> dict[str, Any]:
    """Query parameters for one page request."""
    params: dict[str, Any] = {"page": page, "pageSize": page_size}
    query = page_filter.query
    if query is not None:
        params["q"] = query
        params["orderBy"] = FILTERED_ORDER_BY
    return params


async def fetch_card_page(
    client: httpx.AsyncClient,
    page: int,
    page_size: int = MAX_PAGE_SIZE,
    page_filter: PageFilter | None = None,
    base_url: str | None = None,
) -> CardPage:
    """
    Fetch one page of cards.

    Args:
        client: HTTP client (see create_client)
        page: 1-based page number
        page_size: Cards per page, at most MAX_PAGE_SIZE
        page_filter: Which cards to list. Defaults to all cards.
        base_url: Catalog API root. Defaults to settings.pokemon_tcg_api_url.

    Returns:
        The page as reported by the catalog

    Raises:
        UpstreamError: If the page could not be fetched or parsed
    """
    if not 1 <= page_size <= MAX_PAGE_SIZE:
        raise ValueError(f"page_size must be between 1 and {MAX_PAGE_SIZE}")

    url = f"{(base_url or settings.pokemon_tcg_api_url).rstrip('/')}/cards"
    params = build_params(page, page_size, page_filter or PageFilter.all())

    try:
        response = await client.get(url, params=params)
        response.raise_for_status()
        body = response.json()
    except httpx.TimeoutException as e:
        raise UpstreamError(f"Timed out fetching page {page}", page=page) from e
    except httpx.HTTPStatusError as e:
        raise UpstreamError(
            f"Failed to fetch page {page}: HTTP {e.response.status_code}", page=page
        ) from e
    except httpx.RequestError as e:
        raise UpstreamError(f"Failed to fetch page {page}: {e}", page=page) from e
    except ValueError as e:
        raise UpstreamError(f"Page {page} returned a malformed body", page=page) from e

    data = body.get("data") if isinstance(body, dict) else None
    if not isinstance(data, list):
        raise UpstreamError(f"Page {page} response has no data array", page=page)

    try:
        return CardPage(
            data=data,
            page=int(body.get("page", page)),
            page_size=int(body.get("pageSize", page_size)),
            count=int(body.get("count", len(data))),
            total_count=int(body.get("totalCount", 0)),
        )
    except (TypeError, ValueError) as e:
        raise UpstreamError(f"Page {page} returned malformed page counters", page=page) from e
