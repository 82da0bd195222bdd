"""
Health check endpoints.

Liveness reports the process is up. Readiness additionally checks that
the database answers and reports how many cards the catalog holds, so a
deployment can tell an empty catalog apart from a broken one.
"""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, Response, status
from pydantic import BaseModel
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from pokedeck.config import settings
from pokedeck.db.database import get_session
from pokedeck.db.operations import count_cards

logger = logging.getLogger(__name__)

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    database: str | None = None
    catalog_cards: int | None = None
    scheduled_sync: bool | None = None


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """Liveness probe. Does not touch the database."""
    return HealthResponse(status="healthy")


@router.get(
    "/ready",
    response_model=HealthResponse,
    responses={503: {"model": HealthResponse}},
)
async def ready(
    response: Response,
    session: Annotated[AsyncSession, Depends(get_session)],
) -> HealthResponse:
    """
    Readiness probe.

    Returns 503 if the database cannot be queried.
    """
    try:
        cards = await count_cards(session)
    except SQLAlchemyError as e:
        logger.warning("Readiness check failed: %s", e)
        response.status_code = status.HTTP_503_SERVICE_UNAVAILABLE
        return HealthResponse(status="not ready", database="disconnected")

    return HealthResponse(
        status="ready",
        database="connected",
        catalog_cards=cards,
        scheduled_sync=settings.scheduled_sync_enabled,
    )
