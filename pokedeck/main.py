import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI, Request
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse

from pokedeck.api import (
    advisor_router,
    cards_router,
    collection_router,
    decks_router,
    health_router,
)
from pokedeck.config import settings
from pokedeck.db.database import init_db
from pokedeck.jobs.scheduler import DailySyncScheduler
from pokedeck.models.failure import KnownError

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    await init_db()

    scheduler: DailySyncScheduler | None = None
    if settings.scheduled_sync_enabled:
        scheduler = DailySyncScheduler()
        scheduler.start()

    yield

    if scheduler is not None:
        await scheduler.stop()


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("pokedeck"),
    lifespan=lifespan,
)


@app.exception_handler(KnownError)
async def known_error_handler(_request: Request, exc: KnownError) -> JSONResponse:
    """Render a known failure with its status code and classification."""
    if exc.status_code >= 500:
        logger.warning("%s: %s", exc.kind.value, exc.message)
    return JSONResponse(
        status_code=exc.status_code,
        content={"detail": exc.message, "failure": exc.to_detail().model_dump(mode="json")},
    )


app.include_router(advisor_router)
app.include_router(cards_router)
app.include_router(collection_router)
app.include_router(decks_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],  # Tighten in production
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
