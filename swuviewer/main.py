import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager
from importlib.metadata import version as pkg_version

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from swuviewer.api import cards_router, decks_router, health_router
from swuviewer.api.dependencies import build_viewer, create_http_client
from swuviewer.config import settings

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    """Application lifespan handler for startup/shutdown."""
    async with create_http_client() as client:
        app.state.viewer = build_viewer(client)
        failures = await app.state.viewer.catalog.preload_all()
        if failures:
            logger.warning("Card data unavailable for sets: %s", ", ".join(sorted(failures)))
        yield


app = FastAPI(
    title=settings.app_name,
    version=pkg_version("swuviewer"),
    lifespan=lifespan,
)

app.include_router(cards_router)
app.include_router(decks_router)
app.include_router(health_router)

app.add_middleware(
    CORSMiddleware,
    allow_origins=["*"],
    allow_credentials=False,
    allow_methods=["*"],
    allow_headers=["*"],
)
