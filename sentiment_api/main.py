"""FastAPI application entrypoint."""

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from sentiment_api import __version__
from sentiment_api.routes import health, predictions, root, sentiment
from sentiment_api.storage import create_store_handle

logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Create the cache store handle on startup and close it on shutdown."""
    app.state.store = create_store_handle()
    logger.info("Cache store handle ready")
    try:
        yield
    finally:
        app.state.store.close()


app = FastAPI(
    title="Sentiment API",
    description="News sentiment jobs and price direction predictions",
    version=__version__,
    lifespan=lifespan,
)

app.include_router(root.router)
app.include_router(health.router, prefix="/health", tags=["health"])
app.include_router(sentiment.router, prefix="/sentiment", tags=["sentiment"])
app.include_router(predictions.router, prefix="/predictions", tags=["predictions"])
