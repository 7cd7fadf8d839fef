"""Health check endpoints."""

from typing import Annotated

from fastapi import APIRouter, Depends

from sentiment_api.routes.dependencies import get_store_handle
from sentiment_api.storage import StoreHandle

router = APIRouter()


@router.get("")
def health_check() -> dict:
    """Generic health check."""
    return {"status": "healthy"}


@router.get("/live")
def liveness() -> dict:
    """Liveness probe - is the process running?"""
    return {"status": "alive"}


@router.get("/ready")
def readiness(store: Annotated[StoreHandle, Depends(get_store_handle)]) -> dict:
    """Readiness probe - is the cache store handle available?"""
    return {"status": "ready", "tables": [s.schema.name for s in store.stores]}
