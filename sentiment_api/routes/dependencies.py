"""Shared dependency injection for all routes."""

from fastapi import HTTPException, Request

from sentiment_api.storage import StoreHandle


def get_store_handle(request: Request) -> StoreHandle:
    """Get the store handle created in the app lifespan."""
    store = getattr(request.app.state, "store", None)
    if store is None:
        raise HTTPException(status_code=503, detail="Cache store is not initialized")
    return store
