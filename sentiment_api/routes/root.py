"""Root endpoint."""

from fastapi import APIRouter

from sentiment_api import __version__

router = APIRouter(tags=["root"])


@router.get("/")
def read_root() -> dict:
    """Service identity."""
    return {"message": "Hello from Sentiment API", "service": "sentiment-api", "version": __version__}
