"""
Health check endpoint.

Liveness only: the service has no database, and the catalog and model
provider are checked lazily by the requests that need them.
"""

from fastapi import APIRouter
from pydantic import BaseModel

from deckcoach.config import settings

router = APIRouter(tags=["health"])


class HealthResponse(BaseModel):
    """Health check response."""

    status: str
    llm_configured: bool


@router.get("/health", response_model=HealthResponse)
async def health() -> HealthResponse:
    """
    Liveness probe.

    Returns healthy if the service is running, and whether an
    Anthropic API key is configured.
    """
    return HealthResponse(status="healthy", llm_configured=bool(settings.anthropic_api_key))
