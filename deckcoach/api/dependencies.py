"""Shared FastAPI dependencies."""

from deckcoach.config import settings
from deckcoach.services.analysis_stream import AnalysisStreamService, create_stream_service
from deckcoach.services.catalog_client import CatalogCache, CatalogClient

# Process-wide catalog client; its cache lives as long as the process
_catalog_client: CatalogClient | None = None


def get_catalog_client() -> CatalogClient:
    """Get the process-wide catalog client."""
    global _catalog_client
    if _catalog_client is None:
        _catalog_client = CatalogClient(
            base_url=settings.scryfall_base_url,
            cache=CatalogCache(max_entries=settings.catalog_cache_max_entries),
            timeout=settings.catalog_timeout_seconds,
        )
    return _catalog_client


def reset_catalog_client() -> None:
    """Drop the process-wide catalog client and its cache (for testing)."""
    global _catalog_client
    _catalog_client = None


def get_stream_service() -> AnalysisStreamService:
    """
    Build the analysis stream service for a request.

    Raises:
        ConfigurationError: If the Anthropic API key is not configured
    """
    return create_stream_service(settings)
