"""
DeckCoach services.

Catalog lookups, deck resolution, prompt assembly, and analysis streaming.
"""

from deckcoach.services.analysis_consumer import (
    AnalysisClient,
    AnalysisRequestError,
    AnalysisTracker,
    read_ndjson_content,
    read_raw_text,
)
from deckcoach.services.analysis_stream import (
    AnalysisStreamError,
    AnalysisStreamService,
    create_stream_service,
)
from deckcoach.services.card_presentation import (
    all_legalities,
    group_cards_by_type,
    relevant_legalities,
)
from deckcoach.services.catalog_client import (
    CardNotFoundError,
    CatalogCache,
    CatalogClient,
    CatalogError,
    CatalogTransportError,
    CatalogUnavailableError,
)
from deckcoach.services.deck_context import (
    DeckContextSummary,
    DeckStats,
    compute_deck_stats,
    mana_value,
    summarize,
)
from deckcoach.services.deck_resolver import (
    REQUEST_SPACING_SECONDS,
    resolve_deck_cards,
    unique_card_names,
)
from deckcoach.services.prompts import (
    TemplateNotFoundError,
    build_card_prompt,
    build_deck_prompt,
    build_strategy_prompt,
    load_prompt,
    substitute,
)

__all__ = [
    "REQUEST_SPACING_SECONDS",
    "AnalysisClient",
    "AnalysisRequestError",
    "AnalysisStreamError",
    "AnalysisStreamService",
    "AnalysisTracker",
    "CardNotFoundError",
    "CatalogCache",
    "CatalogClient",
    "CatalogError",
    "CatalogTransportError",
    "CatalogUnavailableError",
    "DeckContextSummary",
    "DeckStats",
    "TemplateNotFoundError",
    "all_legalities",
    "build_card_prompt",
    "build_deck_prompt",
    "build_strategy_prompt",
    "compute_deck_stats",
    "create_stream_service",
    "group_cards_by_type",
    "load_prompt",
    "mana_value",
    "read_ndjson_content",
    "read_raw_text",
    "relevant_legalities",
    "resolve_deck_cards",
    "substitute",
    "summarize",
    "unique_card_names",
]
