"""
Card resolution endpoint.

Resolves every card of a deck against Scryfall and returns the merged
records along with the names that could not be resolved.
"""

import logging
from typing import Annotated, Any

from fastapi import APIRouter, Depends
from pydantic import Field

from deckcoach.api.dependencies import get_catalog_client
from deckcoach.config import settings
from deckcoach.models.deck import CamelModel, DeckSlotEntry
from deckcoach.models.resolution import ResolutionProgress
from deckcoach.services.catalog_client import CatalogClient
from deckcoach.services.deck_resolver import resolve_deck_cards

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/cards", tags=["cards"])


class ResolveRequest(CamelModel):
    """Request body for deck resolution."""

    main_deck: list[DeckSlotEntry] = Field(default_factory=list)
    sideboard: list[DeckSlotEntry] = Field(default_factory=list)


class CardFetchError(CamelModel):
    card_name: str
    error: str


class ResolveResponse(CamelModel):
    """Resolved cards in resolver order, plus per-section splits and failures."""

    cards: list[dict[str, Any]]
    main_deck: list[dict[str, Any]]
    sideboard: list[dict[str, Any]]
    errors: list[CardFetchError]


def _log_progress(progress: ResolutionProgress) -> None:
    logger.debug(
        "Resolving card %d/%d: %s",
        progress.current,
        progress.total,
        progress.card_name,
    )


@router.post("/resolve", response_model=ResolveResponse)
async def resolve_cards(
    request: ResolveRequest,
    client: Annotated[CatalogClient, Depends(get_catalog_client)],
) -> ResolveResponse:
    """
    Fetch catalog data for every card in a deck.

    Lookups run one at a time with a fixed spacing between them.
    Cards that fail to resolve are listed in errors; they never fail
    the whole request.
    """
    resolution = await resolve_deck_cards(
        client,
        request.main_deck,
        request.sideboard,
        on_progress=_log_progress,
        spacing=settings.catalog_request_spacing_seconds,
    )

    return ResolveResponse(
        cards=[card.to_payload() for card in resolution.cards],
        main_deck=[card.to_payload() for card in resolution.main_deck],
        sideboard=[card.to_payload() for card in resolution.sideboard],
        errors=[
            CardFetchError(card_name=failure.card_name, error=failure.error)
            for failure in resolution.errors
        ],
    )
