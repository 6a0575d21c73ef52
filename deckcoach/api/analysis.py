"""
Analysis endpoints.

Each endpoint assembles a prompt and streams the model's answer back as
a chunked response. Failures before the first byte (missing API key,
invalid step, missing template) are returned as JSON errors; failures
after it abort the stream.
"""

import logging
from collections.abc import Sequence
from typing import Annotated

from fastapi import APIRouter, Depends
from fastapi.responses import StreamingResponse
from pydantic import BaseModel, ConfigDict, Field

from deckcoach.api.dependencies import get_stream_service
from deckcoach.models.analysis import DECK_ANALYSIS_KINDS, AnalysisKind
from deckcoach.models.card import DeckSection, ResolvedCard
from deckcoach.models.failure import InvalidRequestError
from deckcoach.services.analysis_stream import AnalysisStreamService
from deckcoach.services.deck_context import DeckContextSummary
from deckcoach.services.prompts import build_card_prompt, build_deck_prompt, build_strategy_prompt

logger = logging.getLogger(__name__)

router = APIRouter(tags=["analysis"])


class CardPayload(BaseModel):
    """A resolved card on the wire: Scryfall fields plus quantity and declared type."""

    model_config = ConfigDict(extra="allow", populate_by_name=True)

    name: str = Field(..., min_length=1)
    quantity: int = Field(default=1, ge=1)
    mana_cost: str | None = None
    type_line: str = ""
    oracle_text: str | None = None
    deck_type: str = Field(default="", alias="deckType")

    def to_card(self, section: DeckSection = DeckSection.MAIN) -> ResolvedCard:
        payload = self.model_dump(by_alias=True)
        payload["section"] = section.value
        return ResolvedCard.from_payload(payload)


def _to_cards(payloads: Sequence[CardPayload], section: DeckSection) -> list[ResolvedCard]:
    return [payload.to_card(section) for payload in payloads]


class StrategyRequest(BaseModel):
    """Request body for the free-form strategy guide."""

    model_config = ConfigDict(populate_by_name=True)

    deck_name: str = Field(..., min_length=1, alias="deckName")
    format: str = Field(..., min_length=1)
    main_deck: list[CardPayload] = Field(..., alias="mainDeck")
    sideboard: list[CardPayload]


class AnalyzeRequest(StrategyRequest):
    """Request body for one step of the multi-step deck analysis."""

    step: str = Field(..., min_length=1)


class AnalyzeCardRequest(BaseModel):
    """Request body for single-card analysis."""

    model_config = ConfigDict(populate_by_name=True)

    card: CardPayload
    deck_context: DeckContextSummary = Field(..., alias="deckContext")
    format: str = Field(..., min_length=1)


def _deck_analysis_kind(step: str) -> AnalysisKind:
    detail = f"Unknown analysis step: {step}"
    try:
        kind = AnalysisKind(step)
    except ValueError as e:
        raise InvalidRequestError("Invalid step", detail=detail) from e
    if kind not in DECK_ANALYSIS_KINDS:
        raise InvalidRequestError("Invalid step", detail=detail)
    return kind


@router.post("/analyze")
async def analyze(
    request: AnalyzeRequest,
    service: Annotated[AnalysisStreamService, Depends(get_stream_service)],
) -> StreamingResponse:
    """
    Stream one deck analysis step as ndjson.

    The first line is a reasoning envelope naming the step; every
    following line carries one chunk of generated text.
    """
    kind = _deck_analysis_kind(request.step)
    prompt = build_deck_prompt(
        kind,
        request.deck_name,
        request.format,
        _to_cards(request.main_deck, DeckSection.MAIN),
        _to_cards(request.sideboard, DeckSection.SIDEBOARD),
    )
    logger.info("Starting %s analysis for %s", kind.value, request.deck_name)

    return StreamingResponse(
        service.stream_analysis(kind, prompt),
        media_type=kind.profile.media_type,
    )


@router.post("/analyze-card")
async def analyze_card(
    request: AnalyzeCardRequest,
    service: Annotated[AnalysisStreamService, Depends(get_stream_service)],
) -> StreamingResponse:
    """Stream a single card's analysis as plain text."""
    kind = AnalysisKind.ANALYZE_CARD
    prompt = build_card_prompt(request.card.to_card(), request.deck_context, request.format)
    logger.info("Starting card analysis for %s", request.card.name)

    return StreamingResponse(
        service.stream_analysis(kind, prompt),
        media_type=kind.profile.media_type,
    )


@router.post("/strategy")
async def strategy(
    request: StrategyRequest,
    service: Annotated[AnalysisStreamService, Depends(get_stream_service)],
) -> StreamingResponse:
    """Stream a complete strategy guide as plain text."""
    kind = AnalysisKind.STRATEGY
    prompt = build_strategy_prompt(
        request.deck_name,
        request.format,
        _to_cards(request.main_deck, DeckSection.MAIN),
        _to_cards(request.sideboard, DeckSection.SIDEBOARD),
    )
    logger.info("Starting strategy guide for %s", request.deck_name)

    return StreamingResponse(
        service.stream_analysis(kind, prompt),
        media_type=kind.profile.media_type,
    )
