from deckcoach.models.analysis import (
    ANALYSIS_PROFILES,
    DECK_ANALYSIS_KINDS,
    AnalysisKind,
    AnalysisProfile,
    AnalysisState,
    AnalysisStatus,
    StreamEnvelope,
    StreamFraming,
)
from deckcoach.models.card import CardFace, CatalogRecord, DeckSection, ImageUris, ResolvedCard
from deckcoach.models.deck import Deck, DeckNotFoundError, DeckSlotEntry, DeckTotals, load_deck
from deckcoach.models.failure import (
    ConfigurationError,
    FailureDetail,
    FailureKind,
    FailureResponse,
    InvalidRequestError,
    KnownError,
    OutcomeType,
)
from deckcoach.models.resolution import DeckResolution, ResolutionFailure, ResolutionProgress

__all__ = [
    "ANALYSIS_PROFILES",
    "DECK_ANALYSIS_KINDS",
    "AnalysisKind",
    "AnalysisProfile",
    "AnalysisState",
    "AnalysisStatus",
    "CardFace",
    "CatalogRecord",
    "ConfigurationError",
    "Deck",
    "DeckNotFoundError",
    "DeckResolution",
    "DeckSection",
    "DeckSlotEntry",
    "DeckTotals",
    "FailureDetail",
    "FailureKind",
    "FailureResponse",
    "ImageUris",
    "InvalidRequestError",
    "KnownError",
    "OutcomeType",
    "ResolutionFailure",
    "ResolutionProgress",
    "ResolvedCard",
    "StreamEnvelope",
    "StreamFraming",
    "load_deck",
]
