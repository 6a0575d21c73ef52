from deckcoach.api.analysis import router as analysis_router
from deckcoach.api.cards import router as cards_router
from deckcoach.api.deck import router as deck_router
from deckcoach.api.health import router as health_router

__all__ = [
    "analysis_router",
    "cards_router",
    "deck_router",
    "health_router",
]
