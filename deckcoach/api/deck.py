"""Deck definition endpoint."""

from fastapi import APIRouter

from deckcoach.config import settings
from deckcoach.models.deck import Deck, load_deck

router = APIRouter(prefix="/deck", tags=["deck"])


@router.get("", response_model=Deck)
async def get_deck() -> Deck:
    """
    Load the static deck definition.

    Returns 404 if deck.json does not exist.
    """
    return load_deck(settings.deck_path)
