import json
from pathlib import Path

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from deckcoach.models.failure import FailureKind, KnownError


class CamelModel(BaseModel):
    """Model that reads and writes camelCase JSON keys."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True)


class DeckSlotEntry(CamelModel):
    """
    One declared line of a deck list.

    Attributes:
        quantity: Number of copies in this section
        name: Card name as written in the deck definition
        type: Coarse type label from the deck definition (e.g., "Creature")
    """

    quantity: int = Field(..., ge=1)
    name: str = Field(..., min_length=1)
    type: str = ""


class DeckTotals(CamelModel):
    main_deck_cards: int
    sideboard_cards: int


class Deck(CamelModel):
    """A deck definition as stored in deck.json."""

    deck_name: str
    format: str
    last_updated: str | None = None
    main_deck: list[DeckSlotEntry] = Field(default_factory=list)
    sideboard: list[DeckSlotEntry] = Field(default_factory=list)
    totals: DeckTotals | None = None

    def maindeck_count(self) -> int:
        """Total cards in maindeck."""
        return sum(entry.quantity for entry in self.main_deck)

    def sideboard_count(self) -> int:
        """Total cards in sideboard."""
        return sum(entry.quantity for entry in self.sideboard)


class DeckNotFoundError(KnownError):
    """Raised when the deck definition file does not exist."""

    def __init__(self, path: Path):
        self.path = path
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message="deck.json not found. Please ensure it exists in the project root.",
            detail=str(path),
            status_code=404,
        )


def load_deck(path: Path) -> Deck:
    """
    Load and validate a deck definition.

    Args:
        path: Path to the deck JSON document

    Returns:
        Validated Deck

    Raises:
        DeckNotFoundError: If the file doesn't exist
        pydantic.ValidationError: If the document doesn't match the deck shape
    """
    if not path.exists():
        raise DeckNotFoundError(path)

    with open(path, encoding="utf-8") as f:
        data = json.load(f)

    return Deck.model_validate(data)
