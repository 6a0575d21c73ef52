from dataclasses import dataclass, field

from deckcoach.models.card import DeckSection, ResolvedCard


@dataclass(frozen=True, slots=True)
class ResolutionProgress:
    """Position of a resolution pass, reported before each lookup (1-based)."""

    total: int
    current: int
    card_name: str


@dataclass(frozen=True, slots=True)
class ResolutionFailure:
    """A unique card name whose catalog lookup failed."""

    card_name: str
    error: str


@dataclass
class DeckResolution:
    """
    Outcome of one resolution pass.

    Every unique name lands in exactly one of the two lists: its
    ResolvedCard entries in cards, or a single entry in errors.
    """

    cards: list[ResolvedCard] = field(default_factory=list)
    errors: list[ResolutionFailure] = field(default_factory=list)

    @property
    def main_deck(self) -> list[ResolvedCard]:
        return [card for card in self.cards if card.section is DeckSection.MAIN]

    @property
    def sideboard(self) -> list[ResolvedCard]:
        return [card for card in self.cards if card.section is DeckSection.SIDEBOARD]

    @property
    def failed_names(self) -> set[str]:
        return {failure.card_name for failure in self.errors}
