"""
Deck context and statistics for analysis prompts.

Everything here is pure: derived from resolved cards, recomputed on
demand, never persisted.
"""

import re
from collections.abc import Sequence
from dataclasses import dataclass

from pydantic import BaseModel, ConfigDict, Field

from deckcoach.models.card import ResolvedCard

# Hard cap on the roll-up of card names injected into prompts
MAX_CARD_NAMES_LENGTH = 1000

TYPE_LINE_SEPARATOR = "—"

_GENERIC_COST = re.compile(r"\{(\d+)\}")
_COLORED_COST = re.compile(r"\{[WUBRGC]\}")


def mana_value(mana_cost: str) -> int:
    """
    Converted mana cost of a cost string.

    Generic symbols count their number, each colored or colorless
    symbol counts one. Hybrid, Phyrexian and X symbols count zero.

    Example: "{2}{U}{U}" -> 4
    """
    if not mana_cost:
        return 0
    generic = sum(int(n) for n in _GENERIC_COST.findall(mana_cost))
    return generic + len(_COLORED_COST.findall(mana_cost))


def is_land(type_line: str) -> bool:
    return "land" in type_line.lower()


def primary_type(type_line: str) -> str:
    """Type line text before the subtype separator (e.g., "Legendary Creature")."""
    return type_line.split(TYPE_LINE_SEPARATOR)[0].strip()


def average_mana_value(cards: Sequence[ResolvedCard]) -> float:
    """Quantity-weighted average mana value of non-land cards, unrounded."""
    total = 0
    nonland = 0
    for card in cards:
        if is_land(card.type_line):
            continue
        total += mana_value(card.mana_cost) * card.quantity
        nonland += card.quantity
    return total / nonland if nonland > 0 else 0.0


def type_distribution(cards: Sequence[ResolvedCard]) -> list[tuple[str, int]]:
    """Quantities per primary type, largest first, ties in encounter order."""
    counts: dict[str, int] = {}
    for card in cards:
        key = primary_type(card.type_line)
        counts[key] = counts.get(key, 0) + card.quantity
    return sorted(counts.items(), key=lambda item: item[1], reverse=True)


class DeckContextSummary(BaseModel):
    """Aggregate deck context sent alongside single-card analysis requests."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    format: str
    total_cards: int = Field(..., alias="totalCards")
    average_cmc: float = Field(..., alias="averageCMC")
    archetype_hints: str = Field(..., alias="archetypeHints")
    other_cards: str = Field(..., alias="otherCards")


def summarize(cards: Sequence[ResolvedCard], format_id: str) -> DeckContextSummary:
    """
    Build the deck context summary for a set of resolved cards.

    Args:
        cards: Resolved cards (any mix of sections)
        format_id: Format identifier from the deck definition

    Returns:
        DeckContextSummary with average CMC rounded to 2 decimals and the
        card name roll-up cut at MAX_CARD_NAMES_LENGTH characters
    """
    distribution = type_distribution(cards)
    names = ", ".join(card.name for card in cards)

    return DeckContextSummary(
        format=format_id,
        total_cards=sum(card.quantity for card in cards),
        average_cmc=round(average_mana_value(cards), 2),
        archetype_hints=", ".join(f"{type_name}: {count}" for type_name, count in distribution),
        other_cards=names[:MAX_CARD_NAMES_LENGTH],
    )


@dataclass(frozen=True, slots=True)
class DeckStats:
    """Headline numbers for the main deck statistics block."""

    total: int
    lands: int
    creatures: int
    instants_sorceries: int
    average_cmc: float | None

    def render(self) -> str:
        avg = f"{self.average_cmc:.2f}" if self.average_cmc is not None else "0"
        return (
            "\nDECK STATS:\n"
            f"- Total: {self.total} | Lands: {self.lands} | Avg CMC: {avg}\n"
            f"- Creatures: {self.creatures} | Instants/Sorceries: {self.instants_sorceries}\n"
        )


def compute_deck_stats(cards: Sequence[ResolvedCard]) -> DeckStats:
    total = lands = creatures = instants_sorceries = nonland = 0

    for card in cards:
        total += card.quantity
        type_line = card.type_line.lower()

        if is_land(type_line):
            lands += card.quantity
        else:
            nonland += card.quantity

        if "creature" in type_line:
            creatures += card.quantity
        if "instant" in type_line or "sorcery" in type_line:
            instants_sorceries += card.quantity

    return DeckStats(
        total=total,
        lands=lands,
        creatures=creatures,
        instants_sorceries=instants_sorceries,
        average_cmc=average_mana_value(cards) if nonland > 0 else None,
    )


def format_card_line(card: ResolvedCard) -> str:
    """'4x Lightning Bolt ({R}) - Instant' followed by indented rules text."""
    return (
        f"{card.quantity}x {card.name} ({card.mana_cost or 'N/A'}) - {card.type_line}\n"
        f"   {card.oracle_text or 'N/A'}"
    )


def format_card_list(cards: Sequence[ResolvedCard]) -> str:
    return "\n\n".join(format_card_line(card) for card in cards)
