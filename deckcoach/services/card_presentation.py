"""Display helpers for resolved cards: type grouping and format legalities."""

from collections.abc import Sequence

from deckcoach.models.card import CatalogRecord, ResolvedCard

TYPE_ORDER = [
    "Creature",
    "Planeswalker",
    "Instant",
    "Sorcery",
    "Enchantment",
    "Artifact",
    "Land",
    "Basic Land",
]

RELEVANT_FORMATS = [
    "standard",
    "pioneer",
    "modern",
    "legacy",
    "vintage",
    "commander",
    "pauper",
    "historic",
    "timeless",
]

ALL_FORMATS = [*RELEVANT_FORMATS, "brawl"]

MAX_RELEVANT_LEGALITIES = 3


def group_cards_by_type(cards: Sequence[ResolvedCard]) -> dict[str, list[ResolvedCard]]:
    """
    Group cards by their declared deck type.

    Known types come first in TYPE_ORDER, then any other declared types
    in the order they were first seen. Cards without a declared type
    group under "Other".
    """
    groups: dict[str, list[ResolvedCard]] = {}
    for card in cards:
        groups.setdefault(card.deck_type or "Other", []).append(card)

    ordered = {type_name: groups[type_name] for type_name in TYPE_ORDER if type_name in groups}
    for type_name, grouped in groups.items():
        ordered.setdefault(type_name, grouped)
    return ordered


def relevant_legalities(record: CatalogRecord) -> list[tuple[str, str]]:
    """Up to three formats the card is legal in, most relevant first."""
    legal = [
        (fmt.capitalize(), "legal")
        for fmt in RELEVANT_FORMATS
        if record.legalities.get(fmt) == "legal"
    ]
    return legal[:MAX_RELEVANT_LEGALITIES]


def all_legalities(record: CatalogRecord) -> list[tuple[str, str]]:
    """Every tracked format with a status other than not_legal."""
    statuses = [(fmt.capitalize(), record.legalities.get(fmt, "not_legal")) for fmt in ALL_FORMATS]
    return [(fmt, status) for fmt, status in statuses if status != "not_legal"]
