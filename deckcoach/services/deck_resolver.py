"""
Deck card resolution.

Drives the catalog client across every unique card name in a deck,
one lookup at a time, and merges the records back into per-section
quantities.

INVARIANTS:
- Lookups are strictly sequential, in first-occurrence order
- A fixed spacing separates consecutive lookups (not after the last)
- A failed lookup is recorded and skipped, never fatal to the pass
"""

import asyncio
import logging
from collections.abc import Awaitable, Callable, Sequence
from typing import Protocol

from deckcoach.models.card import CatalogRecord, DeckSection, ResolvedCard
from deckcoach.models.deck import DeckSlotEntry
from deckcoach.models.failure import InvalidRequestError
from deckcoach.models.resolution import DeckResolution, ResolutionFailure, ResolutionProgress
from deckcoach.services.catalog_client import CatalogError

logger = logging.getLogger(__name__)

# Scryfall allows 10 requests per second
REQUEST_SPACING_SECONDS = 0.1

ProgressCallback = Callable[[ResolutionProgress], None]
Sleeper = Callable[[float], Awaitable[None]]


class CardResolver(Protocol):
    async def resolve(self, name: str) -> CatalogRecord: ...


def unique_card_names(
    main_deck: Sequence[DeckSlotEntry],
    sideboard: Sequence[DeckSlotEntry],
) -> list[str]:
    """Distinct names in first-occurrence order across main deck then sideboard."""
    return list(dict.fromkeys(entry.name for entry in [*main_deck, *sideboard]))


def _expand(
    record: CatalogRecord,
    name: str,
    main_deck: Sequence[DeckSlotEntry],
    sideboard: Sequence[DeckSlotEntry],
) -> list[ResolvedCard]:
    """One ResolvedCard per slot entry with this name, main deck first."""
    sections = [(DeckSection.MAIN, main_deck), (DeckSection.SIDEBOARD, sideboard)]
    return [
        ResolvedCard(
            record=record,
            quantity=entry.quantity,
            deck_type=entry.type,
            section=section,
        )
        for section, entries in sections
        for entry in entries
        if entry.name == name
    ]


async def resolve_deck_cards(
    client: CardResolver,
    main_deck: Sequence[DeckSlotEntry],
    sideboard: Sequence[DeckSlotEntry],
    on_progress: ProgressCallback | None = None,
    *,
    spacing: float = REQUEST_SPACING_SECONDS,
    sleep: Sleeper = asyncio.sleep,
) -> DeckResolution:
    """
    Resolve every card in a deck against the catalog.

    Args:
        client: Catalog client used for each lookup
        main_deck: Main deck slot entries
        sideboard: Sideboard slot entries
        on_progress: Called before each lookup with the 1-based position
        spacing: Seconds to wait between consecutive lookups
        sleep: Awaitable sleep, replaceable in tests

    Returns:
        DeckResolution with resolved cards and per-name failures

    Raises:
        InvalidRequestError: If an entry is not a DeckSlotEntry
    """
    for entry in [*main_deck, *sideboard]:
        if not isinstance(entry, DeckSlotEntry):
            raise InvalidRequestError(
                "Deck entries must have a quantity, name and type",
                detail=repr(entry),
            )

    names = unique_card_names(main_deck, sideboard)
    total = len(names)
    resolution = DeckResolution()

    for index, name in enumerate(names, start=1):
        if on_progress is not None:
            on_progress(ResolutionProgress(total=total, current=index, card_name=name))

        try:
            record = await client.resolve(name)
        except CatalogError as e:
            logger.warning(
                "CATALOG_LOOKUP_FAILED",
                extra={"card_name": name, "failure_kind": e.kind.value, "error": e.message},
            )
            resolution.errors.append(ResolutionFailure(card_name=name, error=e.message))
        else:
            resolution.cards.extend(_expand(record, name, main_deck, sideboard))

        if index < total:
            await sleep(spacing)

    logger.info(
        "DECK_RESOLVED",
        extra={
            "unique_names": total,
            "resolved_cards": len(resolution.cards),
            "failures": len(resolution.errors),
        },
    )
    return resolution
