"""
Analyze a deck from the command line.

Loads the deck definition, resolves every card against Scryfall, then
runs one analysis and prints the finished text.

Usage:
    python -m deckcoach.jobs.analyze_deck --deck deck.json --kind overview
    python -m deckcoach.jobs.analyze_deck --kind analyze-card --card "Lightning Bolt"
"""

import argparse
import asyncio
import logging
import sys
from collections.abc import Callable
from pathlib import Path

from deckcoach.config import settings
from deckcoach.models.analysis import DECK_ANALYSIS_KINDS, AnalysisKind, AnalysisState
from deckcoach.models.deck import Deck, load_deck
from deckcoach.models.failure import InvalidRequestError, KnownError
from deckcoach.models.resolution import DeckResolution, ResolutionProgress
from deckcoach.services.analysis_consumer import AnalysisTracker
from deckcoach.services.analysis_stream import AnalysisStreamService, create_stream_service
from deckcoach.services.card_presentation import (
    all_legalities,
    group_cards_by_type,
    relevant_legalities,
)
from deckcoach.services.catalog_client import CatalogCache, CatalogClient
from deckcoach.services.deck_context import summarize
from deckcoach.services.deck_resolver import resolve_deck_cards
from deckcoach.services.prompts import build_card_prompt, build_deck_prompt, build_strategy_prompt

logger = logging.getLogger(__name__)

Echo = Callable[[str], None]


def build_prompt(
    kind: AnalysisKind,
    deck: Deck,
    resolution: DeckResolution,
    card_name: str | None = None,
) -> str:
    """
    Assemble the prompt for any analysis kind from a resolved deck.

    Raises:
        InvalidRequestError: If a single-card analysis names no resolved card
    """
    if kind in DECK_ANALYSIS_KINDS:
        return build_deck_prompt(
            kind, deck.deck_name, deck.format, resolution.main_deck, resolution.sideboard
        )

    if kind is AnalysisKind.STRATEGY:
        return build_strategy_prompt(
            deck.deck_name, deck.format, resolution.main_deck, resolution.sideboard
        )

    if not card_name:
        raise InvalidRequestError("--card is required for single-card analysis")

    matches = [card for card in resolution.cards if card.name.lower() == card_name.lower()]
    if not matches:
        raise InvalidRequestError(f'Card "{card_name}" is not in the resolved deck')

    context = summarize(resolution.cards, deck.format)
    return build_card_prompt(matches[0], context, deck.format)


def print_resolution(resolution: DeckResolution, echo: Echo) -> None:
    """
    Print the resolved deck grouped by type, then any cards that failed.

    Each main deck card shows its most relevant legal formats, any format
    where it is banned or restricted, and its image URL.
    """
    for type_name, cards in group_cards_by_type(resolution.main_deck).items():
        echo(f"{type_name} ({sum(card.quantity for card in cards)})")
        for card in cards:
            formats = ", ".join(fmt for fmt, _ in relevant_legalities(card.record))
            echo(f"  {card.quantity}x {card.name}  [{formats or 'no legal formats'}]")
            limited = [
                f"{status} in {fmt}"
                for fmt, status in all_legalities(card.record)
                if status != "legal"
            ]
            if limited:
                echo(f"      {', '.join(limited)}")
            echo(f"      image: {card.record.image_url()}")

    if resolution.sideboard:
        echo(f"Sideboard ({sum(card.quantity for card in resolution.sideboard)})")
        for card in resolution.sideboard:
            echo(f"  {card.quantity}x {card.name}")

    if resolution.errors:
        echo(f"{len(resolution.errors)} card(s) could not be resolved:")
        for failure in resolution.errors:
            echo(f"  - {failure.card_name}: {failure.error}")


async def run_analysis(
    deck_path: Path,
    kind: AnalysisKind,
    card_name: str | None = None,
    client: CatalogClient | None = None,
    service: AnalysisStreamService | None = None,
    echo: Echo = print,
) -> AnalysisState:
    """
    Resolve a deck and run one analysis over it.

    Returns:
        The settled AnalysisState (COMPLETED or ERROR)

    Raises:
        KnownError: For failures before generation starts (missing deck,
            missing API key, missing template, unknown card)
    """
    deck = load_deck(deck_path)

    # Fail on a missing API key before spending time on catalog lookups
    if service is None:
        service = create_stream_service(settings)
    if client is None:
        client = CatalogClient(
            base_url=settings.scryfall_base_url,
            cache=CatalogCache(max_entries=settings.catalog_cache_max_entries),
            timeout=settings.catalog_timeout_seconds,
        )

    def show_progress(progress: ResolutionProgress) -> None:
        echo(f"[{progress.current}/{progress.total}] {progress.card_name}")

    resolution = await resolve_deck_cards(
        client,
        deck.main_deck,
        deck.sideboard,
        on_progress=show_progress,
        spacing=settings.catalog_request_spacing_seconds,
    )
    print_resolution(resolution, echo)

    prompt = build_prompt(kind, deck, resolution, card_name)

    tracker = AnalysisTracker()
    echo(f"Generating {kind.value}...")
    return await tracker.consume(kind, service.stream_analysis(kind, prompt))


def main() -> None:
    """CLI entry point."""
    parser = argparse.ArgumentParser(description="Resolve a deck and generate an analysis")
    parser.add_argument("--deck", type=Path, default=settings.deck_path, help="deck JSON file")
    parser.add_argument(
        "--kind",
        choices=[kind.value for kind in AnalysisKind],
        default=AnalysisKind.OVERVIEW.value,
        help="analysis to generate",
    )
    parser.add_argument("--card", help="card name for analyze-card")
    args = parser.parse_args()

    logging.basicConfig(
        level=logging.DEBUG if settings.debug else logging.INFO,
        format="%(asctime)s - %(name)s - %(levelname)s - %(message)s",
    )

    try:
        state = asyncio.run(run_analysis(args.deck, AnalysisKind(args.kind), args.card))
    except KnownError as e:
        logger.error("%s", e.message)
        sys.exit(1)

    if state.error is not None:
        logger.error("Analysis failed: %s", state.error)
        sys.exit(1)

    print(state.content)


if __name__ == "__main__":
    main()
