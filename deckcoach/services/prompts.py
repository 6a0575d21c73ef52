"""
Prompt assembly for analysis requests.

Templates live in plain-text files, one per analysis kind, with
{name}-style placeholders. Deck statistics and card lists are appended
after the templated header.
"""

import logging
from collections.abc import Mapping, Sequence
from pathlib import Path

from deckcoach.config import settings
from deckcoach.models.analysis import AnalysisKind
from deckcoach.models.card import ResolvedCard
from deckcoach.models.failure import FailureKind, KnownError
from deckcoach.services.deck_context import (
    DeckContextSummary,
    compute_deck_stats,
    format_card_list,
)

logger = logging.getLogger(__name__)


class TemplateNotFoundError(KnownError):
    """Raised when an analysis kind has no prompt template on disk."""

    def __init__(self, kind: str, path: Path | None = None):
        self.kind_name = kind
        self.path = path
        super().__init__(
            kind=FailureKind.MISSING_TEMPLATE,
            message=f"No prompt template for analysis '{kind}'",
            detail=str(path) if path else None,
            status_code=500,
        )


def substitute(template: str, variables: Mapping[str, str | None]) -> str:
    """
    Replace every {key} occurrence with its value.

    Matching is exact and case-sensitive. Placeholders without a value
    are left as written.
    """
    for key, value in variables.items():
        if value is None:
            continue
        template = template.replace(f"{{{key}}}", value)
    return template


def load_prompt(
    kind: AnalysisKind | str,
    variables: Mapping[str, str | None] | None = None,
    prompts_dir: Path | None = None,
) -> str:
    """
    Load the template for an analysis kind and fill in its variables.

    Args:
        kind: Analysis kind (or its identifier string)
        variables: Placeholder values, e.g. {"format": ..., "deckName": ...}
        prompts_dir: Template directory. Defaults to settings.prompts_dir

    Returns:
        The templated prompt header

    Raises:
        TemplateNotFoundError: If the kind is unknown or its file is missing
    """
    try:
        analysis_kind = AnalysisKind(kind)
    except ValueError as e:
        raise TemplateNotFoundError(str(kind)) from e

    directory = prompts_dir if prompts_dir is not None else settings.prompts_dir
    path = directory / f"{analysis_kind.profile.template}.txt"

    try:
        template = path.read_text(encoding="utf-8")
    except FileNotFoundError as e:
        logger.error("Prompt template missing for %s at %s", analysis_kind.value, path)
        raise TemplateNotFoundError(analysis_kind.value, path) from e

    return substitute(template, variables or {})


def build_deck_prompt(
    kind: AnalysisKind,
    deck_name: str,
    format_id: str,
    main_deck: Sequence[ResolvedCard],
    sideboard: Sequence[ResolvedCard],
    prompts_dir: Path | None = None,
) -> str:
    """Prompt for a multi-step deck analysis: header, main deck stats, both lists."""
    header = load_prompt(kind, {"format": format_id, "deckName": deck_name}, prompts_dir)
    stats = compute_deck_stats(main_deck).render()

    return (
        f"{header}\n{stats}\n"
        f"Main Deck:\n{format_card_list(main_deck)}\n\n"
        f"Sideboard:\n{format_card_list(sideboard)}"
    )


def build_strategy_prompt(
    deck_name: str,
    format_id: str,
    main_deck: Sequence[ResolvedCard],
    sideboard: Sequence[ResolvedCard],
    prompts_dir: Path | None = None,
) -> str:
    """Prompt for the free-form strategy guide."""
    header = load_prompt(
        AnalysisKind.STRATEGY,
        {"format": format_id, "deckName": deck_name},
        prompts_dir,
    )
    return (
        f"{header}\n\n"
        f"Main deck:\n{format_card_list(main_deck)}\n\n"
        f"Sideboard:\n{format_card_list(sideboard)}"
    )


def build_card_prompt(
    card: ResolvedCard,
    context: DeckContextSummary,
    format_id: str,
    prompts_dir: Path | None = None,
) -> str:
    """Prompt for single-card analysis: the card's record plus compact deck context."""
    header = load_prompt(
        AnalysisKind.ANALYZE_CARD,
        {"cardName": card.name, "format": format_id},
        prompts_dir,
    )
    return (
        f"{header}\n\n"
        "CARD:\n"
        f"{card.quantity}x {card.name} ({card.mana_cost or 'N/A'}) - {card.type_line}\n"
        f"{card.oracle_text or 'N/A'}\n\n"
        "DECK CONTEXT:\n"
        f"- Format: {format_id}\n"
        f"- Total Cards: {context.total_cards}\n"
        f"- Avg CMC: {context.average_cmc}\n"
        f"- Archetype: {context.archetype_hints}\n\n"
        f"OTHER CARDS:\n{context.other_cards}"
    )
