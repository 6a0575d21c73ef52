"""Tests for prompt template loading and assembly."""

from pathlib import Path
from unittest.mock import patch

import pytest

from deckcoach.models.analysis import AnalysisKind
from deckcoach.models.card import CatalogRecord, DeckSection, ResolvedCard
from deckcoach.models.failure import FailureKind
from deckcoach.services.deck_context import summarize
from deckcoach.services.prompts import (
    TemplateNotFoundError,
    build_card_prompt,
    build_deck_prompt,
    build_strategy_prompt,
    load_prompt,
    substitute,
)


def _card(
    name: str,
    quantity: int,
    mana_cost: str,
    type_line: str,
    oracle_text: str = "",
    section: DeckSection = DeckSection.MAIN,
) -> ResolvedCard:
    record = CatalogRecord(
        id=name.lower(),
        name=name,
        mana_cost=mana_cost,
        type_line=type_line,
        oracle_text=oracle_text,
    )
    return ResolvedCard(record=record, quantity=quantity, section=section)


@pytest.fixture
def bolt() -> ResolvedCard:
    return _card(
        "Lightning Bolt", 4, "{R}", "Instant", "Lightning Bolt deals 3 damage to any target."
    )


@pytest.fixture
def prompts_dir(tmp_path: Path) -> Path:
    """A template directory with one short template per analysis kind."""
    for kind in AnalysisKind:
        (tmp_path / f"{kind.profile.template}.txt").write_text(
            f"[{kind.value}] {{deckName}} in {{format}} {{cardName}}", encoding="utf-8"
        )
    return tmp_path


class TestSubstitute:
    def test_replaces_every_occurrence(self) -> None:
        result = substitute("{format} deck for {format}", {"format": "modern"})

        assert result == "modern deck for modern"

    def test_case_sensitive(self) -> None:
        result = substitute("{Format} / {format}", {"format": "modern"})

        assert result == "{Format} / modern"

    def test_unmatched_placeholders_kept(self) -> None:
        result = substitute("{deckName}: {unknown}", {"deckName": "Burn"})

        assert result == "Burn: {unknown}"

    def test_none_values_left_as_placeholder(self) -> None:
        result = substitute("Analyze {cardName}", {"cardName": None})

        assert result == "Analyze {cardName}"


class TestLoadPrompt:
    def test_bundled_templates_exist_for_every_kind(self) -> None:
        """Each analysis kind ships with a template."""
        for kind in AnalysisKind:
            text = load_prompt(kind, {"format": "modern", "deckName": "Burn", "cardName": "Opt"})
            assert text.strip()
            assert "{format}" not in text

    def test_fills_variables(self, prompts_dir: Path) -> None:
        text = load_prompt(
            AnalysisKind.OVERVIEW,
            {"format": "modern", "deckName": "Burn"},
            prompts_dir,
        )

        assert text == "[overview] Burn in modern {cardName}"

    def test_accepts_kind_identifier(self, prompts_dir: Path) -> None:
        text = load_prompt("cardAnalysis", {"deckName": "Burn"}, prompts_dir)

        assert text.startswith("[cardAnalysis] Burn")

    def test_unknown_kind(self, prompts_dir: Path) -> None:
        with pytest.raises(TemplateNotFoundError) as exc_info:
            load_prompt("sideboard-plan", {}, prompts_dir)

        assert exc_info.value.kind == FailureKind.MISSING_TEMPLATE
        assert exc_info.value.status_code == 500

    def test_missing_file(self, prompts_dir: Path) -> None:
        (prompts_dir / "mulligan.txt").unlink()

        with pytest.raises(TemplateNotFoundError) as exc_info:
            load_prompt(AnalysisKind.MULLIGAN, {}, prompts_dir)

        assert exc_info.value.path == prompts_dir / "mulligan.txt"

    def test_defaults_to_configured_directory(self, prompts_dir: Path) -> None:
        with patch("deckcoach.services.prompts.settings") as mock_settings:
            mock_settings.prompts_dir = prompts_dir

            text = load_prompt(AnalysisKind.TACTICS, {"deckName": "Burn", "format": "modern"})

        assert text.startswith("[tactics] Burn in modern")


class TestBuildDeckPrompt:
    def test_layout(self, prompts_dir: Path, bolt: ResolvedCard) -> None:
        mountain = _card("Mountain", 12, "", "Basic Land — Mountain")
        smash = _card(
            "Smash to Smithereens",
            2,
            "{1}{R}",
            "Instant",
            "Destroy target artifact.",
            DeckSection.SIDEBOARD,
        )

        prompt = build_deck_prompt(
            AnalysisKind.OVERVIEW, "Burn", "modern", [bolt, mountain], [smash], prompts_dir
        )

        assert prompt == (
            "[overview] Burn in modern {cardName}\n"
            "\nDECK STATS:\n"
            "- Total: 16 | Lands: 12 | Avg CMC: 1.00\n"
            "- Creatures: 0 | Instants/Sorceries: 4\n"
            "\n"
            "Main Deck:\n"
            "4x Lightning Bolt ({R}) - Instant\n"
            "   Lightning Bolt deals 3 damage to any target.\n"
            "\n"
            "12x Mountain (N/A) - Basic Land — Mountain\n"
            "   N/A\n"
            "\n"
            "Sideboard:\n"
            "2x Smash to Smithereens ({1}{R}) - Instant\n"
            "   Destroy target artifact."
        )

    def test_stats_cover_main_deck_only(self, prompts_dir: Path, bolt: ResolvedCard) -> None:
        side = _card("Pyroblast", 3, "{R}", "Instant", section=DeckSection.SIDEBOARD)

        prompt = build_deck_prompt(
            AnalysisKind.SYNERGIES, "Burn", "legacy", [bolt], [side], prompts_dir
        )

        assert "- Total: 4 |" in prompt


class TestBuildStrategyPrompt:
    def test_layout(self, prompts_dir: Path, bolt: ResolvedCard) -> None:
        prompt = build_strategy_prompt("Burn", "modern", [bolt], [], prompts_dir)

        assert prompt == (
            "[strategy] Burn in modern {cardName}\n\n"
            "Main deck:\n"
            "4x Lightning Bolt ({R}) - Instant\n"
            "   Lightning Bolt deals 3 damage to any target.\n\n"
            "Sideboard:\n"
        )


class TestBuildCardPrompt:
    def test_layout(self, prompts_dir: Path, bolt: ResolvedCard) -> None:
        mountain = _card("Mountain", 16, "", "Basic Land — Mountain")
        context = summarize([bolt, mountain], "modern")

        prompt = build_card_prompt(bolt, context, "modern", prompts_dir)

        assert prompt == (
            "[analyze-card] {deckName} in modern Lightning Bolt\n\n"
            "CARD:\n"
            "4x Lightning Bolt ({R}) - Instant\n"
            "Lightning Bolt deals 3 damage to any target.\n\n"
            "DECK CONTEXT:\n"
            "- Format: modern\n"
            "- Total Cards: 20\n"
            "- Avg CMC: 1.0\n"
            "- Archetype: Basic Land: 16, Instant: 4\n\n"
            "OTHER CARDS:\n"
            "Lightning Bolt, Mountain"
        )
