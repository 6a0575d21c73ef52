"""Tests for the streaming analysis endpoints."""

import json
from collections.abc import AsyncIterator, Callable
from pathlib import Path
from typing import Any
from unittest.mock import patch

import anthropic
import httpx
import pytest
from httpx import ASGITransport, AsyncClient

from deckcoach.api.dependencies import get_stream_service
from deckcoach.main import app
from deckcoach.services.analysis_stream import AnalysisStreamError, AnalysisStreamService


@pytest.fixture
def fake_client(fake_anthropic: Callable[..., Any]) -> Any:
    return fake_anthropic(["## Overview\n", "Burn wins fast."])


@pytest.fixture
async def client(fake_client: Any) -> AsyncIterator[AsyncClient]:
    """Async test client whose stream service talks to a fake provider."""
    app.dependency_overrides[get_stream_service] = lambda: AnalysisStreamService(fake_client)

    transport = ASGITransport(app=app)
    async with AsyncClient(transport=transport, base_url="http://test") as client:
        yield client

    app.dependency_overrides.clear()


@pytest.fixture
def bolt_payload(scryfall_cards: dict[str, Any]) -> dict[str, Any]:
    return {**scryfall_cards["Lightning Bolt"], "quantity": 4, "deckType": "Instant"}


@pytest.fixture
def deck_request(bolt_payload: dict[str, Any], scryfall_cards: dict[str, Any]) -> dict[str, Any]:
    return {
        "deckName": "Mono-Red Burn",
        "format": "modern",
        "mainDeck": [bolt_payload],
        "sideboard": [{**scryfall_cards["Mountain"], "quantity": 1, "deckType": "Land"}],
    }


class TestAnalyzeEndpoint:
    async def test_streams_ndjson(
        self, client: AsyncClient, deck_request: dict[str, Any]
    ) -> None:
        """The reasoning envelope comes first, then one content envelope per delta."""
        response = await client.post("/analyze", json={**deck_request, "step": "overview"})

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("application/x-ndjson")
        lines = [json.loads(line) for line in response.text.splitlines()]
        assert lines == [
            {"type": "reasoning", "content": "Quick deck assessment"},
            {"type": "content", "content": "## Overview\n"},
            {"type": "content", "content": "Burn wins fast."},
        ]

    async def test_prompt_and_budget(
        self, client: AsyncClient, fake_client: Any, deck_request: dict[str, Any]
    ) -> None:
        await client.post("/analyze", json={**deck_request, "step": "cardAnalysis"})

        call = fake_client.messages.calls[0]
        prompt = call["messages"][0]["content"]
        assert call["max_tokens"] == 6000
        assert '"Mono-Red Burn"' in prompt
        assert "DECK STATS:\n- Total: 4 | Lands: 0 | Avg CMC: 1.00" in prompt
        assert "Main Deck:\n4x Lightning Bolt ({R}) - Instant" in prompt
        assert "Sideboard:\n1x Mountain (N/A) - Basic Land — Mountain" in prompt

    @pytest.mark.parametrize("step", ["bogus", "strategy", "analyze-card"])
    async def test_invalid_step(
        self, client: AsyncClient, deck_request: dict[str, Any], step: str
    ) -> None:
        """Only the deck analysis steps are accepted."""
        response = await client.post("/analyze", json={**deck_request, "step": step})

        assert response.status_code == 400
        data = response.json()
        assert data["outcome"] == "known_failure"
        assert data["failure"]["kind"] == "invalid_input"
        assert data["failure"]["message"] == "Invalid step"

    async def test_missing_fields(self, client: AsyncClient) -> None:
        response = await client.post("/analyze", json={"deckName": "Burn", "step": "overview"})

        assert response.status_code == 422

    async def test_missing_template(
        self, client: AsyncClient, deck_request: dict[str, Any], tmp_path: Path
    ) -> None:
        with patch("deckcoach.services.prompts.settings") as mock_settings:
            mock_settings.prompts_dir = tmp_path
            response = await client.post("/analyze", json={**deck_request, "step": "tactics"})

        assert response.status_code == 500
        assert response.json()["failure"]["kind"] == "missing_template"


class TestAnalyzeCardEndpoint:
    async def test_streams_raw_text(
        self, client: AsyncClient, fake_client: Any, bolt_payload: dict[str, Any]
    ) -> None:
        response = await client.post(
            "/analyze-card",
            json={
                "card": bolt_payload,
                "deckContext": {
                    "format": "modern",
                    "totalCards": 20,
                    "averageCMC": 1.0,
                    "archetypeHints": "Basic Land: 16, Instant: 4",
                    "otherCards": "Lightning Bolt, Mountain",
                },
                "format": "modern",
            },
        )

        assert response.status_code == 200
        assert response.headers["content-type"].startswith("text/plain")
        assert response.text == "## Overview\nBurn wins fast."

        call = fake_client.messages.calls[0]
        prompt = call["messages"][0]["content"]
        assert call["max_tokens"] == 3000
        assert "CARD:\n4x Lightning Bolt ({R}) - Instant" in prompt
        assert "- Archetype: Basic Land: 16, Instant: 4" in prompt
        assert prompt.endswith("OTHER CARDS:\nLightning Bolt, Mountain")

    async def test_missing_context(
        self, client: AsyncClient, bolt_payload: dict[str, Any]
    ) -> None:
        response = await client.post(
            "/analyze-card", json={"card": bolt_payload, "format": "modern"}
        )

        assert response.status_code == 422


class TestStrategyEndpoint:
    async def test_streams_raw_text(
        self, client: AsyncClient, fake_client: Any, deck_request: dict[str, Any]
    ) -> None:
        response = await client.post("/strategy", json=deck_request)

        assert response.status_code == 200
        assert response.text == "## Overview\nBurn wins fast."
        prompt = fake_client.messages.calls[0]["messages"][0]["content"]
        assert "Main deck:\n4x Lightning Bolt" in prompt


class TestMissingApiKey:
    async def test_returns_503_before_streaming(self, deck_request: dict[str, Any]) -> None:
        """Without a configured key every analysis endpoint fails fast."""
        transport = ASGITransport(app=app)
        with patch("deckcoach.api.dependencies.settings") as mock_settings:
            mock_settings.anthropic_api_key = ""
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                response = await client.post("/strategy", json=deck_request)

        assert response.status_code == 503
        failure = response.json()["failure"]
        assert failure["kind"] == "service_unavailable"
        assert failure["message"] == "ANTHROPIC_API_KEY not configured"


class TestProviderFailureMidStream:
    async def test_original_error_propagates(
        self, fake_anthropic: Callable[..., Any], deck_request: dict[str, Any]
    ) -> None:
        """Once the body has started, the stream error aborts it unchanged."""
        request = httpx.Request("POST", "https://api.anthropic.com/v1/messages")
        fake = fake_anthropic(["partial"], error=anthropic.APIConnectionError(request=request))
        app.dependency_overrides[get_stream_service] = lambda: AnalysisStreamService(fake)
        try:
            transport = ASGITransport(app=app)
            async with AsyncClient(transport=transport, base_url="http://test") as client:
                with pytest.raises(AnalysisStreamError, match="analysis stream was interrupted"):
                    await client.post("/strategy", json=deck_request)
        finally:
            app.dependency_overrides.clear()
