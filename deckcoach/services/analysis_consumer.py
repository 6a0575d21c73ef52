"""
Analysis stream consumption.

Reads an analysis response incrementally and settles one AnalysisState
per analysis kind. Text is accumulated privately while the stream is
open: observers only ever see RUNNING with empty content, then either
COMPLETED with the full text or ERROR with a message.

Re-triggering a kind that is still running supersedes the earlier run;
when the earlier run settles its result is discarded (last trigger wins).
"""

import codecs
import logging
from collections.abc import AsyncIterable, AsyncIterator, Sequence
from typing import Any

import httpx
from pydantic import ValidationError

from deckcoach.models.analysis import (
    AnalysisKind,
    AnalysisState,
    StreamEnvelope,
    StreamFraming,
)
from deckcoach.models.card import ResolvedCard
from deckcoach.services.deck_context import DeckContextSummary

logger = logging.getLogger(__name__)


class AnalysisRequestError(Exception):
    """The analysis endpoint answered with a non-success status."""

    def __init__(self, message: str, status_code: int):
        self.status_code = status_code
        super().__init__(message)


async def read_ndjson_content(chunks: AsyncIterable[bytes]) -> str:
    """
    Concatenate the content envelopes of an ndjson stream.

    Partial lines are buffered until their newline arrives. Lines that
    are not valid envelopes are logged and skipped. Reasoning envelopes
    are ignored.

    Raises:
        UnicodeDecodeError: If the stream is not valid UTF-8
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    buffer = ""
    parts: list[str] = []

    def consume_line(line: str) -> None:
        if not line.strip():
            return
        try:
            envelope = StreamEnvelope.model_validate_json(line)
        except ValidationError:
            logger.warning("Skipping malformed stream line: %r", line[:200])
            return
        if envelope.type == "content":
            parts.append(envelope.content)

    async for chunk in chunks:
        buffer += decoder.decode(chunk)
        *lines, buffer = buffer.split("\n")
        for line in lines:
            consume_line(line)

    buffer += decoder.decode(b"", final=True)
    consume_line(buffer)

    return "".join(parts)


async def read_raw_text(chunks: AsyncIterable[bytes]) -> str:
    """
    Concatenate a raw UTF-8 text stream.

    Raises:
        UnicodeDecodeError: If the stream is not valid UTF-8
    """
    decoder = codecs.getincrementaldecoder("utf-8")()
    parts = [decoder.decode(chunk) async for chunk in chunks]
    parts.append(decoder.decode(b"", final=True))
    return "".join(parts)


class AnalysisTracker:
    """Holds the current AnalysisState of every analysis kind."""

    def __init__(self) -> None:
        self._states: dict[AnalysisKind, AnalysisState] = {}
        self._generations: dict[AnalysisKind, int] = {}

    def get(self, kind: AnalysisKind) -> AnalysisState:
        return self._states.get(kind, AnalysisState())

    @property
    def states(self) -> dict[AnalysisKind, AnalysisState]:
        return dict(self._states)

    def start(self, kind: AnalysisKind) -> int:
        """Mark a kind as running and return the generation of this run."""
        generation = self._generations.get(kind, 0) + 1
        self._generations[kind] = generation
        self._states[kind] = AnalysisState.running()
        return generation

    def settle(self, kind: AnalysisKind, generation: int, state: AnalysisState) -> bool:
        """Publish a run's final state unless a newer run of the same kind started."""
        if self._generations.get(kind) != generation:
            logger.info(
                "Discarding superseded %s run",
                kind.value,
                extra={"generation": generation, "current": self._generations.get(kind)},
            )
            return False
        self._states[kind] = state
        return True

    async def consume(
        self,
        kind: AnalysisKind,
        chunks: AsyncIterable[bytes],
        framing: StreamFraming | None = None,
    ) -> AnalysisState:
        """
        Read a whole analysis stream and settle the kind's state.

        Args:
            kind: Analysis kind being generated
            chunks: Response body chunks
            framing: Stream framing; defaults to the kind's configured framing

        Returns:
            The final state of this run (also published unless superseded)
        """
        framing = framing or kind.profile.framing
        generation = self.start(kind)

        try:
            if framing is StreamFraming.NDJSON:
                text = await read_ndjson_content(chunks)
            else:
                text = await read_raw_text(chunks)
        except Exception as e:
            logger.warning("%s analysis failed: %s", kind.value, e)
            state = AnalysisState.failed(str(e) or f"Failed to generate {kind.value}")
        else:
            state = AnalysisState.completed(text)

        self.settle(kind, generation, state)
        return state


def _failure_message(response: httpx.Response, kind: AnalysisKind) -> str:
    """Best available message from an error response body."""
    try:
        body: Any = response.json()
    except ValueError:
        return f"Failed to generate {kind.value}"

    if isinstance(body, dict):
        failure = body.get("failure")
        if isinstance(failure, dict) and failure.get("message"):
            return str(failure["message"])
        if isinstance(body.get("detail"), str):
            return str(body["detail"])
    return f"Failed to generate {kind.value}"


class AnalysisClient:
    """Calls the analysis endpoints and tracks each kind's state."""

    def __init__(
        self,
        base_url: str,
        tracker: AnalysisTracker | None = None,
        timeout: float = 180.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.tracker = tracker if tracker is not None else AnalysisTracker()
        self.timeout = timeout
        self.transport = transport

    async def _response_chunks(
        self,
        kind: AnalysisKind,
        path: str,
        payload: dict[str, Any],
    ) -> AsyncIterator[bytes]:
        async with httpx.AsyncClient(
            base_url=self.base_url,
            timeout=self.timeout,
            transport=self.transport,
        ) as client:
            async with client.stream("POST", path, json=payload) as response:
                if not response.is_success:
                    await response.aread()
                    raise AnalysisRequestError(
                        _failure_message(response, kind),
                        response.status_code,
                    )
                async for chunk in response.aiter_bytes():
                    yield chunk

    async def generate(
        self,
        kind: AnalysisKind,
        deck_name: str,
        format_id: str,
        main_deck: Sequence[ResolvedCard],
        sideboard: Sequence[ResolvedCard],
    ) -> AnalysisState:
        """Run one of the multi-step deck analyses (overview or a deep dive)."""
        payload = {
            "deckName": deck_name,
            "format": format_id,
            "mainDeck": [card.to_payload() for card in main_deck],
            "sideboard": [card.to_payload() for card in sideboard],
            "step": kind.value,
        }
        return await self.tracker.consume(kind, self._response_chunks(kind, "/analyze", payload))

    async def generate_strategy(
        self,
        deck_name: str,
        format_id: str,
        main_deck: Sequence[ResolvedCard],
        sideboard: Sequence[ResolvedCard],
    ) -> AnalysisState:
        kind = AnalysisKind.STRATEGY
        payload = {
            "deckName": deck_name,
            "format": format_id,
            "mainDeck": [card.to_payload() for card in main_deck],
            "sideboard": [card.to_payload() for card in sideboard],
        }
        return await self.tracker.consume(kind, self._response_chunks(kind, "/strategy", payload))

    async def analyze_card(
        self,
        card: ResolvedCard,
        context: DeckContextSummary,
        format_id: str,
    ) -> AnalysisState:
        kind = AnalysisKind.ANALYZE_CARD
        payload = {
            "card": card.to_payload(),
            "deckContext": context.model_dump(by_alias=True),
            "format": format_id,
        }
        return await self.tracker.consume(
            kind, self._response_chunks(kind, "/analyze-card", payload)
        )
