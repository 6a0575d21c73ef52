"""
Streaming analysis generation.

Opens one streaming call to the Anthropic Messages API per request and
re-emits text deltas as response chunks. Deck analyses are framed as
ndjson envelopes (a reasoning label first, then one content envelope per
delta); single-card and strategy analyses are bare UTF-8 text.

A provider failure after the stream has started is raised as
AnalysisStreamError so the chunked response is aborted instead of
ending cleanly. Nothing here retries.
"""

import logging
from collections.abc import AsyncIterator
from typing import Any

import anthropic

from deckcoach.config import Settings
from deckcoach.models.analysis import AnalysisKind, StreamEnvelope, StreamFraming
from deckcoach.models.failure import ConfigurationError, FailureKind

logger = logging.getLogger(__name__)

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class AnalysisStreamError(Exception):
    """
    The provider stream failed before it finished.

    Raised after the response status and first chunks are already on the
    wire, so it is never rendered as a FailureResponse. The server aborts
    the chunked body and readers see a truncated stream.
    """

    message = "The analysis stream was interrupted."

    def __init__(self, cause: Exception):
        self.cause = cause
        self.kind = FailureKind.EXTERNAL_API_ERROR
        self.detail = f"{type(cause).__name__}: {cause}"
        super().__init__(self.message)


def _is_text_delta(event: Any) -> bool:
    return (
        getattr(event, "type", None) == "content_block_delta"
        and getattr(event.delta, "type", None) == "text_delta"
    )


class AnalysisStreamService:
    """Turns prompts into streamed model output."""

    def __init__(self, client: anthropic.AsyncAnthropic, model: str = DEFAULT_MODEL) -> None:
        self.client = client
        self.model = model

    async def stream_text(self, prompt: str, max_tokens: int) -> AsyncIterator[str]:
        """
        Yield each text delta the provider produces for a single user prompt.

        Raises:
            AnalysisStreamError: If the provider call fails at any point
        """
        logger.info(
            "ANALYSIS_STREAM_OPENED",
            extra={"model": self.model, "max_tokens": max_tokens, "prompt_chars": len(prompt)},
        )
        chunks = 0

        try:
            async with self.client.messages.stream(
                model=self.model,
                max_tokens=max_tokens,
                messages=[{"role": "user", "content": prompt}],
            ) as stream:
                async for event in stream:
                    if not _is_text_delta(event):
                        continue
                    chunks += 1
                    yield event.delta.text
        except anthropic.APIError as e:
            logger.error(
                "ANALYSIS_STREAM_FAILED",
                extra={"model": self.model, "chunks": chunks, "error": str(e)},
            )
            raise AnalysisStreamError(e) from e

        logger.info("ANALYSIS_STREAM_COMPLETED", extra={"model": self.model, "chunks": chunks})

    async def stream(
        self,
        prompt: str,
        max_tokens: int,
        reasoning_label: str | None = None,
    ) -> AsyncIterator[bytes]:
        """
        Encoded response chunks for a prompt.

        With a reasoning label the output is ndjson: one reasoning envelope,
        then one content envelope per delta. Without one it is raw text.
        """
        if reasoning_label is None:
            async for text in self.stream_text(prompt, max_tokens):
                yield text.encode("utf-8")
            return

        yield StreamEnvelope(type="reasoning", content=reasoning_label).encode()
        async for text in self.stream_text(prompt, max_tokens):
            yield StreamEnvelope(type="content", content=text).encode()

    def stream_analysis(self, kind: AnalysisKind, prompt: str) -> AsyncIterator[bytes]:
        """Stream a prompt using the token budget and framing configured for its kind."""
        profile = kind.profile
        label = profile.reasoning_label if profile.framing is StreamFraming.NDJSON else None
        return self.stream(prompt, profile.max_tokens, reasoning_label=label)


def create_stream_service(config: Settings) -> AnalysisStreamService:
    """
    Build the stream service from settings.

    Raises:
        ConfigurationError: If no Anthropic API key is configured
    """
    if not config.anthropic_api_key:
        raise ConfigurationError("anthropic_api_key")

    client = anthropic.AsyncAnthropic(
        api_key=config.anthropic_api_key,
        timeout=config.llm_timeout_seconds,
    )
    return AnalysisStreamService(client, model=config.anthropic_model)
