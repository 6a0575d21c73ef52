"""
Analysis kinds and their per-kind static configuration.

Each kind carries its token budget, the short label announced before
model output, the prompt template it loads, and how its stream is framed.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Literal

from pydantic import BaseModel


class AnalysisKind(str, Enum):
    """Every analysis the service can generate."""

    OVERVIEW = "overview"
    SYNERGIES = "synergies"
    MULLIGAN = "mulligan"
    MATCHUPS = "matchups"
    TACTICS = "tactics"
    SIDEBOARDING = "sideboarding"
    CARD_ANALYSIS = "cardAnalysis"
    ANALYZE_CARD = "analyze-card"
    STRATEGY = "strategy"

    @property
    def profile(self) -> "AnalysisProfile":
        return ANALYSIS_PROFILES[self]


class StreamFraming(str, Enum):
    """How generated text is written onto the response stream."""

    NDJSON = "ndjson"  # {"type": ..., "content": ...} per line
    RAW = "raw"  # bare UTF-8 text


@dataclass(frozen=True, slots=True)
class AnalysisProfile:
    """Static configuration for one analysis kind."""

    max_tokens: int
    template: str
    framing: StreamFraming
    reasoning_label: str | None = None

    @property
    def media_type(self) -> str:
        if self.framing is StreamFraming.NDJSON:
            return "application/x-ndjson"
        return "text/plain; charset=utf-8"


ANALYSIS_PROFILES: dict[AnalysisKind, AnalysisProfile] = {
    AnalysisKind.OVERVIEW: AnalysisProfile(
        max_tokens=1500,
        template="overview",
        framing=StreamFraming.NDJSON,
        reasoning_label="Quick deck assessment",
    ),
    AnalysisKind.SYNERGIES: AnalysisProfile(
        max_tokens=2500,
        template="synergies",
        framing=StreamFraming.NDJSON,
        reasoning_label="Mapping interactions",
    ),
    AnalysisKind.MULLIGAN: AnalysisProfile(
        max_tokens=2000,
        template="mulligan",
        framing=StreamFraming.NDJSON,
        reasoning_label="Mulligan framework",
    ),
    AnalysisKind.MATCHUPS: AnalysisProfile(
        max_tokens=2500,
        template="matchups",
        framing=StreamFraming.NDJSON,
        reasoning_label="Matchup strategies",
    ),
    AnalysisKind.TACTICS: AnalysisProfile(
        max_tokens=2500,
        template="tactics",
        framing=StreamFraming.NDJSON,
        reasoning_label="Turn-by-turn tactics",
    ),
    AnalysisKind.SIDEBOARDING: AnalysisProfile(
        max_tokens=2500,
        template="sideboarding",
        framing=StreamFraming.NDJSON,
        reasoning_label="Sideboarding strategy",
    ),
    AnalysisKind.CARD_ANALYSIS: AnalysisProfile(
        max_tokens=6000,
        template="cardAnalysis",
        framing=StreamFraming.NDJSON,
        reasoning_label="Card-by-card analysis",
    ),
    AnalysisKind.ANALYZE_CARD: AnalysisProfile(
        max_tokens=3000,
        template="analyze-card",
        framing=StreamFraming.RAW,
    ),
    AnalysisKind.STRATEGY: AnalysisProfile(
        max_tokens=3000,
        template="strategy",
        framing=StreamFraming.RAW,
    ),
}

# Kinds served by the multi-step deck analysis endpoint
DECK_ANALYSIS_KINDS: frozenset[AnalysisKind] = frozenset(
    kind for kind, profile in ANALYSIS_PROFILES.items() if profile.framing is StreamFraming.NDJSON
)


class AnalysisStatus(str, Enum):
    PENDING = "pending"
    RUNNING = "running"
    COMPLETED = "completed"
    ERROR = "error"


@dataclass(frozen=True, slots=True)
class AnalysisState:
    """
    Observable state of one analysis kind.

    Content is only populated once the stream has ended cleanly;
    error is only set in the ERROR status.
    """

    status: AnalysisStatus = AnalysisStatus.PENDING
    content: str = ""
    error: str | None = None

    @classmethod
    def running(cls) -> "AnalysisState":
        return cls(status=AnalysisStatus.RUNNING)

    @classmethod
    def completed(cls, content: str) -> "AnalysisState":
        return cls(status=AnalysisStatus.COMPLETED, content=content)

    @classmethod
    def failed(cls, message: str) -> "AnalysisState":
        return cls(status=AnalysisStatus.ERROR, error=message)

    @property
    def is_settled(self) -> bool:
        return self.status in (AnalysisStatus.COMPLETED, AnalysisStatus.ERROR)


class StreamEnvelope(BaseModel):
    """One line of an ndjson analysis stream."""

    type: Literal["reasoning", "content"]
    content: str

    def encode(self) -> bytes:
        return (self.model_dump_json() + "\n").encode("utf-8")
