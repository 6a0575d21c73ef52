"""
Failure vocabulary shared by the catalog, prompt, and streaming layers.

Every failure the service can explain is a KnownError subclass carrying
its own HTTP status. The API layer renders it as a FailureResponse body;
anything else is rendered as an unknown failure.
"""

from enum import Enum

from pydantic import BaseModel


class FailureKind(str, Enum):
    # Request failures
    INVALID_INPUT = "invalid_input"
    NOT_FOUND = "not_found"

    # Deployment failures
    MISSING_TEMPLATE = "missing_template"
    SERVICE_UNAVAILABLE = "service_unavailable"

    # Upstream failures (Scryfall, Anthropic)
    EXTERNAL_API_ERROR = "external_api_error"
    TRANSPORT_ERROR = "transport_error"

    UNKNOWN = "unknown"


class OutcomeType(str, Enum):
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


class FailureDetail(BaseModel):
    kind: FailureKind
    message: str
    detail: str | None = None
    suggestion: str | None = None


class FailureResponse(BaseModel):
    """JSON body returned for any request that fails before streaming starts."""

    outcome: OutcomeType
    failure: FailureDetail

    @classmethod
    def unknown(cls, detail: str | None = None) -> "FailureResponse":
        return cls(
            outcome=OutcomeType.UNKNOWN_FAILURE,
            failure=FailureDetail(
                kind=FailureKind.UNKNOWN,
                message="Something went wrong while handling the request.",
                detail=detail,
                suggestion="Try again in a moment.",
            ),
        )


class KnownError(Exception):
    """A failure the service can classify and explain to the caller."""

    def __init__(
        self,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        status_code: int = 400,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> FailureResponse:
        return FailureResponse(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=self.kind,
                message=self.message,
                detail=self.detail,
                suggestion=self.suggestion,
            ),
        )


class ConfigurationError(KnownError):
    """
    Raised when a required provider credential is missing.

    Fatal for the request and never retried.
    """

    def __init__(self, setting: str):
        self.setting = setting
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message=f"{setting.upper()} not configured",
            detail=f"Missing setting: {setting}",
            suggestion="Set the variable in the environment or .env file and restart.",
            status_code=503,
        )


class InvalidRequestError(KnownError):
    """Raised when a request is rejected before any external call is made."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.INVALID_INPUT,
            message=message,
            detail=detail,
            status_code=400,
        )
