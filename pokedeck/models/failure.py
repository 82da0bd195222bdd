"""
Failure classification.

Two families of errors exist:

- KnownError subclasses are surfaced to the caller with a message that
  names the rule or entity that failed (NotFound, InvariantViolation).
- UpstreamError and EmbeddingError describe failures of external
  collaborators. Bulk jobs recover from them per unit and only report
  counts; they reach the caller only when an entire batch failed.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Resource failures
    NOT_FOUND = "not_found"

    # Rule violations
    INVARIANT_VIOLATION = "invariant_violation"

    # Service failures
    SERVICE_UNAVAILABLE = "service_unavailable"
    UPSTREAM_FAILURE = "upstream_failure"
    EMBEDDING_FAILURE = "embedding_failure"


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    message: str = Field(
        ...,
        description="User-appropriate explanation of what went wrong",
    )
    detail: str | None = Field(
        default=None,
        description="Additional technical detail (optional)",
    )
    suggestion: str | None = Field(
        default=None,
        description="Suggested action for the user",
    )


class KnownError(Exception):
    """
    Base class for exceptions that represent known, explainable failures.

    Subclass this for errors where the system knows exactly what went wrong.
    """

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

    def to_detail(self) -> FailureDetail:
        """Convert to a FailureDetail."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class NotFoundError(KnownError):
    """
    A referenced card, deck or entry does not exist.

    Also raised when a deck exists but belongs to someone else, so that
    callers cannot probe for other users' deck ids.
    """

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=message,
            detail=detail,
            status_code=404,
        )


class InvariantViolationError(KnownError):
    """A change was rejected because it would break a deck or collection rule."""

    def __init__(
        self,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
    ):
        super().__init__(
            kind=FailureKind.INVARIANT_VIOLATION,
            message=message,
            detail=detail,
            suggestion=suggestion,
            status_code=400,
        )


class ServiceUnavailableError(KnownError):
    """An external collaborator needed for the request is not configured."""

    def __init__(self, message: str):
        super().__init__(
            kind=FailureKind.SERVICE_UNAVAILABLE,
            message=message,
            status_code=503,
        )


class UpstreamError(Exception):
    """
    Raised when a page cannot be fetched from the external card source.

    Covers HTTP errors, transport errors, timeouts and malformed bodies.
    """

    def __init__(self, message: str, page: int | None = None):
        self.page = page
        super().__init__(message)


class EmbeddingError(Exception):
    """Raised when an embedding cannot be generated for a piece of text."""

    pass
