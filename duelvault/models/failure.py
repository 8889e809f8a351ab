"""
Failure classification.

Every failure the service reports to a caller is a ``KnownError`` subclass
carrying a ``FailureKind`` and the HTTP status the API layer should use.
The API registers a single handler that renders these as JSON; nothing in
the service core returns an opaque failure.
"""

from enum import Enum

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    VALIDATION_FAILED = "validation_failed"

    # Resource failures
    NOT_FOUND = "not_found"
    CONFLICT = "conflict"

    # Access
    UNAUTHORIZED = "unauthorized"
    QUOTA_EXCEEDED = "quota_exceeded"

    # Service failures
    EXTERNAL_API_ERROR = "external_api_error"


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
        """Convert to a serializable FailureDetail."""
        return FailureDetail(
            kind=self.kind,
            message=self.message,
            detail=self.detail,
            suggestion=self.suggestion,
        )


class NotFoundError(KnownError):
    """A referenced card, printing, collection item, deck or user is absent."""

    def __init__(self, resource: str, identifier: object):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{resource} with ID {identifier} not found",
            status_code=404,
        )


class ConflictError(KnownError):
    """Uniqueness violation: duplicate registration or natural-key collision."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.CONFLICT,
            message=message,
            detail=detail,
            status_code=409,
        )


class UnauthorizedError(KnownError):
    """Bad credentials or a missing/invalid access token."""

    def __init__(self, message: str = "Invalid credentials"):
        super().__init__(
            kind=FailureKind.UNAUTHORIZED,
            message=message,
            status_code=401,
        )


class QuotaExceededError(KnownError):
    """
    Free-tier collection size limit reached.

    Raised for any add once a free account holds the limit of rows, even
    one that would only merge into an existing row.
    """

    def __init__(self, limit: int):
        self.limit = limit
        super().__init__(
            kind=FailureKind.QUOTA_EXCEEDED,
            message=(
                f"Free tier limit of {limit} collection items reached. "
                "Upgrade to Pro for unlimited storage."
            ),
            detail=f"Collection items: {limit}/{limit}",
            suggestion="Upgrade to Pro or remove items you no longer own.",
            status_code=400,
        )


class UpstreamUnavailableError(KnownError):
    """The YGOPRODeck API was unreachable or returned something unusable."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.EXTERNAL_API_ERROR,
            message=message,
            detail=detail,
            suggestion="The card database provider may be down. Try again later.",
            status_code=502,
        )


class DeckRuleError(KnownError):
    """A deck payload breaks a hard composition rule (copy cap)."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.VALIDATION_FAILED,
            message=message,
            detail=detail,
            suggestion="Reduce the number of copies to the allowed maximum.",
            status_code=400,
        )
