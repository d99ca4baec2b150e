"""
Failure envelope and error taxonomy.

Every user-visible outcome is classified so the client can pick the right
recovery surface:

- Retry banner: network and timeout failures talking to the backend
- Inline validation: bad image, bad layout token, key mismatch, duplicate preset
- Popup blocked: the print surface could not be opened
- Not found view: binder or card missing from the fetched set

No error is fatal. Every path leaves the user in a usable, previous,
or retry-capable state.
"""

from enum import Enum
from typing import Any, Generic, TypeVar

from pydantic import BaseModel, Field


class FailureKind(str, Enum):
    """Classification of failure types."""

    # Input validation failures
    INVALID_INPUT = "invalid_input"
    VALIDATION_FAILED = "validation_failed"

    # Resource failures
    NOT_FOUND = "not_found"

    # Remote failures
    TIMEOUT = "timeout"
    SERVICE_UNAVAILABLE = "service_unavailable"
    EXTERNAL_API_ERROR = "external_api_error"

    # Export failures
    POPUP_BLOCKED = "popup_blocked"

    # Access failures
    RATE_LIMITED = "rate_limited"
    UNAUTHORIZED = "unauthorized"
    BINDER_LIMIT_REACHED = "binder_limit_reached"

    UNKNOWN = "unknown"


class ErrorCategory(str, Enum):
    """How the client should present a failure."""

    RETRY_BANNER = "retry_banner"
    INLINE_VALIDATION = "inline_validation"
    POPUP_BLOCKED = "popup_blocked"
    NOT_FOUND_VIEW = "not_found_view"
    MESSAGE = "message"


_CATEGORY_BY_KIND: dict[FailureKind, ErrorCategory] = {
    FailureKind.TIMEOUT: ErrorCategory.RETRY_BANNER,
    FailureKind.SERVICE_UNAVAILABLE: ErrorCategory.RETRY_BANNER,
    FailureKind.EXTERNAL_API_ERROR: ErrorCategory.RETRY_BANNER,
    FailureKind.INVALID_INPUT: ErrorCategory.INLINE_VALIDATION,
    FailureKind.VALIDATION_FAILED: ErrorCategory.INLINE_VALIDATION,
    FailureKind.POPUP_BLOCKED: ErrorCategory.POPUP_BLOCKED,
    FailureKind.NOT_FOUND: ErrorCategory.NOT_FOUND_VIEW,
}


def category_for(kind: FailureKind) -> ErrorCategory:
    """Map a failure kind to its presentation category."""
    return _CATEGORY_BY_KIND.get(kind, ErrorCategory.MESSAGE)


class OutcomeType(str, Enum):
    """High-level outcome classification."""

    SUCCESS = "success"
    KNOWN_FAILURE = "known_failure"
    UNKNOWN_FAILURE = "unknown_failure"


T = TypeVar("T")


class FailureDetail(BaseModel):
    """Detailed information about a failure."""

    kind: FailureKind = Field(
        ...,
        description="Classification of the failure",
    )
    category: ErrorCategory = Field(
        ...,
        description="Where the client should surface the failure",
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
    retryable: bool = Field(
        default=False,
        description="True when offering a Retry action makes sense",
    )


class ApiResponse(BaseModel, Generic[T]):
    """Response envelope shared by all endpoints that can fail."""

    outcome: OutcomeType
    data: T | None = None
    failure: FailureDetail | None = None

    @classmethod
    def known_failure(
        cls,
        kind: FailureKind,
        message: str,
        detail: str | None = None,
        suggestion: str | None = None,
        retryable: bool = False,
    ) -> "ApiResponse[Any]":
        """Create a known failure response."""
        return cls(
            outcome=OutcomeType.KNOWN_FAILURE,
            failure=FailureDetail(
                kind=kind,
                category=category_for(kind),
                message=message,
                detail=detail,
                suggestion=suggestion,
                retryable=retryable,
            ),
        )


UNKNOWN_FAILURE_MESSAGE = "Something went wrong. Please try again."
UNKNOWN_FAILURE_SUGGESTION = "If this persists, please report the issue."


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
        retryable: bool = False,
    ):
        self.kind = kind
        self.message = message
        self.detail = detail
        self.suggestion = suggestion
        self.status_code = status_code
        self.retryable = retryable
        super().__init__(message)

    @property
    def category(self) -> ErrorCategory:
        return category_for(self.kind)

    def to_response(self) -> ApiResponse[Any]:
        """Convert to an ApiResponse."""
        return finalize_response(
            ApiResponse.known_failure(
                kind=self.kind,
                message=self.message,
                detail=self.detail,
                suggestion=self.suggestion,
                retryable=self.retryable,
            )
        )


class ValidationFailedError(KnownError):
    """Input rejected before it reaches the backend."""

    def __init__(self, message: str, detail: str | None = None):
        super().__init__(
            kind=FailureKind.VALIDATION_FAILED,
            message=message,
            detail=detail,
            status_code=422,
        )


class NotFoundError(KnownError):
    """A binder or card is missing from the fetched set."""

    def __init__(self, resource: str, identifier: str):
        self.resource = resource
        self.identifier = identifier
        super().__init__(
            kind=FailureKind.NOT_FOUND,
            message=f"{resource.capitalize()} not found.",
            detail=f"{resource} id: {identifier}",
            suggestion="Go back and pick another one.",
            status_code=404,
        )


class PopupBlockedError(KnownError):
    """The print surface could not be created."""

    def __init__(self, detail: str | None = None):
        super().__init__(
            kind=FailureKind.POPUP_BLOCKED,
            message="Failed to open print window. Please allow popups for this site.",
            detail=detail,
            suggestion=(
                "Allow popups for this site in your browser settings, "
                "then try the export again."
            ),
            status_code=409,
        )


def finalize_response(response: ApiResponse[Any]) -> ApiResponse[Any]:
    """
    Validate a response before it leaves the service.

    Raises:
        ValueError: If response structure is invalid
    """
    if response.outcome == OutcomeType.SUCCESS:
        if response.failure is not None:
            raise ValueError("Success response must not have failure details")
    elif response.failure is None:
        raise ValueError(f"{response.outcome.value} response must have failure details")
    return response


def create_unknown_failure(exception: Exception) -> ApiResponse[Any]:
    """
    Create an unknown failure response from an exception.

    The message is fixed; only the exception type is exposed as detail.
    """
    response: ApiResponse[Any] = ApiResponse(
        outcome=OutcomeType.UNKNOWN_FAILURE,
        failure=FailureDetail(
            kind=FailureKind.UNKNOWN,
            category=ErrorCategory.RETRY_BANNER,
            message=UNKNOWN_FAILURE_MESSAGE,
            detail=type(exception).__name__,
            suggestion=UNKNOWN_FAILURE_SUGGESTION,
            retryable=True,
        ),
    )
    return finalize_response(response)
