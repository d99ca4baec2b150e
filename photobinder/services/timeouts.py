import asyncio
from collections.abc import Awaitable
from typing import TypeVar

from photobinder.models.failure import FailureKind, KnownError

T = TypeVar("T")

DEFAULT_TIMEOUT_SECONDS = 30.0


class BackendTimeoutError(KnownError):
    """A backend call did not answer within its deadline."""

    def __init__(self, label: str, timeout_seconds: float):
        self.label = label
        self.timeout_seconds = timeout_seconds
        super().__init__(
            kind=FailureKind.TIMEOUT,
            message="The request timed out.",
            detail=f"{label} exceeded {timeout_seconds:g}s",
            suggestion="Check your connection and press Retry.",
            status_code=504,
            retryable=True,
        )


async def with_timeout(
    awaitable: Awaitable[T],
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS,
    label: str = "request",
) -> T:
    """
    Await with a deadline.

    Raises:
        BackendTimeoutError: If the deadline passes first
    """
    try:
        return await asyncio.wait_for(awaitable, timeout=timeout_seconds)
    except TimeoutError as e:
        raise BackendTimeoutError(label, timeout_seconds) from e
