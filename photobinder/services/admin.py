"""
Admin Portal Access: Master Key Gate and Unlock Sessions.

The admin portal is reachable only by allowlisted superusers who also present
the master admin key. This module guards that second step:

- Master key attempts are rate-limited per client
- Keys are compared in constant time when a local key is configured
- A successful unlock yields a session token that locks again after
  30 minutes without activity

INVARIANTS:
- Rate limits are checked BEFORE the key is compared
- Client identifiers only ever appear hashed in logs
- An expired or unknown token is indistinguishable from a locked portal
"""

import hashlib
import hmac
import logging
import secrets
import time
from collections.abc import Callable, Iterable, Sequence
from dataclasses import dataclass, field
from threading import Lock
from typing import Protocol

from photobinder.config import settings
from photobinder.models.account import UserAnalytics
from photobinder.models.failure import FailureKind, KnownError, ValidationFailedError
from photobinder.services.validation import emails_match, normalize_email

logger = logging.getLogger(__name__)

Clock = Callable[[], float]


# =============================================================================
# CUSTOM EXCEPTIONS
# =============================================================================


class RateLimitExceededError(KnownError):
    """
    Exception raised when a client makes too many master key attempts.

    Returns HTTP 429.
    """

    def __init__(self, client_hash: str, limit: int, window_seconds: int):
        self.client_hash = client_hash
        self.limit = limit
        self.window_seconds = window_seconds
        super().__init__(
            kind=FailureKind.RATE_LIMITED,
            message="Too many attempts. Please wait before trying again.",
            detail=f"Master key attempts: {limit} per {window_seconds}s",
            suggestion=f"Try again in {max(1, window_seconds // 60)} minutes.",
            status_code=429,
        )


class AdminLockedError(KnownError):
    """Exception raised when an admin operation runs without a live unlock."""

    def __init__(self, message: str = "The admin portal is locked.", detail: str | None = None):
        super().__init__(
            kind=FailureKind.UNAUTHORIZED,
            message=message,
            detail=detail,
            suggestion="Enter the Master Admin Key to unlock the portal.",
            status_code=401,
        )


# =============================================================================
# ATTEMPT TRACKER
# =============================================================================


def hash_client(client_id: str) -> str:
    """
    Hash a client identifier for privacy-safe logging.

    Uses SHA-256 truncated to 12 characters.
    """
    return hashlib.sha256(client_id.encode()).hexdigest()[:12]


@dataclass
class MasterKeyAttemptTracker:
    """
    Thread-safe sliding-window counter of master key attempts per client.
    """

    max_attempts: int = 5
    window_seconds: int = 900
    clock: Clock = time.monotonic

    _attempts: dict[str, list[float]] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock)

    def check_and_record(self, client_id: str) -> None:
        """
        Record one attempt for this client.

        Raises:
            RateLimitExceededError: If the client already used up the window
        """
        client_hash = hash_client(client_id)
        with self._lock:
            now = self.clock()
            cutoff = now - self.window_seconds
            recent = [t for t in self._attempts.get(client_hash, []) if t > cutoff]

            if len(recent) >= self.max_attempts:
                self._attempts[client_hash] = recent
                logger.warning(
                    "MASTER_KEY_RATE_LIMITED",
                    extra={
                        "client_hash": client_hash,
                        "attempts": len(recent),
                        "limit": self.max_attempts,
                    },
                )
                raise RateLimitExceededError(client_hash, self.max_attempts, self.window_seconds)

            recent.append(now)
            self._attempts[client_hash] = recent

    def clear(self, client_id: str) -> None:
        with self._lock:
            self._attempts.pop(hash_client(client_id), None)


_attempt_tracker: MasterKeyAttemptTracker | None = None


def get_attempt_tracker() -> MasterKeyAttemptTracker:
    """Get the global attempt tracker instance."""
    global _attempt_tracker
    if _attempt_tracker is None:
        _attempt_tracker = MasterKeyAttemptTracker(
            max_attempts=settings.master_key_max_attempts,
            window_seconds=settings.master_key_window_seconds,
        )
    return _attempt_tracker


def reset_attempt_tracker() -> None:
    """Reset the global attempt tracker (for testing)."""
    global _attempt_tracker
    _attempt_tracker = None


# =============================================================================
# UNLOCK SESSIONS
# =============================================================================


@dataclass
class AdminSessionStore:
    """
    Unlock tokens with an inactivity timeout.

    Every successful ``touch`` counts as activity and pushes expiry back.
    """

    inactivity_timeout_seconds: int = 1800
    clock: Clock = time.monotonic

    _last_activity: dict[str, float] = field(default_factory=dict)
    _lock: Lock = field(default_factory=Lock)

    def open(self) -> str:
        """Start a session, dropping any that have already expired."""
        token = secrets.token_urlsafe(32)
        with self._lock:
            now = self.clock()
            expired = [
                stale
                for stale, last in self._last_activity.items()
                if now - last >= self.inactivity_timeout_seconds
            ]
            for stale in expired:
                del self._last_activity[stale]
            self._last_activity[token] = now
        logger.info("ADMIN_SESSION_OPENED", extra={"active_sessions": self.active_sessions})
        return token

    @property
    def active_sessions(self) -> int:
        return len(self._last_activity)

    def touch(self, token: str | None) -> None:
        """
        Confirm a token is live and record activity on it.

        Raises:
            AdminLockedError: If the token is missing, unknown or expired
        """
        if not token:
            raise AdminLockedError()

        with self._lock:
            now = self.clock()
            last = self._last_activity.get(token)
            if last is None:
                raise AdminLockedError()
            if now - last >= self.inactivity_timeout_seconds:
                del self._last_activity[token]
                logger.info("ADMIN_SESSION_EXPIRED")
                raise AdminLockedError(
                    "The admin portal locked after 30 minutes of inactivity.",
                    detail="session expired",
                )
            self._last_activity[token] = now

    def close(self, token: str) -> None:
        with self._lock:
            self._last_activity.pop(token, None)


_session_store: AdminSessionStore | None = None


def get_session_store() -> AdminSessionStore:
    """Get the global admin session store."""
    global _session_store
    if _session_store is None:
        _session_store = AdminSessionStore(
            inactivity_timeout_seconds=settings.admin_inactivity_timeout_seconds
        )
    return _session_store


def reset_session_store() -> None:
    """Reset the global admin session store (for testing)."""
    global _session_store
    _session_store = None


# =============================================================================
# MASTER KEY GATE
# =============================================================================


class MasterKeyBackend(Protocol):
    async def authenticate_master_admin_key(self, key: str) -> bool: ...


class MasterKeyGate:
    """
    Verifies master admin keys and opens unlock sessions.

    With ``local_key`` set the comparison happens here in constant time;
    otherwise the backend decides.
    """

    def __init__(
        self,
        backend: MasterKeyBackend,
        tracker: MasterKeyAttemptTracker,
        sessions: AdminSessionStore,
        local_key: str = "",
    ) -> None:
        self._backend = backend
        self._tracker = tracker
        self._sessions = sessions
        self._local_key = local_key

    async def verify(self, key: str, client_id: str) -> bool:
        """
        Check a submitted key.

        Raises:
            ValidationFailedError: If the key is empty
            RateLimitExceededError: If this client made too many attempts
        """
        submitted = key.strip()
        if not submitted:
            raise ValidationFailedError("Please enter the Master Admin Key")

        self._tracker.check_and_record(client_id)

        if self._local_key:
            valid = hmac.compare_digest(submitted.encode(), self._local_key.encode())
        else:
            valid = await self._backend.authenticate_master_admin_key(submitted)

        logger.info(
            "MASTER_KEY_VERIFIED" if valid else "MASTER_KEY_REJECTED",
            extra={"client_hash": hash_client(client_id)},
        )
        if valid:
            self._tracker.clear(client_id)
        return valid

    async def unlock(self, key: str, client_id: str) -> str:
        """
        Verify a key and open a session.

        Returns the new session token.

        Raises:
            ValidationFailedError: If the key is empty
            RateLimitExceededError: If this client made too many attempts
            AdminLockedError: If the key is wrong
        """
        if not await self.verify(key, client_id):
            raise AdminLockedError("Invalid Master Admin Key", detail="key rejected")
        return self._sessions.open()


# =============================================================================
# ALLOWLIST AND HELPERS
# =============================================================================


def is_superuser_email(email: str | None, allowlist: Iterable[str] | None = None) -> bool:
    if not email:
        return False
    emails = settings.superuser_emails if allowlist is None else allowlist
    return any(emails_match(candidate, email) for candidate in emails)


def check_new_master_key(new_key: str, confirmation: str) -> str:
    """
    Validate a replacement master key.

    Raises:
        ValidationFailedError: If empty or the confirmation differs
    """
    trimmed = new_key.strip()
    if not trimmed:
        raise ValidationFailedError("Please enter a new Master Admin Key")
    if trimmed != confirmation.strip():
        raise ValidationFailedError("Keys do not match")
    return trimmed


def filter_users_by_email(users: Sequence[UserAnalytics], search: str) -> list[UserAnalytics]:
    """Case-insensitive substring match on email; users without one never match."""
    if not search.strip():
        return list(users)
    needle = normalize_email(search)
    return [user for user in users if user.email and needle in normalize_email(user.email)]
