"""
Tests for admin portal access.

INVARIANTS:
- Rate limits are checked BEFORE the key is compared
- Client identifiers only ever appear hashed
- Sessions lock after the inactivity timeout
"""

import pytest

from photobinder.models.account import UserAnalytics
from photobinder.models.failure import FailureKind, ValidationFailedError
from photobinder.services.admin import (
    AdminLockedError,
    AdminSessionStore,
    MasterKeyAttemptTracker,
    MasterKeyGate,
    RateLimitExceededError,
    check_new_master_key,
    filter_users_by_email,
    get_attempt_tracker,
    hash_client,
    is_superuser_email,
    reset_attempt_tracker,
)


class FakeClock:
    def __init__(self) -> None:
        self.now = 1000.0

    def __call__(self) -> float:
        return self.now


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def sessions(clock) -> AdminSessionStore:
    return AdminSessionStore(inactivity_timeout_seconds=1800, clock=clock)


def make_gate(backend, sessions, local_key: str = "", max_attempts: int = 3) -> MasterKeyGate:
    tracker = MasterKeyAttemptTracker(max_attempts=max_attempts, window_seconds=900)
    return MasterKeyGate(backend, tracker=tracker, sessions=sessions, local_key=local_key)


class TestAttemptTracker:
    def test_attempts_up_to_limit_allowed(self, clock) -> None:
        tracker = MasterKeyAttemptTracker(max_attempts=3, window_seconds=60, clock=clock)
        for _ in range(3):
            tracker.check_and_record("10.0.0.1")

    def test_attempt_over_limit_raises(self, clock) -> None:
        tracker = MasterKeyAttemptTracker(max_attempts=2, window_seconds=60, clock=clock)
        tracker.check_and_record("10.0.0.1")
        tracker.check_and_record("10.0.0.1")

        with pytest.raises(RateLimitExceededError) as exc_info:
            tracker.check_and_record("10.0.0.1")

        error = exc_info.value
        assert error.kind == FailureKind.RATE_LIMITED
        assert error.status_code == 429
        assert error.client_hash == hash_client("10.0.0.1")
        assert "10.0.0.1" not in (error.detail or "")

    def test_clients_are_independent(self, clock) -> None:
        tracker = MasterKeyAttemptTracker(max_attempts=1, window_seconds=60, clock=clock)
        tracker.check_and_record("10.0.0.1")
        tracker.check_and_record("10.0.0.2")

    def test_window_slides(self, clock) -> None:
        tracker = MasterKeyAttemptTracker(max_attempts=1, window_seconds=60, clock=clock)
        tracker.check_and_record("10.0.0.1")

        clock.now += 61
        tracker.check_and_record("10.0.0.1")

    def test_hash_is_stable_and_short(self) -> None:
        assert hash_client("10.0.0.1") == hash_client("10.0.0.1")
        assert len(hash_client("10.0.0.1")) == 12

    def test_global_tracker_reset(self) -> None:
        tracker = get_attempt_tracker()
        assert get_attempt_tracker() is tracker

        reset_attempt_tracker()
        assert get_attempt_tracker() is not tracker


class TestAdminSessions:
    def test_open_and_touch(self, sessions) -> None:
        token = sessions.open()
        sessions.touch(token)

    def test_missing_or_unknown_token(self, sessions) -> None:
        with pytest.raises(AdminLockedError):
            sessions.touch(None)
        with pytest.raises(AdminLockedError):
            sessions.touch("made-up")

    def test_expires_after_inactivity(self, sessions, clock) -> None:
        token = sessions.open()
        clock.now += 1800

        with pytest.raises(AdminLockedError) as exc_info:
            sessions.touch(token)

        assert exc_info.value.kind == FailureKind.UNAUTHORIZED
        assert exc_info.value.status_code == 401
        with pytest.raises(AdminLockedError):
            sessions.touch(token)

    def test_activity_extends_session(self, sessions, clock) -> None:
        token = sessions.open()
        for _ in range(3):
            clock.now += 1000
            sessions.touch(token)

    def test_open_drops_expired_sessions(self, sessions, clock) -> None:
        abandoned = sessions.open()
        clock.now += 1000
        live = sessions.open()
        clock.now += 900

        sessions.open()

        assert sessions.active_sessions == 2
        sessions.touch(live)
        with pytest.raises(AdminLockedError):
            sessions.touch(abandoned)

    def test_close(self, sessions) -> None:
        token = sessions.open()
        sessions.close(token)

        with pytest.raises(AdminLockedError):
            sessions.touch(token)


class TestMasterKeyGate:
    async def test_backend_decides_without_local_key(self, backend_factory, sessions) -> None:
        backend = backend_factory()
        gate = make_gate(backend, sessions)

        assert await gate.verify("open-sesame", "10.0.0.1") is True
        assert await gate.verify("wrong", "10.0.0.1") is False
        assert backend.called("authenticate_master_admin_key") == [("open-sesame",), ("wrong",)]

    async def test_local_key_skips_backend(self, backend_factory, sessions) -> None:
        backend = backend_factory()
        gate = make_gate(backend, sessions, local_key="local-secret")

        assert await gate.verify("  local-secret ", "10.0.0.1") is True
        assert await gate.verify("open-sesame", "10.0.0.1") is False
        assert backend.called("authenticate_master_admin_key") == []

    async def test_empty_key_is_validation_error(self, backend_factory, sessions) -> None:
        gate = make_gate(backend_factory(), sessions)

        with pytest.raises(ValidationFailedError, match="Please enter the Master Admin Key"):
            await gate.verify("   ", "10.0.0.1")

    async def test_rate_limited_before_comparison(self, backend_factory, sessions) -> None:
        backend = backend_factory()
        gate = make_gate(backend, sessions, max_attempts=2)
        await gate.verify("wrong", "10.0.0.1")
        await gate.verify("wrong", "10.0.0.1")

        with pytest.raises(RateLimitExceededError):
            await gate.verify("open-sesame", "10.0.0.1")

        assert len(backend.called("authenticate_master_admin_key")) == 2

    async def test_success_clears_attempts(self, backend_factory, sessions) -> None:
        gate = make_gate(backend_factory(), sessions, max_attempts=2)
        await gate.verify("wrong", "10.0.0.1")
        await gate.verify("open-sesame", "10.0.0.1")

        await gate.verify("wrong", "10.0.0.1")
        await gate.verify("wrong", "10.0.0.1")

    async def test_unlock_opens_session(self, backend_factory, sessions) -> None:
        gate = make_gate(backend_factory(), sessions)

        token = await gate.unlock("open-sesame", "10.0.0.1")

        sessions.touch(token)

    async def test_unlock_with_wrong_key(self, backend_factory, sessions) -> None:
        gate = make_gate(backend_factory(), sessions)

        with pytest.raises(AdminLockedError, match="Invalid Master Admin Key"):
            await gate.unlock("wrong", "10.0.0.1")


class TestAdminHelpers:
    def test_superuser_allowlist(self) -> None:
        allowlist = ["Owner@Example.com"]

        assert is_superuser_email(" owner@example.COM ", allowlist)
        assert not is_superuser_email("other@example.com", allowlist)
        assert not is_superuser_email(None, allowlist)
        assert not is_superuser_email("", allowlist)

    def test_new_master_key_confirmation(self) -> None:
        assert check_new_master_key(" new-key ", "new-key") == "new-key"
        with pytest.raises(ValidationFailedError, match="Keys do not match"):
            check_new_master_key("new-key", "new-kee")
        with pytest.raises(ValidationFailedError):
            check_new_master_key("  ", "  ")

    def test_filter_users_by_email(self) -> None:
        users = [
            UserAnalytics(principal="a", email="Mina@Example.com"),
            UserAnalytics(principal="b", email="jo@test.org"),
            UserAnalytics(principal="c", email=None),
        ]

        assert [u.principal for u in filter_users_by_email(users, "EXAMPLE")] == ["a"]
        assert [u.principal for u in filter_users_by_email(users, " ")] == ["a", "b", "c"]
        assert filter_users_by_email(users, "nobody") == []
