"""
@file: tests/relay/test_relay_ratelimiter.py
@description: Sliding-window relay quota, reservations and wait estimates.
@dependencies: pytest, relaybot.ratelimiter
@created: 2025-10-19
"""
from __future__ import annotations

import pytest

from relaybot.ratelimiter import RelayRateLimiter, wait_minutes_for
from relaybot.store import InMemoryRateWindowStore

ADMIN = 1
USER = 500


def _limiter(clock, *, quota: int = 3, window: float = 300.0) -> RelayRateLimiter:
    return RelayRateLimiter(
        InMemoryRateWindowStore(), quota=quota, window=window, admin_id=ADMIN, clock=clock
    )


def _use(limiter: RelayRateLimiter, user_id: int = USER) -> None:
    decision = limiter.try_acquire(user_id)
    assert decision.allowed
    limiter.commit(user_id)


def test_rejects_invalid_configuration(clock) -> None:
    with pytest.raises(ValueError):
        RelayRateLimiter(InMemoryRateWindowStore(), quota=0, window=10, clock=clock)
    with pytest.raises(ValueError):
        RelayRateLimiter(InMemoryRateWindowStore(), quota=1, window=0, clock=clock)


def test_fourth_request_within_window_is_denied_with_wait(clock) -> None:
    limiter = _limiter(clock)
    for _ in range(3):
        _use(limiter)

    clock.advance(10)
    decision = limiter.try_acquire(USER)

    assert decision.allowed is False
    assert decision.reserved is False
    assert 0 < decision.wait_minutes <= 300 / 60
    assert decision.wait_minutes == 5


def test_wait_estimate_rounds_up_to_next_minute(clock) -> None:
    limiter = _limiter(clock)
    for _ in range(3):
        _use(limiter)

    clock.advance(290)
    assert limiter.try_acquire(USER).wait_minutes == 1

    clock.advance(10)
    assert limiter.try_acquire(USER).allowed is True


def test_release_does_not_consume_quota(clock) -> None:
    limiter = _limiter(clock)
    for _ in range(5):
        decision = limiter.try_acquire(USER)
        assert decision.allowed
        limiter.release(USER)

    assert limiter.recent(USER) == ()
    for _ in range(3):
        _use(limiter)
    assert len(limiter.recent(USER)) == 3


def test_reservations_count_against_quota(clock) -> None:
    limiter = _limiter(clock)
    decisions = [limiter.try_acquire(USER) for _ in range(4)]

    assert [d.allowed for d in decisions] == [True, True, True, False]
    assert decisions[-1].wait_minutes == 5

    limiter.release(USER)
    assert limiter.try_acquire(USER).allowed is True


def test_admin_is_never_limited_and_never_recorded(clock) -> None:
    limiter = _limiter(clock)
    for _ in range(10):
        decision = limiter.try_acquire(ADMIN)
        assert decision.allowed is True
        assert decision.reserved is False
        limiter.commit(ADMIN)

    assert limiter.recent(ADMIN) == ()


def test_users_have_independent_windows(clock) -> None:
    limiter = _limiter(clock)
    for _ in range(3):
        _use(limiter, USER)

    assert limiter.try_acquire(USER).allowed is False
    assert limiter.try_acquire(USER + 1).allowed is True


def test_quota_never_exceeded_in_any_trailing_window(clock) -> None:
    limiter = _limiter(clock)
    granted: list[float] = []
    for _ in range(60):
        decision = limiter.try_acquire(USER)
        if decision.allowed:
            limiter.commit(USER)
            granted.append(clock.now)
        clock.advance(37)

    assert len(granted) > 3
    for ts in granted:
        in_window = [other for other in granted if ts - 300 < other <= ts]
        assert len(in_window) <= 3


def test_sweep_removes_expired_windows(clock) -> None:
    limiter = _limiter(clock)
    _use(limiter)
    clock.advance(301)

    assert limiter.sweep() == 1
    assert limiter.recent(USER) == ()


def test_wait_minutes_helper() -> None:
    assert wait_minutes_for(oldest=0.0, now=0.0, window=300.0) == 5
    assert wait_minutes_for(oldest=0.0, now=61.0, window=300.0) == 4
    assert wait_minutes_for(oldest=0.0, now=299.5, window=300.0) == 1
