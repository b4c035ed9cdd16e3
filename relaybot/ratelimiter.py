"""
/**
 * @file: relaybot/ratelimiter.py
 * @description: Sliding-window relay quota per user with reservations for in-flight relays.
 * @dependencies: math, time, relaybot.store
 * @created: 2025-10-19
 */
"""
from __future__ import annotations

import math
from collections.abc import Callable
from dataclasses import dataclass
from time import monotonic

from logger import logger

from .store import RateWindow, RateWindowStore


@dataclass(frozen=True, slots=True)
class RateDecision:
    """Outcome of :meth:`RelayRateLimiter.try_acquire`.

    ``reserved`` is true when a quota slot is held for the caller and must be
    settled with :meth:`RelayRateLimiter.commit` or :meth:`RelayRateLimiter.release`.
    """

    allowed: bool
    wait_minutes: int = 0
    remaining: int = 0
    reserved: bool = False


def wait_minutes_for(oldest: float, now: float, window: float) -> int:
    """Minutes until the oldest retained timestamp leaves the window, rounded up."""
    return max(1, math.ceil((window - (now - oldest)) / 60.0))


class RelayRateLimiter:
    """Per-user sliding-window limiter for content relays.

    A request is allowed while ``recorded + in_flight < quota``. Allowed
    requests hold a reservation until the relay finishes, so a failed relay
    consumes nothing and concurrent requests cannot overshoot the quota.
    The admin identity bypasses the limiter entirely.
    """

    def __init__(
        self,
        store: RateWindowStore,
        *,
        quota: int,
        window: float,
        admin_id: int | None = None,
        clock: Callable[[], float] = monotonic,
    ) -> None:
        if quota <= 0:
            raise ValueError("quota must be positive")
        if window <= 0:
            raise ValueError("window must be positive")
        self._store = store
        self._quota = quota
        self._window = window
        self._admin_id = admin_id
        self._clock = clock

    @property
    def quota(self) -> int:
        return self._quota

    @property
    def window(self) -> float:
        return self._window

    def is_exempt(self, user_id: int) -> bool:
        return self._admin_id is not None and user_id == self._admin_id

    def try_acquire(self, user_id: int) -> RateDecision:
        """Check the user's window and reserve a slot when allowed."""

        if self.is_exempt(user_id):
            return RateDecision(allowed=True, remaining=self._quota)

        now = self._clock()

        def _acquire(window: RateWindow) -> RateDecision:
            window.prune(now, self._window)
            if window.used < self._quota:
                window.in_flight += 1
                return RateDecision(
                    allowed=True,
                    remaining=self._quota - window.used,
                    reserved=True,
                )
            oldest = window.oldest
            # only in-flight reservations left: nothing has been recorded yet,
            # so the earliest a slot can free up is a full window away
            wait = wait_minutes_for(oldest if oldest is not None else now, now, self._window)
            return RateDecision(allowed=False, wait_minutes=wait)

        decision = self._store.update(user_id, _acquire)
        if not decision.allowed:
            logger.info(
                f"Relay quota exhausted for user {user_id}, retry in {decision.wait_minutes} min"
            )
        return decision

    def commit(self, user_id: int) -> None:
        """Turn the user's reservation into a recorded relay at the current time."""

        if self.is_exempt(user_id):
            return
        now = self._clock()

        def _commit(window: RateWindow) -> None:
            if window.in_flight > 0:
                window.in_flight -= 1
            window.register(now)

        self._store.update(user_id, _commit)

    def release(self, user_id: int) -> None:
        """Drop the user's reservation without recording anything."""

        if self.is_exempt(user_id):
            return

        def _release(window: RateWindow) -> None:
            if window.in_flight > 0:
                window.in_flight -= 1

        self._store.update(user_id, _release)

    def recent(self, user_id: int) -> tuple[float, ...]:
        """Timestamps of relays still inside the window."""

        cutoff = self._clock() - self._window
        return tuple(ts for ts in self._store.snapshot(user_id) if ts > cutoff)

    def sweep(self) -> int:
        """Prune stale timestamps for every user."""

        dropped = self._store.sweep(self._clock(), self._window)
        if dropped:
            logger.debug(f"Rate window sweep dropped {dropped} idle window(s)")
        return dropped


__all__ = ["RateDecision", "RelayRateLimiter", "wait_minutes_for"]
