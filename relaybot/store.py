"""
/**
 * @file: relaybot/store.py
 * @description: In-process stores for user verification state and relay rate windows.
 * @dependencies: collections, threading
 * @created: 2025-10-19
 */
"""
from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from collections import deque
from collections.abc import Callable, Iterator
from dataclasses import dataclass, field
from typing import Deque, TypeVar

T = TypeVar("T")


@dataclass(slots=True)
class UserState:
    """Verification flag of a single user. Only ever flips to verified."""

    user_id: int
    verified: bool = False


@dataclass(slots=True)
class RateWindow:
    """Ordered timestamps of successful relays plus in-flight reservations."""

    events: Deque[float] = field(default_factory=deque)
    in_flight: int = 0

    def prune(self, now: float, window: float) -> None:
        cutoff = now - window
        events = self.events
        while events and events[0] <= cutoff:
            events.popleft()

    def register(self, timestamp: float) -> None:
        self.events.append(timestamp)

    @property
    def used(self) -> int:
        return len(self.events) + self.in_flight

    @property
    def oldest(self) -> float | None:
        return self.events[0] if self.events else None

    def is_idle(self) -> bool:
        return not self.events and self.in_flight == 0


class UserStateStore(ABC):
    """Per-user verification state."""

    @abstractmethod
    def is_verified(self, user_id: int) -> bool:
        raise NotImplementedError

    @abstractmethod
    def mark_verified(self, user_id: int) -> UserState:
        """Create or update the user's state with ``verified=True``."""
        raise NotImplementedError

    @abstractmethod
    def get(self, user_id: int) -> UserState | None:
        raise NotImplementedError


class RateWindowStore(ABC):
    """Per-user rate windows with atomic get-and-update access."""

    @abstractmethod
    def update(self, user_id: int, mutator: Callable[[RateWindow], T]) -> T:
        """Run ``mutator`` on the user's window atomically and return its result.

        The window is created on first access. Windows left idle by the
        mutator are discarded.
        """
        raise NotImplementedError

    @abstractmethod
    def snapshot(self, user_id: int) -> tuple[float, ...]:
        """Return a copy of the recorded timestamps for ``user_id``."""
        raise NotImplementedError

    @abstractmethod
    def sweep(self, now: float, window: float) -> int:
        """Prune every window and drop idle ones. Returns the number dropped."""
        raise NotImplementedError


class InMemoryUserStateStore(UserStateStore):
    """Process-lifetime verification cache."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._states: dict[int, UserState] = {}

    def is_verified(self, user_id: int) -> bool:
        with self._lock:
            state = self._states.get(user_id)
            return bool(state and state.verified)

    def mark_verified(self, user_id: int) -> UserState:
        with self._lock:
            state = self._states.get(user_id)
            if state is None:
                state = UserState(user_id=user_id)
                self._states[user_id] = state
            state.verified = True
            return UserState(user_id=state.user_id, verified=state.verified)

    def get(self, user_id: int) -> UserState | None:
        with self._lock:
            state = self._states.get(user_id)
            if state is None:
                return None
            return UserState(user_id=state.user_id, verified=state.verified)

    def __len__(self) -> int:
        with self._lock:
            return len(self._states)


class InMemoryRateWindowStore(RateWindowStore):
    """Dictionary of rate windows guarded by a lock.

    Mutators run while the lock is held and must not await; inside a single
    event loop that makes each update atomic with respect to other handlers.
    """

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._windows: dict[int, RateWindow] = {}

    def update(self, user_id: int, mutator: Callable[[RateWindow], T]) -> T:
        with self._lock:
            window = self._windows.get(user_id)
            if window is None:
                window = RateWindow()
                self._windows[user_id] = window
            try:
                return mutator(window)
            finally:
                if window.is_idle():
                    self._windows.pop(user_id, None)

    def snapshot(self, user_id: int) -> tuple[float, ...]:
        with self._lock:
            window = self._windows.get(user_id)
            return tuple(window.events) if window else ()

    def sweep(self, now: float, window: float) -> int:
        with self._lock:
            empty_keys: list[int] = []
            for user_id, rate_window in self._windows.items():
                rate_window.prune(now, window)
                if rate_window.is_idle():
                    empty_keys.append(user_id)
            for user_id in empty_keys:
                del self._windows[user_id]
            return len(empty_keys)

    def __iter__(self) -> Iterator[int]:
        with self._lock:
            return iter(list(self._windows))

    def __len__(self) -> int:
        with self._lock:
            return len(self._windows)


__all__ = [
    "InMemoryRateWindowStore",
    "InMemoryUserStateStore",
    "RateWindow",
    "RateWindowStore",
    "UserState",
    "UserStateStore",
]
