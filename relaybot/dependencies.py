"""
@file: relaybot/dependencies.py
@description: Dependency container and builder for relay bot handlers.
@dependencies: dataclasses, config, relaybot services
@created: 2025-10-19
"""
from __future__ import annotations

from collections.abc import Callable, Sequence
from dataclasses import dataclass
from time import monotonic

from config import Settings, get_settings

from .gateway import ChatId, MessagingGateway
from .membership import MembershipVerifier
from .progress import ProgressReporter
from .ratelimiter import RelayRateLimiter
from .relay import RelayOrchestrator
from .store import (
    InMemoryRateWindowStore,
    InMemoryUserStateStore,
    RateWindowStore,
    UserStateStore,
)


@dataclass(frozen=True)
class CommandInfo:
    command: str
    description: str


COMMAND_CATALOG: tuple[CommandInfo, ...] = (
    CommandInfo("start", "Verify channel membership"),
    CommandInfo("help", "How to save content"),
)


@dataclass(frozen=True)
class BotDependencies:
    command_catalog: Sequence[CommandInfo]
    admin_id: int
    required_channel: ChatId
    gateway: MessagingGateway
    users: UserStateStore
    limiter: RelayRateLimiter
    verifier: MembershipVerifier
    orchestrator: RelayOrchestrator
    progress_step: int = 10
    progress_interval: float = 0.5

    def is_admin(self, user_id: int) -> bool:
        return user_id == self.admin_id

    def progress_for(self, chat_id: ChatId) -> ProgressReporter:
        return ProgressReporter(
            self.gateway,
            chat_id,
            step=self.progress_step,
            interval=self.progress_interval,
        )


def build_dependencies(
    gateway: MessagingGateway,
    settings: Settings | None = None,
    *,
    users: UserStateStore | None = None,
    windows: RateWindowStore | None = None,
    clock: Callable[[], float] = monotonic,
) -> BotDependencies:
    settings = settings or get_settings()
    if users is None:
        users = InMemoryUserStateStore()
    if windows is None:
        windows = InMemoryRateWindowStore()
    limiter = RelayRateLimiter(
        windows,
        quota=settings.RATE_LIMIT_COUNT,
        window=settings.RATE_LIMIT_WINDOW_SEC,
        admin_id=settings.ADMIN_ID,
        clock=clock,
    )
    verifier = MembershipVerifier(gateway, settings.REQUIRED_CHANNEL)
    orchestrator = RelayOrchestrator(gateway, users, limiter, admin_id=settings.ADMIN_ID)
    return BotDependencies(
        command_catalog=COMMAND_CATALOG,
        admin_id=settings.ADMIN_ID,
        required_channel=settings.REQUIRED_CHANNEL,
        gateway=gateway,
        users=users,
        limiter=limiter,
        verifier=verifier,
        orchestrator=orchestrator,
        progress_step=settings.PROGRESS_STEP,
        progress_interval=settings.PROGRESS_INTERVAL_SEC,
    )


__all__ = ["BotDependencies", "COMMAND_CATALOG", "CommandInfo", "build_dependencies"]
