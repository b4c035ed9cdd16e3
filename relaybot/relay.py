"""
/**
 * @file: relaybot/relay.py
 * @description: Access checks and two-hop forward of channel posts via the admin chat.
 * @dependencies: relaybot.gateway, relaybot.ratelimiter, relaybot.store, relaybot.progress
 * @created: 2025-10-19
 */
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from logger import logger

from .errors import GatewayError
from .gateway import MessagingGateway
from .models import RelayRequest
from .progress import ProgressReporter
from .ratelimiter import RelayRateLimiter
from .store import UserStateStore

FALLBACK_ERROR = "Failed to save. The bot may need admin rights in that channel."


class RelayStatus(str, Enum):
    SUCCESS = "success"
    ACCESS_DENIED = "access_denied"
    RATE_LIMITED = "rate_limited"
    FAILED = "failed"


@dataclass(frozen=True, slots=True)
class RelayOutcome:
    status: RelayStatus
    request: RelayRequest
    wait_minutes: int = 0
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.status is RelayStatus.SUCCESS


class RelayOrchestrator:
    """Decides whether a relay may run and performs it.

    The source post is forwarded to the admin chat first and the copy that
    lands there is forwarded on to the requester. The second hop uses the
    first call's own result, never the update feed. Quota is committed only
    when both hops succeed.
    """

    def __init__(
        self,
        gateway: MessagingGateway,
        users: UserStateStore,
        limiter: RelayRateLimiter,
        *,
        admin_id: int,
    ) -> None:
        self._gateway = gateway
        self._users = users
        self._limiter = limiter
        self._admin_id = admin_id

    async def relay(
        self,
        request: RelayRequest,
        *,
        progress: ProgressReporter | None = None,
    ) -> RelayOutcome:
        if not self._users.is_verified(request.user_id):
            logger.info(f"Relay refused for unverified user {request.user_id}")
            return RelayOutcome(RelayStatus.ACCESS_DENIED, request)

        decision = self._limiter.try_acquire(request.user_id)
        if not decision.allowed:
            return RelayOutcome(
                RelayStatus.RATE_LIMITED, request, wait_minutes=decision.wait_minutes
            )

        committed = False
        try:
            if progress is None:
                outcome = await self._forward(request)
            else:
                outcome = await progress.run(lambda: self._forward(request))
            if outcome.ok:
                self._limiter.commit(request.user_id)
                committed = True
            return outcome
        finally:
            if not committed:
                self._limiter.release(request.user_id)

    async def _forward(self, request: RelayRequest) -> RelayOutcome:
        try:
            admin_copy = await self._gateway.forward_message(
                self._admin_id, request.source_chat, request.message_id
            )
            await self._gateway.forward_message(
                request.chat_id, admin_copy.chat_id, admin_copy.message_id
            )
        except GatewayError as exc:
            logger.warning(
                f"Relay of {request.source_chat}/{request.message_id} "
                f"for user {request.user_id} failed: {exc}"
            )
            return RelayOutcome(
                RelayStatus.FAILED, request, error=exc.description or FALLBACK_ERROR
            )
        except Exception as exc:
            logger.opt(exception=exc).error(
                f"Unexpected relay error for user {request.user_id}"
            )
            return RelayOutcome(RelayStatus.FAILED, request, error=FALLBACK_ERROR)

        logger.info(
            f"Relayed {request.source_chat}/{request.message_id} to chat {request.chat_id}"
        )
        return RelayOutcome(RelayStatus.SUCCESS, request)


__all__ = ["FALLBACK_ERROR", "RelayOrchestrator", "RelayOutcome", "RelayStatus"]
