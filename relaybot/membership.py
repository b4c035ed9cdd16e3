"""
@file: relaybot/membership.py
@description: Required-channel membership check; failures degrade to "not a member".
@dependencies: relaybot.gateway
@created: 2025-10-19
"""
from __future__ import annotations

from logger import logger

from .errors import GatewayError
from .gateway import MEMBER_STATUSES, ChatId, MessagingGateway


class MembershipVerifier:
    """Maps a user to a boolean "is a member of the required channel" decision."""

    def __init__(self, gateway: MessagingGateway, channel: ChatId) -> None:
        self._gateway = gateway
        self._channel = channel

    @property
    def channel(self) -> ChatId:
        return self._channel

    async def is_member(self, user_id: int) -> bool:
        try:
            status = await self._gateway.get_member_status(self._channel, user_id)
        except GatewayError as exc:
            logger.warning(
                f"Membership check for user {user_id} in {self._channel} failed: {exc}. "
                "Make sure the bot is an administrator of the channel."
            )
            return False
        except Exception as exc:
            logger.warning(f"Unexpected membership check error for user {user_id}: {exc}")
            return False
        return status in MEMBER_STATUSES


__all__ = ["MembershipVerifier"]
