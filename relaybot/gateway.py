"""
/**
 * @file: relaybot/gateway.py
 * @description: Messaging Gateway contract and its aiogram-backed implementation.
 * @dependencies: aiogram, relaybot.errors
 * @created: 2025-10-19
 */
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import Any, Protocol, TypeVar

from aiogram import Bot
from aiogram.exceptions import TelegramAPIError
from aiogram.types import InlineKeyboardMarkup

from logger import logger

from .errors import GatewayError

ChatId = int | str
T = TypeVar("T")

MEMBER_STATUSES = frozenset({"member", "administrator", "creator"})


@dataclass(frozen=True, slots=True)
class MessageRef:
    """Location of a message returned by send/forward calls."""

    chat_id: int
    message_id: int


class MessagingGateway(Protocol):
    """Outbound operations the relay controller needs from Telegram."""

    async def send_text(
        self,
        chat_id: ChatId,
        text: str,
        *,
        reply_markup: InlineKeyboardMarkup | None = None,
    ) -> MessageRef:
        """Send a text message, optionally with inline buttons."""

    async def edit_text(self, chat_id: ChatId, message_id: int, text: str) -> None:
        """Replace the text of an existing message."""

    async def delete_message(self, chat_id: ChatId, message_id: int) -> None:
        """Delete a message."""

    async def get_member_status(self, chat_id: ChatId, user_id: int) -> str:
        """Return the membership status string of ``user_id`` in ``chat_id``."""

    async def forward_message(
        self, chat_id: ChatId, from_chat_id: ChatId, message_id: int
    ) -> MessageRef:
        """Forward a message and return where the copy landed."""


def _api_method_name(exc: TelegramAPIError) -> str | None:
    method = getattr(exc, "method", None)
    if method is None:
        return None
    return getattr(method, "__api_method__", None) or type(method).__name__


class AiogramGateway:
    """MessagingGateway implemented on top of ``aiogram.Bot``.

    Every aiogram failure is converted into :class:`GatewayError` so callers
    only ever handle one exception type.
    """

    def __init__(self, bot: Bot, *, timeout: float | None = None) -> None:
        self._bot = bot
        self._timeout = timeout

    @property
    def bot(self) -> Bot:
        return self._bot

    async def _call(self, label: str, factory: Callable[[], Awaitable[T]]) -> T:
        try:
            if self._timeout:
                return await asyncio.wait_for(factory(), timeout=self._timeout)
            return await factory()
        except TelegramAPIError as exc:
            logger.debug(f"Gateway {label} failed: {exc}")
            raise GatewayError(exc.message, method=_api_method_name(exc) or label) from exc
        except asyncio.TimeoutError as exc:
            logger.debug(f"Gateway {label} timed out")
            raise GatewayError("Request to Telegram timed out", method=label) from exc

    async def send_text(
        self,
        chat_id: ChatId,
        text: str,
        *,
        reply_markup: InlineKeyboardMarkup | None = None,
    ) -> MessageRef:
        kwargs: dict[str, Any] = {}
        if reply_markup is not None:
            kwargs["reply_markup"] = reply_markup
        message = await self._call(
            "sendMessage",
            lambda: self._bot.send_message(chat_id=chat_id, text=text, **kwargs),
        )
        return MessageRef(chat_id=message.chat.id, message_id=message.message_id)

    async def edit_text(self, chat_id: ChatId, message_id: int, text: str) -> None:
        await self._call(
            "editMessageText",
            lambda: self._bot.edit_message_text(
                text=text, chat_id=chat_id, message_id=message_id
            ),
        )

    async def delete_message(self, chat_id: ChatId, message_id: int) -> None:
        await self._call(
            "deleteMessage",
            lambda: self._bot.delete_message(chat_id=chat_id, message_id=message_id),
        )

    async def get_member_status(self, chat_id: ChatId, user_id: int) -> str:
        member = await self._call(
            "getChatMember",
            lambda: self._bot.get_chat_member(chat_id=chat_id, user_id=user_id),
        )
        status = getattr(member, "status", "")
        return str(getattr(status, "value", status))

    async def forward_message(
        self, chat_id: ChatId, from_chat_id: ChatId, message_id: int
    ) -> MessageRef:
        message = await self._call(
            "forwardMessage",
            lambda: self._bot.forward_message(
                chat_id=chat_id, from_chat_id=from_chat_id, message_id=message_id
            ),
        )
        return MessageRef(chat_id=message.chat.id, message_id=message.message_id)


__all__ = [
    "AiogramGateway",
    "ChatId",
    "MEMBER_STATUSES",
    "MessageRef",
    "MessagingGateway",
]
