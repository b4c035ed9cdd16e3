"""
/**
 * @file: relaybot/keyboards.py
 * @description: Inline keyboard factories for the join/verify prompt.
 * @dependencies: aiogram
 * @created: 2025-10-19
 */
"""

from __future__ import annotations

from aiogram.types import InlineKeyboardMarkup
from aiogram.utils.keyboard import InlineKeyboardBuilder

VERIFY_JOIN = "verify_join"


def channel_url(channel: str | int) -> str | None:
    """Public t.me URL of a channel handle, None for numeric chat ids."""
    value = str(channel)
    if not value.startswith("@"):
        return None
    return f"https://t.me/{value[1:]}"


def join_keyboard(channel: str | int) -> InlineKeyboardMarkup:
    builder = InlineKeyboardBuilder()
    url = channel_url(channel)
    if url:
        builder.button(text=f"🌟 Join {channel}", url=url)
    builder.button(text="✅ Verify Join", callback_data=VERIFY_JOIN)
    builder.adjust(2)
    return builder.as_markup()


__all__ = ["VERIFY_JOIN", "channel_url", "join_keyboard"]
