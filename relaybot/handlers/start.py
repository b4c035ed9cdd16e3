"""
@file: relaybot/handlers/start.py
@description: /start command and the "Verify Join" button.
@dependencies: aiogram, relaybot.dependencies, relaybot.formatting, relaybot.keyboards
@created: 2025-10-19
"""
from __future__ import annotations

from aiogram import F, Router
from aiogram.filters import CommandStart
from aiogram.types import CallbackQuery, Message

from logger import logger
from relaybot.dependencies import BotDependencies
from relaybot.errors import GatewayError
from relaybot.formatting import (
    format_access_granted,
    format_admin_granted,
    format_join_prompt,
    format_unexpected_error,
)
from relaybot.keyboards import VERIFY_JOIN, join_keyboard


async def cmd_start(message: Message, deps: BotDependencies) -> None:
    user = message.from_user
    if user is None:
        return
    try:
        logger.info(f"User {user.id} ({user.username or 'N/A'}) sent /start")

        if deps.is_admin(user.id):
            deps.users.mark_verified(user.id)
            await message.answer(format_admin_granted())
            return

        if await deps.verifier.is_member(user.id):
            deps.users.mark_verified(user.id)
            await message.answer(
                format_access_granted(deps.limiter.quota, deps.limiter.window)
            )
            return

        await message.answer(
            format_join_prompt(deps.required_channel),
            reply_markup=join_keyboard(deps.required_channel),
        )
    except Exception as exc:  # pragma: no cover
        logger.error(f"/start handler failed for user {user.id}: {exc}")
        await message.answer(format_unexpected_error())


async def verify_join(callback: CallbackQuery, deps: BotDependencies) -> None:
    user = callback.from_user
    try:
        if not (deps.is_admin(user.id) or await deps.verifier.is_member(user.id)):
            logger.debug(f"User {user.id} pressed Verify Join without joining")
            await callback.answer("You haven't joined the channel!", show_alert=True)
            return

        deps.users.mark_verified(user.id)
        logger.info(f"User {user.id} verified via button")
        await callback.answer("Access granted!")
        text = format_access_granted(deps.limiter.quota, deps.limiter.window)
        if callback.message is not None:
            await callback.message.answer(text)
        else:
            await deps.gateway.send_text(user.id, text)
    except GatewayError as exc:
        logger.warning(f"Could not deliver verification result to user {user.id}: {exc}")
    except Exception as exc:  # pragma: no cover
        logger.error(f"verify_join handler failed for user {user.id}: {exc}")
        await callback.answer(format_unexpected_error(), show_alert=True)


def create_router() -> Router:
    router = Router(name="start")
    router.message.register(cmd_start, CommandStart())
    router.callback_query.register(verify_join, F.data == VERIFY_JOIN)
    return router


__all__ = ["cmd_start", "create_router", "verify_join"]
