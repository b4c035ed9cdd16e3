"""
@file: relaybot/handlers/links.py
@description: Handler for messages carrying t.me post links; runs the relay with a progress bar.
@dependencies: aiogram, relaybot.relay, relaybot.progress
@created: 2025-10-19
"""
from __future__ import annotations

from aiogram import F, Router
from aiogram.types import Message

from logger import logger
from relaybot.dependencies import BotDependencies
from relaybot.errors import GatewayError
from relaybot.formatting import format_invalid_link, format_outcome, format_unexpected_error
from relaybot.models import MessageLink, RelayRequest, contains_link
from relaybot.progress import ProgressReporter
from relaybot.relay import RelayOutcome, RelayStatus


async def _deliver_outcome(
    message: Message,
    deps: BotDependencies,
    outcome: RelayOutcome,
    progress: ProgressReporter,
) -> None:
    text = format_outcome(outcome)
    chat_id = message.chat.id
    if progress.message_id is None:
        await message.answer(text)
        return

    if outcome.status is RelayStatus.SUCCESS:
        try:
            await deps.gateway.delete_message(chat_id, progress.message_id)
        except GatewayError as exc:
            logger.debug(f"Progress message cleanup failed in chat {chat_id}: {exc}")
        await message.answer(text)
        return

    try:
        await deps.gateway.edit_text(chat_id, progress.message_id, text)
    except GatewayError as exc:
        logger.debug(f"Could not edit progress message in chat {chat_id}: {exc}")
        await message.answer(text)


async def handle_link(message: Message, deps: BotDependencies) -> None:
    user = message.from_user
    if user is None:
        return
    try:
        link = MessageLink.parse(message.text or "")
    except ValueError as exc:
        await message.answer(format_invalid_link(str(exc)))
        return

    request = RelayRequest.from_link(link, chat_id=message.chat.id, user_id=user.id)
    logger.info(
        f"User {user.id} requested {request.source_chat}/{request.message_id}"
    )
    progress = deps.progress_for(message.chat.id)
    try:
        outcome = await deps.orchestrator.relay(request, progress=progress)
        await _deliver_outcome(message, deps, outcome, progress)
    except GatewayError as exc:
        logger.warning(f"Relay flow for user {user.id} aborted: {exc}")
        await message.answer(format_unexpected_error())
    except Exception as exc:  # pragma: no cover
        logger.error(f"Link handler failed for user {user.id}: {exc}")
        await message.answer(format_unexpected_error())


def create_router() -> Router:
    router = Router(name="links")
    router.message.register(handle_link, F.text.func(contains_link))
    return router


__all__ = ["create_router", "handle_link"]
