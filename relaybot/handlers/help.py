# relaybot/handlers/help.py
"""/help command handler."""
from aiogram import Router
from aiogram.filters import Command
from aiogram.types import Message

from logger import logger
from relaybot.dependencies import BotDependencies
from relaybot.formatting import format_help


async def cmd_help(message: Message, deps: BotDependencies) -> None:
    await message.answer(format_help(deps.limiter.quota, deps.limiter.window))
    if message.from_user is not None:
        logger.debug(f"Help sent to user {message.from_user.id}")


def create_router() -> Router:
    router = Router(name="help")
    router.message.register(cmd_help, Command("help"))
    return router
