"""
@file: relaybot/handlers/__init__.py
@description: Router registration for the relay bot with DI support.
@dependencies: aiogram, relaybot.dependencies
@created: 2025-10-19
"""
from __future__ import annotations

from aiogram import Dispatcher, Router

from relaybot.dependencies import BotDependencies

from . import help, links, start


def build_root_router() -> Router:
    """Return a fresh root router wiring all handler routers."""
    root = Router(name="relaybot")
    for module in (start, help, links):
        root.include_router(module.create_router())
    return root


def register_handlers(dp: Dispatcher, deps: BotDependencies) -> BotDependencies:
    """Attach handler routers and expose ``deps`` to handlers as the ``deps`` argument."""
    dp["deps"] = deps
    dp.include_router(build_root_router())
    return deps


__all__ = ["build_root_router", "register_handlers"]
