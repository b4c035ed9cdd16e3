# @file: relaybot/bot.py
# Relay bot runtime: aiogram initialisation, handler wiring, polling and cleanup.
import asyncio
from contextlib import suppress

from aiogram import Bot, Dispatcher
from aiogram.client.default import DefaultBotProperties
from aiogram.enums import ParseMode
from aiogram.exceptions import TelegramAPIError
from aiogram.types import BotCommand

from config import Settings, settings as default_settings
from logger import logger

from .dependencies import BotDependencies, build_dependencies
from .errors import ConfigurationError
from .gateway import AiogramGateway
from .handlers import register_handlers
from .middlewares import ProcessingTimeMiddleware


class RelayBot:
    """Owns the aiogram Bot/Dispatcher pair and the relay controller."""

    def __init__(self, settings: Settings | None = None) -> None:
        self.settings = settings or default_settings
        self.bot: Bot | None = None
        self.dp: Dispatcher | None = None
        self.deps: BotDependencies | None = None
        self.is_initialized = False
        self.is_running = False
        self._internal_shutdown = asyncio.Event()
        self._active_shutdown: asyncio.Event | None = None
        self._active_tasks: set[asyncio.Task] = set()

    async def initialize(self) -> None:
        """Create the Bot client, dispatcher and dependency container."""
        if self.is_initialized:
            logger.warning("Bot is already initialized")
            return

        if not self.settings.TELEGRAM_BOT_TOKEN:
            raise ConfigurationError("TELEGRAM_BOT_TOKEN is not set")

        self.bot = Bot(
            token=self.settings.TELEGRAM_BOT_TOKEN,
            default=DefaultBotProperties(
                parse_mode=ParseMode.HTML,
                link_preview_is_disabled=True,
            ),
        )
        logger.info("✅ Telegram Bot client initialized")

        self.deps = build_dependencies(AiogramGateway(self.bot), self.settings)

        self.dp = Dispatcher()
        timing = ProcessingTimeMiddleware()
        self.dp.message.middleware.register(timing)
        self.dp.callback_query.middleware.register(timing)
        register_handlers(self.dp, self.deps)
        logger.info(
            f"✅ Routers registered (channel={self.deps.required_channel}, "
            f"quota={self.deps.limiter.quota}/{self.deps.limiter.window:.0f}s)"
        )

        await self._set_bot_commands()
        self.is_initialized = True

    async def _set_bot_commands(self) -> None:
        if not self.bot or not self.deps:
            return
        try:
            commands = [
                BotCommand(command=info.command, description=info.description)
                for info in self.deps.command_catalog
            ]
            await self.bot.set_my_commands(commands)
            logger.info("✅ Bot commands set")
        except TelegramAPIError as exc:
            logger.warning(f"⚠️ Failed to set bot commands: {exc}")

    async def on_startup(self) -> None:
        if not self.bot:
            return
        try:
            bot_info = await self.bot.get_me()
            logger.info(f"✅ Bot @{bot_info.username} (id {bot_info.id}) is running")
            self.is_running = True
        except TelegramAPIError as exc:
            logger.error(f"❌ Telegram API error on startup: {exc}")

    async def on_shutdown(self) -> None:
        self.is_running = False
        logger.info("🛑 Bot polling stopped")

    async def _sweep_rate_windows(self, stop_event: asyncio.Event) -> None:
        interval = self.settings.SWEEP_INTERVAL_SEC
        while not stop_event.is_set():
            try:
                await asyncio.wait_for(stop_event.wait(), timeout=interval)
            except asyncio.TimeoutError:
                if self.deps:
                    self.deps.limiter.sweep()

    async def run(
        self,
        dry_run: bool = False,
        shutdown_event: asyncio.Event | None = None,
    ) -> None:
        try:
            delay = max(0.0, float(self.settings.STARTUP_DELAY_SEC))
            if delay:
                logger.info(f"⏳ Waiting {delay:.2f}s before initialization")
                await asyncio.sleep(delay)

            await self.initialize()

            if not self.bot or not self.dp:
                raise RuntimeError("Bot is not initialized")

            if dry_run:
                logger.info("🚦 Dry-run: polling skipped")
                return

            self._active_shutdown = shutdown_event or self._internal_shutdown

            self.dp.startup.register(self.on_startup)
            self.dp.shutdown.register(self.on_shutdown)

            logger.info("🚀 Starting polling...")
            polling_task = asyncio.create_task(
                self.dp.start_polling(
                    self.bot,
                    allowed_updates=["message", "callback_query"],
                    handle_as_tasks=True,
                    handle_signals=False,
                )
            )
            sweep_task = asyncio.create_task(self._sweep_rate_windows(self._active_shutdown))
            shutdown_task = asyncio.create_task(self._active_shutdown.wait())
            self._active_tasks.update({polling_task, sweep_task, shutdown_task})

            done, pending = await asyncio.wait(
                {polling_task, shutdown_task},
                return_when=asyncio.FIRST_COMPLETED,
            )

            if shutdown_task in done:
                logger.info("🛑 Shutdown requested, stopping polling...")
                with suppress(RuntimeError):
                    await self.dp.stop_polling()
                if not polling_task.done():
                    polling_task.cancel()
                    with suppress(asyncio.CancelledError):
                        await polling_task

        except ConfigurationError as exc:
            logger.error(f"❌ Configuration error: {exc}")
            raise
        except TelegramAPIError as exc:
            logger.error(f"❌ Telegram API error: {exc}")
        finally:
            await self.cleanup()

    async def cleanup(self) -> None:
        logger.info("🧹 Releasing bot resources...")

        for task in list(self._active_tasks):
            if not task.done():
                task.cancel()
                with suppress(asyncio.CancelledError):
                    await task
        self._active_tasks.clear()

        if self.bot:
            await self.bot.session.close()
            logger.info("✅ Bot session closed")

        if self.dp:
            await self.dp.fsm.storage.close()

        self.is_initialized = False
        self.is_running = False
        if self._active_shutdown is None or self._active_shutdown is self._internal_shutdown:
            self._internal_shutdown = asyncio.Event()
        self._active_shutdown = None
        logger.info("✅ Bot resources released")

    async def stop(self) -> None:
        logger.info("🛑 RelayBot stop requested")
        (self._active_shutdown or self._internal_shutdown).set()


__all__ = ["RelayBot"]
