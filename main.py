# @file: main.py
import argparse
import asyncio
import contextlib
import signal
import sys

from config import settings
from logger import logger
from relaybot.bot import RelayBot
from relaybot.errors import ConfigurationError

shutdown_event = asyncio.Event()


def setup_signal_handlers() -> None:
    def _handler(signum, _frame) -> None:
        logger.info(f"Received signal {signum}, starting graceful shutdown...")
        shutdown_event.set()

    signal.signal(signal.SIGINT, _handler)
    signal.signal(signal.SIGTERM, _handler)
    if hasattr(signal, "SIGBREAK"):
        signal.signal(signal.SIGBREAK, _handler)


async def main(dry_run: bool = False) -> None:
    setup_signal_handlers()
    shutdown_event.clear()
    logger.info(f"Starting {settings.APP_NAME} (dry_run={dry_run}, LOG_LEVEL={settings.LOG_LEVEL})")

    bot = RelayBot(settings)
    if dry_run:
        await bot.run(dry_run=True, shutdown_event=shutdown_event)
        return

    bot_task = asyncio.create_task(bot.run(dry_run=False, shutdown_event=shutdown_event))
    shutdown_wait = asyncio.create_task(shutdown_event.wait())

    done, _pending = await asyncio.wait(
        {bot_task, shutdown_wait}, return_when=asyncio.FIRST_COMPLETED
    )

    if shutdown_wait in done:
        logger.info("Shutdown signal received, stopping the bot")
        await bot.stop()
        try:
            await asyncio.wait_for(bot_task, timeout=settings.SHUTDOWN_TIMEOUT)
        except asyncio.TimeoutError:
            logger.warning(f"⚠️ Bot shutdown exceeded {settings.SHUTDOWN_TIMEOUT:.1f}s")
    else:
        logger.warning("Polling finished before a shutdown signal")
        shutdown_wait.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await shutdown_wait
        bot_task.result()


def parse_args() -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Channel content relay bot")
    parser.add_argument(
        "--dry-run",
        action="store_true",
        help="Initialize dependencies and exit without polling",
    )
    return parser.parse_args()


def cli() -> None:
    try:
        args = parse_args()
        asyncio.run(main(dry_run=args.dry_run))
    except KeyboardInterrupt:
        logger.info("KeyboardInterrupt received, exiting.")
    except ConfigurationError as exc:
        logger.critical(f"Invalid configuration: {exc}")
        sys.exit(2)
    except Exception as exc:
        logger.opt(exception=exc).critical(f"Fatal error while starting the bot: {exc}")
        sys.exit(1)


if __name__ == "__main__":
    cli()
