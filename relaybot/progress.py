"""
/**
 * @file: relaybot/progress.py
 * @description: Cosmetic progress bar that counts to 100% and then runs its action once.
 * @dependencies: asyncio, relaybot.gateway
 * @created: 2025-10-19
 */
"""
from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import TypeVar

from logger import logger

from .errors import GatewayError
from .gateway import ChatId, MessagingGateway

T = TypeVar("T")

PROGRESS_LABEL = "⏳ Processing link..."
BAR_CELLS = 10


def render_progress(percent: int, label: str = PROGRESS_LABEL) -> str:
    """Render ``label`` with a ten-cell bar, e.g. ``30% ▰▰▰▱▱▱▱▱▱▱``."""
    percent = max(0, min(100, percent))
    filled = percent * BAR_CELLS // 100
    return f"{label}\n{percent}% {'▰' * filled}{'▱' * (BAR_CELLS - filled)}"


def progress_steps(step: int) -> list[int]:
    """Percentages shown after the initial 0%, always ending at 100."""
    if step <= 0:
        raise ValueError("step must be positive")
    steps = list(range(step, 100, step))
    steps.append(100)
    return steps


class ProgressReporter:
    """Single-use progress animation bound to one chat.

    :meth:`run` sends the 0% message, edits it every ``interval`` seconds and,
    once 100% is shown, awaits ``action`` exactly once. The ticker task is
    cancelled exactly once, whether the run completes, the action fails or the
    caller is cancelled.
    """

    def __init__(
        self,
        gateway: MessagingGateway,
        chat_id: ChatId,
        *,
        step: int = 10,
        interval: float = 0.5,
        label: str = PROGRESS_LABEL,
    ) -> None:
        if interval < 0:
            raise ValueError("interval must be non-negative")
        self._gateway = gateway
        self._chat_id = chat_id
        self._steps = progress_steps(step)
        self._interval = interval
        self._label = label
        self._ticker: asyncio.Task[None] | None = None
        self._used = False
        self._stopped = False
        self.message_id: int | None = None
        self.last_percent = 0

    @property
    def chat_id(self) -> ChatId:
        return self._chat_id

    @property
    def active(self) -> bool:
        return self._ticker is not None and not self._ticker.done()

    @property
    def stopped(self) -> bool:
        return self._stopped

    async def run(self, action: Callable[[], Awaitable[T]]) -> T:
        if self._used:
            raise RuntimeError("ProgressReporter instances are single-use")
        self._used = True

        sent = await self._gateway.send_text(self._chat_id, render_progress(0, self._label))
        self.message_id = sent.message_id

        self._ticker = asyncio.create_task(self._tick(), name=f"progress:{self._chat_id}")
        try:
            await self._ticker
        finally:
            self.stop()
        return await action()

    def stop(self) -> bool:
        """Cancel the ticker. Returns True only for the call that cancelled it."""
        if self._stopped:
            return False
        self._stopped = True
        if self._ticker is not None and not self._ticker.done():
            self._ticker.cancel()
        return True

    async def _tick(self) -> None:
        for percent in self._steps:
            await asyncio.sleep(self._interval)
            self.last_percent = percent
            try:
                await self._gateway.edit_text(
                    self._chat_id, self.message_id, render_progress(percent, self._label)
                )
            except GatewayError as exc:
                logger.debug(f"Progress update {percent}% skipped for {self._chat_id}: {exc}")


__all__ = ["PROGRESS_LABEL", "ProgressReporter", "progress_steps", "render_progress"]
