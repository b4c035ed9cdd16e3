"""
@file: relaybot/middlewares.py
@description: Handler timing middleware that tags each update with its kind and user.
@dependencies: aiogram
@created: 2025-10-19
"""
from __future__ import annotations

import statistics
import time
from collections import deque
from typing import Any, Awaitable, Callable, Deque, Dict

from aiogram import BaseMiddleware
from aiogram.types import CallbackQuery, Message

from logger import logger


def describe_event(event: Any) -> str:
    """Short label such as ``link from 42`` or ``callback verify_join from 42``."""
    user = getattr(event, "from_user", None)
    who = f"from {user.id}" if user is not None else "from unknown"
    if isinstance(event, CallbackQuery):
        return f"callback {event.data or '-'} {who}"
    if isinstance(event, Message):
        text = event.text or ""
        if text.startswith("/"):
            return f"command {text.split()[0]} {who}"
        return f"message {who}"
    return f"{type(event).__name__} {who}"


class ProcessingTimeMiddleware(BaseMiddleware):
    """Log how long each update took, plus rolling avg/p95 over recent updates."""

    def __init__(self, sample_size: int = 100) -> None:
        self.durations: Deque[float] = deque(maxlen=sample_size)

    def _p95(self) -> float:
        ordered = sorted(self.durations)
        return ordered[max(int(len(ordered) * 0.95) - 1, 0)]

    async def __call__(
        self,
        handler: Callable[[Message | CallbackQuery, Dict[str, Any]], Awaitable[Any]],
        event: Message | CallbackQuery,
        data: Dict[str, Any],
    ) -> Any:
        start = time.perf_counter()
        failed = False
        try:
            return await handler(event, data)
        except Exception:
            failed = True
            raise
        finally:
            duration = time.perf_counter() - start
            self.durations.append(duration)
            status = "failed" if failed else "handled"
            logger.info(
                f"{describe_event(event)} {status} in {duration:.3f}s "
                f"(avg {statistics.mean(self.durations):.3f}s, p95 {self._p95():.3f}s)"
            )


__all__ = ["ProcessingTimeMiddleware", "describe_event"]
