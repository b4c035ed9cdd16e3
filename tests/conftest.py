"""
@file: tests/conftest.py
@description: Shared fixtures: stub Messaging Gateway, manual clock and wired bot dependencies.
@dependencies: pytest, relaybot.dependencies
@created: 2025-10-19
"""

import asyncio
import os
import pathlib
import sys
import tempfile

ROOT = pathlib.Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

os.environ.setdefault("LOG_DIR", str(pathlib.Path(tempfile.gettempdir()) / "relaybot-test-logs"))

import pytest

from config import Settings
from relaybot.dependencies import build_dependencies
from relaybot.gateway import MessageRef

ADMIN_ID = 1
CHANNEL = "@test_channel"


class ManualClock:
    def __init__(self, start: float = 1_000.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class StubGateway:
    """In-memory MessagingGateway recording every call."""

    def __init__(self) -> None:
        self.sent: list[tuple[object, str, object]] = []
        self.edits: list[tuple[object, int, str]] = []
        self.deleted: list[tuple[object, int]] = []
        self.forwards: list[tuple[object, object, int]] = []
        self.member_calls: list[tuple[object, int]] = []
        self.statuses: dict[int, str] = {}
        self.member_error: Exception | None = None
        self.edit_error: Exception | None = None
        self.forward_failures: list[Exception | None] = []
        self._next_id = 100

    def _message_id(self) -> int:
        self._next_id += 1
        return self._next_id

    async def send_text(self, chat_id, text, *, reply_markup=None) -> MessageRef:
        self.sent.append((chat_id, text, reply_markup))
        return MessageRef(chat_id=int(chat_id), message_id=self._message_id())

    async def edit_text(self, chat_id, message_id, text) -> None:
        if self.edit_error is not None:
            raise self.edit_error
        self.edits.append((chat_id, message_id, text))

    async def delete_message(self, chat_id, message_id) -> None:
        self.deleted.append((chat_id, message_id))

    async def get_member_status(self, chat_id, user_id) -> str:
        self.member_calls.append((chat_id, user_id))
        if self.member_error is not None:
            raise self.member_error
        return self.statuses.get(user_id, "left")

    async def forward_message(self, chat_id, from_chat_id, message_id) -> MessageRef:
        self.forwards.append((chat_id, from_chat_id, message_id))
        await asyncio.sleep(0)
        failure = self.forward_failures.pop(0) if self.forward_failures else None
        if failure is not None:
            raise failure
        return MessageRef(chat_id=int(chat_id), message_id=self._message_id())


@pytest.fixture
def clock() -> ManualClock:
    return ManualClock()


@pytest.fixture
def gateway() -> StubGateway:
    return StubGateway()


@pytest.fixture
def test_settings() -> Settings:
    return Settings(
        TELEGRAM_BOT_TOKEN="123:TEST",
        ADMIN_ID=ADMIN_ID,
        REQUIRED_CHANNEL=CHANNEL,
        RATE_LIMIT_COUNT=3,
        RATE_LIMIT_WINDOW_SEC=300,
        PROGRESS_STEP=10,
        PROGRESS_INTERVAL_SEC=0.001,
    )


@pytest.fixture
def deps(gateway, test_settings, clock):
    return build_dependencies(gateway, test_settings, clock=clock)
