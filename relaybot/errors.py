"""
@file: relaybot/errors.py
@description: Exception hierarchy for the relay bot.
@dependencies: none
@created: 2025-10-19
"""
from __future__ import annotations


class RelayBotError(Exception):
    """Base class for all errors raised by the relay bot."""


class ConfigurationError(RelayBotError):
    """Raised at startup when mandatory settings are missing or invalid."""


class GatewayError(RelayBotError):
    """A Messaging Gateway call failed.

    ``description`` carries the human readable reason reported by Telegram
    (or by the network layer) and is safe to show to the user.
    """

    def __init__(self, description: str | None = None, *, method: str | None = None) -> None:
        self.description = description
        self.method = method
        super().__init__(description or "gateway call failed")

    def __str__(self) -> str:
        base = self.description or "gateway call failed"
        if self.method:
            return f"{self.method}: {base}"
        return base


__all__ = ["RelayBotError", "ConfigurationError", "GatewayError"]
