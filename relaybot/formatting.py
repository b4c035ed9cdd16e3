"""
/**
 * @file: relaybot/formatting.py
 * @description: HTML texts shown to users by the relay bot.
 * @dependencies: html
 * @created: 2025-10-19
 */
"""

from __future__ import annotations

from html import escape

from .relay import RelayOutcome, RelayStatus


def _window_label(window_seconds: float) -> str:
    minutes = window_seconds / 60
    if minutes >= 1 and float(minutes).is_integer():
        return f"{int(minutes)} minute" + ("s" if minutes != 1 else "")
    return f"{int(window_seconds)} seconds"


def format_rate_limit(quota: int, window_seconds: float) -> str:
    noun = "save" if quota == 1 else "saves"
    return f"{quota} {noun} per {_window_label(window_seconds)}"


def format_admin_granted() -> str:
    return "👑 <b>Admin access granted!</b>"


def format_access_granted(quota: int, window_seconds: float) -> str:
    return (
        "🎉 <b>You can now use the bot!</b>\n\n"
        "Simply send any Telegram message link.\n\n"
        f"⚠️ <b>Rate limit:</b> {format_rate_limit(quota, window_seconds)}"
    )


def format_join_prompt(channel: str | int) -> str:
    channel_text = escape(str(channel))
    return (
        "🔒 <b>Access Required</b>\n\n"
        f"Please join {channel_text} first, then press <b>Verify Join</b>."
    )


def format_help(quota: int, window_seconds: float) -> str:
    return "\n".join(
        [
            "ℹ️ <b>How it works</b>",
            "",
            "• /start - verify your channel membership",
            "• /help - show this message",
            "",
            "Send a link like <code>https://t.me/channel/123</code> and the post "
            "will be forwarded to you.",
            f"⚠️ <b>Rate limit:</b> {format_rate_limit(quota, window_seconds)}",
        ]
    )


def format_access_denied() -> str:
    return "❌ Please verify with /start first"


def format_rate_limited(wait_minutes: int) -> str:
    return (
        "⚠️ <b>Rate Limit Exceeded</b>\n\n"
        f"Please wait {wait_minutes} minute(s) before saving more content."
    )


def format_saved(source_label: str) -> str:
    return f"✅ Content saved from {escape(source_label)}"


def format_failed(error: str | None) -> str:
    detail = escape(error) if error else "unknown error"
    return f"❌ Failed to save content:\n{detail}"


def format_outcome(outcome: RelayOutcome) -> str:
    """User-facing text for a finished relay attempt."""
    if outcome.status is RelayStatus.SUCCESS:
        label = outcome.request.source_label or str(outcome.request.source_chat)
        return format_saved(label)
    if outcome.status is RelayStatus.ACCESS_DENIED:
        return format_access_denied()
    if outcome.status is RelayStatus.RATE_LIMITED:
        return format_rate_limited(outcome.wait_minutes)
    return format_failed(outcome.error)


def format_invalid_link(reason: str) -> str:
    return f"❌ {escape(reason)}"


def format_unexpected_error() -> str:
    return "❌ Something went wrong. Please try again later."


__all__ = [
    "format_access_denied",
    "format_access_granted",
    "format_admin_granted",
    "format_failed",
    "format_help",
    "format_invalid_link",
    "format_join_prompt",
    "format_outcome",
    "format_rate_limit",
    "format_rate_limited",
    "format_saved",
    "format_unexpected_error",
]
