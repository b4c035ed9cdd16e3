"""Membership-gated content relay bot: handlers, relay controller and gateway adapter."""

__all__ = [
    "bot",
    "dependencies",
    "errors",
    "formatting",
    "gateway",
    "handlers",
    "keyboards",
    "membership",
    "middlewares",
    "models",
    "progress",
    "ratelimiter",
    "relay",
    "store",
]
