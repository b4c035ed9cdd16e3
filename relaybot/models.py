"""
@file: relaybot/models.py
@description: Pydantic models for inbound link messages and relay requests.
@dependencies: pydantic
@created: 2025-10-19
"""
import re

from pydantic import BaseModel, ConfigDict, Field, ValidationError

LINK_HINT = "Send a link like https://t.me/channel/123"
LINK_PATTERN = re.compile(r"https?://t\.me/(c/)?([^/\s]+)/(\d+)", re.IGNORECASE)


def contains_link(text: str | None) -> bool:
    return bool(text) and LINK_PATTERN.search(text) is not None


class MessageLink(BaseModel):
    """A ``t.me`` link pointing at a single channel post."""

    model_config = ConfigDict(frozen=True)

    channel: str = Field(..., min_length=1)
    message_id: int = Field(..., gt=0)
    private: bool = False

    @classmethod
    def find(cls, text: str | None) -> "MessageLink | None":
        """Return the first channel-post link found in ``text``, if any."""
        if not text:
            return None
        match = LINK_PATTERN.search(text)
        if match is None:
            return None
        private_marker, channel, message_id = match.groups()
        private = private_marker is not None
        if private and not channel.isdigit():
            raise ValueError("Private channel links must contain a numeric channel id")
        try:
            return cls(channel=channel, message_id=int(message_id), private=private)
        except ValidationError as exc:
            raise ValueError(LINK_HINT) from exc

    @classmethod
    def parse(cls, text: str) -> "MessageLink":
        link = cls.find(text)
        if link is None:
            raise ValueError(LINK_HINT)
        return link

    @property
    def source_chat(self) -> int | str:
        """Chat identifier accepted by the Bot API for this link."""
        if self.private:
            return int(f"-100{self.channel}")
        return f"@{self.channel}"

    @property
    def display_name(self) -> str:
        return f"@{self.channel}" if not self.private else f"private channel {self.channel}"


class RelayRequest(BaseModel):
    """One relay attempt derived from an inbound link message."""

    model_config = ConfigDict(frozen=True)

    chat_id: int
    user_id: int
    source_chat: int | str
    message_id: int = Field(..., gt=0)
    source_label: str = ""

    @classmethod
    def from_link(cls, link: MessageLink, *, chat_id: int, user_id: int) -> "RelayRequest":
        return cls(
            chat_id=chat_id,
            user_id=user_id,
            source_chat=link.source_chat,
            message_id=link.message_id,
            source_label=link.display_name,
        )
