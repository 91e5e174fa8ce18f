"""In-memory conversation window in Messages API format."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Any

logger = logging.getLogger(__name__)


def is_plain_user_message(message: dict[str, Any]) -> bool:
    """A user message carrying text, not a batch of tool results."""
    return message["role"] == "user" and isinstance(message["content"], str)


@dataclass
class ConversationWindow:
    """Message history for a single session.

    Messages are kept in wire format (``{"role", "content"}``) so they can
    be sent to the backend as-is. Assistant messages that requested tools
    hold a list of content blocks and are always followed by a user message
    holding the matching ``tool_result`` blocks.
    """

    messages: list[dict[str, Any]] = field(default_factory=list)

    def __len__(self) -> int:
        return len(self.messages)

    def add_user_text(self, text: str) -> None:
        self.messages.append({"role": "user", "content": text})

    def add_assistant(self, content: str | list[dict[str, Any]]) -> None:
        self.messages.append({"role": "assistant", "content": content})

    def add_tool_results(self, results: list[dict[str, Any]]) -> None:
        self.messages.append({"role": "user", "content": results})

    def snapshot(self) -> list[dict[str, Any]]:
        """A copy of the current messages, safe to hand to the client."""
        return list(self.messages)

    def rollback(self, length: int) -> None:
        """Drop everything appended after the window had *length* messages."""
        if len(self.messages) > length:
            logger.debug("Rolling window back from %d to %d messages", len(self.messages), length)
            del self.messages[length:]

    def trim(self, max_messages: int) -> int:
        """Drop the oldest messages, keeping at most *max_messages*.

        After the cut, leading messages are dropped until the window starts
        with a plain user message, so it never opens with an assistant reply
        or with tool results whose request was cut off. Returns the number
        of messages removed.
        """
        cut = max(len(self.messages) - max_messages, 0)
        while cut < len(self.messages) and not is_plain_user_message(self.messages[cut]):
            cut += 1
        if cut:
            del self.messages[:cut]
            logger.debug("Trimmed %d message(s) from conversation window", cut)
        return cut

    def clear(self) -> int:
        """Clear all messages. Returns the count of cleared messages."""
        count = len(self.messages)
        self.messages.clear()
        return count
