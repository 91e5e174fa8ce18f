"""AssistantSession: the entry point a chat front end talks to."""

from __future__ import annotations

import asyncio
import logging
from typing import TYPE_CHECKING

from wren.errors import WrenError
from wren.llm.client import Orchestrator, complete_text

if TYPE_CHECKING:
    from wren.context import AssistantContext

logger = logging.getLogger(__name__)

_SUMMARY_PROMPT = (
    "Summarize this conversation between {owner} and their assistant in two or "
    "three sentences. Mention people, dates and decisions."
)
_TITLE_PROMPT = "Give this conversation a short title of at most six words. Reply with the title only."


class AssistantSession:
    """One logical conversation with the assistant.

    Turns are serialized: a message sent while another is still being
    processed (tool calls included) waits for it to finish. Every user and
    assistant message is stored in the transcript store; the conversation
    row is created with the first message.
    """

    def __init__(self, context: AssistantContext, *, orchestrator: Orchestrator | None = None) -> None:
        self.context = context
        self.orchestrator = orchestrator or Orchestrator(context, on_message=self._persist)
        self.conversation_id: int | None = None
        self._lock = asyncio.Lock()

    @property
    def busy(self) -> bool:
        """True while a turn is in flight."""
        return self._lock.locked()

    async def send_message(self, text: str) -> str:
        """Send *text* and return the assistant's reply.

        Always returns text. Failures come back as ``"Error: ..."``.
        """
        async with self._lock:
            try:
                return await self.orchestrator.run_turn(text)
            except WrenError as exc:
                logger.warning("Turn failed: %s", exc)
                return f"Error: {exc}"
            except Exception:
                logger.exception("Turn failed unexpectedly")
                return "Error: Something went wrong"

    async def _persist(self, role: str, text: str) -> None:
        transcripts = self.context.transcripts
        if self.conversation_id is None:
            self.conversation_id = await transcripts.create_conversation()
        message_id = await transcripts.add_message(self.conversation_id, role, text)
        if message_id is None:
            logger.warning("Message not stored: conversation %s is gone", self.conversation_id)

    async def reset(self) -> int:
        """Forget the in-memory history and start a new conversation.

        The stored transcript is kept. Returns the number of messages cleared.
        """
        async with self._lock:
            self.conversation_id = None
            count = self.orchestrator.window.clear()
        logger.info("Session reset (%d messages cleared)", count)
        return count

    async def summarize(self) -> str | None:
        """Write a title and summary for the current conversation.

        Returns the summary, or None when there is nothing to summarize.
        """
        async with self._lock:
            if self.conversation_id is None:
                return None
            transcripts = self.context.transcripts
            messages = await transcripts.get_messages(self.conversation_id)
            if not messages:
                return None

            config = self.context.settings
            transcript = "\n".join(f"{m.role}: {m.content}" for m in messages)
            request = [{"role": "user", "content": transcript}]

            summary = await complete_text(
                config, request, system=_SUMMARY_PROMPT.format(owner=config.owner_name)
            )
            title = await complete_text(config, request, system=_TITLE_PROMPT, max_tokens=30)

            await transcripts.update_summary(self.conversation_id, summary.strip())
            await transcripts.update_title(self.conversation_id, title.strip().strip('"'))
            logger.info("Summarized conversation %s", self.conversation_id)
            return summary.strip()
