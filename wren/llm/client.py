"""Async Claude API client and the tool-calling conversation loop."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

import anthropic

from wren.errors import ApiError, NetworkError, ParseError, ToolLoopLimitError
from wren.llm.prompt import build_system_prompt
from wren.llm.window import ConversationWindow
from wren.tools import ToolDispatcher, registry

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from wren.config import Settings
    from wren.context import AssistantContext

logger = logging.getLogger(__name__)

_client: anthropic.AsyncAnthropic | None = None


def _get_client(config: Settings) -> anthropic.AsyncAnthropic:
    """Lazily initialize the Anthropic client.

    Retries are disabled: a failed request fails the turn.
    """
    global _client  # noqa: PLW0603
    if _client is None:
        _client = anthropic.AsyncAnthropic(
            api_key=config.anthropic_api_key,
            timeout=config.request_timeout_seconds,
            max_retries=0,
        )
    return _client


async def _create_message(config: Settings, **kwargs: Any) -> Any:
    """Call ``messages.create`` and map SDK failures onto our error types."""
    client = _get_client(config)
    try:
        return await client.messages.create(**kwargs)
    except anthropic.APIStatusError as exc:
        logger.error("Claude API returned %s: %s", exc.status_code, exc.message)
        raise ApiError(exc.status_code) from exc
    except anthropic.APIConnectionError as exc:
        logger.error("Claude API unreachable: %s", exc)
        raise NetworkError(f"Could not reach the Claude API: {exc}") from exc


def _text_of(content: list[Any]) -> str:
    return "".join(block.text for block in content if block.type == "text")


def _serialize_content(content: list[Any]) -> list[dict[str, Any]]:
    """Convert SDK content blocks to plain dicts for message history."""
    result: list[dict[str, Any]] = []
    for block in content:
        if block.type == "text":
            result.append({"type": "text", "text": block.text})
        elif block.type == "tool_use":
            result.append({
                "type": "tool_use",
                "id": block.id,
                "name": block.name,
                "input": block.input,
            })
    return result


async def complete_text(
    config: Settings,
    messages: list[dict[str, Any]],
    *,
    system: str | list[dict[str, Any]] | None = None,
    max_tokens: int | None = None,
) -> str:
    """Single-shot Claude call: no tools, no history.

    Use this for isolated tasks (titles, summaries) where the full tool
    loop is not needed.
    """
    kwargs: dict[str, Any] = {
        "model": config.claude_model,
        "max_tokens": max_tokens or config.max_tokens,
        "messages": messages,
    }
    if system is not None:
        kwargs["system"] = system
    response = await _create_message(config, **kwargs)
    text = _text_of(response.content)
    if not text:
        raise ParseError("Invalid response from API")
    return text


class Orchestrator:
    """Drives one session's conversation with Claude.

    Each :meth:`run_turn` appends the user's text, then alternates between
    awaiting the backend and executing the tools it asks for until Claude
    answers in plain text. At most ``max_tool_rounds`` tool rounds run per
    turn.
    """

    def __init__(
        self,
        context: AssistantContext,
        *,
        dispatcher: ToolDispatcher | None = None,
        window: ConversationWindow | None = None,
        on_message: Callable[[str, str], Awaitable[None]] | None = None,
    ) -> None:
        # on_message(role, text) is awaited for every message worth persisting.
        self.context = context
        self.dispatcher = dispatcher or ToolDispatcher(registry, context)
        self.window = window if window is not None else ConversationWindow()
        self._on_message = on_message

    @property
    def settings(self) -> Settings:
        return self.context.settings

    async def _emit(self, role: str, text: str) -> None:
        if self._on_message is not None and text:
            await self._on_message(role, text)

    async def run_turn(self, text: str) -> str:
        """Process one user message and return the assistant's reply.

        Raises a :class:`wren.errors.WrenError` subclass when the backend
        fails, returns something unusable, or keeps asking for tools. The
        window is then restored to where it was before the turn.
        """
        self.window.trim(self.settings.max_history_messages)
        checkpoint = len(self.window)

        try:
            self.window.add_user_text(text)
            await self._emit("user", text)
            return await self._tool_loop()
        except BaseException:
            self.window.rollback(checkpoint)
            raise

    async def _tool_loop(self) -> str:
        system_prompt = await build_system_prompt(self.context)
        tool_schemas = self.dispatcher.schemas()
        max_rounds = self.settings.max_tool_rounds
        rounds = 0

        while True:
            kwargs: dict[str, Any] = {
                "model": self.settings.claude_model,
                "max_tokens": self.settings.max_tokens,
                "system": system_prompt,
                "messages": self.window.snapshot(),
            }
            if tool_schemas:
                kwargs["tools"] = tool_schemas

            response = await _create_message(self.settings, **kwargs)
            text = _text_of(response.content)

            if response.stop_reason in ("end_turn", "max_tokens"):
                if not text:
                    raise ParseError("Invalid response from API")
                if response.stop_reason == "max_tokens":
                    logger.warning("Response truncated at max_tokens (%d)", self.settings.max_tokens)
                self.window.add_assistant(text)
                await self._emit("assistant", text)
                return text

            if response.stop_reason != "tool_use":
                logger.error("Unexpected stop_reason: %s", response.stop_reason)
                raise ParseError("Invalid response from API")

            tool_use_blocks = [b for b in response.content if b.type == "tool_use"]
            if not tool_use_blocks:
                raise ParseError("Invalid response from API: tool_use without tool calls")

            if rounds >= max_rounds:
                logger.warning("Hit max tool rounds (%d)", max_rounds)
                raise ToolLoopLimitError(
                    f"Gave up after {max_rounds} rounds of tool calls"
                )
            rounds += 1

            logger.info(
                "Round %d: %d tool call(s): %s",
                rounds,
                len(tool_use_blocks),
                ", ".join(b.name for b in tool_use_blocks),
            )

            self.window.add_assistant(_serialize_content(response.content))
            await self._emit("assistant", text)

            # One at a time, in the order Claude listed them.
            tool_results: list[dict[str, Any]] = []
            for block in tool_use_blocks:
                result = await self.dispatcher.execute(block.name, block.input)
                tool_results.append({
                    "type": "tool_result",
                    "tool_use_id": block.id,
                    "content": result,
                    "is_error": result.startswith("Error:"),
                })

            self.window.add_tool_results(tool_results)
