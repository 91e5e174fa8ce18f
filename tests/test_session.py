"""Tests for AssistantSession: serialization, persistence and summaries."""

import asyncio
from unittest.mock import AsyncMock, MagicMock, patch

from wren.errors import ApiError
from wren.llm.client import Orchestrator
from wren.session import AssistantSession


def _scripted_orchestrator(reply) -> MagicMock:
    orchestrator = MagicMock(spec=Orchestrator)
    orchestrator.run_turn = AsyncMock(side_effect=reply)
    return orchestrator


async def test_send_message_persists_transcript(context) -> None:
    session = AssistantSession(context)
    response = MagicMock(stop_reason="end_turn")
    response.content = [MagicMock(type="text", text="Hello Sam.")]
    client = MagicMock()
    client.messages.create = AsyncMock(return_value=response)

    with patch("wren.llm.client._get_client", return_value=client):
        assert await session.send_message("hi") == "Hello Sam."

    assert session.conversation_id is not None
    messages = await context.transcripts.get_messages(session.conversation_id)
    assert [(m.role, m.content) for m in messages] == [
        ("user", "hi"),
        ("assistant", "Hello Sam."),
    ]


async def test_failed_turn_keeps_user_message(context) -> None:
    session = AssistantSession(context)
    client = MagicMock()
    client.messages.create = AsyncMock(side_effect=ApiError(500))

    with patch("wren.llm.client._get_client", return_value=client):
        reply = await session.send_message("hi")

    assert reply == "Error: API error with status code: 500"
    assert len(session.orchestrator.window) == 0
    messages = await context.transcripts.get_messages(session.conversation_id)
    assert [m.content for m in messages] == ["hi"]


async def test_unexpected_error_is_generic(context) -> None:
    session = AssistantSession(context, orchestrator=_scripted_orchestrator(RuntimeError("boom")))
    assert await session.send_message("hi") == "Error: Something went wrong"


async def test_turns_are_serialized(context) -> None:
    active = 0
    peak = 0

    async def run_turn(text: str) -> str:
        nonlocal active, peak
        active += 1
        peak = max(peak, active)
        await asyncio.sleep(0.01)
        active -= 1
        return text.upper()

    session = AssistantSession(context, orchestrator=_scripted_orchestrator(run_turn))
    replies = await asyncio.gather(*(session.send_message(t) for t in ["a", "b", "c"]))

    assert replies == ["A", "B", "C"]
    assert peak == 1
    assert not session.busy


async def test_reset_starts_new_conversation(context) -> None:
    session = AssistantSession(context)
    session.orchestrator.window.add_user_text("hi")
    session.orchestrator.window.add_assistant("hello")
    session.conversation_id = 7

    assert await session.reset() == 2
    assert session.conversation_id is None
    assert len(session.orchestrator.window) == 0


async def test_summarize_without_conversation(context) -> None:
    assert await AssistantSession(context).summarize() is None


async def test_summarize_updates_conversation(context) -> None:
    session = AssistantSession(context)
    await session._persist("user", "Book the dentist for Friday")
    await session._persist("assistant", "Booked for 3 PM Friday.")

    with patch(
        "wren.session.complete_text",
        AsyncMock(side_effect=["Sam booked a dentist visit.", '"Dentist booking"']),
    ) as mock_complete:
        summary = await session.summarize()

    assert summary == "Sam booked a dentist visit."
    transcript = mock_complete.call_args_list[0].args[1][0]["content"]
    assert transcript == "user: Book the dentist for Friday\nassistant: Booked for 3 PM Friday."

    conversation = await context.transcripts.get_conversation(session.conversation_id)
    assert conversation.summary == "Sam booked a dentist visit."
    assert conversation.title == "Dentist booking"
