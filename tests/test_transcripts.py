"""Tests for TranscriptStore: conversations, messages and full-text search."""

import pytest

from wren.memory.transcripts import TranscriptStore, to_fts_query


async def test_create_and_get_conversation(transcripts: TranscriptStore) -> None:
    conversation_id = await transcripts.create_conversation("Planning")

    conversation = await transcripts.get_conversation(conversation_id)
    assert conversation.title == "Planning"
    assert conversation.summary is None
    assert conversation.message_count == 0
    assert conversation.created_at == conversation.updated_at


async def test_get_missing_conversation(transcripts: TranscriptStore) -> None:
    assert await transcripts.get_conversation(404) is None


async def test_display_title_falls_back_to_id(transcripts: TranscriptStore) -> None:
    conversation_id = await transcripts.create_conversation()
    conversation = await transcripts.get_conversation(conversation_id)
    assert conversation.display_title == f"Conversation {conversation_id}"


async def test_add_message_bumps_updated_at(transcripts: TranscriptStore) -> None:
    conversation_id = await transcripts.create_conversation()
    before = await transcripts.get_conversation(conversation_id)

    message_id = await transcripts.add_message(conversation_id, "user", "hello")
    assert message_id is not None

    after = await transcripts.get_conversation(conversation_id)
    assert after.updated_at >= before.updated_at
    assert after.message_count == 1


async def test_add_message_to_unknown_conversation(transcripts: TranscriptStore) -> None:
    assert await transcripts.add_message(99, "user", "hello") is None
    assert await transcripts.search_transcripts("hello") == []


async def test_messages_are_returned_in_order(transcripts: TranscriptStore) -> None:
    conversation_id = await transcripts.create_conversation()
    for i, role in enumerate(["user", "assistant", "user", "assistant"]):
        await transcripts.add_message(conversation_id, role, f"message {i}")

    messages = await transcripts.get_messages(conversation_id)
    assert [m.content for m in messages] == [f"message {i}" for i in range(4)]
    assert [m.is_user for m in messages] == [True, False, True, False]


async def test_list_conversations_most_recent_first(transcripts: TranscriptStore) -> None:
    first = await transcripts.create_conversation("first")
    second = await transcripts.create_conversation("second")
    await transcripts.add_message(first, "user", "bump")

    listed = await transcripts.list_conversations()
    assert [c.id for c in listed] == [first, second]
    assert [c.message_count for c in listed] == [1, 0]

    assert [c.id for c in await transcripts.list_conversations(limit=1, offset=1)] == [second]


async def test_update_title_and_summary(transcripts: TranscriptStore) -> None:
    conversation_id = await transcripts.create_conversation()

    assert await transcripts.update_title(conversation_id, "Dentist")
    assert await transcripts.update_summary(conversation_id, "Booked a cleaning")
    assert not await transcripts.update_title(500, "nope")

    conversation = await transcripts.get_conversation(conversation_id)
    assert conversation.title == "Dentist"
    assert conversation.summary == "Booked a cleaning"


# -- Search ------------------------------------------------------------------


async def test_search_finds_messages_with_conversation_metadata(
    transcripts: TranscriptStore,
) -> None:
    conversation_id = await transcripts.create_conversation("Trip")
    await transcripts.update_summary(conversation_id, "Planning the lake trip")
    await transcripts.add_message(conversation_id, "user", "Book the cabin near the lake")
    await transcripts.add_message(conversation_id, "assistant", "Which weekend works?")

    hits = await transcripts.search_transcripts("cabin")
    assert len(hits) == 1
    assert hits[0].content == "Book the cabin near the lake"
    assert hits[0].role == "user"
    assert hits[0].conversation_id == conversation_id
    assert hits[0].conversation_title == "Trip"
    assert hits[0].conversation_summary == "Planning the lake trip"


async def test_search_requires_every_term(transcripts: TranscriptStore) -> None:
    conversation_id = await transcripts.create_conversation()
    await transcripts.add_message(conversation_id, "user", "the blue car")
    await transcripts.add_message(conversation_id, "user", "the red car")

    hits = await transcripts.search_transcripts("red car")
    assert [h.content for h in hits] == ["the red car"]


async def test_search_respects_limit(transcripts: TranscriptStore) -> None:
    conversation_id = await transcripts.create_conversation()
    for i in range(5):
        await transcripts.add_message(conversation_id, "user", f"pasta night {i}")

    assert len(await transcripts.search_transcripts("pasta", limit=3)) == 3


@pytest.mark.parametrize("query", ['what\'s "up', "AND", "car*", "(-car)"])
async def test_search_tolerates_query_syntax(transcripts: TranscriptStore, query: str) -> None:
    conversation_id = await transcripts.create_conversation()
    await transcripts.add_message(conversation_id, "user", "the car is parked")

    # Must not raise an FTS syntax error.
    await transcripts.search_transcripts(query)


@pytest.mark.parametrize("query", ["", "   ", "?!"])
async def test_search_with_no_terms_is_empty(transcripts: TranscriptStore, query: str) -> None:
    conversation_id = await transcripts.create_conversation()
    await transcripts.add_message(conversation_id, "user", "anything")
    assert await transcripts.search_transcripts(query) == []


async def test_delete_conversation_removes_index_entries(transcripts: TranscriptStore) -> None:
    keep = await transcripts.create_conversation()
    drop = await transcripts.create_conversation()
    await transcripts.add_message(keep, "user", "orchid care tips")
    await transcripts.add_message(drop, "user", "orchid repotting")

    assert await transcripts.delete_conversation(drop)
    assert not await transcripts.delete_conversation(drop)
    assert await transcripts.get_conversation(drop) is None
    assert await transcripts.get_messages(drop) == []

    hits = await transcripts.search_transcripts("orchid")
    assert [h.conversation_id for h in hits] == [keep]


def test_to_fts_query_quotes_terms() -> None:
    assert to_fts_query('lake "cabin" AND-trip') == '"lake" "cabin" "AND" "trip"'
    assert to_fts_query("...") == ""
