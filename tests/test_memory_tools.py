"""Tests for the memory tools, run through the dispatcher."""

from wren.memory.models import MemoryCategory
from wren.tools import ToolDispatcher


async def test_memory_add(dispatcher: ToolDispatcher, context) -> None:
    result = await dispatcher.execute(
        "memory_add",
        {"content": "Levi likes Minecraft", "category": "preference", "subject": "Levi"},
    )
    assert result == "Memory stored (id: 1): Levi likes Minecraft"

    memory = await context.memory.get_memory(1)
    assert memory.subject == "levi"
    assert memory.category == MemoryCategory.PREFERENCE


async def test_memory_add_notes_similar(dispatcher: ToolDispatcher) -> None:
    await dispatcher.execute(
        "memory_add", {"content": "Levi likes Minecraft", "category": "preference", "subject": "levi"}
    )
    result = await dispatcher.execute(
        "memory_add", {"content": "Levi loves Minecraft", "category": "preference", "subject": "levi"}
    )
    assert result.startswith("Memory stored (id: 2)")
    assert "Found 1 similar memory(s)" in result


async def test_memory_add_rejects_unknown_category(dispatcher: ToolDispatcher) -> None:
    result = await dispatcher.execute(
        "memory_add", {"content": "x", "category": "gossip", "subject": "y"}
    )
    assert result.startswith("Error: Invalid 'category' parameter")


async def test_memory_search(dispatcher: ToolDispatcher, context) -> None:
    await context.memory.add_memory("Billi eats at 6", MemoryCategory.TASK, subject="billi")

    assert await dispatcher.execute("memory_search", {"query": "eats"}) == (
        "Found 1 memory(s):\n- [id: 1] Billi eats at 6 (about: billi)"
    )
    assert await dispatcher.execute("memory_search", {"query": "zebra"}) == (
        "No memories found matching 'zebra'"
    )


async def test_memory_get_about(dispatcher: ToolDispatcher, context) -> None:
    await context.memory.add_memory("Anniversary June 5", MemoryCategory.RELATIONSHIP, subject="adam,gabby")

    result = await dispatcher.execute("memory_get_about", {"subject": "gabby"})
    assert result == "Found 1 memory(s) about gabby:\n- [id: 1, relationship] Anniversary June 5"
    assert await dispatcher.execute("memory_get_about", {"subject": "gab"}) == (
        "No memories found about 'gab'"
    )


async def test_memory_update_supersedes(dispatcher: ToolDispatcher, context) -> None:
    await context.memory.add_memory("Levi likes Minecraft", MemoryCategory.PREFERENCE, subject="levi")

    result = await dispatcher.execute(
        "memory_update",
        {"old_memory_id": 1, "new_content": "Levi likes chess now", "category": "preference"},
    )
    assert result == (
        "Memory updated. Old memory (id: 1) superseded by new memory (id: 2): Levi likes chess now"
    )
    assert (await context.memory.get_memory(1)).confidence == 0
    assert (await context.memory.get_memory(2)).subject == "levi"


async def test_memory_update_missing(dispatcher: ToolDispatcher) -> None:
    result = await dispatcher.execute(
        "memory_update", {"old_memory_id": 9, "new_content": "x", "category": "fact"}
    )
    assert result == "Error: Failed to update memory. Make sure the old memory ID exists."


async def test_memory_correct_finds_and_supersedes(dispatcher: ToolDispatcher, context) -> None:
    await context.memory.add_memory("Dani's coach is Ms. Park", MemoryCategory.FACT, subject="dani")

    result = await dispatcher.execute(
        "memory_correct",
        {
            "subject": "dani",
            "old_info": "ms. park",
            "new_content": "Dani's coach is Mr. Lee",
            "category": "fact",
        },
    )
    assert result == (
        "Corrected: 'Dani's coach is Ms. Park' -> 'Dani's coach is Mr. Lee' (old id: 1, new id: 2)"
    )
    live = await context.memory.get_memories_by_subject("dani")
    assert [m.content for m in live] == ["Dani's coach is Mr. Lee"]


async def test_memory_correct_adds_when_nothing_matches(dispatcher: ToolDispatcher) -> None:
    result = await dispatcher.execute(
        "memory_correct",
        {"subject": "levi", "old_info": "soccer", "new_content": "Levi plays chess", "category": "fact"},
    )
    assert result == (
        "No existing memory found about 'soccer' for levi. "
        "Added as new memory (id: 1): Levi plays chess"
    )


async def test_memory_delete(dispatcher: ToolDispatcher, context) -> None:
    await context.memory.add_memory("Gate code 1234", MemoryCategory.FACT)

    assert await dispatcher.execute("memory_delete", {"memory_id": 1}) == "Memory (id: 1) deleted"
    assert await dispatcher.execute("memory_delete", {"memory_id": 1}) == (
        "Error: Failed to delete memory. Make sure the ID exists."
    )


async def test_memory_list_subjects(dispatcher: ToolDispatcher, context) -> None:
    assert await dispatcher.execute("memory_list_subjects", {}) == "No subjects found in memory yet"

    await context.memory.add_memory("a", MemoryCategory.FACT, subject="levi,dani")
    assert await dispatcher.execute("memory_list_subjects", {}) == "Known subjects: dani, levi"
