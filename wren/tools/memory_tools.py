"""Explicit memory tools.

These are tools the model calls when the user tells it something worth
keeping, corrects something it already knows, or asks what it remembers.
Corrections go through supersession so the old fact stays on record.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Literal

from pydantic import Field

from wren.memory.models import MemoryCategory
from wren.tools.base import ToolParams, ToolResult
from wren.tools.registry import registry

if TYPE_CHECKING:
    from wren.context import AssistantContext

_CATEGORY = "memory"

CategoryName = Literal["personal", "preference", "fact", "task", "relationship"]

_CATEGORY_HELP = (
    "Category: personal (about the owner/family), preference (likes/dislikes), "
    "fact (general info), task (recurring things to do), relationship "
    "(connections between people)"
)


# -- memory_add --------------------------------------------------------------


class AddParams(ToolParams):
    content: str = Field(description="The memory content: a clear, concise statement of the fact")
    category: CategoryName = Field(description=_CATEGORY_HELP)
    subject: str = Field(
        description=(
            "Who/what this is about, lowercase. Comma-separated if multiple, "
            "e.g. 'levi' or 'adam,gabby'"
        )
    )


@registry.tool(
    name="memory_add",
    description=(
        "Store a new memory about the owner, their family, preferences, or facts. "
        "Use when the user says 'remember this', mentions something worth keeping, "
        "or shares personal info. Always identify the subject(s) of the memory."
    ),
    category=_CATEGORY,
    params_model=AddParams,
)
async def memory_add(
    content: str, category: str, subject: str, context: AssistantContext
) -> ToolResult:
    store = context.memory
    similar = await store.find_similar_memories(content, subject)
    new_id = await store.add_memory(content, MemoryCategory(category), subject=subject)
    if new_id is None:
        return ToolResult(error="Failed to store memory")

    text = f"Memory stored (id: {new_id}): {content}"
    if similar:
        text += (
            f"\n\nNote: Found {len(similar)} similar memory(s) - "
            "you may want to review for duplicates."
        )
    return ToolResult(text=text)


# -- memory_search -----------------------------------------------------------


class SearchParams(ToolParams):
    query: str = Field(description="Search term or phrase")


@registry.tool(
    name="memory_search",
    description=(
        "Search existing memories by keyword or phrase. Use to check for existing "
        "info before adding, or to recall something."
    ),
    category=_CATEGORY,
    params_model=SearchParams,
)
async def memory_search(query: str, context: AssistantContext) -> ToolResult:
    memories = await context.memory.search_memories(query)
    if not memories:
        return ToolResult(text=f"No memories found matching '{query}'")

    lines = [f"Found {len(memories)} memory(s):"]
    for memory in memories:
        line = f"- [id: {memory.id}] {memory.content}"
        if memory.subject:
            line += f" (about: {memory.subject})"
        lines.append(line)
    return ToolResult(text="\n".join(lines))


# -- memory_get_about --------------------------------------------------------


class GetAboutParams(ToolParams):
    subject: str = Field(
        description="The person or thing to get memories about, e.g. 'levi', 'house'"
    )


@registry.tool(
    name="memory_get_about",
    description=(
        "Get all memories about a specific person or thing. Use when the user "
        "asks 'what do you know about X'."
    ),
    category=_CATEGORY,
    params_model=GetAboutParams,
)
async def memory_get_about(subject: str, context: AssistantContext) -> ToolResult:
    memories = await context.memory.get_memories_by_subject(subject)
    if not memories:
        return ToolResult(text=f"No memories found about '{subject}'")

    lines = [f"Found {len(memories)} memory(s) about {subject}:"]
    lines.extend(f"- [id: {m.id}, {m.category}] {m.content}" for m in memories)
    return ToolResult(text="\n".join(lines))


# -- memory_update -----------------------------------------------------------


class UpdateParams(ToolParams):
    old_memory_id: int = Field(description="ID of the memory to correct (from memory_search results)")
    new_content: str = Field(description="The corrected memory content")
    category: CategoryName = Field(description="Category for the updated memory")
    subject: str | None = Field(
        default=None, description="Subject(s) of the memory, comma-separated if multiple"
    )


@registry.tool(
    name="memory_update",
    description=(
        "Correct or update an existing memory by id. This supersedes the old "
        "memory and keeps a record of the change."
    ),
    category=_CATEGORY,
    params_model=UpdateParams,
)
async def memory_update(
    old_memory_id: int,
    new_content: str,
    category: str,
    context: AssistantContext,
    subject: str | None = None,
) -> ToolResult:
    new_id = await context.memory.supersede_memory(
        old_memory_id, new_content, MemoryCategory(category), subject=subject
    )
    if new_id is None:
        return ToolResult(error="Failed to update memory. Make sure the old memory ID exists.")
    return ToolResult(
        text=(
            f"Memory updated. Old memory (id: {old_memory_id}) superseded by "
            f"new memory (id: {new_id}): {new_content}"
        )
    )


# -- memory_correct ----------------------------------------------------------


class CorrectParams(ToolParams):
    subject: str = Field(description="Who/what the memory is about")
    old_info: str = Field(description="Keywords from the OLD/wrong information to find")
    new_content: str = Field(description="The complete corrected memory")
    category: CategoryName = Field(description="Category for the memory")


@registry.tool(
    name="memory_correct",
    description=(
        "Correct an existing memory in one step. Use when the user says 'actually', "
        "'not anymore', 'now it's X not Y'. Finds the memory about the subject "
        "containing the old info and supersedes it; adds a new memory if none matches."
    ),
    category=_CATEGORY,
    params_model=CorrectParams,
)
async def memory_correct(
    subject: str,
    old_info: str,
    new_content: str,
    category: str,
    context: AssistantContext,
) -> ToolResult:
    store = context.memory
    needle = old_info.lower()
    match = next(
        (m for m in await store.get_memories_by_subject(subject) if needle in m.content.lower()),
        None,
    )

    if match is None:
        new_id = await store.add_memory(new_content, MemoryCategory(category), subject=subject)
        if new_id is None:
            return ToolResult(error="Failed to store memory")
        return ToolResult(
            text=(
                f"No existing memory found about '{old_info}' for {subject}. "
                f"Added as new memory (id: {new_id}): {new_content}"
            )
        )

    new_id = await store.supersede_memory(
        match.id, new_content, MemoryCategory(category), subject=subject
    )
    if new_id is None:
        return ToolResult(error="Found memory but failed to update it")
    return ToolResult(
        text=(
            f"Corrected: '{match.content}' -> '{new_content}' "
            f"(old id: {match.id}, new id: {new_id})"
        )
    )


# -- memory_delete -----------------------------------------------------------


class DeleteParams(ToolParams):
    memory_id: int = Field(description="ID of the memory to delete")


@registry.tool(
    name="memory_delete",
    description="Delete a memory. Use only when the user explicitly asks to forget something.",
    category=_CATEGORY,
    params_model=DeleteParams,
)
async def memory_delete(memory_id: int, context: AssistantContext) -> ToolResult:
    if await context.memory.delete_memory(memory_id):
        return ToolResult(text=f"Memory (id: {memory_id}) deleted")
    return ToolResult(error="Failed to delete memory. Make sure the ID exists.")


# -- memory_list_subjects ----------------------------------------------------


@registry.tool(
    name="memory_list_subjects",
    description="List all known subjects (people, places, things) that have memories.",
    category=_CATEGORY,
)
async def memory_list_subjects(context: AssistantContext) -> ToolResult:
    subjects = await context.memory.get_all_subjects()
    if not subjects:
        return ToolResult(text="No subjects found in memory yet")
    return ToolResult(text=f"Known subjects: {', '.join(subjects)}")
