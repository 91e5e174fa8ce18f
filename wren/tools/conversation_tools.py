"""Search over past conversation transcripts."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from wren.tools.base import ToolParams, ToolResult
from wren.tools.registry import registry

if TYPE_CHECKING:
    from wren.context import AssistantContext

_SNIPPET_LENGTH = 200


class ConversationSearchParams(ToolParams):
    query: str = Field(description="Words to look for in past conversations")
    limit: int = Field(default=10, gt=0, le=50, description="Maximum number of matches (default 10)")


@registry.tool(
    name="conversation_search",
    description=(
        "Search past conversations for something that was said. Use when the user "
        "asks 'what did we talk about ...' or refers to an earlier conversation."
    ),
    category="transcripts",
    params_model=ConversationSearchParams,
)
async def conversation_search(
    query: str, context: AssistantContext, limit: int = 10
) -> ToolResult:
    hits = await context.transcripts.search_transcripts(query, limit=limit)
    if not hits:
        return ToolResult(text=f"No past messages found matching '{query}'")

    lines = [f"Found {len(hits)} message(s):"]
    for hit in hits:
        title = hit.conversation_title or f"Conversation {hit.conversation_id}"
        snippet = hit.content
        if len(snippet) > _SNIPPET_LENGTH:
            snippet = snippet[:_SNIPPET_LENGTH].rstrip() + "..."
        lines.append(f"- [{title}, {hit.created_at[:10]}] {hit.role}: {snippet}")
    return ToolResult(text="\n".join(lines))
