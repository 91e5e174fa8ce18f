"""System prompt assembly."""

from __future__ import annotations

import logging
import zoneinfo
from datetime import datetime
from pathlib import Path
from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from wren.context import AssistantContext

logger = logging.getLogger(__name__)

CONFIG_DIR = Path(__file__).resolve().parent.parent.parent / "config"

_FALLBACK_PERSONA = "You are Wren, {owner}'s personal assistant."


def _read_config(filename: str) -> str:
    """Read a config markdown file, returning empty string if missing."""
    path = CONFIG_DIR / filename
    if path.exists():
        return path.read_text(encoding="utf-8")
    return ""


async def _render_memories(context: AssistantContext) -> str:
    try:
        return await context.memory.render_for_prompt()
    except Exception:
        logger.exception("Memory retrieval failed")
        return ""


async def build_system_prompt(context: AssistantContext) -> list[dict]:
    """Assemble the system prompt blocks for one turn.

    The persona from SOUL.md gets ``cache_control`` so it is cached across
    tool-calling rounds. The current time and the remembered facts change
    between turns and follow as separate blocks.
    """
    owner = context.settings.owner_name
    soul = _read_config("SOUL.md") or _FALLBACK_PERSONA
    static_text = soul.replace("{owner}", owner)

    tz = zoneinfo.ZoneInfo(context.settings.timezone)
    now = datetime.now(tz)
    time_text = (
        f"Current time: {now.strftime('%A, %B %d, %Y %I:%M %p %Z')} "
        f"({context.settings.timezone})"
    )

    blocks: list[dict] = [
        {
            "type": "text",
            "text": static_text,
            "cache_control": {"type": "ephemeral"},
        },
        {
            "type": "text",
            "text": time_text,
        },
    ]

    memory_text = await _render_memories(context)
    if memory_text:
        blocks.append({"type": "text", "text": memory_text})

    return blocks
