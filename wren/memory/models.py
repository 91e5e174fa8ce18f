"""Data models for memory and conversation storage."""

from __future__ import annotations

from enum import StrEnum
from typing import Any

from pydantic import BaseModel, Field


class MemoryCategory(StrEnum):
    PERSONAL = "personal"
    PREFERENCE = "preference"
    FACT = "fact"
    TASK = "task"
    RELATIONSHIP = "relationship"

    @property
    def display_name(self) -> str:
        return _DISPLAY_NAMES[self]


_DISPLAY_NAMES = {
    MemoryCategory.PERSONAL: "Personal Info",
    MemoryCategory.PREFERENCE: "Preferences",
    MemoryCategory.FACT: "Facts",
    MemoryCategory.TASK: "Tasks",
    MemoryCategory.RELATIONSHIP: "Relationships",
}


class MemorySource(StrEnum):
    EXPLICIT = "explicit"  # the user asked us to remember it
    INFERRED = "inferred"  # picked up from conversation


def normalize_subject(subject: str | None) -> str | None:
    """Lowercase, trim and comma-join subject tokens; None if nothing is left."""
    if subject is None:
        return None
    tokens = [t.strip().lower() for t in subject.split(",")]
    tokens = [t for t in tokens if t]
    return ",".join(tokens) if tokens else None


class Memory(BaseModel):
    """A stored fact about the user or their world."""

    id: int
    content: str
    category: MemoryCategory
    source: MemorySource = MemorySource.EXPLICIT
    subject: str | None = None
    confidence: float = Field(default=1.0, ge=0.0, le=1.0)
    supersedes: int | None = None
    created_at: str = ""
    updated_at: str = ""
    last_confirmed: str | None = None

    @property
    def is_live(self) -> bool:
        """Rows with zero confidence have been retired by a correction."""
        return self.confidence > 0

    @property
    def subjects(self) -> list[str]:
        if not self.subject:
            return []
        return [s.strip() for s in self.subject.split(",") if s.strip()]

    @classmethod
    def from_row(cls, row: Any) -> Memory:
        data = dict(row)
        # Rows migrated from v1 may carry categories we no longer know.
        if data["category"] not in MemoryCategory._value2member_map_:
            data["category"] = MemoryCategory.FACT
        if data.get("source") not in MemorySource._value2member_map_:
            data["source"] = MemorySource.EXPLICIT
        return cls(**data)


class Conversation(BaseModel):
    """A persisted chat session."""

    id: int
    title: str | None = None
    summary: str | None = None
    message_count: int = 0
    created_at: str = ""
    updated_at: str = ""

    @property
    def display_title(self) -> str:
        return self.title or f"Conversation {self.id}"


class ConversationMessage(BaseModel):
    """A single transcript entry."""

    id: int
    conversation_id: int
    role: str  # "user" or "assistant"
    content: str
    created_at: str

    @property
    def is_user(self) -> bool:
        return self.role == "user"


class TranscriptHit(BaseModel):
    """A message matched by full-text search, with its conversation metadata."""

    message_id: int
    conversation_id: int
    conversation_title: str | None = None
    conversation_summary: str | None = None
    role: str
    content: str
    created_at: str
