"""AssistantContext: everything a session needs, built once at start-up."""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING

from wren.config import Settings, settings as default_settings
from wren.db import Database
from wren.memory.store import MemoryStore
from wren.memory.transcripts import TranscriptStore

if TYPE_CHECKING:
    from pathlib import Path

    from wren.integrations.base import (
        CalendarProvider,
        ContactsProvider,
        LocationProvider,
        MailProvider,
        RemindersProvider,
    )

# Tool categories backed by an optional collaborator of the same name.
COLLABORATOR_CATEGORIES = frozenset({"calendar", "mail", "contacts", "location", "reminders"})


@dataclass
class AssistantContext:
    """Settings, stores and optional collaborators for one assistant.

    Passed explicitly to the orchestrator, the tool dispatcher and the
    session facade. Collaborators left as ``None`` disable their tool
    category.
    """

    settings: Settings
    database: Database
    memory: MemoryStore
    transcripts: TranscriptStore
    calendar: CalendarProvider | None = None
    mail: MailProvider | None = None
    contacts: ContactsProvider | None = None
    location: LocationProvider | None = None
    reminders: RemindersProvider | None = None

    @classmethod
    def create(
        cls,
        *,
        config: Settings | None = None,
        database_path: Path | None = None,
        calendar: CalendarProvider | None = None,
        mail: MailProvider | None = None,
        contacts: ContactsProvider | None = None,
        location: LocationProvider | None = None,
        reminders: RemindersProvider | None = None,
    ) -> AssistantContext:
        """Build a context with stores over a single database file."""
        config = config or default_settings
        database = Database(database_path or config.database_path)
        return cls(
            settings=config,
            database=database,
            memory=MemoryStore(database),
            transcripts=TranscriptStore(database),
            calendar=calendar,
            mail=mail,
            contacts=contacts,
            location=location,
            reminders=reminders,
        )

    def is_configured(self, category: str) -> bool:
        """True unless *category* needs a collaborator that is missing."""
        if category not in COLLABORATOR_CATEGORIES:
            return True
        return getattr(self, category) is not None
