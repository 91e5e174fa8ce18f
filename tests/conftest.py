"""Shared test fixtures: temp-file stores and in-memory collaborators."""

from __future__ import annotations

from datetime import UTC, date, datetime, timedelta
from pathlib import Path

import pytest

from wren.config import Settings
from wren.context import AssistantContext
from wren.db import Database
from wren.errors import NotFoundError
from wren.integrations.base import (
    CalendarEvent,
    Contact,
    EmailMessage,
    KnownPlace,
    Reminder,
)
from wren.memory.store import MemoryStore
from wren.memory.transcripts import TranscriptStore
from wren.tools import ToolDispatcher, registry

# -- Fake collaborators ------------------------------------------------------


class FakeCalendar:
    def __init__(self) -> None:
        self.events: list[CalendarEvent] = []
        self.free_slots: list[datetime] = []
        self.queried: list[tuple[datetime, datetime]] = []

    def _find(self, event_id: str) -> CalendarEvent:
        for event in self.events:
            if event.id == event_id:
                return event
        raise NotFoundError(f"Event '{event_id}' not found")

    async def get_events(self, start, end):
        self.queried.append((start, end))
        return [e for e in self.events if e.start and start <= e.start <= end]

    async def create_event(self, title, start, end, *, location=None, notes=None, all_day=False):
        event_id = f"evt-{len(self.events) + 1}"
        self.events.append(
            CalendarEvent(
                id=event_id,
                title=title,
                start=start,
                end=end,
                location=location,
                notes=notes,
                all_day=all_day,
            )
        )
        return event_id

    async def update_event(self, event_id, **changes):
        event = self._find(event_id)
        for key, value in changes.items():
            if value is not None:
                setattr(event, key, value)

    async def delete_event(self, event_id):
        self.events.remove(self._find(event_id))

    async def get_conflicts(self, start, end):
        return [e for e in self.events if e.start and e.end and e.start < end and e.end > start]

    async def find_free_time(self, day, duration_minutes):
        return list(self.free_slots)

    async def search_events(self, query):
        q = query.lower()
        return [e for e in self.events if q in e.title.lower() or q in (e.location or "").lower()]


class FakeMail:
    def __init__(self) -> None:
        self.inbox: list[EmailMessage] = []
        self.sent: list[tuple[str, str, str]] = []
        self.labels: dict[str, set[str]] = {}
        self.archived: list[str] = []
        self.trashed: list[str] = []
        self.read: dict[str, bool] = {}

    def _check(self, message_id: str) -> None:
        if not any(m.id == message_id for m in self.inbox):
            raise NotFoundError(f"Message '{message_id}' not found")

    async def search(self, query, limit=10):
        q = query.lower()
        hits = [m for m in self.inbox if q in m.subject.lower() or q in m.sender.lower()]
        return hits[:limit]

    async def send(self, to, subject, body):
        self.sent.append((to, subject, body))
        return f"sent-{len(self.sent)}"

    async def reply(self, message_id, body):
        self._check(message_id)
        self.sent.append((message_id, "Re:", body))
        return f"sent-{len(self.sent)}"

    async def add_label(self, message_id, label):
        self._check(message_id)
        self.labels.setdefault(message_id, set()).add(label)

    async def remove_label(self, message_id, label):
        self._check(message_id)
        self.labels.get(message_id, set()).discard(label)

    async def archive(self, message_id):
        self._check(message_id)
        self.archived.append(message_id)

    async def trash(self, message_id):
        self._check(message_id)
        self.trashed.append(message_id)

    async def mark_read(self, message_id, read=True):
        self._check(message_id)
        self.read[message_id] = read


class FakeContacts:
    def __init__(self) -> None:
        self.contacts: list[Contact] = []
        self.birthdays: list[tuple[Contact, int]] = []

    async def search_by_name(self, name):
        q = name.lower()
        return [c for c in self.contacts if q in c.display_name.lower()]

    async def search_by_email(self, email):
        return [c for c in self.contacts if email.lower() in (e.lower() for e in c.emails)]

    async def search_by_phone(self, phone):
        digits = "".join(ch for ch in phone if ch.isdigit())
        return [
            c
            for c in self.contacts
            if any(digits and digits in "".join(ch for ch in p if ch.isdigit()) for p in c.phones)
        ]

    async def search_by_organization(self, organization):
        q = organization.lower()
        return [c for c in self.contacts if q in (c.organization or "").lower()]

    async def list_contacts(self, limit=50):
        return self.contacts[:limit]

    async def upcoming_birthdays(self, days=30):
        return [(c, n) for c, n in self.birthdays if n <= days]

    async def create_contact(self, first_name, **fields):
        contact = Contact(
            id=f"c-{len(self.contacts) + 1}",
            first_name=first_name,
            last_name=fields.get("last_name") or "",
            emails=[fields["email"]] if fields.get("email") else [],
            phones=[fields["phone"]] if fields.get("phone") else [],
            organization=fields.get("organization"),
            job_title=fields.get("job_title"),
            note=fields.get("note"),
        )
        self.contacts.append(contact)
        return contact


class FakeLocation:
    def __init__(self) -> None:
        self.description = "Upper West Side, New York, NY"
        self.places = [
            KnownPlace(name="home", address="1 Main St", latitude=40.787, longitude=-73.99),
            KnownPlace(name="house", address="2 River Rd", latitude=41.72, longitude=-73.96),
        ]
        self.distances = {"home": 50.0, "house": 140_000.0}
        self.at: KnownPlace | None = None

    async def current_description(self):
        return self.description

    async def distance_to(self, place):
        try:
            return self.distances[place.lower()]
        except KeyError:
            raise NotFoundError(f"Unknown place '{place}'") from None

    async def current_known_place(self):
        return self.at

    def known_places(self):
        return list(self.places)


class FakeReminders:
    def __init__(self) -> None:
        self.reminders: list[Reminder] = []
        self.lists = ["Reminders", "Shopping"]

    def _find(self, reminder_id: str) -> Reminder:
        for reminder in self.reminders:
            if reminder.id == reminder_id:
                return reminder
        raise NotFoundError(f"Reminder '{reminder_id}' not found")

    async def get_reminders(self, list_name=None, include_completed=False):
        return [
            r
            for r in self.reminders
            if (list_name is None or r.list_name == list_name)
            and (include_completed or not r.completed)
        ]

    async def get_due(self, days=7):
        horizon = datetime.now(UTC) + timedelta(days=days)
        return [r for r in self.reminders if r.due and r.due <= horizon and not r.completed]

    async def create_reminder(self, title, *, notes=None, due=None, list_name=None, priority=0):
        reminder = Reminder(
            id=f"r-{len(self.reminders) + 1}",
            title=title,
            notes=notes,
            due=due,
            list_name=list_name or "Reminders",
            priority=priority,
        )
        self.reminders.append(reminder)
        return reminder.id

    async def complete_reminder(self, reminder_id):
        self._find(reminder_id).completed = True

    async def delete_reminder(self, reminder_id):
        self.reminders.remove(self._find(reminder_id))

    async def search(self, query):
        q = query.lower()
        return [r for r in self.reminders if q in r.title.lower()]

    async def get_lists(self):
        return list(self.lists)


# -- Fixtures ----------------------------------------------------------------


@pytest.fixture
def test_settings(tmp_path: Path) -> Settings:
    return Settings(
        anthropic_api_key="test-key",
        claude_model="claude-test-model",
        database_path=tmp_path / "wren.db",
        owner_name="sam",
        timezone="UTC",
    )


@pytest.fixture
def database(tmp_path: Path) -> Database:
    return Database(tmp_path / "test.db")


@pytest.fixture
def memory_store(database: Database) -> MemoryStore:
    return MemoryStore(database)


@pytest.fixture
def transcripts(database: Database) -> TranscriptStore:
    return TranscriptStore(database)


@pytest.fixture
def calendar() -> FakeCalendar:
    return FakeCalendar()


@pytest.fixture
def mail() -> FakeMail:
    return FakeMail()


@pytest.fixture
def contacts() -> FakeContacts:
    return FakeContacts()


@pytest.fixture
def location() -> FakeLocation:
    return FakeLocation()


@pytest.fixture
def reminders() -> FakeReminders:
    return FakeReminders()


@pytest.fixture
def context(test_settings, calendar, mail, contacts, location, reminders) -> AssistantContext:
    """A fully configured context over a temp database."""
    return AssistantContext.create(
        config=test_settings,
        calendar=calendar,
        mail=mail,
        contacts=contacts,
        location=location,
        reminders=reminders,
    )


@pytest.fixture
def bare_context(test_settings) -> AssistantContext:
    """A context with stores only: every collaborator category is unconfigured."""
    return AssistantContext.create(config=test_settings)


@pytest.fixture
def dispatcher(context: AssistantContext) -> ToolDispatcher:
    return ToolDispatcher(registry, context)


@pytest.fixture(autouse=True)
def _utc_timezone(monkeypatch: pytest.MonkeyPatch) -> None:
    """Pin date helpers to UTC so relative dates are deterministic."""
    monkeypatch.setattr("wren.config.settings.timezone", "UTC")


@pytest.fixture
def today() -> date:
    return datetime.now(UTC).date()
