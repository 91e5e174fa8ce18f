"""Collaborator interfaces for the tool catalog.

Concrete providers (EventKit, Gmail, CoreLocation, ...) live outside this
package. Anything that satisfies these protocols can be handed to
:class:`wren.context.AssistantContext`. Providers signal failure by raising
:class:`wren.errors.WrenError` subclasses; the tool dispatcher turns those
into result text.
"""

from __future__ import annotations

from datetime import date, datetime
from typing import Protocol, runtime_checkable

from pydantic import BaseModel, Field

# -- Domain models -----------------------------------------------------------


class CalendarEvent(BaseModel):
    id: str
    title: str = "(no title)"
    start: datetime | None = None
    end: datetime | None = None
    location: str | None = None
    notes: str | None = None
    all_day: bool = False
    calendar: str | None = None


class EmailMessage(BaseModel):
    id: str
    sender: str
    subject: str = "(no subject)"
    snippet: str = ""
    date: datetime
    unread: bool = False


class Reminder(BaseModel):
    id: str
    title: str
    notes: str | None = None
    due: datetime | None = None
    list_name: str | None = None
    completed: bool = False
    priority: int = 0  # 0 none, 1 high, 5 medium, 9 low


class ContactAddress(BaseModel):
    label: str | None = None
    street: str = ""
    city: str = ""
    state: str = ""
    postal_code: str = ""
    country: str = ""

    @property
    def formatted(self) -> str:
        """Multi-line postal form: street, "City, ST 12345", country."""
        city_line = self.city
        if self.state:
            city_line = f"{city_line}, {self.state}" if city_line else self.state
        if self.postal_code:
            city_line += f" {self.postal_code}"
        lines = [self.street, city_line, self.country]
        return "\n".join(line for line in lines if line)


class Contact(BaseModel):
    id: str
    first_name: str = ""
    last_name: str = ""
    emails: list[str] = Field(default_factory=list)
    phones: list[str] = Field(default_factory=list)
    addresses: list[ContactAddress] = Field(default_factory=list)
    organization: str | None = None
    job_title: str | None = None
    birthday: date | None = None
    note: str | None = None

    @property
    def display_name(self) -> str:
        name = f"{self.first_name} {self.last_name}".strip()
        return name or self.organization or "(no name)"

    @property
    def primary_email(self) -> str | None:
        return self.emails[0] if self.emails else None

    @property
    def primary_phone(self) -> str | None:
        return self.phones[0] if self.phones else None

    @property
    def primary_address(self) -> ContactAddress | None:
        return self.addresses[0] if self.addresses else None

    @property
    def formatted_birthday(self) -> str | None:
        if self.birthday is None:
            return None
        return f"{self.birthday:%B} {self.birthday.day}"


class KnownPlace(BaseModel):
    name: str
    address: str
    latitude: float
    longitude: float


# -- Provider protocols ------------------------------------------------------


@runtime_checkable
class CalendarProvider(Protocol):
    """Read and write the user's calendar."""

    async def get_events(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        ...

    async def create_event(
        self,
        title: str,
        start: datetime,
        end: datetime,
        *,
        location: str | None = None,
        notes: str | None = None,
        all_day: bool = False,
    ) -> str:
        """Create an event and return its id."""
        ...

    async def update_event(
        self,
        event_id: str,
        *,
        title: str | None = None,
        start: datetime | None = None,
        end: datetime | None = None,
        location: str | None = None,
        notes: str | None = None,
    ) -> None:
        ...

    async def delete_event(self, event_id: str) -> None:
        ...

    async def get_conflicts(self, start: datetime, end: datetime) -> list[CalendarEvent]:
        """Events overlapping ``[start, end)``. Empty when the slot is free."""
        ...

    async def find_free_time(self, day: date, duration_minutes: int) -> list[datetime]:
        """Start times of free slots of the given length on *day*."""
        ...

    async def search_events(self, query: str) -> list[CalendarEvent]:
        ...


@runtime_checkable
class MailProvider(Protocol):
    """Search, send and organize email."""

    async def search(self, query: str, limit: int = 10) -> list[EmailMessage]:
        ...

    async def send(self, to: str, subject: str, body: str) -> str:
        """Send a new message and return its id."""
        ...

    async def reply(self, message_id: str, body: str) -> str:
        ...

    async def add_label(self, message_id: str, label: str) -> None:
        ...

    async def remove_label(self, message_id: str, label: str) -> None:
        ...

    async def archive(self, message_id: str) -> None:
        ...

    async def trash(self, message_id: str) -> None:
        ...

    async def mark_read(self, message_id: str, read: bool = True) -> None:
        ...


@runtime_checkable
class ContactsProvider(Protocol):
    """The user's address book."""

    async def search_by_name(self, name: str) -> list[Contact]:
        ...

    async def search_by_email(self, email: str) -> list[Contact]:
        ...

    async def search_by_phone(self, phone: str) -> list[Contact]:
        ...

    async def search_by_organization(self, organization: str) -> list[Contact]:
        ...

    async def list_contacts(self, limit: int = 50) -> list[Contact]:
        ...

    async def upcoming_birthdays(self, days: int = 30) -> list[tuple[Contact, int]]:
        """Contacts with a birthday in the next *days* days and the days until it."""
        ...

    async def create_contact(
        self,
        first_name: str,
        *,
        last_name: str | None = None,
        email: str | None = None,
        phone: str | None = None,
        organization: str | None = None,
        job_title: str | None = None,
        note: str | None = None,
    ) -> Contact:
        ...


@runtime_checkable
class LocationProvider(Protocol):
    """Where the user is, relative to the places they care about."""

    async def current_description(self) -> str:
        """Human-readable current location, e.g. "Upper West Side, New York, NY"."""
        ...

    async def distance_to(self, place: str) -> float:
        """Distance in meters to a known place.

        Raises :class:`wren.errors.NotFoundError` for an unknown place name.
        """
        ...

    async def current_known_place(self) -> KnownPlace | None:
        ...

    def known_places(self) -> list[KnownPlace]:
        ...


@runtime_checkable
class RemindersProvider(Protocol):
    """To-do items with optional due dates, grouped into lists."""

    async def get_reminders(
        self, list_name: str | None = None, include_completed: bool = False
    ) -> list[Reminder]:
        ...

    async def get_due(self, days: int = 7) -> list[Reminder]:
        ...

    async def create_reminder(
        self,
        title: str,
        *,
        notes: str | None = None,
        due: datetime | None = None,
        list_name: str | None = None,
        priority: int = 0,
    ) -> str:
        ...

    async def complete_reminder(self, reminder_id: str) -> None:
        ...

    async def delete_reminder(self, reminder_id: str) -> None:
        ...

    async def search(self, query: str) -> list[Reminder]:
        ...

    async def get_lists(self) -> list[str]:
        ...
