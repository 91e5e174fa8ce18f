"""Contact tools.

Lookups by name check stored memories first (the user often tells the
assistant an address or number directly) and then the contacts provider.
"""

from __future__ import annotations

import logging
import re
from typing import TYPE_CHECKING

from pydantic import Field

from wren.tools.base import ToolParams, ToolResult
from wren.tools.registry import registry

if TYPE_CHECKING:
    from wren.context import AssistantContext
    from wren.integrations.base import Contact

logger = logging.getLogger(__name__)

_CATEGORY = "contacts"

_EMAIL_RE = re.compile(r"[A-Za-z0-9._%+-]+@[A-Za-z0-9.-]+\.[A-Za-z]{2,}")
_PHONE_RE = re.compile(r"\+?[\d\-().\s]{10,}")

_EMAIL_HINTS = ("email", "@")
_PHONE_HINTS = ("phone", "number", "cell")

MAX_LIST_LIMIT = 100


def _format_contact(contact: Contact) -> str:
    line = f"- {contact.display_name}"
    if contact.organization:
        line += f" ({contact.organization})"
    if contact.primary_email:
        line += f" | Email: {contact.primary_email}"
    if contact.primary_phone:
        line += f" | Phone: {contact.primary_phone}"
    return line


class NameParams(ToolParams):
    name: str = Field(description="Name of the person")


# -- contacts_lookup ---------------------------------------------------------


@registry.tool(
    name="contacts_lookup",
    description=(
        "Look up contact info for a person by name. Searches both memory and "
        "the address book. Use before sending email to someone."
    ),
    category=_CATEGORY,
    params_model=NameParams,
)
async def contacts_lookup(name: str, context: AssistantContext) -> ToolResult:
    memories = [
        m
        for m in await context.memory.search_memories(name)
        if any(hint in m.content.lower() for hint in (*_EMAIL_HINTS, "phone"))
    ]
    contacts = await context.contacts.search_by_name(name)

    if not memories and not contacts:
        return ToolResult(text=f"No contact information found for '{name}' in memory or contacts.")

    sections = []
    if memories:
        sections.append("\n".join(["From memory:", *(f"- {m.content}" for m in memories)]))
    if contacts:
        sections.append("\n".join(["From contacts:", *(_format_contact(c) for c in contacts)]))
    return ToolResult(text="\n\n".join(sections))


# -- contacts_find_email / contacts_find_phone -------------------------------


async def _find_in_memory(
    context: AssistantContext, name: str, hints: tuple[str, ...], pattern: re.Pattern[str]
) -> str | None:
    for memory in await context.memory.search_memories(name):
        if not any(hint in memory.content.lower() for hint in hints):
            continue
        match = pattern.search(memory.content)
        if match:
            return match.group(0).strip()
    return None


@registry.tool(
    name="contacts_find_email",
    description=(
        "Find the email address for a person. Use this when you need to send an "
        "email and only have a name. Checks memory first, then contacts."
    ),
    category=_CATEGORY,
    params_model=NameParams,
)
async def contacts_find_email(name: str, context: AssistantContext) -> ToolResult:
    email = await _find_in_memory(context, name, _EMAIL_HINTS, _EMAIL_RE)
    if email:
        return ToolResult(text=f"Found email for {name} in memory: {email}")

    for contact in await context.contacts.search_by_name(name):
        if contact.primary_email:
            return ToolResult(text=f"Found email for {name}: {contact.primary_email}")

    return ToolResult(
        text=(
            f"No email found for '{name}'. You can ask me to remember it: "
            f"'Remember that {name}'s email is example@email.com'"
        )
    )


@registry.tool(
    name="contacts_find_phone",
    description="Find the phone number for a person. Checks memory first, then contacts.",
    category=_CATEGORY,
    params_model=NameParams,
)
async def contacts_find_phone(name: str, context: AssistantContext) -> ToolResult:
    phone = await _find_in_memory(context, name, _PHONE_HINTS, _PHONE_RE)
    if phone:
        return ToolResult(text=f"Found phone for {name} in memory: {phone}")

    for contact in await context.contacts.search_by_name(name):
        if contact.primary_phone:
            return ToolResult(text=f"Found phone for {name}: {contact.primary_phone}")

    return ToolResult(
        text=(
            f"No phone number found for '{name}'. You can ask me to remember it: "
            f"'Remember that {name}'s phone is 555-123-4567'"
        )
    )


# -- contacts_create ---------------------------------------------------------


class CreateContactParams(ToolParams):
    first_name: str = Field(description="First name (required)")
    last_name: str | None = Field(default=None, description="Last name (optional)")
    email: str | None = Field(default=None, description="Email address (optional)")
    phone: str | None = Field(default=None, description="Phone number (optional)")
    organization: str | None = Field(default=None, description="Company or organization (optional)")
    job_title: str | None = Field(default=None, description="Job title (optional)")
    note: str | None = Field(default=None, description="Notes about this contact (optional)")


@registry.tool(
    name="contacts_create",
    description="Create a new contact. Use when asked to add someone as a contact or save contact info.",
    category=_CATEGORY,
    params_model=CreateContactParams,
)
async def contacts_create(
    first_name: str,
    context: AssistantContext,
    last_name: str | None = None,
    email: str | None = None,
    phone: str | None = None,
    organization: str | None = None,
    job_title: str | None = None,
    note: str | None = None,
) -> ToolResult:
    contact = await context.contacts.create_contact(
        first_name,
        last_name=last_name,
        email=email,
        phone=phone,
        organization=organization,
        job_title=job_title,
        note=note,
    )
    logger.info("Created contact: %s", contact.id)

    lines = [f"Created contact: {contact.display_name}"]
    if email:
        lines.append(f"Email: {email}")
    if phone:
        lines.append(f"Phone: {phone}")
    if organization:
        lines.append(f"Organization: {organization}")
    return ToolResult(text="\n".join(lines))


# -- reverse lookups ---------------------------------------------------------


class EmailParams(ToolParams):
    email: str = Field(description="Email address to search for")


@registry.tool(
    name="contacts_search_by_email",
    description="Find who owns an email address (reverse lookup).",
    category=_CATEGORY,
    params_model=EmailParams,
)
async def contacts_search_by_email(email: str, context: AssistantContext) -> ToolResult:
    contacts = await context.contacts.search_by_email(email)
    if not contacts:
        return ToolResult(text=f"No contact found with email '{email}'")
    lines = [f"Found {len(contacts)} contact(s) with email '{email}':"]
    lines.extend(_format_contact(c) for c in contacts)
    return ToolResult(text="\n".join(lines))


class PhoneParams(ToolParams):
    phone: str = Field(description="Phone number to search for")


@registry.tool(
    name="contacts_search_by_phone",
    description="Find who owns a phone number (reverse lookup).",
    category=_CATEGORY,
    params_model=PhoneParams,
)
async def contacts_search_by_phone(phone: str, context: AssistantContext) -> ToolResult:
    contacts = await context.contacts.search_by_phone(phone)
    if not contacts:
        return ToolResult(text=f"No contact found with phone number '{phone}'")
    lines = [f"Found {len(contacts)} contact(s) with phone '{phone}':"]
    lines.extend(_format_contact(c) for c in contacts)
    return ToolResult(text="\n".join(lines))


class OrganizationParams(ToolParams):
    organization: str = Field(description="Company or organization name to search for")


@registry.tool(
    name="contacts_search_by_organization",
    description="Find all contacts at a company or organization.",
    category=_CATEGORY,
    params_model=OrganizationParams,
)
async def contacts_search_by_organization(
    organization: str, context: AssistantContext
) -> ToolResult:
    contacts = await context.contacts.search_by_organization(organization)
    if not contacts:
        return ToolResult(text=f"No contacts found at '{organization}'")

    lines = [f"Found {len(contacts)} contact(s) at '{organization}':"]
    for contact in contacts:
        line = f"- {contact.display_name}"
        if contact.job_title:
            line += f" ({contact.job_title})"
        if contact.primary_email:
            line += f" | {contact.primary_email}"
        lines.append(line)
    return ToolResult(text="\n".join(lines))


# -- contacts_list -----------------------------------------------------------


class ListContactsParams(ToolParams):
    limit: int = Field(
        default=50, gt=0, description="Maximum number of contacts to return (default 50, max 100)"
    )


@registry.tool(
    name="contacts_list",
    description="List or browse the contact list. Use when asked 'who's in my contacts'.",
    category=_CATEGORY,
    params_model=ListContactsParams,
)
async def contacts_list(context: AssistantContext, limit: int = 50) -> ToolResult:
    contacts = await context.contacts.list_contacts(min(limit, MAX_LIST_LIMIT))
    if not contacts:
        return ToolResult(text="No contacts found.")

    lines = [f"Contact list ({len(contacts)} shown):"]
    for contact in contacts:
        line = f"- {contact.display_name}"
        if contact.organization:
            line += f" ({contact.organization})"
        lines.append(line)
    return ToolResult(text="\n".join(lines))


# -- contacts_get_address / contacts_get_details -----------------------------


@registry.tool(
    name="contacts_get_address",
    description="Get postal/mailing address for a contact. Use when asked for someone's address.",
    category=_CATEGORY,
    params_model=NameParams,
)
async def contacts_get_address(name: str, context: AssistantContext) -> ToolResult:
    contacts = await context.contacts.search_by_name(name)
    if not contacts:
        return ToolResult(text=f"No contact found for '{name}'")

    for contact in contacts:
        address = contact.primary_address
        if address is None:
            continue
        lines = [f"Address for {contact.display_name}:"]
        if address.label:
            lines.append(f"({address.label})")
        lines.append(address.formatted)
        return ToolResult(text="\n".join(lines))

    return ToolResult(
        text=f"No address found for '{name}'. The contact exists but has no address saved."
    )


def _format_details(contact: Contact) -> str:
    lines = [contact.display_name]
    if contact.organization:
        if contact.job_title:
            lines.append(f"{contact.job_title} at {contact.organization}")
        else:
            lines.append(contact.organization)

    for heading, values in (("Phone", contact.phones), ("Email", contact.emails)):
        if values:
            lines.extend(["", f"{heading}:", *(f"  {v}" for v in values)])

    if contact.addresses:
        lines.extend(["", "Address:"])
        for address in contact.addresses:
            lines.append(f"  {address.label or 'address'}:")
            lines.append("  " + address.formatted.replace("\n", "\n  "))

    if contact.formatted_birthday:
        lines.extend(["", f"Birthday: {contact.formatted_birthday}"])
    if contact.note:
        lines.extend(["", f"Note: {contact.note}"])
    return "\n".join(lines)


@registry.tool(
    name="contacts_get_details",
    description=(
        "Get full detailed information for a contact including all phones, "
        "emails, addresses, birthday, and notes."
    ),
    category=_CATEGORY,
    params_model=NameParams,
)
async def contacts_get_details(name: str, context: AssistantContext) -> ToolResult:
    contacts = await context.contacts.search_by_name(name)
    if not contacts:
        return ToolResult(text=f"No contact found for '{name}'")
    # The provider returns its best match first.
    return ToolResult(text=_format_details(contacts[0]))


# -- contacts_get_birthdays --------------------------------------------------


class BirthdaysParams(ToolParams):
    days: int = Field(default=30, ge=0, description="Number of days to look ahead (default 30)")


@registry.tool(
    name="contacts_get_birthdays",
    description="Get contacts with upcoming birthdays.",
    category=_CATEGORY,
    params_model=BirthdaysParams,
)
async def contacts_get_birthdays(context: AssistantContext, days: int = 30) -> ToolResult:
    birthdays = await context.contacts.upcoming_birthdays(days)
    if not birthdays:
        return ToolResult(text=f"No birthdays found in the next {days} days.")

    lines = [f"Upcoming birthdays (next {days} days):"]
    for contact, days_until in birthdays:
        if days_until == 0:
            when = "TODAY!"
        elif days_until == 1:
            when = "tomorrow"
        else:
            when = f"in {days_until} days"
        lines.append(f"- {contact.display_name}: {contact.formatted_birthday or 'unknown date'} ({when})")
    return ToolResult(text="\n".join(lines))
