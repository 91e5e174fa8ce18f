"""Calendar tools: list, create, update, delete, availability and search."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING

from pydantic import Field

from wren.tools.base import ToolParams, ToolResult
from wren.tools.dates import (
    day_range,
    format_time,
    format_weekday,
    parse_date,
    parse_datetime,
)
from wren.tools.registry import registry

if TYPE_CHECKING:
    from wren.context import AssistantContext
    from wren.integrations.base import CalendarEvent

logger = logging.getLogger(__name__)

_CATEGORY = "calendar"
_BAD_DATETIME = "Invalid date format. Use ISO format (YYYY-MM-DDTHH:MM:SS)"


def _format_event(event: CalendarEvent) -> str:
    line = f"- {event.title} [id: {event.id}]"
    if event.all_day and event.start:
        line += f" on {event.start:%A, %b} {event.start.day} (all day)"
    elif event.start:
        line += f" on {format_weekday(event.start)}"
    if event.location:
        line += f" @ {event.location}"
    return line


def _format_events(events: list[CalendarEvent]) -> str:
    lines = [f"Found {len(events)} event(s):"]
    lines.extend(_format_event(e) for e in events)
    return "\n".join(lines)


# -- calendar_get_events -----------------------------------------------------


class GetEventsParams(ToolParams):
    start_date: str = Field(
        description="Start date in ISO format (YYYY-MM-DD) or relative like 'today', 'tomorrow'"
    )
    end_date: str | None = Field(
        default=None, description="End date in ISO format (YYYY-MM-DD) or relative"
    )


@registry.tool(
    name="calendar_get_events",
    description="Get calendar events for a date range.",
    category=_CATEGORY,
    params_model=GetEventsParams,
)
async def calendar_get_events(
    start_date: str, context: AssistantContext, end_date: str | None = None
) -> ToolResult:
    start = parse_date(start_date)
    if start is None:
        return ToolResult(error=f"Could not parse start_date '{start_date}'")
    # An unparseable end date falls back to the end of the start day.
    end = parse_date(end_date) if end_date else None

    range_start, range_end = day_range(start, end)
    events = await context.calendar.get_events(range_start, range_end)
    if not events:
        return ToolResult(text="No events found in that range")
    return ToolResult(text=_format_events(events))


# -- calendar_create_event ---------------------------------------------------


class CreateEventParams(ToolParams):
    title: str = Field(description="Event title")
    start_time: str = Field(description="Start time in ISO format (YYYY-MM-DDTHH:MM:SS)")
    end_time: str = Field(description="End time in ISO format")
    location: str | None = Field(default=None, description="Event location (optional)")
    notes: str | None = Field(default=None, description="Event notes (optional)")
    all_day: bool = Field(default=False, description="Whether this is an all-day event")


@registry.tool(
    name="calendar_create_event",
    description="Create a new calendar event.",
    category=_CATEGORY,
    params_model=CreateEventParams,
)
async def calendar_create_event(
    title: str,
    start_time: str,
    end_time: str,
    context: AssistantContext,
    location: str | None = None,
    notes: str | None = None,
    all_day: bool = False,
) -> ToolResult:
    start = parse_datetime(start_time)
    end = parse_datetime(end_time)
    if start is None or end is None:
        return ToolResult(error=_BAD_DATETIME)

    event_id = await context.calendar.create_event(
        title, start, end, location=location, notes=notes, all_day=all_day
    )
    logger.info("Created event: %s", event_id)
    return ToolResult(text=f"Created event '{title}' on {format_weekday(start)}. Event ID: {event_id}")


# -- calendar_update_event ---------------------------------------------------


class UpdateEventParams(ToolParams):
    event_id: str = Field(description="ID of the event to update")
    title: str | None = Field(default=None, description="New title (optional)")
    start_time: str | None = Field(default=None, description="New start time (optional)")
    end_time: str | None = Field(default=None, description="New end time (optional)")
    location: str | None = Field(default=None, description="New location (optional)")
    notes: str | None = Field(default=None, description="New notes (optional)")


@registry.tool(
    name="calendar_update_event",
    description="Update an existing calendar event.",
    category=_CATEGORY,
    params_model=UpdateEventParams,
)
async def calendar_update_event(
    event_id: str,
    context: AssistantContext,
    title: str | None = None,
    start_time: str | None = None,
    end_time: str | None = None,
    location: str | None = None,
    notes: str | None = None,
) -> ToolResult:
    start = parse_datetime(start_time) if start_time else None
    end = parse_datetime(end_time) if end_time else None
    if (start_time and start is None) or (end_time and end is None):
        return ToolResult(error=_BAD_DATETIME)

    await context.calendar.update_event(
        event_id, title=title, start=start, end=end, location=location, notes=notes
    )
    return ToolResult(text="Event updated successfully")


# -- calendar_delete_event ---------------------------------------------------


class DeleteEventParams(ToolParams):
    event_id: str = Field(description="ID of the event to delete")


@registry.tool(
    name="calendar_delete_event",
    description="Delete a calendar event.",
    category=_CATEGORY,
    params_model=DeleteEventParams,
)
async def calendar_delete_event(event_id: str, context: AssistantContext) -> ToolResult:
    await context.calendar.delete_event(event_id)
    logger.info("Deleted event: %s", event_id)
    return ToolResult(text="Event deleted successfully")


# -- calendar_check_availability ---------------------------------------------


class CheckAvailabilityParams(ToolParams):
    start_time: str = Field(description="Start time to check in ISO format")
    end_time: str = Field(description="End time to check in ISO format")


@registry.tool(
    name="calendar_check_availability",
    description="Check if a time slot is free.",
    category=_CATEGORY,
    params_model=CheckAvailabilityParams,
)
async def calendar_check_availability(
    start_time: str, end_time: str, context: AssistantContext
) -> ToolResult:
    start = parse_datetime(start_time)
    end = parse_datetime(end_time)
    if start is None or end is None:
        return ToolResult(error="Invalid date format")

    conflicts = await context.calendar.get_conflicts(start, end)
    if not conflicts:
        return ToolResult(text="That time slot is free - no conflicts")

    lines = [f"That time slot has {len(conflicts)} conflict(s):"]
    for event in conflicts:
        line = f"- {event.title}"
        if event.start:
            line += f" at {format_time(event.start)}"
        lines.append(line)
    return ToolResult(text="\n".join(lines))


# -- calendar_find_free_time -------------------------------------------------


class FindFreeTimeParams(ToolParams):
    date: str = Field(description="Date to check in ISO format (YYYY-MM-DD)")
    duration_minutes: int = Field(
        default=60, gt=0, description="Required duration in minutes (default 60)"
    )


@registry.tool(
    name="calendar_find_free_time",
    description="Find available time slots on a given day.",
    category=_CATEGORY,
    params_model=FindFreeTimeParams,
)
async def calendar_find_free_time(
    date: str, context: AssistantContext, duration_minutes: int = 60
) -> ToolResult:
    day = parse_date(date)
    if day is None:
        return ToolResult(error="Invalid date format. Use YYYY-MM-DD")

    slots = await context.calendar.find_free_time(day, duration_minutes)
    if not slots:
        return ToolResult(text=f"No free {duration_minutes}-minute slots found on that day")

    lines = [f"Found {len(slots)} free slot(s) for {duration_minutes} minutes:"]
    lines.extend(f"- {format_time(slot)}" for slot in slots)
    return ToolResult(text="\n".join(lines))


# -- calendar_search ---------------------------------------------------------


class SearchEventsParams(ToolParams):
    query: str = Field(description="Search text")


@registry.tool(
    name="calendar_search",
    description="Search for events by text in title, location, or notes.",
    category=_CATEGORY,
    params_model=SearchEventsParams,
)
async def calendar_search(query: str, context: AssistantContext) -> ToolResult:
    events = await context.calendar.search_events(query)
    if not events:
        return ToolResult(text=f"No events found matching '{query}'")
    return ToolResult(text=_format_events(events))
