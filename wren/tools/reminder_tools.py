"""Reminder tools."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from pydantic import Field

from wren.tools.base import ToolParams, ToolResult
from wren.tools.dates import format_datetime, parse_reminder_due
from wren.tools.registry import registry

if TYPE_CHECKING:
    from wren.context import AssistantContext
    from wren.integrations.base import Reminder

logger = logging.getLogger(__name__)

_CATEGORY = "reminders"

_PRIORITIES = {"high": 1, "medium": 5, "low": 9}


def _format_reminder(reminder: Reminder, *, show_list: bool = False) -> str:
    line = f"- {reminder.title} [id: {reminder.id}]"
    if reminder.due:
        line += f" (due: {format_datetime(reminder.due)})"
    if show_list and reminder.list_name:
        line += f" [{reminder.list_name}]"
    if reminder.completed:
        line += " (done)"
    return line


# -- reminders_get -----------------------------------------------------------


class GetRemindersParams(ToolParams):
    list_name: str | None = Field(
        default=None,
        alias="list",
        description="Optional list name to filter by (e.g., 'Shopping', 'Work')",
    )
    include_completed: bool = Field(
        default=False, description="Include completed reminders (default false)"
    )


@registry.tool(
    name="reminders_get",
    description="Get reminders. Can filter by list name or get all.",
    category=_CATEGORY,
    params_model=GetRemindersParams,
)
async def reminders_get(
    context: AssistantContext, list_name: str | None = None, include_completed: bool = False
) -> ToolResult:
    reminders = await context.reminders.get_reminders(
        list_name=list_name, include_completed=include_completed
    )
    if not reminders:
        if list_name:
            return ToolResult(text=f"No reminders found in '{list_name}' list")
        return ToolResult(text="No reminders found")

    lines = [f"Found {len(reminders)} reminder(s):"]
    lines.extend(_format_reminder(r, show_list=True) for r in reminders)
    return ToolResult(text="\n".join(lines))


# -- reminders_get_due -------------------------------------------------------


class GetDueParams(ToolParams):
    days: int = Field(default=7, ge=0, description="Number of days to look ahead (default 7)")


@registry.tool(
    name="reminders_get_due",
    description="Get reminders due within a number of days.",
    category=_CATEGORY,
    params_model=GetDueParams,
)
async def reminders_get_due(context: AssistantContext, days: int = 7) -> ToolResult:
    reminders = await context.reminders.get_due(days)
    if not reminders:
        return ToolResult(text=f"No reminders due within the next {days} day(s)")

    lines = [f"Found {len(reminders)} reminder(s) due within {days} day(s):"]
    lines.extend(_format_reminder(r) for r in reminders)
    return ToolResult(text="\n".join(lines))


# -- reminders_create --------------------------------------------------------


class CreateReminderParams(ToolParams):
    title: str = Field(description="Reminder title")
    due_date: str | None = Field(
        default=None,
        description=(
            "Due date/time in ISO format or relative like 'today', 'tomorrow', "
            "'next monday'. Date-only values are due at 9:00 AM."
        ),
    )
    notes: str | None = Field(default=None, description="Additional notes (optional)")
    list_name: str | None = Field(
        default=None,
        alias="list",
        description="List to add to (optional, uses default if not specified)",
    )
    priority: Literal["high", "medium", "low"] | None = Field(
        default=None, description="Priority level (optional)"
    )


@registry.tool(
    name="reminders_create",
    description="Create a new reminder.",
    category=_CATEGORY,
    params_model=CreateReminderParams,
)
async def reminders_create(
    title: str,
    context: AssistantContext,
    due_date: str | None = None,
    notes: str | None = None,
    list_name: str | None = None,
    priority: str | None = None,
) -> ToolResult:
    due = parse_reminder_due(due_date) if due_date else None
    if due_date and due is None:
        return ToolResult(error=f"Could not parse due_date '{due_date}'")

    reminder_id = await context.reminders.create_reminder(
        title,
        notes=notes,
        due=due,
        list_name=list_name,
        priority=_PRIORITIES.get(priority or "", 0),
    )
    logger.info("Created reminder: %s", reminder_id)

    text = f"Created reminder '{title}'"
    if due:
        text += f" due {format_datetime(due)}"
    if list_name:
        text += f" in '{list_name}' list"
    return ToolResult(text=f"{text}. ID: {reminder_id}")


# -- reminders_complete / reminders_delete -----------------------------------


class ReminderIdParams(ToolParams):
    reminder_id: str = Field(description="ID of the reminder")


@registry.tool(
    name="reminders_complete",
    description="Mark a reminder as completed.",
    category=_CATEGORY,
    params_model=ReminderIdParams,
)
async def reminders_complete(reminder_id: str, context: AssistantContext) -> ToolResult:
    await context.reminders.complete_reminder(reminder_id)
    return ToolResult(text="Reminder marked as completed")


@registry.tool(
    name="reminders_delete",
    description="Delete a reminder.",
    category=_CATEGORY,
    params_model=ReminderIdParams,
)
async def reminders_delete(reminder_id: str, context: AssistantContext) -> ToolResult:
    await context.reminders.delete_reminder(reminder_id)
    logger.info("Deleted reminder: %s", reminder_id)
    return ToolResult(text="Reminder deleted")


# -- reminders_search --------------------------------------------------------


class SearchRemindersParams(ToolParams):
    query: str = Field(description="Search text")


@registry.tool(
    name="reminders_search",
    description="Search reminders by keyword.",
    category=_CATEGORY,
    params_model=SearchRemindersParams,
)
async def reminders_search(query: str, context: AssistantContext) -> ToolResult:
    reminders = await context.reminders.search(query)
    if not reminders:
        return ToolResult(text=f"No reminders found matching '{query}'")

    lines = [f"Found {len(reminders)} reminder(s) matching '{query}':"]
    lines.extend(_format_reminder(r) for r in reminders)
    return ToolResult(text="\n".join(lines))


# -- reminders_get_lists -----------------------------------------------------


@registry.tool(
    name="reminders_get_lists",
    description="Get all reminder list names.",
    category=_CATEGORY,
)
async def reminders_get_lists(context: AssistantContext) -> ToolResult:
    lists = await context.reminders.get_lists()
    if not lists:
        return ToolResult(text="No reminder lists found")
    return ToolResult(text=f"Reminder lists: {', '.join(lists)}")
