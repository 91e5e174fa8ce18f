"""Mail tools: search, send, reply, label, archive, trash, mark read."""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Literal

from pydantic import Field

from wren.tools.base import ToolParams, ToolResult
from wren.tools.dates import format_datetime
from wren.tools.registry import registry

if TYPE_CHECKING:
    from wren.context import AssistantContext

logger = logging.getLogger(__name__)

_CATEGORY = "mail"


class MessageIdParams(ToolParams):
    message_id: str = Field(description="ID of the message")


# -- gmail_search ------------------------------------------------------------


class SearchParams(ToolParams):
    query: str = Field(
        description="Gmail search query, e.g. 'from:school', 'is:unread newer_than:1d'"
    )
    limit: int = Field(default=10, gt=0, description="Max results to return (default 10)")


@registry.tool(
    name="gmail_search",
    description=(
        "Search emails using Gmail query syntax. Examples: 'from:school', "
        "'subject:pajama day', 'is:unread newer_than:1d'."
    ),
    category=_CATEGORY,
    params_model=SearchParams,
)
async def gmail_search(query: str, context: AssistantContext, limit: int = 10) -> ToolResult:
    messages = await context.mail.search(query, limit=limit)
    if not messages:
        return ToolResult(text=f"No emails found matching '{query}'")

    lines = [f"Found {len(messages)} email(s):"]
    for msg in messages:
        lines.append(
            f"- ID: {msg.id} | From: {msg.sender} | Subject: {msg.subject} "
            f"| Date: {format_datetime(msg.date)}"
        )
    return ToolResult(text="\n".join(lines))


# -- gmail_send --------------------------------------------------------------


class SendParams(ToolParams):
    to: str = Field(description="Recipient email address")
    subject: str = Field(description="Email subject")
    body: str = Field(description="Email body text")


@registry.tool(
    name="gmail_send",
    description="Send a new email.",
    category=_CATEGORY,
    params_model=SendParams,
)
async def gmail_send(to: str, subject: str, body: str, context: AssistantContext) -> ToolResult:
    message_id = await context.mail.send(to, subject, body)
    logger.info("Sent email %s to %s", message_id, to)
    return ToolResult(text=f"Email sent successfully to {to}. Message ID: {message_id}")


# -- gmail_reply -------------------------------------------------------------


class ReplyParams(ToolParams):
    message_id: str = Field(description="ID of the message to reply to")
    body: str = Field(description="Reply body text")


@registry.tool(
    name="gmail_reply",
    description="Reply to an existing email thread.",
    category=_CATEGORY,
    params_model=ReplyParams,
)
async def gmail_reply(message_id: str, body: str, context: AssistantContext) -> ToolResult:
    new_id = await context.mail.reply(message_id, body)
    logger.info("Replied to %s with %s", message_id, new_id)
    return ToolResult(text=f"Reply sent successfully. Message ID: {new_id}")


# -- gmail_label -------------------------------------------------------------


class LabelParams(ToolParams):
    message_id: str = Field(description="ID of the message")
    label: str = Field(description="Label name (will be created if it doesn't exist)")
    action: Literal["add", "remove"] = Field(description="Whether to add or remove the label")


@registry.tool(
    name="gmail_label",
    description="Add or remove a label from an email.",
    category=_CATEGORY,
    params_model=LabelParams,
)
async def gmail_label(
    message_id: str, label: str, action: str, context: AssistantContext
) -> ToolResult:
    if action == "add":
        await context.mail.add_label(message_id, label)
        return ToolResult(text=f"Label '{label}' added to message")
    await context.mail.remove_label(message_id, label)
    return ToolResult(text=f"Label '{label}' removed from message")


# -- gmail_archive / gmail_trash ---------------------------------------------


@registry.tool(
    name="gmail_archive",
    description="Archive an email (remove from inbox).",
    category=_CATEGORY,
    params_model=MessageIdParams,
)
async def gmail_archive(message_id: str, context: AssistantContext) -> ToolResult:
    await context.mail.archive(message_id)
    return ToolResult(text="Message archived successfully")


@registry.tool(
    name="gmail_trash",
    description="Move an email to trash.",
    category=_CATEGORY,
    params_model=MessageIdParams,
)
async def gmail_trash(message_id: str, context: AssistantContext) -> ToolResult:
    await context.mail.trash(message_id)
    return ToolResult(text="Message moved to trash")


# -- gmail_mark_read ---------------------------------------------------------


class MarkReadParams(ToolParams):
    message_id: str = Field(description="ID of the message")
    read: bool = Field(description="true to mark as read, false for unread")


@registry.tool(
    name="gmail_mark_read",
    description="Mark an email as read or unread.",
    category=_CATEGORY,
    params_model=MarkReadParams,
)
async def gmail_mark_read(message_id: str, read: bool, context: AssistantContext) -> ToolResult:
    await context.mail.mark_read(message_id, read=read)
    return ToolResult(text="Message marked as read" if read else "Message marked as unread")
