"""Tests for the mail tools against an in-memory mailbox."""

from datetime import UTC, datetime

import pytest

from wren.integrations.base import EmailMessage
from wren.tools import ToolDispatcher


@pytest.fixture
def inbox(mail):
    mail.inbox.append(
        EmailMessage(
            id="m1",
            sender="office@school.org",
            subject="Pajama day",
            date=datetime(2026, 3, 13, 8, 15, tzinfo=UTC),
            unread=True,
        )
    )
    return mail


async def test_search(dispatcher: ToolDispatcher, inbox) -> None:
    result = await dispatcher.execute("gmail_search", {"query": "school"})
    assert result == (
        "Found 1 email(s):\n"
        "- ID: m1 | From: office@school.org | Subject: Pajama day | Date: Mar 13, 2026 at 8:15 AM"
    )
    assert await dispatcher.execute("gmail_search", {"query": "bank"}) == (
        "No emails found matching 'bank'"
    )


async def test_search_rejects_zero_limit(dispatcher: ToolDispatcher) -> None:
    result = await dispatcher.execute("gmail_search", {"query": "x", "limit": 0})
    assert result.startswith("Error: Invalid 'limit' parameter")


async def test_send(dispatcher: ToolDispatcher, mail) -> None:
    result = await dispatcher.execute(
        "gmail_send", {"to": "adam@example.com", "subject": "Dinner", "body": "7pm?"}
    )
    assert result == "Email sent successfully to adam@example.com. Message ID: sent-1"
    assert mail.sent == [("adam@example.com", "Dinner", "7pm?")]


async def test_send_missing_body(dispatcher: ToolDispatcher, mail) -> None:
    result = await dispatcher.execute("gmail_send", {"to": "a@b.com", "subject": "x"})
    assert result == "Error: Missing 'body' parameter"
    assert mail.sent == []


async def test_reply(dispatcher: ToolDispatcher, inbox) -> None:
    assert await dispatcher.execute("gmail_reply", {"message_id": "m1", "body": "Thanks!"}) == (
        "Reply sent successfully. Message ID: sent-1"
    )
    assert await dispatcher.execute("gmail_reply", {"message_id": "nope", "body": "x"}) == (
        "Error: Message 'nope' not found"
    )


async def test_label(dispatcher: ToolDispatcher, inbox) -> None:
    assert await dispatcher.execute(
        "gmail_label", {"message_id": "m1", "label": "School", "action": "add"}
    ) == "Label 'School' added to message"
    assert inbox.labels["m1"] == {"School"}

    assert await dispatcher.execute(
        "gmail_label", {"message_id": "m1", "label": "School", "action": "remove"}
    ) == "Label 'School' removed from message"
    assert inbox.labels["m1"] == set()


async def test_label_bad_action(dispatcher: ToolDispatcher, inbox) -> None:
    result = await dispatcher.execute(
        "gmail_label", {"message_id": "m1", "label": "School", "action": "toggle"}
    )
    assert result.startswith("Error: Invalid 'action' parameter")


async def test_archive_trash_mark_read(dispatcher: ToolDispatcher, inbox) -> None:
    assert await dispatcher.execute("gmail_archive", {"message_id": "m1"}) == (
        "Message archived successfully"
    )
    assert await dispatcher.execute("gmail_trash", {"message_id": "m1"}) == "Message moved to trash"
    assert await dispatcher.execute("gmail_mark_read", {"message_id": "m1", "read": True}) == (
        "Message marked as read"
    )
    assert await dispatcher.execute("gmail_mark_read", {"message_id": "m1", "read": False}) == (
        "Message marked as unread"
    )
    assert inbox.archived == ["m1"]
    assert inbox.trashed == ["m1"]
    assert inbox.read == {"m1": False}
