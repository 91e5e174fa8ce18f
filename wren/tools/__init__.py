"""Tool framework: import tool modules here to register them."""

# Import tool modules so their @registry.tool() decorators execute.
# Categories whose collaborator is missing are filtered per context by
# ToolDispatcher, so every module is always imported.
from wren.tools import (  # noqa: F401
    calendar_tools,
    contact_tools,
    conversation_tools,
    location_tools,
    mail_tools,
    memory_tools,
    reminder_tools,
)
from wren.tools.registry import ToolDispatcher, registry

__all__ = ["ToolDispatcher", "registry"]
