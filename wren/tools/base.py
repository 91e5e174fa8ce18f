"""Base types for the tool-calling framework."""

from dataclasses import dataclass

from pydantic import BaseModel


@dataclass
class ToolResult:
    """Result of a tool execution.

    Every tool returns one of these. The dispatcher flattens it into the
    plain text that goes back to the model as a tool_result.
    """

    text: str = ""
    error: str | None = None

    @property
    def success(self) -> bool:
        return self.error is None

    def to_content(self) -> str:
        """Serialize for the tool_result content field."""
        if self.error:
            return f"Error: {self.error}"
        return self.text


class ToolParams(BaseModel):
    """Base class for tool parameter models.

    Subclass with Field() definitions. The JSON schema is generated from
    the model and simplified into the flat shape the backend expects.
    Use ``Literal[...]`` for enumerations.
    """
