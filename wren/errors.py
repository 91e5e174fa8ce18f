"""Error taxonomy shared by the stores, tools and orchestrator."""


class WrenError(Exception):
    """Base class for errors with a user-presentable message."""


class AccessDeniedError(WrenError):
    """A collaborator is missing the permission it needs."""


class NotFoundError(WrenError):
    """An entity id could not be resolved."""


class InvalidInputError(WrenError):
    """A tool parameter was missing or malformed."""


class ApiError(WrenError):
    """Non-success status from the backend or an upstream service."""

    def __init__(self, status_code: int, message: str | None = None) -> None:
        self.status_code = status_code
        super().__init__(message or f"API error with status code: {status_code}")


class NetworkError(WrenError):
    """Transport failure or timeout."""


class ParseError(WrenError):
    """Response had an unexpected shape."""


class ToolLoopLimitError(WrenError):
    """The model kept requesting tools past the per-turn round limit."""
