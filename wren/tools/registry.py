"""Tool registry and dispatcher.

The registry is the central catalog that tool modules register into at
import time. The dispatcher binds the registry to one
:class:`~wren.context.AssistantContext` and is what the orchestrator calls.
"""

from __future__ import annotations

import inspect
import logging
import time
from dataclasses import dataclass
from typing import TYPE_CHECKING, Any

from pydantic import ValidationError

from wren.errors import WrenError
from wren.tools.base import ToolParams, ToolResult

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable, Iterable

    from wren.context import AssistantContext

logger = logging.getLogger(__name__)

# Keys kept from each generated property schema.
_SCHEMA_KEYS = ("type", "description", "enum")


@dataclass
class ToolDef:
    """Internal representation of a registered tool."""

    name: str
    description: str
    category: str
    handler: Callable[..., Awaitable[ToolResult]]
    params_model: type[ToolParams] | None = None


class ToolRegistry:
    """Central registry for all tools.

    Register with the decorator::

        @registry.tool(
            name="my_tool",
            description="Does a thing",
            category="utility",
            params_model=MyToolParams,
        )
        async def my_tool(thing: str, context: AssistantContext) -> ToolResult:
            return ToolResult(text="Done")

    A handler that declares a ``context`` parameter receives the
    dispatcher's :class:`AssistantContext`.
    """

    def __init__(self) -> None:
        self._tools: dict[str, ToolDef] = {}

    def tool(
        self,
        *,
        name: str,
        description: str,
        category: str,
        params_model: type[ToolParams] | None = None,
    ) -> Callable:
        """Decorator to register an async function as a tool."""

        def decorator(fn: Callable[..., Awaitable[ToolResult]]) -> Callable:
            if not inspect.iscoroutinefunction(fn):
                msg = f"Tool handler '{name}' must be an async function"
                raise TypeError(msg)

            self._tools[name] = ToolDef(
                name=name,
                description=description,
                category=category,
                handler=fn,
                params_model=params_model,
            )
            return fn

        return decorator

    def get(self, name: str) -> ToolDef | None:
        """Look up a tool by name."""
        return self._tools.get(name)

    @property
    def tool_names(self) -> list[str]:
        """All registered tool names."""
        return list(self._tools.keys())

    def get_schemas(self, categories: Iterable[str] | None = None) -> list[dict[str, Any]]:
        """Tool descriptors for every registered tool, or only *categories*."""
        wanted = set(categories) if categories is not None else None
        return [
            tool_schema(t)
            for t in self._tools.values()
            if wanted is None or t.category in wanted
        ]

    def get_tools_by_category(self) -> dict[str, list[ToolDef]]:
        """Group registered tools by category."""
        groups: dict[str, list[ToolDef]] = {}
        for tool_def in self._tools.values():
            groups.setdefault(tool_def.category, []).append(tool_def)
        return groups


class ToolDispatcher:
    """Executes tool invocations against one assistant context.

    :meth:`execute` never raises: every outcome, including failures, is
    returned as text for the model to read.
    """

    def __init__(self, registry: ToolRegistry, context: AssistantContext) -> None:
        self._registry = registry
        self._context = context

    def schemas(self) -> list[dict[str, Any]]:
        """Descriptors for the tools whose collaborators are configured."""
        categories = [
            category
            for category in self._registry.get_tools_by_category()
            if self._context.is_configured(category)
        ]
        return self._registry.get_schemas(categories)

    async def execute(self, name: str, arguments: dict[str, Any]) -> str:
        tool_def = self._registry.get(name)
        if tool_def is None:
            logger.warning("Unknown tool requested: %s", name)
            return f"Error: Unknown tool '{name}'"

        if not self._context.is_configured(tool_def.category):
            return f"Error: {tool_def.category.capitalize()} is not configured"

        logger.info("Tool '%s' called with %s", name, arguments)
        t0 = time.monotonic()

        if tool_def.params_model is not None:
            try:
                params = tool_def.params_model.model_validate(arguments or {})
            except ValidationError as exc:
                message = describe_validation_error(exc)
                logger.warning("Tool '%s' rejected input: %s", name, message)
                return f"Error: {message}"
            kwargs = params.model_dump()
        else:
            kwargs = {}

        if _accepts_param(tool_def.handler, "context"):
            kwargs["context"] = self._context

        try:
            result = await tool_def.handler(**kwargs)
        except WrenError as exc:
            elapsed = time.monotonic() - t0
            logger.warning("Tool '%s' failed in %.2fs: %s", name, elapsed, exc)
            return f"Error: {exc}"
        except Exception as exc:
            elapsed = time.monotonic() - t0
            logger.exception("Tool '%s' failed in %.2fs", name, elapsed)
            return f"Error: {exc}"

        elapsed = time.monotonic() - t0
        if result.success:
            logger.info("Tool '%s' succeeded in %.2fs", name, elapsed)
        else:
            logger.warning("Tool '%s' returned error in %.2fs: %s", name, elapsed, result.error)
        return result.to_content()


def describe_validation_error(exc: ValidationError) -> str:
    """Render the first validation problem as a one-line message."""
    error = exc.errors()[0]
    param = ".".join(str(part) for part in error["loc"]) or "input"
    if error["type"] == "missing":
        return f"Missing '{param}' parameter"
    return f"Invalid '{param}' parameter: {error['msg']}"


def tool_schema(tool_def: ToolDef) -> dict[str, Any]:
    """Build a single tool descriptor dict."""
    properties: dict[str, Any] = {}
    required: list[str] = []
    if tool_def.params_model is not None:
        generated = tool_def.params_model.model_json_schema()
        properties = {
            key: _simplify_property(prop)
            for key, prop in generated.get("properties", {}).items()
        }
        required = list(generated.get("required", []))

    return {
        "name": tool_def.name,
        "description": tool_def.description,
        "input_schema": {
            "type": "object",
            "properties": properties,
            "required": required,
        },
    }


def _simplify_property(prop: dict[str, Any]) -> dict[str, Any]:
    """Flatten a pydantic property schema to ``{type, description, enum?}``.

    Optional fields come out of pydantic as ``anyOf: [<schema>, {"type":
    "null"}]``; the non-null branch is used.
    """
    source = dict(prop)
    if "anyOf" in source:
        branches = [b for b in source.pop("anyOf") if b.get("type") != "null"]
        if branches:
            source = {**branches[0], **source}

    simple = {key: source[key] for key in _SCHEMA_KEYS if key in source}
    if "type" not in simple and "enum" in simple:
        simple["type"] = _enum_type(simple["enum"])
    simple.setdefault("type", "string")
    return simple


def _enum_type(values: list[Any]) -> str:
    if all(isinstance(v, bool) for v in values):
        return "boolean"
    if all(isinstance(v, int) for v in values):
        return "integer"
    return "string"


def _accepts_param(fn: Callable[..., Any], param_name: str) -> bool:
    """Check whether a callable accepts a given parameter name."""
    return param_name in inspect.signature(fn).parameters


# Global registry: tool modules register into this at import time.
registry = ToolRegistry()
