"""Location tools: where is the owner, and how far from the places they know."""

from __future__ import annotations

from typing import TYPE_CHECKING

from pydantic import Field

from wren.tools.base import ToolParams, ToolResult
from wren.tools.registry import registry

if TYPE_CHECKING:
    from wren.context import AssistantContext

_CATEGORY = "location"

METERS_PER_MILE = 1609.34


def _owner(context: AssistantContext) -> str:
    name = context.settings.owner_name
    return name[:1].upper() + name[1:]


def describe_distance(meters: float) -> str:
    miles = meters / METERS_PER_MILE
    if miles < 0.1:
        return "You're basically there"
    if miles < 1:
        return f"About {miles:.1f} miles away"
    return f"About {miles:.0f} miles away"


@registry.tool(
    name="location_get_current",
    description="Get the owner's current location (neighborhood, city, state).",
    category=_CATEGORY,
)
async def location_get_current(context: AssistantContext) -> ToolResult:
    description = await context.location.current_description()
    return ToolResult(text=f"{_owner(context)} is currently in {description}")


class DistanceParams(ToolParams):
    place: str = Field(description="Name of a known place, e.g. 'home'")


@registry.tool(
    name="location_distance_to",
    description="Get the distance from the current location to a known place.",
    category=_CATEGORY,
    params_model=DistanceParams,
)
async def location_distance_to(place: str, context: AssistantContext) -> ToolResult:
    known = {p.name.lower(): p for p in context.location.known_places()}
    target = known.get(place.strip().lower())
    if target is None:
        names = ", ".join(sorted(known)) or "no places"
        return ToolResult(error=f"I don't know where '{place}' is. I know: {names}")

    meters = await context.location.distance_to(target.name)
    return ToolResult(text=f"{describe_distance(meters)} from {target.name} ({target.address})")


@registry.tool(
    name="location_am_i_at",
    description="Check if the owner is currently at one of their known places.",
    category=_CATEGORY,
)
async def location_am_i_at(context: AssistantContext) -> ToolResult:
    place = await context.location.current_known_place()
    if place is not None:
        return ToolResult(text=f"Yes, {_owner(context)} is at {place.name} ({place.address})")

    description = await context.location.current_description()
    return ToolResult(
        text=f"{_owner(context)} is not at any known place. Currently in {description}"
    )
