"""Routing table binding each `ToolName` to exactly one handler."""
from dataclasses import dataclass
from enum import Enum
from types import MappingProxyType
from typing import Any, Awaitable, Callable, Dict, Iterable, Mapping, Optional

from mcp.types import Tool

from real_browser_mcp.constants import ToolName
from real_browser_mcp.exceptions import RoutingTableError

ToolHandler = Callable[..., Awaitable[Any]]


class ArgumentPolicy(str, Enum):
    """How the dispatcher hands `arguments` to a handler."""
    NONE = "none"  # handler takes no arguments
    RAW = "raw"  # mapping passed unmodified, may be None
    DEFAULT_EMPTY = "default_empty"  # absent arguments become {}


@dataclass(frozen=True)
class ToolRoute:
    """A handler bound to one tool name."""
    handler: ToolHandler
    arguments: ArgumentPolicy = ArgumentPolicy.RAW

    async def invoke(self, arguments: Optional[Dict[str, Any]]) -> Any:
        if self.arguments is ArgumentPolicy.NONE:
            return await self.handler()
        if self.arguments is ArgumentPolicy.DEFAULT_EMPTY:
            return await self.handler(arguments or {})
        return await self.handler(arguments)


def validate_routing_table(
    routes: Mapping[ToolName, ToolRoute], tools: Iterable[Tool]
) -> Mapping[ToolName, ToolRoute]:
    """Check that registry, routing table and `ToolName` agree exactly.

    Args:
        routes: Handler binding per tool name
        tools: Advertised tool descriptors

    Returns:
        A read-only copy of the routing table

    Raises:
        RoutingTableError: On a duplicate descriptor, an unknown name, or a
            tool without both a descriptor and a route
    """
    descriptor_names = []
    for tool in tools:
        try:
            descriptor_names.append(ToolName(tool.name))
        except ValueError as e:
            raise RoutingTableError(f"Descriptor for unknown tool: {tool.name}") from e

    duplicates = sorted({name.value for name in descriptor_names if descriptor_names.count(name) > 1})
    if duplicates:
        raise RoutingTableError(f"Duplicate tool descriptors: {', '.join(duplicates)}")

    expected = set(ToolName)
    missing_descriptors = expected - set(descriptor_names)
    missing_routes = expected - set(routes)
    extra_routes = set(routes) - expected
    problems = []
    if missing_descriptors:
        problems.append("no descriptor for " + ", ".join(sorted(n.value for n in missing_descriptors)))
    if missing_routes:
        problems.append("no handler for " + ", ".join(sorted(n.value for n in missing_routes)))
    if extra_routes:
        problems.append("handler for unknown tool " + ", ".join(sorted(map(str, extra_routes))))
    if problems:
        raise RoutingTableError("Routing table does not match tool registry: " + "; ".join(problems))

    return MappingProxyType(dict(routes))
