from __future__ import annotations

import importlib
from typing import Any, Iterable, Protocol

from turnledger.errors import ToolResolutionError
from turnledger.models import ToolDefinition


class ToolContract(Protocol):
    name: str

    def definition(self) -> ToolDefinition:
        ...


def coerce_definition(value: object) -> ToolDefinition:
    if isinstance(value, ToolDefinition):
        return value
    factory = getattr(value, "definition", None)
    if callable(factory):
        try:
            definition = factory()
        except TypeError as exc:
            raise ToolResolutionError(f"Tool {value!r} definition() must take no arguments") from exc
        if isinstance(definition, ToolDefinition):
            return definition
    raise ToolResolutionError(
        f"Tool {value!r} must be a ToolDefinition or implement definition() -> ToolDefinition"
    )


def resolve_definitions(tools: Iterable[object]) -> list[ToolDefinition]:
    definitions = [coerce_definition(tool) for tool in tools]
    names = [definition.name for definition in definitions]
    duplicates = sorted({name for name in names if names.count(name) > 1})
    if duplicates:
        raise ToolResolutionError(f"Duplicate tool names: {', '.join(duplicates)}")
    return definitions


def load_tool_module(module_path: str) -> dict[str, ToolDefinition]:
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ToolResolutionError(f"Cannot import tool module {module_path!r}") from exc
    if not hasattr(module, "TOOLS"):
        raise ToolResolutionError(f"Tool module {module_path!r} must define TOOLS")
    raw_tools = getattr(module, "TOOLS")
    if not isinstance(raw_tools, dict):
        raise ToolResolutionError(f"TOOLS in {module_path!r} must be a dict of name -> tool")
    return {name: coerce_definition(value) for name, value in raw_tools.items()}


def load_tool(reference: str) -> list[ToolDefinition]:
    """Resolve ``"pkg.module:attr"`` to one tool, or ``"pkg.module"`` to its TOOLS."""
    module_path, _, attr = reference.partition(":")
    if not attr:
        return list(load_tool_module(module_path).values())
    try:
        module = importlib.import_module(module_path)
    except ImportError as exc:
        raise ToolResolutionError(f"Cannot import tool module {module_path!r}") from exc
    value: Any = getattr(module, attr, None)
    if value is None:
        raise ToolResolutionError(f"Tool {attr!r} not found in {module_path!r}")
    return [coerce_definition(value)]


def load_tools(references: Iterable[str]) -> list[ToolDefinition]:
    definitions: list[ToolDefinition] = []
    for reference in references:
        definitions.extend(load_tool(reference))
    return definitions
