from .builtin import SearchTool
from .registry import ToolContract, coerce_definition, load_tool, load_tool_module, load_tools, resolve_definitions

__all__ = [
    "SearchTool",
    "ToolContract",
    "coerce_definition",
    "load_tool",
    "load_tool_module",
    "load_tools",
    "resolve_definitions",
]
