from .base import AssertionFailure, AssertionsFailed, raise_failures
from .json_schema import apply_json_schema, load_schema
from .tool_contract import apply_call_order, apply_tool_called, apply_tool_not_called

__all__ = [
    "AssertionFailure",
    "AssertionsFailed",
    "apply_call_order",
    "apply_json_schema",
    "apply_tool_called",
    "apply_tool_not_called",
    "load_schema",
    "raise_failures",
]
