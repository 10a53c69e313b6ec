from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any

from .messages import ToolCall

DEFAULT_MODEL = "gpt-4o"
DEFAULT_TEMPERATURE = 0.7


@dataclass(frozen=True)
class ProviderResult:
    content: str = ""
    tool_calls: tuple[ToolCall, ...] = ()
    meta: dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        if not isinstance(self.tool_calls, tuple):
            object.__setattr__(self, "tool_calls", tuple(self.tool_calls))


@dataclass(frozen=True)
class CompletionOptions:
    model: str = DEFAULT_MODEL
    temperature: float = DEFAULT_TEMPERATURE

    def to_dict(self) -> dict[str, Any]:
        return {"model": self.model, "temperature": float(self.temperature)}
