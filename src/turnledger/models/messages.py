from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Iterable

from turnledger.errors import ConfigurationError, InvalidResponseError

from .attachments import Attachment


class Role(str, Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


@dataclass(frozen=True)
class ToolCall:
    id: str
    name: str
    arguments: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        return {"id": self.id, "name": self.name, "arguments": self.arguments}

    @classmethod
    def from_dict(cls, data: Any) -> "ToolCall":
        if not isinstance(data, dict):
            raise InvalidResponseError("Tool call must be an object")
        call_id = data.get("id")
        name = data.get("name")
        arguments = data.get("arguments", {})
        if not isinstance(call_id, str) or not isinstance(name, str):
            raise InvalidResponseError("Tool call requires string 'id' and 'name'")
        if not isinstance(arguments, dict):
            raise InvalidResponseError(f"Tool call {call_id!r} arguments must be an object")
        return cls(id=call_id, name=name, arguments=arguments)


@dataclass(frozen=True)
class ToolDefinition:
    name: str
    description: str
    parameters: dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})

    def to_dict(self) -> dict[str, Any]:
        return {"name": self.name, "description": self.description, "parameters": self.parameters}


@dataclass(frozen=True)
class Message:
    role: Role
    content: str
    attachments: tuple[Attachment, ...] = ()
    tool_calls: tuple[ToolCall, ...] = ()
    tool_call_id: str | None = None
    name: str | None = None

    def __post_init__(self) -> None:
        if self.attachments and self.role is not Role.USER:
            raise ConfigurationError("Only user messages can carry attachments")
        if self.tool_calls and self.role is not Role.ASSISTANT:
            raise ConfigurationError("Only assistant messages can carry tool calls")
        if self.role is Role.TOOL:
            if not self.tool_call_id or not self.name:
                raise ConfigurationError("Tool messages require a tool_call_id and a name")
        elif self.tool_call_id is not None or self.name is not None:
            raise ConfigurationError("Only tool messages can carry a tool_call_id or name")

    @classmethod
    def system(cls, content: str) -> "Message":
        return cls(role=Role.SYSTEM, content=content)

    @classmethod
    def user(cls, content: str, attachments: Iterable[Attachment] = ()) -> "Message":
        return cls(role=Role.USER, content=content, attachments=tuple(attachments))

    @classmethod
    def assistant(cls, content: str, tool_calls: Iterable[ToolCall] = ()) -> "Message":
        return cls(role=Role.ASSISTANT, content=content, tool_calls=tuple(tool_calls))

    @classmethod
    def tool(cls, tool_call_id: str, name: str, content: str) -> "Message":
        return cls(role=Role.TOOL, content=content, tool_call_id=tool_call_id, name=name)

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role.value, "content": self.content}
        if self.attachments:
            data["attachments"] = [attachment.to_dict() for attachment in self.attachments]
        if self.tool_calls:
            data["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        if self.role is Role.TOOL:
            data["tool_call_id"] = self.tool_call_id
            data["name"] = self.name
        return data
