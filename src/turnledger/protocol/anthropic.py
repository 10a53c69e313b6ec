"""Content-block wire shape with a separate system field (Anthropic Messages API)."""

from __future__ import annotations

from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from turnledger.errors import InvalidResponseError
from turnledger.models import (
    Attachment,
    AttachmentType,
    CompletionOptions,
    Message,
    ProviderResult,
    Role,
    ToolCall,
    ToolDefinition,
)


class AnthropicRequest(BaseModel):
    model: str
    max_tokens: int
    temperature: float
    messages: list[dict[str, Any]]
    system: str = ""
    tools: list[dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(exclude={"system", "tools"})
        if self.system:
            payload["system"] = self.system
        if self.tools:
            payload["tools"] = self.tools
        return payload


class AnthropicContentBlock(BaseModel):
    type: str
    text: str | None = None
    id: str | None = None
    name: str | None = None
    input: Any = None

    model_config = ConfigDict(extra="ignore")


class AnthropicUsage(BaseModel):
    input_tokens: int = 0
    output_tokens: int = 0

    model_config = ConfigDict(extra="ignore")


class AnthropicResponse(BaseModel):
    id: str | None = None
    model: str | None = None
    content: list[AnthropicContentBlock] = Field(default_factory=list)
    stop_reason: str | None = None
    usage: AnthropicUsage = Field(default_factory=AnthropicUsage)

    model_config = ConfigDict(extra="ignore")


def _source(attachment: Attachment) -> dict[str, Any]:
    if attachment.is_url:
        return {"type": "url", "url": attachment.data}
    return {"type": "base64", "media_type": attachment.mime_type, "data": attachment.data}


def _attachment_block(attachment: Attachment) -> dict[str, Any]:
    if attachment.type is AttachmentType.IMAGE:
        return {"type": "image", "source": _source(attachment)}
    # PDF and audio both travel as document blocks.
    return {"type": "document", "source": _source(attachment)}


def _assistant_entry(message: Message) -> dict[str, Any]:
    content: list[dict[str, Any]] = []
    if message.content:
        content.append({"type": "text", "text": message.content})
    for call in message.tool_calls:
        content.append({"type": "tool_use", "id": call.id, "name": call.name, "input": call.arguments})
    return {"role": "assistant", "content": content}


def _user_entry(message: Message) -> dict[str, Any]:
    if not message.attachments:
        return {"role": "user", "content": message.content}
    content: list[dict[str, Any]] = [{"type": "text", "text": message.content}]
    content.extend(_attachment_block(attachment) for attachment in message.attachments)
    return {"role": "user", "content": content}


def convert_messages(messages: Iterable[Message]) -> tuple[str, list[dict[str, Any]]]:
    system_parts: list[str] = []
    converted: list[dict[str, Any]] = []
    for message in messages:
        if message.role is Role.SYSTEM:
            system_parts.append(message.content)
        elif message.role is Role.TOOL:
            block = {
                "type": "tool_result",
                "tool_use_id": message.tool_call_id,
                "content": message.content,
            }
            previous = converted[-1] if converted else None
            # Consecutive tool results share one user turn.
            if (
                previous is not None
                and previous["role"] == "user"
                and isinstance(previous["content"], list)
                and all(item.get("type") == "tool_result" for item in previous["content"])
            ):
                previous["content"].append(block)
            else:
                converted.append({"role": "user", "content": [block]})
        elif message.role is Role.ASSISTANT:
            converted.append(_assistant_entry(message))
        else:
            converted.append(_user_entry(message))
    return "\n".join(system_parts), converted


def serialize_tool(tool: ToolDefinition) -> dict[str, Any]:
    return {"name": tool.name, "description": tool.description, "input_schema": tool.parameters}


def build_request(
    options: CompletionOptions,
    max_tokens: int,
    messages: Iterable[Message],
    tools: Iterable[ToolDefinition],
) -> AnthropicRequest:
    system, converted = convert_messages(messages)
    return AnthropicRequest(
        model=options.model,
        max_tokens=max_tokens,
        temperature=options.temperature,
        messages=converted,
        system=system,
        tools=[serialize_tool(tool) for tool in tools],
    )


def _tool_call(block: AnthropicContentBlock) -> ToolCall:
    if not block.id or not block.name:
        raise InvalidResponseError("tool_use block is missing its id or name")
    arguments = {} if block.input is None else block.input
    if not isinstance(arguments, dict):
        raise InvalidResponseError(f"tool_use block {block.id!r} input must be an object")
    return ToolCall(id=block.id, name=block.name, arguments=arguments)


def parse_response(data: Any, *, model: str | None = None) -> ProviderResult:
    try:
        response = AnthropicResponse.model_validate(data)
    except ValidationError as exc:
        raise InvalidResponseError(f"Malformed messages response: {exc}") from exc

    text = "".join(block.text or "" for block in response.content if block.type == "text")
    tool_calls = tuple(_tool_call(block) for block in response.content if block.type == "tool_use")
    return ProviderResult(
        content=text,
        tool_calls=tool_calls,
        meta={"model": model or response.model, "usage": response.usage.model_dump()},
    )
