"""Flat chat-completion wire shape (OpenAI and compatible APIs)."""

from __future__ import annotations

import json
from typing import Any, Iterable

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from turnledger.errors import ConfigurationError, InvalidResponseError
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

_AUDIO_FORMATS = {
    "audio/wav": "wav",
    "audio/x-wav": "wav",
    "audio/wave": "wav",
    "audio/mp3": "mp3",
    "audio/mpeg": "mp3",
}


class OpenAIRequest(BaseModel):
    model: str
    messages: list[dict[str, Any]]
    temperature: float
    tools: list[dict[str, Any]] = Field(default_factory=list)

    model_config = ConfigDict(extra="forbid")

    def to_payload(self) -> dict[str, Any]:
        payload = self.model_dump(exclude={"tools"})
        if self.tools:
            payload["tools"] = self.tools
        return payload


class OpenAIFunction(BaseModel):
    name: str
    arguments: str | dict[str, Any] | None = None

    model_config = ConfigDict(extra="ignore")


class OpenAIToolCall(BaseModel):
    id: str
    type: str = "function"
    function: OpenAIFunction

    model_config = ConfigDict(extra="ignore")


class OpenAIMessage(BaseModel):
    role: str = "assistant"
    content: str | list[dict[str, Any]] | None = None
    tool_calls: list[OpenAIToolCall] | None = None

    model_config = ConfigDict(extra="ignore")


class OpenAIChoice(BaseModel):
    index: int = 0
    message: OpenAIMessage
    finish_reason: str | None = None

    model_config = ConfigDict(extra="ignore")


class OpenAIUsage(BaseModel):
    prompt_tokens: int = 0
    completion_tokens: int = 0
    total_tokens: int = 0

    model_config = ConfigDict(extra="ignore")


class OpenAIResponse(BaseModel):
    id: str | None = None
    model: str | None = None
    choices: list[OpenAIChoice]
    usage: OpenAIUsage = Field(default_factory=OpenAIUsage)

    model_config = ConfigDict(extra="ignore")


def _data_url(attachment: Attachment) -> str:
    if attachment.is_url:
        return attachment.data
    return f"data:{attachment.mime_type};base64,{attachment.data}"


def _attachment_part(attachment: Attachment) -> dict[str, Any]:
    if attachment.type is AttachmentType.IMAGE:
        return {"type": "image_url", "image_url": {"url": _data_url(attachment)}}
    if attachment.type is AttachmentType.AUDIO:
        if attachment.is_url:
            raise ConfigurationError(
                f"Audio input must be inline for chat-completion providers: {attachment.data}"
            )
        return {
            "type": "input_audio",
            "input_audio": {
                "data": attachment.data,
                "format": _AUDIO_FORMATS.get(attachment.mime_type.lower(), "wav"),
            },
        }
    return {
        "type": "file",
        "file": {"filename": "document.pdf", "file_data": _data_url(attachment)},
    }


def serialize_message(message: Message) -> dict[str, Any]:
    if message.role is Role.TOOL:
        return {
            "role": "tool",
            "tool_call_id": message.tool_call_id,
            "name": message.name,
            "content": message.content,
        }

    entry: dict[str, Any] = {"role": message.role.value, "content": message.content}
    if message.attachments:
        parts: list[dict[str, Any]] = [{"type": "text", "text": message.content}]
        parts.extend(_attachment_part(attachment) for attachment in message.attachments)
        entry["content"] = parts
    if message.tool_calls:
        entry["tool_calls"] = [
            {
                "id": call.id,
                "type": "function",
                "function": {
                    "name": call.name,
                    "arguments": json.dumps(call.arguments, ensure_ascii=False),
                },
            }
            for call in message.tool_calls
        ]
    return entry


def serialize_tool(tool: ToolDefinition) -> dict[str, Any]:
    return {"type": "function", "function": tool.to_dict()}


def build_request(
    options: CompletionOptions,
    messages: Iterable[Message],
    tools: Iterable[ToolDefinition],
) -> OpenAIRequest:
    return OpenAIRequest(
        model=options.model,
        temperature=options.temperature,
        messages=[serialize_message(message) for message in messages],
        tools=[serialize_tool(tool) for tool in tools],
    )


def _text_content(content: str | list[dict[str, Any]] | None) -> str:
    if content is None:
        return ""
    if isinstance(content, str):
        return content
    return "".join(
        part.get("text", "")
        for part in content
        if part.get("type") == "text" and isinstance(part.get("text"), str)
    )


def _parse_tool_call(raw: OpenAIToolCall) -> ToolCall:
    arguments = raw.function.arguments
    if arguments is None or arguments == "":
        parsed: Any = {}
    elif isinstance(arguments, dict):
        parsed = arguments
    else:
        try:
            parsed = json.loads(arguments)
        except json.JSONDecodeError as exc:
            raise InvalidResponseError(
                f"Tool call {raw.id!r} ({raw.function.name}) has invalid JSON arguments: {arguments[:200]}"
            ) from exc
    if not isinstance(parsed, dict):
        raise InvalidResponseError(
            f"Tool call {raw.id!r} ({raw.function.name}) arguments must decode to an object"
        )
    return ToolCall(id=raw.id, name=raw.function.name, arguments=parsed)


def parse_response(data: Any, *, model: str | None = None) -> ProviderResult:
    try:
        response = OpenAIResponse.model_validate(data)
    except ValidationError as exc:
        raise InvalidResponseError(f"Malformed chat-completion response: {exc}") from exc
    if not response.choices:
        raise InvalidResponseError("No choices in chat-completion response")

    message = response.choices[0].message
    tool_calls = tuple(_parse_tool_call(raw) for raw in message.tool_calls or [])
    return ProviderResult(
        content=_text_content(message.content),
        tool_calls=tool_calls,
        meta={"model": model or response.model, "usage": response.usage.model_dump()},
    )
