from __future__ import annotations

import pytest

from turnledger.errors import ConfigurationError, InvalidResponseError
from turnledger.models import Attachment, CompletionOptions, Message, ToolCall
from turnledger.protocol import openai as wire
from turnledger.tools.builtin import SearchTool


def _response(message: dict[str, object]) -> dict[str, object]:
    return {
        "id": "chatcmpl-1",
        "model": "gpt-4o-2024-08-06",
        "choices": [{"index": 0, "message": message, "finish_reason": "stop"}],
        "usage": {"prompt_tokens": 10, "completion_tokens": 2, "total_tokens": 12},
    }


def test_request_payload_is_flat_chat_array() -> None:
    messages = [
        Message.system("Be brief."),
        Message.user("Find python docs"),
        Message.assistant("", [ToolCall("call_1", "search", {"query": "python"})]),
        Message.tool("call_1", "search", '{"hits": 1}'),
    ]

    payload = wire.build_request(CompletionOptions("gpt-4o", 0.2), messages, [SearchTool.definition()]).to_payload()

    assert payload["model"] == "gpt-4o"
    assert payload["temperature"] == 0.2
    assert [entry["role"] for entry in payload["messages"]] == ["system", "user", "assistant", "tool"]
    assert payload["messages"][2]["tool_calls"] == [
        {"id": "call_1", "type": "function", "function": {"name": "search", "arguments": '{"query": "python"}'}}
    ]
    assert payload["messages"][3] == {
        "role": "tool",
        "tool_call_id": "call_1",
        "name": "search",
        "content": '{"hits": 1}',
    }
    assert payload["tools"][0]["type"] == "function"
    assert payload["tools"][0]["function"]["name"] == "search"


def test_tools_key_omitted_when_empty() -> None:
    payload = wire.build_request(CompletionOptions(), [Message.user("hi")], []).to_payload()

    assert "tools" not in payload


def test_attachments_become_content_parts() -> None:
    message = Message.user(
        "What is here?",
        [
            Attachment.from_base64("iVBOR", "image/png"),
            Attachment.from_url("https://example.com/a.jpg"),
            Attachment.from_base64("UklGR", "audio/mpeg"),
            Attachment.from_base64("JVBER", "application/pdf"),
        ],
    )

    parts = wire.serialize_message(message)["content"]

    assert parts[0] == {"type": "text", "text": "What is here?"}
    assert parts[1] == {"type": "image_url", "image_url": {"url": "data:image/png;base64,iVBOR"}}
    assert parts[2] == {"type": "image_url", "image_url": {"url": "https://example.com/a.jpg"}}
    assert parts[3] == {"type": "input_audio", "input_audio": {"data": "UklGR", "format": "mp3"}}
    assert parts[4]["type"] == "file"
    assert parts[4]["file"]["file_data"] == "data:application/pdf;base64,JVBER"


def test_remote_audio_is_rejected() -> None:
    message = Message.user("listen", [Attachment.from_url("https://example.com/a.wav")])

    with pytest.raises(ConfigurationError):
        wire.serialize_message(message)


def test_parse_response_with_text() -> None:
    result = wire.parse_response(_response({"role": "assistant", "content": "Hello"}))

    assert result.content == "Hello"
    assert result.tool_calls == ()
    assert result.meta["usage"]["total_tokens"] == 12


def test_parse_response_null_content_with_tool_calls() -> None:
    result = wire.parse_response(
        _response(
            {
                "role": "assistant",
                "content": None,
                "tool_calls": [
                    {
                        "id": "call_9",
                        "type": "function",
                        "function": {"name": "search", "arguments": '{"query": "weather"}'},
                    }
                ],
            }
        )
    )

    assert result.content == ""
    assert result.tool_calls == (ToolCall("call_9", "search", {"query": "weather"}),)


def test_parse_response_rejects_bad_arguments() -> None:
    data = _response(
        {
            "role": "assistant",
            "content": None,
            "tool_calls": [{"id": "c1", "type": "function", "function": {"name": "search", "arguments": "{oops"}}],
        }
    )

    with pytest.raises(InvalidResponseError):
        wire.parse_response(data)


def test_parse_response_without_choices_is_invalid() -> None:
    with pytest.raises(InvalidResponseError):
        wire.parse_response({"id": "x", "choices": []})
    with pytest.raises(InvalidResponseError):
        wire.parse_response({"id": "x"})
