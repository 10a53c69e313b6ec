from __future__ import annotations

from typing import Sequence

import httpx

from turnledger.errors import ConfigurationError
from turnledger.models import CompletionOptions, Message, ProviderResult, ToolDefinition
from turnledger.protocol import openai as wire

from .http import post_json

OPENAI_BASE_URL = "https://api.openai.com/v1"
OPENROUTER_BASE_URL = "https://openrouter.ai/api/v1"


class OpenAICompatibleProvider:
    """Any chat-completions API: OpenAI, Azure OpenAI, OpenRouter, Groq, Ollama, ..."""

    label = "OpenAI"

    def __init__(
        self,
        api_key: str,
        base_url: str = OPENAI_BASE_URL,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("OpenAICompatibleProvider requires an API key")
        self.api_key = api_key
        self.base_url = base_url or OPENAI_BASE_URL
        self.timeout = timeout
        self.client = client

    @classmethod
    def openai(cls, api_key: str, timeout: float = 60.0) -> "OpenAICompatibleProvider":
        return cls(api_key, OPENAI_BASE_URL, timeout)

    @classmethod
    def openrouter(cls, api_key: str, timeout: float = 60.0) -> "OpenAICompatibleProvider":
        return cls(api_key, OPENROUTER_BASE_URL, timeout)

    def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
        options: CompletionOptions,
    ) -> ProviderResult:
        request = wire.build_request(options, messages, tools)
        data = post_json(
            f"{self.base_url.rstrip('/')}/chat/completions",
            {"Authorization": f"Bearer {self.api_key}"},
            request.to_payload(),
            self.timeout,
            self.label,
            client=self.client,
        )
        return wire.parse_response(data, model=options.model)
