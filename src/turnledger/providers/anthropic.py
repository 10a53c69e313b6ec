from __future__ import annotations

from typing import Sequence

import httpx

from turnledger.errors import ConfigurationError
from turnledger.models import CompletionOptions, Message, ProviderResult, ToolDefinition
from turnledger.protocol import anthropic as wire

from .http import post_json

ANTHROPIC_BASE_URL = "https://api.anthropic.com"


class AnthropicProvider:
    label = "Anthropic"

    def __init__(
        self,
        api_key: str,
        base_url: str = ANTHROPIC_BASE_URL,
        api_version: str = "2023-06-01",
        max_tokens: int = 4096,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ) -> None:
        if not api_key:
            raise ConfigurationError("AnthropicProvider requires an API key")
        self.api_key = api_key
        self.base_url = base_url or ANTHROPIC_BASE_URL
        self.api_version = api_version
        self.max_tokens = max_tokens
        self.timeout = timeout
        self.client = client

    def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
        options: CompletionOptions,
    ) -> ProviderResult:
        request = wire.build_request(options, self.max_tokens, messages, tools)
        data = post_json(
            f"{self.base_url.rstrip('/')}/v1/messages",
            {"x-api-key": self.api_key, "anthropic-version": self.api_version},
            request.to_payload(),
            self.timeout,
            self.label,
            client=self.client,
        )
        return wire.parse_response(data, model=options.model)
