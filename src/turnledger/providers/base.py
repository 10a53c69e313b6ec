from __future__ import annotations

from typing import Protocol, Sequence

from turnledger.errors import ConfigurationError
from turnledger.models import CompletionOptions, Message, ProviderResult, ToolDefinition


class LLMProvider(Protocol):
    def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
        options: CompletionOptions,
    ) -> ProviderResult:
        ...


class NullProvider:
    """Provider used when no live model is configured; any call is an error."""

    def complete(
        self,
        messages: Sequence[Message],
        tools: Sequence[ToolDefinition],
        options: CompletionOptions,
    ) -> ProviderResult:
        raise ConfigurationError(
            "NullProvider: no LLM provider configured. Set LLM_API_KEY, override the "
            "llm_provider fixture, or record the missing cassette first."
        )
