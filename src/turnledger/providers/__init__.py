from .anthropic import AnthropicProvider
from .base import LLMProvider, NullProvider
from .http import post_json
from .openai import OpenAICompatibleProvider

__all__ = [
    "AnthropicProvider",
    "LLMProvider",
    "NullProvider",
    "OpenAICompatibleProvider",
    "post_json",
]
