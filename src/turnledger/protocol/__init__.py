from . import anthropic, openai
from .anthropic import AnthropicRequest, AnthropicResponse
from .openai import OpenAIRequest, OpenAIResponse

__all__ = [
    "AnthropicRequest",
    "AnthropicResponse",
    "OpenAIRequest",
    "OpenAIResponse",
    "anthropic",
    "openai",
]
