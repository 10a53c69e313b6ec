from .attachments import Attachment, AttachmentType
from .messages import Message, Role, ToolCall, ToolDefinition
from .results import DEFAULT_MODEL, DEFAULT_TEMPERATURE, CompletionOptions, ProviderResult

__all__ = [
    "Attachment",
    "AttachmentType",
    "CompletionOptions",
    "DEFAULT_MODEL",
    "DEFAULT_TEMPERATURE",
    "Message",
    "ProviderResult",
    "Role",
    "ToolCall",
    "ToolDefinition",
]
