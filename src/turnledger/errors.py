from __future__ import annotations

from dataclasses import dataclass


class TurnledgerError(Exception):
    """Base class for every error raised by turnledger."""


class ConfigurationError(TurnledgerError):
    """Unreadable file, unsupported attachment, or a misconfigured provider."""


@dataclass
class ProviderError(TurnledgerError):
    message: str
    provider: str = ""
    status_code: int | None = None
    body_excerpt: str = ""

    def __str__(self) -> str:
        if self.status_code is None:
            return self.message
        return f"{self.message} (HTTP {self.status_code}): {self.body_excerpt}"


class CassetteMissingError(TurnledgerError):
    """Replay was expected but no recording exists for the fingerprint."""


class InvalidResponseError(TurnledgerError):
    """Model, judge or stored output could not be parsed into the required shape."""


class CassetteCorruptError(InvalidResponseError):
    """A cassette file exists but cannot be read back into a record."""


class ToolResolutionError(TurnledgerError):
    """Tool contract violation or a tool call id that cannot be resolved."""
