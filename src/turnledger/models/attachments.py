from __future__ import annotations

import base64
from dataclasses import dataclass
from enum import Enum
from pathlib import Path, PurePosixPath
from typing import Any
from urllib.parse import urlparse

import filetype

from turnledger.errors import ConfigurationError

_URL_MIME_TYPES = {
    "png": "image/png",
    "jpg": "image/jpeg",
    "jpeg": "image/jpeg",
    "gif": "image/gif",
    "webp": "image/webp",
    "svg": "image/svg+xml",
    "pdf": "application/pdf",
    "wav": "audio/wav",
    "mp3": "audio/mpeg",
    "ogg": "audio/ogg",
}


class AttachmentType(str, Enum):
    IMAGE = "image"
    PDF = "pdf"
    AUDIO = "audio"

    @classmethod
    def from_mime_type(cls, mime_type: str) -> "AttachmentType":
        lower = mime_type.lower()
        if lower.startswith("image/"):
            return cls.IMAGE
        if lower == "application/pdf":
            return cls.PDF
        if lower.startswith("audio/"):
            return cls.AUDIO
        raise ConfigurationError(f"Unsupported MIME type for attachment: {mime_type!r}")


@dataclass(frozen=True)
class Attachment:
    """A file attached to a user message.

    ``data`` holds base64 for inline payloads, or the URL itself when
    ``is_url`` is set. The category is always derived from ``mime_type``;
    use the ``from_*`` constructors rather than building one by hand.
    """

    type: AttachmentType
    data: str
    mime_type: str
    is_url: bool = False

    def __post_init__(self) -> None:
        if AttachmentType.from_mime_type(self.mime_type) is not self.type:
            raise ConfigurationError(
                f"Attachment type {self.type.value!r} does not match MIME type {self.mime_type!r}"
            )

    @classmethod
    def from_file(cls, path: str | Path) -> "Attachment":
        file_path = Path(path)
        if not file_path.is_file():
            raise ConfigurationError(f"Attachment file not found: {file_path}")
        try:
            content = file_path.read_bytes()
        except OSError as exc:
            raise ConfigurationError(f"Failed to read attachment file: {file_path}") from exc

        kind = filetype.guess(content)
        if kind is None:
            raise ConfigurationError(f"Cannot detect MIME type for: {file_path}")

        return cls(
            type=AttachmentType.from_mime_type(kind.mime),
            data=base64.b64encode(content).decode("ascii"),
            mime_type=kind.mime,
        )

    @classmethod
    def from_url(cls, url: str, mime_type: str | None = None) -> "Attachment":
        if mime_type is None:
            mime_type = _mime_from_url(url)
        return cls(
            type=AttachmentType.from_mime_type(mime_type),
            data=url,
            mime_type=mime_type,
            is_url=True,
        )

    @classmethod
    def from_base64(cls, data: str, mime_type: str) -> "Attachment":
        return cls(type=AttachmentType.from_mime_type(mime_type), data=data, mime_type=mime_type)

    @classmethod
    def coerce(cls, value: "Attachment | str | Path") -> "Attachment":
        if isinstance(value, Attachment):
            return value
        if isinstance(value, str) and value.startswith(("http://", "https://")):
            return cls.from_url(value)
        return cls.from_file(value)

    def to_dict(self) -> dict[str, Any]:
        return {
            "type": self.type.value,
            "data": self.data,
            "mime_type": self.mime_type,
            "is_url": self.is_url,
        }


def _mime_from_url(url: str) -> str:
    suffix = PurePosixPath(urlparse(url).path).suffix.lower().lstrip(".")
    mime_type = _URL_MIME_TYPES.get(suffix)
    if mime_type is None:
        raise ConfigurationError(f"Cannot infer MIME type from URL {url!r}. Pass mime_type explicitly.")
    return mime_type
