from __future__ import annotations

import base64
from pathlib import Path

import pytest

from turnledger.errors import ConfigurationError
from turnledger.models import Attachment, AttachmentType

# 1x1 transparent PNG
_PNG = base64.b64decode(
    "iVBORw0KGgoAAAANSUhEUgAAAAEAAAABCAYAAAAfFcSJAAAADUlEQVR42mNkYPhfDwAChwGA60e6kgAAAABJRU5ErkJggg=="
)
_PDF = b"%PDF-1.4\n1 0 obj\n<< /Type /Catalog >>\nendobj\ntrailer\n<< /Root 1 0 R >>\n%%EOF\n"


def test_from_file_detects_png_by_content(tmp_path: Path) -> None:
    path = tmp_path / "pixel.bin"
    path.write_bytes(_PNG)

    attachment = Attachment.from_file(path)

    assert attachment.type is AttachmentType.IMAGE
    assert attachment.mime_type == "image/png"
    assert base64.b64decode(attachment.data) == _PNG
    assert attachment.is_url is False


def test_from_file_detects_pdf(tmp_path: Path) -> None:
    path = tmp_path / "doc.pdf"
    path.write_bytes(_PDF)

    attachment = Attachment.from_file(path)

    assert attachment.type is AttachmentType.PDF
    assert attachment.mime_type == "application/pdf"


def test_from_file_missing_raises(tmp_path: Path) -> None:
    with pytest.raises(ConfigurationError):
        Attachment.from_file(tmp_path / "missing.png")


def test_from_file_unknown_content_raises(tmp_path: Path) -> None:
    path = tmp_path / "notes.txt"
    path.write_text("plain text has no magic number", encoding="utf-8")

    with pytest.raises(ConfigurationError):
        Attachment.from_file(path)


def test_from_url_infers_mime_from_extension() -> None:
    attachment = Attachment.from_url("https://example.com/files/report.PDF?sig=1")

    assert attachment.type is AttachmentType.PDF
    assert attachment.mime_type == "application/pdf"
    assert attachment.is_url is True
    assert attachment.data == "https://example.com/files/report.PDF?sig=1"


def test_from_url_mp3_is_audio_mpeg() -> None:
    assert Attachment.from_url("https://example.com/a.mp3").mime_type == "audio/mpeg"


def test_from_url_unknown_extension_requires_mime_type() -> None:
    with pytest.raises(ConfigurationError):
        Attachment.from_url("https://example.com/blob")

    attachment = Attachment.from_url("https://example.com/blob", mime_type="image/jpeg")
    assert attachment.type is AttachmentType.IMAGE


def test_unsupported_mime_type_is_rejected() -> None:
    with pytest.raises(ConfigurationError):
        Attachment.from_base64("AAAA", "text/plain")


def test_type_must_match_mime_type() -> None:
    with pytest.raises(ConfigurationError):
        Attachment(type=AttachmentType.AUDIO, data="AAAA", mime_type="image/png")


def test_coerce_accepts_urls_and_paths(tmp_path: Path) -> None:
    path = tmp_path / "pixel.png"
    path.write_bytes(_PNG)

    assert Attachment.coerce("https://example.com/a.png").is_url is True
    assert Attachment.coerce(path).mime_type == "image/png"
    existing = Attachment.from_base64("AAAA", "audio/wav")
    assert Attachment.coerce(existing) is existing
