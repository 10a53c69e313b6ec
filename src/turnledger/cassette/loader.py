from __future__ import annotations

import json
from pathlib import Path
from typing import Any

from turnledger.errors import CassetteCorruptError, CassetteMissingError, InvalidResponseError
from turnledger.models import ProviderResult, ToolCall

from .models import CassetteRecord


def _require_mapping(value: Any, *, what: str, path: Path) -> dict[str, Any]:
    if not isinstance(value, dict):
        raise CassetteCorruptError(f"Cassette {what} must be an object in {path}")
    return value


def parse_document(data: Any, *, fingerprint: str, path: Path) -> CassetteRecord:
    document = _require_mapping(data, what="document", path=path)
    if "response" not in document:
        raise CassetteCorruptError(f"Cassette {path} is missing the 'response' key")
    response = _require_mapping(document["response"], what="response", path=path)
    request = _require_mapping(document.get("request", {}), what="request", path=path)
    meta = _require_mapping(document.get("meta", {}), what="meta", path=path)

    content = response.get("content", "")
    if content is None:
        content = ""
    if not isinstance(content, str):
        raise CassetteCorruptError(f"Cassette response content must be a string in {path}")
    raw_calls = response.get("tool_calls", [])
    if not isinstance(raw_calls, list):
        raise CassetteCorruptError(f"Cassette response tool_calls must be a list in {path}")
    try:
        tool_calls = tuple(ToolCall.from_dict(item) for item in raw_calls)
    except InvalidResponseError as exc:
        raise CassetteCorruptError(f"Invalid tool call in {path}: {exc}") from exc

    return CassetteRecord(
        fingerprint=fingerprint,
        request=request,
        result=ProviderResult(content=content, tool_calls=tool_calls, meta=meta),
        meta=meta,
    )


def load_record(path: Path, fingerprint: str) -> CassetteRecord:
    if not path.is_file():
        raise CassetteMissingError(
            f"Cassette not found: {path}. Run the test with a configured provider "
            "and recording enabled, or provide the cassette file manually."
        )
    try:
        raw = path.read_text(encoding="utf-8")
    except (OSError, UnicodeDecodeError) as exc:
        raise CassetteCorruptError(f"Failed to read cassette file: {path}") from exc
    try:
        data = json.loads(raw)
    except json.JSONDecodeError as exc:
        raise CassetteCorruptError(f"Invalid JSON in cassette {path}") from exc
    return parse_document(data, fingerprint=fingerprint, path=path)
