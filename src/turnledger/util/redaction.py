from __future__ import annotations

import re
from typing import Any, Mapping

_SENSITIVE_SUBSTRINGS = (
    "api_key",
    "apikey",
    "api-key",
    "access_token",
    "authorization",
)
_SENSITIVE_PARTS = {
    "token",
    "secret",
    "password",
}

# Vendor key shapes that can leak into prompts or tool payloads.
_PATTERNS: list[tuple[re.Pattern[str], str]] = [
    (re.compile(r"(?i)bearer\s+[a-z0-9._~+/=-]+"), "Bearer [REDACTED]"),
    (re.compile(r"\bsk-ant-[A-Za-z0-9_-]{20,}"), "[REDACTED]"),
    (re.compile(r"\bsk-(?:or-|proj-)?[A-Za-z0-9_-]{20,}"), "[REDACTED]"),
    (re.compile(r"\bxi-[A-Za-z0-9]{24,}\b"), "[REDACTED]"),
]


def _is_sensitive_key(key: str) -> bool:
    key_lower = key.lower()
    if any(substring in key_lower for substring in _SENSITIVE_SUBSTRINGS):
        return True
    parts = [part for part in re.split(r"[^a-z0-9]+", key_lower) if part]
    return any(part in _SENSITIVE_PARTS for part in parts)


def redact_text(text: str) -> str:
    for pattern, replacement in _PATTERNS:
        text = pattern.sub(replacement, text)
    return text


def redact(value: Any) -> Any:
    if isinstance(value, dict):
        return {
            key: "[REDACTED]" if isinstance(key, str) and _is_sensitive_key(key) else redact(item)
            for key, item in value.items()
        }
    if isinstance(value, list):
        return [redact(item) for item in value]
    if isinstance(value, str):
        return redact_text(value)
    return value


def redact_headers(headers: Mapping[str, str]) -> dict[str, str]:
    return {
        name: "[REDACTED]" if _is_sensitive_key(name) else value
        for name, value in headers.items()
    }
