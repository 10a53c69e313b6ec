from __future__ import annotations

import hashlib
import json
from typing import Any


def canonicalize_json(obj: Any) -> Any:
    if isinstance(obj, dict):
        return {str(key): canonicalize_json(obj[key]) for key in sorted(obj, key=str)}
    if isinstance(obj, (list, tuple)):
        return [canonicalize_json(item) for item in obj]
    return obj


def canonical_dumps(obj: Any) -> str:
    return json.dumps(
        canonicalize_json(obj),
        sort_keys=True,
        separators=(",", ":"),
        ensure_ascii=False,
        allow_nan=False,
    )


def sha256_hex(obj: Any) -> str:
    return hashlib.sha256(canonical_dumps(obj).encode("utf-8")).hexdigest()
