from .canonical_json import canonical_dumps, canonicalize_json, sha256_hex
from .redaction import redact, redact_headers, redact_text

__all__ = [
    "canonical_dumps",
    "canonicalize_json",
    "redact",
    "redact_headers",
    "redact_text",
    "sha256_hex",
]
