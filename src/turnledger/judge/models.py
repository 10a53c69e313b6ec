from __future__ import annotations

import json
from dataclasses import dataclass

from turnledger.errors import InvalidResponseError

_EXCERPT = 500


@dataclass(frozen=True)
class JudgeVerdict:
    passed: bool
    reason: str

    @classmethod
    def from_json(cls, raw: str) -> "JudgeVerdict":
        """Parse the strict ``{"pass": bool, "reason": str}`` judge reply.

        Anything else is an ``InvalidResponseError``; there is no lenient
        fallback for prose or fenced replies.
        """
        try:
            decoded = json.loads(raw)
        except json.JSONDecodeError as exc:
            raise InvalidResponseError(
                "Judge returned invalid response (expected JSON with 'pass' key). "
                f"Raw judge output: {raw[:_EXCERPT]}"
            ) from exc

        if not isinstance(decoded, dict) or "pass" not in decoded:
            raise InvalidResponseError(
                "Judge returned invalid response (expected JSON with 'pass' key). "
                f"Raw judge output: {raw[:_EXCERPT]}"
            )
        if not isinstance(decoded["pass"], bool):
            raise InvalidResponseError(
                f"Judge 'pass' must be a boolean, got {decoded['pass']!r}. Raw judge output: {raw[:_EXCERPT]}"
            )

        reason = decoded.get("reason")
        if reason is None:
            reason = "no reason provided"
        return cls(passed=decoded["pass"], reason=str(reason))
