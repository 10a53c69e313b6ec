from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Any

from turnledger.models import ProviderResult


class CassetteSource(str, Enum):
    FIXTURE = "fixture"
    JUDGE = "judge"
    SIMULATION = "simulation"


@dataclass(frozen=True)
class CassetteRecord:
    fingerprint: str
    request: dict[str, Any]
    result: ProviderResult
    meta: dict[str, Any] = field(default_factory=dict)

    def to_document(self) -> dict[str, Any]:
        return {
            "request": self.request,
            "response": {
                "content": self.result.content,
                "tool_calls": [call.to_dict() for call in self.result.tool_calls],
            },
            "meta": self.meta,
        }
