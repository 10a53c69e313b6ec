from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Iterable


@dataclass(frozen=True)
class AssertionFailure:
    type: str
    message: str
    details: dict[str, Any] | None = None


class AssertionsFailed(AssertionError):
    """An ``AssertionError`` that keeps the structured failures behind its message."""

    def __init__(self, failures: Iterable[AssertionFailure]) -> None:
        self.failures = list(failures)
        super().__init__("\n".join(f"[{failure.type}] {failure.message}" for failure in self.failures))

    @property
    def details(self) -> list[dict[str, Any]]:
        return [failure.details or {} for failure in self.failures]


def raise_failures(failures: Iterable[AssertionFailure]) -> None:
    collected = list(failures)
    if collected:
        raise AssertionsFailed(collected)
