from __future__ import annotations

from typing import Iterable

from turnledger.models import ToolCall

from .base import AssertionFailure


def _names(calls: Iterable[ToolCall]) -> list[str]:
    return [call.name for call in calls]


def _observed(names: list[str]) -> str:
    return ", ".join(names) if names else "<none>"


def apply_tool_called(calls: Iterable[ToolCall], name: str, times: int = 1) -> list[AssertionFailure]:
    names = _names(calls)
    count = names.count(name)
    if count == times:
        return []
    return [
        AssertionFailure(
            type="tool_called",
            message=(
                f"Expected tool '{name}' to be called {times} time(s), "
                f"but it was called {count} time(s). Observed: {_observed(names)}"
            ),
            details={"expected": times, "actual": count, "observed_calls": names},
        )
    ]


def apply_tool_not_called(calls: Iterable[ToolCall], name: str) -> list[AssertionFailure]:
    names = _names(calls)
    if name not in names:
        return []
    return [
        AssertionFailure(
            type="tool_not_called",
            message=f"Forbidden tool call observed: {name}. Observed: {_observed(names)}",
            details={"forbidden": name, "observed_calls": names},
        )
    ]


def apply_call_order(calls: Iterable[ToolCall], order: list[str]) -> list[AssertionFailure]:
    if not order:
        return []
    names = _names(calls)
    idx = 0
    for name in names:
        if name == order[idx]:
            idx += 1
            if idx == len(order):
                return []
    return [
        AssertionFailure(
            type="call_order",
            message=f"Tool call order not satisfied: {' -> '.join(order)}. Observed: {_observed(names)}",
            details={"expected_order": order, "observed_calls": names},
        )
    ]
