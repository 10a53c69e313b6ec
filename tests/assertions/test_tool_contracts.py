from __future__ import annotations

import pytest

from turnledger.assertions import (
    AssertionsFailed,
    apply_call_order,
    apply_tool_called,
    apply_tool_not_called,
    raise_failures,
)
from turnledger.models import ToolCall


def _calls(*tools: str) -> list[ToolCall]:
    return [ToolCall(id=f"c{idx}", name=tool, arguments={}) for idx, tool in enumerate(tools, start=1)]


def test_tool_called_detects_missing_tools() -> None:
    failures = apply_tool_called(_calls("search_docs"), "create_issue")
    assert failures
    assert failures[0].type == "tool_called"
    assert failures[0].details == {"expected": 1, "actual": 0, "observed_calls": ["search_docs"]}


def test_tool_called_counts_exact_times() -> None:
    assert apply_tool_called(_calls("search", "search"), "search", times=2) == []
    assert apply_tool_called(_calls("search", "search"), "search", times=1)


def test_tool_not_called_detects_forbidden_tools() -> None:
    failures = apply_tool_not_called(_calls("create_issue"), "create_issue")
    assert failures
    assert failures[0].type == "tool_not_called"


def test_call_order_passes_when_in_order() -> None:
    failures = apply_call_order(_calls("search_docs", "noop", "create_issue"), ["search_docs", "create_issue"])
    assert failures == []


def test_call_order_fails_when_out_of_order() -> None:
    failures = apply_call_order(_calls("create_issue", "search_docs"), ["search_docs", "create_issue"])
    assert failures
    assert failures[0].type == "call_order"


def test_raise_failures_keeps_type_and_details() -> None:
    failures = apply_tool_called(_calls("search_docs"), "create_issue") + apply_tool_not_called(
        _calls("search_docs"), "search_docs"
    )

    with pytest.raises(AssertionsFailed) as excinfo:
        raise_failures(failures)

    assert isinstance(excinfo.value, AssertionError)
    assert [failure.type for failure in excinfo.value.failures] == ["tool_called", "tool_not_called"]
    assert excinfo.value.details[0] == {"expected": 1, "actual": 0, "observed_calls": ["search_docs"]}
    assert str(excinfo.value).splitlines()[1].startswith("[tool_not_called] Forbidden tool call observed")


def test_raise_failures_is_silent_without_failures() -> None:
    raise_failures([])
