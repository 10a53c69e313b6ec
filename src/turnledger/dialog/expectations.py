from __future__ import annotations

import copy
import json
import re
from pathlib import Path
from typing import Any, Callable, Mapping, Sequence

from turnledger.assertions import (
    apply_call_order,
    apply_json_schema,
    apply_tool_called,
    apply_tool_not_called,
    raise_failures,
)
from turnledger.errors import ConfigurationError, InvalidResponseError
from turnledger.judge import JudgeSession, JudgeVerdict
from turnledger.models import ProviderResult, ToolCall, ToolDefinition

_FENCE = re.compile(r"^```(?:json)?\s*\n?(.*?)\n?\s*```$", re.DOTALL)


def strip_markdown_fences(content: str) -> str:
    trimmed = content.strip()
    match = _FENCE.match(trimmed)
    if match:
        return match.group(1).strip()
    return trimmed


class AnswerExpectations:
    """Assertions over one executed turn. Every ``assert_*`` returns ``self``."""

    def __init__(
        self,
        result: ProviderResult,
        *,
        turn_index: int = 0,
        tools: Sequence[ToolDefinition] = (),
        judge: JudgeSession | None = None,
        judge_identity: str = "",
    ) -> None:
        self.result = result
        self.turn_index = turn_index
        self._tools = {tool.name: tool for tool in tools}
        self._judge = judge
        self._judge_identity = judge_identity

    def last_message(self) -> str:
        return self.result.content

    def tool_calls(self) -> list[ToolCall]:
        return list(self.result.tool_calls)

    def json(self) -> Any:
        try:
            return json.loads(strip_markdown_fences(self.result.content))
        except json.JSONDecodeError as exc:
            raise InvalidResponseError(
                f"Assistant content is not valid JSON: {self.result.content[:200]}"
            ) from exc

    def assert_json(self) -> "AnswerExpectations":
        try:
            json.loads(strip_markdown_fences(self.result.content))
        except json.JSONDecodeError:
            raise AssertionError(
                f"Expected assistant content to be valid JSON, got: {self.result.content[:200]}"
            ) from None
        return self

    def assert_json_schema(self, schema: Mapping[str, Any] | str | Path) -> "AnswerExpectations":
        raise_failures(apply_json_schema(self.json(), schema, subject="Assistant JSON"))
        return self

    def assert_tool_called(self, name: str, times: int = 1) -> "AnswerExpectations":
        raise_failures(apply_tool_called(self.result.tool_calls, name, times))
        return self

    def assert_tool_not_called(self, name: str) -> "AnswerExpectations":
        raise_failures(apply_tool_not_called(self.result.tool_calls, name))
        return self

    def assert_call_order(self, *names: str) -> "AnswerExpectations":
        raise_failures(apply_call_order(self.result.tool_calls, list(names)))
        return self

    def assert_tool_args(self, name: str, predicate: Callable[[dict[str, Any]], Any]) -> "AnswerExpectations":
        for call in self.result.tool_calls:
            if call.name == name:
                predicate(copy.deepcopy(call.arguments))
                return self
        raise AssertionError(f"Tool '{name}' was not called; cannot assert arguments.")

    def assert_tool_args_valid(self, name: str) -> "AnswerExpectations":
        """Validate every call to ``name`` against the tool's declared parameters."""
        tool = self._tools.get(name)
        if tool is None:
            raise ConfigurationError(f"Tool '{name}' is not part of this dialog's tool set")
        calls = [call for call in self.result.tool_calls if call.name == name]
        if not calls:
            raise AssertionError(f"Tool '{name}' was not called; cannot validate arguments.")
        for call in calls:
            raise_failures(
                apply_json_schema(call.arguments, tool.parameters, subject=f"Tool '{name}' arguments")
            )
        return self

    def judge(
        self,
        criteria: str,
        model: str | None = None,
        temperature: float | None = None,
    ) -> JudgeVerdict:
        return self._require_judge().evaluate(
            self._judge_identity,
            self.result.content,
            "Assistant's response",
            criteria,
            model,
            temperature,
        )

    def assert_by_prompt(
        self,
        criteria: str,
        model: str | None = None,
        temperature: float | None = None,
    ) -> "AnswerExpectations":
        self._require_judge().assert_passed(
            self._judge_identity,
            self.result.content,
            "Assistant's response",
            criteria,
            model,
            temperature,
        )
        return self

    def _require_judge(self) -> JudgeSession:
        if self._judge is None:
            raise ConfigurationError("No judge is configured for these expectations")
        return self._judge
