from __future__ import annotations

import re
from typing import Any, Callable

from turnledger.errors import ConfigurationError
from turnledger.judge import JudgeSession, JudgeVerdict

from .models import EvaluationResult, SimulationResponse, TranscriptToolCall

_EXCERPT = 200
_AGENT_ROLE = "agent"


class SimulationExpectations:
    """Assertions over a simulated conversation. Every ``assert_*`` returns ``self``."""

    def __init__(
        self,
        response: SimulationResponse,
        *,
        judge: JudgeSession | None = None,
        test_id: str = "",
    ) -> None:
        self.response = response
        self._judge = judge
        self._judge_identity = f"judge:simulation:{test_id}"

    # tools

    def assert_tool_called(self, name: str) -> "SimulationExpectations":
        if self._find_tool_call(name) is None:
            raise AssertionError(f"Expected tool '{name}' to be called, but it was not.")
        return self

    def assert_tool_not_called(self, name: str) -> "SimulationExpectations":
        if self._find_tool_call(name) is not None:
            raise AssertionError(f"Expected tool '{name}' NOT to be called, but it was.")
        return self

    def assert_tool_called_times(self, name: str, expected: int) -> "SimulationExpectations":
        count = sum(1 for call in self.response.tool_calls if call.tool_name == name)
        if count != expected:
            raise AssertionError(
                f"Expected tool '{name}' to be called {expected} time(s), but it was called {count} time(s)."
            )
        return self

    def assert_tool_executed(self, name: str) -> "SimulationExpectations":
        if not any(
            call.tool_name == name and call.tool_has_been_called for call in self.response.tool_calls
        ):
            raise AssertionError(f"Expected tool '{name}' to be executed, but it was not.")
        return self

    def assert_tool_call_count(self, expected: int) -> "SimulationExpectations":
        count = len(self.response.tool_calls)
        if count != expected:
            raise AssertionError(f"Expected {expected} tool call(s), but got {count}.")
        return self

    def assert_no_tools_called(self) -> "SimulationExpectations":
        return self.assert_tool_call_count(0)

    def assert_tool_args(
        self, name: str, predicate: Callable[[dict[str, Any]], Any]
    ) -> "SimulationExpectations":
        predicate(self._require_tool_call(name, "arguments").params)
        return self

    def assert_tool_param(self, name: str, key: str, expected: Any) -> "SimulationExpectations":
        params = self._require_param(name, key)
        if params[key] != expected:
            raise AssertionError(
                f"Tool '{name}' param '{key}' is {params[key]!r}, expected {expected!r}."
            )
        return self

    def assert_tool_param_contains(self, name: str, key: str, needle: str) -> "SimulationExpectations":
        value = self._require_param(name, key)[key]
        if not isinstance(value, str):
            raise AssertionError(f"Tool '{name}' param '{key}' is not a string.")
        if needle not in value:
            raise AssertionError(f"Tool '{name}' param '{key}' does not contain '{needle}'.")
        return self

    def assert_tool_has_param(self, name: str, key: str) -> "SimulationExpectations":
        self._require_param(name, key)
        return self

    # evaluations

    def assert_evaluation_passed(self, criteria_id: str) -> "SimulationExpectations":
        result = self._require_evaluation(criteria_id)
        if not result.passed:
            raise AssertionError(f"Evaluation '{criteria_id}' failed. Reason: {result.reason}")
        return self

    def assert_evaluation_failed(self, criteria_id: str) -> "SimulationExpectations":
        if self._require_evaluation(criteria_id).passed:
            raise AssertionError(f"Expected evaluation '{criteria_id}' to fail, but it passed.")
        return self

    def assert_all_evaluations_passed(self) -> "SimulationExpectations":
        results = self.response.evaluation_results
        if not results:
            raise AssertionError("No evaluation results found.")
        failed = [result for result in results if not result.passed]
        if failed:
            raise AssertionError(
                "\n".join(f"Evaluation '{r.criteria_id}' failed. Reason: {r.reason}" for r in failed)
            )
        return self

    def assert_evaluation_count(self, expected: int) -> "SimulationExpectations":
        count = len(self.response.evaluation_results)
        if count != expected:
            raise AssertionError(f"Expected {expected} evaluation result(s), but got {count}.")
        return self

    # transcript

    def transcript_text(self) -> str:
        return "\n".join(f"[{entry.role}]: {entry.content}" for entry in self.response.transcript)

    def assert_transcript_contains(self, needle: str) -> "SimulationExpectations":
        if needle not in self.transcript_text():
            raise AssertionError(f"Expected transcript to contain '{needle}', but it did not.")
        return self

    def assert_transcript_not_contains(self, needle: str) -> "SimulationExpectations":
        if needle in self.transcript_text():
            raise AssertionError(f"Expected transcript NOT to contain '{needle}', but it did.")
        return self

    def assert_transcript_matches(self, pattern: str) -> "SimulationExpectations":
        if re.search(pattern, self.transcript_text()) is None:
            raise AssertionError(f"Transcript does not match pattern '{pattern}'.")
        return self

    def assert_agent_said(self, needle: str) -> "SimulationExpectations":
        if needle not in self._agent_text():
            raise AssertionError(f"Expected agent to say '{needle}', but it did not.")
        return self

    def assert_agent_never_said(self, needle: str) -> "SimulationExpectations":
        if needle in self._agent_text():
            raise AssertionError(f"Expected agent to never say '{needle}', but it did.")
        return self

    def assert_first_agent_message(self, needle: str) -> "SimulationExpectations":
        messages = self._agent_messages()
        if not messages:
            raise AssertionError("No agent message found in transcript.")
        if needle not in messages[0]:
            raise AssertionError(
                f"Expected first agent message to contain '{needle}', got: {messages[0][:_EXCERPT]}"
            )
        return self

    def assert_last_agent_message(self, needle: str) -> "SimulationExpectations":
        messages = self._agent_messages()
        if not messages:
            raise AssertionError("No agent message found in transcript.")
        if needle not in messages[-1]:
            raise AssertionError(
                f"Expected last agent message to contain '{needle}', got: {messages[-1][:_EXCERPT]}"
            )
        return self

    def assert_min_turns(self, minimum: int) -> "SimulationExpectations":
        count = len(self.response.transcript)
        if count < minimum:
            raise AssertionError(f"Expected at least {minimum} transcript entries, but got {count}.")
        return self

    def assert_max_turns(self, maximum: int) -> "SimulationExpectations":
        count = len(self.response.transcript)
        if count > maximum:
            raise AssertionError(f"Expected at most {maximum} transcript entries, but got {count}.")
        return self

    # multi-agent workflows

    def agent_ids(self) -> list[str]:
        seen: list[str] = []
        for entry in self.response.transcript:
            if entry.agent_id is not None and entry.agent_id not in seen:
                seen.append(entry.agent_id)
        return seen

    def assert_agent_handled(self, agent_id: str) -> "SimulationExpectations":
        if agent_id not in self.agent_ids():
            raise AssertionError(f"Expected agent '{agent_id}' to appear in transcript, but it did not.")
        return self

    def assert_transferred_to_agent(self, agent_id: str) -> "SimulationExpectations":
        seen = self.agent_ids()
        if agent_id not in seen or len(seen) < 2:
            raise AssertionError(
                f"Expected transfer to agent '{agent_id}', but conversation only involved: {', '.join(seen)}"
            )
        return self

    def assert_workflow_node_reached(self, node_id: str) -> "SimulationExpectations":
        if all(entry.workflow_node_id != node_id for entry in self.response.transcript):
            raise AssertionError(f"Expected workflow node '{node_id}' to be reached, but it was not.")
        return self

    def assert_call_successful(self) -> "SimulationExpectations":
        status = (self.response.raw_data.get("analysis") or {}).get("call_successful")
        if status != "success":
            raise AssertionError(f"Expected call_successful to be 'success', got: {status}")
        return self

    def assert_summary_contains(self, needle: str) -> "SimulationExpectations":
        summary = (self.response.raw_data.get("analysis") or {}).get("transcript_summary") or ""
        if needle not in summary:
            raise AssertionError(f"Expected transcript summary to contain '{needle}'.")
        return self

    # judge

    def judge(
        self,
        criteria: str,
        model: str | None = None,
        temperature: float | None = None,
    ) -> JudgeVerdict:
        return self._require_judge().evaluate(
            self._judge_identity,
            self.transcript_text(),
            "Conversation transcript",
            criteria,
            model,
            temperature,
        )

    def assert_by_prompt(
        self,
        criteria: str,
        model: str | None = None,
        temperature: float | None = None,
    ) -> "SimulationExpectations":
        self._require_judge().assert_passed(
            self._judge_identity,
            self.transcript_text(),
            "Conversation transcript",
            criteria,
            model,
            temperature,
        )
        return self

    def _require_judge(self) -> JudgeSession:
        if self._judge is None:
            raise ConfigurationError(
                "Cannot use assert_by_prompt() without a judge provider; pass judge_provider to the simulation"
            )
        return self._judge

    def _agent_messages(self) -> list[str]:
        return [entry.content for entry in self.response.transcript if entry.role == _AGENT_ROLE]

    def _agent_text(self) -> str:
        return "\n".join(self._agent_messages())

    def _find_tool_call(self, name: str) -> TranscriptToolCall | None:
        for call in self.response.tool_calls:
            if call.tool_name == name:
                return call
        return None

    def _require_tool_call(self, name: str, what: str) -> TranscriptToolCall:
        call = self._find_tool_call(name)
        if call is None:
            raise AssertionError(f"Tool '{name}' was not called; cannot assert {what}.")
        return call

    def _require_param(self, name: str, key: str) -> dict[str, Any]:
        params = self._require_tool_call(name, f"param '{key}'").params
        if key not in params:
            raise AssertionError(f"Tool '{name}' params missing key '{key}'.")
        return params

    def _require_evaluation(self, criteria_id: str) -> EvaluationResult:
        for result in self.response.evaluation_results:
            if result.criteria_id == criteria_id:
                return result
        raise AssertionError(f"Evaluation criterion '{criteria_id}' not found in results.")
