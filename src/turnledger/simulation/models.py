"""Simulation wire shapes.

``from_dict`` accepts both the platform's reply shape and the compact shape
written into cassettes; ``to_dict`` always produces the cassette shape.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from typing import Any, Mapping


@dataclass(frozen=True)
class EvaluationCriterion:
    id: str
    criteria: str

    def to_dict(self) -> dict[str, Any]:
        return {
            "id": self.id,
            "name": self.id,
            "type": "prompt",
            "conversation_goal_prompt": self.criteria,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EvaluationCriterion":
        return cls(
            id=data.get("id", ""),
            criteria=data.get("conversation_goal_prompt", data.get("criteria", "")),
        )


@dataclass(frozen=True)
class EvaluationResult:
    criteria_id: str
    passed: bool
    reason: str = ""

    def to_dict(self) -> dict[str, Any]:
        return {"criteria_id": self.criteria_id, "pass": self.passed, "reason": self.reason}

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "EvaluationResult":
        # The API reports "result": "success"/"failure"; cassettes keep "pass".
        if "result" in data:
            passed = data["result"] == "success"
        else:
            passed = bool(data.get("pass", False))
        return cls(
            criteria_id=data.get("criteria_id", ""),
            passed=passed,
            reason=data.get("rationale", data.get("reason", "")) or "",
        )


@dataclass(frozen=True)
class SimulatedUserConfig:
    prompt: str
    first_message: str = ""

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"prompt": {"prompt": self.prompt}}
        if self.first_message:
            data["first_message"] = self.first_message
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulatedUserConfig":
        prompt = data.get("prompt", "")
        if isinstance(prompt, Mapping):
            prompt = prompt.get("prompt", "")
        return cls(prompt=prompt, first_message=data.get("first_message", ""))


@dataclass(frozen=True)
class SimulationRequest:
    agent_id: str
    user_config: SimulatedUserConfig
    evaluation_criteria: tuple[EvaluationCriterion, ...] = ()
    # tool name -> JSON-encoded mock reply
    tool_mocks: dict[str, str] = field(default_factory=dict)
    turns_limit: int = 10
    dynamic_variables: dict[str, Any] = field(default_factory=dict)

    def to_dict(self) -> dict[str, Any]:
        specification: dict[str, Any] = {"simulated_user_config": self.user_config.to_dict()}
        if self.tool_mocks:
            specification["tool_mock_config"] = {
                name: {"default_return_value": reply, "default_is_error": False}
                for name, reply in self.tool_mocks.items()
            }
        if self.dynamic_variables:
            specification["dynamic_variables"] = dict(self.dynamic_variables)

        payload: dict[str, Any] = {
            "simulation_specification": specification,
            "new_turns_limit": self.turns_limit,
        }
        if self.evaluation_criteria:
            payload["extra_evaluation_criteria"] = [
                criterion.to_dict() for criterion in self.evaluation_criteria
            ]
        return payload

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationRequest":
        specification = data.get("simulation_specification", data)
        criteria = data.get("extra_evaluation_criteria", data.get("evaluation_criteria", []))

        tool_mocks: dict[str, str] = {}
        for key, value in specification.get("tool_mock_config", {}).items():
            if isinstance(value, Mapping) and "default_return_value" in value:
                tool_mocks[key] = value["default_return_value"]

        return cls(
            agent_id=data.get("agent_id", specification.get("agent_id", "")),
            user_config=SimulatedUserConfig.from_dict(specification.get("simulated_user_config", {})),
            evaluation_criteria=tuple(EvaluationCriterion.from_dict(item) for item in criteria),
            tool_mocks=tool_mocks,
            turns_limit=int(data.get("new_turns_limit", 10)),
            dynamic_variables=dict(specification.get("dynamic_variables", {})),
        )


@dataclass(frozen=True)
class TranscriptToolCall:
    tool_name: str
    params_as_json: str = "{}"
    tool_has_been_called: bool = False
    type: str = "tool_call"

    @property
    def params(self) -> dict[str, Any]:
        try:
            decoded = json.loads(self.params_as_json)
        except json.JSONDecodeError:
            return {}
        return decoded if isinstance(decoded, dict) else {}

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool_name": self.tool_name,
            "params_as_json": self.params_as_json,
            "tool_has_been_called": self.tool_has_been_called,
            "type": self.type,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TranscriptToolCall":
        return cls(
            tool_name=data.get("tool_name", ""),
            params_as_json=data.get("params_as_json", "{}"),
            tool_has_been_called=bool(data.get("tool_has_been_called", False)),
            type=data.get("type", "tool_call"),
        )


@dataclass(frozen=True)
class TranscriptToolResult:
    tool_name: str
    result_value: str = ""
    is_error: bool = False

    def to_dict(self) -> dict[str, Any]:
        return {
            "tool_name": self.tool_name,
            "result_value": self.result_value,
            "is_error": self.is_error,
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TranscriptToolResult":
        return cls(
            tool_name=data.get("tool_name", ""),
            result_value=data.get("result_value", ""),
            is_error=bool(data.get("is_error", False)),
        )


@dataclass(frozen=True)
class TranscriptEntry:
    role: str
    content: str
    tool_calls: tuple[TranscriptToolCall, ...] = ()
    tool_results: tuple[TranscriptToolResult, ...] = ()
    agent_id: str | None = None
    workflow_node_id: str | None = None

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {"role": self.role, "content": self.content}
        if self.tool_calls:
            data["tool_calls"] = [call.to_dict() for call in self.tool_calls]
        if self.tool_results:
            data["tool_results"] = [result.to_dict() for result in self.tool_results]
        if self.agent_id is not None or self.workflow_node_id is not None:
            data["agent_metadata"] = {
                "agent_id": self.agent_id,
                "workflow_node_id": self.workflow_node_id,
            }
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "TranscriptEntry":
        metadata = data.get("agent_metadata") or {}
        return cls(
            role=data.get("role", ""),
            content=data.get("message", data.get("content")) or "",
            tool_calls=tuple(TranscriptToolCall.from_dict(item) for item in data.get("tool_calls") or []),
            tool_results=tuple(
                TranscriptToolResult.from_dict(item) for item in data.get("tool_results") or []
            ),
            agent_id=metadata.get("agent_id"),
            workflow_node_id=metadata.get("workflow_node_id"),
        )


@dataclass(frozen=True)
class SimulationResponse:
    transcript: tuple[TranscriptEntry, ...] = ()
    evaluation_results: tuple[EvaluationResult, ...] = ()
    raw_data: dict[str, Any] = field(default_factory=dict)

    @property
    def tool_calls(self) -> list[TranscriptToolCall]:
        return [call for entry in self.transcript for call in entry.tool_calls]

    def to_dict(self) -> dict[str, Any]:
        data: dict[str, Any] = {
            "transcript": [entry.to_dict() for entry in self.transcript],
            "evaluation_results": [result.to_dict() for result in self.evaluation_results],
        }
        if self.raw_data:
            data["raw_data"] = self.raw_data
        return data

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> "SimulationResponse":
        entries = data.get("simulated_conversation", data.get("transcript")) or []
        analysis = data.get("analysis") or {}
        results = analysis.get("evaluation_criteria_results_list", data.get("evaluation_results")) or []
        return cls(
            transcript=tuple(TranscriptEntry.from_dict(entry) for entry in entries),
            evaluation_results=tuple(EvaluationResult.from_dict(result) for result in results),
            raw_data=dict(data.get("raw_data", data)),
        )
