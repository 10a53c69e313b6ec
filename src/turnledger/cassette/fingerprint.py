"""Deterministic cassette identities.

A fingerprint is the SHA-256 of the canonical JSON of a semantic request
state. Map keys are sorted, list order is kept, and Unicode is hashed as-is,
so the same state hashes identically across processes and runs.
"""

from __future__ import annotations

from typing import Any, Iterable, Mapping

from turnledger.models import Message, ToolDefinition
from turnledger.util.canonical_json import sha256_hex


def hash_payload(payload: Mapping[str, Any]) -> str:
    return sha256_hex(dict(payload))


def make_fingerprint(
    system_prompt: str,
    messages: Iterable[Message],
    model: str,
    temperature: float,
    tools: Iterable[ToolDefinition],
    test_id: str,
    turn_index: int,
) -> str:
    return hash_payload(
        {
            "systemPrompt": system_prompt,
            "messages": [message.to_dict() for message in messages],
            "model": model,
            "temperature": float(temperature),
            "tools": [tool.to_dict() for tool in tools],
            "testName": test_id,
            "turnIndex": turn_index,
        }
    )


def make_judge_fingerprint(
    system_prompt: str,
    messages: Iterable[Message],
    model: str,
    temperature: float,
    identity: str,
    judge_index: int,
) -> str:
    # The judge call index stands in for the turn index.
    return make_fingerprint(
        system_prompt,
        messages,
        model,
        temperature,
        [],
        f"{identity}:{judge_index}",
        0,
    )


def make_simulation_fingerprint(
    agent_id: str,
    user_prompt: str,
    first_message: str,
    tool_mocks: Mapping[str, str],
    evaluation_criteria: Iterable[Mapping[str, Any]],
    turns_limit: int,
    test_id: str,
    dynamic_variables: Mapping[str, Any] | None = None,
) -> str:
    return hash_payload(
        {
            "agentId": agent_id,
            "userPrompt": user_prompt,
            "firstMessage": first_message,
            "toolMocks": dict(tool_mocks),
            "evaluationCriteria": [dict(criterion) for criterion in evaluation_criteria],
            "turnsLimit": turns_limit,
            "testName": test_id,
            "dynamicVariables": dict(dynamic_variables or {}),
        }
    )
