from __future__ import annotations

import pytest

from turnledger.errors import ConfigurationError
from turnledger.simulation import (
    EvaluationResult,
    SimulationExpectations,
    SimulationResponse,
    TranscriptEntry,
    TranscriptToolCall,
)


def _expect() -> SimulationExpectations:
    response = SimulationResponse(
        transcript=(
            TranscriptEntry("user", "Cancel order 42 please"),
            TranscriptEntry(
                "agent",
                "Looking up order 42.",
                tool_calls=(TranscriptToolCall("lookup_order", '{"order_id": "42", "reason": "late delivery"}', True),),
                agent_id="agent_main",
                workflow_node_id="start",
            ),
            TranscriptEntry(
                "agent",
                "Your order is cancelled.",
                tool_calls=(TranscriptToolCall("cancel_order", '{"order_id": "42"}', False),),
                agent_id="agent_billing",
                workflow_node_id="cancel",
            ),
        ),
        evaluation_results=(
            EvaluationResult("polite", True, "Polite throughout."),
            EvaluationResult("upsell", False, "Did not upsell."),
        ),
        raw_data={"analysis": {"call_successful": "success", "transcript_summary": "Order 42 cancelled."}},
    )
    return SimulationExpectations(response, test_id="t")


def test_tool_assertions() -> None:
    expect = _expect()

    (
        expect.assert_tool_called("lookup_order")
        .assert_tool_not_called("refund")
        .assert_tool_called_times("lookup_order", 1)
        .assert_tool_executed("lookup_order")
        .assert_tool_call_count(2)
        .assert_tool_param("lookup_order", "order_id", "42")
        .assert_tool_param_contains("lookup_order", "reason", "late")
        .assert_tool_has_param("cancel_order", "order_id")
    )

    with pytest.raises(AssertionError):
        expect.assert_tool_executed("cancel_order")
    with pytest.raises(AssertionError):
        expect.assert_no_tools_called()
    with pytest.raises(AssertionError, match="missing key 'amount'"):
        expect.assert_tool_has_param("cancel_order", "amount")
    with pytest.raises(AssertionError, match="was not called"):
        expect.assert_tool_param("refund", "order_id", "42")


def test_evaluation_assertions() -> None:
    expect = _expect()

    expect.assert_evaluation_passed("polite").assert_evaluation_failed("upsell").assert_evaluation_count(2)

    with pytest.raises(AssertionError, match="Did not upsell"):
        expect.assert_all_evaluations_passed()
    with pytest.raises(AssertionError, match="not found"):
        expect.assert_evaluation_passed("missing")


def test_transcript_assertions() -> None:
    expect = _expect()

    (
        expect.assert_transcript_contains("[user]: Cancel order 42")
        .assert_transcript_not_contains("refund")
        .assert_transcript_matches(r"order \d+")
        .assert_agent_said("cancelled")
        .assert_agent_never_said("Cancel order 42 please")
        .assert_first_agent_message("Looking up")
        .assert_last_agent_message("cancelled")
        .assert_min_turns(3)
        .assert_max_turns(3)
    )

    with pytest.raises(AssertionError):
        expect.assert_min_turns(4)
    with pytest.raises(AssertionError):
        expect.assert_max_turns(2)


def test_workflow_and_analysis_assertions() -> None:
    expect = _expect()

    assert expect.agent_ids() == ["agent_main", "agent_billing"]
    (
        expect.assert_agent_handled("agent_billing")
        .assert_transferred_to_agent("agent_billing")
        .assert_workflow_node_reached("cancel")
        .assert_call_successful()
        .assert_summary_contains("cancelled")
    )

    with pytest.raises(AssertionError):
        expect.assert_workflow_node_reached("escalate")


def test_assert_by_prompt_without_judge_is_a_configuration_error() -> None:
    with pytest.raises(ConfigurationError):
        _expect().assert_by_prompt("anything")
