"""Tests for the aggregator node."""

from unittest.mock import MagicMock

from agent_coordinator.multi_agent.aggregator import (
    NO_TASKS_RESPONSE,
    create_aggregator_node,
    format_results,
)
from agent_coordinator.multi_agent.schemas import (
    CoordinationStatus,
    MessageType,
    TaskResult,
)
from agent_coordinator.multi_agent.state import StateDelta, merge_state
from agent_coordinator.types import MessageRole


def _with_results(state, *results):
    return merge_state(state, StateDelta(completed_tasks=list(results)))


def _ok(worker_id, result):
    return TaskResult(assignment_id=f"a-{worker_id}", worker_id=worker_id, success=True, result=result)


def _failed(worker_id, error):
    return TaskResult(assignment_id=f"a-{worker_id}", worker_id=worker_id, success=False, error=error)


class TestDefaultAggregation:
    """Tests for the labeled join."""

    def test_no_tasks(self, make_state):
        delta = create_aggregator_node()(make_state())
        assert delta.response == NO_TASKS_RESPONSE == "No tasks were completed."
        assert delta.status == CoordinationStatus.COMPLETED
        assert delta.current_agent is None
        assert "current_agent" in delta.model_fields_set

    def test_results_in_completion_order(self, make_state):
        state = _with_results(make_state(), _ok("writer", "R1"), _ok("researcher", "R2"))

        delta = create_aggregator_node()(state)

        assert delta.response == "[writer] R1\n\n[researcher] R2"
        assert delta.messages[0].type == MessageType.COMPLETION
        assert delta.messages[0].recipients == ["user"]
        assert delta.messages[0].metadata == {"task_count": 2}

    def test_failures_are_labeled(self):
        text = format_results([_ok("writer", "draft"), _failed("coder", "timeout")])
        assert text == "[writer] draft\n\n[coder] Error: timeout"

    def test_structured_payload(self):
        assert format_results([_ok("coder", {"files": 2})]) == '[coder] {"files": 2}'


class TestCustomAggregation:
    """Tests for aggregate_fn."""

    def test_custom_function(self, make_state):
        aggregate_fn = MagicMock(return_value={"summary": "all good"})
        state = _with_results(make_state(), _ok("writer", "R1"))

        delta = create_aggregator_node(aggregate_fn=aggregate_fn)(state)

        aggregate_fn.assert_called_once_with(state)
        assert delta.response == {"summary": "all good"}
        assert delta.status == CoordinationStatus.COMPLETED

    def test_custom_function_runs_without_results(self, make_state):
        delta = create_aggregator_node(aggregate_fn=lambda state: "custom")(make_state())
        assert delta.response == "custom"

    def test_custom_function_failure(self, make_state):
        def explode(state):
            raise ValueError("bad merge")

        delta = create_aggregator_node(aggregate_fn=explode)(make_state())

        assert delta.status == CoordinationStatus.FAILED
        assert delta.error == "bad merge"
        assert delta.current_agent is None
        assert delta.messages[0].type == MessageType.ERROR


class TestLLMAggregation:
    """Tests for synthesis with a reasoning service."""

    def test_synthesis(self, make_state, mock_client, text_response):
        mock_client.generate.return_value = text_response("Combined answer.")
        state = _with_results(
            make_state("Explain the outage"),
            _ok("researcher", "root cause"),
            _failed("coder", "no access"),
        )

        delta = create_aggregator_node(client=mock_client)(state)

        assert delta.response == "Combined answer."
        transcript = mock_client.generate.call_args[0][0]
        assert transcript[0].role == MessageRole.SYSTEM
        prompt = transcript[1].content
        assert prompt.startswith("Original query: Explain the outage")
        assert "1. [success] Worker researcher:\nroot cause" in prompt
        assert "2. [failed] Worker coder:\nError: no access" in prompt

    def test_client_skipped_without_results(self, make_state, mock_client):
        delta = create_aggregator_node(client=mock_client)(make_state())
        mock_client.generate.assert_not_called()
        assert delta.response == NO_TASKS_RESPONSE

    def test_empty_synthesis_fails(self, make_state, mock_client, text_response):
        mock_client.generate.return_value = text_response("")
        state = _with_results(make_state(), _ok("writer", "R1"))

        delta = create_aggregator_node(client=mock_client)(state)

        assert delta.status == CoordinationStatus.FAILED
        assert "empty" in delta.error
