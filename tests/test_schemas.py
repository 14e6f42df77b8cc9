"""Tests for the coordination data model."""

import pytest
from pydantic import ValidationError

from agent_coordinator.multi_agent.schemas import (
    AgentMessage,
    CoordinationStatus,
    MessageType,
    ParallelTargets,
    RoutingDecision,
    RoutingStrategy,
    SingleTarget,
    TaskAssignment,
    TaskResult,
    WorkerCapabilities,
)


class TestWorkerCapabilities:
    """Tests for WorkerCapabilities."""

    def test_defaults(self):
        caps = WorkerCapabilities()
        assert caps.skills == []
        assert caps.tools == []
        assert caps.available is True
        assert caps.current_workload == 0

    def test_duplicates_dropped_in_order(self):
        """Skills and tools behave like sets with a stable order."""
        caps = WorkerCapabilities(skills=["a", "b", "a"], tools=["x", "x", "y"])
        assert caps.skills == ["a", "b"]
        assert caps.tools == ["x", "y"]

    def test_blank_entries_dropped(self):
        caps = WorkerCapabilities(skills=["", "research", "  "], tools=["\t", "grep"])
        assert caps.skills == ["research"]
        assert caps.tools == ["grep"]

    def test_negative_workload_rejected(self):
        with pytest.raises(ValidationError):
            WorkerCapabilities(current_workload=-1)

    def test_frozen(self):
        caps = WorkerCapabilities()
        with pytest.raises(ValidationError):
            caps.available = False


class TestRoutingDecision:
    """Tests for the tagged RoutingDecision."""

    def test_single(self):
        decision = RoutingDecision.single("coder", reasoning="r", confidence=0.7)
        assert isinstance(decision.target, SingleTarget)
        assert decision.target_ids == ["coder"]
        assert decision.is_parallel is False
        assert decision.timestamp.tzinfo is not None

    def test_parallel(self):
        decision = RoutingDecision.parallel(["a", "b"], strategy=RoutingStrategy.LLM_BASED)
        assert isinstance(decision.target, ParallelTargets)
        assert decision.target_ids == ["a", "b"]
        assert decision.is_parallel is True
        assert decision.strategy == RoutingStrategy.LLM_BASED

    def test_discriminated_from_dict(self):
        decision = RoutingDecision.model_validate({
            "target": {"kind": "parallel", "worker_ids": ["a", "b"]},
            "confidence": 0.9,
            "strategy": "llm-based",
        })
        assert decision.is_parallel
        assert decision.strategy == RoutingStrategy.LLM_BASED

    def test_parallel_duplicates_rejected(self):
        with pytest.raises(ValidationError):
            RoutingDecision.parallel(["a", "a"])

    def test_parallel_empty_rejected(self):
        with pytest.raises(ValidationError):
            RoutingDecision.parallel([])

    def test_confidence_bounds(self):
        with pytest.raises(ValidationError):
            RoutingDecision.single("a", confidence=1.5)
        with pytest.raises(ValidationError):
            RoutingDecision.single("a", confidence=-0.1)


class TestTaskAssignment:
    """Tests for TaskAssignment."""

    def test_ids_are_unique(self):
        first = TaskAssignment(worker_id="a", task="t")
        second = TaskAssignment(worker_id="a", task="t")
        assert first.id != second.id

    def test_priority_bounds(self):
        assert TaskAssignment(worker_id="a", task="t").priority == 5
        with pytest.raises(ValidationError):
            TaskAssignment(worker_id="a", task="t", priority=11)
        with pytest.raises(ValidationError):
            TaskAssignment(worker_id="a", task="t", priority=0)


class TestTaskResult:
    """Tests for TaskResult."""

    def test_failure_requires_error(self):
        with pytest.raises(ValidationError):
            TaskResult(assignment_id="x", worker_id="a", success=False)

    def test_failure_with_error(self):
        result = TaskResult(assignment_id="x", worker_id="a", success=False, error="boom")
        assert result.error == "boom"
        assert result.metadata == {}


class TestAgentMessage:
    """Tests for AgentMessage aliases."""

    def test_from_and_to_aliases(self):
        msg = AgentMessage.model_validate({
            "type": "task_result",
            "from": "coder",
            "to": ["supervisor"],
            "content": "done",
        })
        assert msg.sender == "coder"
        assert msg.recipients == ["supervisor"]
        assert msg.type == MessageType.TASK_RESULT

    def test_dump_by_alias(self):
        msg = AgentMessage(type=MessageType.ERROR, sender="a", recipients=["b"])
        data = msg.model_dump(by_alias=True)
        assert data["from"] == "a"
        assert data["to"] == ["b"]


class TestCoordinationStatus:
    """Tests for CoordinationStatus."""

    def test_terminal_states(self):
        assert CoordinationStatus.COMPLETED.is_terminal
        assert CoordinationStatus.FAILED.is_terminal
        assert not CoordinationStatus.ROUTING.is_terminal
        assert not CoordinationStatus.AGGREGATING.is_terminal
