"""Tests for the handoff protocol."""

import pytest

from agent_coordinator.exceptions import CoordinationError, HandoffRequested
from agent_coordinator.multi_agent.handoff import build_handoff, request_handoff
from agent_coordinator.multi_agent.schemas import TaskAssignment


class TestRequestHandoff:
    """Tests for request_handoff."""

    def test_raises_control_signal(self):
        with pytest.raises(HandoffRequested) as exc_info:
            request_handoff("billing", reasoning="refund request", context={"order": 7})

        request = exc_info.value
        assert request.to_worker == "billing"
        assert request.reasoning == "refund request"
        assert request.context == {"order": 7}
        assert isinstance(request, CoordinationError)


class TestBuildHandoff:
    """Tests for build_handoff."""

    def test_record_fields(self):
        assignment = TaskAssignment(worker_id="triage", task="Refund order 7")
        request = HandoffRequested("billing", reasoning="refund", context="order 7")

        handoff = build_handoff("triage", assignment, request)

        assert handoff.from_worker == "triage"
        assert handoff.to_worker == "billing"
        assert handoff.assignment_id == assignment.id
        assert handoff.context == "order 7"
        assert handoff.reasoning == "refund"
        assert handoff.id

    def test_context_defaults_to_assignment(self):
        assignment = TaskAssignment(worker_id="triage", task="t", context={"customer": "c1"})

        handoff = build_handoff("triage", assignment, HandoffRequested("billing"))

        assert handoff.context == {"customer": "c1"}
