"""Tests for routing decision parsing."""

import pytest

from agent_coordinator.multi_agent.parsing import (
    DEFAULT_CONFIDENCE,
    parse_routing_decision,
)
from agent_coordinator.multi_agent.schemas import RoutingDecision, RoutingStrategy


class TestParseSuccess:
    """Payloads that produce a decision."""

    def test_plain_json(self):
        result = parse_routing_decision('{"targetAgent": "coder", "confidence": 0.8}')
        assert result.ok
        assert result.error is None
        assert result.decision.target_ids == ["coder"]
        assert result.decision.confidence == 0.8
        assert result.decision.strategy == RoutingStrategy.LLM_BASED

    def test_mapping(self):
        result = parse_routing_decision({"targetAgents": ["a", "b"], "reasoning": "split"})
        assert result.decision.is_parallel
        assert result.decision.reasoning == "split"
        assert result.decision.confidence == DEFAULT_CONFIDENCE

    def test_existing_decision_passes_through(self):
        decision = RoutingDecision.single("writer")
        assert parse_routing_decision(decision).decision is decision

    def test_fenced_json(self):
        raw = 'Here you go:\n```json\n{"targetAgent": "writer"}\n```\nThanks.'
        assert parse_routing_decision(raw).decision.target_ids == ["writer"]

    def test_json_in_prose(self):
        raw = 'I pick {"targetAgent": "researcher", "reasoning": "needs {facts}"} for this.'
        result = parse_routing_decision(raw)
        assert result.decision.target_ids == ["researcher"]
        assert result.decision.reasoning == "needs {facts}"

    def test_snake_case_keys(self):
        result = parse_routing_decision({"target_agent": "coder"})
        assert result.decision.target_ids == ["coder"]

    def test_null_counterpart_is_absent(self):
        result = parse_routing_decision({"targetAgent": "coder", "targetAgents": None})
        assert result.decision.target_ids == ["coder"]

    def test_empty_list_counterpart_is_absent(self):
        result = parse_routing_decision({"targetAgent": "", "targetAgents": ["a"]})
        assert result.decision.target_ids == ["a"]

    def test_strategy_is_stamped(self):
        result = parse_routing_decision(
            {"targetAgent": "coder"}, strategy=RoutingStrategy.RULE_BASED
        )
        assert result.decision.strategy == RoutingStrategy.RULE_BASED


class TestParseFailure:
    """Payloads that produce a ParseError instead of raising."""

    def test_ambiguous(self):
        result = parse_routing_decision({"targetAgent": "a", "targetAgents": ["a", "b"]})
        assert not result.ok
        assert result.decision is None
        assert "Ambiguous" in result.error.message

    def test_no_target(self):
        result = parse_routing_decision('{"reasoning": "no idea"}')
        assert "no targetAgent or targetAgents" in result.error.message

    def test_no_json(self):
        raw = "Send it to the coder."
        result = parse_routing_decision(raw)
        assert "No JSON object" in result.error.message
        assert result.error.raw == raw

    @pytest.mark.parametrize("confidence", [1.5, -0.2, "high", True])
    def test_bad_confidence(self, confidence):
        result = parse_routing_decision({"targetAgent": "a", "confidence": confidence})
        assert not result.ok
        assert "Confidence" in result.error.message

    def test_duplicate_parallel_targets(self):
        result = parse_routing_decision({"targetAgents": ["a", "a"]})
        assert not result.ok

    def test_wrong_target_type(self):
        assert not parse_routing_decision({"targetAgent": 3}).ok
        assert not parse_routing_decision({"targetAgents": "a"}).ok

    def test_unsupported_type(self):
        result = parse_routing_decision(42)
        assert "Unsupported" in result.error.message
