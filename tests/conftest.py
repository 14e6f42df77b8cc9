"""Shared test fixtures and configuration."""

import pytest
from unittest.mock import MagicMock

from agent_coordinator.clients.base import BaseLLMClient
from agent_coordinator.multi_agent.schemas import WorkerCapabilities
from agent_coordinator.multi_agent.state import CoordinationState
from agent_coordinator.types import (
    FinishReason,
    MessageRole,
    ToolCall,
    UnifiedMessage,
    UnifiedResponse,
    UsageStats,
)


@pytest.fixture
def mock_client():
    """Create a mock LLM client."""
    client = MagicMock(spec=BaseLLMClient)
    return client


@pytest.fixture
def text_response():
    """Factory for a plain text assistant response."""
    def make(content: str) -> UnifiedResponse:
        return UnifiedResponse(
            message=UnifiedMessage(role=MessageRole.ASSISTANT, content=content),
            finish_reason=FinishReason.STOP,
            usage=UsageStats(prompt_tokens=10, completion_tokens=5, total_tokens=15),
        )
    return make


@pytest.fixture
def tool_response():
    """Factory for an assistant response that requests tool calls."""
    def make(*calls: ToolCall, content: str | None = None) -> UnifiedResponse:
        return UnifiedResponse(
            message=UnifiedMessage(
                role=MessageRole.ASSISTANT,
                content=content,
                tool_calls=list(calls),
            ),
            finish_reason=FinishReason.TOOL_USE,
        )
    return make


@pytest.fixture
def workers():
    """Three workers in registration order: researcher, writer, coder."""
    return {
        "researcher": WorkerCapabilities(skills=["research", "analysis"]),
        "writer": WorkerCapabilities(skills=["writing", "documentation"]),
        "coder": WorkerCapabilities(
            skills=["coding", "debugging"],
            tools=["compiler", "debugger"],
        ),
    }


@pytest.fixture
def make_state(workers):
    """Factory for a fresh coordination state."""
    def make(
        task: str = "Summarize the quarterly report",
        worker_map: dict | None = None,
        max_iterations: int = 10,
        **overrides,
    ) -> CoordinationState:
        state = CoordinationState.start(
            task,
            workers if worker_map is None else worker_map,
            max_iterations=max_iterations,
        )
        if overrides:
            state = state.model_copy(update=overrides)
        return state
    return make
