"""Agent Coordinator - multi-worker task routing and coordination.

This package routes tasks to specialized workers, tracks each task through
assignment, execution and completion, supports handoffs between workers, and
aggregates the results into a final response.
"""

from .exceptions import (
    AggregationError,
    ClientError,
    ConfigurationError,
    CoordinationError,
    ExecutionError,
    HandoffRequested,
    RoutingError,
)
from .multi_agent import (
    AggregatorConfig,
    CoordinationState,
    CoordinationStatus,
    MultiAgentSystem,
    RoutingDecision,
    RoutingStrategy,
    StateDelta,
    SupervisorConfig,
    TaskAssignment,
    TaskResult,
    WorkerCapabilities,
    WorkerConfig,
    WorkerRegistry,
    create_multi_agent_system,
    request_handoff,
)

__all__ = [
    # system
    "AggregatorConfig",
    "MultiAgentSystem",
    "SupervisorConfig",
    "WorkerConfig",
    "WorkerRegistry",
    "create_multi_agent_system",
    "request_handoff",
    # types
    "CoordinationState",
    "CoordinationStatus",
    "RoutingDecision",
    "RoutingStrategy",
    "StateDelta",
    "TaskAssignment",
    "TaskResult",
    "WorkerCapabilities",
    # exceptions
    "AggregationError",
    "ClientError",
    "ConfigurationError",
    "CoordinationError",
    "ExecutionError",
    "HandoffRequested",
    "RoutingError",
]
