"""Multi-agent coordination.

This module provides a Supervisor-Worker pattern in which every step is a
node function returning a state delta.

Architecture:
    SupervisorNode
        |
        +-- turns pending handoffs into assignments
        +-- routes the task (round-robin, skill-based, load-balanced,
        |   rule-based, llm-based)
        +-- waits for every assignment (join barrier)
        |
        v
    WorkerNode(s)
        - run an execute_fn, a sub-agent, or a reasoning service
        - report a TaskResult, or hand the task to another worker
        |
        v
    AggregatorNode
        - combines results into the final response

Example usage:
    from agent_coordinator.multi_agent import (
        SupervisorConfig,
        create_coder_worker,
        create_multi_agent_system,
        create_researcher_worker,
    )
    from agent_coordinator.clients import create_client

    client = create_client("anthropic")

    system = create_multi_agent_system(
        supervisor=SupervisorConfig(strategy="llm-based", client=client),
        workers=[
            create_researcher_worker(client),
            create_coder_worker(client),
        ],
    )

    final = system.invoke("Research sorting algorithms and implement the fastest one")
    print(final.response)
"""

from .aggregator import AggregatorConfig, AggregatorNode, create_aggregator_node
from .handoff import build_handoff, request_handoff
from .parsing import ParseError, ParseResult, parse_routing_decision
from .registry import WorkerRegistry
from .routing import (
    LLMBasedRouting,
    LoadBalancedRouting,
    RoundRobinRouting,
    RoutingStrategyImpl,
    RuleBasedRouting,
    SkillBasedRouting,
    get_available_strategies,
    get_routing_strategy,
)
from .schemas import (
    AgentMessage,
    CoordinationStatus,
    HandoffRequest,
    MessageType,
    ParallelTargets,
    RoutingDecision,
    RoutingStrategy,
    SingleTarget,
    TaskAssignment,
    TaskResult,
    WorkerCapabilities,
)
from .state import (
    CoordinationState,
    StateDelta,
    all_assignments_settled,
    current_task,
    is_settled,
    merge_state,
    pending_assignments,
    pending_handoffs,
)
from .supervisor import SupervisorConfig, SupervisorNode, create_supervisor_node
from .system import MultiAgentSystem, create_multi_agent_system, register_workers
from .worker import (
    WorkerConfig,
    WorkerNode,
    WorkerOutput,
    create_llm_execute_fn,
    create_worker_node,
    wrap_sub_agent,
)
from .workers import (
    create_coder_worker,
    create_researcher_worker,
    create_reviewer_worker,
    create_writer_worker,
)

__all__ = [
    # data model
    "AgentMessage",
    "CoordinationStatus",
    "HandoffRequest",
    "MessageType",
    "ParallelTargets",
    "RoutingDecision",
    "RoutingStrategy",
    "SingleTarget",
    "TaskAssignment",
    "TaskResult",
    "WorkerCapabilities",
    # state
    "CoordinationState",
    "StateDelta",
    "all_assignments_settled",
    "current_task",
    "is_settled",
    "merge_state",
    "pending_assignments",
    "pending_handoffs",
    # registry
    "WorkerRegistry",
    # routing
    "LLMBasedRouting",
    "LoadBalancedRouting",
    "ParseError",
    "ParseResult",
    "RoundRobinRouting",
    "RoutingStrategyImpl",
    "RuleBasedRouting",
    "SkillBasedRouting",
    "get_available_strategies",
    "get_routing_strategy",
    "parse_routing_decision",
    # nodes
    "AggregatorConfig",
    "AggregatorNode",
    "SupervisorConfig",
    "SupervisorNode",
    "WorkerConfig",
    "WorkerNode",
    "WorkerOutput",
    "create_aggregator_node",
    "create_llm_execute_fn",
    "create_supervisor_node",
    "create_worker_node",
    "wrap_sub_agent",
    # handoff
    "build_handoff",
    "request_handoff",
    # system
    "MultiAgentSystem",
    "create_multi_agent_system",
    "register_workers",
    # preset workers
    "create_coder_worker",
    "create_researcher_worker",
    "create_reviewer_worker",
    "create_writer_worker",
]
