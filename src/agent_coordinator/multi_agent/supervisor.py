"""Supervisor node for multi-agent coordination.

The supervisor drives one coordination step at a time. It turns pending
handoffs into assignments, holds the join barrier while parallel work is
outstanding, routes new tasks through the configured strategy, and decides
when the round is over and aggregation should start.
"""

import logging
from datetime import timedelta
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict, Field

from ..clients.base import BaseLLMClient
from ..exceptions import RoutingError
from ..logging import get_logger
from ..tools.base import BaseTool
from .routing import DEFAULT_MAX_TOOL_RETRIES, RoutingStrategyImpl, get_routing_strategy
from .schemas import (
    AgentMessage,
    CoordinationStatus,
    HandoffRequest,
    MessageType,
    RoutingDecision,
    RoutingStrategy,
    TaskAssignment,
)
from .state import (
    AGGREGATOR,
    SUPERVISOR,
    USER,
    CoordinationState,
    StateDelta,
    all_assignments_settled,
    current_task,
    get_assignment,
    pending_assignments,
    pending_handoffs,
)


class SupervisorConfig(BaseModel):
    """Configuration for the supervisor node.

    Attributes:
        strategy: Routing strategy name
        client: Reasoning service, required by llm-based routing
        system_prompt: Override for the llm-based routing system prompt
        routing_fn: ``(state) -> RoutingDecision``, required by rule-based routing
        tools: Tools the reasoning service may call while routing
        max_tool_retries: Reasoning-service calls allowed per llm-based routing
        priority: Priority stamped on new assignments
        task_deadline: Optional deadline offset for new assignments
        logger: Logger for the supervisor and its strategy
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    strategy: RoutingStrategy | str = RoutingStrategy.SKILL_BASED
    client: BaseLLMClient | None = None
    system_prompt: str | None = None
    routing_fn: Callable[[CoordinationState], RoutingDecision] | None = None
    tools: list[BaseTool] = Field(default_factory=list)
    max_tool_retries: int = Field(default=DEFAULT_MAX_TOOL_RETRIES, ge=1)
    priority: int = Field(default=5, ge=1, le=10)
    task_deadline: timedelta | None = None
    logger: logging.Logger | None = None


class SupervisorNode:
    """Callable supervisor step: ``(state, context=None) -> StateDelta``.

    Each call runs the first rule that applies:

    1. Iteration budget exhausted: start aggregating.
    2. A handoff is pending: assign its task to the target worker.
    3. Assignments are outstanding: keep executing and wait for them.
    4. Every assignment is settled: start aggregating.
    5. Otherwise route the current task and create assignments.

    Routing failures never propagate. They end the session with
    ``status=failed`` and the error message in ``error``.
    """

    def __init__(self, config: SupervisorConfig):
        """Initialize the supervisor.

        Args:
            config: Supervisor configuration.

        Raises:
            ConfigurationError: If the strategy name is unknown.
        """
        self.config = config
        self.strategy: RoutingStrategyImpl = get_routing_strategy(config.strategy)
        self.logger = config.logger or get_logger(__name__)

    def __call__(self, state: CoordinationState, context: Any = None) -> StateDelta:
        self.logger.debug(
            "supervisor step (iteration %d/%d, status %s)",
            state.iteration,
            state.max_iterations,
            state.status.value,
        )

        if state.iteration >= state.max_iterations:
            self.logger.info(
                "max iterations (%d) reached, moving to aggregation", state.max_iterations
            )
            return StateDelta(status=CoordinationStatus.AGGREGATING, current_agent=AGGREGATOR)

        try:
            handoffs = pending_handoffs(state)
            if handoffs:
                return self._assign_handoff(state, handoffs[0])

            outstanding = pending_assignments(state)
            if outstanding:
                worker_ids = list(dict.fromkeys(a.worker_id for a in outstanding))
                self.logger.debug("waiting on %d assignment(s) from %s", len(outstanding), worker_ids)
                return StateDelta(
                    status=CoordinationStatus.EXECUTING,
                    current_agent=",".join(worker_ids),
                    iteration=1,
                )

            if all_assignments_settled(state):
                self.logger.info(
                    "all %d assignment(s) settled, moving to aggregation",
                    len(state.active_assignments),
                )
                return StateDelta(status=CoordinationStatus.AGGREGATING, current_agent=AGGREGATOR)

            return self._route(state)
        except Exception as e:
            self.logger.error("supervisor failed: %s", e)
            return StateDelta(
                status=CoordinationStatus.FAILED,
                error=str(e),
                messages=[
                    AgentMessage(
                        type=MessageType.ERROR,
                        sender=SUPERVISOR,
                        recipients=[USER],
                        content=str(e),
                        metadata={"error_type": type(e).__name__},
                    )
                ],
            )

    def _route(self, state: CoordinationState) -> StateDelta:
        decision = self.strategy.route(state, self.config)

        unknown = [wid for wid in decision.target_ids if wid not in state.workers]
        if unknown:
            raise RoutingError(f"Routing decision targets unknown worker(s): {', '.join(unknown)}")
        busy = [wid for wid in decision.target_ids if not state.workers[wid].available]
        if busy:
            raise RoutingError(f"Routing decision targets unavailable worker(s): {', '.join(busy)}")

        task = current_task(state)
        assignments = [self._new_assignment(worker_id, task) for worker_id in decision.target_ids]

        self.logger.info(
            "routed to %s via %s (confidence %.2f): %s",
            decision.target_ids,
            decision.strategy.value,
            decision.confidence,
            decision.reasoning,
        )
        return StateDelta(
            routing_history=[decision],
            active_assignments=assignments,
            messages=[self._assignment_message(a) for a in assignments],
            status=CoordinationStatus.EXECUTING,
            current_agent=",".join(decision.target_ids),
            iteration=1,
        )

    def _assign_handoff(self, state: CoordinationState, handoff: HandoffRequest) -> StateDelta:
        target = state.workers.get(handoff.to_worker)
        if target is None:
            raise RoutingError(f"Handoff target is not a registered worker: {handoff.to_worker}")
        if not target.available:
            raise RoutingError(f"Handoff target is not available: {handoff.to_worker}")

        original = get_assignment(state, handoff.assignment_id)
        assignment = self._new_assignment(
            handoff.to_worker,
            original.task if original else current_task(state),
            context=handoff.context,
            handoff_id=handoff.id,
            priority=original.priority if original else None,
        )

        self.logger.info(
            "handoff from '%s' to '%s': %s",
            handoff.from_worker,
            handoff.to_worker,
            handoff.reasoning,
        )
        message = AgentMessage(
            type=MessageType.HANDOFF,
            sender=SUPERVISOR,
            recipients=[handoff.to_worker],
            content=assignment.task,
            metadata={
                "assignment_id": assignment.id,
                "handoff_id": handoff.id,
                "from_worker": handoff.from_worker,
            },
        )
        return StateDelta(
            active_assignments=[assignment],
            messages=[message],
            status=CoordinationStatus.EXECUTING,
            current_agent=handoff.to_worker,
            iteration=1,
        )

    def _new_assignment(
        self,
        worker_id: str,
        task: str,
        context: Any = None,
        handoff_id: str | None = None,
        priority: int | None = None,
    ) -> TaskAssignment:
        assignment = TaskAssignment(
            worker_id=worker_id,
            task=task,
            priority=priority or self.config.priority,
            context=context,
            handoff_id=handoff_id,
        )
        if self.config.task_deadline is not None:
            assignment = assignment.model_copy(
                update={"deadline": assignment.assigned_at + self.config.task_deadline}
            )
        return assignment

    def _assignment_message(self, assignment: TaskAssignment) -> AgentMessage:
        return AgentMessage(
            type=MessageType.TASK_ASSIGNMENT,
            sender=SUPERVISOR,
            recipients=[assignment.worker_id],
            content=assignment.task,
            metadata={"assignment_id": assignment.id, "priority": assignment.priority},
        )

    def __repr__(self) -> str:
        return f"SupervisorNode(strategy='{self.strategy.name.value}')"


def create_supervisor_node(
    strategy: RoutingStrategy | str = RoutingStrategy.SKILL_BASED,
    **kwargs: Any,
) -> SupervisorNode:
    """Factory function to create a supervisor node.

    Args:
        strategy: Routing strategy name.
        **kwargs: Any other SupervisorConfig field.

    Returns:
        Configured SupervisorNode.
    """
    return SupervisorNode(SupervisorConfig(strategy=strategy, **kwargs))
