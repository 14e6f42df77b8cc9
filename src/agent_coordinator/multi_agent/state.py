"""Coordination state, state deltas, and the reducers that merge them.

Nodes never modify a CoordinationState. Each node returns a StateDelta and
the scheduler folds it into the state with merge_state:

- list fields (messages, routing_history, active_assignments,
  completed_tasks, handoffs) are appended
- workers is shallow-merged, keeping registration order
- iteration is an increment
- scalar fields (current_agent, status, response, error) are overwritten only
  when the delta sets them explicitly
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from .schemas import (
    AgentMessage,
    CoordinationStatus,
    HandoffRequest,
    MessageType,
    RoutingDecision,
    TaskAssignment,
    TaskResult,
    WorkerCapabilities,
)

SUPERVISOR = "supervisor"
AGGREGATOR = "aggregator"
USER = "user"

_LIST_FIELDS = (
    "messages",
    "routing_history",
    "active_assignments",
    "completed_tasks",
    "handoffs",
)
_SCALAR_FIELDS = ("current_agent", "status", "response", "error")


class CoordinationState(BaseModel):
    """The shared state of one coordination session."""

    model_config = ConfigDict(frozen=True)

    input: str = ""
    messages: list[AgentMessage] = Field(default_factory=list)
    workers: dict[str, WorkerCapabilities] = Field(default_factory=dict)
    current_agent: str | None = None
    routing_history: list[RoutingDecision] = Field(default_factory=list)
    active_assignments: list[TaskAssignment] = Field(default_factory=list)
    completed_tasks: list[TaskResult] = Field(default_factory=list)
    handoffs: list[HandoffRequest] = Field(default_factory=list)
    status: CoordinationStatus = CoordinationStatus.INITIALIZING
    iteration: int = Field(default=0, ge=0)
    max_iterations: int = Field(default=10, ge=1)
    response: Any = None
    error: str | None = None

    @classmethod
    def start(
        cls,
        input: str,
        workers: dict[str, WorkerCapabilities] | None = None,
        max_iterations: int = 10,
    ) -> "CoordinationState":
        """Create the initial state for a task.

        Args:
            input: The user's task.
            workers: Ordered worker capabilities, usually a registry snapshot.
            max_iterations: Routing iterations before aggregation is forced.

        Returns:
            A new state holding a single user_input message.
        """
        return cls(
            input=input,
            workers=dict(workers or {}),
            max_iterations=max_iterations,
            messages=[
                AgentMessage(
                    type=MessageType.USER_INPUT,
                    sender=USER,
                    recipients=[SUPERVISOR],
                    content=input,
                )
            ],
        )


class StateDelta(BaseModel):
    """A partial state update returned by a node.

    List fields are appended to the state, ``workers`` is merged and
    ``iteration`` is added. Scalar fields only apply when passed explicitly,
    so ``StateDelta(current_agent=None)`` clears the current agent while
    ``StateDelta()`` leaves it alone.
    """

    messages: list[AgentMessage] = Field(default_factory=list)
    workers: dict[str, WorkerCapabilities] = Field(default_factory=dict)
    routing_history: list[RoutingDecision] = Field(default_factory=list)
    active_assignments: list[TaskAssignment] = Field(default_factory=list)
    completed_tasks: list[TaskResult] = Field(default_factory=list)
    handoffs: list[HandoffRequest] = Field(default_factory=list)
    iteration: int = Field(default=0, ge=0)
    current_agent: str | None = None
    status: CoordinationStatus | None = None
    response: Any = None
    error: str | None = None


def merge_state(state: CoordinationState, delta: StateDelta) -> CoordinationState:
    """Apply a delta to a state and return the new state.

    Args:
        state: The current state. It is not modified.
        delta: The node's update.

    Returns:
        A new CoordinationState.

    Raises:
        ValueError: If the delta reuses an existing assignment id.
    """
    seen = {assignment.id for assignment in state.active_assignments}
    for assignment in delta.active_assignments:
        if assignment.id in seen:
            raise ValueError(f"Assignment id reused: {assignment.id}")
        seen.add(assignment.id)

    update: dict[str, Any] = {
        name: [*getattr(state, name), *getattr(delta, name)]
        for name in _LIST_FIELDS
    }
    update["workers"] = {**state.workers, **delta.workers}
    update["iteration"] = state.iteration + delta.iteration

    for name in _SCALAR_FIELDS:
        if name in delta.model_fields_set:
            update[name] = getattr(delta, name)

    return state.model_copy(update=update)


# =============================================================================
# Queries
# =============================================================================

def current_task(state: CoordinationState) -> str:
    """Return the task text being coordinated.

    This is the content of the latest user_input message, falling back to
    the session input.
    """
    for message in reversed(state.messages):
        if message.type == MessageType.USER_INPUT:
            return message.content
    return state.input


def get_assignment(state: CoordinationState, assignment_id: str) -> TaskAssignment | None:
    """Look up an assignment by id."""
    for assignment in state.active_assignments:
        if assignment.id == assignment_id:
            return assignment
    return None


def is_settled(state: CoordinationState, assignment: TaskAssignment) -> bool:
    """Check if an assignment has a result or was handed off."""
    if any(result.assignment_id == assignment.id for result in state.completed_tasks):
        return True
    return any(handoff.assignment_id == assignment.id for handoff in state.handoffs)


def pending_assignments(
    state: CoordinationState,
    worker_id: str | None = None,
) -> list[TaskAssignment]:
    """Return unsettled assignments in creation order.

    Args:
        state: The coordination state.
        worker_id: Only return assignments addressed to this worker.
    """
    settled = {result.assignment_id for result in state.completed_tasks}
    settled.update(handoff.assignment_id for handoff in state.handoffs)
    return [
        assignment
        for assignment in state.active_assignments
        if assignment.id not in settled
        and (worker_id is None or assignment.worker_id == worker_id)
    ]


def all_assignments_settled(state: CoordinationState) -> bool:
    """Check the join barrier: at least one assignment, and none outstanding."""
    return bool(state.active_assignments) and not pending_assignments(state)


def pending_handoffs(state: CoordinationState) -> list[HandoffRequest]:
    """Return handoffs the supervisor has not yet turned into assignments."""
    served = {
        assignment.handoff_id
        for assignment in state.active_assignments
        if assignment.handoff_id
    }
    return [handoff for handoff in state.handoffs if handoff.id not in served]
