"""Handoff protocol.

A worker that finds its task better suited to another worker can hand it
over instead of producing a result. From inside an execution function:

    ```python
    def triage(state, assignment, context=None):
        if "refund" in assignment.task:
            request_handoff("billing", reasoning="refunds are handled by billing")
        return "answered by triage"
    ```

The worker executor records the handoff and returns control to the
supervisor, which creates a new assignment for the target worker carrying the
handoff context. The original assignment counts as settled from then on.
"""

from typing import Any, NoReturn

from ..exceptions import HandoffRequested
from .schemas import HandoffRequest, TaskAssignment


def request_handoff(
    to_worker: str,
    reasoning: str = "",
    context: Any = None,
) -> NoReturn:
    """Hand the current assignment to another worker.

    Args:
        to_worker: Id of the worker that should take over.
        reasoning: Why the task is being handed off.
        context: Context for the next worker. Defaults to the context of the
            assignment being handed off.

    Raises:
        HandoffRequested: Always.
    """
    raise HandoffRequested(to_worker, reasoning=reasoning, context=context)


def build_handoff(
    from_worker: str,
    assignment: TaskAssignment,
    request: HandoffRequested,
) -> HandoffRequest:
    """Create the handoff record for an intercepted HandoffRequested."""
    return HandoffRequest(
        from_worker=from_worker,
        to_worker=request.to_worker,
        assignment_id=assignment.id,
        context=request.context if request.context is not None else assignment.context,
        reasoning=request.reasoning,
    )
