"""Custom exception hierarchy for the coordinator.

This module defines all custom exceptions used throughout the package,
grouped into control flow, coordination errors and client errors.
"""

from typing import Any


class CoordinationError(Exception):
    """Base exception for all coordinator errors."""


# =============================================================================
# Control Flow - Not errors, but control flow mechanisms
# =============================================================================

class HandoffRequested(CoordinationError):
    """Raised by a worker's execution function to hand its task to another worker.

    This is a control flow mechanism, not an error. The worker executor
    catches it, records a handoff, and returns control to the supervisor,
    which assigns the task to the target worker.

    Attributes:
        to_worker: Id of the worker that should take over the task
        reasoning: Why the handoff is requested
        context: Context to carry over to the next worker
    """

    def __init__(
        self,
        to_worker: str,
        reasoning: str = "",
        context: Any = None,
    ):
        self.to_worker = to_worker
        self.reasoning = reasoning
        self.context = context
        super().__init__(f"Handoff requested to {to_worker}: {reasoning}")


# =============================================================================
# Coordination Errors - Issues with routing, execution, and aggregation
# =============================================================================

class ConfigurationError(CoordinationError):
    """A strategy or node is missing something it needs to run."""


class DuplicateWorkerError(ConfigurationError):
    """A worker id was registered twice."""

    def __init__(self, worker_id: str):
        self.worker_id = worker_id
        super().__init__(f"Worker already registered: {worker_id}")


class UnknownWorkerError(ConfigurationError):
    """A worker id is not present in the registry."""

    def __init__(self, worker_id: str, available: list[str] | None = None):
        self.worker_id = worker_id
        self.available = available or []
        message = f"Unknown worker: {worker_id}"
        if self.available:
            message += f". Available workers: {', '.join(self.available)}"
        super().__init__(message)


class RoutingError(CoordinationError):
    """No routing decision could be produced for the current task."""


class ExecutionError(CoordinationError):
    """A worker could not produce a result for its assignment.

    Never escapes the worker executor: it is captured as a failed TaskResult.
    """

    def __init__(self, worker_id: str, message: str):
        self.worker_id = worker_id
        super().__init__(message)


class AggregationError(CoordinationError):
    """Results could not be combined into a final response."""


# =============================================================================
# Client Errors - Reasoning-service calls
# =============================================================================

class ClientError(CoordinationError):
    """A reasoning-service call failed."""


class AuthenticationError(ClientError):
    """The provider rejected or never received an API key."""


class RateLimitError(ClientError):
    """The provider throttled the request.

    ``retry_after`` holds the provider's suggested wait in seconds, when it
    sent one; ``with_retry`` honors it.
    """

    def __init__(self, message: str = "Rate limit exceeded", retry_after: float | None = None):
        self.retry_after = retry_after
        if retry_after:
            message = f"{message} (retry after {retry_after}s)"
        super().__init__(message)


class ProviderUnavailableError(ClientError):
    """Connection failure or server-side error; worth retrying."""


class InvalidResponseError(ClientError):
    """The provider replied with something the client cannot parse."""
