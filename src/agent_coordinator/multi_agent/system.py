"""In-process driver for a multi-agent coordination session.

The supervisor, worker and aggregator nodes are plain callables that return
state deltas. MultiAgentSystem plays the scheduler: it picks the next node(s)
from the status, runs them, and merges their deltas. Parallel fan-out runs
the target workers concurrently in a thread pool.

Example usage:
    ```python
    from agent_coordinator.multi_agent import (
        AggregatorConfig,
        SupervisorConfig,
        WorkerConfig,
        WorkerCapabilities,
        create_multi_agent_system,
    )

    system = create_multi_agent_system(
        supervisor=SupervisorConfig(strategy="skill-based"),
        workers=[
            WorkerConfig(
                id="coder",
                capabilities=WorkerCapabilities(skills=["coding"], tools=["compiler"]),
                execute_fn=lambda state, assignment, context: f"compiled: {assignment.task}",
            ),
        ],
    )
    final = system.invoke("Use the compiler tool on main.c")
    print(final.response)
    ```
"""

import logging
from concurrent.futures import ThreadPoolExecutor
from typing import Any, Iterator

from ..config import Settings, get_settings
from ..exceptions import ConfigurationError, CoordinationError
from ..logging import get_logger
from .aggregator import AggregatorConfig, AggregatorNode
from .registry import WorkerRegistry
from .schemas import CoordinationStatus
from .state import (
    AGGREGATOR,
    SUPERVISOR,
    CoordinationState,
    StateDelta,
    merge_state,
    pending_assignments,
)
from .supervisor import SupervisorConfig, SupervisorNode
from .worker import WorkerConfig, WorkerNode

DEFAULT_RECURSION_LIMIT = 100
RESERVED_NODE_NAMES = frozenset({SUPERVISOR, AGGREGATOR})


def register_workers(
    configs: list[WorkerConfig],
    logger: logging.Logger | None = None,
) -> WorkerRegistry:
    """Build a registry from worker configs, in the order given.

    Raises:
        DuplicateWorkerError: If two workers share an id.
        ConfigurationError: If a worker uses a reserved node name.
    """
    registry = WorkerRegistry(logger=logger)
    for config in configs:
        if config.id in RESERVED_NODE_NAMES:
            raise ConfigurationError(f"'{config.id}' is reserved and cannot be a worker id")
        registry.register(config.id, config.capabilities)
    return registry


class MultiAgentSystem:
    """Runs supervisor, worker and aggregator nodes until the session ends."""

    def __init__(
        self,
        supervisor: SupervisorNode,
        workers: dict[str, WorkerNode],
        aggregator: AggregatorNode,
        registry: WorkerRegistry,
        max_iterations: int = 10,
        logger: logging.Logger | None = None,
    ):
        """Initialize the system.

        Args:
            supervisor: The supervisor node.
            workers: Worker nodes by worker id.
            aggregator: The aggregator node.
            registry: Capabilities of the workers, in registration order.
            max_iterations: Routing iterations before aggregation is forced.
            logger: Logger for the driver.
        """
        self.supervisor = supervisor
        self.workers = workers
        self.aggregator = aggregator
        self.registry = registry
        self.max_iterations = max_iterations
        self.logger = logger or get_logger(__name__)

    def initial_state(self, task: str) -> CoordinationState:
        """Create the starting state for a task from the current registry."""
        return CoordinationState.start(task, self.registry.snapshot(), self.max_iterations)

    def next_nodes(self, state: CoordinationState) -> list[str]:
        """Select the node(s) to run next.

        Returns:
            An empty list once the session is terminal, the pending worker ids
            while executing (several means parallel fan-out), and otherwise
            the supervisor or the aggregator.
        """
        if state.status.is_terminal:
            return []
        if state.status == CoordinationStatus.AGGREGATING:
            return [AGGREGATOR]
        if state.status == CoordinationStatus.EXECUTING:
            pending = [
                a.worker_id for a in pending_assignments(state) if a.worker_id in self.workers
            ]
            if pending:
                return list(dict.fromkeys(pending))
        return [SUPERVISOR]

    def run_node(self, name: str, state: CoordinationState, context: Any = None) -> StateDelta:
        """Run a single node by name."""
        if name == SUPERVISOR:
            return self.supervisor(state, context)
        if name == AGGREGATOR:
            return self.aggregator(state, context)
        if name in self.workers:
            return self.workers[name](state, context)
        raise ConfigurationError(f"Unknown node: {name}")

    def step(
        self,
        state: CoordinationState,
        context: Any = None,
    ) -> tuple[CoordinationState, list[tuple[str, StateDelta]]]:
        """Run the next node(s) and merge their deltas.

        Every node in a step sees the same input state. Deltas are merged in
        the order the nodes were selected.

        Returns:
            The merged state and the (node name, delta) pairs of the step.
        """
        names = self.next_nodes(state)
        if not names:
            return state, []

        if len(names) == 1:
            deltas = [self.run_node(names[0], state, context)]
        else:
            self.logger.debug("running %d workers in parallel: %s", len(names), names)
            with ThreadPoolExecutor(max_workers=len(names)) as executor:
                futures = [executor.submit(self.run_node, name, state, context) for name in names]
                deltas = [future.result() for future in futures]

        for delta in deltas:
            state = merge_state(state, delta)
        return state, list(zip(names, deltas))

    def stream(
        self,
        task: str,
        context: Any = None,
        recursion_limit: int = DEFAULT_RECURSION_LIMIT,
    ) -> Iterator[tuple[str, StateDelta]]:
        """Run a task and yield each (node name, delta) pair as it is produced.

        Raises:
            CoordinationError: If the session does not end within
                ``recursion_limit`` steps.
        """
        for name, delta, _ in self._run(task, context, recursion_limit):
            yield name, delta

    def invoke(
        self,
        task: str,
        context: Any = None,
        recursion_limit: int = DEFAULT_RECURSION_LIMIT,
    ) -> CoordinationState:
        """Run a task to completion and return the final state.

        Args:
            task: The user's task.
            context: Opaque context forwarded to every node.
            recursion_limit: Maximum number of steps.

        Returns:
            The terminal CoordinationState. Check ``status`` and ``error``
            for failures.

        Raises:
            CoordinationError: If the session does not end within
                ``recursion_limit`` steps.
        """
        state = self.initial_state(task)
        for _, _, state in self._run(task, context, recursion_limit, state):
            pass
        return state

    def _run(
        self,
        task: str,
        context: Any,
        recursion_limit: int,
        state: CoordinationState | None = None,
    ) -> Iterator[tuple[str, StateDelta, CoordinationState]]:
        if state is None:
            state = self.initial_state(task)
        self.logger.info("starting coordination with %d worker(s)", len(self.registry))

        steps = 0
        while not state.status.is_terminal:
            if steps >= recursion_limit:
                raise CoordinationError(
                    f"Recursion limit of {recursion_limit} reached without a terminal status"
                )
            state, produced = self.step(state, context)
            steps += 1
            for name, delta in produced:
                yield name, delta, state

        self.logger.info(
            "coordination finished with status %s after %d step(s)", state.status.value, steps
        )

    def __repr__(self) -> str:
        return (
            f"MultiAgentSystem(strategy='{self.supervisor.strategy.name.value}', "
            f"workers={list(self.workers)})"
        )


def create_multi_agent_system(
    supervisor: SupervisorConfig,
    workers: list[WorkerConfig],
    aggregator: AggregatorConfig | None = None,
    max_iterations: int | None = None,
    settings: Settings | None = None,
) -> MultiAgentSystem:
    """Factory function to wire up a complete multi-agent system.

    Args:
        supervisor: Supervisor configuration.
        workers: Worker configurations, in registration order.
        aggregator: Aggregator configuration. Defaults to the labeled join.
        max_iterations: Routing iterations before aggregation is forced.
            Defaults to the ``max_iterations`` setting.
        settings: Settings to read defaults from.

    Returns:
        Configured MultiAgentSystem.

    Raises:
        ConfigurationError: If the configuration is invalid.
    """
    settings = settings or get_settings()
    if not workers:
        raise ConfigurationError("A multi-agent system needs at least one worker")

    registry = register_workers(workers, logger=supervisor.logger)
    nodes = {config.id: WorkerNode(config) for config in workers}

    return MultiAgentSystem(
        supervisor=SupervisorNode(supervisor),
        workers=nodes,
        aggregator=AggregatorNode(aggregator),
        registry=registry,
        max_iterations=max_iterations or settings.max_iterations,
        logger=supervisor.logger,
    )
