"""Worker registry.

Holds each worker's capabilities in registration order. Round-robin routing
depends on that order, so every read returns workers in the order they were
registered.
"""

import logging
from typing import Any, Iterator, Mapping

from ..exceptions import DuplicateWorkerError, UnknownWorkerError
from ..logging import get_logger
from .schemas import WorkerCapabilities


class WorkerRegistry:
    """Ordered registry of worker capabilities.

    Capabilities are immutable, and reads hand out copies of the mapping, so
    callers can never change the registry except through register, update
    and remove.
    """

    def __init__(self, logger: logging.Logger | None = None):
        self._workers: dict[str, WorkerCapabilities] = {}
        self.logger = logger or get_logger(__name__)

    @classmethod
    def from_mapping(
        cls,
        workers: Mapping[str, WorkerCapabilities | Mapping[str, Any]],
        logger: logging.Logger | None = None,
    ) -> "WorkerRegistry":
        """Build a registry from a mapping of ids to capabilities or plain dicts."""
        registry = cls(logger=logger)
        for worker_id, capabilities in workers.items():
            registry.register(worker_id, capabilities)
        return registry

    def register(
        self,
        worker_id: str,
        capabilities: WorkerCapabilities | Mapping[str, Any],
    ) -> WorkerCapabilities:
        """Add a worker.

        Raises:
            DuplicateWorkerError: If the id is already registered.
        """
        if worker_id in self._workers:
            raise DuplicateWorkerError(worker_id)
        caps = self._coerce(capabilities)
        self._workers[worker_id] = caps
        self.logger.debug(
            "registered worker '%s' (skills: %s, tools: %s)",
            worker_id,
            caps.skills,
            caps.tools,
        )
        return caps

    def update(
        self,
        worker_id: str,
        capabilities: WorkerCapabilities | Mapping[str, Any],
    ) -> WorkerCapabilities:
        """Replace a worker's capabilities, keeping its position.

        Raises:
            UnknownWorkerError: If the id is not registered.
        """
        if worker_id not in self._workers:
            raise UnknownWorkerError(worker_id, self.ids())
        caps = self._coerce(capabilities)
        self._workers[worker_id] = caps
        self.logger.debug(
            "updated worker '%s' (available: %s, workload: %d)",
            worker_id,
            caps.available,
            caps.current_workload,
        )
        return caps

    def remove(self, worker_id: str) -> bool:
        """Remove a worker.

        Returns:
            True if the worker was removed, False if it was not registered.
        """
        if worker_id in self._workers:
            del self._workers[worker_id]
            return True
        return False

    def get(self, worker_id: str) -> WorkerCapabilities | None:
        return self._workers.get(worker_id)

    def ids(self) -> list[str]:
        """Worker ids in registration order."""
        return list(self._workers)

    def available(self) -> list[str]:
        """Ids of available workers in registration order."""
        return [wid for wid, caps in self._workers.items() if caps.available]

    def snapshot(self) -> dict[str, WorkerCapabilities]:
        """Return a new ordered mapping of ids to capabilities."""
        return dict(self._workers)

    def _coerce(self, capabilities: WorkerCapabilities | Mapping[str, Any]) -> WorkerCapabilities:
        if isinstance(capabilities, WorkerCapabilities):
            return capabilities
        return WorkerCapabilities.model_validate(dict(capabilities))

    def __len__(self) -> int:
        return len(self._workers)

    def __contains__(self, worker_id: object) -> bool:
        return worker_id in self._workers

    def __iter__(self) -> Iterator[str]:
        return iter(list(self._workers))

    def __repr__(self) -> str:
        return f"WorkerRegistry(workers={self.ids()})"
