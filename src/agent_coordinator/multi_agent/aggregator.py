"""Aggregator node for multi-agent coordination.

Once the supervisor ends the round, the aggregator combines every task
result into the final response, with a custom function, a reasoning service,
or a plain labeled join.
"""

import logging
from typing import Any, Callable

from pydantic import BaseModel, ConfigDict

from ..clients.base import BaseLLMClient
from ..core.prompt_builder import PromptBuilder
from ..exceptions import AggregationError
from ..logging import get_logger
from .prompts import AGGREGATOR_PROMPT, format_aggregation_prompt, render_payload
from .schemas import AgentMessage, CoordinationStatus, MessageType, TaskResult
from .state import AGGREGATOR, USER, CoordinationState, StateDelta

NO_TASKS_RESPONSE = "No tasks were completed."


class AggregatorConfig(BaseModel):
    """Configuration for the aggregator node.

    Attributes:
        aggregate_fn: ``(state) -> response``, takes precedence over everything else
        client: Reasoning service used to synthesize the results
        system_prompt: Override for the aggregation system prompt
        logger: Logger for the aggregator
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    aggregate_fn: Callable[[CoordinationState], Any] | None = None
    client: BaseLLMClient | None = None
    system_prompt: str | None = None
    logger: logging.Logger | None = None


def format_results(results: list[TaskResult]) -> str:
    """Join results in completion order, each labeled with its worker id."""
    entries = []
    for task in results:
        if task.success:
            entries.append(f"[{task.worker_id}] {render_payload(task.result)}")
        else:
            entries.append(f"[{task.worker_id}] Error: {task.error}")
    return "\n\n".join(entries)


class AggregatorNode:
    """Callable aggregation step: ``(state, context=None) -> StateDelta``."""

    def __init__(self, config: AggregatorConfig | None = None):
        self.config = config or AggregatorConfig()
        self.logger = self.config.logger or get_logger(__name__)

    def __call__(self, state: CoordinationState, context: Any = None) -> StateDelta:
        self.logger.info("aggregating %d task result(s)", len(state.completed_tasks))
        try:
            response = self._aggregate(state)
        except Exception as e:
            self.logger.error("aggregation failed: %s", e)
            return StateDelta(
                status=CoordinationStatus.FAILED,
                error=str(e),
                current_agent=None,
                messages=[
                    AgentMessage(
                        type=MessageType.ERROR,
                        sender=AGGREGATOR,
                        recipients=[USER],
                        content=str(e),
                        metadata={"error_type": type(e).__name__},
                    )
                ],
            )

        return StateDelta(
            response=response,
            status=CoordinationStatus.COMPLETED,
            current_agent=None,
            messages=[
                AgentMessage(
                    type=MessageType.COMPLETION,
                    sender=AGGREGATOR,
                    recipients=[USER],
                    content=render_payload(response),
                    metadata={"task_count": len(state.completed_tasks)},
                )
            ],
        )

    def _aggregate(self, state: CoordinationState) -> Any:
        if self.config.aggregate_fn is not None:
            self.logger.debug("using custom aggregation function")
            return self.config.aggregate_fn(state)

        if not state.completed_tasks:
            self.logger.warning("no completed tasks to aggregate")
            return NO_TASKS_RESPONSE

        if self.config.client is not None:
            return self._synthesize(state)

        return format_results(state.completed_tasks)

    def _synthesize(self, state: CoordinationState) -> str:
        builder = PromptBuilder(self.config.system_prompt or AGGREGATOR_PROMPT)
        transcript = builder.start(format_aggregation_prompt(state.input, state.completed_tasks))

        self.logger.debug("invoking reasoning service for aggregation")
        response = self.config.client.generate(transcript)
        content = response.message.content
        if not content:
            raise AggregationError("Reasoning service returned an empty aggregation")
        return content

    def __repr__(self) -> str:
        return f"AggregatorNode(custom={self.config.aggregate_fn is not None})"


def create_aggregator_node(**kwargs: Any) -> AggregatorNode:
    """Factory function to create an aggregator node from AggregatorConfig fields."""
    return AggregatorNode(AggregatorConfig(**kwargs))
