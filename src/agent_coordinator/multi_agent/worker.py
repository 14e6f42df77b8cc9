"""Worker executor for multi-agent coordination.

A worker node picks up the most recent unsettled assignment addressed to its
worker id, runs the worker's execution function on it, and reports the
outcome as a TaskResult. Execution failures never escape the node: they are
recorded as failed results so one faulty worker cannot abort the round.

The execution function can be supplied three ways, in order of precedence:

- ``execute_fn``: any callable ``(state, assignment, context) -> result``
- ``agent``: a sub-agent exposing ``invoke(payload, context)``
- ``client``: a reasoning service, run in a bounded tool-calling loop
"""

import logging
from dataclasses import dataclass, field
from typing import Any, Callable, Mapping

from pydantic import BaseModel, ConfigDict, Field, model_validator

from ..clients.base import BaseLLMClient
from ..core.prompt_builder import PromptBuilder
from ..core.tool_executor import ToolExecutor
from ..exceptions import ConfigurationError, ExecutionError, HandoffRequested
from ..logging import get_logger
from ..tools.base import BaseTool
from .handoff import build_handoff
from .prompts import format_task_message, format_worker_prompt, render_payload
from .schemas import (
    AgentMessage,
    CoordinationStatus,
    MessageType,
    TaskAssignment,
    TaskResult,
    WorkerCapabilities,
)
from .state import SUPERVISOR, CoordinationState, StateDelta, pending_assignments


@dataclass
class WorkerOutput:
    """Result payload plus metadata, returned by an execution function."""
    result: Any
    metadata: dict[str, Any] = field(default_factory=dict)


ExecuteFn = Callable[[CoordinationState, TaskAssignment, Any], Any]


class WorkerConfig(BaseModel):
    """Configuration for one worker.

    Attributes:
        id: Worker id, also the node name
        capabilities: Skills, tools and availability advertised to routing
        execute_fn: ``(state, assignment, context) -> result | WorkerOutput``
        agent: Sub-agent exposing ``invoke(payload, context)``
        client: Reasoning service for default execution
        tools: Tools available to the reasoning service
        system_prompt: Override for the default worker prompt
        max_tool_rounds: Tool rounds allowed in default execution
        logger: Logger for this worker
    """

    model_config = ConfigDict(arbitrary_types_allowed=True)

    id: str = Field(min_length=1)
    capabilities: WorkerCapabilities = Field(default_factory=WorkerCapabilities)
    execute_fn: Callable[..., Any] | None = None
    agent: Any = None
    client: BaseLLMClient | None = None
    tools: list[BaseTool] = Field(default_factory=list)
    system_prompt: str | None = None
    max_tool_rounds: int = Field(default=5, ge=1)
    logger: logging.Logger | None = None

    @model_validator(mode="after")
    def _has_executor(self) -> "WorkerConfig":
        if self.execute_fn is None and self.agent is None and self.client is None:
            raise ConfigurationError(
                f"Worker '{self.id}' needs an execute_fn, an agent, or a client"
            )
        if self.agent is not None and not callable(getattr(self.agent, "invoke", None)):
            raise ConfigurationError(f"Worker '{self.id}' agent must expose invoke()")
        return self


def wrap_sub_agent(worker_id: str, agent: Any) -> ExecuteFn:
    """Adapt a sub-agent into an execution function.

    The sub-agent receives ``{"messages": [{"role": "user", "content": task}],
    "context": assignment.context}`` plus the scheduler's context, forwarded
    unchanged. The content of the last message it returns is the result.

    Args:
        worker_id: Id of the worker the sub-agent runs for.
        agent: Any object with ``invoke(payload, context)``.

    Returns:
        An execution function.
    """
    def execute(state: CoordinationState, assignment: TaskAssignment, context: Any = None) -> WorkerOutput:
        payload = {
            "messages": [{"role": "user", "content": assignment.task}],
            "context": assignment.context,
        }
        output = agent.invoke(payload, context)
        messages = output.get("messages") if isinstance(output, Mapping) else None
        if not messages:
            raise ExecutionError(worker_id, f"Sub-agent for '{worker_id}' returned no messages")

        last = messages[-1]
        content = last.get("content") if isinstance(last, Mapping) else getattr(last, "content", None)
        if content is None:
            raise ExecutionError(worker_id, f"Sub-agent for '{worker_id}' returned an empty message")

        return WorkerOutput(
            result=render_payload(content),
            metadata={"message_count": len(messages)},
        )

    return execute


def create_llm_execute_fn(
    worker_id: str,
    client: BaseLLMClient,
    capabilities: WorkerCapabilities,
    tools: list[BaseTool] | None = None,
    system_prompt: str | None = None,
    max_tool_rounds: int = 5,
    logger: logging.Logger | None = None,
) -> ExecuteFn:
    """Build an execution function backed by a reasoning service.

    The service answers the task, optionally calling tools first. Each tool
    round appends the tool results to the transcript and calls the service
    again. If it still requests tools after ``max_tool_rounds`` rounds the
    execution fails with ExecutionError.
    """
    log = logger or get_logger(__name__)
    tools = list(tools or [])
    builder = PromptBuilder(system_prompt or format_worker_prompt(worker_id, capabilities))
    executor = ToolExecutor(tools, logger=log)

    def execute(state: CoordinationState, assignment: TaskAssignment, context: Any = None) -> WorkerOutput:
        transcript = builder.start(format_task_message(assignment.task, assignment.context))

        for tool_round in range(max_tool_rounds + 1):
            response = client.generate(transcript, tools or None)
            if not response.has_tool_calls:
                metadata: dict[str, Any] = {"tool_rounds": tool_round}
                if response.usage:
                    metadata["total_tokens"] = response.usage.total_tokens
                return WorkerOutput(result=response.message.content or "", metadata=metadata)

            if tool_round == max_tool_rounds:
                break

            transcript.append(builder.build_assistant_message(
                response.message.content,
                response.message.tool_calls,
            ))
            transcript.extend(executor.execute_tool_calls(response.message.tool_calls or []))

        raise ExecutionError(
            worker_id,
            f"Max tool rounds ({max_tool_rounds}) exceeded for worker '{worker_id}'",
        )

    return execute


class WorkerNode:
    """Callable worker step: ``(state, context=None) -> StateDelta``."""

    def __init__(self, config: WorkerConfig):
        self.config = config
        self.id = config.id
        self.logger = config.logger or get_logger(__name__)
        self._execute = self._resolve_execute_fn(config)

    def _resolve_execute_fn(self, config: WorkerConfig) -> ExecuteFn:
        if config.execute_fn is not None:
            return config.execute_fn
        if config.agent is not None:
            return wrap_sub_agent(config.id, config.agent)
        return create_llm_execute_fn(
            config.id,
            config.client,
            config.capabilities,
            tools=config.tools,
            system_prompt=config.system_prompt,
            max_tool_rounds=config.max_tool_rounds,
            logger=self.logger,
        )

    def find_assignment(self, state: CoordinationState) -> TaskAssignment | None:
        """Return the most recent unsettled assignment for this worker."""
        pending = pending_assignments(state, self.id)
        return pending[-1] if pending else None

    def __call__(self, state: CoordinationState, context: Any = None) -> StateDelta:
        assignment = self.find_assignment(state)
        if assignment is None:
            self.logger.warning("worker '%s' invoked with no pending assignment", self.id)
            return StateDelta(status=CoordinationStatus.ROUTING, current_agent=SUPERVISOR)

        self.logger.info("worker '%s' executing assignment %s", self.id, assignment.id)
        try:
            output = self._execute(state, assignment, context)
            # a malformed output is a failure of this assignment too
            delta = self._success(assignment, output)
        except HandoffRequested as request:
            return self._handoff(assignment, request)
        except Exception as e:
            return self._failure(assignment, e)

        self.logger.info("worker '%s' completed assignment %s", self.id, assignment.id)
        return delta

    def _success(self, assignment: TaskAssignment, output: Any) -> StateDelta:
        if not isinstance(output, WorkerOutput):
            output = WorkerOutput(result=output)

        result = TaskResult(
            assignment_id=assignment.id,
            worker_id=self.id,
            success=True,
            result=output.result,
            metadata=output.metadata,
        )
        return StateDelta(
            completed_tasks=[result],
            messages=[
                AgentMessage(
                    type=MessageType.TASK_RESULT,
                    sender=self.id,
                    recipients=[SUPERVISOR],
                    content=render_payload(output.result),
                    metadata={"assignment_id": assignment.id, "success": True},
                )
            ],
        )

    def _handoff(self, assignment: TaskAssignment, request: HandoffRequested) -> StateDelta:
        handoff = build_handoff(self.id, assignment, request)
        self.logger.info(
            "worker '%s' handed assignment %s to '%s'", self.id, assignment.id, handoff.to_worker
        )
        return StateDelta(
            handoffs=[handoff],
            messages=[
                AgentMessage(
                    type=MessageType.HANDOFF,
                    sender=self.id,
                    recipients=[SUPERVISOR],
                    content=handoff.reasoning or f"Handoff to {handoff.to_worker}",
                    metadata={
                        "assignment_id": assignment.id,
                        "handoff_id": handoff.id,
                        "to_worker": handoff.to_worker,
                    },
                )
            ],
            status=CoordinationStatus.ROUTING,
            current_agent=SUPERVISOR,
        )

    def _failure(self, assignment: TaskAssignment, error: Exception) -> StateDelta:
        message = str(error) or type(error).__name__
        self.logger.error("worker '%s' failed on assignment %s: %s", self.id, assignment.id, message)
        result = TaskResult(
            assignment_id=assignment.id,
            worker_id=self.id,
            success=False,
            error=message,
            metadata={"error_type": type(error).__name__},
        )
        return StateDelta(
            completed_tasks=[result],
            messages=[
                AgentMessage(
                    type=MessageType.ERROR,
                    sender=self.id,
                    recipients=[SUPERVISOR],
                    content=message,
                    metadata={"assignment_id": assignment.id, "success": False},
                )
            ],
            status=CoordinationStatus.ROUTING,
            current_agent=SUPERVISOR,
        )

    def __repr__(self) -> str:
        return f"WorkerNode(id='{self.id}')"


def create_worker_node(
    worker_id: str,
    capabilities: WorkerCapabilities | None = None,
    **kwargs: Any,
) -> WorkerNode:
    """Factory function to create a worker node.

    Args:
        worker_id: Worker id.
        capabilities: Capabilities advertised to routing.
        **kwargs: Any other WorkerConfig field.

    Returns:
        Configured WorkerNode.
    """
    return WorkerNode(WorkerConfig(
        id=worker_id,
        capabilities=capabilities or WorkerCapabilities(),
        **kwargs,
    ))
