"""Data model for the multi-agent coordinator.

Every record that flows through the coordination state is an immutable
pydantic model. Records are only ever appended to the state, never edited.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Annotated, Any, Literal, Union
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator


def utcnow() -> datetime:
    """Return the current time in UTC."""
    return datetime.now(timezone.utc)


def new_id() -> str:
    """Return a fresh unique identifier."""
    return uuid4().hex


class RoutingStrategy(str, Enum):
    """Name of a routing algorithm."""
    LLM_BASED = "llm-based"
    RULE_BASED = "rule-based"
    ROUND_ROBIN = "round-robin"
    SKILL_BASED = "skill-based"
    LOAD_BALANCED = "load-balanced"


class MessageType(str, Enum):
    """Kind of entry in the coordination message log."""
    USER_INPUT = "user_input"
    TASK_ASSIGNMENT = "task_assignment"
    TASK_RESULT = "task_result"
    HANDOFF = "handoff"
    ERROR = "error"
    COMPLETION = "completion"


class CoordinationStatus(str, Enum):
    """Lifecycle status of a coordination session."""
    INITIALIZING = "initializing"
    ROUTING = "routing"
    EXECUTING = "executing"
    AGGREGATING = "aggregating"
    COMPLETED = "completed"
    FAILED = "failed"

    @property
    def is_terminal(self) -> bool:
        """Check if the session has finished."""
        return self in (CoordinationStatus.COMPLETED, CoordinationStatus.FAILED)


class WorkerCapabilities(BaseModel):
    """What a worker can do and whether it can take work right now.

    Attributes:
        skills: Skill keywords, matched against task text by skill-based routing
        tools: Names of the tools the worker can use
        available: Whether routing strategies may select this worker
        current_workload: Advisory load figure, maintained by the embedding application
        description: Optional human-readable summary
    """

    model_config = ConfigDict(frozen=True)

    skills: list[str] = Field(default_factory=list)
    tools: list[str] = Field(default_factory=list)
    available: bool = True
    current_workload: int = Field(default=0, ge=0)
    description: str | None = None

    @field_validator("skills", "tools")
    @classmethod
    def _dedupe(cls, values: list[str]) -> list[str]:
        # set semantics with a deterministic order; a blank entry would
        # match every task in skill-based routing
        return list(dict.fromkeys(value for value in values if value.strip()))


class SingleTarget(BaseModel):
    """Route the task to exactly one worker."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["single"] = "single"
    worker_id: str = Field(min_length=1)


class ParallelTargets(BaseModel):
    """Fan the task out to several workers at once."""

    model_config = ConfigDict(frozen=True)

    kind: Literal["parallel"] = "parallel"
    worker_ids: list[str] = Field(min_length=1)

    @field_validator("worker_ids")
    @classmethod
    def _unique_ids(cls, values: list[str]) -> list[str]:
        if len(set(values)) != len(values):
            raise ValueError("parallel targets must be unique")
        if any(not value for value in values):
            raise ValueError("parallel targets must be non-empty worker ids")
        return values


RoutingTarget = Annotated[Union[SingleTarget, ParallelTargets], Field(discriminator="kind")]


class RoutingDecision(BaseModel):
    """The outcome of one routing call.

    The target is a tagged variant, so a decision is either single or
    parallel and can never carry both shapes.

    Example:
        ```python
        decision = RoutingDecision.single(
            "coder",
            reasoning="task mentions the compiler",
            confidence=0.6,
            strategy=RoutingStrategy.SKILL_BASED,
        )
        decision.target_ids  # ["coder"]
        ```
    """

    model_config = ConfigDict(frozen=True)

    target: RoutingTarget
    reasoning: str = ""
    confidence: float = Field(ge=0.0, le=1.0)
    strategy: RoutingStrategy
    timestamp: datetime = Field(default_factory=utcnow)

    @classmethod
    def single(
        cls,
        worker_id: str,
        reasoning: str = "",
        confidence: float = 1.0,
        strategy: RoutingStrategy = RoutingStrategy.RULE_BASED,
    ) -> "RoutingDecision":
        """Build a decision that targets one worker."""
        return cls(
            target=SingleTarget(worker_id=worker_id),
            reasoning=reasoning,
            confidence=confidence,
            strategy=strategy,
        )

    @classmethod
    def parallel(
        cls,
        worker_ids: list[str],
        reasoning: str = "",
        confidence: float = 1.0,
        strategy: RoutingStrategy = RoutingStrategy.RULE_BASED,
    ) -> "RoutingDecision":
        """Build a decision that fans out to several workers."""
        return cls(
            target=ParallelTargets(worker_ids=list(worker_ids)),
            reasoning=reasoning,
            confidence=confidence,
            strategy=strategy,
        )

    @property
    def is_parallel(self) -> bool:
        return isinstance(self.target, ParallelTargets)

    @property
    def target_ids(self) -> list[str]:
        """Worker ids this decision routes to, in decision order."""
        if isinstance(self.target, ParallelTargets):
            return list(self.target.worker_ids)
        return [self.target.worker_id]


class TaskAssignment(BaseModel):
    """A unit of work handed to exactly one worker.

    Attributes:
        id: Unique assignment id, matched by exactly one TaskResult
        worker_id: The worker the task is addressed to
        task: Task text
        priority: 1 (lowest) to 10 (highest), metadata only
        assigned_at: Creation time
        deadline: Optional deadline, metadata only
        context: Optional opaque context for the worker
        handoff_id: Id of the HandoffRequest this assignment was created from
    """

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    worker_id: str
    task: str
    priority: int = Field(default=5, ge=1, le=10)
    assigned_at: datetime = Field(default_factory=utcnow)
    deadline: datetime | None = None
    context: Any = None
    handoff_id: str | None = None


class TaskResult(BaseModel):
    """The outcome of one assignment, success or captured failure."""

    model_config = ConfigDict(frozen=True)

    assignment_id: str
    worker_id: str
    success: bool
    result: Any = None
    error: str | None = None
    completed_at: datetime = Field(default_factory=utcnow)
    metadata: dict[str, Any] = Field(default_factory=dict)

    @model_validator(mode="after")
    def _failure_has_error(self) -> "TaskResult":
        if not self.success and not self.error:
            raise ValueError("a failed task result must carry an error message")
        return self


class AgentMessage(BaseModel):
    """An entry in the append-only communication log."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    id: str = Field(default_factory=new_id)
    type: MessageType
    sender: str = Field(alias="from")
    recipients: list[str] = Field(default_factory=list, alias="to")
    content: str = ""
    metadata: dict[str, Any] = Field(default_factory=dict)
    timestamp: datetime = Field(default_factory=utcnow)


class HandoffRequest(BaseModel):
    """A worker's request to move its in-flight assignment to another worker."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=new_id)
    from_worker: str
    to_worker: str
    assignment_id: str
    context: Any = None
    reasoning: str = ""
    timestamp: datetime = Field(default_factory=utcnow)
