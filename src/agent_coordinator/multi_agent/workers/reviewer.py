"""Reviewer worker factory.

Creates a worker specialized for code review and quality analysis.
"""

from ...clients.base import BaseLLMClient
from ...tools.base import BaseTool
from ..prompts import REVIEWER_PROMPT
from ..schemas import WorkerCapabilities
from ..worker import ExecuteFn, WorkerConfig

REVIEWER_SKILLS = ["review", "quality", "security", "audit"]
REVIEWER_TOOLS = ["linter", "read_file"]


def create_reviewer_worker(
    client: BaseLLMClient | None = None,
    execute_fn: ExecuteFn | None = None,
    tools: list[BaseTool] | None = None,
    worker_id: str = "reviewer",
    available: bool = True,
) -> WorkerConfig:
    """Create a reviewer worker.

    Args:
        client: Reasoning service for default execution.
        execute_fn: Custom execution function, takes precedence over client.
        tools: Tools the worker can call.
        worker_id: Worker id.
        available: Whether routing may select the worker.

    Returns:
        Reviewer WorkerConfig.
    """
    tools = tools or []
    return WorkerConfig(
        id=worker_id,
        capabilities=WorkerCapabilities(
            skills=REVIEWER_SKILLS,
            tools=REVIEWER_TOOLS + [tool.name for tool in tools],
            available=available,
            description="Reviewer for correctness, security, and best practices.",
        ),
        client=client,
        execute_fn=execute_fn,
        tools=tools,
        system_prompt=REVIEWER_PROMPT,
    )
