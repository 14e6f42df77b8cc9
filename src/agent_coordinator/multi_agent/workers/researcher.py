"""Researcher worker factory.

Creates a worker specialized for finding and synthesizing information.
"""

from ...clients.base import BaseLLMClient
from ...tools.base import BaseTool
from ..prompts import RESEARCHER_PROMPT
from ..schemas import WorkerCapabilities
from ..worker import ExecuteFn, WorkerConfig

RESEARCHER_SKILLS = ["research", "analysis", "investigate", "summarize", "sources"]
RESEARCHER_TOOLS = ["web_search", "read_file"]


def create_researcher_worker(
    client: BaseLLMClient | None = None,
    execute_fn: ExecuteFn | None = None,
    tools: list[BaseTool] | None = None,
    worker_id: str = "researcher",
    available: bool = True,
) -> WorkerConfig:
    """Create a researcher worker.

    Skill-based routing sends it tasks that mention research or analysis.

    Args:
        client: Reasoning service for default execution.
        execute_fn: Custom execution function, takes precedence over client.
        tools: Tools the worker can call. Their names are advertised
            alongside the default research tools.
        worker_id: Worker id.
        available: Whether routing may select the worker.

    Returns:
        Researcher WorkerConfig.
    """
    tools = tools or []
    return WorkerConfig(
        id=worker_id,
        capabilities=WorkerCapabilities(
            skills=RESEARCHER_SKILLS,
            tools=RESEARCHER_TOOLS + [tool.name for tool in tools],
            available=available,
            description="Research specialist for finding and synthesizing information.",
        ),
        client=client,
        execute_fn=execute_fn,
        tools=tools,
        system_prompt=RESEARCHER_PROMPT,
    )
