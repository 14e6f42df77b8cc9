"""Writer worker factory."""

from ...clients.base import BaseLLMClient
from ...tools.base import BaseTool
from ..prompts import WRITER_PROMPT
from ..schemas import WorkerCapabilities
from ..worker import ExecuteFn, WorkerConfig

WRITER_SKILLS = ["writing", "documentation", "summary", "explain"]
WRITER_TOOLS = ["spellcheck"]


def create_writer_worker(
    client: BaseLLMClient | None = None,
    execute_fn: ExecuteFn | None = None,
    tools: list[BaseTool] | None = None,
    worker_id: str = "writer",
    available: bool = True,
) -> WorkerConfig:
    """Create a writer worker for documentation and prose.

    Returns:
        Writer WorkerConfig.
    """
    tools = tools or []
    return WorkerConfig(
        id=worker_id,
        capabilities=WorkerCapabilities(
            skills=WRITER_SKILLS,
            tools=WRITER_TOOLS + [tool.name for tool in tools],
            available=available,
            description="Technical writer for documentation and explanations.",
        ),
        client=client,
        execute_fn=execute_fn,
        tools=tools,
        system_prompt=WRITER_PROMPT,
    )
