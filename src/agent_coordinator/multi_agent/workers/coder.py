"""Coder worker factory.

Creates a worker specialized for writing and debugging code.
"""

from ...clients.base import BaseLLMClient
from ...tools.base import BaseTool
from ..prompts import CODER_PROMPT
from ..schemas import WorkerCapabilities
from ..worker import ExecuteFn, WorkerConfig

CODER_SKILLS = ["coding", "debugging", "implement", "refactor", "python"]
CODER_TOOLS = ["compiler", "debugger", "python_repl"]


def create_coder_worker(
    client: BaseLLMClient | None = None,
    execute_fn: ExecuteFn | None = None,
    tools: list[BaseTool] | None = None,
    worker_id: str = "coder",
    available: bool = True,
    max_tool_rounds: int = 8,
) -> WorkerConfig:
    """Create a coder worker.

    The coder gets a larger tool budget than the other presets, since
    compile and test cycles usually take several rounds.

    Args:
        client: Reasoning service for default execution (a coding-optimized model works best).
        execute_fn: Custom execution function, takes precedence over client.
        tools: Tools the worker can call.
        worker_id: Worker id.
        available: Whether routing may select the worker.
        max_tool_rounds: Tool rounds allowed per assignment.

    Returns:
        Coder WorkerConfig.
    """
    tools = tools or []
    return WorkerConfig(
        id=worker_id,
        capabilities=WorkerCapabilities(
            skills=CODER_SKILLS,
            tools=CODER_TOOLS + [tool.name for tool in tools],
            available=available,
            description="Senior software engineer for writing, compiling and debugging code.",
        ),
        client=client,
        execute_fn=execute_fn,
        tools=tools,
        system_prompt=CODER_PROMPT,
        max_tool_rounds=max_tool_rounds,
    )
