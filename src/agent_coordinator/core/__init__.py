"""Core reasoning-service helpers.

- PromptBuilder: builds transcripts for a reasoning service
- ToolExecutor: runs requested tool calls and reports their results
"""

from .prompt_builder import PromptBuilder
from .tool_executor import ToolExecutor

__all__ = ["PromptBuilder", "ToolExecutor"]
