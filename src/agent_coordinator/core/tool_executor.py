"""Runs requested tool calls and reports every outcome as a tool result."""

import json
import logging
from typing import Any

from ..logging import get_logger
from ..tools.base import BaseTool
from ..types import MessageRole, ToolCall, UnifiedMessage

ERROR_PREFIX = "Error"


class ToolExecutor:
    """Executes tool calls against a fixed set of tools.

    Unknown tools and tool exceptions never propagate: they are reported back
    to the reasoning service as error results so the conversation can
    continue.
    """

    def __init__(
        self,
        tools: list[BaseTool] | dict[str, BaseTool],
        logger: logging.Logger | None = None,
    ):
        """Index the tools by name.

        Args:
            tools: The callable tools, as a list or keyed by name.
            logger: Where execution is reported; the module logger by default.
        """
        if isinstance(tools, dict):
            self.tools = dict(tools)
        else:
            self.tools = {tool.name: tool for tool in tools}
        self.logger = logger or get_logger(__name__)

    def execute_single_tool(self, tool: BaseTool, arguments: dict[str, Any]) -> str:
        """Run ``tool`` and render its return value as text.

        Strings pass through, JSON-serializable values are dumped, anything
        else falls back to ``str``.
        """
        result = tool.execute(**arguments)
        if isinstance(result, str):
            return result
        try:
            return json.dumps(result)
        except (TypeError, ValueError):
            return str(result)

    def execute_tool_calls(self, tool_calls: list[ToolCall]) -> list[UnifiedMessage]:
        """Execute tool calls in order and collect their result messages.

        Args:
            tool_calls: Tool calls requested by the reasoning service.

        Returns:
            One TOOL message per call, in the same order.
        """
        self.logger.debug(
            "executing %d tool call(s): %s",
            len(tool_calls),
            [tc.name for tc in tool_calls],
        )
        results = []
        for tool_call in tool_calls:
            content = self._run(tool_call)
            results.append(UnifiedMessage(
                role=MessageRole.TOOL,
                content=content,
                tool_call_id=tool_call.id,
                name=tool_call.name,
            ))

        errors = sum(1 for msg in results if msg.content and msg.content.startswith(ERROR_PREFIX))
        self.logger.debug(
            "tool execution complete: %d succeeded, %d failed",
            len(results) - errors,
            errors,
        )
        return results

    def _run(self, tool_call: ToolCall) -> str:
        tool = self.tools.get(tool_call.name)
        if tool is None:
            self.logger.warning(
                "tool '%s' not found (available: %s)",
                tool_call.name,
                list(self.tools),
            )
            return f"{ERROR_PREFIX}: Tool '{tool_call.name}' not found"

        try:
            result = self.execute_single_tool(tool, tool_call.arguments)
        except Exception as e:
            self.logger.error("tool '%s' failed: %s", tool_call.name, e)
            return f"{ERROR_PREFIX} executing tool: {e}"

        self.logger.debug("tool '%s' returned %d chars", tool_call.name, len(result))
        return result

    def get_tool(self, name: str) -> BaseTool | None:
        """Get a tool by name."""
        return self.tools.get(name)

    def has_tool(self, name: str) -> bool:
        """Check if a tool exists."""
        return name in self.tools
