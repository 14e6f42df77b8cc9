"""Tests for tools, tool execution and prompt building."""

from unittest.mock import patch

from agent_coordinator.core.prompt_builder import PromptBuilder
from agent_coordinator.core.tool_executor import ToolExecutor
from agent_coordinator.tools.ask_user import AskUserTool
from agent_coordinator.tools.base import FunctionTool
from agent_coordinator.types import MessageRole, ToolCall


class TestFunctionTool:
    """Tests for FunctionTool."""

    def test_execute(self):
        tool = FunctionTool("add", "Add two numbers.", lambda a, b: a + b)
        assert tool.execute(a=2, b=3) == 5

    def test_schema(self):
        params = {"type": "object", "properties": {"a": {"type": "integer"}}}
        tool = FunctionTool("add", "Add two numbers.", lambda a: a, parameters=params)
        schema = tool.to_schema()
        assert schema["type"] == "function"
        assert schema["function"]["name"] == "add"
        assert schema["function"]["description"] == "Add two numbers."
        assert schema["function"]["parameters"] == params

    def test_default_parameters(self):
        tool = FunctionTool("noop", "Do nothing.", lambda: None)
        assert tool.parameters == {"type": "object", "properties": {}}


class TestAskUserTool:
    """Tests for AskUserTool."""

    def test_callback(self):
        tool = AskUserTool(input_callback=lambda q: f"answer to {q}")
        assert tool.execute(question="which team?") == "answer to which team?"

    def test_default_reads_stdin(self):
        tool = AskUserTool()
        with patch("builtins.input", return_value="billing"):
            assert tool.execute(question="which team?") == "billing"

    def test_schema_requires_question(self):
        assert AskUserTool().parameters["required"] == ["question"]


class TestToolExecutor:
    """Tests for ToolExecutor."""

    def test_results_in_order(self):
        executor = ToolExecutor([
            FunctionTool("upper", "Uppercase.", lambda text: text.upper()),
            FunctionTool("count", "Count.", lambda text: {"length": len(text)}),
        ])
        results = executor.execute_tool_calls([
            ToolCall(id="1", name="upper", arguments={"text": "abc"}),
            ToolCall(id="2", name="count", arguments={"text": "abc"}),
        ])

        assert [r.role for r in results] == [MessageRole.TOOL, MessageRole.TOOL]
        assert results[0].content == "ABC"
        assert results[0].tool_call_id == "1"
        assert results[0].name == "upper"
        assert results[1].content == '{"length": 3}'

    def test_unknown_tool(self):
        executor = ToolExecutor([])
        results = executor.execute_tool_calls([ToolCall(id="1", name="ghost", arguments={})])
        assert results[0].content == "Error: Tool 'ghost' not found"

    def test_tool_exception(self):
        def explode():
            raise ValueError("no network")

        executor = ToolExecutor({"fetch": FunctionTool("fetch", "Fetch.", explode)})
        results = executor.execute_tool_calls([ToolCall(id="1", name="fetch", arguments={})])
        assert results[0].content == "Error executing tool: no network"

    def test_lookup(self):
        tool = FunctionTool("fetch", "Fetch.", lambda: "")
        executor = ToolExecutor([tool])
        assert executor.has_tool("fetch")
        assert executor.get_tool("fetch") is tool
        assert executor.get_tool("ghost") is None


class TestPromptBuilder:
    """Tests for PromptBuilder."""

    def test_start(self):
        transcript = PromptBuilder("You route tasks.").start("Fix the build")
        assert [m.role for m in transcript] == [MessageRole.SYSTEM, MessageRole.USER]
        assert transcript[0].content == "You route tasks."
        assert transcript[1].content == "Fix the build"

    def test_assistant_message_with_tool_calls(self):
        call = ToolCall(id="1", name="ask_user", arguments={"question": "?"})
        msg = PromptBuilder("s").build_assistant_message(None, [call])
        assert msg.content == ""
        assert msg.tool_calls == [call]

    def test_tool_result(self):
        msg = PromptBuilder("s").build_tool_result("1", "ask_user", "billing")
        assert msg.to_dict() == {
            "role": "tool",
            "content": "billing",
            "tool_call_id": "1",
            "name": "ask_user",
        }
