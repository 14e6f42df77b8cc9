"""Tests for reasoning-service clients, retry logic and the client factory."""

import json
from types import SimpleNamespace
from unittest.mock import MagicMock, patch

import pytest

from agent_coordinator.clients.anthropic import AnthropicClient
from agent_coordinator.clients.base import BaseLLMClient, with_retry
from agent_coordinator.clients.factory import (
    create_client,
    get_available_providers,
    get_default_model,
)
from agent_coordinator.clients.openai import OpenAIClient
from agent_coordinator.exceptions import (
    AuthenticationError,
    InvalidResponseError,
    ProviderUnavailableError,
    RateLimitError,
)
from agent_coordinator.tools.ask_user import AskUserTool
from agent_coordinator.types import FinishReason, MessageRole, ToolCall, UnifiedMessage


def _transcript():
    return [
        UnifiedMessage(role=MessageRole.SYSTEM, content="Route tasks."),
        UnifiedMessage(role=MessageRole.USER, content="Fix the build"),
        UnifiedMessage(
            role=MessageRole.ASSISTANT,
            content="Let me ask.",
            tool_calls=[ToolCall(id="c1", name="ask_user", arguments={"question": "Which repo?"})],
        ),
        UnifiedMessage(
            role=MessageRole.TOOL, content="backend", tool_call_id="c1", name="ask_user"
        ),
    ]


class TestWithRetry:
    """Tests for the with_retry decorator."""

    def test_retries_then_succeeds(self):
        func = MagicMock(side_effect=[RateLimitError(), ProviderUnavailableError("down"), "ok"])
        func.__name__ = "call"
        wrapped = with_retry(max_retries=3, jitter=False)(func)

        with patch("agent_coordinator.clients.base.time.sleep") as sleep:
            assert wrapped() == "ok"

        assert func.call_count == 3
        assert [c.args[0] for c in sleep.call_args_list] == [1.0, 2.0]

    def test_gives_up_after_max_retries(self):
        func = MagicMock(side_effect=RateLimitError())
        func.__name__ = "call"
        wrapped = with_retry(max_retries=2, jitter=False)(func)

        with patch("agent_coordinator.clients.base.time.sleep"):
            with pytest.raises(RateLimitError):
                wrapped()

        assert func.call_count == 3

    def test_other_errors_not_retried(self):
        func = MagicMock(side_effect=AuthenticationError("bad key"))
        func.__name__ = "call"
        wrapped = with_retry(max_retries=3)(func)

        with patch("agent_coordinator.clients.base.time.sleep") as sleep:
            with pytest.raises(AuthenticationError):
                wrapped()

        sleep.assert_not_called()
        assert func.call_count == 1

    def test_delay_capped(self):
        func = MagicMock(side_effect=[RateLimitError(), RateLimitError(), "ok"])
        func.__name__ = "call"
        wrapped = with_retry(initial_delay=5.0, max_delay=6.0, jitter=False)(func)

        with patch("agent_coordinator.clients.base.time.sleep") as sleep:
            wrapped()

        assert [c.args[0] for c in sleep.call_args_list] == [5.0, 6.0]

    def test_retry_after_hint(self):
        func = MagicMock(side_effect=[RateLimitError(retry_after=7), "ok"])
        func.__name__ = "call"
        wrapped = with_retry(initial_delay=1.0)(func)

        with patch("agent_coordinator.clients.base.time.sleep") as sleep:
            wrapped()

        sleep.assert_called_once_with(7.0)


class TestFactory:
    """Tests for the client factory."""

    def test_available_providers(self):
        assert set(get_available_providers()) == {"anthropic", "openai"}

    def test_default_model(self):
        assert get_default_model("openai") == "gpt-4o"
        with pytest.raises(ValueError):
            get_default_model("nope")

    def test_unknown_provider(self):
        with pytest.raises(ValueError, match="Unknown provider"):
            create_client("nope")

    def test_missing_key(self, monkeypatch):
        monkeypatch.delenv("OPENAI_API_KEY", raising=False)
        with pytest.raises(ValueError, match="OPENAI_API_KEY"):
            create_client("openai")

    def test_creates_client(self):
        client = create_client("openai", api_key="fake", client_config={"temperature": 0})
        assert isinstance(client, OpenAIClient)
        assert isinstance(client, BaseLLMClient)
        assert client.model == "gpt-4o"
        assert client.client_config == {"temperature": 0}
        assert client.describe() == "OpenAIClient(gpt-4o)"


class TestOpenAIClient:
    """Tests for OpenAI format conversion."""

    def test_convert_messages(self):
        client = OpenAIClient(api_key="fake")
        converted = client._convert_messages(_transcript())

        assert converted[0] == {"role": "system", "content": "Route tasks."}
        assert converted[1] == {"role": "user", "content": "Fix the build"}
        call = converted[2]["tool_calls"][0]
        assert call["id"] == "c1"
        assert call["type"] == "function"
        assert json.loads(call["function"]["arguments"]) == {"question": "Which repo?"}
        assert converted[3] == {"role": "tool", "tool_call_id": "c1", "content": "backend"}

    def test_convert_tools(self):
        client = OpenAIClient(api_key="fake")
        formatted = client._convert_tools([AskUserTool()])
        assert formatted[0]["type"] == "function"
        assert formatted[0]["function"]["name"] == "ask_user"

    def test_parse_tool_call_response(self):
        client = OpenAIClient(api_key="fake")
        response = SimpleNamespace(
            choices=[SimpleNamespace(
                finish_reason="tool_calls",
                message=SimpleNamespace(
                    content=None,
                    tool_calls=[SimpleNamespace(
                        id="c9",
                        function=SimpleNamespace(name="ask_user", arguments='{"question": "Why?"}'),
                    )],
                ),
            )],
            usage=SimpleNamespace(prompt_tokens=3, completion_tokens=4, total_tokens=7),
        )

        parsed = client._parse_response(response)

        assert parsed.finish_reason == FinishReason.TOOL_USE
        assert parsed.has_tool_calls
        assert parsed.message.tool_calls[0].arguments == {"question": "Why?"}
        assert parsed.usage.total_tokens == 7

    def test_parse_malformed_response(self):
        client = OpenAIClient(api_key="fake")
        with pytest.raises(InvalidResponseError):
            client._parse_response(SimpleNamespace(choices=[]))

    def test_generate_passes_supported_config(self, text_response):
        client = OpenAIClient(api_key="fake", client_config={"temperature": 0.2, "bogus": 1})
        client._create_completion = MagicMock(return_value="raw")
        client._parse_response = MagicMock(return_value=text_response("hi"))

        client.generate(_transcript()[:2], tools=[AskUserTool()])

        api_args = client._create_completion.call_args[0][0]
        assert api_args["temperature"] == 0.2
        assert "bogus" not in api_args
        assert api_args["tool_choice"] == "auto"


class TestAnthropicClient:
    """Tests for Anthropic format conversion."""

    def test_system_prompt_separated(self):
        client = AnthropicClient(api_key="fake")
        system, converted = client._convert_messages(_transcript())

        assert system == "Route tasks."
        assert converted[0] == {"role": "user", "content": "Fix the build"}
        assert converted[1]["content"][0] == {"type": "text", "text": "Let me ask."}
        assert converted[1]["content"][1]["type"] == "tool_use"
        assert converted[2]["role"] == "user"
        assert converted[2]["content"][0]["type"] == "tool_result"
        assert converted[2]["content"][0]["tool_use_id"] == "c1"

    def test_consecutive_tool_results_share_a_turn(self):
        client = AnthropicClient(api_key="fake")
        messages = _transcript() + [
            UnifiedMessage(role=MessageRole.TOOL, content="main", tool_call_id="c2", name="ask_user"),
        ]

        _, converted = client._convert_messages(messages)

        assert len(converted) == 3
        assert [b["tool_use_id"] for b in converted[2]["content"]] == ["c1", "c2"]

    def test_convert_tools(self):
        client = AnthropicClient(api_key="fake")
        formatted = client._convert_tools([AskUserTool()])
        assert formatted[0]["name"] == "ask_user"
        assert "input_schema" in formatted[0]

    def test_unsupported_config(self):
        with pytest.raises(ValueError, match="Unsupported"):
            AnthropicClient(api_key="fake", client_config={"frequency_penalty": 1})

    def test_build_kwargs_defaults(self):
        client = AnthropicClient(api_key="fake", client_config={"temperature": 0.1})
        kwargs = client._build_api_kwargs("sys", [], None)
        assert kwargs["max_tokens"] == 4096
        assert kwargs["system"] == "sys"
        assert kwargs["temperature"] == 0.1
        assert "tools" not in kwargs

    def test_parse_response(self):
        client = AnthropicClient(api_key="fake")
        response = SimpleNamespace(
            content=[
                SimpleNamespace(type="text", text='{"targetAgent": "coder"}'),
                SimpleNamespace(type="tool_use", id="t1", name="ask_user", input={"question": "?"}),
            ],
            stop_reason="tool_use",
            usage=SimpleNamespace(input_tokens=10, output_tokens=2),
        )

        parsed = client._parse_response(response)

        assert parsed.message.content == '{"targetAgent": "coder"}'
        assert parsed.message.tool_calls[0].name == "ask_user"
        assert parsed.finish_reason == FinishReason.TOOL_USE
        assert parsed.usage.total_tokens == 12
