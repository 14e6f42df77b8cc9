"""Anthropic Messages API client.

Differences from the unified transcript that this client smooths over:
the system prompt travels as a top-level ``system`` argument, tool calls are
``tool_use`` content blocks, and tool results are ``tool_result`` blocks sent
back in a user turn. Consecutive tool results are folded into a single user
turn, since the API expects every result for one assistant turn together.
"""

import os
from typing import Any

from anthropic import Anthropic, APIConnectionError, InternalServerError
from anthropic import AuthenticationError as AnthropicAuthError
from anthropic import RateLimitError as AnthropicRateLimitError

from ..exceptions import (
    AuthenticationError,
    InvalidResponseError,
    ProviderUnavailableError,
    RateLimitError,
)
from ..tools.base import BaseTool
from ..types import (
    FinishReason,
    MessageRole,
    ToolCall,
    UnifiedMessage,
    UnifiedResponse,
    UsageStats,
)
from .base import BaseLLMClient, with_retry

DEFAULT_MAX_TOKENS = 4096

SUPPORTED_CONFIG_KEYS = {
    "temperature",
    "top_p",
    "top_k",
    "max_tokens",
    "stop_sequences",
    "tool_choice",
}

# keys copied straight into the request when configured
_PASSTHROUGH_KEYS = ("temperature", "top_p", "top_k", "stop_sequences")

_STOP_REASONS = {
    "end_turn": FinishReason.STOP,
    "stop_sequence": FinishReason.STOP,
    "tool_use": FinishReason.TOOL_USE,
    "max_tokens": FinishReason.LENGTH,
}


class AnthropicClient(BaseLLMClient):
    """Reasoning-service client for Claude models."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "claude-sonnet-4-5-20250929",
        client_config: dict | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: Anthropic API key. Falls back to ANTHROPIC_API_KEY.
            model: Claude model id.
            client_config: Request parameters, limited to SUPPORTED_CONFIG_KEYS.
                ``tool_choice`` only applies to requests that carry tools.

        Raises:
            ValueError: If client_config holds an unsupported key.
        """
        super().__init__(client_config)
        unsupported = set(self.client_config) - SUPPORTED_CONFIG_KEYS
        if unsupported:
            raise ValueError(f"Unsupported config keys for Anthropic: {sorted(unsupported)}")

        self.model = model
        self.client = Anthropic(api_key=api_key or os.environ.get("ANTHROPIC_API_KEY"))

    def generate(
        self,
        messages: list[UnifiedMessage],
        tools: list[BaseTool] | None = None,
    ) -> UnifiedResponse:
        """Send the transcript to Claude and normalize the reply.

        Raises:
            AuthenticationError: If the API key is rejected.
            RateLimitError: If still rate limited after retries.
            ProviderUnavailableError: If the API stays unreachable after retries.
            InvalidResponseError: If the reply cannot be parsed.
        """
        system_prompt, converted = self._convert_messages(messages)
        request = self._build_api_kwargs(
            system_prompt,
            converted,
            self._convert_tools(tools) if tools else None,
        )
        return self._parse_response(self._create_message(request))

    @with_retry(max_retries=3, initial_delay=1.0)
    def _create_message(self, request: dict[str, Any]) -> Any:
        try:
            return self.client.messages.create(**request)
        except AnthropicAuthError as e:
            raise AuthenticationError(f"Anthropic rejected the API key: {e}") from e
        except AnthropicRateLimitError as e:
            raise RateLimitError("Anthropic rate limit exceeded") from e
        except (APIConnectionError, InternalServerError) as e:
            raise ProviderUnavailableError(f"Anthropic API unavailable: {e}") from e

    def _build_api_kwargs(
        self,
        system_prompt: str | None,
        messages: list[dict[str, Any]],
        tools: list[dict[str, Any]] | None,
    ) -> dict[str, Any]:
        request: dict[str, Any] = {
            "model": self.model,
            "messages": messages,
            "max_tokens": self.client_config.get("max_tokens", DEFAULT_MAX_TOKENS),
        }
        if system_prompt:
            request["system"] = system_prompt
        if tools:
            request["tools"] = tools
            if "tool_choice" in self.client_config:
                request["tool_choice"] = self.client_config["tool_choice"]

        request.update({
            key: self.client_config[key]
            for key in _PASSTHROUGH_KEYS
            if key in self.client_config
        })
        return request

    def _convert_messages(
        self, messages: list[UnifiedMessage]
    ) -> tuple[str | None, list[dict[str, Any]]]:
        """Split out the system prompt and convert the rest to Anthropic turns."""
        system_prompt = None
        turns: list[dict[str, Any]] = []

        for msg in messages:
            if msg.role == MessageRole.SYSTEM:
                system_prompt = msg.content
                continue

            if msg.role == MessageRole.TOOL:
                block = {
                    "type": "tool_result",
                    "tool_use_id": msg.tool_call_id,
                    "content": msg.content or "",
                }
                previous = turns[-1] if turns else None
                if previous and previous["role"] == "user" and isinstance(previous["content"], list):
                    previous["content"].append(block)
                else:
                    turns.append({"role": "user", "content": [block]})
                continue

            if msg.role == MessageRole.ASSISTANT:
                turns.append({"role": "assistant", "content": _assistant_blocks(msg)})
            else:
                turns.append({"role": "user", "content": msg.content or ""})

        return system_prompt, turns

    def _convert_tools(self, tools: list[BaseTool]) -> list[dict[str, Any]]:
        return [
            {"name": t.name, "description": t.description, "input_schema": t.parameters}
            for t in tools
        ]

    def _parse_response(self, response: Any) -> UnifiedResponse:
        try:
            texts = []
            tool_calls = []
            for block in response.content:
                if block.type == "text":
                    texts.append(block.text)
                elif block.type == "tool_use":
                    tool_calls.append(ToolCall(id=block.id, name=block.name, arguments=block.input))

            usage = response.usage
            content = "".join(texts)
            return UnifiedResponse(
                message=UnifiedMessage(
                    role=MessageRole.ASSISTANT,
                    content=content or None,
                    tool_calls=tool_calls or None,
                ),
                finish_reason=_STOP_REASONS.get(response.stop_reason, FinishReason.STOP),
                usage=UsageStats(
                    prompt_tokens=usage.input_tokens,
                    completion_tokens=usage.output_tokens,
                    total_tokens=usage.input_tokens + usage.output_tokens,
                ),
            )
        except (AttributeError, TypeError) as e:
            raise InvalidResponseError(f"Failed to parse Anthropic response: {e}") from e


def _assistant_blocks(msg: UnifiedMessage) -> list[dict[str, Any]]:
    blocks: list[dict[str, Any]] = []
    if msg.content:
        blocks.append({"type": "text", "text": msg.content})
    blocks.extend(
        {"type": "tool_use", "id": tc.id, "name": tc.name, "input": tc.arguments}
        for tc in msg.tool_calls or []
    )
    return blocks
