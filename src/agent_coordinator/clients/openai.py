"""OpenAI chat completions client.

The unified transcript maps almost one to one onto chat completions. Tool
call arguments travel as JSON strings, so they are encoded on the way out and
decoded on the way back.
"""

import json
import os
from typing import Any

from openai import APIConnectionError, InternalServerError, OpenAI
from openai import AuthenticationError as OpenAIAuthError
from openai import RateLimitError as OpenAIRateLimitError

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

# other client_config keys are ignored
SUPPORTED_CONFIG_KEYS = frozenset({
    "temperature",
    "top_p",
    "max_tokens",
    "stop",
    "reasoning_effort",
    "presence_penalty",
    "frequency_penalty",
    "response_format",
})

_FINISH_REASONS = {
    "stop": FinishReason.STOP,
    "tool_calls": FinishReason.TOOL_USE,
    "function_call": FinishReason.TOOL_USE,
    "length": FinishReason.LENGTH,
    "content_filter": FinishReason.ERROR,
}


def _encode_tool_call(call: ToolCall) -> dict[str, Any]:
    return {
        "id": call.id,
        "type": "function",
        "function": {"name": call.name, "arguments": json.dumps(call.arguments)},
    }


def _decode_tool_call(raw: Any) -> ToolCall:
    return ToolCall(
        id=raw.id,
        name=raw.function.name,
        arguments=json.loads(raw.function.arguments or "{}"),
    )


class OpenAIClient(BaseLLMClient):
    """Reasoning-service client for OpenAI chat models."""

    def __init__(
        self,
        api_key: str | None = None,
        model: str = "gpt-4o",
        client_config: dict | None = None,
    ):
        """Initialize the client.

        Args:
            api_key: OpenAI API key. Falls back to OPENAI_API_KEY.
            model: Chat model id.
            client_config: Request parameters; keys outside
                SUPPORTED_CONFIG_KEYS are dropped.
        """
        super().__init__(client_config)
        self.model = model
        self.client = OpenAI(api_key=api_key or os.environ.get("OPENAI_API_KEY"))

    def generate(
        self,
        messages: list[UnifiedMessage],
        tools: list[BaseTool] | None = None,
    ) -> UnifiedResponse:
        """Send the transcript and normalize the reply.

        Raises:
            AuthenticationError: If the API key is rejected.
            RateLimitError: If still rate limited after retries.
            ProviderUnavailableError: If the API stays unreachable after retries.
            InvalidResponseError: If the reply cannot be parsed.
        """
        request: dict[str, Any] = {
            key: value
            for key, value in self.client_config.items()
            if key in SUPPORTED_CONFIG_KEYS
        }
        request["model"] = self.model
        request["messages"] = self._convert_messages(messages)
        if tools:
            request["tools"] = self._convert_tools(tools)
            request["tool_choice"] = "auto"

        return self._parse_response(self._create_completion(request))

    @with_retry(max_retries=3, initial_delay=1.0)
    def _create_completion(self, request: dict[str, Any]) -> Any:
        try:
            return self.client.chat.completions.create(**request)
        except OpenAIAuthError as e:
            raise AuthenticationError(f"OpenAI rejected the API key: {e}") from e
        except OpenAIRateLimitError as e:
            raise RateLimitError("OpenAI rate limit exceeded") from e
        except (APIConnectionError, InternalServerError) as e:
            raise ProviderUnavailableError(f"OpenAI API unavailable: {e}") from e

    def _convert_messages(self, messages: list[UnifiedMessage]) -> list[dict[str, Any]]:
        converted = []
        for msg in messages:
            if msg.role == MessageRole.TOOL:
                converted.append({
                    "role": "tool",
                    "tool_call_id": msg.tool_call_id,
                    "content": msg.content,
                })
            elif msg.role == MessageRole.ASSISTANT and msg.tool_calls:
                converted.append({
                    "role": "assistant",
                    "content": msg.content,
                    "tool_calls": [_encode_tool_call(call) for call in msg.tool_calls],
                })
            else:
                converted.append({"role": msg.role.value, "content": msg.content})
        return converted

    def _convert_tools(self, tools: list[BaseTool]) -> list[dict[str, Any]]:
        # BaseTool.to_schema already emits the chat completions shape
        return [tool.to_schema() for tool in tools]

    def _parse_response(self, response: Any) -> UnifiedResponse:
        try:
            choice = response.choices[0]
            raw_calls = choice.message.tool_calls or []
            usage = response.usage
            return UnifiedResponse(
                message=UnifiedMessage(
                    role=MessageRole.ASSISTANT,
                    content=choice.message.content,
                    tool_calls=[_decode_tool_call(raw) for raw in raw_calls] or None,
                ),
                finish_reason=_FINISH_REASONS.get(choice.finish_reason, FinishReason.STOP),
                usage=UsageStats(
                    prompt_tokens=usage.prompt_tokens,
                    completion_tokens=usage.completion_tokens,
                    total_tokens=usage.total_tokens,
                ) if usage else None,
            )
        except (AttributeError, IndexError, TypeError, ValueError) as e:
            raise InvalidResponseError(f"Failed to parse OpenAI response: {e}") from e
