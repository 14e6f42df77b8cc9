"""Provider-neutral transcript types.

LLM routing, llm-backed workers and the aggregator build transcripts out of
these dataclasses; each client in ``clients`` translates them to its own
wire format and back.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Any, Mapping


class MessageRole(Enum):
    SYSTEM = "system"
    USER = "user"
    ASSISTANT = "assistant"
    TOOL = "tool"


class FinishReason(Enum):
    """Normalized stop reason across providers."""
    STOP = "stop"
    TOOL_USE = "tool_use"
    LENGTH = "length"
    ERROR = "error"


@dataclass
class ToolCall:
    """One tool invocation requested in an assistant turn.

    ``arguments`` is already decoded from the provider's JSON.
    """
    id: str
    name: str
    arguments: dict[str, Any]


@dataclass
class UsageStats:
    prompt_tokens: int
    completion_tokens: int
    total_tokens: int


@dataclass
class UnifiedMessage:
    """One transcript entry.

    Assistant turns may carry ``tool_calls``; tool turns answer one of them
    and set ``tool_call_id`` plus the tool ``name``. A reasoning service with
    structured output may put a mapping in ``content`` instead of text.
    """
    role: MessageRole
    content: str | Mapping[str, Any] | None = None
    tool_calls: list[ToolCall] | None = None
    tool_call_id: str | None = None
    name: str | None = None

    def to_dict(self) -> dict[str, Any]:
        """Plain-dict form with unset fields left out."""
        data: dict[str, Any] = {"role": self.role.value}
        optional = {
            "content": self.content,
            "tool_call_id": self.tool_call_id,
            "name": self.name,
        }
        data.update({key: value for key, value in optional.items() if value is not None})
        if self.tool_calls:
            data["tool_calls"] = [
                {"id": call.id, "name": call.name, "arguments": call.arguments}
                for call in self.tool_calls
            ]
        return data


@dataclass
class UnifiedResponse:
    """A parsed completion: the assistant turn plus why generation stopped."""
    message: UnifiedMessage
    finish_reason: FinishReason
    usage: UsageStats | None = None

    @property
    def has_tool_calls(self) -> bool:
        return bool(self.message.tool_calls)
