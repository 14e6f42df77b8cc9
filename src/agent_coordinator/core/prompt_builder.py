"""Transcript construction for reasoning-service calls."""

from ..types import MessageRole, ToolCall, UnifiedMessage


class PromptBuilder:
    """Creates the messages of a transcript around a fixed system prompt.

    ``start`` opens a transcript; the tool loop in routing and in llm-backed
    workers then appends assistant turns and tool results as they happen.
    """

    def __init__(self, system_prompt: str):
        self.system_prompt = system_prompt

    def start(self, user_content: str) -> list[UnifiedMessage]:
        """New transcript: the system prompt followed by ``user_content``."""
        return [
            self.build_system_message(self.system_prompt),
            self.build_user_message(user_content),
        ]

    def build_system_message(self, content: str) -> UnifiedMessage:
        return UnifiedMessage(MessageRole.SYSTEM, content)

    def build_user_message(self, content: str) -> UnifiedMessage:
        return UnifiedMessage(MessageRole.USER, content)

    def build_assistant_message(
        self,
        content: str | None,
        tool_calls: list[ToolCall] | None = None,
    ) -> UnifiedMessage:
        """Echo an assistant turn back into the transcript.

        Providers reject a null assistant body, so missing text becomes "".
        """
        return UnifiedMessage(MessageRole.ASSISTANT, content or "", tool_calls=tool_calls)

    def build_tool_result(self, tool_call_id: str, name: str, content: str) -> UnifiedMessage:
        """Result of one tool call, linked to it by ``tool_call_id``."""
        return UnifiedMessage(
            MessageRole.TOOL,
            content,
            tool_call_id=tool_call_id,
            name=name,
        )
