"""Clarifying questions for llm-based routing.

When a task is too vague to route, the reasoning service can call
``ask_user``; the answer lands in the routing transcript as a tool result
and the service is asked again.
"""

from typing import Any, Callable

from .base import BaseTool

_DESCRIPTION = (
    "Ask the user a clarifying question. Only use it when the request is "
    "too ambiguous to choose a worker."
)


def prompt_on_stdin(question: str) -> str:
    """Print the question and read one line from stdin."""
    print(f"\n[Supervisor needs input]: {question}")
    return input("Your answer: ")


class AskUserTool(BaseTool):
    """Let the reasoning service put a question to the user.

    Answers come from ``input_callback``. The default reads the terminal;
    any front end that can answer synchronously can pass its own.

    Example:
        ```python
        tool = AskUserTool(input_callback=lambda q: "It is about payroll.")
        supervisor = create_supervisor_node(
            strategy="llm-based", client=client, tools=[tool]
        )
        ```
    """

    def __init__(self, input_callback: Callable[[str], str] | None = None):
        self._answer = input_callback or prompt_on_stdin

    @property
    def name(self) -> str:
        return "ask_user"

    @property
    def description(self) -> str:
        return _DESCRIPTION

    @property
    def parameters(self) -> dict[str, Any]:
        question = {"type": "string", "description": "One clear, specific question."}
        return {
            "type": "object",
            "properties": {"question": question},
            "required": ["question"],
        }

    def execute(self, question: str) -> str:
        return self._answer(question)
