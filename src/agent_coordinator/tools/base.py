"""Tool contract shared by llm routing and llm-backed workers."""

from abc import ABC, abstractmethod
from typing import Any, Callable

_EMPTY_PARAMETERS: dict[str, Any] = {"type": "object", "properties": {}}


class BaseTool(ABC):
    """Something a reasoning service may ask to run.

    Subclasses describe themselves with a name, a description and a JSON
    schema for their keyword arguments, and do the work in ``execute``.
    Whatever ``execute`` returns is serialized into the tool result.
    """

    @property
    @abstractmethod
    def name(self) -> str:
        """Identifier the model uses to request this tool."""

    @property
    @abstractmethod
    def description(self) -> str:
        """What the tool does, shown to the model."""

    @property
    @abstractmethod
    def parameters(self) -> dict[str, Any]:
        """JSON schema of the keyword arguments ``execute`` accepts."""

    @abstractmethod
    def execute(self, **kwargs) -> Any:
        ...

    def to_schema(self) -> dict[str, Any]:
        """Function-calling schema in the OpenAI ``tools`` shape."""
        function = {
            "name": self.name,
            "description": self.description,
            "parameters": self.parameters,
        }
        return {"type": "function", "function": function}


class FunctionTool(BaseTool):
    """Wrap a callable so it can be offered to a reasoning service.

    Example:
        ```python
        def lookup_employee(name: str) -> str:
            ...

        tool = FunctionTool(
            "lookup_employee",
            "Find an employee record by name.",
            lookup_employee,
            parameters={
                "type": "object",
                "properties": {"name": {"type": "string"}},
                "required": ["name"],
            },
        )
        ```
    """

    def __init__(
        self,
        name: str,
        description: str,
        func: Callable[..., Any],
        parameters: dict[str, Any] | None = None,
    ):
        self._name = name
        self._description = description
        self._func = func
        self._parameters = parameters or dict(_EMPTY_PARAMETERS)

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def parameters(self) -> dict[str, Any]:
        return self._parameters

    def execute(self, **kwargs) -> Any:
        return self._func(**kwargs)

    def __repr__(self) -> str:
        return f"FunctionTool(name='{self._name}')"
