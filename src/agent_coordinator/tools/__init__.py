"""Tool runtime contract.

Tools inherit from BaseTool and implement the execute method. FunctionTool
adapts a plain callable.
"""

from .ask_user import AskUserTool
from .base import BaseTool, FunctionTool

__all__ = [
    "AskUserTool",
    "BaseTool",
    "FunctionTool",
]
