"""Interface definitions for the delegation engine."""

from .sub_agent import ISubAgent
from .tool_executor import IToolExecutor

__all__ = [
    "ISubAgent",
    "IToolExecutor",
]
