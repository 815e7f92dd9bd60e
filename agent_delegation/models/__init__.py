"""Data models for the delegation engine."""

from .enums import TaskPriority, TaskStatus, StopReason, AggregationStrategy
from .capability import AgentCapability
from .tool import ToolDefinition, ToolResult, ToolCallRecord
from .task import Task, TaskBuilder, new_id
from .result import SubAgentResult

__all__ = [
    # Enums
    "TaskPriority",
    "TaskStatus",
    "StopReason",
    "AggregationStrategy",
    # Capability
    "AgentCapability",
    # Tool models
    "ToolDefinition",
    "ToolResult",
    "ToolCallRecord",
    # Task models
    "Task",
    "TaskBuilder",
    "new_id",
    # Result models
    "SubAgentResult",
]
