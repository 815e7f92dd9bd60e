"""Task-related data models."""

import copy
import os
import time
import uuid
from dataclasses import dataclass, field
from typing import Any, Dict, List

from ..llm.models import Message
from .enums import TaskPriority
from .tool import ToolDefinition

DEFAULT_MAX_ITERATIONS = 10
DEFAULT_MAX_TOKENS = 4096
DEFAULT_TIMEOUT_SECONDS = 120


def new_id() -> str:
    """生成按时间排序的唯一 ID（UUIDv7 布局）"""
    unix_ms = time.time_ns() // 1_000_000
    rand = int.from_bytes(os.urandom(10), "big")
    value = (unix_ms & 0xFFFF_FFFF_FFFF) << 80
    value |= 0x7 << 76
    value |= ((rand >> 62) & 0xFFF) << 64
    value |= 0b10 << 62
    value |= rand & 0x3FFF_FFFF_FFFF_FFFF
    return str(uuid.UUID(int=value))


@dataclass
class Task:
    """委派任务数据结构"""
    instruction: str
    id: str = field(default_factory=new_id)
    context: List[Message] = field(default_factory=list)
    available_tools: List[ToolDefinition] = field(default_factory=list)
    priority: TaskPriority = TaskPriority.NORMAL
    max_iterations: int = DEFAULT_MAX_ITERATIONS
    max_tokens: int = DEFAULT_MAX_TOKENS
    timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
    metadata: Dict[str, str] = field(default_factory=dict)

    @staticmethod
    def builder(instruction: str) -> "TaskBuilder":
        """创建任务构建器"""
        return TaskBuilder(instruction)

    def copy(self) -> "Task":
        """深拷贝（保留同一 ID）"""
        return copy.deepcopy(self)

    def with_priority(self, priority: TaskPriority) -> "Task":
        self.priority = priority
        return self

    def with_tools(self, tools: List[ToolDefinition]) -> "Task":
        self.available_tools = list(tools)
        return self

    def with_context(self, messages: List[Message]) -> "Task":
        self.context = list(messages)
        return self

    def with_timeout(self, seconds: float) -> "Task":
        self.timeout_seconds = seconds
        return self

    def with_max_iterations(self, iterations: int) -> "Task":
        self.max_iterations = iterations
        return self

    def to_dict(self) -> Dict[str, Any]:
        """序列化为字典"""
        return {
            "id": self.id,
            "instruction": self.instruction,
            "context": [msg.to_dict() for msg in self.context],
            "available_tools": [tool.to_schema() for tool in self.available_tools],
            "priority": self.priority.value,
            "max_iterations": self.max_iterations,
            "max_tokens": self.max_tokens,
            "timeout_seconds": self.timeout_seconds,
            "metadata": dict(self.metadata),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Task":
        """从字典反序列化"""
        return cls(
            id=data["id"],
            instruction=data["instruction"],
            context=[Message.from_dict(m) for m in data.get("context", [])],
            available_tools=[ToolDefinition.from_schema(t) for t in data.get("available_tools", [])],
            priority=TaskPriority(data.get("priority", TaskPriority.NORMAL.value)),
            max_iterations=data.get("max_iterations", DEFAULT_MAX_ITERATIONS),
            max_tokens=data.get("max_tokens", DEFAULT_MAX_TOKENS),
            timeout_seconds=data.get("timeout_seconds", DEFAULT_TIMEOUT_SECONDS),
            metadata=dict(data.get("metadata", {})),
        )


class TaskBuilder:
    """任务构建器"""

    def __init__(self, instruction: str):
        self._instruction = instruction
        self._context: List[Message] = []
        self._tools: List[ToolDefinition] = []
        self._priority = TaskPriority.NORMAL
        self._max_iterations = DEFAULT_MAX_ITERATIONS
        self._max_tokens = DEFAULT_MAX_TOKENS
        self._timeout_seconds: float = DEFAULT_TIMEOUT_SECONDS
        self._metadata: Dict[str, str] = {}

    def context(self, messages: List[Message]) -> "TaskBuilder":
        self._context = list(messages)
        return self

    def add_context(self, message: Message) -> "TaskBuilder":
        self._context.append(message)
        return self

    def tools(self, tools: List[ToolDefinition]) -> "TaskBuilder":
        self._tools = list(tools)
        return self

    def add_tool(self, tool: ToolDefinition) -> "TaskBuilder":
        self._tools.append(tool)
        return self

    def priority(self, priority: TaskPriority) -> "TaskBuilder":
        self._priority = priority
        return self

    def max_iterations(self, iterations: int) -> "TaskBuilder":
        self._max_iterations = iterations
        return self

    def max_tokens(self, tokens: int) -> "TaskBuilder":
        self._max_tokens = tokens
        return self

    def timeout(self, seconds: float) -> "TaskBuilder":
        self._timeout_seconds = seconds
        return self

    def metadata(self, key: str, value: str) -> "TaskBuilder":
        self._metadata[key] = value
        return self

    def build(self) -> Task:
        return Task(
            instruction=self._instruction,
            context=list(self._context),
            available_tools=list(self._tools),
            priority=self._priority,
            max_iterations=self._max_iterations,
            max_tokens=self._max_tokens,
            timeout_seconds=self._timeout_seconds,
            metadata=dict(self._metadata),
        )
