"""Tool-related data models."""

from dataclasses import dataclass, field
from typing import Any, Awaitable, Callable, Dict, Optional


@dataclass
class ToolDefinition:
    """工具定义

    ``handler`` 为空时表示仅用于向模型声明的 schema（例如任务自带的工具列表）。
    """
    name: str
    description: str
    input_schema: Dict[str, Any] = field(default_factory=lambda: {"type": "object", "properties": {}})
    handler: Optional[Callable[..., Awaitable[Any]]] = None
    timeout: float = 30.0

    def to_schema(self) -> Dict[str, Any]:
        """转换为 Messages API 的工具 schema"""
        return {
            "name": self.name,
            "description": self.description,
            "input_schema": self.input_schema,
        }

    def without_handler(self) -> "ToolDefinition":
        """仅保留 schema 的副本"""
        return ToolDefinition(
            name=self.name,
            description=self.description,
            input_schema=dict(self.input_schema),
            timeout=self.timeout,
        )

    @classmethod
    def from_schema(cls, data: Dict[str, Any]) -> "ToolDefinition":
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            input_schema=data.get("input_schema", {"type": "object", "properties": {}}),
        )


@dataclass
class ToolResult:
    """工具执行结果"""
    output: str
    is_error: bool = False

    @classmethod
    def success(cls, output: str) -> "ToolResult":
        return cls(output=output, is_error=False)

    @classmethod
    def error(cls, output: str) -> "ToolResult":
        return cls(output=output, is_error=True)


@dataclass
class ToolCallRecord:
    """工具调用记录"""
    id: str
    name: str
    input: Any
    output: str
    is_error: bool = False

    def to_dict(self) -> Dict[str, Any]:
        """序列化为字典"""
        return {
            "id": self.id,
            "name": self.name,
            "input": self.input,
            "output": self.output,
            "is_error": self.is_error,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ToolCallRecord":
        """从字典反序列化"""
        return cls(
            id=data["id"],
            name=data["name"],
            input=data.get("input"),
            output=data.get("output", ""),
            is_error=data.get("is_error", False),
        )
