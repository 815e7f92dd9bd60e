"""Result-related data models."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional

from .enums import TaskStatus
from .tool import ToolCallRecord


@dataclass
class SubAgentResult:
    """子智能体执行结果"""
    task_id: str
    agent_id: str
    output: str = ""
    success: bool = False
    error: Optional[str] = None
    iterations: int = 0
    input_tokens: int = 0
    output_tokens: int = 0
    execution_time_ms: int = 0
    status: TaskStatus = TaskStatus.PENDING
    tool_calls: List[ToolCallRecord] = field(default_factory=list)

    @classmethod
    def success_result(
        cls,
        task_id: str,
        agent_id: str,
        output: str,
        iterations: int,
        input_tokens: int,
        output_tokens: int,
        execution_time_ms: int,
        tool_calls: Optional[List[ToolCallRecord]] = None,
    ) -> "SubAgentResult":
        """创建成功结果"""
        return cls(
            task_id=task_id,
            agent_id=agent_id,
            output=output,
            success=True,
            error=None,
            iterations=iterations,
            input_tokens=input_tokens,
            output_tokens=output_tokens,
            execution_time_ms=execution_time_ms,
            status=TaskStatus.COMPLETED,
            tool_calls=list(tool_calls or []),
        )

    @classmethod
    def failure(
        cls,
        task_id: str,
        agent_id: str,
        error: str,
        status: TaskStatus = TaskStatus.FAILED,
    ) -> "SubAgentResult":
        """创建失败结果（迭代次数与 token 计数均为 0）"""
        return cls(
            task_id=task_id,
            agent_id=agent_id,
            output="",
            success=False,
            error=error,
            status=status,
        )

    @classmethod
    def timeout(cls, task_id: str, agent_id: str) -> "SubAgentResult":
        """创建超时结果"""
        return cls.failure(task_id, agent_id, "Task execution timed out", TaskStatus.TIMEOUT)

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def to_dict(self) -> Dict[str, Any]:
        """序列化为字典"""
        return {
            "task_id": self.task_id,
            "agent_id": self.agent_id,
            "output": self.output,
            "success": self.success,
            "error": self.error,
            "iterations": self.iterations,
            "input_tokens": self.input_tokens,
            "output_tokens": self.output_tokens,
            "execution_time_ms": self.execution_time_ms,
            "status": self.status.value,
            "tool_calls": [tc.to_dict() for tc in self.tool_calls],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "SubAgentResult":
        """从字典反序列化"""
        return cls(
            task_id=data["task_id"],
            agent_id=data["agent_id"],
            output=data.get("output", ""),
            success=data["success"],
            error=data.get("error"),
            iterations=data.get("iterations", 0),
            input_tokens=data.get("input_tokens", 0),
            output_tokens=data.get("output_tokens", 0),
            execution_time_ms=data.get("execution_time_ms", 0),
            status=TaskStatus(data.get("status", TaskStatus.PENDING.value)),
            tool_calls=[ToolCallRecord.from_dict(tc) for tc in data.get("tool_calls", [])],
        )
