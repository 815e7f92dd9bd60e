"""Enumeration types for the delegation engine."""

from enum import Enum
from typing import Optional


class TaskPriority(Enum):
    """任务优先级枚举（目前仅作为元数据携带，不影响执行顺序）"""
    LOW = "low"
    NORMAL = "normal"
    HIGH = "high"
    CRITICAL = "critical"

    @property
    def weight(self) -> int:
        """调度权重"""
        return _PRIORITY_WEIGHTS[self]


_PRIORITY_WEIGHTS = {
    TaskPriority.LOW: 1,
    TaskPriority.NORMAL: 5,
    TaskPriority.HIGH: 10,
    TaskPriority.CRITICAL: 20,
}


class TaskStatus(Enum):
    """任务状态枚举"""
    PENDING = "pending"
    QUEUED = "queued"
    RUNNING = "running"
    COMPLETED = "completed"
    FAILED = "failed"
    CANCELLED = "cancelled"
    TIMEOUT = "timeout"


class StopReason(Enum):
    """模型响应的停止原因"""
    END_TURN = "end_turn"
    STOP_SEQUENCE = "stop_sequence"
    STOP = "stop"
    TOOL_USE = "tool_use"
    TOOL_CALLS = "tool_calls"
    MAX_TOKENS = "max_tokens"

    @classmethod
    def is_final(cls, value: Optional[str]) -> bool:
        """是否为结束对话的停止原因"""
        return value in (cls.END_TURN.value, cls.STOP_SEQUENCE.value, cls.STOP.value)

    @classmethod
    def is_tool_request(cls, value: Optional[str]) -> bool:
        """是否为请求工具调用的停止原因"""
        return value in (cls.TOOL_USE.value, cls.TOOL_CALLS.value)


class AggregationStrategy(Enum):
    """结果聚合策略"""
    CONCATENATE = "concatenate"
    SUCCESS_ONLY = "success_only"
    WITH_SUMMARY = "with_summary"
    CUSTOM = "custom"
