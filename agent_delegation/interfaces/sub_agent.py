"""Sub Agent interface."""

from abc import ABC, abstractmethod
from typing import List

from ..models.capability import AgentCapability
from ..models.result import SubAgentResult
from ..models.task import Task


class ISubAgent(ABC):
    """子智能体接口"""

    @property
    @abstractmethod
    def id(self) -> str:
        """智能体唯一 ID"""
        pass

    @property
    @abstractmethod
    def name(self) -> str:
        """智能体名称"""
        pass

    @property
    @abstractmethod
    def description(self) -> str:
        """智能体描述"""
        pass

    @property
    @abstractmethod
    def capabilities(self) -> List[AgentCapability]:
        """声明的能力列表"""
        pass

    def can_handle(self, task: Task) -> bool:
        """
        判断是否能处理任务

        没有声明任何能力的智能体视为通用智能体，可处理所有任务。
        """
        capabilities = self.capabilities
        if not capabilities:
            return True
        return any(cap.matches(task.instruction) for cap in capabilities)

    def match_score(self, task: Task) -> int:
        """与任务指令匹配的能力数量"""
        return sum(1 for cap in self.capabilities if cap.matches(task.instruction))

    @abstractmethod
    async def execute(self, task: Task) -> SubAgentResult:
        """
        执行任务

        Args:
            task: 要执行的任务

        Returns:
            执行结果；无法识别的 stop_reason 以失败结果返回
        """
        pass
