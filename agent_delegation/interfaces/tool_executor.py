"""Tool executor interface."""

from abc import ABC, abstractmethod
from typing import Any, List

from ..models.tool import ToolDefinition, ToolResult


class IToolExecutor(ABC):
    """工具执行接口"""

    @abstractmethod
    async def execute(self, name: str, tool_input: Any) -> ToolResult:
        """
        按名称执行工具

        Args:
            name: 工具名称
            tool_input: 模型给出的工具参数

        Returns:
            工具执行结果

        Raises:
            ToolNotFoundError: 工具不存在
        """
        pass

    @abstractmethod
    def definitions(self) -> List[ToolDefinition]:
        """获取所有可用工具的定义（按注册顺序）"""
        pass
