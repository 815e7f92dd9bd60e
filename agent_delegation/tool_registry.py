"""Tool Registry implementation."""

import asyncio
import inspect
import json
from typing import Any, Dict, List, Optional

from .exceptions import ToolNotFoundError
from .interfaces.tool_executor import IToolExecutor
from .models.task import new_id
from .models.tool import ToolCallRecord, ToolDefinition, ToolResult
from .utils.logging import get_logger

logger = get_logger("tool_registry")


def stringify_output(value: Any) -> str:
    """将处理函数返回值转换为文本，dict/list 使用 JSON"""
    if value is None:
        return ""
    if isinstance(value, str):
        return value
    if isinstance(value, (dict, list)):
        return json.dumps(value, ensure_ascii=False)
    return str(value)


class ToolRegistry(IToolExecutor):
    """工具注册表实现"""

    def __init__(self, default_timeout: float = 30.0):
        self._tools: Dict[str, ToolDefinition] = {}
        self._call_history: List[ToolCallRecord] = []
        self._default_timeout = default_timeout

    def register_tool(self, tool: ToolDefinition) -> None:
        """注册工具（同名覆盖）"""
        self._tools[tool.name] = tool
        logger.debug(f"Registered tool: {tool.name}")

    def unregister_tool(self, tool_name: str) -> bool:
        """注销工具"""
        if tool_name in self._tools:
            del self._tools[tool_name]
            return True
        return False

    def get_tool(self, tool_name: str) -> Optional[ToolDefinition]:
        """获取工具定义"""
        return self._tools.get(tool_name)

    def list_tools(self) -> List[ToolDefinition]:
        """列出所有已注册工具"""
        return list(self._tools.values())

    def definitions(self) -> List[ToolDefinition]:
        """向模型声明的工具定义（不含处理函数）"""
        return [tool.without_handler() for tool in self._tools.values()]

    async def execute(self, name: str, tool_input: Any) -> ToolResult:
        """
        调用工具

        Args:
            name: 工具名称
            tool_input: 调用参数，dict 以关键字参数传入处理函数

        Returns:
            工具执行结果，超时或处理函数异常时返回错误结果

        Raises:
            ToolNotFoundError: 工具未注册
        """
        tool = self.get_tool(name)
        if tool is None:
            raise ToolNotFoundError(name)

        if tool.handler is None:
            result = ToolResult.error(f"Tool '{name}' has no handler")
        else:
            timeout = tool.timeout if tool.timeout > 0 else self._default_timeout
            try:
                value = await asyncio.wait_for(
                    self._invoke(tool, tool_input),
                    timeout=timeout
                )
                result = value if isinstance(value, ToolResult) else ToolResult.success(stringify_output(value))
            except asyncio.TimeoutError:
                logger.warning(f"Tool '{name}' timed out after {timeout}s")
                result = ToolResult.error(f"Tool call timed out after {timeout}s")
            except Exception as e:
                logger.warning(f"Tool '{name}' failed: {e}")
                result = ToolResult.error(str(e))

        self._call_history.append(
            ToolCallRecord(
                id=new_id(),
                name=name,
                input=tool_input,
                output=result.output,
                is_error=result.is_error,
            )
        )
        return result

    @staticmethod
    async def _invoke(tool: ToolDefinition, tool_input: Any) -> Any:
        if isinstance(tool_input, dict):
            value = tool.handler(**tool_input)
        elif tool_input is None:
            value = tool.handler()
        else:
            value = tool.handler(tool_input)
        if inspect.isawaitable(value):
            value = await value
        return value

    def get_call_history(self, tool_name: Optional[str] = None) -> List[ToolCallRecord]:
        """获取工具调用历史"""
        if tool_name is None:
            return list(self._call_history)
        return [r for r in self._call_history if r.name == tool_name]

    def get_total_calls(self) -> int:
        """获取总调用次数"""
        return len(self._call_history)
