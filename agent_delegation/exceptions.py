"""Exception hierarchy for the delegation engine."""

from typing import Optional


class DelegationError(Exception):
    """委派引擎错误基类"""
    pass


class ConfigurationError(DelegationError):
    """配置错误"""
    pass


class ModelCallError(DelegationError):
    """语言模型调用失败"""
    pass


class LLMAPIError(ModelCallError):
    """模型 API 返回非成功状态或无法解析的响应"""

    def __init__(self, message: str, status: Optional[int] = None, body: Optional[str] = None):
        super().__init__(message)
        self.status = status
        self.body = body


class ProtocolError(DelegationError):
    """模型返回了无法识别的 stop_reason"""

    def __init__(self, stop_reason: str):
        super().__init__(f"Unknown stop_reason: {stop_reason}")
        self.stop_reason = stop_reason


class ToolExecutionError(DelegationError):
    """工具执行错误"""
    pass


class ToolNotFoundError(ToolExecutionError):
    """工具未找到"""

    def __init__(self, tool_name: str):
        super().__init__(f"Unknown tool: {tool_name}")
        self.tool_name = tool_name


class RoutingError(DelegationError):
    """任务路由错误基类"""
    pass


class NoAgentAvailableError(RoutingError):
    """没有可处理任务的智能体"""

    def __init__(self, task_id: Optional[str] = None):
        message = "No agent available for task"
        if task_id:
            message = f"{message} {task_id}"
        super().__init__(message)
        self.task_id = task_id


class AgentNotFoundError(RoutingError):
    """指定的智能体不存在"""

    def __init__(self, agent_id: str):
        super().__init__(f"Agent not found: {agent_id}")
        self.agent_id = agent_id


class BatchExecutionError(DelegationError):
    """fail_fast 模式下批量执行的首个失败"""

    def __init__(self, task_id: str, cause: BaseException):
        super().__init__(f"Task {task_id} failed: {cause}")
        self.task_id = task_id
        self.cause = cause
