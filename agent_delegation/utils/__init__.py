"""工具模块包。

- 日志工具：统一的 logger 工厂函数、根 logger 配置以及按任务标注的 TaskLogAdapter
"""

from agent_delegation.utils.logging import (
    TaskLogAdapter,
    configure_root_logger,
    get_logger,
    get_task_logger,
)

__all__ = [
    "get_logger",
    "get_task_logger",
    "configure_root_logger",
    "TaskLogAdapter",
]
