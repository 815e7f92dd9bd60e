"""统一日志配置模块。

提供标准化的日志工厂函数和根 logger 配置，确保委派引擎各模块使用一致的日志格式。
所有 logger 名称遵循 ``agent_delegation.{module_name}`` 的层级命名约定。
"""

import logging
from typing import Any, MutableMapping, Optional, Tuple

# 默认日志格式：时间戳 [级别] 模块名: 消息
DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
# 默认日期格式
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"
# 根 logger 名称前缀
_ROOT_LOGGER_NAME = "agent_delegation"


def get_logger(module_name: Optional[str], level: Optional[int] = None) -> logging.Logger:
    """获取标准化的 logger 实例。

    名称格式为 ``agent_delegation.{module_name}``。``module_name`` 为空字符串或
    ``None`` 时回退到根名称 ``agent_delegation``。

    Args:
        module_name: 模块名称，将作为 logger 名称的一部分。
        level: 日志级别，默认不设置（继承父 logger 级别）。

    Returns:
        配置好的 Logger 实例。
    """
    if not module_name:
        logger_name = _ROOT_LOGGER_NAME
    else:
        logger_name = f"{_ROOT_LOGGER_NAME}.{module_name}"

    logger = logging.getLogger(logger_name)

    if level is not None:
        logger.setLevel(level)

    return logger


def configure_root_logger(
    level: int = logging.INFO,
    format_str: str = DEFAULT_FORMAT,
    date_format: str = DEFAULT_DATE_FORMAT,
) -> None:
    """配置根 logger。

    为 ``agent_delegation`` 根 logger 添加 StreamHandler 并设置统一的日志格式。
    已有 handler 时不会重复添加。

    Args:
        level: 日志级别，默认为 ``logging.INFO``。
        format_str: 日志格式字符串。
        date_format: 日期格式字符串。
    """
    root_logger = logging.getLogger(_ROOT_LOGGER_NAME)
    root_logger.setLevel(level)

    # 避免重复添加 handler
    if not root_logger.handlers:
        handler = logging.StreamHandler()
        handler.setLevel(level)
        formatter = logging.Formatter(format_str, datefmt=date_format)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)


class TaskLogAdapter(logging.LoggerAdapter):
    """为每条日志附加任务与智能体标识的 LoggerAdapter。

    消息前缀形如 ``[task=0190ab12 agent=coder]``，同时把完整的 ``task_id`` 和
    ``agent`` 写入 LogRecord 的 extra 字段，便于并发执行时区分各任务的日志。
    """

    def process(self, msg: Any, kwargs: MutableMapping[str, Any]) -> Tuple[Any, MutableMapping[str, Any]]:
        task_id = self.extra.get("task_id", "")
        agent = self.extra.get("agent")
        prefix = f"task={task_id[:8]}"
        if agent:
            prefix = f"{prefix} agent={agent}"
        kwargs["extra"] = {**self.extra, **kwargs.get("extra", {})}
        return f"[{prefix}] {msg}", kwargs


def get_task_logger(module_name: Optional[str], task_id: str, agent: Optional[str] = None) -> TaskLogAdapter:
    """获取绑定到单个任务的 logger。

    Args:
        module_name: 模块名称，规则与 ``get_logger`` 相同。
        task_id: 任务 ID，消息前缀只显示前 8 位。
        agent: 执行任务的智能体名称（可选）。

    Returns:
        TaskLogAdapter 实例。
    """
    extra = {"task_id": task_id}
    if agent:
        extra["agent"] = agent
    return TaskLogAdapter(get_logger(module_name), extra)
