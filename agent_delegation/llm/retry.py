"""Retry mechanisms for language-model clients."""

import asyncio
import random
from dataclasses import dataclass
from typing import Optional

from ..exceptions import LLMAPIError
from ..utils.logging import get_logger
from .interface import ILLMClient
from .models import MessagesRequest, MessagesResponse

logger = get_logger("llm.retry")


@dataclass
class RetryConfig:
    """重试配置"""
    max_attempts: int = 3
    initial_delay: float = 1.0  # 秒
    max_delay: float = 30.0
    exponential_base: float = 2.0
    jitter: bool = True

    def get_delay(self, attempt: int) -> float:
        """
        计算重试延迟（指数退避）

        Args:
            attempt: 当前尝试次数（从 0 开始）

        Returns:
            延迟时间（秒）
        """
        delay = min(
            self.initial_delay * (self.exponential_base ** attempt),
            self.max_delay
        )
        if self.jitter:
            # 添加 ±50% 的随机抖动
            delay *= (0.5 + random.random())
        return delay


_RETRYABLE_PATTERNS = (
    "timeout",
    "timed out",
    "connection",
    "network",
    "rate limit",
    "too many requests",
    "overloaded",
)


def is_retryable_error(error: Exception) -> bool:
    """
    判断错误是否可重试

    超时、连接错误、429 以及 5xx 视为暂时性错误。

    Args:
        error: 异常对象

    Returns:
        是否可重试
    """
    if isinstance(error, (asyncio.TimeoutError, TimeoutError)):
        return True

    if isinstance(error, LLMAPIError) and error.status is not None:
        return error.status == 429 or error.status >= 500

    error_str = str(error).lower()
    return any(pattern in error_str for pattern in _RETRYABLE_PATTERNS)


async def execute_with_retry(
    client: ILLMClient,
    request: MessagesRequest,
    retry_config: Optional[RetryConfig] = None,
) -> MessagesResponse:
    """
    带重试的模型调用

    Args:
        client: 模型客户端
        request: 模型请求
        retry_config: 重试配置

    Returns:
        模型响应

    Raises:
        Exception: 不可重试的错误立即抛出，重试耗尽后抛出最后一个异常
    """
    retry_cfg = retry_config or RetryConfig()
    attempts = max(1, retry_cfg.max_attempts)

    for attempt in range(attempts):
        try:
            return await client.send(request)
        except Exception as e:
            if not is_retryable_error(e) or attempt >= attempts - 1:
                raise

            delay = retry_cfg.get_delay(attempt)
            logger.warning(
                f"Model call failed (attempt {attempt + 1}/{attempts}), "
                f"retrying in {delay:.2f}s: {e}"
            )
            await asyncio.sleep(delay)

    raise RuntimeError("unreachable")


class ResilientLLMClient(ILLMClient):
    """
    带重试机制的模型客户端包装器

    对暂时性错误自动进行指数退避重试。
    """

    def __init__(self, client: ILLMClient, retry_config: Optional[RetryConfig] = None):
        """
        初始化弹性客户端

        Args:
            client: 底层模型客户端
            retry_config: 重试配置
        """
        self._client = client
        self._retry_config = retry_config or RetryConfig()

    @property
    def model(self) -> str:
        return self._client.model

    @property
    def inner(self) -> ILLMClient:
        return self._client

    async def send(self, request: MessagesRequest) -> MessagesResponse:
        """发送请求（带重试）"""
        return await execute_with_retry(self._client, request, self._retry_config)

    async def close(self) -> None:
        await self._client.close()
