"""Language-model client interface."""

from abc import ABC, abstractmethod

from .models import MessagesRequest, MessagesResponse


class ILLMClient(ABC):
    """语言模型客户端接口"""

    @property
    @abstractmethod
    def model(self) -> str:
        """默认模型名称"""
        pass

    @abstractmethod
    async def send(self, request: MessagesRequest) -> MessagesResponse:
        """
        发送一次模型请求

        Args:
            request: 包含模型、max_tokens、系统提示、消息历史和工具 schema 的请求

        Returns:
            模型响应

        Raises:
            ModelCallError: 网络或 API 错误
        """
        pass

    async def close(self) -> None:
        """释放底层连接（默认无操作）"""
        return None
