"""Anthropic Messages API client over aiohttp."""

import asyncio
import json
from typing import Any, Dict, Optional

import aiohttp

from ..config import LLMConfig
from ..exceptions import LLMAPIError, ModelCallError
from ..utils.logging import get_logger
from .interface import ILLMClient
from .models import MessagesRequest, MessagesResponse

logger = get_logger("llm.anthropic_client")

ANTHROPIC_VERSION = "2023-06-01"


class AnthropicClient(ILLMClient):
    """Claude 模型客户端（Messages API）"""

    def __init__(self, config: LLMConfig):
        """
        初始化客户端

        Args:
            config: 模型配置，base_url 为空时使用官方地址
        """
        self._config = config
        self._base_url = config.effective_base_url.rstrip("/")
        self._session: Optional[aiohttp.ClientSession] = None

    @property
    def model(self) -> str:
        return self._config.model

    async def _get_session(self) -> aiohttp.ClientSession:
        """获取或创建 HTTP 会话"""
        if self._session is None or self._session.closed:
            self._session = aiohttp.ClientSession(
                headers={
                    "x-api-key": self._config.api_key,
                    "anthropic-version": ANTHROPIC_VERSION,
                    "content-type": "application/json",
                }
            )
        return self._session

    async def send(self, request: MessagesRequest) -> MessagesResponse:
        """POST {base_url}/messages 并解析响应"""
        session = await self._get_session()
        url = f"{self._base_url}/messages"
        body = request.to_dict()

        logger.debug(
            f"Sending request: model={request.model}, messages={len(request.messages)}, "
            f"tools={len(request.tools or [])}"
        )

        try:
            async with session.post(
                url,
                json=body,
                timeout=aiohttp.ClientTimeout(total=self._config.timeout),
            ) as resp:
                text = await resp.text()
                status = resp.status
        except asyncio.TimeoutError as e:
            raise ModelCallError(
                f"Request timed out after {self._config.timeout}s"
            ) from e
        except aiohttp.ClientError as e:
            raise ModelCallError(f"Connection error: {e}") from e

        if status < 200 or status >= 300:
            raise LLMAPIError(f"API error {status}: {text}", status=status, body=text)

        return self._parse_response(text, status)

    @staticmethod
    def _parse_response(text: str, status: int) -> MessagesResponse:
        try:
            data: Dict[str, Any] = json.loads(text)
            return MessagesResponse.from_dict(data)
        except (ValueError, KeyError, TypeError) as e:
            raise LLMAPIError(
                f"Failed to parse response: {e}", status=status, body=text
            ) from e

    async def close(self) -> None:
        if self._session is not None and not self._session.closed:
            await self._session.close()
        self._session = None
