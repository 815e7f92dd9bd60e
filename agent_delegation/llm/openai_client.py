"""OpenAI-compatible chat completions client.

Translates between the Messages API shapes used throughout the engine and the
chat-completions format (OpenAI, GLM, Z.ai and local OpenAI-compatible servers).
"""

import asyncio
import json
from typing import Any, Dict, List, Optional

from openai import APIConnectionError, APIStatusError, APITimeoutError, AsyncOpenAI

from ..config import LLMConfig
from ..exceptions import LLMAPIError, ModelCallError
from ..utils.logging import get_logger
from .interface import ILLMClient
from .models import (
    ContentBlock,
    Message,
    MessagesRequest,
    MessagesResponse,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Usage,
)

logger = get_logger("llm.openai_client")

# finish_reason -> stop_reason
_FINISH_REASON_MAP = {
    "stop": "end_turn",
    "tool_calls": "tool_use",
    "length": "max_tokens",
}


def convert_tools(tools: Optional[List[Dict[str, Any]]]) -> Optional[List[Dict[str, Any]]]:
    """将 {name, description, input_schema} 转换为 function 工具格式"""
    if not tools:
        return None
    return [
        {
            "type": "function",
            "function": {
                "name": tool["name"],
                "description": tool.get("description", ""),
                "parameters": tool.get("input_schema", {"type": "object", "properties": {}}),
            },
        }
        for tool in tools
    ]


def _convert_message(message: Message) -> List[Dict[str, Any]]:
    text = message.text_content()

    if message.role == "assistant":
        tool_uses = message.tool_uses()
        converted: Dict[str, Any] = {"role": "assistant", "content": text or None}
        if tool_uses:
            converted["tool_calls"] = [
                {
                    "id": block.id,
                    "type": "function",
                    "function": {
                        "name": block.name,
                        "arguments": json.dumps(block.input if block.input is not None else {}),
                    },
                }
                for block in tool_uses
            ]
        return [converted]

    # 工具结果必须紧跟在对应的 assistant tool_calls 之后
    converted_list: List[Dict[str, Any]] = [
        {"role": "tool", "tool_call_id": block.tool_use_id, "content": block.content}
        for block in message.tool_results()
    ]
    if text:
        converted_list.append({"role": message.role, "content": text})
    return converted_list


def convert_messages(request: MessagesRequest) -> List[Dict[str, Any]]:
    """将请求转换为 chat-completions 消息列表，系统提示作为首条 system 消息"""
    messages: List[Dict[str, Any]] = []
    if request.system:
        messages.append({"role": "system", "content": request.system})
    for message in request.messages:
        messages.extend(_convert_message(message))
    return messages


def _parse_arguments(arguments: Optional[str]) -> Any:
    if not arguments:
        return None
    try:
        return json.loads(arguments)
    except ValueError:
        return None


def convert_response(response: Any) -> MessagesResponse:
    """将 chat-completions 响应转换为 MessagesResponse"""
    if not response.choices:
        raise LLMAPIError("Response contained no choices")

    choice = response.choices[0]
    message = choice.message

    content: List[ContentBlock] = []
    if message.content:
        content.append(TextBlock(message.content))
    for tool_call in message.tool_calls or []:
        content.append(
            ToolUseBlock(
                id=tool_call.id,
                name=tool_call.function.name,
                input=_parse_arguments(tool_call.function.arguments),
            )
        )

    finish_reason = choice.finish_reason
    stop_reason = _FINISH_REASON_MAP.get(finish_reason, finish_reason)

    usage = None
    if response.usage:
        usage = Usage(
            input_tokens=response.usage.prompt_tokens or 0,
            output_tokens=response.usage.completion_tokens or 0,
        )

    return MessagesResponse(
        content=content,
        stop_reason=stop_reason,
        usage=usage,
        id=getattr(response, "id", "") or "",
        model=getattr(response, "model", "") or "",
    )


class OpenAICompatibleClient(ILLMClient):
    """OpenAI 兼容接口客户端"""

    def __init__(self, config: LLMConfig, client: Optional[AsyncOpenAI] = None):
        """
        初始化客户端

        Args:
            config: 模型配置
            client: 预先构造的 AsyncOpenAI 实例（可选，便于测试注入）
        """
        self._config = config
        self._client = client

    @property
    def model(self) -> str:
        return self._config.model

    def _get_client(self) -> AsyncOpenAI:
        """获取或创建 OpenAI 客户端"""
        if self._client is None:
            self._client = AsyncOpenAI(
                base_url=self._config.effective_base_url,
                api_key=self._config.api_key or "not-needed",
            )
        return self._client

    async def send(self, request: MessagesRequest) -> MessagesResponse:
        client = self._get_client()

        kwargs: Dict[str, Any] = {
            "model": request.model,
            "messages": convert_messages(request),
            "max_tokens": request.max_tokens,
        }
        tools = convert_tools(request.tools)
        if tools:
            kwargs["tools"] = tools
            kwargs["tool_choice"] = "auto"

        try:
            response = await asyncio.wait_for(
                client.chat.completions.create(**kwargs),
                timeout=self._config.timeout,
            )
        except asyncio.TimeoutError as e:
            raise ModelCallError(
                f"Request timed out after {self._config.timeout}s"
            ) from e
        except APITimeoutError as e:
            raise ModelCallError(f"Request timed out: {e}") from e
        except APIConnectionError as e:
            raise ModelCallError(f"Connection error: {e}") from e
        except APIStatusError as e:
            raise LLMAPIError(
                f"API error {e.status_code}: {e.message}",
                status=e.status_code,
                body=str(e.body) if e.body is not None else None,
            ) from e

        return convert_response(response)

    async def close(self) -> None:
        if self._client is not None:
            await self._client.close()
            self._client = None
