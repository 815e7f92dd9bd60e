"""语言模型层测试。

覆盖消息模型序列化、OpenAI 兼容格式转换、Anthropic 客户端错误处理、重试包装器与工厂函数。
"""

import json
from types import SimpleNamespace
from unittest.mock import AsyncMock

import pytest

from agent_delegation.config import LLMConfig, LLMProvider
from agent_delegation.exceptions import LLMAPIError, ModelCallError
from agent_delegation.llm import (
    AnthropicClient,
    Message,
    MessagesRequest,
    MessagesResponse,
    OpenAICompatibleClient,
    ResilientLLMClient,
    RetryConfig,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Usage,
    content_block_from_dict,
    create_llm_client,
    is_retryable_error,
)
from agent_delegation.llm.openai_client import convert_messages, convert_response, convert_tools


def _make_request(**kwargs) -> MessagesRequest:
    defaults = dict(model="m", max_tokens=100, messages=[Message.user("hi")])
    defaults.update(kwargs)
    return MessagesRequest(**defaults)


def _make_completion(content=None, tool_calls=None, finish_reason="stop", usage=(3, 4)):
    message = SimpleNamespace(content=content, tool_calls=tool_calls)
    return SimpleNamespace(
        id="resp-1",
        model="gpt",
        choices=[SimpleNamespace(message=message, finish_reason=finish_reason)],
        usage=SimpleNamespace(prompt_tokens=usage[0], completion_tokens=usage[1]) if usage else None,
    )


def _make_tool_call(call_id, name, arguments):
    return SimpleNamespace(id=call_id, function=SimpleNamespace(name=name, arguments=arguments))


# ---------------------------------------------------------------------------
# 消息模型
# ---------------------------------------------------------------------------

class TestMessageModels:
    """消息与响应模型测试"""

    def test_unknown_block_type_is_skipped(self):
        """无法识别的内容块类型返回 None"""
        assert content_block_from_dict({"type": "thinking", "thinking": "..."}) is None

    def test_message_from_string_content(self):
        """字符串内容视为单个文本块"""
        message = Message.from_dict({"role": "user", "content": "hello"})
        assert message.content == [TextBlock("hello")]

    def test_response_text_joins_blocks(self):
        """文本块按换行拼接，忽略工具调用块"""
        response = MessagesResponse.from_dict({
            "content": [
                {"type": "text", "text": "a"},
                {"type": "tool_use", "id": "t1", "name": "x", "input": {}},
                {"type": "text", "text": "b"},
            ],
            "stop_reason": "tool_use",
            "usage": {"input_tokens": 5, "output_tokens": 7},
        })
        assert response.text() == "a\nb"
        assert [b.name for b in response.tool_uses()] == ["x"]
        assert response.usage == Usage(5, 7)

    def test_response_keeps_missing_stop_reason(self):
        """缺失的 stop_reason 原样保留为 None，由执行循环判定为失败"""
        response = MessagesResponse.from_dict({"content": [{"type": "text", "text": "a"}]})
        assert response.stop_reason is None

    def test_request_omits_empty_optional_fields(self):
        body = _make_request().to_dict()
        assert "system" not in body
        assert "tools" not in body

    def test_request_includes_system_and_tools(self):
        tools = [{"name": "t", "description": "d", "input_schema": {"type": "object"}}]
        body = _make_request(system="be brief", tools=tools).to_dict()
        assert body["system"] == "be brief"
        assert body["tools"] == tools


# ---------------------------------------------------------------------------
# OpenAI 兼容格式转换
# ---------------------------------------------------------------------------

class TestOpenAIConversion:
    """chat-completions 格式转换测试"""

    def test_tools_become_functions(self):
        converted = convert_tools([{"name": "t", "description": "d", "input_schema": {"type": "object"}}])
        assert converted == [{
            "type": "function",
            "function": {"name": "t", "description": "d", "parameters": {"type": "object"}},
        }]
        assert convert_tools(None) is None

    def test_messages_conversion(self):
        """系统提示、tool_use 与 tool_result 的转换"""
        request = _make_request(
            system="sys",
            messages=[
                Message.user("question"),
                Message(role="assistant", content=[
                    TextBlock("thinking"),
                    ToolUseBlock(id="c1", name="lookup", input={"q": "x"}),
                ]),
                Message(role="user", content=[ToolResultBlock(tool_use_id="c1", content="found")]),
            ],
        )
        messages = convert_messages(request)

        assert messages[0] == {"role": "system", "content": "sys"}
        assert messages[1] == {"role": "user", "content": "question"}
        assert messages[2]["role"] == "assistant"
        assert messages[2]["content"] == "thinking"
        assert messages[2]["tool_calls"][0]["id"] == "c1"
        assert json.loads(messages[2]["tool_calls"][0]["function"]["arguments"]) == {"q": "x"}
        assert messages[3] == {"role": "tool", "tool_call_id": "c1", "content": "found"}

    def test_response_with_tool_calls(self):
        """工具调用参数被 JSON 解码，finish_reason tool_calls 映射为 tool_use"""
        completion = _make_completion(
            tool_calls=[_make_tool_call("c1", "lookup", '{"q": "x"}')],
            finish_reason="tool_calls",
        )
        response = convert_response(completion)
        assert response.stop_reason == "tool_use"
        assert response.tool_uses()[0].input == {"q": "x"}
        assert response.usage == Usage(3, 4)

    def test_undecodable_arguments_become_none(self):
        completion = _make_completion(
            tool_calls=[_make_tool_call("c1", "lookup", "{not json")],
            finish_reason="tool_calls",
        )
        assert convert_response(completion).tool_uses()[0].input is None

    def test_finish_reason_mapping(self):
        assert convert_response(_make_completion(content="hi")).stop_reason == "end_turn"
        assert convert_response(_make_completion(content="hi", finish_reason="content_filter")).stop_reason == "content_filter"
        assert convert_response(_make_completion(content="hi", finish_reason=None)).stop_reason is None

    def test_missing_usage(self):
        assert convert_response(_make_completion(content="hi", usage=None)).usage is None

    @pytest.mark.asyncio
    async def test_client_sends_converted_request(self):
        """客户端使用注入的 AsyncOpenAI 实例发送转换后的请求"""
        create = AsyncMock(return_value=_make_completion(content="answer"))
        fake_sdk = SimpleNamespace(chat=SimpleNamespace(completions=SimpleNamespace(create=create)))
        client = OpenAICompatibleClient(
            LLMConfig(api_key="k", model="gpt", provider=LLMProvider.OPENAI),
            client=fake_sdk,
        )

        response = await client.send(_make_request(model="gpt"))

        assert response.text() == "answer"
        kwargs = create.call_args.kwargs
        assert kwargs["model"] == "gpt"
        assert kwargs["messages"] == [{"role": "user", "content": "hi"}]
        assert "tools" not in kwargs


# ---------------------------------------------------------------------------
# Anthropic 客户端
# ---------------------------------------------------------------------------

class _FakeResponse:
    def __init__(self, status, text):
        self.status = status
        self._text = text

    async def text(self):
        return self._text

    async def __aenter__(self):
        return self

    async def __aexit__(self, *exc_info):
        return False


class _FakeSession:
    closed = False

    def __init__(self, response):
        self._response = response
        self.calls = []

    def post(self, url, json=None, timeout=None):
        self.calls.append((url, json))
        return self._response

    async def close(self):
        self.closed = True


def _make_anthropic_client(response) -> AnthropicClient:
    client = AnthropicClient(LLMConfig(api_key="k", base_url="https://example.test/v1/"))
    client._session = _FakeSession(response)
    return client


class TestAnthropicClient:
    """Messages API 客户端测试"""

    @pytest.mark.asyncio
    async def test_successful_response(self):
        body = {
            "id": "msg_1",
            "content": [{"type": "text", "text": "hello"}],
            "stop_reason": "end_turn",
            "usage": {"input_tokens": 1, "output_tokens": 2},
        }
        client = _make_anthropic_client(_FakeResponse(200, json.dumps(body)))

        response = await client.send(_make_request())

        assert response.text() == "hello"
        url, sent = client._session.calls[0]
        assert url == "https://example.test/v1/messages"
        assert sent["messages"][0]["role"] == "user"

    @pytest.mark.asyncio
    async def test_non_2xx_raises_api_error(self):
        client = _make_anthropic_client(_FakeResponse(529, "overloaded"))
        with pytest.raises(LLMAPIError) as exc_info:
            await client.send(_make_request())
        assert exc_info.value.status == 529
        assert exc_info.value.body == "overloaded"

    @pytest.mark.asyncio
    async def test_unparsable_body_raises_api_error(self):
        client = _make_anthropic_client(_FakeResponse(200, "<html>"))
        with pytest.raises(LLMAPIError):
            await client.send(_make_request())

    @pytest.mark.asyncio
    async def test_close(self):
        client = _make_anthropic_client(_FakeResponse(200, "{}"))
        session = client._session
        await client.close()
        assert session.closed


# ---------------------------------------------------------------------------
# 重试
# ---------------------------------------------------------------------------

class TestRetry:
    """重试机制测试"""

    def test_retryable_classification(self):
        assert is_retryable_error(TimeoutError())
        assert is_retryable_error(LLMAPIError("x", status=429))
        assert is_retryable_error(LLMAPIError("x", status=503))
        assert not is_retryable_error(LLMAPIError("x", status=400))
        assert is_retryable_error(ModelCallError("Connection error: reset"))
        assert not is_retryable_error(ValueError("bad input"))

    def test_delay_is_capped(self):
        config = RetryConfig(initial_delay=1.0, max_delay=5.0, jitter=False)
        assert config.get_delay(0) == 1.0
        assert config.get_delay(1) == 2.0
        assert config.get_delay(10) == 5.0

    @pytest.mark.asyncio
    async def test_retries_transient_errors(self):
        inner = AsyncMock()
        inner.model = "m"
        ok = MessagesResponse(content=[TextBlock("ok")], stop_reason="end_turn")
        inner.send.side_effect = [LLMAPIError("busy", status=503), ok]
        client = ResilientLLMClient(inner, RetryConfig(initial_delay=0.0, jitter=False))

        response = await client.send(_make_request())

        assert response is ok
        assert inner.send.await_count == 2

    @pytest.mark.asyncio
    async def test_non_retryable_propagates_immediately(self):
        inner = AsyncMock()
        inner.send.side_effect = LLMAPIError("bad request", status=400)
        client = ResilientLLMClient(inner, RetryConfig(initial_delay=0.0, jitter=False))

        with pytest.raises(LLMAPIError):
            await client.send(_make_request())
        assert inner.send.await_count == 1

    @pytest.mark.asyncio
    async def test_gives_up_after_max_attempts(self):
        inner = AsyncMock()
        inner.send.side_effect = LLMAPIError("busy", status=503)
        client = ResilientLLMClient(inner, RetryConfig(max_attempts=3, initial_delay=0.0, jitter=False))

        with pytest.raises(LLMAPIError):
            await client.send(_make_request())
        assert inner.send.await_count == 3


# ---------------------------------------------------------------------------
# 工厂
# ---------------------------------------------------------------------------

class TestFactory:
    """create_llm_client 测试"""

    def test_claude_provider(self):
        client = create_llm_client(LLMConfig(api_key="k"), resilient=False)
        assert isinstance(client, AnthropicClient)

    def test_openai_provider(self):
        client = create_llm_client(LLMConfig(api_key="k", provider=LLMProvider.OPENAI), resilient=False)
        assert isinstance(client, OpenAICompatibleClient)

    def test_resilient_wrapper(self):
        client = create_llm_client(LLMConfig(api_key="k", model="claude-x"))
        assert isinstance(client, ResilientLLMClient)
        assert isinstance(client.inner, AnthropicClient)
        assert client.model == "claude-x"
