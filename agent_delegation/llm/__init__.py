"""Language-model clients and message types."""

from .models import (
    ContentBlock,
    Message,
    MessagesRequest,
    MessagesResponse,
    TextBlock,
    ToolResultBlock,
    ToolUseBlock,
    Usage,
    content_block_from_dict,
)
from .interface import ILLMClient
from .anthropic_client import AnthropicClient
from .openai_client import OpenAICompatibleClient
from .retry import ResilientLLMClient, RetryConfig, is_retryable_error, execute_with_retry
from .factory import create_llm_client

__all__ = [
    "ContentBlock",
    "Message",
    "MessagesRequest",
    "MessagesResponse",
    "TextBlock",
    "ToolResultBlock",
    "ToolUseBlock",
    "Usage",
    "content_block_from_dict",
    "ILLMClient",
    "AnthropicClient",
    "OpenAICompatibleClient",
    "ResilientLLMClient",
    "RetryConfig",
    "is_retryable_error",
    "execute_with_retry",
    "create_llm_client",
]
