"""Language-model client factory."""

from typing import Optional

from ..config import LLMConfig, LLMProvider
from ..utils.logging import get_logger
from .anthropic_client import AnthropicClient
from .interface import ILLMClient
from .openai_client import OpenAICompatibleClient
from .retry import ResilientLLMClient, RetryConfig

logger = get_logger("llm.factory")


def create_llm_client(
    config: LLMConfig,
    retry_config: Optional[RetryConfig] = None,
    resilient: bool = True,
) -> ILLMClient:
    """
    根据配置创建模型客户端

    Args:
        config: 模型配置，provider 决定使用 Claude 还是 OpenAI 兼容接口
        retry_config: 重试配置
        resilient: 是否包装重试机制

    Returns:
        模型客户端
    """
    if config.provider is LLMProvider.OPENAI:
        client: ILLMClient = OpenAICompatibleClient(config)
    else:
        client = AnthropicClient(config)

    logger.info(
        f"Created {config.provider.value} client: model={config.model}, "
        f"base_url={config.effective_base_url}"
    )

    if resilient:
        return ResilientLLMClient(client, retry_config)
    return client
