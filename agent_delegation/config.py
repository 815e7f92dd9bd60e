"""Configuration management for the delegation engine.

This module provides:
- LLMConfig: language-model provider settings
- DelegationConfig: concurrency / retry / failure policy for task delegation
- OrchestratorConfig: loader combining defaults, a YAML file and environment variables

配置优先级（从高到低）：
1. 环境变量
2. 配置文件
3. 默认值
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Any, Dict, List, Optional

import yaml

from .exceptions import ConfigurationError

DEFAULT_MODEL = "claude-sonnet-4-20250514"


class LLMProvider(Enum):
    """模型服务提供商"""
    CLAUDE = "claude"
    OPENAI = "openai"

    @classmethod
    def parse(cls, value: Optional[str]) -> "LLMProvider":
        """解析提供商名称，openai/glm/zai 视为 OpenAI 兼容接口，其余为 Claude"""
        if value and value.strip().lower() in ("openai", "glm", "zai"):
            return cls.OPENAI
        return cls.CLAUDE

    def default_base_url(self) -> str:
        if self is LLMProvider.OPENAI:
            return "https://api.openai.com/v1"
        return "https://api.anthropic.com/v1"


@dataclass
class LLMConfig:
    """语言模型配置"""
    api_key: str = ""
    model: str = DEFAULT_MODEL
    provider: LLMProvider = LLMProvider.CLAUDE
    base_url: Optional[str] = None
    timeout: float = 120.0

    @property
    def effective_base_url(self) -> str:
        return self.base_url or self.provider.default_base_url()

    def to_dict(self) -> Dict[str, Any]:
        return {
            "model": self.model,
            "provider": self.provider.value,
            "base_url": self.base_url,
            "timeout": self.timeout,
        }


@dataclass
class DelegationConfig:
    """任务委派配置

    Attributes:
        max_concurrency: 同时执行的子智能体上限
        default_timeout_secs: 委派任务默认超时（秒）
        default_max_iterations: 子智能体循环默认最大迭代次数
        fail_fast: 首个失败即中止整批执行
        retry_failed: 是否重试失败任务
        max_retries: 最大重试次数
        retain_failures: 非 fail_fast 模式下保留失败记录而非丢弃
    """
    max_concurrency: int = 4
    default_timeout_secs: int = 120
    default_max_iterations: int = 10
    fail_fast: bool = False
    retry_failed: bool = True
    max_retries: int = 2
    retain_failures: bool = False

    def to_dict(self) -> Dict[str, Any]:
        return {
            "max_concurrency": self.max_concurrency,
            "default_timeout_secs": self.default_timeout_secs,
            "default_max_iterations": self.default_max_iterations,
            "fail_fast": self.fail_fast,
            "retry_failed": self.retry_failed,
            "max_retries": self.max_retries,
            "retain_failures": self.retain_failures,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "DelegationConfig":
        defaults = cls()
        return cls(
            max_concurrency=int(data.get("max_concurrency", defaults.max_concurrency)),
            default_timeout_secs=int(data.get("default_timeout_secs", defaults.default_timeout_secs)),
            default_max_iterations=int(data.get("default_max_iterations", defaults.default_max_iterations)),
            fail_fast=_to_bool(data.get("fail_fast", defaults.fail_fast)),
            retry_failed=_to_bool(data.get("retry_failed", defaults.retry_failed)),
            max_retries=int(data.get("max_retries", defaults.max_retries)),
            retain_failures=_to_bool(data.get("retain_failures", defaults.retain_failures)),
        )


def _to_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.strip().lower() in ("1", "true", "yes", "on")
    return bool(value)


class OrchestratorConfig:
    """委派引擎配置管理

    支持从环境变量和 YAML 配置文件加载配置，并提供配置验证功能。
    """

    def __init__(self, config_file: Optional[str] = None, load_env: bool = True):
        """初始化配置管理器

        Args:
            config_file: 配置文件路径（可选）
            load_env: 是否读取环境变量
        """
        self.llm = LLMConfig()
        self.delegation = DelegationConfig()
        self._config_file = config_file

        # 先从文件加载
        if config_file:
            self.load_from_file(config_file)

        # 环境变量优先级更高
        if load_env:
            self.load_from_env()

    def load_from_env(self) -> None:
        """从环境变量加载配置

        环境变量映射：
        - LLM_API_KEY / CLAUDE_API_KEY -> llm.api_key
        - LLM_MODEL / CLAUDE_MODEL -> llm.model
        - LLM_PROVIDER -> llm.provider (openai/glm/zai 为 OpenAI 兼容接口)
        - LLM_BASE_URL -> llm.base_url
        - DELEGATION_MAX_CONCURRENCY -> delegation.max_concurrency
        - DELEGATION_FAIL_FAST -> delegation.fail_fast
        - DELEGATION_MAX_RETRIES -> delegation.max_retries
        - DELEGATION_DEFAULT_TIMEOUT -> delegation.default_timeout_secs
        """
        if api_key := os.environ.get("LLM_API_KEY") or os.environ.get("CLAUDE_API_KEY"):
            self.llm.api_key = api_key

        if model := os.environ.get("LLM_MODEL") or os.environ.get("CLAUDE_MODEL"):
            self.llm.model = model

        if provider := os.environ.get("LLM_PROVIDER"):
            self.llm.provider = LLMProvider.parse(provider)

        if base_url := os.environ.get("LLM_BASE_URL"):
            self.llm.base_url = base_url

        if max_concurrency := os.environ.get("DELEGATION_MAX_CONCURRENCY"):
            try:
                self.delegation.max_concurrency = int(max_concurrency)
            except ValueError:
                pass

        if fail_fast := os.environ.get("DELEGATION_FAIL_FAST"):
            self.delegation.fail_fast = _to_bool(fail_fast)

        if max_retries := os.environ.get("DELEGATION_MAX_RETRIES"):
            try:
                self.delegation.max_retries = int(max_retries)
            except ValueError:
                pass

        if default_timeout := os.environ.get("DELEGATION_DEFAULT_TIMEOUT"):
            try:
                self.delegation.default_timeout_secs = int(default_timeout)
            except ValueError:
                pass

    def load_from_file(self, path: str) -> None:
        """从 YAML 配置文件加载配置

        Args:
            path: 配置文件路径

        Raises:
            FileNotFoundError: 配置文件不存在
            yaml.YAMLError: 配置文件格式错误
        """
        if not os.path.exists(path):
            raise FileNotFoundError(f"Configuration file not found: {path}")

        with open(path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f)

        if not config_data:
            return

        llm_data = config_data.get("llm", {})
        if llm_data:
            self._load_llm_config(llm_data)

        delegation_data = config_data.get("delegation", {})
        if delegation_data:
            self.delegation = DelegationConfig.from_dict(delegation_data)

    def _load_llm_config(self, data: Dict[str, Any]) -> None:
        """从字典加载模型配置"""
        if "api_key" in data:
            self.llm.api_key = str(data["api_key"])
        if "model" in data:
            self.llm.model = str(data["model"])
        if "provider" in data:
            self.llm.provider = LLMProvider.parse(data["provider"])
        if "base_url" in data:
            self.llm.base_url = data["base_url"]
        if "timeout" in data:
            self.llm.timeout = float(data["timeout"])

    def validate(self) -> List[str]:
        """验证配置参数的有效性

        Returns:
            验证错误列表，配置有效时返回空列表
        """
        errors: List[str] = []

        if not self.llm.api_key:
            errors.append("Missing llm.api_key (set LLM_API_KEY or CLAUDE_API_KEY).")

        if not self.llm.model:
            errors.append("Missing llm.model.")

        if self.llm.timeout <= 0:
            errors.append(
                f"Invalid llm.timeout: {self.llm.timeout}. Must be a positive number."
            )

        if self.delegation.max_concurrency < 1:
            errors.append(
                f"Invalid delegation.max_concurrency: {self.delegation.max_concurrency}. "
                "Must be at least 1."
            )

        if self.delegation.max_retries < 0:
            errors.append(
                f"Invalid delegation.max_retries: {self.delegation.max_retries}. "
                "Must not be negative."
            )

        if self.delegation.default_max_iterations < 1:
            errors.append(
                f"Invalid delegation.default_max_iterations: {self.delegation.default_max_iterations}. "
                "Must be at least 1."
            )

        return errors

    def require_valid(self) -> None:
        """验证失败时抛出 ConfigurationError"""
        errors = self.validate()
        if errors:
            raise ConfigurationError("; ".join(errors))

    def to_dict(self) -> Dict[str, Any]:
        """将配置转换为字典（不包含密钥）"""
        return {
            "llm": self.llm.to_dict(),
            "delegation": self.delegation.to_dict(),
        }

    def __repr__(self) -> str:
        return (
            f"OrchestratorConfig(\n"
            f"  llm={self.llm.to_dict()}\n"
            f"  delegation={self.delegation}\n"
            f")"
        )
