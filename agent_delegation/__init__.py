"""
Agent Delegation - 子智能体编排引擎

This package provides the sub-agent orchestration engine that can:
- Register LLM-backed sub-agents and route tasks to them by capability
- Run each task through an iterative tool-calling loop against a language model
- Execute batches of tasks with bounded concurrency, retry and fail-fast policies
- Aggregate results from multiple agents

Core Components:
- SubAgentRegistry: Agent registration and capability-based routing
- DefaultSubAgent: Tool-calling execution loop
- TaskDelegator: Task splitting and single/parallel delegation
- ParallelExecutor: Bounded-concurrency batch execution
- ResultAggregator: Result collection and summary
- ToolRegistry: Tool management and invocation
- ILLMClient: Language-model integration (Claude / OpenAI-compatible)

Usage:
    from agent_delegation import (
        OrchestratorConfig, SubAgentRegistry, DefaultSubAgent, TaskDelegator,
        ToolRegistry, Task, create_llm_client,
    )

    config = OrchestratorConfig()
    client = create_llm_client(config.llm)
    registry = SubAgentRegistry()
    await registry.register(DefaultSubAgent("coder", client, ToolRegistry()))
    delegator = TaskDelegator(registry, config.delegation)
    result = await delegator.delegate(Task(instruction="Your task here"))
"""

__version__ = "0.1.0"

# Core models
from .models import (
    TaskPriority,
    TaskStatus,
    StopReason,
    AggregationStrategy,
    AgentCapability,
    ToolDefinition,
    ToolResult,
    ToolCallRecord,
    Task,
    TaskBuilder,
    SubAgentResult,
    new_id,
)

# Exceptions
from .exceptions import (
    DelegationError,
    ConfigurationError,
    ModelCallError,
    LLMAPIError,
    ProtocolError,
    ToolExecutionError,
    ToolNotFoundError,
    RoutingError,
    NoAgentAvailableError,
    AgentNotFoundError,
    BatchExecutionError,
)

# Configuration
from .config import LLMConfig, LLMProvider, DelegationConfig, OrchestratorConfig

# Interfaces
from .interfaces import ISubAgent, IToolExecutor

# Language model
from .llm import (
    ILLMClient,
    Message,
    MessagesRequest,
    MessagesResponse,
    Usage,
    AnthropicClient,
    OpenAICompatibleClient,
    ResilientLLMClient,
    RetryConfig,
    create_llm_client,
)

# Core implementations
from .tool_registry import ToolRegistry
from .sub_agent import DefaultSubAgent, DefaultSubAgentBuilder
from .agent_registry import SubAgentRegistry
from .parallel_executor import ParallelExecutor
from .delegation import TaskDelegator
from .result_aggregator import AggregatedResult, ResultAggregator

__all__ = [
    # Version
    "__version__",
    # Models
    "TaskPriority",
    "TaskStatus",
    "StopReason",
    "AggregationStrategy",
    "AgentCapability",
    "ToolDefinition",
    "ToolResult",
    "ToolCallRecord",
    "Task",
    "TaskBuilder",
    "SubAgentResult",
    "new_id",
    # Exceptions
    "DelegationError",
    "ConfigurationError",
    "ModelCallError",
    "LLMAPIError",
    "ProtocolError",
    "ToolExecutionError",
    "ToolNotFoundError",
    "RoutingError",
    "NoAgentAvailableError",
    "AgentNotFoundError",
    "BatchExecutionError",
    # Configuration
    "LLMConfig",
    "LLMProvider",
    "DelegationConfig",
    "OrchestratorConfig",
    # Interfaces
    "ISubAgent",
    "IToolExecutor",
    # Language model
    "ILLMClient",
    "Message",
    "MessagesRequest",
    "MessagesResponse",
    "Usage",
    "AnthropicClient",
    "OpenAICompatibleClient",
    "ResilientLLMClient",
    "RetryConfig",
    "create_llm_client",
    # Core implementations
    "ToolRegistry",
    "DefaultSubAgent",
    "DefaultSubAgentBuilder",
    "SubAgentRegistry",
    "ParallelExecutor",
    "TaskDelegator",
    "AggregatedResult",
    "ResultAggregator",
]
