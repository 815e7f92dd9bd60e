"""Task delegation entry point."""

import math
from typing import List, Optional

from .agent_registry import SubAgentRegistry
from .config import DelegationConfig
from .llm.models import Message
from .models.result import SubAgentResult
from .models.task import Task, new_id
from .models.tool import ToolDefinition
from .parallel_executor import ParallelExecutor
from .utils.logging import get_logger

logger = get_logger("delegation")


class TaskDelegator:
    """任务委派器

    负责单任务委派、并行委派以及任务拆分。
    """

    def __init__(self, registry: SubAgentRegistry, config: Optional[DelegationConfig] = None):
        """
        初始化委派器

        Args:
            registry: 子智能体注册中心
            config: 委派配置
        """
        self._registry = registry
        self._config = config or DelegationConfig()
        self._executor = ParallelExecutor(registry, self._config)

    @property
    def registry(self) -> SubAgentRegistry:
        return self._registry

    @property
    def executor(self) -> ParallelExecutor:
        return self._executor

    @property
    def config(self) -> DelegationConfig:
        return self._config

    async def delegate(self, task: Task) -> SubAgentResult:
        """委派给最合适的智能体"""
        logger.info(f"Delegating task {task.id}")
        return await self._registry.execute_with_best_agent(task)

    async def delegate_to(self, agent_id: str, task: Task) -> SubAgentResult:
        """委派给指定智能体"""
        logger.info(f"Delegating task {task.id} to agent {agent_id}")
        return await self._registry.execute_with_agent(agent_id, task)

    async def delegate_parallel(self, tasks: List[Task]) -> List[SubAgentResult]:
        return await self._executor.execute_all(tasks)

    async def delegate_ordered(self, tasks: List[Task]) -> List[SubAgentResult]:
        return await self._executor.execute_ordered(tasks)

    async def delegate_with_retry(self, tasks: List[Task]) -> List[SubAgentResult]:
        return await self._executor.execute_with_retry(tasks)

    @staticmethod
    def split_task(task: Task, parts: int) -> List[Task]:
        """
        按上下文拆分任务

        上下文被划分为 parts 段连续切片（每段 ceil(len/parts) 条，最后一段截断），
        每个子任务使用新 ID，指令改写为 "Part i of n: ..."，max_tokens 按 parts 整除。

        Args:
            task: 原任务
            parts: 拆分份数，<= 1 时原样返回

        Returns:
            子任务列表
        """
        if parts <= 1:
            return [task]

        context = task.context
        chunk_size = math.ceil(len(context) / parts)
        subtasks: List[Task] = []

        for i in range(parts):
            start = i * chunk_size
            end = min(start + chunk_size, len(context))
            chunk = context[start:end] if start < len(context) else []

            subtasks.append(
                Task(
                    id=new_id(),
                    instruction=f"Part {i + 1} of {parts}: {task.instruction}",
                    context=list(chunk),
                    available_tools=list(task.available_tools),
                    priority=task.priority,
                    max_iterations=task.max_iterations,
                    max_tokens=task.max_tokens // parts,
                    timeout_seconds=task.timeout_seconds,
                    metadata=dict(task.metadata),
                )
            )

        logger.debug(f"Split task {task.id} into {parts} parts")
        return subtasks

    def create_task(
        self,
        instruction: str,
        context: Optional[List[Message]] = None,
        tools: Optional[List[ToolDefinition]] = None,
    ) -> Task:
        """
        创建使用委派配置默认值的任务

        timeout_seconds 取 default_timeout_secs，max_iterations 取 default_max_iterations。
        """
        return Task(
            instruction=instruction,
            context=list(context or []),
            available_tools=list(tools or []),
            max_iterations=self._config.default_max_iterations,
            timeout_seconds=self._config.default_timeout_secs,
        )

    def create_parallel_subtasks(
        self,
        base_instruction: str,
        focuses: List[str],
        context: Optional[List[Message]] = None,
        tools: Optional[List[ToolDefinition]] = None,
    ) -> List[Task]:
        """为每个关注点创建一个子任务，指令为 "{focus}: {base_instruction}" """
        return [
            self.create_task(f"{focus}: {base_instruction}", context, tools)
            for focus in focuses
        ]
