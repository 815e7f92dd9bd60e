"""Sub-agent registry with capability-based routing."""

import asyncio
from typing import Dict, List, Optional, Tuple

from .exceptions import AgentNotFoundError, NoAgentAvailableError
from .interfaces.sub_agent import ISubAgent
from .models.capability import AgentCapability
from .models.result import SubAgentResult
from .models.task import Task
from .utils.logging import get_logger

logger = get_logger("agent_registry")


class SubAgentRegistry:
    """子智能体注册中心

    按 ID 和名称索引已注册的智能体，维护一个默认智能体，并根据能力匹配为任务选择
    最合适的智能体。所有修改和路由查询都在同一把锁内完成；智能体的实际执行在锁外进行。

    匹配分数相同时选择最早注册的智能体。
    """

    def __init__(self):
        self._agents: Dict[str, ISubAgent] = {}
        self._by_name: Dict[str, str] = {}
        self._default_id: Optional[str] = None
        self._lock = asyncio.Lock()

    async def register(self, agent: ISubAgent) -> None:
        """
        注册智能体

        第一个注册的智能体成为默认智能体；同名注册会将名称索引指向最新的智能体。
        """
        async with self._lock:
            self._agents[agent.id] = agent
            self._by_name[agent.name] = agent.id
            if self._default_id is None:
                self._default_id = agent.id
        logger.info(f"Registered agent '{agent.name}' ({agent.id})")

    async def unregister(self, agent_id: str) -> Optional[ISubAgent]:
        """
        注销智能体

        若注销的是默认智能体，则由剩余智能体中最早注册的一个接替（没有则为空）。

        Returns:
            被移除的智能体，不存在时返回 None
        """
        async with self._lock:
            agent = self._agents.pop(agent_id, None)
            if agent is None:
                return None

            if self._by_name.get(agent.name) == agent_id:
                del self._by_name[agent.name]

            if self._default_id == agent_id:
                self._default_id = next(iter(self._agents), None)

        logger.info(f"Unregistered agent '{agent.name}' ({agent_id})")
        return agent

    async def get(self, agent_id: str) -> Optional[ISubAgent]:
        async with self._lock:
            return self._agents.get(agent_id)

    async def get_by_name(self, name: str) -> Optional[ISubAgent]:
        async with self._lock:
            agent_id = self._by_name.get(name)
            return self._agents.get(agent_id) if agent_id else None

    async def get_default(self) -> Optional[ISubAgent]:
        async with self._lock:
            return self._agents.get(self._default_id) if self._default_id else None

    async def set_default(self, agent_id: str) -> bool:
        """设置默认智能体，ID 不存在时返回 False"""
        async with self._lock:
            if agent_id not in self._agents:
                return False
            self._default_id = agent_id
            return True

    async def find_best_agent(self, task: Task) -> Optional[ISubAgent]:
        """为任务选择匹配分数最高的智能体，没有候选时回退到默认智能体"""
        async with self._lock:
            return self._find_best_agent_locked(task)

    def _find_best_agent_locked(self, task: Task) -> Optional[ISubAgent]:
        best: Optional[ISubAgent] = None
        best_score = -1

        for agent in self._agents.values():
            if not agent.can_handle(task):
                continue
            score = agent.match_score(task)
            if score > best_score:
                best = agent
                best_score = score

        if best is not None:
            logger.debug(f"Routed task {task.id} to '{best.name}' (score={best_score})")
            return best

        if self._default_id is not None:
            logger.debug(f"No capable agent for task {task.id}, using default agent")
            return self._agents.get(self._default_id)
        return None

    async def execute_with_best_agent(self, task: Task) -> SubAgentResult:
        """
        选择最合适的智能体执行任务

        Raises:
            NoAgentAvailableError: 没有可用的智能体
        """
        async with self._lock:
            agent = self._find_best_agent_locked(task)
        if agent is None:
            raise NoAgentAvailableError(task.id)
        return await agent.execute(task)

    async def execute_with_agent(self, agent_id: str, task: Task) -> SubAgentResult:
        """
        使用指定智能体执行任务

        Raises:
            AgentNotFoundError: 智能体不存在
        """
        async with self._lock:
            agent = self._agents.get(agent_id)
        if agent is None:
            raise AgentNotFoundError(agent_id)
        return await agent.execute(task)

    async def all_agents(self) -> List[ISubAgent]:
        async with self._lock:
            return list(self._agents.values())

    def agent_ids(self) -> List[str]:
        return list(self._agents.keys())

    def agent_names(self) -> List[str]:
        return list(self._by_name.keys())

    def contains(self, agent_id: str) -> bool:
        return agent_id in self._agents

    def __contains__(self, agent_id: str) -> bool:
        return self.contains(agent_id)

    def __len__(self) -> int:
        return len(self._agents)

    def is_empty(self) -> bool:
        return not self._agents

    def all_capabilities(self) -> List[Tuple[str, List[AgentCapability]]]:
        """每个智能体的 (agent_id, 能力列表)，按注册顺序"""
        return [(agent.id, list(agent.capabilities)) for agent in self._agents.values()]
