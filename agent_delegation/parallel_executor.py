"""Bounded-concurrency batch execution of delegated tasks."""

import asyncio
from collections import deque
from typing import Deque, Dict, List, Optional, Tuple

from .agent_registry import SubAgentRegistry
from .config import DelegationConfig
from .exceptions import BatchExecutionError
from .models.result import SubAgentResult
from .models.task import Task
from .utils.logging import get_logger

logger = get_logger("parallel_executor")


class _BatchGate:
    """单批次的并发闸门：信号量与运行中任务计数"""

    def __init__(self, max_concurrency: int):
        self._semaphore = asyncio.Semaphore(max(1, max_concurrency))
        self.active = 0
        self.peak = 0

    async def __aenter__(self) -> "_BatchGate":
        await self._semaphore.acquire()
        self.active += 1
        self.peak = max(self.peak, self.active)
        return self

    async def __aexit__(self, exc_type, exc, tb) -> None:
        self.active -= 1
        self._semaphore.release()


class ParallelExecutor:
    """并行执行器

    使用信号量限制同时执行的任务数量，每个任务通过注册中心路由到最合适的智能体。
    每次批量调用拥有独立的信号量，max_concurrency 只约束同一批次内的任务，
    并发的多个批次互不占用对方的额度。

    失败处理：
    - fail_fast: 首个异常取消其余正在执行的任务并抛出 BatchExecutionError
    - 否则记录日志后丢弃该任务；retain_failures=True 时改为保留一条失败结果
    """

    def __init__(self, registry: SubAgentRegistry, config: Optional[DelegationConfig] = None):
        self._registry = registry
        self._config = config or DelegationConfig()
        self._max_observed = 0

    @property
    def config(self) -> DelegationConfig:
        return self._config

    @property
    def max_observed_concurrency(self) -> int:
        """最近完成的一批执行中同时运行任务数的峰值"""
        return self._max_observed

    def _new_gate(self) -> _BatchGate:
        return _BatchGate(self._config.max_concurrency)

    async def _run_one(self, gate: _BatchGate, task: Task) -> SubAgentResult:
        async with gate:
            return await self._registry.execute_with_best_agent(task)

    def _failure_record(self, task: Task, error: Exception) -> Optional[SubAgentResult]:
        if not self._config.retain_failures:
            return None
        return SubAgentResult.failure(task.id, "", str(error))

    async def execute_all(self, tasks: List[Task]) -> List[SubAgentResult]:
        """
        并行执行所有任务

        Args:
            tasks: 任务列表

        Returns:
            执行结果（按完成顺序，不保证与提交顺序一致）

        Raises:
            BatchExecutionError: fail_fast 模式下任一任务抛出异常
        """
        if not tasks:
            return []

        logger.info(
            f"Executing {len(tasks)} task(s) with max_concurrency={self._config.max_concurrency}"
        )
        gate = self._new_gate()

        try:
            if self._config.fail_fast:
                return await self._execute_fail_fast(gate, tasks)

            results: List[SubAgentResult] = []
            results_lock = asyncio.Lock()

            async def collect(task: Task) -> None:
                try:
                    result = await self._run_one(gate, task)
                except Exception as e:
                    logger.warning(f"Task {task.id} failed: {e}")
                    result = self._failure_record(task, e)
                    if result is None:
                        return
                async with results_lock:
                    results.append(result)

            await asyncio.gather(*(collect(task) for task in tasks))
            return results
        finally:
            self._max_observed = gate.peak

    async def _execute_fail_fast(self, gate: _BatchGate, tasks: List[Task]) -> List[SubAgentResult]:
        pending: Dict[asyncio.Task, Task] = {
            asyncio.create_task(self._run_one(gate, task)): task for task in tasks
        }
        results: List[SubAgentResult] = []

        try:
            while pending:
                done, _ = await asyncio.wait(pending.keys(), return_when=asyncio.FIRST_COMPLETED)
                for future in done:
                    task = pending.pop(future)
                    error = future.exception()
                    if error is not None:
                        logger.error(f"Task {task.id} failed, aborting due to fail_fast: {error}")
                        raise BatchExecutionError(task.id, error) from error
                    results.append(future.result())
        finally:
            if pending:
                await _cancel_all(list(pending.keys()))

        return results

    async def execute_ordered(self, tasks: List[Task]) -> List[SubAgentResult]:
        """
        并行执行任务并按输入顺序返回结果

        失败任务的槽位为空，返回值只包含非空槽位，因此失败后结果位置不再与输入下标一一对应。
        """
        if not tasks:
            return []

        gate = self._new_gate()
        slots: List[Optional[SubAgentResult]] = [None] * len(tasks)

        async def fill(index: int, task: Task) -> None:
            try:
                slots[index] = await self._run_one(gate, task)
            except Exception as e:
                logger.warning(f"Task {task.id} failed: {e}")
                slots[index] = self._failure_record(task, e)

        try:
            await asyncio.gather(*(fill(i, task) for i, task in enumerate(tasks)))
        finally:
            self._max_observed = gate.peak
        return [result for result in slots if result is not None]

    async def execute_with_retry(self, tasks: List[Task]) -> List[SubAgentResult]:
        """
        逐个执行任务，结果不成功时重新入队（最多 max_retries 次，无退避）

        retry_failed=False 时不做重试。被丢弃的失败（无结果）不会重试。
        """
        max_retries = self._config.max_retries if self._config.retry_failed else 0
        queue: Deque[Tuple[Task, int]] = deque((task, 0) for task in tasks)
        all_results: List[SubAgentResult] = []

        while queue:
            task, attempts = queue.popleft()
            for result in await self.execute_all([task]):
                if result.success or attempts >= max_retries:
                    all_results.append(result)
                else:
                    logger.warning(
                        f"Retrying task {task.id} (attempt {attempts + 1}/{max_retries})"
                    )
                    queue.append((task, attempts + 1))

        return all_results


async def _cancel_all(futures: List[asyncio.Task]) -> None:
    """取消并等待任务结束"""
    for future in futures:
        future.cancel()
    await asyncio.gather(*futures, return_exceptions=True)
