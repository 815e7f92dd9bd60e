"""Result aggregation for batches of sub-agent results."""

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, List, Optional

from .models.enums import AggregationStrategy, TaskPriority
from .models.result import SubAgentResult
from .utils.logging import get_logger

logger = get_logger("result_aggregator")

OUTPUT_SEPARATOR = "\n\n---\n\n"


@dataclass
class AggregatedResult:
    """多个子智能体结果的汇总"""
    results: List[SubAgentResult] = field(default_factory=list)
    combined_output: str = ""
    success: bool = True
    total_input_tokens: int = 0
    total_output_tokens: int = 0
    total_time_ms: int = 0
    successful_count: int = 0
    failed_count: int = 0

    @classmethod
    def from_results(cls, results: List[SubAgentResult]) -> "AggregatedResult":
        """
        从结果列表计算汇总

        合并输出只包含成功结果，token 与耗时为所有结果之和。
        """
        successful_count = sum(1 for r in results if r.success)
        failed_count = len(results) - successful_count

        return cls(
            results=list(results),
            combined_output=OUTPUT_SEPARATOR.join(r.output for r in results if r.success),
            success=failed_count == 0,
            total_input_tokens=sum(r.input_tokens for r in results),
            total_output_tokens=sum(r.output_tokens for r in results),
            total_time_ms=sum(r.execution_time_ms for r in results),
            successful_count=successful_count,
            failed_count=failed_count,
        )

    @classmethod
    def empty(cls) -> "AggregatedResult":
        return cls()

    @property
    def total_count(self) -> int:
        return self.successful_count + self.failed_count

    def outputs(self) -> List[str]:
        return [r.output for r in self.results]

    def errors(self) -> List[str]:
        return [r.error for r in self.results if r.error]

    def by_agent(self, agent_id: str) -> List[SubAgentResult]:
        return [r for r in self.results if r.agent_id == agent_id]

    def to_dict(self) -> Dict[str, Any]:
        """序列化为字典"""
        return {
            "results": [r.to_dict() for r in self.results],
            "combined_output": self.combined_output,
            "success": self.success,
            "total_input_tokens": self.total_input_tokens,
            "total_output_tokens": self.total_output_tokens,
            "total_time_ms": self.total_time_ms,
            "successful_count": self.successful_count,
            "failed_count": self.failed_count,
        }


CustomAggregator = Callable[[List[SubAgentResult]], AggregatedResult]


class ResultAggregator:
    """结果聚合器

    策略：
    - CONCATENATE: 使用全部结果
    - SUCCESS_ONLY: 仅保留成功结果（默认）
    - WITH_SUMMARY: 在合并输出前添加执行摘要
    - CUSTOM: 使用自定义聚合函数，未提供时等同 SUCCESS_ONLY
    """

    def __init__(
        self,
        strategy: AggregationStrategy = AggregationStrategy.SUCCESS_ONLY,
        custom: Optional[CustomAggregator] = None,
    ):
        self._strategy = strategy
        self._custom = custom

    @property
    def strategy(self) -> AggregationStrategy:
        return self._strategy

    def aggregate(self, results: List[SubAgentResult]) -> AggregatedResult:
        """按当前策略聚合结果"""
        if self._strategy == AggregationStrategy.CONCATENATE:
            return AggregatedResult.from_results(results)
        if self._strategy == AggregationStrategy.WITH_SUMMARY:
            return self._with_summary(results)
        if self._strategy == AggregationStrategy.CUSTOM and self._custom is not None:
            return self._custom(results)
        return self._success_only(results)

    @staticmethod
    def _success_only(results: List[SubAgentResult]) -> AggregatedResult:
        return AggregatedResult.from_results([r for r in results if r.success])

    @staticmethod
    def _with_summary(results: List[SubAgentResult]) -> AggregatedResult:
        aggregated = AggregatedResult.from_results(results)
        summary = (
            "## Execution Summary\n"
            f"- Tasks completed: {aggregated.successful_count}/{aggregated.total_count}\n"
            f"- Total tokens: {aggregated.total_input_tokens} in / "
            f"{aggregated.total_output_tokens} out\n"
            f"- Total time: {aggregated.total_time_ms}ms\n\n"
        )
        aggregated.combined_output = f"{summary}\n{aggregated.combined_output}"
        return aggregated

    def by_priority(
        self,
        results: List[SubAgentResult],
        priorities: Optional[Dict[str, TaskPriority]] = None,
    ) -> Dict[TaskPriority, AggregatedResult]:
        """
        按任务优先级分组聚合

        结果本身不携带优先级；未提供 task_id -> 优先级映射时全部归入 NORMAL。

        Args:
            results: 结果列表
            priorities: 任务 ID 到优先级的映射（可选）

        Returns:
            优先级到聚合结果的映射
        """
        if priorities is None:
            logger.debug("No priority mapping given, grouping all results under NORMAL")
        priorities = priorities or {}

        grouped: Dict[TaskPriority, List[SubAgentResult]] = {}
        for result in results:
            priority = priorities.get(result.task_id, TaskPriority.NORMAL)
            grouped.setdefault(priority, []).append(result)

        return {priority: self.aggregate(items) for priority, items in grouped.items()}
