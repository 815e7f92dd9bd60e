"""Sub Agent implementation."""

import asyncio
import time
from typing import Any, Dict, List, Optional

from .exceptions import ProtocolError
from .interfaces.sub_agent import ISubAgent
from .interfaces.tool_executor import IToolExecutor
from .llm.interface import ILLMClient
from .llm.models import Message, MessagesRequest, ToolResultBlock, ToolUseBlock
from .models.capability import AgentCapability
from .models.enums import StopReason, TaskStatus
from .models.result import SubAgentResult
from .models.task import Task, new_id
from .models.tool import ToolCallRecord, ToolResult
from .utils.logging import TaskLogAdapter, get_task_logger


MAX_ITERATIONS_ERROR = "Max iterations reached"


class DefaultSubAgent(ISubAgent):
    """默认子智能体实现

    通过语言模型与工具执行器运行工具调用循环：
    1. 将任务上下文与任务指令发送给模型
    2. 模型请求工具调用时，执行工具并将结果回传给模型
    3. 重复步骤 2 直到模型给出最终答案或达到最大迭代次数
    """

    def __init__(
        self,
        name: str,
        llm_client: ILLMClient,
        tool_executor: IToolExecutor,
        description: str = "",
        capabilities: Optional[List[AgentCapability]] = None,
        system_prompt: Optional[str] = None,
        model: Optional[str] = None,
        agent_id: Optional[str] = None,
    ):
        """
        初始化子智能体

        Args:
            name: 智能体名称
            llm_client: 语言模型客户端
            tool_executor: 工具执行器
            description: 智能体描述
            capabilities: 能力列表，为空时视为通用智能体
            system_prompt: 系统提示（可选）
            model: 模型名称（可选，覆盖客户端默认模型）
            agent_id: 智能体 ID（可选，默认自动生成）
        """
        self._id = agent_id or new_id()
        self._name = name
        self._description = description
        self._capabilities = list(capabilities or [])
        self._system_prompt = system_prompt
        self._model = model
        self._llm_client = llm_client
        self._tool_executor = tool_executor

    @staticmethod
    def builder(name: str) -> "DefaultSubAgentBuilder":
        return DefaultSubAgentBuilder(name)

    @property
    def id(self) -> str:
        return self._id

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def capabilities(self) -> List[AgentCapability]:
        return self._capabilities

    @property
    def system_prompt(self) -> Optional[str]:
        return self._system_prompt

    @property
    def model(self) -> str:
        """实际使用的模型名称"""
        return self._model or self._llm_client.model

    def _tool_schemas(self, task: Task) -> Optional[List[Dict[str, Any]]]:
        tools = task.available_tools or self._tool_executor.definitions()
        if not tools:
            return None
        return [tool.to_schema() for tool in tools]

    async def execute(self, task: Task) -> SubAgentResult:
        """
        执行任务

        task.timeout_seconds > 0 时限制整个循环的执行时间，超时返回 TIMEOUT 结果。
        模型调用失败、超过最大迭代次数以及无法识别的 stop_reason 均以失败结果返回。

        Args:
            task: 要执行的任务

        Returns:
            执行结果
        """
        task_logger = get_task_logger("sub_agent", task.id, self._name)
        task_logger.info("Executing task")

        if task.timeout_seconds and task.timeout_seconds > 0:
            try:
                return await asyncio.wait_for(
                    self._run_loop(task, task_logger),
                    timeout=task.timeout_seconds,
                )
            except asyncio.TimeoutError:
                task_logger.warning(f"Timed out after {task.timeout_seconds}s")
                return SubAgentResult.timeout(task.id, self._id)

        return await self._run_loop(task, task_logger)

    async def _run_loop(self, task: Task, task_logger: TaskLogAdapter) -> SubAgentResult:
        start_time = time.monotonic()
        messages: List[Message] = list(task.context)
        messages.append(Message.user(task.instruction))
        tools = self._tool_schemas(task)

        iterations = 0
        input_tokens = 0
        output_tokens = 0
        tool_calls: List[ToolCallRecord] = []

        while True:
            iterations += 1
            if iterations > task.max_iterations:
                task_logger.warning(f"Reached max iterations ({task.max_iterations})")
                return SubAgentResult(
                    task_id=task.id,
                    agent_id=self._id,
                    output="",
                    success=False,
                    error=MAX_ITERATIONS_ERROR,
                    iterations=iterations,
                    input_tokens=input_tokens,
                    output_tokens=output_tokens,
                    execution_time_ms=_elapsed_ms(start_time),
                    status=TaskStatus.FAILED,
                    tool_calls=tool_calls,
                )

            task_logger.debug(f"Iteration {iterations}/{task.max_iterations}")

            request = MessagesRequest(
                model=self.model,
                max_tokens=task.max_tokens,
                messages=list(messages),
                system=self._system_prompt,
                tools=tools,
            )

            try:
                response = await self._llm_client.send(request)
            except Exception as e:
                task_logger.error(f"Model call failed: {e}")
                return SubAgentResult.failure(task.id, self._id, str(e))

            if response.usage is not None:
                input_tokens += response.usage.input_tokens
                output_tokens += response.usage.output_tokens

            if StopReason.is_final(response.stop_reason):
                task_logger.info(f"Completed in {iterations} iteration(s)")
                return SubAgentResult.success_result(
                    task_id=task.id,
                    agent_id=self._id,
                    output=response.text(),
                    iterations=iterations,
                    input_tokens=input_tokens,
                    output_tokens=output_tokens,
                    execution_time_ms=_elapsed_ms(start_time),
                    tool_calls=tool_calls,
                )

            if not StopReason.is_tool_request(response.stop_reason):
                error = ProtocolError(response.stop_reason)
                task_logger.error(str(error))
                return SubAgentResult.failure(task.id, self._id, str(error))

            tool_uses = response.tool_uses()
            if not tool_uses:
                task_logger.warning(
                    f"Got stop_reason '{response.stop_reason}' without tool_use blocks"
                )
                continue

            result_blocks = await self._process_tool_calls(tool_uses, tool_calls, task_logger)
            messages.append(Message(role="assistant", content=list(response.content)))
            messages.append(Message(role="user", content=list(result_blocks)))

    async def _process_tool_calls(
        self,
        tool_uses: List[ToolUseBlock],
        records: List[ToolCallRecord],
        task_logger: TaskLogAdapter,
    ) -> List[ToolResultBlock]:
        """
        处理工具调用

        工具异常不会中断任务，而是作为错误结果回传给模型。

        Args:
            tool_uses: 模型请求的工具调用
            records: 工具调用记录（原地追加）
            task_logger: 绑定到当前任务的 logger

        Returns:
            工具结果内容块
        """
        blocks: List[ToolResultBlock] = []
        for tool_use in tool_uses:
            task_logger.debug(f"Calling tool '{tool_use.name}'")
            try:
                result = await self._tool_executor.execute(tool_use.name, tool_use.input)
            except Exception as e:
                task_logger.warning(f"Tool '{tool_use.name}' raised: {e}")
                result = ToolResult.error(str(e))

            blocks.append(
                ToolResultBlock(
                    tool_use_id=tool_use.id,
                    content=result.output,
                    is_error=result.is_error,
                )
            )
            records.append(
                ToolCallRecord(
                    id=tool_use.id,
                    name=tool_use.name,
                    input=tool_use.input,
                    output=result.output,
                    is_error=result.is_error,
                )
            )
        return blocks


def _elapsed_ms(start_time: float) -> int:
    return int((time.monotonic() - start_time) * 1000)


class DefaultSubAgentBuilder:
    """子智能体构建器"""

    def __init__(self, name: str):
        self._name = name
        self._id: Optional[str] = None
        self._description = ""
        self._capabilities: List[AgentCapability] = []
        self._system_prompt: Optional[str] = None
        self._model: Optional[str] = None

    def id(self, agent_id: str) -> "DefaultSubAgentBuilder":
        self._id = agent_id
        return self

    def description(self, description: str) -> "DefaultSubAgentBuilder":
        self._description = description
        return self

    def capability(self, capability: AgentCapability) -> "DefaultSubAgentBuilder":
        self._capabilities.append(capability)
        return self

    def capabilities(self, capabilities: List[AgentCapability]) -> "DefaultSubAgentBuilder":
        self._capabilities = list(capabilities)
        return self

    def system_prompt(self, prompt: str) -> "DefaultSubAgentBuilder":
        self._system_prompt = prompt
        return self

    def model(self, model: str) -> "DefaultSubAgentBuilder":
        self._model = model
        return self

    def build(self, llm_client: ILLMClient, tool_executor: IToolExecutor) -> DefaultSubAgent:
        return DefaultSubAgent(
            name=self._name,
            llm_client=llm_client,
            tool_executor=tool_executor,
            description=self._description,
            capabilities=self._capabilities,
            system_prompt=self._system_prompt,
            model=self._model,
            agent_id=self._id,
        )
