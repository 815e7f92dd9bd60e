"""数据模型测试。

覆盖能力匹配、任务构建与拆分辅助、结果构造函数以及序列化。
"""

import uuid

from agent_delegation.llm.models import Message
from agent_delegation.models import (
    AgentCapability,
    SubAgentResult,
    Task,
    TaskPriority,
    TaskStatus,
    StopReason,
    ToolCallRecord,
    ToolDefinition,
    ToolResult,
    new_id,
)


# ---------------------------------------------------------------------------
# ID / 枚举
# ---------------------------------------------------------------------------

class TestIdsAndEnums:
    """ID 生成与枚举测试"""

    def test_new_id_is_uuid_v7(self):
        """生成的 ID 是版本 7 的 UUID"""
        value = uuid.UUID(new_id())
        assert value.version == 7

    def test_new_ids_are_unique(self):
        """连续生成的 ID 互不相同"""
        ids = {new_id() for _ in range(200)}
        assert len(ids) == 200

    def test_priority_weights(self):
        """优先级权重为 1/5/10/20"""
        assert [p.weight for p in TaskPriority] == [1, 5, 10, 20]

    def test_stop_reason_classification(self):
        """停止原因分类"""
        for value in ("end_turn", "stop_sequence", "stop"):
            assert StopReason.is_final(value)
        for value in ("tool_use", "tool_calls"):
            assert StopReason.is_tool_request(value)
        assert not StopReason.is_final("max_tokens")
        assert not StopReason.is_tool_request("max_tokens")


# ---------------------------------------------------------------------------
# AgentCapability
# ---------------------------------------------------------------------------

class TestAgentCapability:
    """能力匹配测试"""

    def test_keyword_match_is_case_insensitive(self):
        """关键词匹配不区分大小写"""
        cap = AgentCapability("coding").with_keywords(["Code"])
        assert cap.matches("please analyze my code")

    def test_name_match(self):
        """能力名称出现在指令中也算匹配"""
        cap = AgentCapability("Review")
        assert cap.matches("do a code review please")

    def test_no_match(self):
        """关键词和名称都不出现时不匹配"""
        cap = AgentCapability("translation").with_keywords(["translate", "language"])
        assert not cap.matches("write unit tests")

    def test_round_trip(self):
        """to_dict/from_dict 保持字段"""
        cap = AgentCapability("search", "web search", ["find", "lookup"])
        assert AgentCapability.from_dict(cap.to_dict()) == cap


# ---------------------------------------------------------------------------
# Task
# ---------------------------------------------------------------------------

class TestTask:
    """任务模型测试"""

    def test_defaults(self):
        """默认值"""
        task = Task(instruction="do it")
        assert task.priority == TaskPriority.NORMAL
        assert task.max_iterations == 10
        assert task.max_tokens == 4096
        assert task.timeout_seconds == 120
        assert task.context == []
        assert task.metadata == {}

    def test_builder(self):
        """构建器设置所有字段"""
        tool = ToolDefinition(name="echo", description="Echo input")
        task = (
            Task.builder("summarize")
            .add_context(Message.user("hello"))
            .add_tool(tool)
            .priority(TaskPriority.HIGH)
            .max_iterations(3)
            .max_tokens(1000)
            .timeout(5)
            .metadata("source", "test")
            .build()
        )
        assert task.instruction == "summarize"
        assert len(task.context) == 1
        assert task.available_tools == [tool]
        assert task.priority == TaskPriority.HIGH
        assert task.max_iterations == 3
        assert task.max_tokens == 1000
        assert task.timeout_seconds == 5
        assert task.metadata == {"source": "test"}

    def test_with_helpers_chain(self):
        """with_* 辅助方法可链式调用"""
        task = Task(instruction="x").with_priority(TaskPriority.CRITICAL).with_max_iterations(2)
        assert task.priority == TaskPriority.CRITICAL
        assert task.max_iterations == 2

    def test_copy_keeps_id_and_is_independent(self):
        """copy 保留 ID，修改副本不影响原任务"""
        task = Task(instruction="x", metadata={"a": "1"})
        clone = task.copy()
        clone.metadata["b"] = "2"
        assert clone.id == task.id
        assert task.metadata == {"a": "1"}

    def test_serialization(self):
        """序列化后可还原（工具只保留 schema）"""
        task = Task(
            instruction="x",
            context=[Message.user("ctx")],
            available_tools=[ToolDefinition(name="t", description="d")],
            priority=TaskPriority.LOW,
        )
        restored = Task.from_dict(task.to_dict())
        assert restored.id == task.id
        assert restored.context[0].text_content() == "ctx"
        assert restored.available_tools[0].name == "t"
        assert restored.priority == TaskPriority.LOW


# ---------------------------------------------------------------------------
# Tool / Result
# ---------------------------------------------------------------------------

class TestToolModels:
    """工具模型测试"""

    def test_tool_result_constructors(self):
        assert ToolResult.success("ok") == ToolResult("ok", False)
        assert ToolResult.error("bad").is_error

    def test_definition_schema(self):
        """to_schema 不包含处理函数"""
        async def handler():
            return "x"

        tool = ToolDefinition(name="t", description="d", handler=handler)
        schema = tool.to_schema()
        assert set(schema) == {"name", "description", "input_schema"}
        assert tool.without_handler().handler is None


class TestSubAgentResult:
    """结果模型测试"""

    def test_success_result(self):
        result = SubAgentResult.success_result("t1", "a1", "done", 2, 10, 5, 100)
        assert result.success
        assert result.status == TaskStatus.COMPLETED
        assert result.total_tokens == 15

    def test_failure(self):
        """失败结果的迭代与 token 计数均为 0"""
        result = SubAgentResult.failure("t1", "a1", "boom")
        assert not result.success
        assert result.status == TaskStatus.FAILED
        assert result.error == "boom"
        assert result.iterations == 0
        assert result.input_tokens == 0 and result.output_tokens == 0

    def test_timeout(self):
        result = SubAgentResult.timeout("t1", "a1")
        assert result.status == TaskStatus.TIMEOUT
        assert result.error == "Task execution timed out"

    def test_serialization(self):
        result = SubAgentResult.success_result(
            "t1", "a1", "done", 1, 1, 1, 1,
            tool_calls=[ToolCallRecord(id="c1", name="echo", input={"x": 1}, output="1")],
        )
        restored = SubAgentResult.from_dict(result.to_dict())
        assert restored == result
