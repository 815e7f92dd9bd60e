"""Language-model request/response data structures (Messages API shape)."""

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Union


@dataclass
class TextBlock:
    """文本内容块"""
    text: str
    type: str = field(default="text", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "text", "text": self.text}


@dataclass
class ToolUseBlock:
    """模型发起的工具调用"""
    id: str
    name: str
    input: Any = None
    type: str = field(default="tool_use", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {"type": "tool_use", "id": self.id, "name": self.name, "input": self.input}


@dataclass
class ToolResultBlock:
    """回传给模型的工具执行结果"""
    tool_use_id: str
    content: str
    is_error: bool = False
    type: str = field(default="tool_result", init=False)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "type": "tool_result",
            "tool_use_id": self.tool_use_id,
            "content": self.content,
            "is_error": self.is_error,
        }


ContentBlock = Union[TextBlock, ToolUseBlock, ToolResultBlock]


def content_block_from_dict(data: Dict[str, Any]) -> Optional[ContentBlock]:
    """从 API 格式解析内容块，无法识别的类型（如 thinking）返回 None"""
    block_type = data.get("type")
    if block_type == "text":
        return TextBlock(text=data.get("text", ""))
    if block_type == "tool_use":
        return ToolUseBlock(id=data["id"], name=data["name"], input=data.get("input"))
    if block_type == "tool_result":
        content = data.get("content", "")
        if isinstance(content, list):
            content = "\n".join(
                part.get("text", "") for part in content if isinstance(part, dict)
            )
        return ToolResultBlock(
            tool_use_id=data["tool_use_id"],
            content=content,
            is_error=data.get("is_error", False),
        )
    return None


def parse_content_blocks(items: List[Dict[str, Any]]) -> List[ContentBlock]:
    blocks = []
    for item in items:
        block = content_block_from_dict(item)
        if block is not None:
            blocks.append(block)
    return blocks


def join_text(blocks: List[ContentBlock]) -> str:
    """按换行拼接所有文本块"""
    return "\n".join(b.text for b in blocks if isinstance(b, TextBlock))


@dataclass
class Message:
    """对话消息"""
    role: str  # "user", "assistant", "system"
    content: List[ContentBlock] = field(default_factory=list)

    @classmethod
    def user(cls, text: str) -> "Message":
        return cls(role="user", content=[TextBlock(text)])

    @classmethod
    def assistant(cls, text: str) -> "Message":
        return cls(role="assistant", content=[TextBlock(text)])

    @classmethod
    def system(cls, text: str) -> "Message":
        return cls(role="system", content=[TextBlock(text)])

    def text_content(self) -> str:
        return join_text(self.content)

    def tool_uses(self) -> List[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    def tool_results(self) -> List[ToolResultBlock]:
        return [b for b in self.content if isinstance(b, ToolResultBlock)]

    def to_dict(self) -> Dict[str, Any]:
        """转换为 API 格式"""
        return {
            "role": self.role,
            "content": [block.to_dict() for block in self.content],
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Message":
        """从字典创建，content 为字符串时视为单个文本块"""
        content = data.get("content", [])
        if isinstance(content, str):
            return cls(role=data["role"], content=[TextBlock(content)])
        return cls(role=data["role"], content=parse_content_blocks(content))


@dataclass
class Usage:
    """Token 使用统计"""
    input_tokens: int = 0
    output_tokens: int = 0

    @property
    def total_tokens(self) -> int:
        return self.input_tokens + self.output_tokens

    def to_dict(self) -> Dict[str, int]:
        return {"input_tokens": self.input_tokens, "output_tokens": self.output_tokens}

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "Usage":
        return cls(
            input_tokens=data.get("input_tokens", 0) or 0,
            output_tokens=data.get("output_tokens", 0) or 0,
        )


@dataclass
class MessagesRequest:
    """模型请求"""
    model: str
    max_tokens: int
    messages: List[Message]
    system: Optional[str] = None
    tools: Optional[List[Dict[str, Any]]] = None

    def to_dict(self) -> Dict[str, Any]:
        """序列化为 Messages API 请求体"""
        body: Dict[str, Any] = {
            "model": self.model,
            "max_tokens": self.max_tokens,
            "messages": [msg.to_dict() for msg in self.messages],
        }
        if self.system:
            body["system"] = self.system
        if self.tools:
            body["tools"] = self.tools
        return body


@dataclass
class MessagesResponse:
    """模型响应"""
    content: List[ContentBlock]
    stop_reason: Optional[str]
    usage: Optional[Usage] = None
    id: str = ""
    model: str = ""

    def text(self) -> str:
        return join_text(self.content)

    def tool_uses(self) -> List[ToolUseBlock]:
        return [b for b in self.content if isinstance(b, ToolUseBlock)]

    def to_dict(self) -> Dict[str, Any]:
        """序列化为字典"""
        return {
            "id": self.id,
            "model": self.model,
            "content": [block.to_dict() for block in self.content],
            "stop_reason": self.stop_reason,
            "usage": self.usage.to_dict() if self.usage else None,
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "MessagesResponse":
        """从 Messages API 响应体反序列化"""
        usage = data.get("usage")
        return cls(
            id=data.get("id", ""),
            model=data.get("model", ""),
            content=parse_content_blocks(data.get("content", [])),
            stop_reason=data.get("stop_reason"),
            usage=Usage.from_dict(usage) if usage else None,
        )
