"""Agent capability model."""

from dataclasses import dataclass, field
from typing import Any, Dict, List


@dataclass
class AgentCapability:
    """智能体能力声明

    通过名称和关键词判断自由文本指令是否属于该能力范围。
    """
    name: str
    description: str = ""
    keywords: List[str] = field(default_factory=list)

    def with_keywords(self, keywords: List[str]) -> "AgentCapability":
        """设置关键词（链式调用）"""
        self.keywords = list(keywords)
        return self

    def matches(self, instruction: str) -> bool:
        """任一关键词或能力名称（大小写不敏感）出现在指令中即视为匹配"""
        lower = instruction.lower()
        if any(keyword.lower() in lower for keyword in self.keywords):
            return True
        return self.name.lower() in lower

    def to_dict(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "description": self.description,
            "keywords": list(self.keywords),
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "AgentCapability":
        return cls(
            name=data["name"],
            description=data.get("description", ""),
            keywords=list(data.get("keywords", [])),
        )
