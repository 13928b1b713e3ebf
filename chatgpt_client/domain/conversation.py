from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional


@dataclass
class ConversationItem:
    id: str
    title: str
    create_time: Optional[str] = None


@dataclass
class ConversationList:
    items: List[ConversationItem]
    total: int = 0
    limit: int = 0
    offset: int = 0
    raw: Dict[str, Any] = field(default_factory=dict)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "ConversationList":
        items = [
            ConversationItem(
                id=item.get("id") or "",
                title=item.get("title") or "",
                create_time=item.get("create_time"),
            )
            for item in data.get("items") or []
            if isinstance(item, dict)
        ]
        return cls(
            items=items,
            total=int(data.get("total") or 0),
            limit=int(data.get("limit") or 0),
            offset=int(data.get("offset") or 0),
            raw=data,
        )
