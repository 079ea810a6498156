"""
Chat service data models for conversations and messages.
"""

import base64
import uuid
from dataclasses import dataclass, field
from datetime import datetime, timezone
from typing import Any, Dict, Optional

from pydantic import TypeAdapter

USER_ROLE = "user"
ASSISTANT_ROLE = "assistant"
LOCAL_ID_PREFIX = "local-"

_TIMESTAMP = TypeAdapter(datetime)


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def new_local_id() -> str:
    """Identifier for messages that only exist in the browser session"""
    return f"{LOCAL_ID_PREFIX}{uuid.uuid4().hex}"


def parse_timestamp(value: Any) -> datetime:
    """Parse the ISO-8601 timestamps Supabase returns (any fractional-second width)"""
    if not value:
        return utc_now()
    return _TIMESTAMP.validate_python(value)


@dataclass
class ChatFile:
    """A file selected by the user, held in memory"""
    name: str
    mime_type: str
    data: bytes

    @property
    def is_image(self) -> bool:
        return self.mime_type.startswith("image/")

    def to_base64(self) -> str:
        return base64.b64encode(self.data).decode("ascii")

    def to_data_uri(self) -> str:
        return f"data:{self.mime_type};base64,{self.to_base64()}"


@dataclass
class Attachment:
    """Attachment descriptor shown next to a message"""
    name: str
    type: str
    # Session-local data URI, never persisted
    preview_url: Optional[str] = None
    # Durable public URL in object storage
    url: Optional[str] = None

    def to_record(self) -> Dict[str, Any]:
        """Shape stored in chat_messages.attachment_info"""
        return {"name": self.name, "type": self.type, "url": self.url}

    @classmethod
    def from_record(cls, record: Optional[Dict[str, Any]]) -> Optional['Attachment']:
        if not record:
            return None
        return cls(name=record.get("name", ""), type=record.get("type", ""), url=record.get("url"))

    @property
    def is_image(self) -> bool:
        return self.type.startswith("image/")


@dataclass
class ChatMessage:
    """Individual message in a conversation"""
    id: str
    role: str  # "user" or "assistant"
    content: str
    timestamp: datetime = field(default_factory=utc_now)
    attachment: Optional[Attachment] = None

    @property
    def is_local(self) -> bool:
        return self.id.startswith(LOCAL_ID_PREFIX)

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'ChatMessage':
        return cls(
            id=str(row["id"]),
            role=row["role"],
            content=row.get("content") or "",
            timestamp=parse_timestamp(row.get("created_at")),
            attachment=Attachment.from_record(row.get("attachment_info")),
        )


@dataclass
class Conversation:
    """Conversation thread owned by one user"""
    id: str
    title: str
    updated_at: datetime = field(default_factory=utc_now)
    user_id: Optional[str] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> 'Conversation':
        return cls(
            id=str(row["id"]),
            title=row.get("title") or "",
            updated_at=parse_timestamp(row.get("updated_at")),
            user_id=row.get("user_id"),
        )
