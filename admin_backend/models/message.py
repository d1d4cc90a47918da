from datetime import datetime
from enum import Enum
from typing import Any, Dict, Optional

from pydantic import BaseModel, Field


class MessageStatus(str, Enum):
    NEW = "new"
    READ = "read"
    REPLIED = "replied"
    ARCHIVED = "archived"


class StoredMessage(BaseModel):
    id: int
    user_id: str
    text: Optional[str] = None
    status: str
    created_at: datetime
    updated_at: Optional[datetime] = None

    @classmethod
    def from_row(cls, row: Dict[str, Any]) -> "StoredMessage":
        return cls(**row)


class StatusUpdate(BaseModel):
    status: MessageStatus


class ReplyIn(BaseModel):
    text: str = Field(min_length=1, max_length=4096)
