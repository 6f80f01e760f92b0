import uuid
from datetime import datetime, timezone
from typing import List, Literal
from pydantic import BaseModel, ConfigDict, Field

def generate_id() -> str:
    return uuid.uuid4().hex

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class ChatMessage(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str = Field(default_factory=generate_id)
    role: Literal["user", "agent"]
    content: str
    timestamp: datetime = Field(default_factory=utcnow)

class ChatSession(BaseModel):
    id: str = Field(default_factory=generate_id)
    title: str = "New Chat"
    custom_title: bool = False
    created_at: datetime = Field(default_factory=utcnow)
    updated_at: datetime = Field(default_factory=utcnow)
    messages: List[ChatMessage] = Field(default_factory=list)

class ChatReply(BaseModel):
    reply: str
