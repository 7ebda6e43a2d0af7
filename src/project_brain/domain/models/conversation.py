"""Chat transcript models used when saving a conversation to memory."""

from enum import Enum

from pydantic import BaseModel, Field


class MessageRole(str, Enum):
    USER = "user"
    ASSISTANT = "assistant"


class CitedSource(BaseModel):
    title: str = ""
    uri: str


class ChatMessage(BaseModel):
    """One turn of a finished chat."""

    role: MessageRole
    content: str
    citations: list[CitedSource] = Field(default_factory=list)
