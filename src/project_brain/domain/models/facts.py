"""Structured fact and journal models."""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from project_brain.domain.models.utils import utc_now


class Fact(BaseModel):
    """A small structured claim, unique per (project, kind, key)."""

    id: UUID = Field(default_factory=uuid4)
    project: str
    kind: str = Field(description="deadline, goal, decision, ...")
    key: str
    value: str
    updated_at: datetime = Field(default_factory=utc_now)


class JournalEntry(BaseModel):
    """An append-only note about what happened in a project."""

    id: UUID = Field(default_factory=uuid4)
    project: str
    summary: str
    details: str | None = None
    tags: list[str] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
