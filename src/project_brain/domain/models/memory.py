"""Memory chunk domain models."""

from datetime import datetime
from uuid import UUID, uuid4

from pydantic import BaseModel, Field, field_validator

from project_brain.domain.models.utils import utc_now


class CandidateChunk(BaseModel):
    """A record produced by a format adapter, waiting to be ingested."""

    project: str
    source: str
    uri: str
    title: str = ""
    content: str
    tokens: int | None = Field(default=None, ge=0, description="Exact token count, if the adapter knows it")


class ChunkRecord(BaseModel):
    """A persisted chunk as read back from the store, without its vector."""

    id: UUID = Field(default_factory=uuid4)
    project: str
    source: str
    uri: str
    title: str = ""
    content: str
    token_estimate: int = 0
    created_at: datetime = Field(default_factory=utc_now)


class MemoryChunk(ChunkRecord):
    """Canonical schema for every remembered piece of content."""

    embedding: list[float]

    @field_validator("content")
    @classmethod
    def content_not_blank(cls, value: str) -> str:
        if not value.strip():
            raise ValueError("chunk content must not be empty")
        return value

    @field_validator("embedding")
    @classmethod
    def embedding_not_empty(cls, value: list[float]) -> list[float]:
        if not value:
            raise ValueError("chunk embedding must not be empty")
        return value

    def to_record(self) -> ChunkRecord:
        return ChunkRecord.model_validate(self.model_dump(exclude={"embedding"}))


class RetrievalResult(ChunkRecord):
    """A chunk matched by a similarity search.

    ``similarity`` is raw cosine similarity, so it may be negative.
    """

    similarity: float


class IngestionStats(BaseModel):
    """Tally of one ingestion run."""

    inserted: int = 0
    skipped: int = 0
    failed: int = 0
    tokens: int = 0

    @property
    def processed(self) -> int:
        return self.inserted + self.skipped + self.failed
