"""Embedding models."""

from enum import Enum

from pydantic import BaseModel, Field


class EmbeddingType(str, Enum):
    """Types of embedding vectors.

    Voyage optimizes vectors differently for stored documents and for the
    queries run against them.
    """

    DOCUMENT = "document"
    QUERY = "query"


class EmbeddingResult(BaseModel):
    """Vectors returned by one provider call, in input order."""

    vectors: list[list[float]] = Field(default_factory=list)
    total_tokens: int | None = Field(default=None, description="Provider-reported usage, when available")
