"""Domain service protocols."""

from collections.abc import Sequence
from datetime import datetime
from typing import Protocol, runtime_checkable

from project_brain.domain.models import (
    ChunkRecord,
    EmbeddingResult,
    EmbeddingType,
    Fact,
    JournalEntry,
    MemoryChunk,
    RetrievalResult,
)


@runtime_checkable
class EmbeddingProvider(Protocol):
    """Protocol for embedding providers."""

    @property
    def dimensions(self) -> int:
        """Fixed length of every vector this provider returns."""
        ...

    async def embed(self, texts: Sequence[str], embedding_type: EmbeddingType) -> EmbeddingResult:
        """Generate one vector per text, in input order."""
        ...


@runtime_checkable
class LanguageModel(Protocol):
    """Protocol for single-turn chat completion."""

    async def complete(self, system: str, prompt: str, model: str | None = None) -> str:
        """Return the model's text answer to ``prompt``."""
        ...


@runtime_checkable
class MemoryStore(Protocol):
    """Protocol for the vector-capable datastore."""

    async def get_chunk_by_uri(self, uri: str) -> ChunkRecord | None: ...

    async def insert_chunk(self, chunk: MemoryChunk) -> tuple[ChunkRecord, bool]:
        """Insert unless a chunk with the same uri exists.

        Returns the stored record and whether this call created it.
        """
        ...

    async def upsert_fact(self, project: str, kind: str, key: str, value: str) -> Fact: ...

    async def insert_journal(self, entry: JournalEntry) -> JournalEntry: ...

    async def search_chunks(
        self,
        embedding: Sequence[float],
        top_k: int,
        project: str | None = None,
        since: datetime | None = None,
    ) -> list[RetrievalResult]:
        """Nearest chunks by cosine similarity, most similar first, ties by recency."""
        ...

    async def list_facts(
        self,
        project: str | None = None,
        kind: str | None = None,
        keys: Sequence[str] | None = None,
    ) -> list[Fact]: ...
