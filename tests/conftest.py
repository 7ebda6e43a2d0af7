"""
Pytest configuration for the Project Brain test suite.

Provides deterministic stand-ins for the embedding provider, the memory
store and the language model so services can be exercised without network
or database access.
"""

import hashlib
import itertools
from collections.abc import Sequence
from datetime import datetime

import pytest

from project_brain.core.config import Settings
from project_brain.core.errors import ProviderError, ServiceError
from project_brain.domain.models import (
    ChunkRecord,
    EmbeddingResult,
    EmbeddingType,
    Fact,
    JournalEntry,
    MemoryChunk,
    RetrievalResult,
)
from project_brain.domain.models.utils import utc_now
from project_brain.services.embedding_gateway import EmbeddingGateway, cosine_similarity
from project_brain.services.ingestion import IngestionPipeline
from project_brain.services.orchestrator import AnswerOrchestrator
from project_brain.services.retrieval import RetrievalEngine
from project_brain.services.write_gateway import WriteGateway

pytest_plugins = ["pytest_asyncio"]

DIMENSIONS = 8


class HashEmbeddingProvider:
    """Vectors derived from a hash of the text, with optional fixed overrides."""

    def __init__(self, dimensions: int = DIMENSIONS):
        self._dimensions = dimensions
        self.vectors: dict[str, list[float]] = {}
        self.fail_on: set[str] = set()
        self.calls: list[tuple[list[str], EmbeddingType]] = []
        self.total_tokens: int | None = None

    @property
    def dimensions(self) -> int:
        return self._dimensions

    def vector_for(self, text: str) -> list[float]:
        if text in self.vectors:
            return self.vectors[text]
        digest = hashlib.sha256(text.encode("utf-8")).digest()
        return [(b - 127.5) / 127.5 for b in digest[: self._dimensions]]

    async def embed(self, texts: Sequence[str], embedding_type: EmbeddingType) -> EmbeddingResult:
        self.calls.append((list(texts), embedding_type))
        for text in texts:
            if text in self.fail_on:
                raise ProviderError(f"embedding failed for {text[:20]}")
        return EmbeddingResult(vectors=[self.vector_for(t) for t in texts], total_tokens=self.total_tokens)


class InMemoryStore:
    """Memory store keeping everything in dictionaries."""

    def __init__(self):
        self.chunks: dict[str, MemoryChunk] = {}
        self.facts: dict[tuple[str, str, str], Fact] = {}
        self.journal: list[JournalEntry] = []
        self.fail_insert_uris: set[str] = set()
        self._sequence = itertools.count()
        self._inserted_at: dict[str, int] = {}

    async def get_chunk_by_uri(self, uri: str) -> ChunkRecord | None:
        chunk = self.chunks.get(uri)
        return chunk.to_record() if chunk else None

    async def insert_chunk(self, chunk: MemoryChunk) -> tuple[ChunkRecord, bool]:
        if chunk.uri in self.fail_insert_uris:
            raise ServiceError(f"insert failed for {chunk.uri}")
        if chunk.uri in self.chunks:
            return self.chunks[chunk.uri].to_record(), False
        self.chunks[chunk.uri] = chunk
        self._inserted_at[chunk.uri] = next(self._sequence)
        return chunk.to_record(), True

    async def upsert_fact(self, project: str, kind: str, key: str, value: str) -> Fact:
        identity = (project, kind, key)
        existing = self.facts.get(identity)
        fact = Fact(project=project, kind=kind, key=key, value=value, updated_at=utc_now())
        if existing is not None:
            fact.id = existing.id
        self.facts[identity] = fact
        return fact

    async def insert_journal(self, entry: JournalEntry) -> JournalEntry:
        self.journal.append(entry)
        return entry

    async def search_chunks(
        self,
        embedding: Sequence[float],
        top_k: int,
        project: str | None = None,
        since: datetime | None = None,
    ) -> list[RetrievalResult]:
        matches = [
            c
            for c in self.chunks.values()
            if (project is None or c.project == project) and (since is None or c.created_at >= since)
        ]
        ranked = sorted(
            matches,
            key=lambda c: (
                -cosine_similarity(c.embedding, embedding),
                -c.created_at.timestamp(),
                -self._inserted_at[c.uri],
            ),
        )
        return [
            RetrievalResult(
                **c.model_dump(exclude={"embedding"}),
                similarity=cosine_similarity(c.embedding, embedding),
            )
            for c in ranked[:top_k]
        ]

    async def list_facts(
        self,
        project: str | None = None,
        kind: str | None = None,
        keys: Sequence[str] | None = None,
    ) -> list[Fact]:
        facts = [
            f
            for f in self.facts.values()
            if (project is None or f.project == project)
            and (kind is None or f.kind == kind)
            and (not keys or f.key in keys)
        ]
        return sorted(facts, key=lambda f: f.updated_at, reverse=True)


class ScriptedLanguageModel:
    """Returns a fixed answer and records every prompt it was given."""

    def __init__(self, answer: str = "The launch is on Oct 22."):
        self.answer = answer
        self.error: Exception | None = None
        self.calls: list[dict[str, str | None]] = []

    async def complete(self, system: str, prompt: str, model: str | None = None) -> str:
        self.calls.append({"system": system, "prompt": prompt, "model": model})
        if self.error is not None:
            raise self.error
        return self.answer


@pytest.fixture
def config() -> Settings:
    return Settings(
        _env_file=None,
        voyage_api_key="test",
        anthropic_api_key="test",
        max_chunk_size=200,
    )


@pytest.fixture
def provider() -> HashEmbeddingProvider:
    return HashEmbeddingProvider()


@pytest.fixture
def store() -> InMemoryStore:
    return InMemoryStore()


@pytest.fixture
def language_model() -> ScriptedLanguageModel:
    return ScriptedLanguageModel()


@pytest.fixture
def embeddings(provider) -> EmbeddingGateway:
    return EmbeddingGateway(provider, max_chars=8000)


@pytest.fixture
def write_gateway(store, embeddings) -> WriteGateway:
    return WriteGateway(store, embeddings, default_project="personal")


@pytest.fixture
def pipeline(write_gateway) -> IngestionPipeline:
    return IngestionPipeline(write_gateway, max_chunk_size=200)


@pytest.fixture
def retrieval(store, embeddings) -> RetrievalEngine:
    return RetrievalEngine(store, embeddings)


@pytest.fixture
def orchestrator(retrieval, language_model, config) -> AnswerOrchestrator:
    return AnswerOrchestrator(
        retrieval,
        language_model,
        owner=config.owner,
        default_model=config.chat_model,
        allowed_models=config.allowed_chat_models,
    )
