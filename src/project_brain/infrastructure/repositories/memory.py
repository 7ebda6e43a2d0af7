"""Neo4j-backed memory store."""

from collections.abc import Awaitable, Callable, Sequence
from datetime import datetime
from functools import wraps
from typing import Any, ParamSpec, TypeVar

from neo4j import AsyncDriver, AsyncSession
from neo4j.exceptions import Neo4jError

from project_brain.core.base import DatabaseErrorDetails, ErrorCode, ErrorLevel
from project_brain.core.decorators import with_error_handling, with_session
from project_brain.core.errors import ServiceError
from project_brain.core.logging import get_logger
from project_brain.domain.models import (
    ChunkRecord,
    Fact,
    JournalEntry,
    MemoryChunk,
    RetrievalResult,
)
from project_brain.domain.models.utils import from_epoch, to_epoch
from project_brain.infrastructure.neo4j.queries import ChunkQueries, FactQueries

logger = get_logger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def database_errors(query_type: str, label: str) -> Callable[[Callable[P, Awaitable[T]]], Callable[P, Awaitable[T]]]:
    """Translate driver failures into ServiceError with database details."""

    def decorator(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
        @wraps(func)
        async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
            try:
                return await func(*args, **kwargs)
            except Neo4jError as e:
                raise ServiceError(
                    message=f"Neo4j {query_type} on {label} failed: {getattr(e, 'message', None) or e!s}",
                    details=DatabaseErrorDetails(
                        source="Neo4jMemoryStore",
                        operation=func.__name__,
                        service_name="Neo4j",
                        query_type=query_type,
                        label=label,
                    ),
                    code=ErrorCode.DB_QUERY,
                ) from e

        return wrapper

    return decorator


def _chunk_from_row(row: dict[str, Any]) -> dict[str, Any]:
    data = dict(row)
    data["created_at"] = from_epoch(data["created_at"])
    data["title"] = data.get("title") or ""
    data["token_estimate"] = data.get("token_estimate") or 0
    return data


def _fact_from_row(row: dict[str, Any]) -> Fact:
    data = dict(row)
    data["updated_at"] = from_epoch(data["updated_at"])
    return Fact.model_validate(data)


class Neo4jMemoryStore:
    """Memory store over a Neo4j database.

    Each operation opens its own session, so one store can be shared by
    concurrently running ingestion tasks. Conflict resolution for duplicate
    uris and fact keys happens in the database through ``MERGE`` and the
    uniqueness constraints created by ``ensure_schema``.
    """

    def __init__(self, driver: AsyncDriver):
        self.driver = driver

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    @database_errors("lookup", "MemoryChunk")
    async def get_chunk_by_uri(self, session: AsyncSession, uri: str) -> ChunkRecord | None:
        query, _ = ChunkQueries.get_by_uri()
        result = await session.run(query, uri=uri)
        record = await result.single()
        if record is None:
            return None
        return ChunkRecord.model_validate(_chunk_from_row(record["chunk"]))

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    @database_errors("insert", "MemoryChunk")
    async def insert_chunk(self, session: AsyncSession, chunk: MemoryChunk) -> tuple[ChunkRecord, bool]:
        query, _ = ChunkQueries.insert_if_absent()
        result = await session.run(
            query,
            id=str(chunk.id),
            uri=chunk.uri,
            project=chunk.project,
            source=chunk.source,
            title=chunk.title,
            content=chunk.content,
            token_estimate=chunk.token_estimate,
            embedding=chunk.embedding,
            created_at=to_epoch(chunk.created_at),
        )
        record = await result.single(strict=True)
        created = bool(record["created"])
        if not created:
            logger.debug(f"Chunk already exists: {chunk.uri}")
        return ChunkRecord.model_validate(_chunk_from_row(record["chunk"])), created

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    @database_errors("upsert", "Fact")
    async def upsert_fact(self, session: AsyncSession, project: str, kind: str, key: str, value: str) -> Fact:
        query, _ = FactQueries.upsert()
        new_fact = Fact(project=project, kind=kind, key=key, value=value)
        result = await session.run(
            query,
            id=str(new_fact.id),
            project=project,
            kind=kind,
            key=key,
            value=value,
            updated_at=to_epoch(new_fact.updated_at),
        )
        record = await result.single(strict=True)
        return _fact_from_row(record["fact"])

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    @database_errors("insert", "JournalEntry")
    async def insert_journal(self, session: AsyncSession, entry: JournalEntry) -> JournalEntry:
        query, _ = FactQueries.insert_journal()
        result = await session.run(
            query,
            id=str(entry.id),
            project=entry.project,
            summary=entry.summary,
            details=entry.details,
            tags=list(entry.tags),
            created_at=to_epoch(entry.created_at),
        )
        record = await result.single(strict=True)
        data = dict(record["entry"])
        data["created_at"] = from_epoch(data["created_at"])
        data["tags"] = data.get("tags") or []
        return JournalEntry.model_validate(data)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    @database_errors("search", "MemoryChunk")
    async def search_chunks(
        self,
        session: AsyncSession,
        embedding: Sequence[float],
        top_k: int,
        project: str | None = None,
        since: datetime | None = None,
    ) -> list[RetrievalResult]:
        query, params = ChunkQueries.similarity_search()
        params.update(
            embedding=list(embedding),
            top_k=top_k,
            project=project,
            since=to_epoch(since) if since is not None else None,
        )
        result = await session.run(query, params)

        results: list[RetrievalResult] = []
        async for record in result:
            data = _chunk_from_row(record["chunk"])
            data["similarity"] = float(record["similarity"])
            results.append(RetrievalResult.model_validate(data))

        logger.debug(f"Similarity search returned {len(results)} chunks", project=project, top_k=top_k)
        return results

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    @with_session()
    @database_errors("lookup", "Fact")
    async def list_facts(
        self,
        session: AsyncSession,
        project: str | None = None,
        kind: str | None = None,
        keys: Sequence[str] | None = None,
    ) -> list[Fact]:
        query, params = FactQueries.list_facts()
        params.update(project=project, kind=kind, keys=list(keys) if keys else None)
        result = await session.run(query, params)
        return [_fact_from_row(record["fact"]) async for record in result]
