"""Dedup/write gateway: the single entry point for persisting memory."""

from typing import Any

from project_brain.core.base import ErrorLevel
from project_brain.core.decorators import with_error_handling
from project_brain.core.logging import get_logger
from project_brain.domain.models import (
    ChunkWrite,
    EmbeddingType,
    FactWrite,
    JournalEntry,
    JournalWrite,
    MemoryChunk,
    WriteResult,
    parse_write_request,
)
from project_brain.domain.services import MemoryStore
from project_brain.services.chunker import estimate_tokens
from project_brain.services.embedding_gateway import EmbeddingGateway

logger = get_logger(__name__)


class WriteGateway:
    """Dispatches chunk, fact and journal writes to the store.

    Chunks are deduplicated by ``uri`` before anything is embedded, so
    re-ingesting an unchanged source costs one lookup and no provider call.
    """

    def __init__(self, store: MemoryStore, embeddings: EmbeddingGateway, default_project: str = "personal"):
        self.store = store
        self.embeddings = embeddings
        self.default_project = default_project

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def write(self, request: dict[str, Any] | ChunkWrite | FactWrite | JournalWrite) -> WriteResult:
        """Validate and persist one write.

        Raises:
            ValidationError: Unknown ``type`` or missing required fields
            ProviderError: The chunk could not be embedded
        """
        parsed = parse_write_request(request)
        project = parsed.project or self.default_project

        if isinstance(parsed, ChunkWrite):
            return await self._write_chunk(project, parsed)
        if isinstance(parsed, FactWrite):
            return await self._write_fact(project, parsed)
        return await self._write_journal(project, parsed)

    async def _write_chunk(self, project: str, request: ChunkWrite) -> WriteResult:
        existing = await self.store.get_chunk_by_uri(request.uri)
        if existing is not None:
            logger.info(f"⏭ Skipped (already exists): {request.uri}")
            return WriteResult(type="chunk", skipped=True, record=existing)

        embedded = await self.embeddings.embed_with_usage(request.content, EmbeddingType.DOCUMENT)
        if request.tokens is not None:
            tokens = request.tokens
        elif embedded.total_tokens is not None:
            tokens = embedded.total_tokens
        else:
            tokens = estimate_tokens(request.content)

        chunk = MemoryChunk(
            project=project,
            source=request.source,
            uri=request.uri,
            title=request.title,
            content=request.content,
            token_estimate=tokens,
            embedding=embedded.vectors[0],
        )
        record, created = await self.store.insert_chunk(chunk)
        if not created:
            # Another writer stored the same uri between lookup and insert
            logger.info(f"⏭ Skipped (inserted concurrently): {request.uri}")
            return WriteResult(type="chunk", skipped=True, record=record)

        logger.info(f"✓ Inserted: {request.title or request.uri} ({tokens} tokens)")
        return WriteResult(type="chunk", record=record)

    async def _write_fact(self, project: str, request: FactWrite) -> WriteResult:
        fact = await self.store.upsert_fact(project, request.kind, request.key, request.value)
        logger.info(f"Fact stored: {request.kind}: {request.key}", project=project)
        return WriteResult(type="fact", record=fact)

    async def _write_journal(self, project: str, request: JournalWrite) -> WriteResult:
        entry = await self.store.insert_journal(
            JournalEntry(
                project=project,
                summary=request.summary,
                details=request.details,
                tags=request.tags,
            )
        )
        logger.info("Journal entry stored", project=project)
        return WriteResult(type="journal", record=entry)
