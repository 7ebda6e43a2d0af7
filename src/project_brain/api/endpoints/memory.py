"""Memory tool endpoints: search, facts, writes and chunk lookup."""

from datetime import datetime
from typing import Any

from fastapi import APIRouter, Body, Depends, Query
from pydantic import BaseModel, Field

from project_brain.api.dependencies import ServiceContainer, get_container
from project_brain.core.base import ResourceErrorDetails
from project_brain.core.errors import NotFoundError
from project_brain.core.logging import bind_request_context, get_logger
from project_brain.domain.models import ChunkRecord, Fact, RetrievalResult, WriteResult

logger = get_logger(__name__)
router = APIRouter()


class SearchRequest(BaseModel):
    """Request model for searching memory."""

    query: str = ""
    project: str | None = None
    top_k: int = Field(default=10, description="Maximum number of chunks to return")
    since: datetime | None = Field(default=None, description="Only chunks created at or after this time")


class FactsRequest(BaseModel):
    """Request model for looking up facts."""

    project: str | None = None
    kind: str | None = None
    keys: list[str] | None = None


@router.post("/search_memory", response_model=list[RetrievalResult], operation_id="search_memory")
async def search_memory(
    request: SearchRequest,
    container: ServiceContainer = Depends(get_container),
) -> list[RetrievalResult]:
    """Semantic search across stored chunks."""
    with bind_request_context(project=request.project):
        return await container.retrieval.search(
            request.query,
            project=request.project,
            top_k=request.top_k,
            since=request.since,
        )


@router.post("/get_facts", response_model=list[Fact], operation_id="get_facts")
async def get_facts(
    request: FactsRequest,
    container: ServiceContainer = Depends(get_container),
) -> list[Fact]:
    """Structured facts (deadlines, goals, decisions), newest first."""
    return await container.retrieval.get_facts(project=request.project, kind=request.kind, keys=request.keys)


@router.post("/write_memory", response_model=WriteResult, operation_id="write_memory")
async def write_memory(
    request: dict[str, Any] = Body(...),
    container: ServiceContainer = Depends(get_container),
) -> WriteResult:
    """Save a chunk, fact or journal entry.

    Accepts ``{"project", "type", "payload": {...}}`` or the same fields flat.
    """
    with bind_request_context(project=request.get("project"), operation="write_memory"):
        return await container.writes.write(request)


@router.get("/chunks", response_model=ChunkRecord, operation_id="get_chunk")
async def get_chunk(
    uri: str = Query(..., description="Natural key of the chunk"),
    container: ServiceContainer = Depends(get_container),
) -> ChunkRecord:
    """Look up a stored chunk by uri."""
    chunk = await container.store.get_chunk_by_uri(uri)
    if chunk is None:
        raise NotFoundError(
            f"No chunk stored for uri {uri}",
            details=ResourceErrorDetails(
                source="memory_endpoint",
                operation="get_chunk",
                resource_id=uri,
                resource_type="chunk",
                action="read",
            ),
        )
    return chunk
