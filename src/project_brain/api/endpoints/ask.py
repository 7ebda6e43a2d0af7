"""Question answering and ingestion endpoints."""

from typing import Any

from fastapi import APIRouter, Depends
from pydantic import BaseModel, Field

from project_brain.api.dependencies import ServiceContainer, get_container
from project_brain.core.logging import get_logger
from project_brain.domain.models import Answer, CandidateChunk, ChatMessage, IngestionStats
from project_brain.services.ingestion import conversation_to_record

logger = get_logger(__name__)
router = APIRouter()


class AskRequest(BaseModel):
    message: str = ""
    project: str | None = None
    model: str | None = Field(default=None, description="Chat model override")


class IngestRequest(BaseModel):
    records: list[CandidateChunk]
    concurrency: int | None = Field(default=None, description="Records written concurrently per window")


class ConversationRequest(BaseModel):
    messages: list[ChatMessage] = Field(default_factory=list)
    project: str | None = None


@router.post("/ask", response_model=Answer, operation_id="ask")
async def ask(
    request: AskRequest,
    container: ServiceContainer = Depends(get_container),
) -> Answer:
    """Answer a question from memory with citations and suggested writes."""
    return await container.orchestrator.ask(request.message, project=request.project, model=request.model)


@router.post("/ingest", response_model=IngestionStats, operation_id="ingest")
async def ingest(
    request: IngestRequest,
    container: ServiceContainer = Depends(get_container),
) -> IngestionStats:
    """Ingest adapter records; returns the inserted/skipped/failed tally."""
    concurrency = request.concurrency or container.config.ingest_concurrency
    return await container.pipeline.ingest(request.records, concurrency=concurrency)


@router.post("/ingest-conversation", operation_id="ingest_conversation")
async def ingest_conversation(
    request: ConversationRequest,
    container: ServiceContainer = Depends(get_container),
) -> dict[str, Any]:
    """Save a finished chat as one memory chunk."""
    record = conversation_to_record(
        request.messages,
        project=request.project or container.config.default_project,
        assistant_name=container.config.assistant_name,
    )
    result = await container.writes.write({"type": "chunk", **record.model_dump()})
    logger.info(f"💾 Saved conversation to memory: {record.uri}")
    return {"success": True, "uri": record.uri, **result.model_dump(mode="json")}
