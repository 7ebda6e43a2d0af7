"""Batch ingestion of candidate records."""

import asyncio
import json
from collections.abc import Sequence
from datetime import datetime
from pathlib import Path

from pydantic import ValidationError as PydanticValidationError

from project_brain.core.base import ErrorLevel, ValidationErrorDetails
from project_brain.core.decorators import with_error_handling
from project_brain.core.errors import ValidationError
from project_brain.core.logging import bind_request_context, get_logger
from project_brain.domain.models import (
    CandidateChunk,
    ChatMessage,
    ChunkRecord,
    IngestionStats,
    MessageRole,
    WriteResult,
)
from project_brain.domain.models.utils import utc_now
from project_brain.services.chunker import chunk_text, estimate_tokens
from project_brain.services.write_gateway import WriteGateway

logger = get_logger(__name__)

CONVERSATION_TITLE_CHARS = 80


def expand_records(records: Sequence[CandidateChunk], max_chunk_size: int) -> list[CandidateChunk]:
    """Split records longer than ``max_chunk_size`` into numbered parts.

    Parts get ``{uri}#chunk{i}`` uris and ``{title} (part i/n)`` titles so
    each part deduplicates on its own. Short records pass through unchanged.
    """
    expanded: list[CandidateChunk] = []
    for record in records:
        if len(record.content) <= max_chunk_size:
            expanded.append(record)
            continue

        parts = chunk_text(record.content, max_chunk_size)
        if len(parts) <= 1:
            expanded.append(record)
            continue

        for index, part in enumerate(parts):
            expanded.append(
                record.model_copy(
                    update={
                        "uri": f"{record.uri}#chunk{index}",
                        "title": f"{record.title} (part {index + 1}/{len(parts)})",
                        "content": part,
                        "tokens": None,
                    }
                )
            )
    return expanded


def load_records(path: Path) -> list[CandidateChunk]:
    """Read adapter output: a JSON array, an object with a ``records`` list, or JSON lines.

    Raises:
        ValidationError: If the file does not hold valid records
    """
    text = path.read_text(encoding="utf-8")
    try:
        if path.suffix == ".jsonl":
            raw = [json.loads(line) for line in text.splitlines() if line.strip()]
        else:
            data = json.loads(text)
            raw = data.get("records", []) if isinstance(data, dict) else data
        return [CandidateChunk.model_validate(item) for item in raw]
    except (json.JSONDecodeError, PydanticValidationError) as e:
        raise ValidationError(
            f"Cannot read records from {path}: {e!s}",
            details=ValidationErrorDetails(
                source="ingestion",
                operation="load_records",
                field="records",
                actual_value=str(path),
            ),
        ) from e


def conversation_to_record(
    messages: Sequence[ChatMessage],
    project: str,
    assistant_name: str = "ShainAI",
    now: datetime | None = None,
) -> CandidateChunk:
    """Turn a finished chat into one chunk record.

    Raises:
        ValidationError: If there are no messages
    """
    if not messages:
        raise ValidationError(
            "messages array is required",
            details=ValidationErrorDetails(
                source="ingestion",
                operation="conversation_to_record",
                field="messages",
                constraint="non-empty",
            ),
        )

    now = now or utc_now()
    conversation_id = f"conv_{int(now.timestamp() * 1000)}"

    lines: list[str] = []
    for message in messages:
        speaker = "User" if message.role == MessageRole.USER else assistant_name
        lines.append(f"{speaker}: {message.content}\n\n")
        if message.citations:
            lines.append("Sources referenced:\n")
            lines.extend(f"- {c.title} ({c.uri})\n" for c in message.citations)
            lines.append("\n")
    conversation_text = "".join(lines)

    first_user = next((m for m in messages if m.role == MessageRole.USER), None)
    if first_user is not None:
        title = first_user.content[:CONVERSATION_TITLE_CHARS]
        if len(first_user.content) > CONVERSATION_TITLE_CHARS:
            title += "..."
    else:
        title = f"{assistant_name} Conversation"

    return CandidateChunk(
        project=project,
        source=assistant_name.lower(),
        uri=f"{assistant_name.lower()}://conversation/{conversation_id}",
        title=f"{assistant_name} Chat: {title}",
        content=f"# {assistant_name} Conversation\nDate: {now.isoformat()}\n\n{conversation_text}",
        tokens=estimate_tokens(conversation_text),
    )


class IngestionPipeline:
    """Drives candidate records through the write gateway in bounded windows.

    Each window of ``concurrency`` records is written concurrently and must
    settle before the next window starts. A failing record is logged and
    counted as failed; it never aborts the run.
    """

    def __init__(self, gateway: WriteGateway, max_chunk_size: int = 1500):
        self.gateway = gateway
        self.max_chunk_size = max_chunk_size

    async def ingest(self, records: Sequence[CandidateChunk], concurrency: int = 5) -> IngestionStats:
        """Ingest ``records`` and return the tally.

        Raises:
            ValidationError: If ``concurrency`` is smaller than 1
        """
        if concurrency < 1:
            raise ValidationError(
                f"concurrency must be at least 1, got {concurrency}",
                details=ValidationErrorDetails(
                    source="ingestion",
                    operation="ingest",
                    field="concurrency",
                    actual_value=concurrency,
                    constraint=">= 1",
                ),
            )

        candidates = expand_records(records, self.max_chunk_size)
        stats = IngestionStats()
        total = len(candidates)

        with bind_request_context(operation="ingest"):
            logger.info(f"📦 Ingesting {total} chunks from {len(records)} records", concurrency=concurrency)

            for start in range(0, total, concurrency):
                window = candidates[start : start + concurrency]
                results = await asyncio.gather(*(self._ingest_one(c) for c in window))

                for result in results:
                    if result is None:
                        stats.failed += 1
                    elif result.skipped:
                        stats.skipped += 1
                    else:
                        stats.inserted += 1
                        if isinstance(result.record, ChunkRecord):
                            stats.tokens += result.record.token_estimate

                logger.info(f"Progress: {min(start + concurrency, total)}/{total}")

            logger.info(
                "✅ Ingestion complete",
                inserted=stats.inserted,
                skipped=stats.skipped,
                failed=stats.failed,
                tokens=stats.tokens,
            )
        return stats

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=False)
    async def _ingest_one(self, candidate: CandidateChunk) -> WriteResult | None:
        return await self.gateway.write(
            {
                "type": "chunk",
                "project": candidate.project,
                "source": candidate.source,
                "uri": candidate.uri,
                "title": candidate.title,
                "content": candidate.content,
                "tokens": candidate.tokens,
            }
        )
