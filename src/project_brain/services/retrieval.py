"""Retrieval engine: similarity search over stored chunks plus fact lookup."""

from collections.abc import Sequence
from datetime import datetime

from project_brain.core.base import ErrorLevel, ValidationErrorDetails
from project_brain.core.decorators import with_error_handling
from project_brain.core.errors import ValidationError
from project_brain.core.logging import get_logger
from project_brain.domain.models import EmbeddingType, Fact, RetrievalResult
from project_brain.domain.services import MemoryStore
from project_brain.services.embedding_gateway import EmbeddingGateway

logger = get_logger(__name__)


class RetrievalEngine:
    """Finds the chunks most similar to a query.

    Similarity is raw cosine similarity and can be negative. Results are
    ordered by similarity, most similar first, with ties going to the most
    recently created chunk.
    """

    def __init__(self, store: MemoryStore, embeddings: EmbeddingGateway):
        self.store = store
        self.embeddings = embeddings

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def search(
        self,
        query: str,
        project: str | None = None,
        top_k: int = 10,
        since: datetime | None = None,
    ) -> list[RetrievalResult]:
        """Rank stored chunks against ``query``.

        ``project`` is an exact match and ``since`` an inclusive lower bound
        on creation time. No match is an empty list, never an error.

        Raises:
            ValidationError: Blank query or ``top_k`` below 1
            ProviderError: The query could not be embedded
        """
        if not query or not query.strip():
            raise ValidationError(
                "query is required",
                details=ValidationErrorDetails(source="retrieval", operation="search", field="query"),
            )
        if top_k < 1:
            raise ValidationError(
                f"top_k must be at least 1, got {top_k}",
                details=ValidationErrorDetails(
                    source="retrieval",
                    operation="search",
                    field="top_k",
                    actual_value=top_k,
                    constraint=">= 1",
                ),
            )

        embedding = await self.embeddings.embed(query, EmbeddingType.QUERY)
        results = await self.store.search_chunks(embedding, top_k=top_k, project=project, since=since)
        logger.info(f"🔍 Found {len(results)} memories", project=project, top_k=top_k)
        return results

    async def get_facts(
        self,
        project: str | None = None,
        kind: str | None = None,
        keys: Sequence[str] | None = None,
    ) -> list[Fact]:
        """Facts matching the filters, most recently updated first."""
        return await self.store.list_facts(project=project, kind=kind, keys=keys)
