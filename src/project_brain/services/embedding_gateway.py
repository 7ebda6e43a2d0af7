"""Embedding gateway: truncation, batching and vector checks around a provider."""

from collections.abc import Sequence

import numpy as np

from project_brain.core.base import AIServiceErrorDetails, ErrorLevel
from project_brain.core.decorators import with_error_handling
from project_brain.core.errors import ProviderError
from project_brain.core.logging import get_logger
from project_brain.domain.models import EmbeddingResult, EmbeddingType
from project_brain.domain.services import EmbeddingProvider

logger = get_logger(__name__)

DEFAULT_MAX_CHARS = 8000


def cosine_similarity(vector_a: Sequence[float], vector_b: Sequence[float]) -> float:
    """Raw cosine similarity in [-1, 1]; 0.0 when either vector has no length."""
    a = np.asarray(vector_a, dtype=float)
    b = np.asarray(vector_b, dtype=float)
    if a.shape != b.shape:
        raise ValueError(f"Vector dimensions differ: {a.shape[0]} != {b.shape[0]}")

    norm_a = np.linalg.norm(a)
    norm_b = np.linalg.norm(b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return float(np.dot(a, b) / (norm_a * norm_b))


class EmbeddingGateway:
    """Calls the embedding provider with inputs cut to a safe size.

    Every text is truncated to ``max_chars`` characters before it is sent and
    every returned vector must match the provider's dimensionality.
    """

    def __init__(self, provider: EmbeddingProvider, max_chars: int = DEFAULT_MAX_CHARS):
        self.provider = provider
        self.max_chars = max_chars

    @property
    def dimensions(self) -> int:
        return self.provider.dimensions

    def truncate(self, text: str) -> str:
        return text[: self.max_chars]

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def embed(self, text: str, embedding_type: EmbeddingType = EmbeddingType.DOCUMENT) -> list[float]:
        """Embed a single text.

        Raises:
            ProviderError: If the text is blank or the provider call fails
        """
        result = await self.embed_with_usage(text, embedding_type)
        return result.vectors[0]

    async def embed_with_usage(
        self, text: str, embedding_type: EmbeddingType = EmbeddingType.DOCUMENT
    ) -> EmbeddingResult:
        """Embed a single text and keep the provider-reported token usage."""
        if not text or not text.strip():
            raise ProviderError(
                "Text is required for embedding",
                details=self._details("embed", 1),
            )
        return await self._call_provider([self.truncate(text)], embedding_type)

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def embed_batch(
        self, texts: Sequence[str], embedding_type: EmbeddingType = EmbeddingType.DOCUMENT
    ) -> list[list[float]]:
        """Embed texts in one provider call, preserving order and length.

        An empty batch returns ``[]`` without calling the provider.
        """
        if not texts:
            return []
        result = await self._call_provider([self.truncate(t) for t in texts], embedding_type)
        return result.vectors

    async def _call_provider(self, texts: list[str], embedding_type: EmbeddingType) -> EmbeddingResult:
        try:
            result = await self.provider.embed(texts, embedding_type)
        except ProviderError:
            raise
        except Exception as e:
            raise ProviderError(
                f"Embedding provider failed: {e!s}",
                details=self._details("embed", len(texts)),
            ) from e

        if len(result.vectors) != len(texts):
            raise ProviderError(
                f"Embedding provider returned {len(result.vectors)} vectors for {len(texts)} inputs",
                details=self._details("embed", len(texts)),
            )

        expected = self.provider.dimensions
        for vector in result.vectors:
            if len(vector) != expected:
                raise ProviderError(
                    f"Embedding dimension mismatch: expected {expected}, got {len(vector)}",
                    details=self._details("embed", len(texts)),
                )

        logger.debug("Embedded texts", count=len(texts), embedding_type=embedding_type.value)
        return result

    def _details(self, operation: str, input_count: int) -> AIServiceErrorDetails:
        return AIServiceErrorDetails(
            source="embedding_gateway",
            operation=operation,
            service_name=type(self.provider).__name__,
            input_count=input_count,
        )
