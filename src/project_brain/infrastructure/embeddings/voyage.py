"""Voyage AI embedding provider."""

from collections.abc import Sequence
from typing import Any, cast

import voyageai

from project_brain.core.base import AIServiceErrorDetails, ErrorCode, ServiceErrorDetails
from project_brain.core.circuit_breaker import CircuitBreaker
from project_brain.core.errors import ProviderError, ServiceError, ValidationError, is_transient
from project_brain.core.logging import get_logger
from project_brain.domain.models import EmbeddingResult, EmbeddingType

logger = get_logger(__name__)

# Voyage model dimensions
MODEL_DIMENSIONS = {
    "voyage-3": 1024,
    "voyage-3-large": 1024,
    "voyage-3.5": 1024,
    "voyage-3.5-lite": 1024,
    "voyage-3-lite": 512,
    "voyage-code-3": 1024,
    "voyage-large-2": 1536,
    "voyage-code-2": 1536,
}


# Message fragments of failures on Voyage's side rather than in the request
_UPSTREAM_FAILURE_MARKERS = (
    "connection",
    "service unavailable",
    "server error",
    "bad gateway",
    "gateway timeout",
    "try again",
)


class VoyageEmbeddingProvider:
    """Voyage AI embedding provider.

    One provider call embeds a whole batch. Calls pass through a circuit
    breaker so a failing upstream is rejected quickly instead of being hit by
    every record of an ingestion run; nothing is retried here.
    """

    def __init__(
        self,
        api_key: str,
        model: str = "voyage-3",
        client: Any | None = None,
        circuit_breaker: CircuitBreaker | None = None,
    ) -> None:
        """Initialize the Voyage embedding provider.

        Args:
            api_key: Voyage API key
            model: Voyage embedding model
            client: Preconstructed ``voyageai.AsyncClient``
            circuit_breaker: Breaker shared by all calls of this provider

        Raises:
            ValidationError: If neither an API key nor a client is given
            ServiceError: If the model's vector size is unknown
        """
        if client is None and not api_key:
            raise ValidationError(
                "Voyage API key not configured",
                details={
                    "source": "VoyageEmbeddingProvider",
                    "operation": "initialization",
                    "field": "voyage_api_key",
                },
            )

        if model not in MODEL_DIMENSIONS:
            raise ServiceError(
                message=f"Unknown Voyage model {model!r}; expected one of {', '.join(MODEL_DIMENSIONS)}",
                details=ServiceErrorDetails(
                    source="VoyageEmbeddingProvider",
                    operation="initialization",
                    service_name="Voyage AI",
                ),
                code=ErrorCode.CONFIG_INVALID,
            )

        self.model = model
        # voyageai client doesn't expose a public type
        self.client = client or voyageai.AsyncClient(api_key=api_key)
        self._circuit_breaker = circuit_breaker or CircuitBreaker(
            name="voyage_api",
            failure_threshold=3,
            recovery_timeout=30.0,
            expected_exception_types=(ProviderError,),
            success_threshold=2,
            failure_predicate=is_transient,
        )

    @property
    def dimensions(self) -> int:
        return MODEL_DIMENSIONS[self.model]

    async def embed(self, texts: Sequence[str], embedding_type: EmbeddingType) -> EmbeddingResult:
        """Embed ``texts`` in one call, preserving order.

        Raises:
            ProviderError: If the call fails, returns a short batch, or the circuit is open
        """
        if not texts:
            return EmbeddingResult(vectors=[], total_tokens=0)

        try:
            return await self._circuit_breaker.call_async(self._call_voyage_api, list(texts), embedding_type)
        except ServiceError as e:
            raise ProviderError(
                e.message,
                details=self._details("embed", len(texts), status_code=503),
                code=ErrorCode.CIRCUIT_OPEN,
            ) from e

    async def _call_voyage_api(self, texts: list[str], embedding_type: EmbeddingType) -> EmbeddingResult:
        try:
            response = await self.client.embed(texts=texts, model=self.model, input_type=embedding_type.value)
        except Exception as e:
            raise self._handle_error(e, texts) from e

        embeddings = getattr(response, "embeddings", None) or []
        if len(embeddings) != len(texts):
            raise ProviderError(
                "Voyage API returned incomplete embeddings",
                details=self._details("embed", len(texts), status_code=200),
                transient=True,
            )

        total_tokens = getattr(response, "total_tokens", None)
        logger.debug(
            "Voyage embeddings generated",
            count=len(embeddings),
            model=self.model,
            total_tokens=total_tokens,
        )
        return EmbeddingResult(
            vectors=[cast("list[float]", emb) for emb in embeddings],
            total_tokens=total_tokens,
        )

    def _details(self, operation: str, input_count: int, status_code: int | None = None) -> AIServiceErrorDetails:
        return AIServiceErrorDetails(
            source="VoyageEmbeddingProvider",
            operation=operation,
            service_name="Voyage AI",
            endpoint="/embeddings",
            status_code=status_code,
            provider_model=self.model,
            input_count=input_count,
        )

    def _handle_error(self, e: Exception, texts: list[str]) -> ProviderError:
        """Map client errors to ProviderError with a best-guess status.

        Rate limits, timeouts, lost connections and server-side failures are
        transient. Anything else is blamed on the request itself.
        """
        error_msg = str(e).lower()
        if "rate limit" in error_msg:
            return ProviderError(
                "Rate limit exceeded for embeddings API",
                details=self._details("embed", len(texts), status_code=429),
                code=ErrorCode.RATE_LIMITED,
                transient=True,
            )
        if isinstance(e, TimeoutError) or "timeout" in error_msg or "timed out" in error_msg:
            return ProviderError(
                "Embeddings API request timed out",
                details=self._details("embed", len(texts), status_code=408),
                code=ErrorCode.TIMEOUT,
                transient=True,
            )
        upstream = any(marker in error_msg for marker in _UPSTREAM_FAILURE_MARKERS)
        if isinstance(e, ConnectionError) or upstream:
            return ProviderError(
                f"Embeddings API unavailable: {e!s}",
                details=self._details("embed", len(texts), status_code=503),
                transient=True,
            )
        if "auth" in error_msg or "api key" in error_msg:
            return ProviderError(
                "Authentication failed for embeddings API",
                details=self._details("embed", len(texts), status_code=401),
            )
        return ProviderError(
            f"Failed to generate embeddings: {e!s}",
            details=self._details("embed", len(texts)),
        )
