"""Construction of embedding providers.

Providers are built explicitly and injected into the services that use them
rather than living as module-level singletons.
"""

from __future__ import annotations

from project_brain.core.base import ErrorCode, ServiceErrorDetails
from project_brain.core.config import Settings, settings
from project_brain.core.decorators import with_error_handling
from project_brain.core.errors import ServiceError
from project_brain.core.logging import get_logger
from project_brain.domain.services import EmbeddingProvider
from project_brain.infrastructure.embeddings.voyage import VoyageEmbeddingProvider

logger = get_logger(__name__)


class EmbeddingProviderBuilder:
    """Builder for properly configured embedding provider instances."""

    def __init__(self, config: Settings | None = None):
        self.config = config or settings
        self._api_key: str | None = None
        self._model: str | None = None

    def with_api_key(self, api_key: str) -> EmbeddingProviderBuilder:
        """Set the API key for the embedding provider."""
        self._api_key = api_key
        return self

    def with_model(self, model: str) -> EmbeddingProviderBuilder:
        """Set the embedding model to use."""
        self._model = model
        return self

    @with_error_handling(reraise=True)
    def build(self) -> EmbeddingProvider:
        """Build the configured embedding provider.

        Raises:
            ServiceError: If required configuration is missing
        """
        api_key = self._api_key or self.config.voyage_api_key
        if not api_key:
            raise ServiceError(
                message="VOYAGE_API_KEY not configured",
                details=ServiceErrorDetails(
                    source="embedding_builder",
                    operation="build",
                    service_name="voyage",
                    endpoint="/embeddings",
                ),
                code=ErrorCode.CONFIG_MISSING,
            )

        model = self._model or self.config.embedding_model
        logger.info(f"Creating VoyageEmbeddingProvider with model {model}")
        provider = VoyageEmbeddingProvider(api_key=api_key, model=model)

        self._validate_provider(provider)
        return provider

    def _validate_provider(self, provider: EmbeddingProvider) -> None:
        """Validate that the provider reports a usable vector size.

        Raises:
            ServiceError: If provider validation fails
        """
        dimensions = provider.dimensions
        if dimensions <= 0:
            raise ServiceError(
                message=f"Invalid embedding dimensions: {dimensions}",
                details=ServiceErrorDetails(
                    source="embedding_builder",
                    operation="validate",
                    service_name="voyage",
                    endpoint="/embeddings",
                ),
            )

        logger.info(f"✅ Embedding provider validated: dimensions={dimensions}")


def create_embedding_provider(
    config: Settings | None = None,
    api_key: str | None = None,
    model: str | None = None,
) -> EmbeddingProvider:
    """Convenience function to create an embedding provider.

    Example:
        ```python
        provider = create_embedding_provider()
        gateway = EmbeddingGateway(provider)
        ```
    """
    builder = EmbeddingProviderBuilder(config)

    if api_key:
        builder.with_api_key(api_key)

    if model:
        builder.with_model(model)

    return builder.build()
