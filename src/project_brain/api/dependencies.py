"""API dependencies.

Services are assembled once per process into a ``ServiceContainer`` and
stored on ``app.state``; endpoints pull the piece they need from it.
"""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

from fastapi import HTTPException, Request

from project_brain.core.config import Settings
from project_brain.core.logging import get_logger
from project_brain.domain.services import EmbeddingProvider, LanguageModel, MemoryStore
from project_brain.infrastructure.embeddings.factory import create_embedding_provider
from project_brain.infrastructure.llm.anthropic import AnthropicLanguageModel
from project_brain.infrastructure.neo4j.driver import create_neo4j_driver, ensure_schema
from project_brain.infrastructure.repositories.memory import Neo4jMemoryStore
from project_brain.services.embedding_gateway import EmbeddingGateway
from project_brain.services.ingestion import IngestionPipeline
from project_brain.services.orchestrator import AnswerOrchestrator
from project_brain.services.retrieval import RetrievalEngine
from project_brain.services.write_gateway import WriteGateway

logger = get_logger(__name__)


@dataclass
class ServiceContainer:
    config: Settings
    store: MemoryStore
    embeddings: EmbeddingGateway
    writes: WriteGateway
    pipeline: IngestionPipeline
    retrieval: RetrievalEngine
    orchestrator: AnswerOrchestrator


def build_container(
    config: Settings,
    store: MemoryStore,
    provider: EmbeddingProvider,
    language_model: LanguageModel,
) -> ServiceContainer:
    """Wire the services around explicitly constructed clients."""
    embeddings = EmbeddingGateway(provider, max_chars=config.embedding_max_chars)
    writes = WriteGateway(store, embeddings, default_project=config.default_project)
    retrieval = RetrievalEngine(store, embeddings)
    return ServiceContainer(
        config=config,
        store=store,
        embeddings=embeddings,
        writes=writes,
        pipeline=IngestionPipeline(writes, max_chunk_size=config.max_chunk_size),
        retrieval=retrieval,
        orchestrator=AnswerOrchestrator(
            retrieval,
            language_model,
            owner=config.owner,
            default_model=config.chat_model,
            allowed_models=config.allowed_chat_models,
            top_k=config.ask_top_k,
            excerpt_chars=config.context_excerpt_chars,
            default_fact_kind=config.default_fact_kind,
        ),
    )


@asynccontextmanager
async def connect_services(config: Settings) -> AsyncIterator[ServiceContainer]:
    """Connect to Neo4j and the model providers and wire the services.

    The Neo4j driver is closed when the block exits.
    """
    async with create_neo4j_driver(config) as driver:
        await ensure_schema(driver)

        provider = create_embedding_provider(config)
        logger.info(f"📏 Embedding dimensions: {provider.dimensions}")
        language_model = AnthropicLanguageModel(
            api_key=config.anthropic_api_key,
            default_model=config.chat_model,
            max_tokens=config.chat_max_tokens,
        )
        yield build_container(config, Neo4jMemoryStore(driver), provider, language_model)


def get_container(request: Request) -> ServiceContainer:
    container: ServiceContainer | None = getattr(request.app.state, "container", None)
    if container is None:
        raise HTTPException(status_code=503, detail="Services not initialized")
    return container
