from .chunker import chunk_text, estimate_tokens
from .embedding_gateway import EmbeddingGateway, cosine_similarity
from .ingestion import IngestionPipeline, conversation_to_record, expand_records
from .orchestrator import AnswerOrchestrator, build_context, parse_suggestions
from .retrieval import RetrievalEngine
from .write_gateway import WriteGateway

__all__ = [
    "AnswerOrchestrator",
    "EmbeddingGateway",
    "IngestionPipeline",
    "RetrievalEngine",
    "WriteGateway",
    "build_context",
    "chunk_text",
    "conversation_to_record",
    "cosine_similarity",
    "estimate_tokens",
    "expand_records",
    "parse_suggestions",
]
