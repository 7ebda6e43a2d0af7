"""Domain models for Project Brain."""

from .answer import (
    Answer,
    AnswerMetadata,
    Citation,
    FactSuggestion,
    JournalSuggestion,
    Suggestion,
)
from .conversation import ChatMessage, CitedSource, MessageRole
from .embedding import EmbeddingResult, EmbeddingType
from .facts import Fact, JournalEntry
from .memory import (
    CandidateChunk,
    ChunkRecord,
    IngestionStats,
    MemoryChunk,
    RetrievalResult,
)
from .writes import (
    ChunkWrite,
    FactWrite,
    JournalWrite,
    WriteRequest,
    WriteResult,
    parse_write_request,
)

__all__ = [
    # Answer
    "Answer",
    "AnswerMetadata",
    # Memory
    "CandidateChunk",
    # Conversation
    "ChatMessage",
    "ChunkRecord",
    # Writes
    "ChunkWrite",
    "Citation",
    "CitedSource",
    # Embedding
    "EmbeddingResult",
    "EmbeddingType",
    # Facts
    "Fact",
    "FactSuggestion",
    "FactWrite",
    "IngestionStats",
    "JournalEntry",
    "JournalSuggestion",
    "JournalWrite",
    "MemoryChunk",
    "MessageRole",
    "RetrievalResult",
    "Suggestion",
    "WriteRequest",
    "WriteResult",
    "parse_write_request",
]
