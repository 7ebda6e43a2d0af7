"""Answer orchestrator: retrieval, prompt assembly, generation and parsing."""

import re
from collections.abc import Sequence

from project_brain.core.base import ErrorLevel, ValidationErrorDetails
from project_brain.core.config import OwnerConfig
from project_brain.core.decorators import with_error_handling
from project_brain.core.errors import ValidationError
from project_brain.core.logging import bind_request_context, get_logger
from project_brain.domain.models import (
    Answer,
    AnswerMetadata,
    Citation,
    Fact,
    FactSuggestion,
    JournalSuggestion,
    RetrievalResult,
    Suggestion,
)
from project_brain.domain.services import LanguageModel
from project_brain.services.prompts import build_citation_prompt, build_system_prompt
from project_brain.services.retrieval import RetrievalEngine

logger = get_logger(__name__)

# Everything after the marker up to the first blank line
SUGGESTED_WRITES_PATTERN = re.compile(r"(?:💡\s*)?Suggested writes?:\s*(.*?)(?:\n\s*\n|\Z)", re.DOTALL | re.IGNORECASE)
FACT_PATTERN = re.compile(
    r'Fact:\s*(?:(?P<kind>[A-Za-z_]+)\s*:\s*)?(?P<key>[^=\n"]+?)\s*=\s*"(?P<value>[^"\n]+)"'
)
JOURNAL_PATTERN = re.compile(r"Journal:\s*(.+)")


def build_context(memories: Sequence[RetrievalResult], facts: Sequence[Fact], excerpt_chars: int = 500) -> str:
    """Render retrieved chunks and facts as the prompt's context block.

    A section with nothing in it is left out.
    """
    parts: list[str] = []

    if memories:
        parts.append("## Memory Chunks\n")
        for i, memory in enumerate(memories, start=1):
            parts.append(f"[{i}] {memory.title} (similarity: {memory.similarity:.3f})")
            parts.append(f"URI: {memory.uri}")
            parts.append(f"Content: {memory.content[:excerpt_chars]}...\n")

    if facts:
        parts.append("\n## Facts\n")
        parts.extend(f"• {fact.kind}: {fact.key} = {fact.value}" for fact in facts)

    return "\n".join(parts)


def parse_suggestions(answer_text: str, default_kind: str = "decision") -> list[Suggestion]:
    """Best-effort extraction of suggested writes from free-form model output.

    Only the block following the "Suggested writes:" marker is scanned.
    Lines that do not match the expected shapes are ignored.
    """
    match = SUGGESTED_WRITES_PATTERN.search(answer_text)
    if not match:
        return []
    block = match.group(1)

    suggestions: list[Suggestion] = []
    for fact in FACT_PATTERN.finditer(block):
        suggestions.append(
            FactSuggestion(
                kind=(fact.group("kind") or default_kind).strip(),
                key=fact.group("key").strip(),
                value=fact.group("value").strip(),
            )
        )
    for journal in JOURNAL_PATTERN.finditer(block):
        summary = journal.group(1).strip()
        if summary:
            suggestions.append(JournalSuggestion(summary=summary))
    return suggestions


def to_citation(result: RetrievalResult) -> Citation:
    return Citation(
        id=result.id,
        title=result.title,
        uri=result.uri,
        similarity=result.similarity,
        source=result.source,
    )


class AnswerOrchestrator:
    """Answers one question from memory.

    Any failure while retrieving, looking up facts or generating aborts the
    whole call; there is no answer without its grounding context.
    """

    def __init__(
        self,
        retrieval: RetrievalEngine,
        language_model: LanguageModel,
        owner: OwnerConfig,
        default_model: str,
        allowed_models: Sequence[str] = (),
        top_k: int = 5,
        excerpt_chars: int = 500,
        default_fact_kind: str = "decision",
    ):
        self.retrieval = retrieval
        self.language_model = language_model
        self.system_prompt = build_system_prompt(owner)
        self.default_model = default_model
        self.allowed_models = set(allowed_models) | {default_model}
        self.top_k = top_k
        self.excerpt_chars = excerpt_chars
        self.default_fact_kind = default_fact_kind

    def _resolve_model(self, model: str | None) -> str:
        if model is None:
            return self.default_model
        if model not in self.allowed_models:
            raise ValidationError(
                f"Unsupported model: {model}",
                details=ValidationErrorDetails(
                    source="orchestrator",
                    operation="ask",
                    field="model",
                    actual_value=model,
                    constraint=f"one of {', '.join(sorted(self.allowed_models))}",
                ),
            )
        return model

    @with_error_handling(error_level=ErrorLevel.ERROR, reraise=True)
    async def ask(self, message: str, project: str | None = None, model: str | None = None) -> Answer:
        """Answer ``message`` with citations and suggested writes.

        Raises:
            ValidationError: Blank message or a model that is not allowed
            ProviderError: Embedding or generation failed
        """
        if not message or not message.strip():
            raise ValidationError(
                "message is required",
                details=ValidationErrorDetails(source="orchestrator", operation="ask", field="message"),
            )
        model_id = self._resolve_model(model)

        with bind_request_context(operation="ask", project=project, model=model_id):
            logger.info("🔍 Searching memory...")
            memories = await self.retrieval.search(message, project=project, top_k=self.top_k)

            logger.info("📋 Fetching facts...")
            facts = await self.retrieval.get_facts(project=project)

            context = build_context(memories, facts, self.excerpt_chars)
            prompt = build_citation_prompt(context, message)

            logger.info("🤖 Generating answer...")
            answer_text = await self.language_model.complete(self.system_prompt, prompt, model=model_id)

            suggestions = parse_suggestions(answer_text, self.default_fact_kind)
            logger.info(
                "✅ Answer ready",
                memories_retrieved=len(memories),
                facts_retrieved=len(facts),
                suggestions=len(suggestions),
            )

        return Answer(
            answer=answer_text,
            citations=[to_citation(m) for m in memories],
            suggestions=suggestions,
            metadata=AnswerMetadata(
                memories_retrieved=len(memories),
                facts_retrieved=len(facts),
                model=model_id,
            ),
        )
