"""Answer, citation and suggestion models."""

from typing import Annotated, Literal
from uuid import UUID

from pydantic import BaseModel, Field


class Citation(BaseModel):
    """A retrieved chunk the answer was grounded on."""

    id: UUID
    title: str
    uri: str
    similarity: float
    source: str


class FactSuggestion(BaseModel):
    """A fact write proposed by the model. Not persisted."""

    type: Literal["fact"] = "fact"
    kind: str
    key: str
    value: str


class JournalSuggestion(BaseModel):
    """A journal write proposed by the model. Not persisted."""

    type: Literal["journal"] = "journal"
    summary: str


Suggestion = Annotated[FactSuggestion | JournalSuggestion, Field(discriminator="type")]


class AnswerMetadata(BaseModel):
    memories_retrieved: int = 0
    facts_retrieved: int = 0
    model: str


class Answer(BaseModel):
    """Result of a single question/answer turn."""

    answer: str
    citations: list[Citation] = Field(default_factory=list)
    suggestions: list[Suggestion] = Field(default_factory=list)
    metadata: AnswerMetadata
