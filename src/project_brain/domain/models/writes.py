"""Write requests accepted by the write gateway."""

from typing import Annotated, Any, Literal

from pydantic import AfterValidator, BaseModel, Field, TypeAdapter
from pydantic import ValidationError as PydanticValidationError

from project_brain.core.base import ValidationErrorDetails
from project_brain.core.errors import ValidationError
from project_brain.domain.models.facts import Fact, JournalEntry
from project_brain.domain.models.memory import ChunkRecord

WRITE_TYPES = ("chunk", "fact", "journal")


def _not_blank(value: str) -> str:
    if not value.strip():
        raise ValueError("must not be blank")
    return value


RequiredText = Annotated[str, AfterValidator(_not_blank)]


class ChunkWrite(BaseModel):
    type: Literal["chunk"] = "chunk"
    project: str | None = None
    source: RequiredText
    uri: RequiredText
    title: str = ""
    content: RequiredText
    tokens: int | None = Field(default=None, ge=0)


class FactWrite(BaseModel):
    type: Literal["fact"] = "fact"
    project: str | None = None
    kind: RequiredText
    key: RequiredText
    value: RequiredText


class JournalWrite(BaseModel):
    type: Literal["journal"] = "journal"
    project: str | None = None
    summary: RequiredText
    details: str | None = None
    tags: list[str] = Field(default_factory=list)


WriteRequest = Annotated[ChunkWrite | FactWrite | JournalWrite, Field(discriminator="type")]

_write_request_adapter: TypeAdapter[ChunkWrite | FactWrite | JournalWrite] = TypeAdapter(WriteRequest)


class WriteResult(BaseModel):
    """Outcome of a single write."""

    type: Literal["chunk", "fact", "journal"]
    skipped: bool = False
    record: ChunkRecord | Fact | JournalEntry | None = None


def parse_write_request(data: dict[str, Any] | ChunkWrite | FactWrite | JournalWrite) -> ChunkWrite | FactWrite | JournalWrite:
    """Validate a raw write into its typed request.

    Accepts the flat form (``{"type": "fact", "key": ...}``) as well as the
    tool form where fields travel in a ``payload`` object next to ``project``
    and ``type``.

    Raises:
        ValidationError: unknown ``type`` or a missing/blank required field
    """
    if isinstance(data, ChunkWrite | FactWrite | JournalWrite):
        return data

    flat = dict(data)
    payload = flat.pop("payload", None)
    if isinstance(payload, dict):
        flat = {**payload, **flat}

    write_type = flat.get("type")
    if write_type not in WRITE_TYPES:
        raise ValidationError(
            f"Unknown write type: {write_type}",
            details=ValidationErrorDetails(
                source="write_gateway",
                operation="parse_write_request",
                field="type",
                actual_value=write_type,
                constraint=f"one of {', '.join(WRITE_TYPES)}",
            ),
        )

    try:
        return _write_request_adapter.validate_python(flat)
    except PydanticValidationError as e:
        first = e.errors()[0]
        # Discriminated unions prefix locations with the tag
        field = ".".join(str(part) for part in first["loc"] if part != write_type) or None
        raise ValidationError(
            f"Invalid {write_type} write: {field or 'request'} {first['msg'].lower()}",
            details=ValidationErrorDetails(
                source="write_gateway",
                operation="parse_write_request",
                field=field,
                constraint=first["type"],
            ),
        ) from e
