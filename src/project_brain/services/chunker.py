"""Paragraph-aligned text chunking."""

import math
import re

from project_brain.core.base import ValidationErrorDetails
from project_brain.core.errors import ValidationError

PARAGRAPH_SEPARATOR = "\n\n"
_BLANK_LINE = re.compile(r"\n\s*\n")


def split_paragraphs(text: str) -> list[str]:
    """Blank-line delimited paragraphs, stripped, empty ones dropped."""
    return [p.strip() for p in _BLANK_LINE.split(text) if p.strip()]


def chunk_text(text: str, max_size: int) -> list[str]:
    """Split ``text`` into chunks of at most ``max_size`` characters.

    Paragraphs are packed into a chunk until the next one would push it past
    ``max_size``. A paragraph is never split: one longer than ``max_size`` is
    emitted whole as its own chunk. Chunks are stripped and never empty.

    Raises:
        ValidationError: If ``max_size`` is smaller than 1
    """
    if max_size < 1:
        raise ValidationError(
            f"max_size must be at least 1, got {max_size}",
            details=ValidationErrorDetails(
                source="chunker",
                operation="chunk_text",
                field="max_size",
                actual_value=max_size,
                constraint=">= 1",
            ),
        )

    chunks: list[str] = []
    buffer = ""
    for paragraph in split_paragraphs(text):
        if buffer and len(buffer) + len(PARAGRAPH_SEPARATOR) + len(paragraph) > max_size:
            chunks.append(buffer)
            buffer = ""
        buffer = f"{buffer}{PARAGRAPH_SEPARATOR}{paragraph}" if buffer else paragraph

    if buffer:
        chunks.append(buffer)
    return chunks


def estimate_tokens(text: str) -> int:
    """Rough token count used when the provider reports none."""
    return math.ceil(len(text) / 4)
