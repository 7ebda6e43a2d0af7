"""Utility functions for domain models."""

from datetime import UTC, datetime


def utc_now() -> datetime:
    """Get the current UTC datetime with timezone awareness."""
    return datetime.now(UTC)


def to_epoch(value: datetime) -> float:
    """Convert a datetime to the epoch seconds stored on graph nodes.

    Naive datetimes are taken as UTC.
    """
    if value.tzinfo is None:
        value = value.replace(tzinfo=UTC)
    return value.timestamp()


def from_epoch(value: float | int) -> datetime:
    """Convert stored epoch seconds back to an aware UTC datetime."""
    return datetime.fromtimestamp(value, tz=UTC)
