"""Project Brain: a personal retrieval-augmented memory assistant."""

__version__ = "0.1.0"
