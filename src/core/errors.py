"""Humcorpus exception hierarchy.

This module defines traceable domain errors with clear boundaries.
Each pipeline stage raises a specific error type for debuggability.
"""

from __future__ import annotations


class CorpusError(Exception):
    """Base exception for all humcorpus failures."""


class CorpusConfigError(CorpusError):
    """Raised for invalid runtime configuration."""


class CorpusIngestError(CorpusError):
    """Raised when a raw batch cannot be read or a transformer is unknown."""


class MappingError(CorpusError):
    """Raised when one raw record cannot be mapped to canonical fields.

    Absorbed at the batch boundary: the record is dropped and counted.
    """

    def __init__(self, reason: str) -> None:
        super().__init__(reason)
        self.reason = reason


class CorpusStoreError(CorpusError):
    """Raised for partition index and partition file failures."""


class PartitionWriteError(CorpusStoreError):
    """Raised when a category partition set could not be committed."""


class OutOfRangeError(CorpusStoreError):
    """Raised when a reader requests a chunk outside the index."""


class CorpusValidationError(CorpusError):
    """Raised by a validation check; carries one message per problem found."""

    def __init__(self, messages: list[str]) -> None:
        super().__init__("; ".join(messages))
        self.messages = tuple(messages)
