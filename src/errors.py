"""Error types raised by the evidence ingestion and retrieval core.

Every error propagates to the caller. Retrying is left to the caller: a
repeated ``ingest`` of unchanged records writes nothing.
"""

from typing import Any


class EvidenceError(Exception):
    """Base exception for trip evidence errors.

    Attributes:
        message: Human-readable error description.
        details: Additional context about the error.
    """

    def __init__(self, message: str, details: dict[str, Any] | None = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def __str__(self) -> str:
        if self.details:
            return f"{self.message} | Details: {self.details}"
        return self.message


class ConfigurationError(EvidenceError):
    """Required credentials or endpoints are missing. Raised before any I/O."""


class ProviderError(EvidenceError):
    """The embedding provider failed, timed out, or returned malformed vectors."""


class StoreError(EvidenceError):
    """The evidence store failed to read, write, or query."""


class ValidationError(EvidenceError, ValueError):
    """Malformed caller input (missing trip id, blank query, bad limits)."""
