"""Error types shared by the domain, the use cases and the adapters."""

from __future__ import annotations


class DomainError(ValueError):
    """Base class for domain-level errors."""


class ValidationError(DomainError):
    """An entity invariant was violated."""


class AudioFormatError(ValidationError):
    """Audio MIME type is not on the allow-list."""


class AudioSizeError(ValidationError):
    """Audio file exceeds the size ceiling."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class ExternalServiceError(Exception):
    """A call to an external capability (AI provider, file host) failed."""


class TranscriptionError(ExternalServiceError):
    """Speech-to-text call failed or returned no text."""


class ExtractionError(ExternalServiceError):
    """Financial extraction call failed or returned malformed output."""


class AudioFetchError(ExternalServiceError):
    """Raw audio bytes could not be obtained."""


class PersistenceError(Exception):
    """A repository operation failed."""


class ConfigurationError(RuntimeError):
    """Required configuration is missing at startup."""


def entity_not_found(kind: str, entity_id: int | None) -> str:
    return f"{kind} {entity_id} not found"


def operation_failed(operation: str, kind: str, detail: object) -> str:
    return f"Failed to {operation} {kind}: {detail}"
