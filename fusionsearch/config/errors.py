"""
Error Taxonomy - Consistent error codes across the application.

Usage:
    from fusionsearch.config.errors import ProviderTimeout

    raise ProviderTimeout("Embedding request timed out", {"timeout": 30})
"""

from __future__ import annotations

from enum import Enum
from typing import Any, ClassVar


class ErrorCode(str, Enum):
    """Standardized error codes for machine-readable error responses."""

    # Embedding errors
    EMBEDDING_EMPTY_INPUT = "EMBEDDING_EMPTY_INPUT"

    # Provider errors
    PROVIDER_FAILED = "PROVIDER_FAILED"
    PROVIDER_AUTH_FAILED = "PROVIDER_AUTH_FAILED"
    PROVIDER_RATE_LIMITED = "PROVIDER_RATE_LIMITED"
    PROVIDER_TIMEOUT = "PROVIDER_TIMEOUT"
    PROVIDER_SERVER_ERROR = "PROVIDER_SERVER_ERROR"
    PROVIDER_INVALID_RESPONSE = "PROVIDER_INVALID_RESPONSE"

    # Search errors
    SEARCH_CAPABILITY_UNAVAILABLE = "SEARCH_CAPABILITY_UNAVAILABLE"

    # Storage errors
    STORAGE_FAILED = "STORAGE_FAILED"
    STORAGE_READ_FAILED = "STORAGE_READ_FAILED"
    STORAGE_WRITE_FAILED = "STORAGE_WRITE_FAILED"

    # General errors
    INTERNAL_ERROR = "INTERNAL_ERROR"


class FusionSearchError(Exception):
    """Base exception with error code support."""

    def __init__(
        self,
        code: ErrorCode,
        message: str,
        details: dict[str, Any] | None = None,
    ) -> None:
        self.code = code
        self.message = message
        self.details = details or {}
        super().__init__(f"[{code.value}] {message}")

    def to_dict(self) -> dict[str, Any]:
        """Convert to API-friendly dictionary."""
        return {
            "code": self.code.value,
            "message": self.message,
            "details": self.details,
        }


class _CodedError(FusionSearchError):
    """Error whose code is fixed by its class."""

    default_code: ClassVar[ErrorCode] = ErrorCode.INTERNAL_ERROR

    def __init__(self, message: str, details: dict[str, Any] | None = None) -> None:
        super().__init__(self.default_code, message, details)


class EmptyInputError(_CodedError):
    """Text to embed is empty after trimming."""

    default_code = ErrorCode.EMBEDDING_EMPTY_INPUT


# Provider errors. `transient` marks failures worth retrying.
class ProviderError(_CodedError):
    """Embedding provider errors."""

    default_code = ErrorCode.PROVIDER_FAILED
    transient: ClassVar[bool] = False


class ProviderAuthError(ProviderError):
    """Provider rejected the credential (401/403)."""

    default_code = ErrorCode.PROVIDER_AUTH_FAILED


class ProviderRateLimited(ProviderError):
    """Provider quota exceeded (429)."""

    default_code = ErrorCode.PROVIDER_RATE_LIMITED
    transient = True


class ProviderTimeout(ProviderError):
    """Provider call exceeded its deadline."""

    default_code = ErrorCode.PROVIDER_TIMEOUT
    transient = True


class ProviderServerError(ProviderError):
    """Provider returned 5xx or the transport failed."""

    default_code = ErrorCode.PROVIDER_SERVER_ERROR
    transient = True


class InvalidResponseShapeError(ProviderError):
    """Provider body is malformed or the vector has the wrong dimension."""

    default_code = ErrorCode.PROVIDER_INVALID_RESPONSE


class CapabilityUnavailable(_CodedError):
    """Document store has no vector similarity support."""

    default_code = ErrorCode.SEARCH_CAPABILITY_UNAVAILABLE


class StorageError(_CodedError):
    """Storage/database errors."""

    default_code = ErrorCode.STORAGE_FAILED


class StoreReadError(StorageError):
    """A query against the document store failed."""

    default_code = ErrorCode.STORAGE_READ_FAILED


class StoreWriteError(StorageError):
    """Persisting a document failed."""

    default_code = ErrorCode.STORAGE_WRITE_FAILED
