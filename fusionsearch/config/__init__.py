"""
Configuration - Application settings and error taxonomy.
"""

from .errors import (
    CapabilityUnavailable,
    EmptyInputError,
    ErrorCode,
    FusionSearchError,
    InvalidResponseShapeError,
    ProviderAuthError,
    ProviderError,
    ProviderRateLimited,
    ProviderServerError,
    ProviderTimeout,
    StorageError,
    StoreReadError,
    StoreWriteError,
)
from .settings import Settings, get_settings

__all__ = [
    # Settings
    "Settings",
    "get_settings",
    # Errors
    "ErrorCode",
    "FusionSearchError",
    "EmptyInputError",
    "ProviderError",
    "ProviderAuthError",
    "ProviderRateLimited",
    "ProviderTimeout",
    "ProviderServerError",
    "InvalidResponseShapeError",
    "CapabilityUnavailable",
    "StorageError",
    "StoreReadError",
    "StoreWriteError",
]
