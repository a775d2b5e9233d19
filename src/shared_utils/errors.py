"""
Exception taxonomy for the shared utilities.

Configuration problems are raised synchronously and only when a caller
explicitly asks for it. Errors coming back from AWS are wrapped once in
ExternalClientError so services can catch a single type.
"""

from typing import Any, Dict, Optional, Sequence


class SharedUtilsError(Exception):
    """Base exception for all shared utility errors."""

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        self.message = message
        self.details = details or {}
        super().__init__(self.message)


class ConfigurationError(SharedUtilsError):
    """Raised when required environment configuration is missing."""

    def __init__(
        self,
        message: str,
        missing: Optional[Sequence[str]] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.missing = list(missing or [])


class ExternalClientError(SharedUtilsError):
    """Raised when a wrapped AWS client call fails."""

    def __init__(
        self,
        message: str,
        error_code: Optional[str] = None,
        operation: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, details)
        self.error_code = error_code
        self.operation = operation


class RegistryError(SharedUtilsError):
    """Raised when the client registry is misused."""
    pass
