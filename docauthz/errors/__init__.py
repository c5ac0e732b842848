"""
Error types and error codes for docauthz.

Denial is never an error: a missing document, malformed permission fields and
unmodeled actions all evaluate to "no access". The exceptions here cover the
cases where access could not be determined at all.
"""

from enum import Enum
from typing import Dict, Any, Optional


class ErrorCode(str, Enum):
    """Standard error codes used across docauthz."""
    INTERNAL_ERROR = "internal_error"
    RESOLVER_UNAVAILABLE = "resolver_unavailable"
    CONFIGURATION_ERROR = "configuration_error"

    def __str__(self) -> str:
        return self.value


INTERNAL_ERROR = ErrorCode.INTERNAL_ERROR
RESOLVER_UNAVAILABLE = ErrorCode.RESOLVER_UNAVAILABLE
CONFIGURATION_ERROR = ErrorCode.CONFIGURATION_ERROR


class AccessControlError(Exception):
    """
    Base exception for all docauthz errors.

    ``resource_id`` names the document whose access could not be determined,
    when the failure concerns a single document.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None,
        resource_id: Optional[str] = None
    ):
        super().__init__(message)
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.cause = cause
        self.resource_id = resource_id

        if resource_id is not None:
            self.details['resource_id'] = resource_id

    def to_dict(self) -> Dict[str, Any]:
        """Convert error to dictionary representation."""
        result = {
            'error': self.error_code.value,
            'message': self.message,
            'details': self.details
        }

        if self.cause:
            result['cause'] = str(self.cause)

        return result

    def __str__(self) -> str:
        if self.resource_id is not None:
            return f"{self.error_code.value}: {self.message} (document {self.resource_id})"
        return f"{self.error_code.value}: {self.message}"


class ResolverError(AccessControlError):
    """
    Raised when the permissions resolver fails.

    Distinct from "not found": the caller can tell "no access" apart from
    "could not determine access".
    """

    def __init__(
        self,
        message: str,
        resource_id: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
        cause: Optional[Exception] = None
    ):
        super().__init__(message, RESOLVER_UNAVAILABLE, details, cause, resource_id)


class ConfigurationError(AccessControlError):
    """Raised when there's a configuration error."""

    def __init__(
        self,
        message: str,
        config_key: Optional[str] = None,
        config_value: Optional[Any] = None,
        details: Optional[Dict[str, Any]] = None
    ):
        super().__init__(message, CONFIGURATION_ERROR, details)
        self.config_key = config_key
        self.config_value = config_value

        if config_key:
            self.details['config_key'] = config_key
        if config_value is not None:
            self.details['config_value'] = str(config_value)


__all__ = [
    'ErrorCode',
    'INTERNAL_ERROR',
    'RESOLVER_UNAVAILABLE',
    'CONFIGURATION_ERROR',
    'AccessControlError',
    'ResolverError',
    'ConfigurationError',
]
