"""
Table client exceptions.

Exception classes raised by entity builders, decoders and transports.
The client converts every one of them into a Failure result, so they
only escape when the building blocks are used directly.
"""

from typing import Optional


class AzTablesError(Exception):
    """Base exception for table client errors.

    Attributes:
        message: Error message
        error_code: Error code reported on the result object
    """

    def __init__(self, message: str, error_code: str = ""):
        """Initialize table client error.

        Args:
            message: Error message
            error_code: Error code
        """
        super().__init__(message)
        self.message = message
        self.error_code = error_code


class ValidationError(AzTablesError):
    """Invalid table name, property name, key value or property count."""

    def __init__(self, message: str, field: str = ""):
        """Initialize validation error.

        Args:
            message: Error message
            field: Name of the offending field, if any
        """
        super().__init__(message)
        self.field = field


class TransportError(AzTablesError):
    """Network or connection failure surfaced by a transport."""

    def __init__(self, message: str, error_code: str = "0"):
        super().__init__(message, error_code)


class ProtocolError(AzTablesError):
    """Non-2xx response carrying a structured service error."""

    def __init__(self, message: str, error_code: str, status_code: Optional[int] = None):
        """Initialize protocol error.

        Args:
            message: Message text from the service
            error_code: Service error code (e.g. "TableAlreadyExists")
            status_code: HTTP status code
        """
        super().__init__(message, error_code)
        self.status_code = status_code


class DecodeError(AzTablesError):
    """Response body present but not parseable into the expected shape."""

    def __init__(self, message: str, error_code: str = "0"):
        super().__init__(message, error_code)


class LogicalFailure(AzTablesError):
    """HTTP call succeeded but the business check did not."""


class PropertyNotFoundError(AzTablesError, AttributeError):
    """Strict (accessor-style) lookup of a property that does not exist."""

    def __init__(self, name: str):
        super().__init__(f"Method {name} does not exist.", "PropertyNotFound")
        self.name = name
