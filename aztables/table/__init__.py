"""
Azure Table Storage client.

This module provides typed entity builders, decoding of OData entity
payloads and a client for table and entity operations.
"""

from aztables.table.types import EdmType, TypedValue
from aztables.table.entity import Entity
from aztables.table.dynamic import ReadableEntity
from aztables.table.decoder import EntityDecoder, decoder
from aztables.table.models import (
    ErrorKind,
    Failure,
    ODataError,
    ODataErrorMessage,
    ODataErrorResponse,
    OperationResult,
    Success,
    TableItem,
    TablesResponse,
)
from aztables.table.exceptions import (
    AzTablesError,
    DecodeError,
    LogicalFailure,
    PropertyNotFoundError,
    ProtocolError,
    TransportError,
    ValidationError,
)
from aztables.table.transport import HttpxTransport, Transport, TransportResponse
from aztables.table.client import TableServiceClient

__all__ = [
    "EdmType",
    "TypedValue",
    "Entity",
    "ReadableEntity",
    "EntityDecoder",
    "decoder",
    "ErrorKind",
    "Failure",
    "ODataError",
    "ODataErrorMessage",
    "ODataErrorResponse",
    "OperationResult",
    "Success",
    "TableItem",
    "TablesResponse",
    "AzTablesError",
    "DecodeError",
    "LogicalFailure",
    "PropertyNotFoundError",
    "ProtocolError",
    "TransportError",
    "ValidationError",
    "HttpxTransport",
    "Transport",
    "TransportResponse",
    "TableServiceClient",
]
