"""
Pydantic models for the table client.

Defines the wire envelopes returned by the table service (errors, table
lists) and the result objects returned by every client operation.
"""

from enum import Enum
from typing import Iterator, List, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field
from pydantic import ValidationError as PydanticValidationError

from .decoder import decoder
from .dynamic import ReadableEntity
from .exceptions import (
    AzTablesError,
    DecodeError,
    LogicalFailure,
    ProtocolError,
    TransportError,
    ValidationError,
)


def _decode_envelope(model: type, body: str):
    """Validate a JSON body against an envelope model."""
    try:
        return model.model_validate_json(body)
    except PydanticValidationError as e:
        raise DecodeError(f"Unexpected {model.__name__} body: {e}")


class ODataErrorMessage(BaseModel):
    """Localized error message."""
    model_config = ConfigDict(populate_by_name=True)

    lang: Optional[str] = None
    value: str


class ODataError(BaseModel):
    """Error code and message from the service."""
    model_config = ConfigDict(populate_by_name=True)

    code: str
    message: ODataErrorMessage


class ODataErrorResponse(BaseModel):
    """
    Service error envelope.

    Shape: ``{"odata.error": {"code": ..., "message": {"lang": ..., "value": ...}}}``
    """
    model_config = ConfigDict(populate_by_name=True)

    odata_error: ODataError = Field(..., alias="odata.error")

    @classmethod
    def from_json(cls, body: str) -> "ODataErrorResponse":
        """
        Decode an error body.

        Raises:
            DecodeError: If the body does not match the envelope shape
        """
        return _decode_envelope(cls, body)


class TableItem(BaseModel):
    """Single table as returned by create table and list tables."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    table_name: str = Field(..., alias="TableName")

    @classmethod
    def from_json(cls, body: str) -> "TableItem":
        return _decode_envelope(cls, body)


class TablesResponse(BaseModel):
    """List tables envelope: ``{"value": [{"TableName": ...}, ...]}``."""
    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    tables: List[TableItem] = Field(default_factory=list, alias="value")

    @classmethod
    def from_json(cls, body: str) -> "TablesResponse":
        return _decode_envelope(cls, body)

    def has_table(self, table_name: str) -> bool:
        """Exact, case-sensitive match on table name."""
        return any(table.table_name == table_name for table in self.tables)


class ErrorKind(str, Enum):
    """Classification of a failed operation."""
    VALIDATION = "validation"
    TRANSPORT = "transport"
    PROTOCOL = "protocol"
    DECODE = "decode"
    LOGICAL = "logical"


class OperationResult(BaseModel):
    """
    Outcome of one client operation.

    Every operation returns either a Success or a Failure. Both expose
    ``success``, ``response_code``, ``body``, ``error_code`` and
    ``error_message``; the fields that do not apply read as empty.
    """
    model_config = ConfigDict(frozen=True)

    success: bool = False
    response_code: Optional[int] = None

    def get_entity(self) -> Optional[ReadableEntity]:
        return None

    def get_entities(self) -> Iterator[ReadableEntity]:
        return iter(())

    def raise_for_failure(self) -> "OperationResult":
        """Return self on success; raise the matching exception on failure."""
        return self


class Success(OperationResult):
    """2xx response, with the raw body kept for lazy decoding."""

    success: Literal[True] = True
    response_code: int
    body: str = ""

    @property
    def error_code(self) -> str:
        return ""

    @property
    def error_message(self) -> str:
        return ""

    def get_entity(self) -> Optional[ReadableEntity]:
        """
        Decode the body as a single entity.

        Returns:
            ReadableEntity, or None for an empty body

        Raises:
            DecodeError: If the body is not a JSON object
        """
        if not self.body:
            return None
        return decoder.decode_json(self.body)

    def get_entities(self) -> Iterator[ReadableEntity]:
        """
        Decode the body as a query result.

        Returns:
            Single-pass iterator over the entities, in response order

        Raises:
            DecodeError: If the body is not a ``{"value": [...]}`` envelope
        """
        if not self.body:
            return iter(())
        return decoder.decode_collection(self.body)


class Failure(OperationResult):
    """
    Failed operation.

    ``response_code`` is set whenever the service answered; it is None for
    pre-flight validation failures and transport errors.
    """

    success: Literal[False] = False
    kind: ErrorKind
    error_code: str = ""
    error_message: str

    @property
    def body(self) -> str:
        return ""

    def to_exception(self) -> AzTablesError:
        """Exception equivalent of this failure."""
        if self.kind is ErrorKind.VALIDATION:
            return ValidationError(self.error_message)
        if self.kind is ErrorKind.TRANSPORT:
            return TransportError(self.error_message, self.error_code)
        if self.kind is ErrorKind.PROTOCOL:
            return ProtocolError(self.error_message, self.error_code, self.response_code)
        if self.kind is ErrorKind.DECODE:
            return DecodeError(self.error_message, self.error_code)
        return LogicalFailure(self.error_message, self.error_code)

    def raise_for_failure(self) -> "OperationResult":
        raise self.to_exception()
