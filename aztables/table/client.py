"""
Azure Table Storage client.

One remote operation per public method. Every method returns an
OperationResult (Success or Failure) and never raises: validation problems,
transport failures, service errors, undecodable bodies and failed business
checks all come back as a Failure with the matching ErrorKind.
"""

import json
import logging
from datetime import datetime, timezone
from typing import Any, Dict, List, Optional, Sequence, Union
from urllib.parse import quote

from aztables.core.config_manager import ConfigManager, TableServiceConfig
from aztables.core.logging_config import configure_logging, log_with_context, redact

from .entity import Entity
from .exceptions import DecodeError, TransportError, ValidationError
from .models import (
    ErrorKind,
    Failure,
    ODataErrorResponse,
    OperationResult,
    Success,
    TableItem,
    TablesResponse,
)
from .transport import HttpxTransport, Transport
from .validation import KeyValueValidator, TableNameValidator

logger = logging.getLogger(__name__)

ACCEPT_FULL_METADATA = "application/json;odata=fullmetadata"
DATA_SERVICE_VERSION = "3.0;NetFx"


def _quote_key(value: str) -> str:
    """Escape a key for use inside ``PartitionKey='...'``."""
    return quote(value.replace("'", "''"), safe="")


def _entity_path(table_name: str, partition_key: str, row_key: str) -> str:
    return (
        f"{table_name}(PartitionKey='{_quote_key(partition_key)}',"
        f"RowKey='{_quote_key(row_key)}')"
    )


def _select_option(fields: Sequence[str]) -> str:
    return "$select=" + ",".join(quote(field, safe="") for field in fields)


def _to_json(properties: Dict[str, Any]) -> str:
    # UUIDs and datetimes declared with a non-DateTime type fall back to str()
    return json.dumps(properties, default=str)


class TableServiceClient:
    """
    Client for tables and entities of one storage account.

    The configuration is read-only after construction and the client keeps
    no per-call state, so one instance may be shared between threads as long
    as the transport allows it.

    Example:
        config = TableServiceConfig(
            base_url="https://myaccount.table.core.windows.net",
            sas_token="sv=2019-02-02&ss=t&srt=sco&sp=rwdlacu&sig=...",
        )
        client = TableServiceClient(config)
        result = client.get_entity("customers", "smith", "john")
        if result.success:
            print(result.get_entity().Name)
    """

    def __init__(
        self,
        config: TableServiceConfig,
        transport: Optional[Transport] = None,
        logger: Optional[logging.Logger] = None,
    ):
        """
        Args:
            config: Endpoint and client settings
            transport: HTTP transport; an HttpxTransport is created if omitted
            logger: Logger receiving one line per failed operation
        """
        self._config = config
        self._owns_transport = transport is None
        self._transport = transport or HttpxTransport(timeout=config.timeout)
        self._logger = logger or logging.getLogger(__name__)

    @classmethod
    def from_config_file(
        cls,
        config_file: Optional[str] = None,
        transport: Optional[Transport] = None,
        logger: Optional[logging.Logger] = None,
        apply_logging: bool = True,
        **overrides: Any,
    ) -> "TableServiceClient":
        """
        Build a client from a YAML/JSON file, AZTABLES_* variables and overrides.

        Unless ``apply_logging`` is False, the ``logging`` section of the
        loaded configuration is installed on the root logger.
        """
        config = ConfigManager().load(config_file=config_file, overrides=overrides or None)
        if apply_logging:
            configure_logging(config.logging)
        return cls(config, transport=transport, logger=logger)

    @property
    def config(self) -> TableServiceConfig:
        return self._config

    def close(self) -> None:
        """Close the transport if this client created it."""
        if self._owns_transport:
            self._transport.close()

    def __enter__(self) -> "TableServiceClient":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()

    # ------------------------------------------------------------------
    # Tables
    # ------------------------------------------------------------------

    def get_table(self, table_name: str) -> OperationResult:
        """
        Check that a table exists.

        Lists the account's tables and succeeds only if ``table_name`` is
        among them.
        """
        result = self._send("get_table", "GET", table_name, "Tables")
        if not isinstance(result, Success):
            return result

        try:
            tables = TablesResponse.from_json(result.body) if result.body else TablesResponse()
        except DecodeError as e:
            return self._fail("get_table", table_name, ErrorKind.DECODE, e.message,
                              e.error_code, result.response_code)

        if tables.has_table(table_name):
            return result

        return self._fail("get_table", table_name, ErrorKind.LOGICAL,
                          f"{table_name} does not exists", status=result.response_code)

    def create_table(self, table_name: str) -> OperationResult:
        """
        Create a table.

        Succeeds when the service echoes the requested name back. A 2xx
        response without a body counts as created.
        """
        body = _to_json({"TableName": table_name})
        result = self._send("create_table", "POST", table_name, "Tables", body=body)
        if not isinstance(result, Success) or not result.body:
            return result

        try:
            table = TableItem.from_json(result.body)
        except DecodeError as e:
            return self._fail("create_table", table_name, ErrorKind.DECODE, e.message,
                              e.error_code, result.response_code)

        if table.table_name == table_name:
            return result

        return self._fail("create_table", table_name, ErrorKind.LOGICAL,
                          f"{table_name} already exists", status=result.response_code)

    def delete_table(self, table_name: str) -> OperationResult:
        """Delete a table."""
        return self._send("delete_table", "DELETE", table_name, f"Tables('{table_name}')")

    # ------------------------------------------------------------------
    # Entities
    # ------------------------------------------------------------------

    def get_entity(self, table_name: str, partition_key: str, row_key: str, *select: str) -> OperationResult:
        """
        Retrieve one entity.

        Args:
            table_name: Table name
            partition_key: PartitionKey of the entity
            row_key: RowKey of the entity
            *select: Optional property names to project

        Returns:
            Success whose ``get_entity()`` decodes the entity, or Failure
        """
        failure = self._check_keys("get_entity", table_name, partition_key, row_key)
        if failure is not None:
            return failure

        query = [_select_option(select)] if select else []
        return self._send("get_entity", "GET", table_name,
                          _entity_path(table_name, partition_key, row_key), query=query)

    def query_entities(
        self,
        table_name: str,
        filter: Optional[str] = None,
        select: Optional[Sequence[str]] = None,
        top: Optional[int] = None,
    ) -> OperationResult:
        """
        Retrieve the entities of a table.

        Args:
            table_name: Table name
            filter: OData filter expression, forwarded as-is
            select: Optional property names to project
            top: Optional maximum number of entities to return

        Returns:
            Success whose ``get_entities()`` yields the entities, or Failure
        """
        query: List[str] = []
        if filter:
            query.append(f"$filter={quote(filter)}")
        if select:
            query.append(_select_option(select))
        if top is not None:
            query.append(f"$top={int(top)}")
        return self._send("query_entities", "GET", table_name, table_name, query=query)

    def insert_entity(self, table_name: str, entity: Entity) -> OperationResult:
        """Insert a new entity."""
        body = self._entity_body("insert_entity", table_name, entity)
        if isinstance(body, Failure):
            return body
        return self._send("insert_entity", "POST", table_name, table_name, body=body)

    def update_entity(self, table_name: str, entity: Entity) -> OperationResult:
        """Replace an existing entity unconditionally (``If-Match: *``)."""
        body = self._entity_body("update_entity", table_name, entity)
        if isinstance(body, Failure):
            return body
        path = _entity_path(table_name, entity.partition_key, entity.row_key)
        return self._send("update_entity", "PUT", table_name, path, body=body, if_match=True)

    def delete_entity(self, table_name: str, partition_key: str, row_key: str) -> OperationResult:
        """Delete an entity unconditionally (``If-Match: *``)."""
        failure = self._check_keys("delete_entity", table_name, partition_key, row_key)
        if failure is not None:
            return failure
        path = _entity_path(table_name, partition_key, row_key)
        return self._send("delete_entity", "DELETE", table_name, path, if_match=True)

    # ------------------------------------------------------------------
    # Internals
    # ------------------------------------------------------------------

    def _build_url(self, path: str, query: Optional[List[str]] = None) -> str:
        parts = [self._config.sas_token] if self._config.sas_token else []
        parts.extend(query or [])
        url = f"{self._config.base_url}/{path}"
        return f"{url}?{'&'.join(parts)}" if parts else url

    def _headers(self, if_match: bool = False) -> Dict[str, str]:
        headers = {
            "User-Agent": self._config.user_agent,
            "Content-Type": "application/json",
            "Accept": ACCEPT_FULL_METADATA,
            "x-ms-date": datetime.now(timezone.utc).strftime("%a, %d %b %Y %H:%M:%S GMT"),
            "x-ms-version": self._config.api_version,
            "DataServiceVersion": DATA_SERVICE_VERSION,
            "MaxDataServiceVersion": DATA_SERVICE_VERSION,
        }
        if if_match:
            headers["If-Match"] = "*"
        return headers

    def _check_table(self, operation: str, table_name: str) -> Optional[Failure]:
        is_valid, error = TableNameValidator.validate(table_name)
        if not is_valid:
            return self._fail(operation, table_name, ErrorKind.VALIDATION, f"Invalid table name: {error}")
        return None

    def _check_keys(self, operation: str, table_name: str, partition_key: str, row_key: str) -> Optional[Failure]:
        failure = self._check_table(operation, table_name)
        if failure is not None:
            return failure
        for value, key_name in ((partition_key, "PartitionKey"), (row_key, "RowKey")):
            is_valid, error = KeyValueValidator.validate(value, key_name)
            if not is_valid:
                return self._fail(operation, table_name, ErrorKind.VALIDATION, error)
        return None

    def _entity_body(self, operation: str, table_name: str, entity: Entity) -> Union[str, Failure]:
        """Serialized entity, or a Failure if it cannot be sent."""
        failure = self._check_table(operation, table_name)
        if failure is not None:
            return failure
        if not entity.has_keys():
            return self._fail(operation, table_name, ErrorKind.VALIDATION,
                              "PartitionKey and RowKey are required")
        try:
            return _to_json(entity.get_properties())
        except ValidationError as e:
            return self._fail(operation, table_name, ErrorKind.VALIDATION, e.message)

    def _send(
        self,
        operation: str,
        method: str,
        table_name: str,
        path: str,
        body: Optional[str] = None,
        query: Optional[List[str]] = None,
        if_match: bool = False,
    ) -> OperationResult:
        """Validate the table name, perform the request and classify the outcome."""
        failure = self._check_table(operation, table_name)
        if failure is not None:
            return failure

        url = self._build_url(path, query)
        logger.debug(f"{operation}: {method} {redact(url)}")

        try:
            response = self._transport.send(method, url, self._headers(if_match), body)
        except TransportError as e:
            return self._fail(operation, table_name, ErrorKind.TRANSPORT, e.message, e.error_code)
        except Exception as e:
            # Custom transports may raise anything; it is still a failed send
            errno = getattr(e, "errno", None)
            return self._fail(operation, table_name, ErrorKind.TRANSPORT,
                              f"{type(e).__name__}: {e}", str(errno) if errno is not None else "0")

        if 200 <= response.status_code < 300:
            return Success(response_code=response.status_code, body=response.body)

        try:
            error_response = ODataErrorResponse.from_json(response.body)
        except DecodeError as e:
            return self._fail(operation, table_name, ErrorKind.DECODE, e.message,
                              e.error_code, response.status_code)

        odata_error = error_response.odata_error
        return self._fail(operation, table_name, ErrorKind.PROTOCOL, odata_error.message.value,
                          odata_error.code, response.status_code)

    def _fail(
        self,
        operation: str,
        table_name: str,
        kind: ErrorKind,
        message: str,
        code: str = "",
        status: Optional[int] = None,
    ) -> Failure:
        """Log one line for the failed operation and build its Failure."""
        detail = f"{code}: {message}" if code else message
        log_with_context(
            self._logger,
            logging.ERROR,
            f"Azure Table Service error: {detail}",
            operation=operation,
            table=table_name,
            kind=kind.value,
            status=status,
        )
        return Failure(kind=kind, error_code=code, error_message=message, response_code=status)
