"""
HTTP transport contract for the table client.

The client never talks to the network itself; it hands method, URL, headers
and body to a Transport and classifies what comes back.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from typing import Dict, Mapping, Optional, Union

import httpx

from .exceptions import TransportError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransportResponse:
    """
    Raw HTTP response.

    Attributes:
        status_code: HTTP status code
        body: Response body decoded as text (UTF-8)
        headers: Response headers
    """

    status_code: int
    body: str = ""
    headers: Mapping[str, str] = field(default_factory=dict)


class Transport(ABC):
    """
    Abstract base class for HTTP transports.

    Implementations must support GET, POST, PUT and DELETE and must raise
    TransportError for any failure that prevents a response from being
    received. Non-2xx responses are returned, not raised.
    """

    @abstractmethod
    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[Union[str, bytes]] = None,
    ) -> TransportResponse:
        """
        Perform one HTTP request.

        Args:
            method: HTTP method
            url: Absolute URL including query string
            headers: Request headers
            body: Optional request body

        Returns:
            TransportResponse

        Raises:
            TransportError: On connection, timeout or protocol failures
        """

    def close(self) -> None:
        """Release any resources held by the transport."""


class HttpxTransport(Transport):
    """Transport backed by a synchronous httpx.Client."""

    def __init__(self, timeout: float = 30.0, client: Optional[httpx.Client] = None):
        """
        Args:
            timeout: Request timeout in seconds, used when no client is given
            client: Pre-configured httpx client; owned by the caller
        """
        self._owns_client = client is None
        self._client = client or httpx.Client(timeout=timeout)

    def send(
        self,
        method: str,
        url: str,
        headers: Mapping[str, str],
        body: Optional[Union[str, bytes]] = None,
    ) -> TransportResponse:
        content = body.encode("utf-8") if isinstance(body, str) else body
        try:
            response = self._client.request(method, url, headers=dict(headers), content=content)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.debug(f"{method} request failed: {type(e).__name__}: {e}")
            raise TransportError(str(e) or type(e).__name__, _error_code(e)) from e

        response_headers: Dict[str, str] = dict(response.headers)
        return TransportResponse(
            status_code=response.status_code,
            body=response.text,
            headers=response_headers,
        )

    def close(self) -> None:
        if self._owns_client:
            self._client.close()

    def __enter__(self) -> "HttpxTransport":
        return self

    def __exit__(self, *exc_info) -> None:
        self.close()


def _error_code(error: Exception) -> str:
    """Numeric code for a transport failure: the OS errno when there is one."""
    cause = error.__context__ or error.__cause__
    errno = getattr(cause, "errno", None)
    return str(errno) if errno is not None else "0"
