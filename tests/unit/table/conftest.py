"""
Shared fixtures for table client tests.
"""

import logging
from typing import List, Optional

import pytest

from aztables.core.config_manager import TableServiceConfig
from aztables.core.logging_config import SensitiveDataFilter
from aztables.table.client import TableServiceClient
from aztables.table.transport import Transport, TransportResponse


class FakeTransport(Transport):
    """In-memory transport recording requests and replaying queued responses."""

    def __init__(self):
        self.requests: List[dict] = []
        self._responses: list = []
        self.closed = False

    def queue(self, status_code: int, body: str = "") -> "FakeTransport":
        self._responses.append(TransportResponse(status_code=status_code, body=body))
        return self

    def fail_with(self, error: Exception) -> "FakeTransport":
        self._responses.append(error)
        return self

    def send(self, method, url, headers, body=None):
        self.requests.append({"method": method, "url": url, "headers": dict(headers), "body": body})
        response = self._responses.pop(0) if self._responses else TransportResponse(status_code=200)
        if isinstance(response, Exception):
            raise response
        return response

    def close(self) -> None:
        self.closed = True

    @property
    def last_request(self) -> Optional[dict]:
        return self.requests[-1] if self.requests else None


@pytest.fixture
def restore_root_logger():
    """Undo logging configuration applied by from_config_file."""
    root_logger = logging.getLogger()
    level = root_logger.level
    yield root_logger
    for handler in root_logger.handlers[:]:
        if any(isinstance(f, SensitiveDataFilter) for f in handler.filters):
            root_logger.removeHandler(handler)
            handler.close()
    root_logger.setLevel(level)


@pytest.fixture
def transport():
    return FakeTransport()


@pytest.fixture
def config():
    return TableServiceConfig(
        base_url="https://account.table.core.windows.net/",
        sas_token="?sv=2019-02-02&ss=t&sig=abc123",
    )


@pytest.fixture
def client(config, transport):
    return TableServiceClient(config, transport=transport)
