"""
aztables: Azure Table Storage entity client

Typed entity builders, case-insensitive entity views and a table service
client that reports every outcome through a result object.
"""

__version__ = "0.1.0"

from .table.client import TableServiceClient
from .table.entity import Entity
from .table.dynamic import ReadableEntity
from .table.types import EdmType
from .table.models import OperationResult, Success, Failure, ErrorKind
from .core.config_manager import TableServiceConfig

__all__ = [
    "TableServiceClient",
    "Entity",
    "ReadableEntity",
    "EdmType",
    "OperationResult",
    "Success",
    "Failure",
    "ErrorKind",
    "TableServiceConfig",
    "__version__",
]
