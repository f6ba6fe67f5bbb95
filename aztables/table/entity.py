"""
Write-side entity builder.

An Entity accumulates PartitionKey, RowKey and typed custom properties and
renders the property map sent to the table service. Every mutation is
validated immediately.
"""

import logging
from datetime import datetime
from typing import Any, Dict, Optional

from .exceptions import ValidationError
from .types import ODATA_TYPE_SUFFIX, EdmType, encode_value, infer_type
from .validation import MAX_PROPERTY_COUNT, KeyValueValidator, PropertyNameValidator

logger = logging.getLogger(__name__)


class Entity:
    """
    Azure Table Storage entity under construction.

    Example:
        entity = (
            Entity()
            .set_partition_key("customers")
            .set_row_key("42")
            .add_property("Name", "John Doe")
            .add_property("Orders", 2147483648)
        )
        entity.get_properties()
        # {"PartitionKey": "customers", "RowKey": "42", "Name": "John Doe",
        #  "Orders@odata.type": "Edm.Int64", "Orders": "2147483648"}
    """

    def __init__(self, partition_key: Optional[str] = None, row_key: Optional[str] = None):
        self._properties: Dict[str, Any] = {}
        if partition_key is not None:
            self.set_partition_key(partition_key)
        if row_key is not None:
            self.set_row_key(row_key)

    def set_partition_key(self, value: str) -> "Entity":
        """Set PartitionKey; raises ValidationError if the value is invalid."""
        self._properties["PartitionKey"] = self._check_key(value, "PartitionKey")
        return self

    def set_row_key(self, value: str) -> "Entity":
        """Set RowKey; raises ValidationError if the value is invalid."""
        self._properties["RowKey"] = self._check_key(value, "RowKey")
        return self

    @property
    def partition_key(self) -> str:
        return self._properties.get("PartitionKey", "")

    @property
    def row_key(self) -> str:
        return self._properties.get("RowKey", "")

    def has_keys(self) -> bool:
        """True once both PartitionKey and RowKey are set."""
        return bool(self.partition_key) and bool(self.row_key)

    def add_property(self, name: str, value: Any, edm_type: Optional[EdmType] = None) -> "Entity":
        """
        Add a custom property.

        Args:
            name: Property name
            value: Python value
            edm_type: Explicit EDM type; inferred from the value when omitted

        Returns:
            The entity, for chaining

        Raises:
            ValidationError: If the property name is invalid, or a DateTime
                value is a naive datetime
        """
        is_valid, error = PropertyNameValidator.validate(name)
        if not is_valid:
            raise ValidationError(f"Property name is invalid: {error}", field=name)

        edm_type = edm_type or infer_type(value)
        if edm_type is EdmType.DATETIME and isinstance(value, datetime) and value.utcoffset() is None:
            # decoded DateTime values are always aware; a naive one would not compare equal
            raise ValidationError(
                f"DateTime value for '{name}' must be timezone-aware, e.g. datetime.now(timezone.utc)",
                field=name,
            )

        annotation = f"{name}{ODATA_TYPE_SUFFIX}"

        if edm_type.needs_annotation():
            self._properties[annotation] = edm_type.value
        else:
            # Re-adding as a string drops a stale annotation
            self._properties.pop(annotation, None)

        self._properties[name] = encode_value(value, edm_type)
        return self

    def get_properties(self) -> Dict[str, Any]:
        """
        Return the property map for serialization.

        Raises:
            ValidationError: If the map, sidecar annotations included,
                exceeds 255 entries
        """
        if len(self._properties) > MAX_PROPERTY_COUNT:
            raise ValidationError(
                f"The entity properties count exceeds the limit of {MAX_PROPERTY_COUNT}: "
                f"got {len(self._properties)}"
            )
        return dict(self._properties)

    def __len__(self) -> int:
        return len(self._properties)

    def __repr__(self) -> str:
        return (
            f"Entity(PartitionKey={self.partition_key!r}, RowKey={self.row_key!r}, "
            f"properties={len(self._properties)})"
        )

    @staticmethod
    def _check_key(value: str, key_name: str) -> str:
        is_valid, error = KeyValueValidator.validate(value, key_name)
        if not is_valid:
            logger.debug(f"Rejected {key_name}: {error}")
            raise ValidationError(error, field=key_name)
        return value
