"""
Naming and key rules for Azure Table Storage.

Each validator returns a ``(is_valid, error_message)`` tuple so callers can
decide whether to raise or to report the failure on a result object.
"""

import re
from typing import Optional


MAX_PROPERTY_COUNT = 255
MAX_PROPERTY_NAME_LENGTH = 255
MAX_KEY_LENGTH = 1024

_TABLE_NAME_PATTERN = re.compile(r"[A-Za-z][A-Za-z0-9]{2,62}", re.ASCII)
_PROPERTY_NAME_PATTERN = re.compile(r"\w{1,255}")
_PROPERTY_NAME_FORBIDDEN = re.compile(r"[\x00-\x1f\x7f\x81\ue000-\uf8ff/\\#?\[\]@!]")
_KEY_FORBIDDEN = re.compile(r"[\x00-\x1f\x7f-\x9f/\\#?]")


class TableNameValidator:
    """Validates Azure Table Storage table naming rules."""

    @staticmethod
    def validate(name: str) -> tuple[bool, Optional[str]]:
        """
        Validate table name against Azure rules.

        Rules:
        - 3-63 characters
        - Alphanumeric only
        - Must start with a letter

        Args:
            name: Table name to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not name:
            return False, "Table name cannot be empty"

        if len(name) < 3 or len(name) > 63:
            return False, f"Table name must be between 3 and 63 characters, got {len(name)}"

        if not _TABLE_NAME_PATTERN.fullmatch(name):
            return False, "Table name must start with a letter and contain only alphanumeric characters"

        return True, None


class PropertyNameValidator:
    """Validates custom property names."""

    @staticmethod
    def validate(name: str) -> tuple[bool, Optional[str]]:
        """
        Validate a property name.

        Rules:
        - 1-255 word characters (letters, digits, underscore)
        - No control characters, private-use characters or any of / \\ # ? [ ] @ !

        Args:
            name: Property name to validate

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not name:
            return False, "Property name cannot be empty"

        if len(name) > MAX_PROPERTY_NAME_LENGTH:
            return False, f"Property name must be at most {MAX_PROPERTY_NAME_LENGTH} characters, got {len(name)}"

        if _PROPERTY_NAME_FORBIDDEN.search(name):
            return False, f"Property name '{name}' contains a forbidden character"

        if not _PROPERTY_NAME_PATTERN.fullmatch(name):
            return False, f"Property name '{name}' must contain only letters, digits and underscores"

        return True, None


class KeyValueValidator:
    """Validates PartitionKey and RowKey values."""

    @staticmethod
    def validate(value: str, key_name: str = "Key") -> tuple[bool, Optional[str]]:
        """
        Validate a system key value.

        Rules:
        - 1-1024 characters
        - No control characters (0x00-0x1F, 0x7F-0x9F) and none of / \\ # ?

        Args:
            value: Key value to validate
            key_name: "PartitionKey" or "RowKey", used in the message

        Returns:
            Tuple of (is_valid, error_message)
        """
        if not isinstance(value, str) or not value:
            return False, f"{key_name} value is invalid: cannot be empty"

        if len(value) > MAX_KEY_LENGTH:
            return False, f"{key_name} value is invalid: longer than {MAX_KEY_LENGTH} characters"

        if _KEY_FORBIDDEN.search(value):
            return False, f"{key_name} value is invalid: contains a forbidden character"

        return True, None
