"""
Read-side dynamic entity.

A ReadableEntity wraps the flat property bag decoded from a service payload
and offers two kinds of case-insensitive lookup over it:

- direct access (``entity.Name``, ``entity["name"]``, ``entity.get("NAME")``)
  returns the value or None;
- accessor-style access (``entity.getName()``, ``entity.require("isStudent")``)
  raises PropertyNotFoundError when nothing matches.
"""

import re
from functools import partial
from typing import Any, Dict, Iterator, Mapping, Optional

from .exceptions import PropertyNotFoundError
from .types import EdmType, TypedValue, infer_type

_ACCESSOR_NOISE = re.compile(r"^get|\(\)\Z")


def normalize_name(name: str) -> str:
    """
    Normalize a property or accessor name for lookup.

    Lowercases, then strips a leading ``get`` and a trailing ``()``.
    Underscores are kept: ``get_rate`` and ``Get_Rate`` both become ``_rate``.
    """
    return _ACCESSOR_NOISE.sub("", name.lower())


def _is_accessor(name: str) -> bool:
    return len(name) > 3 and name[:3].lower() == "get"


class ReadableEntity:
    """
    Immutable, case-insensitive view over a decoded entity.

    Only names starting with ``get`` are callable accessors. Any other
    attribute returns the value itself, so ``entity.IsStudent()`` fails with
    ``TypeError: 'bool' object is not callable``; use ``entity.IsStudent``,
    ``entity.getIsStudent()`` or ``entity.require("IsStudent")`` instead.

    Methods defined on the class take precedence over attribute lookup of
    properties; use ``entity["get"]`` for a property that shadows one.
    """

    __slots__ = ("_values",)

    def __init__(self, properties: Optional[Mapping[str, Any]] = None):
        values: Dict[str, TypedValue] = {}
        for name, value in (properties or {}).items():
            if not isinstance(value, TypedValue):
                value = TypedValue(value, infer_type(value))
            values[normalize_name(name)] = value
        object.__setattr__(self, "_values", values)

    def get(self, name: str, default: Any = None) -> Any:
        """Direct lookup; returns ``default`` when no property matches."""
        typed = self._values.get(normalize_name(name))
        return default if typed is None else typed.value

    def require(self, name: str) -> Any:
        """
        Strict lookup.

        Raises:
            PropertyNotFoundError: If no property matches
        """
        key = normalize_name(name)
        if key not in self._values:
            raise PropertyNotFoundError(key)
        return self._values[key].value

    def edm_type(self, name: str) -> Optional[EdmType]:
        """EDM type of a property, or None if it does not exist."""
        typed = self._values.get(normalize_name(name))
        return None if typed is None else typed.edm_type

    def to_dict(self) -> Dict[str, Any]:
        """Plain values keyed by normalized property name."""
        return {name: typed.value for name, typed in self._values.items()}

    def __getattr__(self, name: str) -> Any:
        if name == "_values" or (name.startswith("__") and name.endswith("__")):
            raise AttributeError(name)
        if _is_accessor(name):
            return partial(self.require, name)
        return self.get(name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("ReadableEntity is read-only")

    def __delattr__(self, name: str) -> None:
        raise AttributeError("ReadableEntity is read-only")

    def __getitem__(self, name: str) -> Any:
        return self.get(name)

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and normalize_name(name) in self._values

    def __iter__(self) -> Iterator[str]:
        return iter(self._values)

    def __len__(self) -> int:
        return len(self._values)

    def __eq__(self, other: object) -> bool:
        if not isinstance(other, ReadableEntity):
            return NotImplemented
        return self._values == other._values

    __hash__ = None  # type: ignore[assignment]

    def __repr__(self) -> str:
        return f"ReadableEntity({self.to_dict()!r})"
