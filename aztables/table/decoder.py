"""
Decoding of entity payloads.

Turns the flat JSON objects returned by the table service into
ReadableEntity instances, applying ``@odata.type`` annotations.
"""

import json
import logging
from typing import Any, Dict, Iterator, List

from .dynamic import ReadableEntity
from .exceptions import DecodeError
from .types import ODATA_TYPE_SUFFIX, TypedValue, decode_value, infer_type

logger = logging.getLogger(__name__)


class EntityDecoder:
    """
    Decoder for single entities and entity collections.

    Annotated properties are converted according to their declared type;
    properties without an annotation keep their JSON-native value.
    """

    def decode(self, data: Any) -> ReadableEntity:
        """
        Decode one JSON object into a ReadableEntity.

        Args:
            data: Decoded JSON object

        Returns:
            ReadableEntity

        Raises:
            DecodeError: If data is not an object or a value cannot be converted
        """
        if not isinstance(data, dict):
            raise DecodeError(f"Expected entity to be a JSON object, got {type(data).__name__}")

        annotations: Dict[str, str] = {}
        for key, value in data.items():
            if key.endswith(ODATA_TYPE_SUFFIX):
                annotations[key[: -len(ODATA_TYPE_SUFFIX)]] = value

        properties: Dict[str, TypedValue] = {}
        for key, value in data.items():
            if key.endswith(ODATA_TYPE_SUFFIX):
                continue
            if key in annotations:
                properties[key] = decode_value(value, annotations[key])
            else:
                properties[key] = TypedValue(value, infer_type(value))

        orphans = set(annotations) - set(properties)
        if orphans:
            logger.debug(f"Ignoring type annotations without a property: {sorted(orphans)}")

        return ReadableEntity(properties)

    def decode_json(self, body: str) -> ReadableEntity:
        """Parse a JSON body and decode it as a single entity."""
        return self.decode(self._parse(body))

    def decode_collection(self, body: str) -> Iterator[ReadableEntity]:
        """
        Decode a ``{"value": [...]}`` query envelope.

        The envelope is validated eagerly; the elements are decoded lazily,
        in response order. The returned iterator is single-pass.

        Raises:
            DecodeError: If the envelope does not contain a ``value`` array
        """
        envelope = self._parse(body)
        if not isinstance(envelope, dict) or not isinstance(envelope.get("value"), list):
            raise DecodeError("Expected a JSON object with a 'value' array")

        items: List[Any] = envelope["value"]
        return (self.decode(item) for item in items)

    @staticmethod
    def _parse(body: str) -> Any:
        try:
            return json.loads(body)
        except (TypeError, ValueError) as e:
            raise DecodeError(f"Invalid JSON in response body: {e}")


decoder = EntityDecoder()
