"""JSON encoding of panel settings mappings.

Stored blobs are JSON objects mapping literal setting names to values,
e.g. ``{"Volume": 0.5, "Muted": false}``.
"""

import json
from typing import Any, Dict

from ..errors import DeserializationError, SerializationError


def encode_settings(values: Dict[str, Any]) -> str:
    """Serialize a settings mapping to a JSON object string.

    Args:
        values: Mapping of literal name to value.

    Returns:
        JSON text. Key order follows the mapping's order.

    Raises:
        SerializationError: If a value is not JSON-compatible.
    """
    try:
        return json.dumps(values, ensure_ascii=False)
    except (TypeError, ValueError) as e:
        raise SerializationError(str(e)) from e


def decode_settings(text: str, key: str = "") -> Dict[str, Any]:
    """Parse a JSON blob back into a settings mapping.

    Args:
        text: The stored blob.
        key: Persistence key, used in error messages.

    Returns:
        Mapping of literal name to value.

    Raises:
        DeserializationError: If the blob is not valid JSON or not an object.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise DeserializationError(key, f"invalid UTF-8: {e}") from e

    if not isinstance(text, str):
        raise DeserializationError(key, f"expected text, got {type(text).__name__}")

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise DeserializationError(key, str(e)) from e

    if not isinstance(data, dict):
        raise DeserializationError(
            key, f"expected a JSON object, got {type(data).__name__}"
        )
    return data
