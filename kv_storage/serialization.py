"""Value encoding between Python objects and the store's flat strings."""

from __future__ import annotations

import json
from collections.abc import Mapping
from typing import Any

from .logger import get_logger


logger = get_logger(__name__)


def normalize_string(value: str | bytes | None) -> str | None:
    if value is None:
        return None
    if isinstance(value, bytes):
        return value.decode()
    return value


def normalize_result(value: Any) -> Any:
    """Decode bytes in a raw client reply, including list and tuple replies."""
    if isinstance(value, bytes):
        return value.decode()
    if isinstance(value, (list, tuple)):
        return [normalize_result(item) for item in value]
    return value


def prepare_string(data: Any) -> str:
    """Return strings unchanged and JSON-encode everything else."""
    return data if isinstance(data, str) else json.dumps(data)


def prepare_hash(data: Any) -> Any:
    """Flatten a value into string fields suitable for a hash.

    Lists become a single ``value`` field holding their JSON text. Mappings keep
    string fields as they are and JSON-encode the other fields. Anything else is
    returned unchanged.
    """
    if isinstance(data, (list, tuple)):
        return {"value": json.dumps(data)}

    if isinstance(data, Mapping):
        return {key: value if isinstance(value, str) else json.dumps(value) for key, value in data.items()}

    return data


def parse_hash(data: Any) -> Any:
    """Decode the string fields of a hash back into Python values.

    Fields holding text that is not valid JSON are returned as the raw string.
    """
    if not isinstance(data, Mapping):
        return data

    parsed: dict[Any, Any] = {}
    for key, value in data.items():
        field = normalize_result(key)
        text = normalize_string(value) if isinstance(value, (str, bytes)) else None
        if text is None:
            parsed[field] = value
            continue
        logger.debug(f"[ parse HASH ] Value: {text}")
        try:
            parsed[field] = json.loads(text)
        except json.JSONDecodeError:
            parsed[field] = text
    return parsed
