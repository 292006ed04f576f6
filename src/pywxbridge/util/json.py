from __future__ import annotations

import base64
import binascii
import dataclasses
import json
from typing import Any


def _default(obj: Any) -> Any:
    if isinstance(obj, (bytes, bytearray, memoryview)):
        return base64.b64encode(bytes(obj)).decode("ascii")
    # `dataclasses.is_dataclass()` is true for both instances and dataclass *types*.
    if dataclasses.is_dataclass(obj) and not isinstance(obj, type):
        return dataclasses.asdict(obj)
    raise TypeError(f"Object of type {type(obj).__name__} is not JSON serializable")


def _object_hook(obj: dict[str, Any]) -> Any:
    # Node-style `{"type": "Buffer", "data": ...}` with base64 text or a byte list.
    if obj.get("type") == "Buffer":
        data = obj.get("data")
        if isinstance(data, str):
            return base64.b64decode(data.encode("ascii"), validate=True)
        if isinstance(data, list):
            if not all(isinstance(b, int) and 0 <= b <= 255 for b in data):
                raise ValueError("Buffer data must be a list of byte values")
            return bytes(data)
    return obj


def dumps(obj: Any, *, indent: int | None = None) -> str:
    """JSON serialize; bytes become standard base64 text."""

    return json.dumps(obj, default=_default, indent=indent, sort_keys=True)


def loads(data: str | bytes) -> Any:
    """JSON deserialize, decoding Buffer objects to bytes."""

    return json.loads(data, object_hook=_object_hook)


def decode_bytes(value: Any) -> bytes:
    """
    Coerce a decoded JSON field to bytes.

    Accepts base64 text (how byte fields are usually marshalled), an already
    decoded Buffer, or `null` for empty content.
    """

    if value is None:
        return b""
    if isinstance(value, bytes):
        return value
    if isinstance(value, str):
        try:
            return base64.b64decode(value.encode("ascii"), validate=True)
        except (binascii.Error, UnicodeEncodeError) as e:
            raise ValueError(f"invalid base64: {e}") from e
    raise ValueError(f"expected bytes, got {type(value).__name__}")
