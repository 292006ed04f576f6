from __future__ import annotations

import binascii
import hashlib
import logging
from dataclasses import dataclass
from pathlib import Path
from typing import Any

from .exceptions import BlobDecodeError
from .util import json as blobjson

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class BlobData:
    """A named binary payload; `name` may be empty."""

    name: str
    binary: bytes

    def to_json(self) -> str:
        return blobjson.dumps({"name": self.name, "binary": self.binary})


def decode_blob(raw: str | bytes) -> BlobData:
    """Decode a `{"name": ..., "binary": ...}` JSON document."""

    try:
        obj: Any = blobjson.loads(raw)
    except (ValueError, TypeError, binascii.Error) as e:
        raise BlobDecodeError(f"invalid blob json: {e}") from e
    if not isinstance(obj, dict):
        raise BlobDecodeError("blob json must be an object")

    name = obj.get("name") or ""
    if not isinstance(name, str):
        raise BlobDecodeError("blob name must be a string")
    if "\x00" in name:
        raise BlobDecodeError("blob name contains a NUL byte")
    try:
        binary = blobjson.decode_bytes(obj.get("binary"))
    except ValueError as e:
        raise BlobDecodeError(f"invalid blob binary: {e}") from e
    return BlobData(name=name, binary=binary)


def blob_filename(blob: BlobData) -> str:
    """
    File name to store `blob` under.

    An explicit name is used verbatim; otherwise the lowercase hex MD5 of the
    content, so identical bytes always get the same name.
    """

    if blob.name:
        return blob.name
    return hashlib.md5(blob.binary).hexdigest()


def write_blob(workdir: Path, blob: BlobData) -> str:
    """
    Write `blob` into `workdir` and return the path, or `""` on failure.

    Existing files are overwritten. Names resolving outside `workdir` are
    refused.
    """

    root = Path(workdir)
    path = root / blob_filename(blob)
    try:
        if not path.resolve().is_relative_to(root.resolve()):
            logger.warning("refusing to write blob outside workdir: %r", blob.name)
            return ""
        path.write_bytes(blob.binary)
    except (OSError, ValueError) as e:
        logger.warning("failed to persist blob %s: %s", path, e)
        return ""
    logger.debug("persisted blob %s (%d bytes)", path, len(blob.binary))
    return str(path)


def persist_blob(workdir: Path, raw: str | bytes) -> str:
    """Decode an inbound blob document and write it; `""` means not persisted."""

    try:
        blob = decode_blob(raw)
    except BlobDecodeError as e:
        logger.warning("dropping inbound blob: %s", e)
        return ""
    return write_blob(workdir, blob)
