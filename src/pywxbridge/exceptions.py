from __future__ import annotations

from collections.abc import Sequence
from pathlib import Path


class PywxbridgeError(Exception):
    """Base error for the pywxbridge library."""


class MarkupParseError(PywxbridgeError):
    """Message markup could not be parsed."""


class MediaDownloadError(PywxbridgeError):
    """Remote media fetch failed (transport or protocol error)."""


class MediaUnavailableError(PywxbridgeError):
    """
    Local media did not appear before the deadline.

    Kept apart from `MediaDownloadError` so callers can tell the user the
    file never showed up instead of reporting a generic failure.
    """

    def __init__(self, *, candidates: Sequence[Path], timeout_s: float) -> None:
        super().__init__(f"media not available within {timeout_s:g}s")
        self.candidates = list(candidates)
        self.timeout_s = timeout_s


class BlobDecodeError(PywxbridgeError):
    """Inbound blob payload is not a valid `{name, binary}` document."""
