"""
pywxbridge: normalize WeChat desktop message payloads into typed records and
acquire the media they reference.

Local media is polled for with a deadline because the client announces a
message before its file is fully written; stickers are fetched from their CDN.
"""

from __future__ import annotations

from .blob import BlobData
from .bridge import WeChatBridge
from .config import BridgeConfig
from .exceptions import PywxbridgeError
from .messages import MessageKind, RawPayload

__all__ = [
    "BlobData",
    "BridgeConfig",
    "MessageKind",
    "PywxbridgeError",
    "RawPayload",
    "WeChatBridge",
]

__version__ = "0.1.0"
