from __future__ import annotations

from .classify import EXTRACTORS, Extractor, extract_record
from .extract import (
    get_app_type,
    get_mentions,
    parse_app,
    parse_location,
    parse_media_reference,
    parse_notice,
    parse_private_voip,
    parse_reply,
    parse_revoke,
    parse_system_message,
)
from .types import (
    MEDIA_KINDS,
    AppTypeTag,
    ExtractedRecord,
    LinkRecord,
    LocationRecord,
    MediaContext,
    MediaReference,
    MentionList,
    MessageKind,
    PlainNotice,
    RawPayload,
    ReplyRecord,
)

__all__ = [
    "EXTRACTORS",
    "MEDIA_KINDS",
    "AppTypeTag",
    "ExtractedRecord",
    "Extractor",
    "LinkRecord",
    "LocationRecord",
    "MediaContext",
    "MediaReference",
    "MentionList",
    "MessageKind",
    "PlainNotice",
    "RawPayload",
    "ReplyRecord",
    "extract_record",
    "get_app_type",
    "get_mentions",
    "parse_app",
    "parse_location",
    "parse_media_reference",
    "parse_notice",
    "parse_private_voip",
    "parse_reply",
    "parse_revoke",
    "parse_system_message",
]
