"""
Stateless field extractors, one per message subtype.

Every extractor takes `(ctx, payload)` and folds parse errors, missing nodes
and bad numbers into "no match" (`None`, `""` or `0`), so one malformed
message never stops the pipeline.
"""

from __future__ import annotations

import re

from lxml import etree

from ..constants import VOIP_CALL_ENDED, VOIP_CALL_STARTED
from ..exceptions import MarkupParseError
from ..markup import find_one, find_text, parse
from .types import (
    LinkRecord,
    LocationRecord,
    MediaContext,
    MediaReference,
    MessageKind,
    RawPayload,
    ReplyRecord,
)

_INT_RE = re.compile(r"[+-]?[0-9]+")
_UINT_RE = re.compile(r"[0-9]+")
_U64_MAX = 2**64 - 1


def _parse_doc(text: str) -> etree._Element | None:
    try:
        return parse(text)
    except MarkupParseError:
        return None


def _required(doc: etree._Element, path: str) -> str | None:
    # Empty text counts as missing.
    text = find_text(doc, path)
    return text or None


def _parse_float(text: str) -> float | None:
    if "_" in text or text != text.strip():
        return None
    try:
        return float(text)
    except ValueError:
        return None


def _parse_int(text: str) -> int | None:
    if not _INT_RE.fullmatch(text):
        return None
    return int(text)


def _parse_u64(text: str) -> int | None:
    if not _UINT_RE.fullmatch(text):
        return None
    value = int(text)
    return value if value <= _U64_MAX else None


def get_mentions(ctx: MediaContext, payload: RawPayload) -> list[str] | None:
    """
    User ids mentioned in a group message, read from `extra_info`.

    Returns `None` (never an empty list) when nobody is mentioned.
    """

    if not payload.extra_info:
        return None
    doc = _parse_doc(payload.extra_info)
    if doc is None:
        return None
    raw = _required(doc, "/msgsource/atuserlist")
    if raw is None:
        return None
    users = [u.strip() for u in raw.strip().split(",")]
    users = [u for u in users if u]
    return users or None


def parse_media_reference(
    ctx: MediaContext, payload: RawPayload, kind: MessageKind
) -> MediaReference | None:
    """
    Build the reference the media resolver needs for `kind`.

    Image, video and file rely on the path hints sent with the message; voice
    and sticker read their identifiers from the markup.
    """

    if kind is MessageKind.IMAGE or kind is MessageKind.FILE:
        if not payload.file_path:
            return None
        return MediaReference(kind=kind, file_path=payload.file_path, self_id=payload.self_id)

    if kind is MessageKind.VIDEO:
        if not payload.file_path and not payload.thumbnail:
            return None
        return MediaReference(
            kind=kind,
            file_path=payload.file_path,
            thumbnail=payload.thumbnail,
            self_id=payload.self_id,
        )

    if kind is MessageKind.VOICE:
        doc = _parse_doc(payload.message)
        if doc is None:
            return None
        client_msg_id = _required(doc, "/msg/voicemsg/@clientmsgid")
        if client_msg_id is None:
            return None
        return MediaReference(kind=kind, self_id=payload.self_id, content_id=client_msg_id)

    if kind is MessageKind.STICKER:
        doc = _parse_doc(payload.message)
        if doc is None:
            return None
        url = _required(doc, "//@cdnurl")
        if url is None:
            return None
        aes_key = _required(doc, "//@aeskey")
        if aes_key is None:
            return None
        return MediaReference(kind=kind, self_id=payload.self_id, content_id=aes_key, url=url)

    raise ValueError(f"not a media kind: {kind!r}")


def parse_location(ctx: MediaContext, payload: RawPayload) -> LocationRecord | None:
    doc = _parse_doc(payload.message)
    if doc is None:
        return None

    x = _required(doc, "/msg/location/@x")
    latitude = _parse_float(x) if x is not None else None
    if latitude is None:
        return None
    y = _required(doc, "/msg/location/@y")
    longitude = _parse_float(y) if y is not None else None
    if longitude is None:
        return None

    return LocationRecord(
        name=find_text(doc, "/msg/location/@poiname") or "",
        address=find_text(doc, "/msg/location/@label") or "",
        latitude=latitude,
        longitude=longitude,
    )


def get_app_type(ctx: MediaContext, payload: RawPayload) -> int:
    """Rich-card subtype from `/msg/appmsg/type`; 0 when absent or not a number."""

    doc = _parse_doc(payload.message)
    if doc is None:
        return 0
    raw = _required(doc, "/msg/appmsg/type")
    if raw is None:
        return 0
    value = _parse_int(raw)
    return value if value is not None else 0


def parse_reply(ctx: MediaContext, payload: RawPayload) -> ReplyRecord | None:
    """
    A quoted reply: the reply text plus the id and sender of the quoted message.

    The sender is `refermsg/chatusr`, falling back to `refermsg/fromusr`.
    """

    doc = _parse_doc(payload.message)
    if doc is None:
        return None

    title = _required(doc, "/msg/appmsg/title")
    if title is None:
        return None
    svrid = _required(doc, "/msg/appmsg/refermsg/svrid")
    if svrid is None:
        return None
    sender = _required(doc, "/msg/appmsg/refermsg/chatusr") or _required(
        doc, "/msg/appmsg/refermsg/fromusr"
    )
    if sender is None:
        return None
    msg_id = _parse_u64(svrid)
    if msg_id is None:
        return None

    return ReplyRecord(id=msg_id, sender=sender, title=title)


def parse_notice(ctx: MediaContext, payload: RawPayload) -> str:
    doc = _parse_doc(payload.message)
    if doc is None:
        return ""
    return find_text(doc, "/msg/appmsg/textannouncement") or ""


def parse_app(ctx: MediaContext, payload: RawPayload) -> LinkRecord | None:
    doc = _parse_doc(payload.message)
    if doc is None:
        return None

    title = _required(doc, "/msg/appmsg/title")
    if title is None:
        return None

    return LinkRecord(
        title=title,
        description=find_text(doc, "/msg/appmsg/des") or "",
        url=find_text(doc, "/msg/appmsg/url") or "",
    )


def parse_revoke(ctx: MediaContext, payload: RawPayload) -> str:
    doc = _parse_doc(payload.message)
    if doc is None:
        return ""
    return find_text(doc, "/revokemsg") or ""


def parse_private_voip(ctx: MediaContext, payload: RawPayload) -> str:
    """
    Display text for a one-to-one call event.

    Two shapes are understood: `<voipinvitemsg><status>` (1 = started,
    2 = ended) and the `<voipmsg>` bubble whose nested `<msg>` text is shown.
    """

    doc = _parse_doc(payload.message)
    if doc is None:
        return ""

    if find_one(doc, "/voipinvitemsg") is not None:
        status = find_text(doc, "/voipinvitemsg/status")
        if status is not None:
            if status == "1":
                return VOIP_CALL_STARTED
            if status == "2":
                return VOIP_CALL_ENDED
            return f"VoIP: Unknown status {status}"

    if find_one(doc, "/voipmsg") is not None:
        text = find_text(doc, "//msg")
        if text is not None:
            return f"VoIP: {text}"

    return ""


def parse_system_message(ctx: MediaContext, payload: RawPayload) -> str:
    doc = _parse_doc(payload.message)
    if doc is None:
        return ""

    # Group call invites and banners; other <sysmsg> types are not rendered.
    for path in ("/sysmsg/voipmt/invite", "/sysmsg/voipmt/banner"):
        text = find_text(doc, path)
        if text is not None:
            return f"VoIP: {text}"

    return ""
