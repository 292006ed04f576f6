from __future__ import annotations

from collections.abc import Callable
from dataclasses import dataclass
from functools import partial

from . import extract
from .types import (
    AppTypeTag,
    ExtractedRecord,
    MediaContext,
    MentionList,
    MessageKind,
    PlainNotice,
    RawPayload,
)

ExtractFn = Callable[[MediaContext, RawPayload], ExtractedRecord | None]


@dataclass(frozen=True, slots=True)
class Extractor:
    """One extraction variant, selected by the outer message kind."""

    kind: MessageKind
    fn: ExtractFn

    def extract(self, ctx: MediaContext, payload: RawPayload) -> ExtractedRecord | None:
        return self.fn(ctx, payload)


def _mentions(ctx: MediaContext, payload: RawPayload) -> MentionList | None:
    users = extract.get_mentions(ctx, payload)
    return MentionList(users=tuple(users)) if users else None


def _notice(
    fn: Callable[[MediaContext, RawPayload], str], ctx: MediaContext, payload: RawPayload
) -> PlainNotice | None:
    text = fn(ctx, payload)
    return PlainNotice(text=text) if text else None


def _app_type(ctx: MediaContext, payload: RawPayload) -> AppTypeTag:
    return AppTypeTag(value=extract.get_app_type(ctx, payload))


def _media(kind: MessageKind) -> ExtractFn:
    def _fn(ctx: MediaContext, payload: RawPayload) -> ExtractedRecord | None:
        return extract.parse_media_reference(ctx, payload, kind)

    return _fn


EXTRACTORS: dict[MessageKind, Extractor] = {
    e.kind: e
    for e in (
        Extractor(MessageKind.MENTIONS, _mentions),
        Extractor(MessageKind.IMAGE, _media(MessageKind.IMAGE)),
        Extractor(MessageKind.VOICE, _media(MessageKind.VOICE)),
        Extractor(MessageKind.VIDEO, _media(MessageKind.VIDEO)),
        Extractor(MessageKind.FILE, _media(MessageKind.FILE)),
        Extractor(MessageKind.STICKER, _media(MessageKind.STICKER)),
        Extractor(MessageKind.LOCATION, extract.parse_location),
        Extractor(MessageKind.APP_LINK, extract.parse_app),
        Extractor(MessageKind.REPLY, extract.parse_reply),
        Extractor(MessageKind.NOTICE, partial(_notice, extract.parse_notice)),
        Extractor(MessageKind.REVOKE, partial(_notice, extract.parse_revoke)),
        Extractor(MessageKind.VOIP, partial(_notice, extract.parse_private_voip)),
        Extractor(MessageKind.SYSTEM, partial(_notice, extract.parse_system_message)),
        Extractor(MessageKind.APP_TYPE, _app_type),
    )
}


def extract_record(
    kind: MessageKind | str, ctx: MediaContext, payload: RawPayload
) -> ExtractedRecord | None:
    """
    Route `payload` to the extractor for `kind` and return its record.

    The kind comes from the caller; content is never sniffed. Returns `None`
    when the payload does not carry what that kind requires.
    """

    extractor = EXTRACTORS.get(MessageKind(kind))
    if extractor is None:
        return None
    return extractor.extract(ctx, payload)
