from __future__ import annotations

from pathlib import Path

import pytest

from pywxbridge.messages import (
    EXTRACTORS,
    AppTypeTag,
    LinkRecord,
    MediaContext,
    MediaReference,
    MentionList,
    MessageKind,
    PlainNotice,
    RawPayload,
    ReplyRecord,
    extract_record,
)

CTX = MediaContext(workdir=Path("/work"), docdir=Path("/docs"))

REPLY = (
    "<msg><appmsg><title>Hello</title><type>57</type><refermsg><svrid>12345</svrid>"
    "<chatusr>alice</chatusr></refermsg></appmsg></msg>"
)


def test_every_kind_has_an_extractor() -> None:
    assert set(EXTRACTORS) == set(MessageKind)
    for kind, extractor in EXTRACTORS.items():
        assert extractor.kind is kind


def test_dispatch_follows_the_given_kind() -> None:
    payload = RawPayload(message=REPLY)

    assert extract_record(MessageKind.REPLY, CTX, payload) == ReplyRecord(
        id=12345, sender="alice", title="Hello"
    )
    # Same markup routed elsewhere yields that kind's view of it.
    assert extract_record(MessageKind.APP_LINK, CTX, payload) == LinkRecord(title="Hello")
    assert extract_record(MessageKind.APP_TYPE, CTX, payload) == AppTypeTag(57)
    assert extract_record(MessageKind.LOCATION, CTX, payload) is None


def test_dispatch_accepts_kind_values() -> None:
    payload = RawPayload(message=REPLY)
    assert isinstance(extract_record("reply", CTX, payload), ReplyRecord)
    with pytest.raises(ValueError):
        extract_record("bogus", CTX, payload)


def test_notices_wrap_text_and_empty_is_no_match() -> None:
    revoke = RawPayload(message="<revokemsg>you recalled a message</revokemsg>")
    assert extract_record(MessageKind.REVOKE, CTX, revoke) == PlainNotice("you recalled a message")
    assert extract_record(MessageKind.REVOKE, CTX, RawPayload(message="<x/>")) is None

    voip = RawPayload(message="<voipinvitemsg><status>2</status></voipinvitemsg>")
    assert extract_record(MessageKind.VOIP, CTX, voip) == PlainNotice("VoIP: Call ended")

    assert extract_record(MessageKind.NOTICE, CTX, RawPayload(message="<msg/>")) is None
    assert extract_record(MessageKind.SYSTEM, CTX, RawPayload(message="<<")) is None


def test_app_type_sentinel() -> None:
    assert extract_record(MessageKind.APP_TYPE, CTX, RawPayload(message="")) == AppTypeTag(0)


def test_mentions_record() -> None:
    payload = RawPayload(extra_info="<msgsource><atuserlist>a,b</atuserlist></msgsource>")
    assert extract_record(MessageKind.MENTIONS, CTX, payload) == MentionList(("a", "b"))
    assert extract_record(MessageKind.MENTIONS, CTX, RawPayload()) is None


def test_media_kinds_produce_references() -> None:
    sticker = RawPayload(message='<msg><emoji cdnurl="http://x/y.png" aeskey="deadbeef"/></msg>')
    ref = extract_record(MessageKind.STICKER, CTX, sticker)
    assert ref == MediaReference(
        kind=MessageKind.STICKER, content_id="deadbeef", url="http://x/y.png"
    )

    file_ref = extract_record(MessageKind.FILE, CTX, RawPayload(file_path="me\\File\\a.pdf"))
    assert isinstance(file_ref, MediaReference)
    assert file_ref.kind is MessageKind.FILE
