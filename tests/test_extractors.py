from __future__ import annotations

from pathlib import Path

import pytest

from pywxbridge.messages import (
    LinkRecord,
    LocationRecord,
    MediaContext,
    MediaReference,
    MessageKind,
    RawPayload,
    ReplyRecord,
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

CTX = MediaContext(workdir=Path("/work"), docdir=Path("/docs"))


def _msg(markup: str, **kwargs: str) -> RawPayload:
    return RawPayload(message=markup, **kwargs)


def test_mentions_are_split_trimmed_and_ordered() -> None:
    extra = "<msgsource><atuserlist><![CDATA[ wxid_a,wxid_b , wxid_c ]]></atuserlist></msgsource>"
    payload = RawPayload(message="<msg/>", extra_info=extra)
    assert get_mentions(CTX, payload) == ["wxid_a", "wxid_b", "wxid_c"]

    single = RawPayload(extra_info="<msgsource><atuserlist>wxid_a</atuserlist></msgsource>")
    assert get_mentions(CTX, single) == ["wxid_a"]

    leading = RawPayload(extra_info="<msgsource><atuserlist>,wxid_a,,wxid_b</atuserlist></msgsource>")
    assert get_mentions(CTX, leading) == ["wxid_a", "wxid_b"]


@pytest.mark.parametrize(
    "extra",
    [
        "",
        "<msgsource><atuserlist></atuserlist></msgsource>",
        "<msgsource><atuserlist>  </atuserlist></msgsource>",
        "<msgsource><atuserlist>,,</atuserlist></msgsource>",
        "<msgsource><silence>1</silence></msgsource>",
        "not markup",
    ],
)
def test_mentions_absent_or_empty_is_none(extra: str) -> None:
    assert get_mentions(CTX, RawPayload(extra_info=extra)) is None


def test_mentions_only_read_extra_info() -> None:
    payload = RawPayload(message="<msgsource><atuserlist>wxid_a</atuserlist></msgsource>")
    assert get_mentions(CTX, payload) is None


def test_location_keeps_exact_coordinates() -> None:
    markup = (
        '<msg><location x="22.543099" y="-113.941739" scale="16" '
        'label="Nanshan, Shenzhen" poiname="Tencent Tower" /></msg>'
    )
    loc = parse_location(CTX, _msg(markup))
    assert loc == LocationRecord(
        name="Tencent Tower",
        address="Nanshan, Shenzhen",
        latitude=22.543099,
        longitude=-113.941739,
    )


def test_location_name_and_label_are_optional() -> None:
    loc = parse_location(CTX, _msg('<msg><location x="1.5" y="2" /></msg>'))
    assert loc == LocationRecord(name="", address="", latitude=1.5, longitude=2.0)


@pytest.mark.parametrize(
    "attrs",
    ['x="abc" y="2"', 'x="1" y="north"', 'y="2"', 'x="1"', 'x="" y="2"', 'x="1_0" y="2"'],
)
def test_location_bad_coordinates_are_no_match(attrs: str) -> None:
    assert parse_location(CTX, _msg(f"<msg><location {attrs} /></msg>")) is None


def test_reply_end_to_end() -> None:
    markup = (
        "<msg><appmsg><title>Hello</title><refermsg><svrid>12345</svrid>"
        "<chatusr>alice</chatusr></refermsg></appmsg></msg>"
    )
    assert parse_reply(CTX, _msg(markup)) == ReplyRecord(id=12345, sender="alice", title="Hello")


def test_reply_sender_falls_back_to_fromusr() -> None:
    markup = (
        "<msg><appmsg><title>ok</title><refermsg><svrid>9</svrid><chatusr></chatusr>"
        "<fromusr>bob</fromusr></refermsg></appmsg></msg>"
    )
    assert parse_reply(CTX, _msg(markup)) == ReplyRecord(id=9, sender="bob", title="ok")


def test_reply_accepts_full_u64_range() -> None:
    markup = (
        "<msg><appmsg><title>t</title><refermsg><svrid>18446744073709551615</svrid>"
        "<chatusr>a</chatusr></refermsg></appmsg></msg>"
    )
    reply = parse_reply(CTX, _msg(markup))
    assert reply is not None
    assert reply.id == 2**64 - 1


@pytest.mark.parametrize(
    "markup",
    [
        # no title
        "<msg><appmsg><refermsg><svrid>1</svrid><chatusr>a</chatusr></refermsg></appmsg></msg>",
        # no id
        "<msg><appmsg><title>t</title><refermsg><chatusr>a</chatusr></refermsg></appmsg></msg>",
        # no sender
        "<msg><appmsg><title>t</title><refermsg><svrid>1</svrid></refermsg></appmsg></msg>",
        # empty title
        "<msg><appmsg><title></title><refermsg><svrid>1</svrid>"
        "<chatusr>a</chatusr></refermsg></appmsg></msg>",
    ],
)
def test_reply_missing_field_is_no_match(markup: str) -> None:
    assert parse_reply(CTX, _msg(markup)) is None


@pytest.mark.parametrize("svrid", ["-1", "12a", "0x10", "18446744073709551616", "+5"])
def test_reply_non_numeric_id_is_no_match(svrid: str) -> None:
    markup = (
        f"<msg><appmsg><title>t</title><refermsg><svrid>{svrid}</svrid>"
        "<chatusr>a</chatusr></refermsg></appmsg></msg>"
    )
    assert parse_reply(CTX, _msg(markup)) is None


def test_app_link_optional_fields() -> None:
    full = (
        "<msg><appmsg><title>News</title><des>summary</des>"
        "<url>https://example.com/a</url></appmsg></msg>"
    )
    assert parse_app(CTX, _msg(full)) == LinkRecord(
        title="News", description="summary", url="https://example.com/a"
    )
    assert parse_app(CTX, _msg("<msg><appmsg><title>News</title></appmsg></msg>")) == LinkRecord(
        title="News"
    )
    assert parse_app(CTX, _msg("<msg><appmsg><url>https://x</url></appmsg></msg>")) is None


@pytest.mark.parametrize(
    "markup",
    [
        # cut off before the closing tags
        "<msg><appmsg><title>Hello</title><refermsg><svrid>12345</svrid><chatusr>alice</chatusr>",
        # closing tag does not match
        "<msg><appmsg><title>Hello</title><refermsg><svrid>12345</svrid>"
        "<chatusr>alice</chatusr></refermsg></wrong></msg>",
    ],
)
def test_malformed_markup_yields_no_record(markup: str) -> None:
    assert parse_reply(CTX, _msg(markup)) is None
    assert parse_app(CTX, _msg(markup)) is None


def test_truncated_location_is_no_match() -> None:
    assert parse_location(CTX, _msg('<msg><location x="1.5" y="2" ')) is None
    assert parse_location(CTX, _msg('<msg><location x="1.5" y="2" /></msg')) is None


def test_app_link_url_with_unescaped_ampersand() -> None:
    markup = "<msg><appmsg><title>News</title><url>http://a/?x=1&y=2</url></appmsg></msg>"
    assert parse_app(CTX, _msg(markup)) == LinkRecord(title="News", url="http://a/?x=1&y=2")


def test_app_type() -> None:
    assert get_app_type(CTX, _msg("<msg><appmsg><type>57</type></appmsg></msg>")) == 57
    assert get_app_type(CTX, _msg("<msg><appmsg><type>abc</type></appmsg></msg>")) == 0
    assert get_app_type(CTX, _msg("<msg><appmsg><title>x</title></appmsg></msg>")) == 0
    assert get_app_type(CTX, _msg("")) == 0


def test_notice_and_revoke_text() -> None:
    notice = "<msg><appmsg><textannouncement>Meeting at 5</textannouncement></appmsg></msg>"
    assert parse_notice(CTX, _msg(notice)) == "Meeting at 5"
    assert parse_notice(CTX, _msg("<msg><appmsg/></msg>")) == ""

    assert parse_revoke(CTX, _msg('<revokemsg>"Bob" recalled a message</revokemsg>')) == (
        '"Bob" recalled a message'
    )
    assert parse_revoke(CTX, _msg("<sysmsg><revokemsg>x</revokemsg></sysmsg>")) == ""
    assert parse_revoke(CTX, _msg("")) == ""


@pytest.mark.parametrize(
    ("status", "expected"),
    [("1", "VoIP: Started a call"), ("2", "VoIP: Call ended")],
)
def test_voip_known_statuses(status: str, expected: str) -> None:
    markup = f"<voipinvitemsg><roomid>1</roomid><status>{status}</status></voipinvitemsg>"
    assert parse_private_voip(CTX, _msg(markup)) == expected


def test_voip_unknown_status_embeds_code() -> None:
    markup = "<voipinvitemsg><status>42</status></voipinvitemsg>"
    text = parse_private_voip(CTX, _msg(markup))
    assert "42" in text
    assert text == "VoIP: Unknown status 42"


def test_voip_bubble_and_absent() -> None:
    bubble = (
        '<voipmsg type="VoIPBubbleMsg"><VoIPBubbleMsg>'
        "<msg><![CDATA[Duration 00:12]]></msg></VoIPBubbleMsg></voipmsg>"
    )
    assert parse_private_voip(CTX, _msg(bubble)) == "VoIP: Duration 00:12"
    assert parse_private_voip(CTX, _msg("<msg><voip/></msg>")) == ""
    assert parse_private_voip(CTX, _msg("")) == ""


def test_system_message_voip_banner() -> None:
    invite = '<sysmsg type="voipmt"><voipmt><invite>Alice started a call</invite></voipmt></sysmsg>'
    banner = '<sysmsg type="voipmt"><voipmt><banner>Call in progress</banner></voipmt></sysmsg>'
    assert parse_system_message(CTX, _msg(invite)) == "VoIP: Alice started a call"
    assert parse_system_message(CTX, _msg(banner)) == "VoIP: Call in progress"
    assert parse_system_message(CTX, _msg('<sysmsg type="pat"><pat/></sysmsg>')) == ""


def test_voice_reference_reads_client_msg_id() -> None:
    markup = '<msg><voicemsg endflag="1" length="5120" clientmsgid="41abc0" /></msg>'
    ref = parse_media_reference(CTX, _msg(markup, self_id="wxid_me"), MessageKind.VOICE)
    assert ref == MediaReference(kind=MessageKind.VOICE, self_id="wxid_me", content_id="41abc0")

    missing = parse_media_reference(CTX, _msg("<msg><voicemsg /></msg>"), MessageKind.VOICE)
    assert missing is None


def test_sticker_reference_needs_url_and_key() -> None:
    markup = (
        '<msg><emoji fromusername="a" type="2" md5="m"'
        ' cdnurl="http://x/y.png" aeskey="deadbeef" /></msg>'
    )
    ref = parse_media_reference(CTX, _msg(markup), MessageKind.STICKER)
    assert ref is not None
    assert ref.url == "http://x/y.png"
    assert ref.content_id == "deadbeef"

    no_key = '<msg><emoji cdnurl="http://x/y.png" /></msg>'
    no_url = '<msg><emoji aeskey="deadbeef" /></msg>'
    assert parse_media_reference(CTX, _msg(no_key), MessageKind.STICKER) is None
    assert parse_media_reference(CTX, _msg(no_url), MessageKind.STICKER) is None


def test_hint_based_references() -> None:
    image = parse_media_reference(
        CTX, RawPayload(file_path="wxid_me\\Image\\a.dat", self_id="wxid_me"), MessageKind.IMAGE
    )
    assert image is not None
    assert image.file_path == "wxid_me\\Image\\a.dat"

    assert parse_media_reference(CTX, RawPayload(), MessageKind.IMAGE) is None
    assert parse_media_reference(CTX, RawPayload(), MessageKind.FILE) is None

    video = parse_media_reference(CTX, RawPayload(thumbnail="v.jpg"), MessageKind.VIDEO)
    assert video == MediaReference(kind=MessageKind.VIDEO, thumbnail="v.jpg")
    assert parse_media_reference(CTX, RawPayload(), MessageKind.VIDEO) is None

    with pytest.raises(ValueError):
        parse_media_reference(CTX, RawPayload(), MessageKind.LOCATION)
