from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from pathlib import Path
from typing import TypeAlias


class MessageKind(str, Enum):
    """Outer message kind, decided by the caller before extraction."""

    MENTIONS = "mentions"
    IMAGE = "image"
    VOICE = "voice"
    VIDEO = "video"
    FILE = "file"
    STICKER = "sticker"
    LOCATION = "location"
    APP_LINK = "app_link"
    REPLY = "reply"
    NOTICE = "notice"
    REVOKE = "revoke"
    VOIP = "voip"
    SYSTEM = "system"
    APP_TYPE = "app_type"


MEDIA_KINDS = frozenset(
    {
        MessageKind.IMAGE,
        MessageKind.VOICE,
        MessageKind.VIDEO,
        MessageKind.FILE,
        MessageKind.STICKER,
    }
)


@dataclass(frozen=True, slots=True)
class RawPayload:
    """
    One message as delivered by the client hook.

    - `message`: primary markup body
    - `extra_info`: auxiliary `<msgsource>` markup (only mentions read it)
    - `self_id`: id of the logged-in account; cached images and voice notes
      live in the subdirectory of that name under the working directory
    - `file_path` / `thumbnail`: path hints reported alongside the message
    """

    message: str = ""
    extra_info: str = ""
    self_id: str = ""
    file_path: str = ""
    thumbnail: str = ""


@dataclass(frozen=True, slots=True)
class MediaContext:
    workdir: Path
    docdir: Path


@dataclass(frozen=True, slots=True)
class MentionList:
    users: tuple[str, ...]


@dataclass(frozen=True, slots=True)
class MediaReference:
    """
    Where a message's media can be found.

    `content_id` is the voice `clientmsgid` or the sticker `aeskey`; `url` is
    only set for stickers, which are fetched remotely.
    """

    kind: MessageKind
    file_path: str = ""
    thumbnail: str = ""
    self_id: str = ""
    content_id: str = ""
    url: str = ""


@dataclass(frozen=True, slots=True)
class LocationRecord:
    name: str
    address: str
    latitude: float
    longitude: float


@dataclass(frozen=True, slots=True)
class LinkRecord:
    title: str
    description: str = ""
    url: str = ""


@dataclass(frozen=True, slots=True)
class ReplyRecord:
    id: int
    sender: str
    title: str


@dataclass(frozen=True, slots=True)
class PlainNotice:
    text: str


@dataclass(frozen=True, slots=True)
class AppTypeTag:
    # 0 means unclassified
    value: int


ExtractedRecord: TypeAlias = (
    MentionList
    | MediaReference
    | LocationRecord
    | LinkRecord
    | ReplyRecord
    | PlainNotice
    | AppTypeTag
)
