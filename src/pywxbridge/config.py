from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path

from .constants import (
    MAX_KEEPALIVE_CONNECTIONS,
    MEDIA_DOWNLOAD_TIMEOUT_S,
    MEDIA_POLL_INTERVAL_S,
    USER_AGENT,
    WECHAT_FILES_DIRNAME,
)
from .messages.types import MediaContext


@dataclass(slots=True)
class BridgeConfig:
    """
    Process-wide settings, resolved once at startup and never mutated.

    - `workdir`: root holding one subdirectory per logged-in account; inbound
      blobs are written here.
    - `docdir`: the client's shared document root (videos and files live here).
    """

    workdir: Path
    docdir: Path

    media_timeout_s: float = MEDIA_DOWNLOAD_TIMEOUT_S
    poll_interval_s: float = MEDIA_POLL_INTERVAL_S

    user_agent: str = USER_AGENT
    http_timeout_s: float | None = MEDIA_DOWNLOAD_TIMEOUT_S
    max_keepalive_connections: int = MAX_KEEPALIVE_CONNECTIONS

    def __post_init__(self) -> None:
        self.workdir = Path(self.workdir)
        self.docdir = Path(self.docdir)
        if self.media_timeout_s <= 0:
            raise ValueError("media_timeout_s must be positive")
        if self.poll_interval_s <= 0:
            raise ValueError("poll_interval_s must be positive")

    @property
    def context(self) -> MediaContext:
        return MediaContext(workdir=self.workdir, docdir=self.docdir)


def default_document_dir(home: str | Path | None = None) -> Path:
    """
    The user's documents folder: `~/Documents`, or `~/My Documents` on old
    Windows installs where the former does not exist.
    """

    base = Path(home) if home is not None else Path.home()
    docs = base / "Documents"
    if not docs.exists():
        docs = base / "My Documents"
    return docs


def wechat_files_dir(base: str | Path | None = None) -> Path:
    """
    The desktop client's `WeChat Files` folder under `base`.

    `base` is the client's configured save path when one is known; otherwise
    the default documents folder is used.
    """

    root = Path(base) if base else default_document_dir()
    return root / WECHAT_FILES_DIRNAME
