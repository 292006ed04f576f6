"""
Media acquisition.

The desktop client announces a message before it has finished writing the
media file, so local media is polled for with a deadline instead of being
read once. Stickers are the exception: they are fetched from their CDN URL.
"""

from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from pathlib import Path, PurePosixPath, PureWindowsPath

from .blob import BlobData
from .constants import (
    IMAGE_EXTENSIONS,
    MEDIA_DOWNLOAD_TIMEOUT_S,
    MEDIA_POLL_INTERVAL_S,
    VIDEO_EXTENSION,
    VOICE_EXTENSION,
)
from .exceptions import MediaDownloadError, MediaUnavailableError
from .fetch import RemoteFetcher
from .messages.types import MediaContext, MediaReference, MessageKind
from .util.asyncio import promise_timeout

logger = logging.getLogger(__name__)


def _hint_basename(hint: str) -> str:
    # Hints come from a Windows client; accept either separator.
    return PureWindowsPath(hint).name


def _join_hint(root: Path, hint: str) -> Path:
    rel = PurePosixPath(hint.replace("\\", "/").lstrip("/"))
    return root.joinpath(*rel.parts)


def _strip_ext(path: Path) -> Path:
    return path.with_suffix("") if path.suffix else path


def _dedupe(paths: Sequence[Path]) -> list[Path]:
    out: list[Path] = []
    for p in paths:
        if p not in out:
            out.append(p)
    return out


def candidate_paths(ref: MediaReference, ctx: MediaContext) -> list[Path]:
    """
    Local paths where the media for `ref` may appear, in priority order.

    - image: `<workdir>/<self_id>/<hint name>`, then the same name without its
      extension, then with each of `.png`, `.gif`, `.jpg`
    - voice: `<workdir>/<self_id>/<clientmsgid>.amr`
    - video: `<docdir>/<file_path>`, or the thumbnail path with `.mp4`
    - file: `<docdir>/<file_path>`
    """

    account_dir = ctx.workdir / ref.self_id if ref.self_id else ctx.workdir

    if ref.kind is MessageKind.IMAGE:
        name = _hint_basename(ref.file_path)
        if not name:
            return []
        image = account_dir / name
        base = _strip_ext(image)
        variants = [base.with_name(base.name + ext) for ext in IMAGE_EXTENSIONS]
        return _dedupe([image, base, *variants])

    if ref.kind is MessageKind.VOICE:
        if not ref.content_id:
            return []
        return [account_dir / (ref.content_id + VOICE_EXTENSION)]

    if ref.kind is MessageKind.VIDEO:
        if ref.file_path:
            return [_join_hint(ctx.docdir, ref.file_path)]
        if ref.thumbnail:
            thumb = _strip_ext(_join_hint(ctx.docdir, ref.thumbnail))
            return [thumb.with_name(thumb.name + VIDEO_EXTENSION)]
        return []

    if ref.kind is MessageKind.FILE:
        if not ref.file_path:
            return []
        return [_join_hint(ctx.docdir, ref.file_path)]

    raise ValueError(f"media kind {ref.kind.value!r} is not stored on disk")


def _read_if_ready(path: Path) -> bytes | None:
    if not path.is_file():
        return None
    try:
        return path.read_bytes()
    except OSError:
        # Still being written or locked by the client; try again next round.
        return None


async def _poll(candidates: Sequence[Path], interval_s: float) -> BlobData:
    attempt = 0
    while True:
        attempt += 1
        for path in candidates:
            data = await asyncio.to_thread(_read_if_ready, path)
            if data is not None:
                logger.debug("media ready at %s after %d check(s)", path, attempt)
                return BlobData(name=path.name, binary=data)
        await asyncio.sleep(interval_s)


async def wait_for_file(
    candidates: Sequence[Path],
    *,
    timeout_s: float = MEDIA_DOWNLOAD_TIMEOUT_S,
    interval_s: float = MEDIA_POLL_INTERVAL_S,
) -> BlobData:
    """
    Return the first candidate that exists and can be read.

    Candidates are checked in order every `interval_s`; the blob is named
    after the winning file. Raises `MediaUnavailableError` once `timeout_s`
    has elapsed with nothing found.
    """

    paths = list(candidates)
    if not paths:
        raise MediaUnavailableError(candidates=paths, timeout_s=0.0)
    try:
        return await promise_timeout(timeout_s, _poll(paths, interval_s))
    except asyncio.TimeoutError as e:
        logger.warning("media not available within %.1fs: %s", timeout_s, paths[0])
        raise MediaUnavailableError(candidates=paths, timeout_s=timeout_s) from e


async def fetch_sticker(ref: MediaReference, fetcher: RemoteFetcher) -> BlobData:
    """
    Download a sticker from its CDN URL.

    The blob is named after the sticker's `aeskey` rather than the URL, since
    stickers have no meaningful local file name.
    """

    if not ref.url or not ref.content_id:
        raise MediaDownloadError("sticker reference has no cdn url or key")
    data = await fetcher.fetch(ref.url)
    return BlobData(name=ref.content_id, binary=data)


async def resolve_media(
    ref: MediaReference,
    ctx: MediaContext,
    *,
    fetcher: RemoteFetcher,
    timeout_s: float = MEDIA_DOWNLOAD_TIMEOUT_S,
    interval_s: float = MEDIA_POLL_INTERVAL_S,
) -> BlobData:
    """
    Turn a media reference into bytes.

    Raises `MediaUnavailableError` when local media never appears and
    `MediaDownloadError` when a remote fetch fails.
    """

    if ref.kind is MessageKind.STICKER:
        return await fetch_sticker(ref, fetcher)
    return await wait_for_file(
        candidate_paths(ref, ctx), timeout_s=timeout_s, interval_s=interval_s
    )
