from __future__ import annotations

import asyncio
import logging
from collections.abc import Sequence
from types import TracebackType

from .blob import BlobData, persist_blob
from .config import BridgeConfig
from .exceptions import MediaDownloadError, MediaUnavailableError
from .fetch import RemoteFetcher
from .media import resolve_media
from .messages import (
    MEDIA_KINDS,
    ExtractedRecord,
    MediaReference,
    MessageKind,
    RawPayload,
    extract_record,
)
from .util.asyncio import ensure_task

logger = logging.getLogger(__name__)


class WeChatBridge:
    """
    High-level async facade.

    Normalizes raw payloads into records and acquires their media. Owns the
    process-scoped HTTP client unless a fetcher is passed in.
    """

    def __init__(self, config: BridgeConfig, *, fetcher: RemoteFetcher | None = None) -> None:
        self.config = config
        self._owns_fetcher = fetcher is None
        self.fetcher = fetcher or RemoteFetcher(
            user_agent=config.user_agent,
            max_keepalive_connections=config.max_keepalive_connections,
            timeout_s=config.http_timeout_s,
        )

    async def aclose(self) -> None:
        if self._owns_fetcher:
            await self.fetcher.aclose()

    async def __aenter__(self) -> WeChatBridge:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()

    def normalize(self, kind: MessageKind | str, payload: RawPayload) -> ExtractedRecord | None:
        record = extract_record(kind, self.config.context, payload)
        if record is None:
            logger.debug("no %s record in payload", MessageKind(kind).value)
        return record

    def media_reference(
        self, kind: MessageKind | str, payload: RawPayload
    ) -> MediaReference | None:
        kind = MessageKind(kind)
        if kind not in MEDIA_KINDS:
            raise ValueError(f"not a media kind: {kind.value!r}")
        record = self.normalize(kind, payload)
        return record if isinstance(record, MediaReference) else None

    async def download_media(self, ref: MediaReference) -> BlobData:
        """
        Resolve one reference to bytes.

        Raises `MediaUnavailableError` (file never appeared) or
        `MediaDownloadError` (remote fetch failed).
        """

        return await resolve_media(
            ref,
            self.config.context,
            fetcher=self.fetcher,
            timeout_s=self.config.media_timeout_s,
            interval_s=self.config.poll_interval_s,
        )

    async def download_many(self, refs: Sequence[MediaReference]) -> list[BlobData | None]:
        """
        Resolve several references concurrently, each with its own deadline.

        A failed acquisition yields `None` in its slot; the others are
        unaffected.
        """

        tasks = [
            ensure_task(self.download_media(ref), name=f"media-{i}-{ref.kind.value}")
            for i, ref in enumerate(refs)
        ]
        results = await asyncio.gather(*tasks, return_exceptions=True)

        out: list[BlobData | None] = []
        for ref, res in zip(refs, results):
            if isinstance(res, (MediaUnavailableError, MediaDownloadError)):
                logger.info("media for %s message unavailable: %s", ref.kind.value, res)
                out.append(None)
            elif isinstance(res, BaseException):
                raise res
            else:
                out.append(res)
        return out

    async def save_blob(self, raw: str | bytes) -> str:
        """Persist an inbound blob document; returns its path or `""`."""

        return await asyncio.to_thread(persist_blob, self.config.workdir, raw)
