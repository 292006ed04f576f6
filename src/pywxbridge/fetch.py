from __future__ import annotations

import logging
from types import TracebackType

import httpx

from .constants import MAX_KEEPALIVE_CONNECTIONS, MEDIA_DOWNLOAD_TIMEOUT_S, USER_AGENT
from .exceptions import MediaDownloadError

logger = logging.getLogger(__name__)


def build_http_client(
    *,
    user_agent: str = USER_AGENT,
    max_keepalive_connections: int = MAX_KEEPALIVE_CONNECTIONS,
    timeout_s: float | None = MEDIA_DOWNLOAD_TIMEOUT_S,
    transport: httpx.AsyncBaseTransport | None = None,
) -> httpx.AsyncClient:
    """
    The shared client used for every remote media request.

    Built once per process so idle connections are reused. Total connections
    are unbounded; only the idle pool is capped.
    """

    return httpx.AsyncClient(
        headers={"User-Agent": user_agent, "Accept-Encoding": "gzip"},
        limits=httpx.Limits(
            max_connections=None, max_keepalive_connections=max_keepalive_connections
        ),
        timeout=timeout_s,
        follow_redirects=True,
        transport=transport,
    )


class RemoteFetcher:
    """
    Single-shot HTTP GET for media hosted remotely (stickers).

    No retries: a transport failure is terminal for that acquisition. A gzip
    `Content-Encoding` is decoded transparently. Status codes are not
    inspected, an error page body is returned like any other body.
    """

    def __init__(
        self,
        client: httpx.AsyncClient | None = None,
        *,
        user_agent: str = USER_AGENT,
        max_keepalive_connections: int = MAX_KEEPALIVE_CONNECTIONS,
        timeout_s: float | None = MEDIA_DOWNLOAD_TIMEOUT_S,
    ) -> None:
        # The options only shape a client built here; a passed-in client is used as is.
        self._owns_client = client is None
        self._client = client or build_http_client(
            user_agent=user_agent,
            max_keepalive_connections=max_keepalive_connections,
            timeout_s=timeout_s,
        )

    @property
    def client(self) -> httpx.AsyncClient:
        return self._client

    async def fetch(self, url: str) -> bytes:
        logger.debug("GET %s", url)
        try:
            resp = await self._client.get(url)
        except (httpx.HTTPError, httpx.InvalidURL) as e:
            logger.warning("remote media fetch failed for %s: %s", url, e)
            raise MediaDownloadError(str(e) or type(e).__name__) from e
        return resp.content

    async def aclose(self) -> None:
        if self._owns_client:
            await self._client.aclose()

    async def __aenter__(self) -> RemoteFetcher:
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.aclose()
