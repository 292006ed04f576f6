from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Coroutine
from typing import Any, TypeVar

T = TypeVar("T")


async def promise_timeout(timeout_s: float, coro: Awaitable[T]) -> T:
    return await asyncio.wait_for(coro, timeout=timeout_s)


def ensure_task(coro: Coroutine[Any, Any, T], *, name: str | None = None) -> asyncio.Task[T]:
    return asyncio.create_task(coro, name=name)
