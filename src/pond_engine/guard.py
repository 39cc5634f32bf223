"""Per-pond mutual exclusion plus a re-entrancy check.

The lock serializes concurrent requests against the same pond. The context
variable records which keys the current task already holds, so a nested call
from inside a custody callback fails fast with ReentrantCallError instead of
deadlocking on its own lock.
"""

import asyncio
from collections import defaultdict
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from contextvars import ContextVar

from src.pond_common.errors import ReentrantCallError

_held: ContextVar[frozenset[str]] = ContextVar("pond_guard_held", default=frozenset())


class PondGuard:
    def __init__(self) -> None:
        self._locks: dict[str, asyncio.Lock] = defaultdict(asyncio.Lock)

    def is_held(self, key: str) -> bool:
        return key in _held.get()

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        held = _held.get()
        if key in held:
            raise ReentrantCallError(key)
        async with self._locks[key]:
            token = _held.set(held | {key})
            try:
                yield
            finally:
                _held.reset(token)
