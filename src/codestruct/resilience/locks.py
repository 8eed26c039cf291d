"""Per-key mutual exclusion for read-modify-write sequences.

KeyedLock serializes operations that share a key (e.g. the
delete-then-insert of a project's file set) while letting
operations on different keys run concurrently.

Single-process only: each worker has its own instance.
"""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass, field


@dataclass
class _Entry:
    lock: asyncio.Lock = field(default_factory=asyncio.Lock)
    holders: int = 0


class KeyedLock:
    """Hands out one asyncio.Lock per key, dropping idle keys.

    Usage::

        locks = KeyedLock()
        async with locks.hold("project:abc"):
            ...
    """

    def __init__(self) -> None:
        self._entries: dict[str, _Entry] = {}
        self._guard = asyncio.Lock()

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        async with self._guard:
            entry = self._entries.get(key)
            if entry is None:
                entry = _Entry()
                self._entries[key] = entry
            entry.holders += 1
        try:
            async with entry.lock:
                yield
        finally:
            async with self._guard:
                entry.holders -= 1
                if entry.holders == 0:
                    self._entries.pop(key, None)

