"""
Per-patient locks.
"""

import asyncio
from contextlib import asynccontextmanager
from typing import AsyncIterator, Dict


class _Entry:
    __slots__ = ("lock", "users")

    def __init__(self):
        self.lock = asyncio.Lock()
        self.users = 0


class PatientLockRegistry:
    """Serialize work per patient while letting different patients run in parallel.

    Entries are reference-counted and removed once no task holds or waits
    on them.
    """

    def __init__(self):
        self._entries: Dict[str, _Entry] = {}

    @asynccontextmanager
    async def hold(self, key: str) -> AsyncIterator[None]:
        entry = self._entries.get(key)
        if entry is None:
            entry = self._entries[key] = _Entry()
        entry.users += 1
        try:
            async with entry.lock:
                yield
        finally:
            entry.users -= 1
            if entry.users == 0:
                self._entries.pop(key, None)

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        return key in self._entries
