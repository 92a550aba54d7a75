# In-memory association between relayed messages and their remote copies
import asyncio
import time
from typing import Callable, Dict, Mapping, Optional


class MessageMap:
    """Maps a source message id to ``{destination channel id: remote message id}``.

    Entries are only written once a create fan-out has settled. Edit and delete
    handlers call :meth:`wait_settled` first so they never observe a message
    whose copies are still being sent.

    When ``ttl_seconds`` is set, entries older than that are dropped on the
    next insert.
    """

    def __init__(self, ttl_seconds: Optional[float] = None, clock: Callable[[], float] = time.monotonic):
        self.ttl_seconds = ttl_seconds if ttl_seconds and ttl_seconds > 0 else None
        self._clock = clock
        self._entries: Dict[int, Dict[int, int]] = {}
        self._recorded_at: Dict[int, float] = {}
        self._pending: Dict[int, asyncio.Event] = {}

    def __contains__(self, source_id: int) -> bool:
        return source_id in self._entries

    def __len__(self) -> int:
        return len(self._entries)

    def begin(self, source_id: int) -> None:
        if source_id not in self._pending:
            self._pending[source_id] = asyncio.Event()

    def settle(self, source_id: int) -> None:
        event = self._pending.pop(source_id, None)
        if event is not None:
            event.set()

    async def wait_settled(self, source_id: int) -> None:
        event = self._pending.get(source_id)
        if event is not None:
            await event.wait()

    def record(self, source_id: int, copies: Mapping[int, int]) -> None:
        if not copies:
            return
        now = self._clock()
        self.prune(now)
        self._entries[source_id] = dict(copies)
        self._recorded_at[source_id] = now

    def get(self, source_id: int) -> Optional[Dict[int, int]]:
        copies = self._entries.get(source_id)
        if copies is None:
            return None
        return dict(copies)

    def discard(self, source_id: int) -> Optional[Dict[int, int]]:
        self._recorded_at.pop(source_id, None)
        return self._entries.pop(source_id, None)

    def prune(self, now: Optional[float] = None) -> int:
        if self.ttl_seconds is None or not self._recorded_at:
            return 0
        now = self._clock() if now is None else now
        stale_ids = [
            source_id for source_id, recorded_at in self._recorded_at.items()
            if now - recorded_at > self.ttl_seconds
        ]
        for source_id in stale_ids:
            self.discard(source_id)
        return len(stale_ids)
