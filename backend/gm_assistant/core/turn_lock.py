"""Per-NPC turn locks - serialize chat turns so concurrent turns can't lose updates.

A turn reads the NPC's memory, waits on the LLM, then rewrites the whole
chat state. Two overlapping turns for the same NPC would otherwise both
start from the same memory and the later save would drop the other turn.
"""

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager
from dataclasses import dataclass

import redis.asyncio as aioredis
import structlog
from redis.exceptions import LockError

from gm_assistant.config import settings
from gm_assistant.core.errors import TurnInProgressError

logger = structlog.get_logger(__name__)


@dataclass
class _Slot:
    lock: asyncio.Lock
    users: int = 0


class LocalTurnLocks:
    """In-process locks keyed by NPC id. Enough for a single worker."""

    def __init__(self):
        self._slots: dict[str, _Slot] = {}

    def is_locked(self, npc_id: str) -> bool:
        slot = self._slots.get(npc_id)
        return slot is not None and slot.lock.locked()

    @asynccontextmanager
    async def hold(self, npc_id: str) -> AsyncIterator[None]:
        slot = self._slots.get(npc_id)
        if slot is None:
            slot = self._slots[npc_id] = _Slot(asyncio.Lock())
        slot.users += 1
        try:
            async with slot.lock:
                yield
        finally:
            slot.users -= 1
            if slot.users == 0:
                del self._slots[npc_id]


class RedisTurnLocks:
    """Redis locks keyed by NPC id, for several workers sharing one database."""

    def __init__(self, redis: aioredis.Redis, timeout: float, wait: float):
        self.redis = redis
        self.timeout = timeout
        self.wait = wait

    def _lock_key(self, npc_id: str) -> str:
        return f"npc:turn:{npc_id}"

    @asynccontextmanager
    async def hold(self, npc_id: str) -> AsyncIterator[None]:
        lock = self.redis.lock(
            self._lock_key(npc_id), timeout=self.timeout, blocking_timeout=self.wait
        )
        if not await lock.acquire():
            raise TurnInProgressError(npc_id)
        try:
            yield
        finally:
            try:
                await lock.release()
            except LockError:
                # Lease ran out before the turn finished; another worker may own it now.
                logger.warning("turn_lock_expired", npc_id=npc_id, timeout=self.timeout)


def build_turn_locks() -> LocalTurnLocks | RedisTurnLocks:
    """Pick the lock backend from settings."""
    if settings.TURN_LOCK_BACKEND == "redis":
        from gm_assistant.db.redis import get_redis_client

        return RedisTurnLocks(
            get_redis_client(), settings.TURN_LOCK_TIMEOUT, settings.TURN_LOCK_WAIT
        )
    return LocalTurnLocks()
