# scrapgo/repos/inmemory.py
import asyncio
import logging
import uuid
from datetime import datetime, timezone
from typing import Callable, Dict, List, Optional

from scrapgo.core.errors import EngineError, Result
from scrapgo.core.states import PickupStatus
from scrapgo.models.identity import Identity
from scrapgo.models.pickup import PendingPickup, PickupBase, PickupDraft, StatusEvent

logger = logging.getLogger(__name__)

Mutator = Callable[[PickupBase], Result]

_MISSING = object()

def _id() -> str:
    return f"pickup_{uuid.uuid4().hex}"

def utcnow() -> datetime:
    return datetime.now(timezone.utc)

class InMemoryRepo:
    """Pickup store kept in process memory.

    ``update`` is the only mutation path for existing pickups. It holds a
    per-pickup lock across read, mutate and write so two transitions on the
    same id never interleave. Every write goes through ``_commit``: if
    ``_persist`` fails the previous value is put back before the error
    propagates, so memory never runs ahead of what was persisted.
    """

    def __init__(self):
        self.pickups: Dict[str, PickupBase] = {}
        self.sessions: Dict[str, Identity] = {}
        # one lock per stored pickup, created with the record
        self._locks: Dict[str, asyncio.Lock] = {}
        self._commit_lock = asyncio.Lock()

    async def open(self):
        return None

    async def close(self):
        return None

    # Pickups
    async def insert(self, draft: PickupDraft) -> str:
        self._check_open()
        pid = _id()
        now = utcnow()
        pickup = PendingPickup(
            **draft.model_dump(),
            id=pid,
            created_at=now,
            updated_at=now,
            history=(StatusEvent(at=now, by_user=draft.customer_id, to_status=PickupStatus.PENDING),),
        )
        await self._commit(self.pickups, pid, pickup)
        self._locks[pid] = asyncio.Lock()
        logger.debug("inserted pickup %s for customer %s", pid, draft.customer_id)
        return pid

    async def get(self, pickup_id: str) -> Optional[PickupBase]:
        self._check_open()
        return self.pickups.get(pickup_id)

    async def list_all(self) -> List[PickupBase]:
        self._check_open()
        # dicts keep insertion order
        return list(self.pickups.values())

    async def update(self, pickup_id: str, mutator: Mutator) -> Result:
        self._check_open()
        lock = self._locks.get(pickup_id)
        if lock is None:
            return Result.failure(EngineError.NOT_FOUND, f"pickup {pickup_id} not found")
        async with lock:
            current = self.pickups[pickup_id]
            res = mutator(current)
            if not res.ok:
                return res
            stored = res.value.model_copy(update={"updated_at": utcnow(), "version": current.version + 1})
            await self._commit(self.pickups, pickup_id, stored)
            return Result.success(stored)

    # Sessions
    async def save_session(self, session_id: str, identity: Identity):
        self._check_open()
        await self._commit(self.sessions, session_id, identity)

    async def load_session(self, session_id: str) -> Optional[Identity]:
        self._check_open()
        return self.sessions.get(session_id)

    async def delete_session(self, session_id: str):
        self._check_open()
        if session_id in self.sessions:
            await self._commit(self.sessions, session_id, None)

    async def _commit(self, table: dict, key: str, value):
        """Set (or, for ``None``, drop) ``table[key]`` and persist; undo the change if persisting fails."""
        async with self._commit_lock:
            previous = table.get(key, _MISSING)
            if value is None:
                table.pop(key, None)
            else:
                table[key] = value
            try:
                await self._persist()
            except Exception:
                if previous is _MISSING:
                    table.pop(key, None)
                else:
                    table[key] = previous
                raise

    def _check_open(self):
        return None

    async def _persist(self):
        """Hook for durable subclasses; memory needs nothing."""
        return None
