# scrapgo/repos/jsonfile.py
import asyncio
import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Union

import anyio

from scrapgo.models.identity import Identity
from scrapgo.models.pickup import from_document, to_document
from scrapgo.repos.inmemory import InMemoryRepo

logger = logging.getLogger(__name__)

def _write_atomic(path: Path, payload: dict):
    path.parent.mkdir(parents=True, exist_ok=True)
    fd, tmp = tempfile.mkstemp(dir=path.parent, prefix=".scrapgo-", suffix=".json")
    try:
        with os.fdopen(fd, "w", encoding="utf-8") as fh:
            json.dump(payload, fh, indent=2)
        os.replace(tmp, path)
    except BaseException:
        os.unlink(tmp)
        raise

class JsonFileRepo(InMemoryRepo):
    """Single-device durable store: the in-memory maps, flushed to one JSON file after every write.

    Layout: ``{"pickups": [<pickup>, ...], "sessions": {<sid>: <identity>}}`` with pickups
    in insertion order. The whole file is rewritten on each change (in a worker
    thread), which suits one device's worth of pickups; use the mongo backend
    for a shared server.
    """

    def __init__(self, path: Union[str, Path]):
        super().__init__()
        self.path = Path(path)
        self._opened = False

    async def open(self):
        if self.path.exists():
            text = await anyio.to_thread.run_sync(self.path.read_text, "utf-8")
            raw = json.loads(text or "{}")
            for doc in raw.get("pickups", []):
                pickup = from_document(doc)
                self.pickups[pickup.id] = pickup
                self._locks[pickup.id] = asyncio.Lock()
            for sid, doc in (raw.get("sessions") or {}).items():
                self.sessions[sid] = Identity.model_validate(doc)
            logger.info("loaded %d pickups from %s", len(self.pickups), self.path)
        self._opened = True

    async def close(self):
        self._opened = False

    def _check_open(self):
        if not self._opened:
            raise RuntimeError(f"{type(self).__name__} used before open()")

    async def _persist(self):
        # runs under the commit lock, so snapshots are written in order
        self._check_open()
        payload = {
            "pickups": [to_document(p) for p in self.pickups.values()],
            "sessions": {sid: ident.model_dump(mode="json") for sid, ident in self.sessions.items()},
        }
        await anyio.to_thread.run_sync(_write_atomic, self.path, payload)
