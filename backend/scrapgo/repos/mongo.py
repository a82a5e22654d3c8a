# scrapgo/repos/mongo.py
import logging
import uuid
from typing import List, Optional

from motor.motor_asyncio import AsyncIOMotorClient
from pymongo import ASCENDING, ReturnDocument

from scrapgo.core.errors import EngineError, Result
from scrapgo.core.states import PickupStatus
from scrapgo.models.identity import Identity
from scrapgo.models.pickup import PendingPickup, PickupBase, PickupDraft, StatusEvent, from_document, to_document
from scrapgo.repos.inmemory import Mutator, utcnow

logger = logging.getLogger(__name__)

MAX_CAS_RETRIES = 20

class MongoRepo:
    """Pickup store backed by MongoDB.

    Updates are optimistic: a write only lands if ``version`` still matches what
    the mutator saw, otherwise the record is re-read and the mutator runs again
    against the fresh state.
    """

    def __init__(self, uri: str, db_name: str, client: Optional[AsyncIOMotorClient] = None):
        self.uri = uri
        self.db_name = db_name
        self._client = client
        self._owns_client = client is None
        self._db = None

    async def open(self):
        if self._client is None:
            self._client = AsyncIOMotorClient(self.uri, uuidRepresentation="standard")
        self._db = self._client[self.db_name]
        # no-op when the index already exists
        await self._db.pickups.create_index([("seq", ASCENDING)], name="seq_1")

    async def close(self):
        # an injected client belongs to the caller
        if self._owns_client and self._client is not None:
            self._client.close()
            self._client = None
        self._db = None

    @property
    def db(self):
        if self._db is None:
            raise RuntimeError("MongoRepo used before open()")
        return self._db

    # Pickups
    async def insert(self, draft: PickupDraft) -> str:
        pid = f"pickup_{uuid.uuid4().hex}"
        now = utcnow()
        pickup = PendingPickup(
            **draft.model_dump(),
            id=pid,
            created_at=now,
            updated_at=now,
            history=(StatusEvent(at=now, by_user=draft.customer_id, to_status=PickupStatus.PENDING),),
        )
        doc = to_document(pickup)
        doc["_id"] = doc.pop("id")
        doc["seq"] = await self._next_seq()
        await self.db.pickups.insert_one(doc)
        return pid

    async def get(self, pickup_id: str) -> Optional[PickupBase]:
        doc = await self.db.pickups.find_one({"_id": pickup_id}, {"seq": 0})
        return from_document(doc) if doc else None

    async def list_all(self) -> List[PickupBase]:
        cur = self.db.pickups.find({}, {"seq": 0}).sort("seq", ASCENDING)
        return [from_document(d) async for d in cur]

    async def update(self, pickup_id: str, mutator: Mutator) -> Result:
        for _ in range(MAX_CAS_RETRIES):
            current = await self.get(pickup_id)
            if current is None:
                return Result.failure(EngineError.NOT_FOUND, f"pickup {pickup_id} not found")
            res = mutator(current)
            if not res.ok:
                return res
            stored = res.value.model_copy(update={"updated_at": utcnow(), "version": current.version + 1})
            doc = to_document(stored)
            doc.pop("id")
            write = await self.db.pickups.update_one(
                {"_id": pickup_id, "version": current.version},
                {"$set": doc},
            )
            if write.modified_count == 1:
                return Result.success(stored)
            logger.info("version conflict on pickup %s at v%d, retrying", pickup_id, current.version)
        raise RuntimeError(f"pickup {pickup_id} kept changing underneath {MAX_CAS_RETRIES} update attempts")

    async def _next_seq(self) -> int:
        counter = await self.db.counters.find_one_and_update(
            {"_id": "pickups"}, {"$inc": {"n": 1}}, upsert=True, return_document=ReturnDocument.AFTER
        )
        return counter["n"]

    # Sessions
    async def save_session(self, session_id: str, identity: Identity):
        doc = identity.model_dump(mode="json")
        await self.db.sessions.replace_one({"_id": session_id}, {"_id": session_id, **doc}, upsert=True)

    async def load_session(self, session_id: str) -> Optional[Identity]:
        doc = await self.db.sessions.find_one({"_id": session_id})
        if not doc:
            return None
        doc.pop("_id")
        return Identity.model_validate(doc)

    async def delete_session(self, session_id: str):
        await self.db.sessions.delete_one({"_id": session_id})
