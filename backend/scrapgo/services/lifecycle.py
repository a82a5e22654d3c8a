# scrapgo/services/lifecycle.py
"""Pickup lifecycle: the only code allowed to move a pickup between statuses.

    pending --accept--> accepted --start(code)--> in-process
            --submit_items--> pending-approval --approve--> completed

Every transition is checked in the same order: the record exists, the actor's
role may drive the edge, the record sits at the edge's source status, the actor
is the record's own party, then the operation's own guard (code, items).
"""
import hmac
import logging
import secrets
import uuid
from decimal import Decimal, InvalidOperation
from typing import Callable, Iterable, Optional

from pydantic import ValidationError

from scrapgo.core.errors import EngineError, Result
from scrapgo.core.states import PickupStatus, role_allowed
from scrapgo.models.identity import Identity
from scrapgo.models.pickup import PickupBase, PickupDraft, PickupItem, StatusEvent, advance
from scrapgo.repos.inmemory import utcnow

logger = logging.getLogger(__name__)

CENT = Decimal("0.01")

# edge target -> edge source
SOURCE = {
    PickupStatus.ACCEPTED: PickupStatus.PENDING,
    PickupStatus.IN_PROCESS: PickupStatus.ACCEPTED,
    PickupStatus.PENDING_APPROVAL: PickupStatus.IN_PROCESS,
    PickupStatus.COMPLETED: PickupStatus.PENDING_APPROVAL,
}


def generate_pickup_code() -> str:
    return str(secrets.randbelow(900000) + 100000)


def _blank(value: Optional[str]) -> bool:
    return value is None or not str(value).strip()


def _money(value) -> Decimal:
    amount = value if isinstance(value, Decimal) else Decimal(str(value))
    if not amount.is_finite():
        raise InvalidOperation(f"non-finite amount {value!r}")
    if amount != amount.quantize(CENT):
        raise InvalidOperation(f"amount {value!r} has fractions of a cent")
    return amount


def _party(pickup: PickupBase, to_status: PickupStatus) -> Optional[str]:
    if to_status == PickupStatus.COMPLETED:
        return pickup.customer_id
    return getattr(pickup, "partner_id", None)


class PickupLifecycle:
    def __init__(self, repo, code_factory: Callable[[], str] = generate_pickup_code):
        self.repo = repo
        self.code_factory = code_factory

    async def create(self, actor: Identity, *, address: str, pickup_date: str, time_slot: str,
                     customer_name: Optional[str] = None, customer_phone: Optional[str] = None,
                     map_link: Optional[str] = None) -> Result:
        if actor.role != "customer":
            return Result.failure(EngineError.UNAUTHORIZED, "only customers schedule pickups")
        missing = [name for name, value in (("address", address), ("pickup_date", pickup_date),
                                            ("time_slot", time_slot)) if _blank(value)]
        if missing:
            return Result.failure(EngineError.INVALID_INPUT, f"required: {', '.join(missing)}")

        draft = PickupDraft(
            customer_id=actor.id,
            customer_name=customer_name or actor.name or "",
            customer_phone=customer_phone or actor.phone,
            address=address.strip(),
            map_link=map_link or None,
            pickup_date=pickup_date.strip(),
            time_slot=time_slot.strip(),
        )
        pickup_id = await self.repo.insert(draft)
        logger.info("pickup %s created by %s for %s %s", pickup_id, actor.id, draft.pickup_date, draft.time_slot)
        return Result.success(await self.repo.get(pickup_id))

    async def get(self, pickup_id: str) -> Result:
        pickup = await self.repo.get(pickup_id)
        if pickup is None:
            return Result.failure(EngineError.NOT_FOUND, f"pickup {pickup_id} not found")
        return Result.success(pickup)

    async def accept(self, pickup_id: str, actor: Identity, partner_name: Optional[str] = None) -> Result:
        code = self.code_factory()

        def apply(pickup):
            return Result.success({
                "partner_id": actor.id,
                "partner_name": partner_name or actor.name or "",
                "pickup_code": code,
            })

        return await self._transition(pickup_id, actor, PickupStatus.ACCEPTED, apply)

    async def start(self, pickup_id: str, actor: Identity, code: str) -> Result:
        def apply(pickup):
            if not hmac.compare_digest(str(code).encode(), pickup.pickup_code.encode()):
                return Result.failure(EngineError.CODE_MISMATCH, "pickup code does not match")
            return Result.success({})

        return await self._transition(pickup_id, actor, PickupStatus.IN_PROCESS, apply)

    async def submit_items(self, pickup_id: str, actor: Identity, items: Iterable, total_amount) -> Result:
        def apply(pickup):
            return self._price(items, total_amount)

        return await self._transition(pickup_id, actor, PickupStatus.PENDING_APPROVAL, apply)

    async def approve(self, pickup_id: str, actor: Identity) -> Result:
        return await self._transition(pickup_id, actor, PickupStatus.COMPLETED, lambda pickup: Result.success({}))

    def _price(self, items: Iterable, total_amount) -> Result:
        parsed = []
        try:
            for raw in items or ():
                data = raw.model_dump() if hasattr(raw, "model_dump") else dict(raw)
                if not data.get("id"):
                    data["id"] = f"item_{uuid.uuid4().hex[:12]}"
                parsed.append(PickupItem.model_validate(data))
            total = _money(total_amount)
            for i in parsed:
                _money(i.price)
            computed = sum((i.line_total for i in parsed), Decimal("0"))
        except (ValidationError, InvalidOperation, TypeError, ValueError) as ex:
            return Result.failure(EngineError.INVALID_INPUT, f"malformed items: {ex}")

        if not parsed:
            return Result.failure(EngineError.INVALID_INPUT, "at least one item is required")
        if any(i.quantity <= 0 or i.price < 0 for i in parsed):
            return Result.failure(EngineError.INVALID_INPUT, "quantity must be positive and price non-negative")
        if any(_blank(i.name) for i in parsed):
            return Result.failure(EngineError.INVALID_INPUT, "every item needs a name")
        if total != computed:
            return Result.failure(EngineError.INVALID_INPUT, f"total {total} does not match items sum {computed}")
        return Result.success({"items": tuple(parsed), "total_amount": computed})

    async def _transition(self, pickup_id: str, actor: Identity, to_status: PickupStatus,
                          apply: Callable[[PickupBase], Result]) -> Result:
        src = SOURCE[to_status]

        def mutator(pickup: PickupBase) -> Result:
            if not role_allowed(src, to_status, actor.role):
                return Result.failure(EngineError.UNAUTHORIZED, f"{actor.role} cannot move {src.value} -> {to_status.value}")
            if pickup.state != src:
                return Result.failure(EngineError.INVALID_TRANSITION,
                                      f"pickup is {pickup.state.value}, expected {src.value}")
            if to_status != PickupStatus.ACCEPTED and _party(pickup, to_status) != actor.id:
                return Result.failure(EngineError.UNAUTHORIZED, "actor is not a party to this pickup")
            res = apply(pickup)
            if not res.ok:
                return res
            event = StatusEvent(at=utcnow(), by_user=actor.id, from_status=src, to_status=to_status)
            return Result.success(advance(pickup, to_status, history=pickup.history + (event,), **res.value))

        res = await self.repo.update(pickup_id, mutator)
        if res.ok:
            logger.info("pickup %s %s -> %s by %s", pickup_id, src.value, to_status.value, actor.id)
        else:
            logger.info("pickup %s -> %s rejected for %s: %s", pickup_id, to_status.value, actor.id, res.error.value)
        return res
