from datetime import datetime
from decimal import Decimal
from typing import Annotated, Literal, Optional, Tuple, Union

from pydantic import BaseModel, ConfigDict, Field, TypeAdapter

from scrapgo.core.states import PickupStatus

# --------------------------
# Submodels
# --------------------------
class PickupItem(BaseModel):
    model_config = ConfigDict(frozen=True)

    id: str
    name: str
    quantity: int
    price: Decimal

    @property
    def line_total(self) -> Decimal:
        return self.quantity * self.price

class StatusEvent(BaseModel):
    model_config = ConfigDict(frozen=True)

    at: datetime
    by_user: str
    from_status: Optional[PickupStatus] = None
    to_status: PickupStatus

class PickupDraft(BaseModel):
    """What a customer supplies when scheduling; the store fills in the rest."""
    customer_id: str
    customer_name: str
    customer_phone: str
    address: str
    map_link: Optional[str] = None
    pickup_date: str
    time_slot: str

# --------------------------
# Pickup variants, one per status
# --------------------------
class PickupBase(PickupDraft):
    model_config = ConfigDict(frozen=True)

    id: str
    version: int = 1
    history: Tuple[StatusEvent, ...] = ()
    created_at: datetime
    updated_at: datetime

    @property
    def state(self) -> PickupStatus:
        return PickupStatus(self.status)

class PendingPickup(PickupBase):
    status: Literal["pending"] = "pending"

class AssignedPickup(PickupBase):
    partner_id: str
    partner_name: str
    pickup_code: str

class AcceptedPickup(AssignedPickup):
    status: Literal["accepted"] = "accepted"

class InProcessPickup(AssignedPickup):
    status: Literal["in-process"] = "in-process"

class PricedPickup(AssignedPickup):
    items: Tuple[PickupItem, ...]
    total_amount: Decimal

class PendingApprovalPickup(PricedPickup):
    status: Literal["pending-approval"] = "pending-approval"

class CompletedPickup(PricedPickup):
    status: Literal["completed"] = "completed"

Pickup = Annotated[
    Union[PendingPickup, AcceptedPickup, InProcessPickup, PendingApprovalPickup, CompletedPickup],
    Field(discriminator="status"),
]

pickup_adapter = TypeAdapter(Pickup)

VARIANTS = {
    PickupStatus.PENDING: PendingPickup,
    PickupStatus.ACCEPTED: AcceptedPickup,
    PickupStatus.IN_PROCESS: InProcessPickup,
    PickupStatus.PENDING_APPROVAL: PendingApprovalPickup,
    PickupStatus.COMPLETED: CompletedPickup,
}

def advance(pickup: PickupBase, to_status: PickupStatus, **fields) -> PickupBase:
    """Build the next-status variant of ``pickup`` carrying over every field it already has."""
    data = pickup.model_dump(exclude={"status"})
    data.update(fields)
    return VARIANTS[to_status](**data)

def to_document(pickup: PickupBase) -> dict:
    return pickup.model_dump(mode="json")

def from_document(doc: dict) -> PickupBase:
    doc = dict(doc)
    if "_id" in doc:
        doc["id"] = doc.pop("_id")
    return pickup_adapter.validate_python(doc)
