from fastapi import APIRouter, Depends

from scrapgo.core.guards import ensure_can_view, ensure_ok
from scrapgo.core.policy import has_scope
from scrapgo.deps import get_current_identity, get_lifecycle
from scrapgo.models.identity import Identity
from scrapgo.models.pickup import to_document
from scrapgo.models.schemas import AcceptIn, ItemsIn, PickupCreate, StartIn
from scrapgo.services.lifecycle import PickupLifecycle

router = APIRouter(prefix="/pickups", tags=["pickups"])

def present(pickup, viewer: Identity) -> dict:
    """Serialize a pickup for ``viewer``; the code is only shown to the side that hands it over."""
    doc = to_document(pickup)
    if "pickup_code" in doc and not has_scope(viewer.role, "pickups:view_code"):
        doc.pop("pickup_code")
    return doc

@router.post("/", status_code=201)
async def create_pickup(data: PickupCreate, identity: Identity = Depends(get_current_identity),
                        lifecycle: PickupLifecycle = Depends(get_lifecycle)):
    pickup = ensure_ok(await lifecycle.create(
        identity,
        address=data.address,
        pickup_date=data.pickup_date,
        time_slot=data.time_slot,
        customer_name=data.customer_name,
        customer_phone=data.customer_phone,
        map_link=data.map_link,
    ))
    return present(pickup, identity)

@router.get("/{pickup_id}")
async def get_pickup(pickup_id: str, identity: Identity = Depends(get_current_identity),
                     lifecycle: PickupLifecycle = Depends(get_lifecycle)):
    pickup = ensure_ok(await lifecycle.get(pickup_id))
    ensure_can_view(pickup, identity)
    return present(pickup, identity)

@router.post("/{pickup_id}/accept")
async def accept_pickup(pickup_id: str, body: AcceptIn | None = None,
                        identity: Identity = Depends(get_current_identity),
                        lifecycle: PickupLifecycle = Depends(get_lifecycle)):
    partner_name = body.partner_name if body else None
    pickup = ensure_ok(await lifecycle.accept(pickup_id, identity, partner_name))
    return present(pickup, identity)

@router.post("/{pickup_id}/start")
async def start_pickup(pickup_id: str, body: StartIn, identity: Identity = Depends(get_current_identity),
                       lifecycle: PickupLifecycle = Depends(get_lifecycle)):
    pickup = ensure_ok(await lifecycle.start(pickup_id, identity, body.code))
    return present(pickup, identity)

@router.post("/{pickup_id}/items")
async def submit_items(pickup_id: str, body: ItemsIn, identity: Identity = Depends(get_current_identity),
                       lifecycle: PickupLifecycle = Depends(get_lifecycle)):
    pickup = ensure_ok(await lifecycle.submit_items(pickup_id, identity, body.items, body.total_amount))
    return present(pickup, identity)

@router.post("/{pickup_id}/approve")
async def approve_pickup(pickup_id: str, identity: Identity = Depends(get_current_identity),
                         lifecycle: PickupLifecycle = Depends(get_lifecycle)):
    pickup = ensure_ok(await lifecycle.approve(pickup_id, identity))
    return present(pickup, identity)
