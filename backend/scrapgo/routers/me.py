from fastapi import APIRouter, Depends

from scrapgo.core.guards import ensure_role
from scrapgo.deps import get_current_identity, get_views
from scrapgo.models.identity import Identity
from scrapgo.models.schemas import DashboardCounts
from scrapgo.routers.pickups import present
from scrapgo.services.views import ReadViews

router = APIRouter(prefix="/me", tags=["me"])

@router.get("/pickups")
async def my_pickups(identity: Identity = Depends(get_current_identity), views: ReadViews = Depends(get_views)):
    """Customers get their order history (newest first), partners the pickups they can act on."""
    if identity.role == "customer":
        pickups = await views.history_for_customer(identity.id)
    else:
        pickups = await views.for_partner(identity.id)
    return [present(p, identity) for p in pickups]

@router.get("/pickups/recent")
async def my_recent_pickups(identity: Identity = Depends(get_current_identity),
                            views: ReadViews = Depends(get_views)):
    ensure_role(identity, "customer")
    return [present(p, identity) for p in await views.recent_for_customer(identity.id)]

@router.get("/dashboard", response_model=DashboardCounts)
async def dashboard(identity: Identity = Depends(get_current_identity), views: ReadViews = Depends(get_views)):
    ensure_role(identity, "partner")
    return await views.dashboard(identity.id)
